from __future__ import annotations

import math
import sys

import jax
import jax.numpy as jnp

jax.config.update("jax_enable_x64", True)

# Unit roundoff, floored at 1e-18.
TOL = max(sys.float_info.epsilon, 1.0e-18)

# Decimal digits carried by a double.
DIG = min(math.log10(2.0) * (sys.float_info.mant_dig - 1), 18.0)

# Large-|z| threshold for the Hankel expansion.
RL = 1.2 * DIG + 3.0

# Order above which the Debye expansion is accurate.
FNUL = 10.0 + 6.0 * (DIG - 3.0)

# |z| or order beyond which all significance is lost in argument reduction.
AA = min(0.5 / TOL, 0.5 * (2.0**31 - 1.0))
AA_PARTIAL = math.sqrt(AA)
AA_AIRY = AA ** (2.0 / 3.0)
AA_AIRY_PARTIAL = AA_PARTIAL ** (2.0 / 3.0)

LOG_HUGE = math.log(sys.float_info.max)
LOG_TINY = math.log(sys.float_info.min)

# Cut-over between the small-argument kernels and everything else.
SMALL_ARG = 2.0
AIRY_SERIES_RADIUS = 1.0

ASYMPTOTIC_TOL = TOL
HANKEL_TERMS = 64
DEBYE_TERMS = 13

LOG_PI = jnp.float64(1.1447298858494002)
LOG_2PI = jnp.float64(1.8378770664093453)
SQRT3 = jnp.float64(1.7320508075688772)

__all__ = [
    "TOL",
    "DIG",
    "RL",
    "FNUL",
    "AA",
    "AA_PARTIAL",
    "AA_AIRY",
    "AA_AIRY_PARTIAL",
    "LOG_HUGE",
    "LOG_TINY",
    "SMALL_ARG",
    "AIRY_SERIES_RADIUS",
    "ASYMPTOTIC_TOL",
    "HANKEL_TERMS",
    "DEBYE_TERMS",
    "LOG_PI",
    "LOG_2PI",
    "SQRT3",
]

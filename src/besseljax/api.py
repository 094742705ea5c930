from __future__ import annotations

import logging

import jax
import jax.numpy as jnp

from . import checks
from . import limits
from . import machine
from .airy import airy_value
from .connection import Family, bessel_sequence
from .results import AiryResult, BesselResult, InvalidParameterError, Scaling, Status

jax.config.update("jax_enable_x64", True)

logger = logging.getLogger(__name__)

_SINGULAR_AT_ORIGIN = (Family.Y, Family.K, Family.H1, Family.H2)


def _failed_sequence(n: int, status: Status) -> BesselResult:
    return BesselResult(jnp.full((n,), jnp.nan + 1j * jnp.nan, dtype=jnp.complex128), 0, status)


def _origin_values(nu: float, n: int) -> jax.Array:
    values = jnp.zeros((n,), dtype=jnp.complex128)
    return values.at[0].set(1.0) if nu == 0.0 else values


def _bessel(family: Family, label: str, z, nu, kode, n) -> BesselResult:
    try:
        z = checks.check_argument(z, label)
        nu = checks.check_order(nu, label)
        n = checks.check_count(n, label)
        kode = checks.check_scaling(kode, label)
        if family in _SINGULAR_AT_ORIGIN:
            checks.check_nonzero(z, label)
    except InvalidParameterError as exc:
        logger.warning("%s", exc)
        return BesselResult(jnp.zeros((0,), dtype=jnp.complex128), 0, Status.INVALID_PARAMETER)

    top = nu + n - 1
    size = max(abs(z), top)
    if size > machine.AA:
        logger.warning("%s: |z|=%g, order=%g beyond %g, no significant digits", label, abs(z), top, machine.AA)
        return _failed_sequence(n, Status.LOSS_OF_SIGNIFICANCE)
    if size > machine.AA_PARTIAL:
        logger.warning("%s: |z|=%g, order=%g; fewer than half the digits are significant", label, abs(z), top)

    if z == 0:
        logger.debug("%s: z = 0, orders %g..%g", label, nu, top)
        return BesselResult(_origin_values(nu, n), 0, Status.SUCCESS)

    logger.debug("%s: z=%s orders %g..%g scaling=%s", label, z, nu, top, kode.name)
    values, nz, status = bessel_sequence(family, z, nu, n, kode, limits.iteration_cap())
    status = Status(int(status))
    if status != Status.SUCCESS:
        logger.warning("%s: z=%s order=%g returned %s", label, z, nu, status.name)
    return BesselResult(values, int(nz), status)


def bessel_j(z, nu, kode=Scaling.UNSCALED, n: int = 1) -> BesselResult:
    """J at orders ``nu .. nu+n-1``; scaled values carry ``exp(-|Im z|)``."""
    return _bessel(Family.J, "bessel_j", z, nu, kode, n)


def bessel_y(z, nu, kode=Scaling.UNSCALED, n: int = 1) -> BesselResult:
    """Y at orders ``nu .. nu+n-1``; scaled values carry ``exp(-|Im z|)``."""
    return _bessel(Family.Y, "bessel_y", z, nu, kode, n)


def bessel_i(z, nu, kode=Scaling.UNSCALED, n: int = 1) -> BesselResult:
    """I at orders ``nu .. nu+n-1``; scaled values carry ``exp(-|Re z|)``."""
    return _bessel(Family.I, "bessel_i", z, nu, kode, n)


def bessel_k(z, nu, kode=Scaling.UNSCALED, n: int = 1) -> BesselResult:
    """K at orders ``nu .. nu+n-1``; scaled values carry ``exp(z)``."""
    return _bessel(Family.K, "bessel_k", z, nu, kode, n)


def hankel_h1(z, nu, kode=Scaling.UNSCALED, n: int = 1) -> BesselResult:
    """H^(1) at orders ``nu .. nu+n-1``; scaled values carry ``exp(-i z)``."""
    return _bessel(Family.H1, "hankel_h1", z, nu, kode, n)


def hankel_h2(z, nu, kode=Scaling.UNSCALED, n: int = 1) -> BesselResult:
    """H^(2) at orders ``nu .. nu+n-1``; scaled values carry ``exp(i z)``."""
    return _bessel(Family.H2, "hankel_h2", z, nu, kode, n)


def _airy(kind: str, label: str, z, derivative: bool, kode) -> AiryResult:
    try:
        z = checks.check_argument(z, label)
        kode = checks.check_scaling(kode, label)
    except InvalidParameterError as exc:
        logger.warning("%s", exc)
        return AiryResult(jnp.complex128(jnp.nan + 1j * jnp.nan), 0, Status.INVALID_PARAMETER)

    if abs(z) > machine.AA_AIRY:
        logger.warning("%s: |z|=%g beyond %g, no significant digits", label, abs(z), machine.AA_AIRY)
        return AiryResult(jnp.complex128(jnp.nan + 1j * jnp.nan), 0, Status.LOSS_OF_SIGNIFICANCE)
    if abs(z) > machine.AA_AIRY_PARTIAL:
        logger.warning("%s: |z|=%g; fewer than half the digits are significant", label, abs(z))

    logger.debug("%s: z=%s derivative=%s scaling=%s", label, z, derivative, kode.name)
    value, nz, status = airy_value(kind, z, bool(derivative), kode, limits.iteration_cap())
    status = Status(int(status))
    if status != Status.SUCCESS:
        logger.warning("%s: z=%s returned %s", label, z, status.name)
    return AiryResult(value, int(nz), status)


def airy_ai(z, derivative: bool = False, kode=Scaling.UNSCALED) -> AiryResult:
    """Ai(z), or Ai'(z) with ``derivative``; scaled values carry ``exp(zeta)``."""
    return _airy("ai", "airy_ai", z, derivative, kode)


def airy_bi(z, derivative: bool = False, kode=Scaling.UNSCALED) -> AiryResult:
    """Bi(z), or Bi'(z) with ``derivative``; scaled values carry ``exp(-|Re zeta|)``."""
    return _airy("bi", "airy_bi", z, derivative, kode)


def _single(result: BesselResult, label: str) -> complex:
    return complex(result.raise_for_status(label).values[0])


def J(nu, z) -> complex:
    return _single(bessel_j(z, nu), "J")


def Y(nu, z) -> complex:
    return _single(bessel_y(z, nu), "Y")


def I(nu, z) -> complex:  # noqa: E743
    return _single(bessel_i(z, nu), "I")


def K(nu, z) -> complex:
    return _single(bessel_k(z, nu), "K")


def H1(nu, z) -> complex:
    return _single(hankel_h1(z, nu), "H1")


def H2(nu, z) -> complex:
    return _single(hankel_h2(z, nu), "H2")


def J_scaled(nu, z) -> complex:
    return _single(bessel_j(z, nu, Scaling.SCALED), "J_scaled")


def Y_scaled(nu, z) -> complex:
    return _single(bessel_y(z, nu, Scaling.SCALED), "Y_scaled")


def I_scaled(nu, z) -> complex:
    return _single(bessel_i(z, nu, Scaling.SCALED), "I_scaled")


def K_scaled(nu, z) -> complex:
    return _single(bessel_k(z, nu, Scaling.SCALED), "K_scaled")


def H1_scaled(nu, z) -> complex:
    return _single(hankel_h1(z, nu, Scaling.SCALED), "H1_scaled")


def H2_scaled(nu, z) -> complex:
    return _single(hankel_h2(z, nu, Scaling.SCALED), "H2_scaled")


def Ai(z) -> complex:
    return complex(airy_ai(z).raise_for_status("Ai").value)


def Bi(z) -> complex:
    return complex(airy_bi(z).raise_for_status("Bi").value)


def Aip(z) -> complex:
    return complex(airy_ai(z, derivative=True).raise_for_status("Aip").value)


def Bip(z) -> complex:
    return complex(airy_bi(z, derivative=True).raise_for_status("Bip").value)


def Ai_scaled(z) -> complex:
    return complex(airy_ai(z, kode=Scaling.SCALED).raise_for_status("Ai_scaled").value)


def Bi_scaled(z) -> complex:
    return complex(airy_bi(z, kode=Scaling.SCALED).raise_for_status("Bi_scaled").value)


__all__ = [
    "bessel_j",
    "bessel_y",
    "bessel_i",
    "bessel_k",
    "hankel_h1",
    "hankel_h2",
    "airy_ai",
    "airy_bi",
    "J",
    "Y",
    "I",
    "K",
    "H1",
    "H2",
    "J_scaled",
    "Y_scaled",
    "I_scaled",
    "K_scaled",
    "H1_scaled",
    "H2_scaled",
    "Ai",
    "Bi",
    "Aip",
    "Bip",
    "Ai_scaled",
    "Bi_scaled",
]

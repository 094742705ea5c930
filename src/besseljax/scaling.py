"""Log-form arithmetic.

A value ``v`` is carried as ``(mant, expo)`` with ``v = mant * exp(expo)``,
``mant`` complex and ``expo`` real. Exact zeros have ``mant == 0`` and
``expo == -inf``. Nothing is rounded to a double until :func:`materialize`.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

from . import machine

jax.config.update("jax_enable_x64", True)

_NEG_INF = jnp.float64(-jnp.inf)


def from_parts(mant: jax.Array, log_factor: jax.Array) -> tuple[jax.Array, jax.Array]:
    """``mant * exp(log_factor)`` with a complex ``log_factor``."""
    mant = jnp.asarray(mant, dtype=jnp.complex128)
    log_factor = jnp.asarray(log_factor, dtype=jnp.complex128)
    phase = jnp.exp(1j * jnp.imag(log_factor))
    expo = jnp.real(log_factor)
    return normalize((mant * phase, expo))


def from_complex(value: jax.Array) -> tuple[jax.Array, jax.Array]:
    value = jnp.asarray(value, dtype=jnp.complex128)
    return normalize((value, jnp.zeros(value.shape, dtype=jnp.float64)))


def zeros(n: int) -> tuple[jax.Array, jax.Array]:
    return jnp.zeros((n,), dtype=jnp.complex128), jnp.full((n,), _NEG_INF)


def normalize(lf: tuple[jax.Array, jax.Array]) -> tuple[jax.Array, jax.Array]:
    mant, expo = lf
    mag = jnp.abs(mant)
    live = (mag > 0.0) & jnp.isfinite(mag)
    safe = jnp.where(live, mag, 1.0)
    mant = jnp.where(live, mant / safe, jnp.where(mag > 0.0, mant, 0.0))
    expo = jnp.where(live, expo + jnp.log(safe), jnp.where(mag > 0.0, expo, _NEG_INF))
    return mant, expo


def shift(lf: tuple[jax.Array, jax.Array], log_factor: jax.Array) -> tuple[jax.Array, jax.Array]:
    """Multiply by ``exp(log_factor)``."""
    mant, expo = lf
    log_factor = jnp.asarray(log_factor, dtype=jnp.complex128)
    return mant * jnp.exp(1j * jnp.imag(log_factor)), expo + jnp.real(log_factor)


def scale(lf: tuple[jax.Array, jax.Array], factor: jax.Array) -> tuple[jax.Array, jax.Array]:
    """Multiply by a moderate complex ``factor``."""
    mant, expo = lf
    return normalize((mant * factor, expo))


def add(a: tuple[jax.Array, jax.Array], b: tuple[jax.Array, jax.Array]) -> tuple[jax.Array, jax.Array]:
    ma, ea = a
    mb, eb = b
    ea = jnp.where(ma == 0.0, _NEG_INF, ea)
    eb = jnp.where(mb == 0.0, _NEG_INF, eb)
    top = jnp.maximum(ea, eb)
    live = jnp.isfinite(top)
    ref = jnp.where(live, top, 0.0)
    mant = ma * jnp.exp(ea - ref) + mb * jnp.exp(eb - ref)
    return normalize((jnp.where(live, mant, 0.0), jnp.where(live, top, _NEG_INF)))


def log_magnitude(lf: tuple[jax.Array, jax.Array]) -> jax.Array:
    mant, expo = lf
    mag = jnp.abs(mant)
    return jnp.where(mag > 0.0, expo + jnp.log(jnp.where(mag > 0.0, mag, 1.0)), _NEG_INF)


def materialize(lf: tuple[jax.Array, jax.Array]) -> tuple[jax.Array, jax.Array, jax.Array]:
    """Round to doubles.

    Returns ``(values, underflow_count, overflowed)``. Entries whose magnitude
    falls below the smallest normal double become zero and are counted; entries
    above the largest double become NaN and set ``overflowed``.
    """
    mant, expo = normalize(lf)
    nonzero = jnp.abs(mant) > 0.0
    over = nonzero & (expo > machine.LOG_HUGE)
    under = nonzero & (expo < machine.LOG_TINY)
    keep = nonzero & ~over & ~under
    values = jnp.where(keep, mant * jnp.exp(jnp.where(keep, expo, 0.0)), 0.0 + 0.0j)
    values = jnp.where(over, jnp.nan + 1j * jnp.nan, values)
    return values, jnp.sum(under).astype(jnp.int32), jnp.any(over)


__all__ = [
    "from_parts",
    "from_complex",
    "zeros",
    "normalize",
    "shift",
    "scale",
    "add",
    "log_magnitude",
    "materialize",
]

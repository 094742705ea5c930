from __future__ import annotations

from functools import partial

import jax
from jax import lax
import jax.numpy as jnp

from . import connection
from . import machine
from . import scaling
from . import series
from .connection import Family, Quadrant
from .results import Scaling, Status

jax.config.update("jax_enable_x64", True)

_SUCCESS = jnp.int32(Status.SUCCESS)
_OVERFLOW = jnp.int32(Status.OVERFLOW)
_AIRY_KINDS = ("ai", "bi")


def airy_zeta(z: jax.Array) -> jax.Array:
    """zeta = (2/3) z^{3/2} on the principal branch."""
    z = jnp.asarray(z, dtype=jnp.complex128)
    return (2.0 / 3.0) * z * jnp.sqrt(z)


def _zeta_continuation(z: jax.Array, zeta: jax.Array):
    # arg zeta = 3/2 arg z can leave (-pi, pi]; in that case and whenever
    # Re zeta < 0 the I, K values come from -zeta rotated by e^{+-i pi}.
    reflect = (jnp.real(zeta) < 0.0) | (jnp.real(z) < 0.0)
    sector = jnp.where(
        reflect,
        jnp.where(jnp.imag(z) >= 0.0, Quadrant.LEFT_UPPER, Quadrant.LEFT_LOWER),
        Quadrant.RIGHT_UPPER,
    ).astype(jnp.int32)
    flipped = -zeta
    flipped = jnp.maximum(jnp.real(flipped), 0.0) + 1j * jnp.imag(flipped)
    return jnp.where(reflect, flipped, zeta), sector, reflect


def _bessel_form(kind: str, z: jax.Array, zeta: jax.Array, derivative: bool, max_iter: jax.Array):
    nu = jnp.float64(2.0 / 3.0 if derivative else 1.0 / 3.0)
    zr, sector, reflect = _zeta_continuation(z, zeta)
    need_i = reflect | (kind == "bi")
    i_seq, k_seq, status = connection.right_half_plane(zr, nu, 1, max_iter, need_i, True)
    k_val = connection.combine(Family.K, sector, nu, 1, i_seq, k_seq)
    if derivative:
        factor = z / machine.SQRT3
    else:
        factor = jnp.sqrt(z / 3.0)
    if kind == "ai":
        sign = -1.0 if derivative else 1.0
        return scaling.scale(k_val, sign * factor / jnp.pi), status
    i_val = connection.combine(Family.I, sector, nu, 1, i_seq, k_seq)
    bracket = scaling.add(scaling.scale(i_val, 2.0), scaling.scale(k_val, machine.SQRT3 / jnp.pi))
    return scaling.scale(bracket, factor), status


def _series_form(kind: str, z: jax.Array, derivative: bool, max_iter: jax.Array):
    (ai, aip, bi, bip), _, status = series.airy_power_series(z, max_iter)
    if kind == "ai":
        value = aip if derivative else ai
    else:
        value = bip if derivative else bi
    return scaling.from_complex(jnp.reshape(value, (1,))), status


@partial(jax.jit, static_argnames=("kind", "derivative", "kode"))
def airy_value(kind: str, z: jax.Array, derivative: bool, kode: Scaling, max_iter: jax.Array):
    """Ai, Ai', Bi or Bi' at ``z``; returns ``(value, underflow_count, status)``."""
    if kind not in _AIRY_KINDS:
        raise ValueError(f"airy kind must be one of {_AIRY_KINDS}, got {kind!r}")
    z = jnp.asarray(z, dtype=jnp.complex128)
    # A signed zero would put sqrt(z) on the lower side of the cut.
    z = lax.complex(jnp.real(z), jnp.where(jnp.imag(z) == 0.0, 0.0, jnp.imag(z)))
    zeta = airy_zeta(z)
    small = jnp.abs(z) <= machine.AIRY_SERIES_RADIUS

    out, status = lax.cond(
        small,
        lambda _: _series_form(kind, z, derivative, max_iter),
        lambda _: _bessel_form(kind, z, zeta, derivative, max_iter),
        None,
    )
    if Scaling(kode) == Scaling.SCALED:
        log_factor = zeta if kind == "ai" else -jnp.abs(jnp.real(zeta)) + 0.0j
        out = scaling.shift(out, log_factor)
    values, nz, overflowed = scaling.materialize(out)

    # Ai and Bi are real on the real axis; so is the scaled form except for
    # Ai left of the origin, where exp(zeta) has modulus one.
    real_axis = jnp.imag(z) == 0.0
    if Scaling(kode) == Scaling.SCALED and kind == "ai":
        real_axis = real_axis & (jnp.real(z) >= 0.0)
    value = jnp.where(real_axis, jnp.real(values[0]) + 0.0j, values[0])

    failed = status != _SUCCESS
    status = jnp.where(failed, status, jnp.where(overflowed, _OVERFLOW, _SUCCESS))
    value = jnp.where(failed, jnp.nan + 1j * jnp.nan, value)
    nz = jnp.where(status == _SUCCESS, nz, 0)
    return value, nz, status


__all__ = ["airy_zeta", "airy_value"]

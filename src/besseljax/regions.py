from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple

import jax
from jax import lax
import jax.numpy as jnp

from . import asymptotic
from . import limits
from . import machine
from . import series

jax.config.update("jax_enable_x64", True)


class IRegion(IntEnum):
    SERIES = 0
    HANKEL = 1
    DEBYE = 2
    MILLER = 3
    DEBYE_SHIFTED = 4


class KRegion(IntEnum):
    DEBYE = 0
    TEMME_SERIES = 1
    TEMME_CF = 2
    DEBYE_SHIFTED = 3


class IEstimates(NamedTuple):
    series: jax.Array
    hankel: jax.Array
    debye: jax.Array
    shift: jax.Array


class KEstimates(NamedTuple):
    debye: jax.Array
    shift: jax.Array


def i_pair_orders(nu: jax.Array, n: int) -> jax.Array:
    """Orders ``(nu+n, nu+n-1)`` that seed the downward recurrence for I."""
    top = jnp.asarray(nu, dtype=jnp.float64) + (n - 1)
    return jnp.stack([top + 1.0, top])


def k_pair_orders(nu: jax.Array) -> jax.Array:
    nu = jnp.asarray(nu, dtype=jnp.float64)
    return jnp.stack([nu, nu + 1.0])


def i_debye_sector(z: jax.Array, top: jax.Array) -> jax.Array:
    # Single-exponential form of I holds for |arg z| <= pi/3, and inside the
    # unit disk in w = z/nu where no turning point interferes.
    return (jnp.abs(jnp.imag(z)) <= machine.SQRT3 * jnp.real(z)) | (jnp.abs(z) < top)


def _shift_search(accurate, base: jax.Array, step: jax.Array, limit: jax.Array):
    # Try base + step, base + 2 step, base + 4 step, ... until ``accurate``.
    def cond(state):
        m, _, ok = state
        return (~ok) & (m <= limit)

    def body(state):
        _, mult, _ = state
        mult = 2.0 * mult
        m = base + mult * step
        return m, mult, accurate(m)

    m0 = base + step
    m, _, ok = lax.while_loop(cond, body, (m0, jnp.float64(1.0), accurate(m0)))
    return m, ok & (m <= limit)


def i_debye_shift(z: jax.Array, top: jax.Array, limit: jax.Array):
    """Shift ``m`` with the Debye expansion of I accurate at ``top+m``, ``top+m+1``.

    The pair sits far enough above the turning point ``|z|`` for the expansion
    to settle; ``(m, found)``.
    """
    z = jnp.asarray(z, dtype=jnp.complex128)
    top = jnp.asarray(top, dtype=jnp.float64)
    step = jnp.ceil(jnp.cbrt(jnp.maximum(top, 1.0)))
    base = jnp.maximum(jnp.ceil(jnp.abs(z) - top), 0.0)

    def accurate(m):
        _, err = asymptotic.debye_i(z, jnp.stack([top + m + 1.0, top + m]))
        return i_debye_sector(z, top + m) & (jnp.max(err) <= machine.ASYMPTOTIC_TOL)

    return _shift_search(accurate, base, step, jnp.asarray(limit, dtype=jnp.float64))


def k_debye_shift(z: jax.Array, nu: jax.Array, limit: jax.Array):
    """Shift ``m`` with the Debye expansion of K accurate at ``nu-m``, ``nu-m+1``.

    The pair sits below the turning point, where forward recurrence starts;
    ``(m, found)``.
    """
    z = jnp.asarray(z, dtype=jnp.complex128)
    nu = jnp.asarray(nu, dtype=jnp.float64)
    step = jnp.ceil(jnp.cbrt(jnp.maximum(nu, 1.0)))
    base = jnp.maximum(jnp.ceil(nu - jnp.abs(z)), 0.0)
    limit = jnp.minimum(jnp.asarray(limit, dtype=jnp.float64), nu - machine.FNUL)

    def accurate(m):
        _, err = asymptotic.debye_k(z, jnp.stack([nu - m, nu - m + 1.0]))
        return jnp.max(err) <= machine.ASYMPTOTIC_TOL

    return _shift_search(accurate, base, step, limit)


def select_i_region(z: jax.Array, nu: jax.Array, n: int, max_iter: jax.Array | None = None):
    """Region code for I at ``nu .. nu+n-1``, ``Re z >= 0``, plus the error estimates behind it.

    Among the series, Hankel and Debye paths the one with the smallest
    estimated relative error wins; the series only competes inside its disk,
    the asymptotic paths only once their estimate is within tolerance. Past
    that, large orders use Debye at a shifted order and smaller ones Miller.
    """
    if max_iter is None:
        max_iter = limits.iteration_cap()
    z = jnp.asarray(z, dtype=jnp.complex128)
    nu = jnp.asarray(nu, dtype=jnp.float64)
    az = jnp.abs(z)
    orders = i_pair_orders(nu, n)
    top = orders[1]
    inf = jnp.float64(jnp.inf)

    series_disk = (az <= machine.SMALL_ARG) | (0.25 * az * az <= top + 1.0)

    def series_estimate(_):
        _, err, status = series.i_power_series(z, orders, max_iter)
        return jnp.where(status == 0, err, inf)

    series_err = lax.cond(series_disk, series_estimate, lambda _: inf, None)

    _, hankel_err = asymptotic.hankel_i(z, orders)
    hankel_err = jnp.max(hankel_err)
    hankel_ok = (az >= machine.RL) & (hankel_err <= machine.ASYMPTOTIC_TOL)

    _, debye_err = asymptotic.debye_i(z, orders)
    debye_err = jnp.max(debye_err)
    debye_ok = (top >= machine.FNUL) & i_debye_sector(z, top) & (debye_err <= machine.ASYMPTOTIC_TOL)

    # Asymptotic estimates cover truncation only; charge them a rounding floor.
    floor = 2.0 * machine.TOL
    candidates = jnp.stack(
        [
            series_err,
            jnp.where(hankel_ok, hankel_err + floor, inf),
            jnp.where(debye_ok, debye_err + floor, inf),
        ]
    )
    best = jnp.argmin(candidates)
    direct = jnp.isfinite(candidates[best])

    large = (top >= machine.FNUL) & ~direct
    shift, found = lax.cond(
        large,
        lambda _: i_debye_shift(z, top, max_iter - n),
        lambda _: (jnp.float64(0.0), jnp.array(False)),
        None,
    )

    region = jnp.where(
        direct,
        best,
        jnp.where(large & found, IRegion.DEBYE_SHIFTED, IRegion.MILLER),
    )
    return region.astype(jnp.int32), IEstimates(series_err, hankel_err, debye_err, shift)


def select_k_region(z: jax.Array, nu: jax.Array, max_iter: jax.Array | None = None):
    """Region code for K at ``nu``, ``nu+1``, ``Re z >= 0``, plus the Debye estimates behind it."""
    if max_iter is None:
        max_iter = limits.iteration_cap()
    z = jnp.asarray(z, dtype=jnp.complex128)
    nu = jnp.asarray(nu, dtype=jnp.float64)
    small = jnp.abs(z) <= machine.SMALL_ARG
    _, debye_err = asymptotic.debye_k(z, k_pair_orders(nu))
    debye_err = jnp.max(debye_err)
    debye_ok = (nu >= machine.FNUL) & (debye_err <= machine.ASYMPTOTIC_TOL)

    large = (nu >= machine.FNUL) & ~debye_ok & ~small
    shift, found = lax.cond(
        large,
        lambda _: k_debye_shift(z, nu, max_iter),
        lambda _: (jnp.float64(0.0), jnp.array(False)),
        None,
    )
    # Shifting only pays when it recurs fewer steps than Temme's method would.
    shifted = large & found & (shift < jnp.round(nu))

    region = jnp.where(
        debye_ok,
        KRegion.DEBYE,
        jnp.where(small, KRegion.TEMME_SERIES, jnp.where(shifted, KRegion.DEBYE_SHIFTED, KRegion.TEMME_CF)),
    )
    return region.astype(jnp.int32), KEstimates(debye_err, shift)


__all__ = [
    "IRegion",
    "KRegion",
    "IEstimates",
    "KEstimates",
    "i_pair_orders",
    "k_pair_orders",
    "i_debye_sector",
    "i_debye_shift",
    "k_debye_shift",
    "select_i_region",
    "select_k_region",
]

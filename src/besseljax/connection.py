"""Right-half-plane drivers and the branch table that reaches every other family.

Only I and K are ever evaluated, and only at an argument with ``Re >= 0``.
Each family and quadrant of ``z`` maps to a :class:`BranchRule`: the rotation
``c`` giving that argument ``zr = c * z``, and the coefficients ``A``, ``B`` in

    F_{nu+k}(z) = A_k I_{nu+k}(zr) + B_k K_{nu+k}(zr),

each of the form ``weight * exp(i pi turns (nu + k + shift))``.
"""

from __future__ import annotations

import math
from enum import IntEnum
from functools import partial
from typing import NamedTuple

import jax
from jax import lax
import jax.numpy as jnp

from . import asymptotic
from . import recurrence
from . import regions
from . import scaling
from . import series
from .results import Scaling, Status

jax.config.update("jax_enable_x64", True)

_SUCCESS = jnp.int32(Status.SUCCESS)
_OVERFLOW = jnp.int32(Status.OVERFLOW)


class Family(IntEnum):
    I = 0
    K = 1
    J = 2
    Y = 3
    H1 = 4
    H2 = 5


class Quadrant(IntEnum):
    """Quadrant of z; the negative real axis belongs to the upper half."""

    RIGHT_UPPER = 0
    LEFT_UPPER = 1
    LEFT_LOWER = 2
    RIGHT_LOWER = 3


class Coefficient(NamedTuple):
    weight: complex
    turns: float = 0.0
    shift: float = 0.0


class BranchRule(NamedTuple):
    rotation: complex
    a: Coefficient | None
    b: Coefficient | None


_ONE = Coefficient(1.0)
_PI = math.pi


BRANCH_TABLE: dict[Family, tuple[BranchRule, BranchRule, BranchRule, BranchRule]] = {
    # I(z e^{i pi m}) = e^{i pi m nu} I(z)
    Family.I: (
        BranchRule(1.0, _ONE, None),
        BranchRule(-1.0, Coefficient(1.0, 1.0), None),
        BranchRule(-1.0, Coefficient(1.0, -1.0), None),
        BranchRule(1.0, _ONE, None),
    ),
    # K(z e^{i pi m}) = e^{-i pi m nu} K(z) - i pi m I(z)
    Family.K: (
        BranchRule(1.0, None, _ONE),
        BranchRule(-1.0, Coefficient(-1j * _PI), Coefficient(1.0, -1.0)),
        BranchRule(-1.0, Coefficient(1j * _PI), Coefficient(1.0, 1.0)),
        BranchRule(1.0, None, _ONE),
    ),
    # J(w) = e^{+-i pi nu/2} I(-+i w)
    Family.J: (
        BranchRule(-1j, Coefficient(1.0, 0.5), None),
        BranchRule(-1j, Coefficient(1.0, 0.5), None),
        BranchRule(1j, Coefficient(1.0, -0.5), None),
        BranchRule(1j, Coefficient(1.0, -0.5), None),
    ),
    # Y(w) = e^{i pi (nu+1)/2} I(-i w) - (2/pi) e^{-i pi nu/2} K(-i w), conjugated below the axis
    Family.Y: (
        BranchRule(-1j, Coefficient(1.0, 0.5, 1.0), Coefficient(-2.0 / _PI, -0.5)),
        BranchRule(-1j, Coefficient(1.0, 0.5, 1.0), Coefficient(-2.0 / _PI, -0.5)),
        BranchRule(1j, Coefficient(1.0, -0.5, 1.0), Coefficient(-2.0 / _PI, 0.5)),
        BranchRule(1j, Coefficient(1.0, -0.5, 1.0), Coefficient(-2.0 / _PI, 0.5)),
    ),
    # H1(w) = (2/(pi i)) e^{-i pi nu/2} K(-i w), continued across arg w = -pi/2
    Family.H1: (
        BranchRule(-1j, None, Coefficient(-2j / _PI, -0.5)),
        BranchRule(-1j, None, Coefficient(-2j / _PI, -0.5)),
        BranchRule(1j, Coefficient(2.0, -0.5), Coefficient(-2j / _PI, 0.5)),
        BranchRule(1j, Coefficient(2.0, -0.5), Coefficient(-2j / _PI, 0.5)),
    ),
    # H2(w) = -(2/(pi i)) e^{i pi nu/2} K(i w), continued across arg w = pi/2
    Family.H2: (
        BranchRule(-1j, Coefficient(2.0, 0.5), Coefficient(2j / _PI, -0.5)),
        BranchRule(-1j, Coefficient(2.0, 0.5), Coefficient(2j / _PI, -0.5)),
        BranchRule(1j, None, Coefficient(2j / _PI, 0.5)),
        BranchRule(1j, None, Coefficient(2j / _PI, 0.5)),
    ),
}


def _coefficient_arrays(coeffs: list[Coefficient | None]):
    weight = jnp.asarray([0.0 if c is None else c.weight for c in coeffs], dtype=jnp.complex128)
    turns = jnp.asarray([0.0 if c is None else c.turns for c in coeffs], dtype=jnp.float64)
    shift = jnp.asarray([0.0 if c is None else c.shift for c in coeffs], dtype=jnp.float64)
    return weight, turns, shift


def uses_i(family: Family) -> bool:
    return any(rule.a is not None for rule in BRANCH_TABLE[Family(family)])


def uses_k(family: Family) -> bool:
    return any(rule.b is not None for rule in BRANCH_TABLE[Family(family)])


def quadrant(z: jax.Array) -> jax.Array:
    z = jnp.asarray(z, dtype=jnp.complex128)
    right = jnp.real(z) >= 0.0
    upper = jnp.imag(z) >= 0.0
    return jnp.where(
        upper,
        jnp.where(right, Quadrant.RIGHT_UPPER, Quadrant.LEFT_UPPER),
        jnp.where(right, Quadrant.RIGHT_LOWER, Quadrant.LEFT_LOWER),
    ).astype(jnp.int32)


def rotation(family: Family, sector: jax.Array) -> jax.Array:
    rot = jnp.asarray([rule.rotation for rule in BRANCH_TABLE[Family(family)]], dtype=jnp.complex128)
    return rot[sector]


def _coefficients(coeff, sector: jax.Array, nu: jax.Array, n: int) -> jax.Array:
    weight, turns, shift = (arr[sector] for arr in coeff)
    orders = nu + jnp.arange(n, dtype=jnp.float64)
    return weight * jnp.exp(1j * jnp.pi * jnp.fmod(turns * (orders + shift), 2.0))


def i_sequence(zr: jax.Array, nu: jax.Array, n: int, max_iter: jax.Array):
    """I at ``nu .. nu+n-1`` for ``Re zr >= 0``, log form."""
    zr = jnp.asarray(zr, dtype=jnp.complex128)
    nu = jnp.asarray(nu, dtype=jnp.float64)
    region, est = regions.select_i_region(zr, nu, n, max_iter)
    orders = regions.i_pair_orders(nu, n)
    top = orders[1]

    def from_pair(pair, top_order=top, offset=0):
        mant, expo = pair
        return recurrence.backward_sequence((mant[0], expo[0]), (mant[1], expo[1]), top_order, zr, n, offset)

    def series_branch(_):
        pair, _, status = series.i_power_series(zr, orders, max_iter)
        return from_pair(pair), status

    def hankel_branch(_):
        pair, _ = asymptotic.hankel_i(zr, orders)
        return from_pair(pair), _SUCCESS

    def debye_branch(_):
        pair, _ = asymptotic.debye_i(zr, orders)
        return from_pair(pair), _SUCCESS

    def miller_branch(_):
        seq, _, status = recurrence.miller_i(zr, nu, n, max_iter)
        return seq, status

    def shifted_branch(_):
        # Debye above the turning point, then down to the requested orders.
        pair, _ = asymptotic.debye_i(zr, orders + est.shift)
        return from_pair(pair, top + est.shift, est.shift.astype(jnp.int64)), _SUCCESS

    branches = (series_branch, hankel_branch, debye_branch, miller_branch, shifted_branch)
    return lax.switch(region, branches, None)


def k_sequence(zr: jax.Array, nu: jax.Array, n: int, max_iter: jax.Array):
    """K at ``nu .. nu+n-1`` for ``Re zr >= 0``, log form."""
    zr = jnp.asarray(zr, dtype=jnp.complex128)
    nu = jnp.asarray(nu, dtype=jnp.float64)
    region, est = regions.select_k_region(zr, nu, max_iter)
    nl = jnp.round(nu)
    mu = nu - nl
    offset = nl.astype(jnp.int64)

    def debye_branch(_):
        (mant, expo), _ = asymptotic.debye_k(zr, regions.k_pair_orders(nu))
        return recurrence.forward_sequence((mant[0], expo[0]), (mant[1], expo[1]), nu, zr, jnp.int64(0), n, max_iter)

    def temme(kernel):
        def branch(_):
            k_mu, k_mu1, _, status = kernel(zr, mu, max_iter)
            seq, rec_status = recurrence.forward_sequence(k_mu, k_mu1, mu, zr, offset, n, max_iter)
            return seq, jnp.maximum(status, rec_status)

        return branch

    def shifted_branch(_):
        # Debye below the turning point, then up to the requested orders.
        start = nu - est.shift
        (mant, expo), _ = asymptotic.debye_k(zr, jnp.stack([start, start + 1.0]))
        lower, upper = (mant[0], expo[0]), (mant[1], expo[1])
        return recurrence.forward_sequence(lower, upper, start, zr, est.shift.astype(jnp.int64), n, max_iter)

    branches = (debye_branch, temme(series.k_temme_series), temme(recurrence.k_temme_cf), shifted_branch)
    return lax.switch(region, branches, None)


def right_half_plane(zr: jax.Array, nu: jax.Array, n: int, max_iter: jax.Array, need_i, need_k):
    """I and K sequences at ``zr``, each computed only when its flag is set."""

    def skipped(_):
        return scaling.zeros(n), _SUCCESS

    i_seq, i_status = lax.cond(need_i, lambda _: i_sequence(zr, nu, n, max_iter), skipped, None)
    k_seq, k_status = lax.cond(need_k, lambda _: k_sequence(zr, nu, n, max_iter), skipped, None)
    return i_seq, k_seq, jnp.maximum(i_status, k_status)


def combine(family: Family, sector: jax.Array, nu: jax.Array, n: int, i_seq, k_seq):
    """Apply the branch rule of ``family`` for ``sector`` to I, K at the rotated argument."""
    family = Family(family)
    rules = BRANCH_TABLE[family]
    a = _coefficients(_coefficient_arrays([r.a for r in rules]), sector, nu, n)
    b = _coefficients(_coefficient_arrays([r.b for r in rules]), sector, nu, n)
    return scaling.add(scaling.scale(i_seq, a), scaling.scale(k_seq, b))


def scale_log(family: Family, z: jax.Array) -> jax.Array:
    """Log of the factor that turns the plain value into the scaled one."""
    family = Family(family)
    z = jnp.asarray(z, dtype=jnp.complex128)
    if family == Family.I:
        return -jnp.abs(jnp.real(z)) + 0.0j
    if family == Family.K:
        return z
    if family == Family.H1:
        return -1j * z
    if family == Family.H2:
        return 1j * z
    return -jnp.abs(jnp.imag(z)) + 0.0j


@partial(jax.jit, static_argnames=("family", "n", "kode"))
def bessel_sequence(family: Family, z: jax.Array, nu: jax.Array, n: int, kode: Scaling, max_iter: jax.Array):
    """Values of ``family`` at ``nu .. nu+n-1`` for ``z != 0``.

    Returns ``(values, underflow_count, status)``.
    """
    z = jnp.asarray(z, dtype=jnp.complex128)
    nu = jnp.asarray(nu, dtype=jnp.float64)
    sector = quadrant(z)
    zr = rotation(family, sector) * z

    rules = BRANCH_TABLE[Family(family)]
    a_weight = jnp.asarray([0.0 if r.a is None else 1.0 for r in rules])[sector]
    b_weight = jnp.asarray([0.0 if r.b is None else 1.0 for r in rules])[sector]
    i_seq, k_seq, status = right_half_plane(
        zr,
        nu,
        n,
        max_iter,
        (a_weight != 0.0) & uses_i(family),
        (b_weight != 0.0) & uses_k(family),
    )

    out = combine(family, sector, nu, n, i_seq, k_seq)
    if Scaling(kode) == Scaling.SCALED:
        out = scaling.shift(out, scale_log(family, z))
    values, nz, overflowed = scaling.materialize(out)

    failed = status != _SUCCESS
    status = jnp.where(failed, status, jnp.where(overflowed, _OVERFLOW, _SUCCESS))
    if Family(family) in (Family.I, Family.K, Family.J, Family.Y):
        # Real on the positive real axis; drop rounding left in the imaginary part.
        positive = (jnp.imag(z) == 0.0) & (jnp.real(z) > 0.0)
        values = jnp.where(positive, jnp.real(values) + 0.0j, values)
    values = jnp.where(failed, jnp.nan + 1j * jnp.nan, values)
    nz = jnp.where(status == _SUCCESS, nz, 0)
    return values, nz, status


__all__ = [
    "Family",
    "Quadrant",
    "Coefficient",
    "BranchRule",
    "BRANCH_TABLE",
    "uses_i",
    "uses_k",
    "quadrant",
    "rotation",
    "i_sequence",
    "k_sequence",
    "right_half_plane",
    "combine",
    "scale_log",
    "bessel_sequence",
]

from __future__ import annotations

import jax
from jax import lax
import jax.numpy as jnp
import jax.scipy.special as jsp

from . import machine
from . import scaling
from .results import Status

jax.config.update("jax_enable_x64", True)

_SUCCESS = jnp.int32(Status.SUCCESS)
_NO_CONVERGENCE = jnp.int32(Status.NO_CONVERGENCE)

# Miller start index: trial values must grow past this before recurring back.
_MILLER_GROWTH = 2.0 / machine.TOL


def three_term_next(prev: jax.Array, cur: jax.Array, order: jax.Array, z: jax.Array, modified: bool) -> jax.Array:
    """Next member of ``F_{o-1} -/+ F_{o+1} = (2o/z) F_o`` in either direction.

    ``modified`` selects the I, K form; otherwise the J, Y form. Going up,
    ``prev = F_{o-1}``; going down, ``prev = F_{o+1}``.
    """
    coeff = 2.0 * order / z
    if modified:
        return coeff * cur + prev
    return coeff * cur - prev


def _rescale(a: jax.Array, b: jax.Array, s: jax.Array):
    big = jnp.maximum(jnp.abs(a), jnp.abs(b))
    live = (big > 0.0) & jnp.isfinite(big)
    safe = jnp.where(live, big, 1.0)
    return a / safe, b / safe, s + jnp.log(safe)


def _pair(first, second):
    (ma, ea), (mb, eb) = first, second
    ea = jnp.where(ma == 0.0, -jnp.inf, ea)
    eb = jnp.where(mb == 0.0, -jnp.inf, eb)
    s = jnp.maximum(ea, eb)
    s = jnp.where(jnp.isfinite(s), s, 0.0)
    return ma * jnp.exp(ea - s), mb * jnp.exp(eb - s), s


def _store(mant, expo, slot, n, value, s):
    inside = (slot >= 0) & (slot < n)
    idx = jnp.clip(slot, 0, n - 1)
    mant = mant.at[idx].set(jnp.where(inside, value, mant[idx]))
    expo = expo.at[idx].set(jnp.where(inside, s, expo[idx]))
    return mant, expo


def backward_sequence(upper, top, top_order: jax.Array, z: jax.Array, n: int, offset=0):
    """I-type values at ``top_order - offset - n + 1 .. top_order - offset`` from F_{top+1}, F_top.

    The first ``offset`` steps only carry the recurrence down to the orders kept.
    """
    z = jnp.asarray(z, dtype=jnp.complex128)
    offset = jnp.asarray(offset, dtype=jnp.int64)
    a, b, s = _pair(upper, top)
    mant, expo = scaling.zeros(n)

    def body(i, state):
        a, b, s, mant, expo = state
        mant, expo = _store(mant, expo, n - 1 - (i - offset), n, b, s)
        nxt = three_term_next(a, b, top_order - jnp.float64(i), z, modified=True)
        a, b, s = _rescale(b, nxt, s)
        return a, b, s, mant, expo

    *_, mant, expo = lax.fori_loop(jnp.int64(0), offset + n, body, (a, b, s, mant, expo))
    return scaling.normalize((mant, expo))


def forward_sequence(lower, upper, order0: jax.Array, z: jax.Array, offset: jax.Array, n: int, max_iter: jax.Array):
    """K-type values at ``order0 + offset + i`` from F_{order0}, F_{order0+1}."""
    z = jnp.asarray(z, dtype=jnp.complex128)
    offset = jnp.asarray(offset, dtype=jnp.int64)
    a, b, s = _pair(lower, upper)
    mant, expo = scaling.zeros(n)
    count = offset + n
    ok = count <= max_iter

    def body(j, state):
        a, b, s, mant, expo = state
        mant, expo = _store(mant, expo, j - offset, n, a, s)
        nxt = three_term_next(a, b, order0 + jnp.float64(j) + 1.0, z, modified=True)
        a, b, s = _rescale(b, nxt, s)
        return a, b, s, mant, expo

    *_, mant, expo = lax.fori_loop(jnp.int64(0), jnp.where(ok, count, 0), body, (a, b, s, mant, expo))
    return scaling.normalize((mant, expo)), jnp.where(ok, _SUCCESS, _NO_CONVERGENCE)


def _miller_start(z: jax.Array, fnf: jax.Array, first: jax.Array, max_iter: jax.Array):
    # Run the recurrence upward from (0, 1); the index where the dominant
    # solution has grown by _MILLER_GROWTH is deep enough for the backward pass.
    def cond(state):
        _, _, p1, steps = state
        return (jnp.abs(p1) < _MILLER_GROWTH) & (steps < max_iter)

    def body(state):
        j, p0, p1, steps = state
        p2 = p0 - 2.0 * (fnf + j) / z * p1
        return j + 1.0, p1, p2, steps + 1

    init = (first, jnp.complex128(0.0), jnp.complex128(1.0), jnp.int64(0))
    j, _, p1, _ = lax.while_loop(cond, body, init)
    return j, jnp.abs(p1)


def _log_neumann_weight(fnf: jax.Array, j: jax.Array) -> jax.Array:
    # c_j in e^z = Gamma(fnf+1) (2/z)^fnf sum_j c_j I_{fnf+j}(z)
    jj = jnp.maximum(j, 1.0)
    val = jnp.log(2.0 * (fnf + jj)) + jsp.gammaln(2.0 * fnf + jj) - jsp.gammaln(2.0 * fnf + 1.0) - jsp.gammaln(jj + 1.0)
    return jnp.where(j == 0.0, 0.0, val)


def miller_i(z: jax.Array, nu: jax.Array, n: int, max_iter: jax.Array):
    """I at ``nu .. nu+n-1`` for ``Re z >= 0`` by Miller's backward recurrence.

    The start index is found by running the recurrence upward until the
    trial solution has grown past ``2/TOL``; the reciprocal of that growth
    is the estimated relative error.
    """
    z = jnp.asarray(z, dtype=jnp.complex128)
    nu = jnp.asarray(nu, dtype=jnp.float64)
    inu = jnp.floor(nu)
    fnf = nu - inu
    last = inu + (n - 1)
    first = jnp.maximum(last, jnp.ceil(jnp.abs(z))) + 1.0
    kk, growth = _miller_start(z, fnf, first, max_iter)
    found = growth >= _MILLER_GROWTH

    total = kk.astype(jnp.int64) + 1
    ok = found & (total <= max_iter)
    mant, expo = scaling.zeros(n)
    weighted = (jnp.complex128(0.0), jnp.float64(-jnp.inf))

    def body(i, state):
        a, b, s, mant, expo, weighted = state
        j = kk - jnp.float64(i)
        mant, expo = _store(mant, expo, (j - inu).astype(jnp.int64), n, b, s)
        weighted = scaling.add(weighted, (b, s + _log_neumann_weight(fnf, j)))
        nxt = three_term_next(a, b, fnf + j, z, modified=True)
        a, b, s = _rescale(b, nxt, s)
        return a, b, s, mant, expo, weighted

    init = (jnp.complex128(0.0), jnp.complex128(1.0), jnp.float64(0.0), mant, expo, weighted)
    *_, mant, expo, weighted = lax.fori_loop(jnp.int64(0), jnp.where(ok, total, 0), body, init)

    w_mant, w_expo = weighted
    log_norm = z + fnf * jnp.log(0.5 * z) - jsp.gammaln(fnf + 1.0) - (w_expo + jnp.log(w_mant))
    out = scaling.normalize(scaling.shift((mant, expo), log_norm))
    return out, 1.0 / growth, jnp.where(ok, _SUCCESS, _NO_CONVERGENCE)


def k_temme_cf(z: jax.Array, mu: jax.Array, max_iter: jax.Array):
    """K_mu and K_{mu+1} for ``|z| > 2``, ``|mu| <= 1/2`` by Steed's method on CF2."""
    z = jnp.asarray(z, dtype=jnp.complex128)
    mu = jnp.asarray(mu, dtype=jnp.float64)
    a1 = 0.25 - mu * mu
    b = 2.0 * (1.0 + z)
    d = 1.0 / b
    h = d
    delh = d
    q = jnp.complex128(a1)
    s = 1.0 + q * delh

    def cond(state):
        i, *_, done = state
        return (~done) & (i <= max_iter)

    def body(state):
        i, a, c, q1, q2, q, b, d, delh, h, s, _, _ = state
        fi = jnp.float64(i)
        a = a - 2.0 * (fi - 1.0)
        c = -a * c / fi
        qnew = (q1 - b * q2) / a
        q1, q2 = q2, qnew
        q = q + c * qnew
        b = b + 2.0
        d = 1.0 / (b + a * d)
        delh = (b * d - 1.0) * delh
        h = h + delh
        dels = q * delh
        s = s + dels
        return i + 1, a, c, q1, q2, q, b, d, delh, h, s, dels, jnp.abs(dels) < machine.TOL * jnp.abs(s)

    init = (
        jnp.int64(2),
        -a1,
        a1,
        jnp.complex128(0.0),
        jnp.complex128(1.0),
        q,
        b,
        d,
        delh,
        h,
        s,
        s,
        jnp.array(False),
    )
    *_, h, s, dels, done = lax.while_loop(cond, body, init)
    h = a1 * h
    k_mu = scaling.from_parts(1.0 / s, 0.5 * (machine.LOG_PI - jnp.log(2.0 * z)) - z)
    k_mu1 = scaling.scale(k_mu, (mu + z + 0.5 - h) / z)
    err = jnp.abs(dels) / jnp.abs(s) + machine.TOL
    return k_mu, k_mu1, err, jnp.where(done, _SUCCESS, _NO_CONVERGENCE)


__all__ = ["three_term_next", "backward_sequence", "forward_sequence", "miller_i", "k_temme_cf"]

from __future__ import annotations

import jax
from jax import lax
import jax.numpy as jnp
import jax.scipy.special as jsp

from . import machine
from . import scaling
from .results import Status

jax.config.update("jax_enable_x64", True)

# Chebyshev expansions in 8*mu**2 - 1 of
#   gam1 = (1/Gamma(1 - mu) - 1/Gamma(1 + mu)) / (2 mu)
#   gam2 = (1/Gamma(1 - mu) + 1/Gamma(1 + mu)) / 2
# valid for |mu| <= 1/2.
_GAM1_CHEB = (
    -1.142022680371168e0,
    6.5165112670737e-3,
    3.087090173086e-4,
    -3.4706269649e-6,
    6.9437664e-9,
    3.67795e-11,
    -1.356e-13,
)
_GAM2_CHEB = (
    1.843740587300905e0,
    -7.68528408447867e-2,
    1.2719271366546e-3,
    -4.9717367042e-6,
    -3.31261198e-8,
    2.423096e-10,
    -1.702e-13,
    -1.49e-15,
)

# Ai(0) and -Ai'(0).
_AI0 = 0.355028053887817239
_AIP0 = 0.258819403792806799

_SUCCESS = jnp.int32(Status.SUCCESS)
_NO_CONVERGENCE = jnp.int32(Status.NO_CONVERGENCE)


def _chebyshev(coeffs: tuple[float, ...], x: jax.Array) -> jax.Array:
    y2 = 2.0 * x
    d = jnp.zeros_like(x)
    dd = jnp.zeros_like(x)
    for c in coeffs[:0:-1]:
        d, dd = y2 * d - dd + c, d
    return x * d - dd + 0.5 * coeffs[0]


def temme_gammas(mu: jax.Array) -> tuple[jax.Array, jax.Array, jax.Array, jax.Array]:
    """``(gam1, gam2, 1/Gamma(1 + mu), 1/Gamma(1 - mu))`` for ``|mu| <= 1/2``."""
    mu = jnp.asarray(mu, dtype=jnp.float64)
    xx = 8.0 * mu * mu - 1.0
    gam1 = _chebyshev(_GAM1_CHEB, xx)
    gam2 = _chebyshev(_GAM2_CHEB, xx)
    return gam1, gam2, gam2 - mu * gam1, gam2 + mu * gam1


def _estimate(tail: jax.Array, magnitude: jax.Array, total: jax.Array) -> jax.Array:
    # Truncation (the last term kept) plus rounding over the summed magnitudes.
    size = jnp.abs(total)
    err = (jnp.abs(tail) + machine.TOL * magnitude) / jnp.where(size > 0.0, size, 1.0)
    return jnp.where(size > 0.0, err, jnp.where(jnp.abs(tail) > 0.0, jnp.inf, 0.0))


def i_power_series(z: jax.Array, orders: jax.Array, max_iter: jax.Array):
    """I at each of ``orders`` by its ascending series, in log form.

    Terms are summed until each is below TOL relative to its running sum.
    Returns the values, the largest estimated relative error over ``orders``
    and a status.
    """
    z = jnp.asarray(z, dtype=jnp.complex128)
    orders = jnp.asarray(orders, dtype=jnp.float64)
    quarter_z2 = 0.25 * z * z
    ones = jnp.ones(orders.shape, dtype=jnp.complex128)

    def cond(state):
        k, *_, done = state
        return (~jnp.all(done)) & (k < max_iter)

    def body(state):
        k, term, total, magnitude, done = state
        kf = jnp.float64(k + 1)
        nxt = term * quarter_z2 / (kf * (orders + kf))
        new_total = total + nxt
        settled = jnp.abs(nxt) <= machine.TOL * jnp.abs(new_total)
        term = jnp.where(done, term, nxt)
        total = jnp.where(done, total, new_total)
        magnitude = jnp.where(done, magnitude, magnitude + jnp.abs(nxt))
        return k + 1, term, total, magnitude, done | settled

    init = (jnp.int64(0), ones, ones, jnp.ones(orders.shape, dtype=jnp.float64), jnp.zeros(orders.shape, dtype=bool))
    _, term, total, magnitude, done = lax.while_loop(cond, body, init)
    log_prefactor = orders * jnp.log(0.5 * z) - jsp.gammaln(orders + 1.0)
    status = jnp.where(jnp.all(done), _SUCCESS, _NO_CONVERGENCE)
    err = jnp.max(_estimate(term, magnitude, total))
    return scaling.from_parts(total, log_prefactor), err, status


def k_temme_series(z: jax.Array, mu: jax.Array, max_iter: jax.Array):
    """K_mu and K_{mu+1} for ``|z| <= 2`` and ``|mu| <= 1/2``, in log form.

    The common factor ``exp(|Re(mu log(z/2))|)`` is held out of the loop so
    tiny ``z`` does not overflow the partial sums.
    """
    z = jnp.asarray(z, dtype=jnp.complex128)
    mu = jnp.asarray(mu, dtype=jnp.float64)
    half = 0.5 * z
    gam1, gam2, gampl, gammi = temme_gammas(mu)

    pimu = jnp.pi * mu
    small_mu = jnp.abs(pimu) < machine.TOL
    fact = jnp.where(small_mu, 1.0, pimu / jnp.sin(jnp.where(small_mu, 1.0, pimu)))

    d = -jnp.log(half)
    e = mu * d
    sigma = jnp.abs(jnp.real(e))
    ep = jnp.exp(e - sigma)
    em = jnp.exp(-e - sigma)
    small_e = jnp.abs(e) < machine.TOL
    sinhc = jnp.where(small_e, jnp.exp(-sigma) + 0.0j, (ep - em) / (2.0 * jnp.where(small_e, 1.0, e)))
    ff = fact * (gam1 * 0.5 * (ep + em) + gam2 * sinhc * d)
    p = 0.5 * ep / gampl
    q = 0.5 * em / gammi
    quarter_z2 = half * half

    def cond(state):
        i, *_, done = state
        return (~done) & (i <= max_iter)

    def body(state):
        i, ff, p, q, c, total, total1, delta, magnitude, _ = state
        fi = jnp.float64(i)
        ff = (fi * ff + p + q) / (fi * fi - mu * mu)
        c = c * quarter_z2 / fi
        p = p / (fi - mu)
        q = q / (fi + mu)
        delta = c * ff
        total = total + delta
        total1 = total1 + c * (p - fi * ff)
        magnitude = magnitude + jnp.abs(delta)
        return i + 1, ff, p, q, c, total, total1, delta, magnitude, jnp.abs(delta) < machine.TOL * jnp.abs(total)

    init = (jnp.int64(1), ff, p, q, jnp.complex128(1.0), ff, p, ff, jnp.abs(ff), jnp.array(False))
    *_, total, total1, delta, magnitude, done = lax.while_loop(cond, body, init)
    k_mu = scaling.from_parts(total, sigma)
    k_mu1 = scaling.from_parts(total1, sigma + jnp.log(2.0 / z))
    return k_mu, k_mu1, _estimate(delta, magnitude, total), jnp.where(done, _SUCCESS, _NO_CONVERGENCE)


def airy_power_series(z: jax.Array, max_iter: jax.Array):
    """``(Ai, Ai', Bi, Bi')`` from the Maclaurin series; meant for ``|z| <= 1``.

    The error estimate is the worst over the four component sums.
    """
    z = jnp.asarray(z, dtype=jnp.complex128)
    z3 = z * z * z

    def cond(state):
        k, *_, done = state
        return (~done) & (k <= max_iter)

    def body(state):
        k, terms, sums, magnitudes, _ = state
        f_term, g_term, fp_term, gp_term = terms
        kf = jnp.float64(k)
        f_term = f_term * z3 / ((3.0 * kf) * (3.0 * kf - 1.0))
        g_term = g_term * z3 / ((3.0 * kf + 1.0) * (3.0 * kf))
        fp_term = jnp.where(
            k == 1,
            0.5 * z * z,
            fp_term * z3 / (3.0 * jnp.maximum(kf - 1.0, 1.0) * (3.0 * kf - 1.0)),
        )
        gp_term = gp_term * z3 / ((3.0 * kf - 2.0) * (3.0 * kf))
        terms = (f_term, g_term, fp_term, gp_term)
        sums = tuple(s + t for s, t in zip(sums, terms))
        magnitudes = tuple(m + jnp.abs(t) for m, t in zip(magnitudes, terms))
        done = jnp.all(jnp.array([jnp.abs(t) <= machine.TOL * jnp.abs(s) for s, t in zip(sums, terms)]))
        return k + 1, terms, sums, magnitudes, done

    one = jnp.complex128(1.0)
    terms = (one, z, jnp.complex128(0.0), one)
    sums = (one, z, jnp.complex128(0.0), one)
    magnitudes = tuple(jnp.abs(s) for s in sums)
    _, terms, sums, magnitudes, done = lax.while_loop(cond, body, (jnp.int64(1), terms, sums, magnitudes, jnp.array(False)))
    err = jnp.max(jnp.stack([_estimate(t, m, s) for t, m, s in zip(terms, magnitudes, sums)]))
    f, g, fp, gp = sums
    ai = _AI0 * f - _AIP0 * g
    aip = _AI0 * fp - _AIP0 * gp
    bi = machine.SQRT3 * (_AI0 * f + _AIP0 * g)
    bip = machine.SQRT3 * (_AI0 * fp + _AIP0 * gp)
    return (ai, aip, bi, bip), err, jnp.where(done, _SUCCESS, _NO_CONVERGENCE)


__all__ = ["temme_gammas", "i_power_series", "k_temme_series", "airy_power_series"]

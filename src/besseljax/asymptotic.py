from __future__ import annotations

from fractions import Fraction

import jax
from jax import lax
import jax.numpy as jnp

from . import machine
from . import scaling

jax.config.update("jax_enable_x64", True)


def _debye_polynomials(count: int) -> list[list[Fraction]]:
    """Exact U_k(p), k < count, coefficients by ascending power.

    U_{k+1} = p^2 (1 - p^2) U_k' / 2 + (1/8) int_0^p (1 - 5 t^2) U_k(t) dt
    """
    polys = [[Fraction(1)]]
    for _ in range(count - 1):
        u = polys[-1]
        nxt = [Fraction(0)] * (len(u) + 3)
        for k in range(1, len(u)):
            c = k * u[k] / 2
            nxt[k + 1] += c
            nxt[k + 3] -= c
        for k, c in enumerate(u):
            nxt[k + 1] += c / (8 * (k + 1))
            nxt[k + 3] -= 5 * c / (8 * (k + 3))
        while len(nxt) > 1 and nxt[-1] == 0:
            nxt.pop()
        polys.append(nxt)
    return polys


def _debye_table(count: int) -> jnp.ndarray:
    polys = _debye_polynomials(count)
    width = max(len(p) for p in polys)
    rows = [[float(c) for c in reversed(p)] for p in polys]
    rows = [[0.0] * (width - len(r)) + r for r in rows]
    return jnp.asarray(rows, dtype=jnp.float64)


# Rows are U_0 .. U_{DEBYE_TERMS-1}, highest power first.
DEBYE_U = _debye_table(machine.DEBYE_TERMS)


def _phase_turns(x: jax.Array) -> jax.Array:
    """exp(i pi x) with the argument reduced mod 2 first."""
    return jnp.exp(1j * jnp.pi * jnp.fmod(x, 2.0))


def hankel_i(z: jax.Array, orders: jax.Array):
    """I at ``orders`` for large ``|z|``, ``Re z >= 0``.

    Both exponentials of the expansion are kept so the result stays correct up
    to the imaginary axis. Returns the log-form values and the relative size of
    the first omitted term.
    """
    z = jnp.asarray(z, dtype=jnp.complex128)
    orders = jnp.asarray(orders, dtype=jnp.float64)
    mu = 4.0 * orders * orders
    ones = jnp.ones(orders.shape, dtype=jnp.complex128)

    def body(k, state):
        term, plus, minus, err, active = state
        kf = jnp.float64(k)
        odd = 2.0 * kf - 1.0
        nxt = term * (mu - odd * odd) / (8.0 * kf * z)
        sign = jnp.where(k % 2 == 1, -1.0, 1.0)
        growing = jnp.abs(nxt) > jnp.abs(term)
        take = active & ~growing
        plus = jnp.where(take, plus + nxt, plus)
        minus = jnp.where(take, minus + sign * nxt, minus)
        scale = jnp.minimum(jnp.abs(plus), jnp.abs(minus))
        err = jnp.where(active, jnp.abs(nxt) / scale, err)
        settled = jnp.abs(nxt) <= machine.TOL * scale
        active = active & ~growing & ~settled
        term = jnp.where(take, nxt, term)
        return term, plus, minus, err, active

    init = (ones, ones, ones, jnp.full(orders.shape, jnp.inf), jnp.ones(orders.shape, dtype=bool))
    _, plus, minus, err, _ = lax.fori_loop(1, machine.HANKEL_TERMS + 1, body, init)

    log_common = -0.5 * (machine.LOG_2PI + jnp.log(z))
    sigma = jnp.where(jnp.imag(z) >= 0.0, 1.0, -1.0)
    growing_part = scaling.from_parts(minus, z + log_common)
    recessive = scaling.from_parts(plus * (1j * sigma) * _phase_turns(sigma * orders), -z + log_common)
    return scaling.add(growing_part, recessive), err


def _debye_sums(z: jax.Array, orders: jax.Array):
    w = z / orders
    sq = jnp.sqrt(1.0 + w * w)
    p = 1.0 / sq
    eta = sq + jnp.log(w / (1.0 + sq))

    def horner(acc, column):
        return acc * p[None, :] + column[:, None], None

    start = jnp.zeros((machine.DEBYE_TERMS, orders.shape[0]), dtype=jnp.complex128)
    u, _ = lax.scan(horner, start, DEBYE_U.T)
    k = jnp.arange(machine.DEBYE_TERMS, dtype=jnp.float64)[:, None]
    terms = u * jnp.exp(-k * jnp.log(orders)[None, :])
    signs = jnp.where(jnp.arange(machine.DEBYE_TERMS) % 2 == 1, -1.0, 1.0)[:, None]

    def accumulate(values):
        partial = jnp.cumsum(values, axis=0)
        sizes = jnp.abs(values[1:])
        small = sizes <= machine.TOL * jnp.abs(partial[:-1])
        settled = jnp.any(small, axis=0)
        first = jnp.argmax(small, axis=0)[None, :]
        total = jnp.where(settled, jnp.take_along_axis(partial, first, axis=0)[0], partial[-1])
        tail = jnp.where(settled, jnp.take_along_axis(sizes, first, axis=0)[0], sizes[-1])
        return total, tail / jnp.abs(total)

    total_i, err_i = accumulate(terms)
    total_k, err_k = accumulate(signs * terms)
    return sq, eta, (total_i, err_i), (total_k, err_k)


def debye_i(z: jax.Array, orders: jax.Array):
    """I at large ``orders`` by the uniform expansion; log form and error estimate."""
    z = jnp.asarray(z, dtype=jnp.complex128)
    orders = jnp.asarray(orders, dtype=jnp.float64)
    sq, eta, (total, err), _ = _debye_sums(z, orders)
    log_factor = orders * eta - 0.5 * (machine.LOG_2PI + jnp.log(orders)) - 0.5 * jnp.log(sq)
    return scaling.from_parts(total, log_factor), jnp.where(jnp.isfinite(err), err, jnp.inf)


def debye_k(z: jax.Array, orders: jax.Array):
    """K at large ``orders`` by the uniform expansion; log form and error estimate."""
    z = jnp.asarray(z, dtype=jnp.complex128)
    orders = jnp.asarray(orders, dtype=jnp.float64)
    sq, eta, _, (total, err) = _debye_sums(z, orders)
    log_factor = 0.5 * (machine.LOG_PI - jnp.log(2.0 * orders)) - orders * eta - 0.5 * jnp.log(sq)
    return scaling.from_parts(total, log_factor), jnp.where(jnp.isfinite(err), err, jnp.inf)


__all__ = ["DEBYE_U", "hankel_i", "debye_i", "debye_k"]

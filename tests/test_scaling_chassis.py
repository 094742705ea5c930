import math

import jax.numpy as jnp

from besseljax import machine, scaling

from tests._test_checks import _check, _close


def test_from_parts_keeps_phase_and_magnitude() -> None:
    lf = scaling.from_parts(jnp.asarray([3.0 + 4.0j]), jnp.asarray([2.0 + 0.5j]))
    mant, expo = lf
    _check(jnp.allclose(jnp.abs(mant), 1.0))
    _check(jnp.allclose(expo, 2.0 + math.log(5.0)))
    values, nz, over = scaling.materialize(lf)
    _close(values, (3.0 + 4.0j) * jnp.exp(2.0 + 0.5j))
    _check(int(nz) == 0)
    _check(not bool(over))


def test_zero_is_exact() -> None:
    mant, expo = scaling.from_complex(jnp.asarray([0.0 + 0.0j, 2.0 + 0.0j]))
    _check(mant[0] == 0.0)
    _check(jnp.isneginf(expo[0]))
    values, nz, _ = scaling.materialize((mant, expo))
    _check(values[0] == 0.0)
    _check(int(nz) == 0)


def test_add_handles_disparate_exponents() -> None:
    big = scaling.from_parts(jnp.asarray([1.0 + 0.0j]), jnp.asarray([800.0]))
    small = scaling.from_parts(jnp.asarray([1.0 + 0.0j]), jnp.asarray([-800.0]))
    mant, expo = scaling.add(big, small)
    _check(jnp.allclose(expo, 800.0))
    _check(jnp.allclose(mant, 1.0))


def test_add_with_zero_operand() -> None:
    zero = scaling.zeros(2)
    one = scaling.from_complex(jnp.asarray([1.0 + 0.0j, -2.0j]))
    values, _, _ = scaling.materialize(scaling.add(zero, one))
    _close(values, [1.0, -2.0j])
    values, nz, _ = scaling.materialize(scaling.add(zero, zero))
    _check(jnp.all(values == 0.0))
    _check(int(nz) == 0)


def test_cancellation_gives_exact_zero() -> None:
    a = scaling.from_complex(jnp.asarray([1.5 + 0.0j]))
    b = scaling.from_complex(jnp.asarray([-1.5 + 0.0j]))
    mant, expo = scaling.add(a, b)
    _check(mant[0] == 0.0)
    _check(jnp.isneginf(expo[0]))


def test_materialize_counts_underflow_and_flags_overflow() -> None:
    expo = jnp.asarray([0.0, machine.LOG_TINY - 1.0, machine.LOG_TINY - 50.0, machine.LOG_HUGE + 1.0])
    mant = jnp.ones((4,), dtype=jnp.complex128)
    values, nz, over = scaling.materialize((mant, expo))
    _check(int(nz) == 2)
    _check(bool(over))
    _check(values[0] == 1.0)
    _check(values[1] == 0.0 and values[2] == 0.0)
    _check(jnp.isnan(values[3]))


def test_shift_applies_complex_log_factor() -> None:
    lf = scaling.from_complex(jnp.asarray([2.0 + 0.0j]))
    values, _, _ = scaling.materialize(scaling.shift(lf, 1.0 + 0.25j))
    _close(values, 2.0 * jnp.exp(1.0 + 0.25j))


def test_log_magnitude() -> None:
    lf = scaling.from_parts(jnp.asarray([0.5j, 0.0]), jnp.asarray([10.0, 3.0]))
    logs = scaling.log_magnitude(lf)
    _check(jnp.allclose(logs[0], 10.0 + math.log(0.5)))
    _check(jnp.isneginf(logs[1]))

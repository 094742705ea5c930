import math

import jax.numpy as jnp
import mpmath as mp

from besseljax import limits, scaling, series
from besseljax.results import Status

from tests._test_checks import _check, _close


def _cap():
    return limits.iteration_cap()


def test_temme_gammas_at_zero() -> None:
    gam1, gam2, gampl, gammi = series.temme_gammas(jnp.float64(0.0))
    euler = 0.5772156649015329
    _check(abs(float(gam1) + euler) < 1e-14)
    _check(abs(float(gam2) - 1.0) < 1e-14)
    _check(abs(float(gampl) - 1.0) < 1e-14)
    _check(abs(float(gammi) - 1.0) < 1e-14)


def test_temme_gammas_reciprocals() -> None:
    for mu in (-0.5, -0.2, 0.1, 0.37, 0.5):
        _, _, gampl, gammi = series.temme_gammas(jnp.float64(mu))
        _check(abs(float(gampl) - 1.0 / math.gamma(1.0 + mu)) < 1e-14, f"gampl mu={mu}")
        _check(abs(float(gammi) - 1.0 / math.gamma(1.0 - mu)) < 1e-14, f"gammi mu={mu}")


def test_i_power_series_matches_mpmath() -> None:
    z = 1.3 - 0.6j
    orders = jnp.asarray([2.25, 1.25])
    lf, err, status = series.i_power_series(jnp.complex128(z), orders, _cap())
    _check(int(status) == Status.SUCCESS)
    _check(float(err) < 1e-14, f"err={float(err)}")
    values, _, _ = scaling.materialize(lf)
    want = [complex(mp.besseli(float(o), z)) for o in orders]
    _close(values, want, 1e-13)


def test_i_power_series_tiny_argument_high_order() -> None:
    # I_300(1e-3) is far below the smallest double but its log is exact.
    lf, _, status = series.i_power_series(jnp.complex128(1e-3), jnp.asarray([300.0]), _cap())
    _check(int(status) == Status.SUCCESS)
    logs = scaling.log_magnitude(lf)
    want = 300.0 * math.log(5e-4) - math.lgamma(301.0)
    _check(abs(float(logs[0]) - want) < 1e-10 * abs(want))


def test_k_temme_series_matches_mpmath() -> None:
    for z, mu in ((0.7 + 0.4j, 0.3), (1.9 - 0.2j, -0.45), (0.05j + 0.01, 0.0)):
        k_mu, k_mu1, err, status = series.k_temme_series(jnp.complex128(z), jnp.float64(mu), _cap())
        _check(int(status) == Status.SUCCESS)
        _check(float(err) < 1e-13, f"err={float(err)} z={z}")
        v0, _, _ = scaling.materialize(k_mu)
        v1, _, _ = scaling.materialize(k_mu1)
        _close(v0, complex(mp.besselk(mu, z)), 1e-12, f"K_mu z={z}")
        _close(v1, complex(mp.besselk(mu + 1.0, z)), 1e-12, f"K_mu+1 z={z}")


def test_airy_power_series_at_origin() -> None:
    (ai, aip, bi, bip), err, status = series.airy_power_series(jnp.complex128(0.0), _cap())
    _check(int(status) == Status.SUCCESS)
    _check(float(err) < 1e-15, f"err={float(err)}")
    _close(ai, 0.355028053887817239, 1e-15)
    _close(aip, -0.258819403792806798, 1e-15)
    _close(bi, 0.614926627446000736, 1e-15)
    _close(bip, 0.448288357353826359, 1e-15)


def test_airy_power_series_inside_unit_disk() -> None:
    z = 0.6 - 0.7j
    (ai, aip, bi, bip), err, status = series.airy_power_series(jnp.complex128(z), _cap())
    _check(int(status) == Status.SUCCESS)
    _check(float(err) < 1e-13, f"err={float(err)}")
    _close(ai, complex(mp.airyai(z)), 1e-13)
    _close(aip, complex(mp.airyai(z, derivative=1)), 1e-13)
    _close(bi, complex(mp.airybi(z)), 1e-13)
    _close(bip, complex(mp.airybi(z, derivative=1)), 1e-13)


def test_series_reports_iteration_cap() -> None:
    _, err, status = series.i_power_series(jnp.complex128(1.5), jnp.asarray([0.5, 0.0]), jnp.int64(2))
    _check(int(status) == Status.NO_CONVERGENCE)
    # The truncated sum knows it is short.
    _check(float(err) > 1e-3, f"err={float(err)}")


def test_i_power_series_error_tracks_cancellation() -> None:
    # Near the imaginary axis the terms of I_0 alternate and cancel; the
    # estimate grows with the ratio of summed magnitudes to the total.
    _, calm, _ = series.i_power_series(jnp.complex128(4.0), jnp.asarray([1.0, 0.0]), _cap())
    _, rough, _ = series.i_power_series(jnp.complex128(12.0j), jnp.asarray([1.0, 0.0]), _cap())
    _check(float(calm) < 1e-15)
    _check(float(rough) > 10.0 * float(calm), f"calm={float(calm)} rough={float(rough)}")

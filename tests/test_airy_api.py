import cmath

import mpmath as mp
import pytest

import besseljax as bj
from besseljax import airy, machine
from besseljax.results import Scaling, Status

from tests._test_checks import _check, _close

Z_REF = 10.0 + 20.0j


def test_values_at_origin() -> None:
    _close(bj.Ai(0.0), 0.355028053887817239, 1e-15, "Ai")
    _close(bj.Bi(0.0), 0.614926627446000736, 1e-15, "Bi")
    _close(bj.Aip(0.0), -0.258819403792806798, 1e-15, "Ai'")
    _close(bj.Bip(0.0), 0.448288357353826359, 1e-15, "Bi'")


def test_reference_values() -> None:
    _close(bj.Ai(Z_REF), 14.71701664241453 - 71.3378944410467j, 1e-11, "Ai")
    _close(bj.Bi(Z_REF), 71.33821176573869 + 14.71735250989695j, 1e-11, "Bi")


@pytest.mark.parametrize(
    "z",
    [0.3 + 0.9j, 1.2 + 0.1j, -1.5 + 0.2j, -1.5 - 0.2j, -6.0 + 0.0j, 2.0 - 5.0j, -3.0 + 4.0j, 7.5 + 0.0j],
)
def test_matches_mpmath(z) -> None:
    _close(bj.Ai(z), complex(mp.airyai(z)), 1e-11, f"Ai z={z}")
    _close(bj.Aip(z), complex(mp.airyai(z, derivative=1)), 1e-11, f"Ai' z={z}")
    _close(bj.Bi(z), complex(mp.airybi(z)), 1e-11, f"Bi z={z}")
    _close(bj.Bip(z), complex(mp.airybi(z, derivative=1)), 1e-11, f"Bi' z={z}")


def test_signed_zero_on_negative_axis() -> None:
    _close(bj.Ai(complex(-6.0, -0.0)), bj.Ai(complex(-6.0, 0.0)), 1e-13)
    _close(bj.Bi(complex(-6.0, -0.0)), bj.Bi(complex(-6.0, 0.0)), 1e-13)


def test_wronskian() -> None:
    # Ai Bi' - Ai' Bi = 1/pi
    for z in (0.5 - 0.5j, -4.0 + 1.0j, 3.0 + 3.0j):
        w = bj.Ai(z) * bj.Bip(z) - bj.Aip(z) * bj.Bi(z)
        _close(w, 1.0 / cmath.pi, 1e-10, f"z={z}")


@pytest.mark.parametrize("derivative", [False, True])
def test_scaled_agrees_with_unscaled(derivative) -> None:
    z = 100.0 - 50.0j
    zeta = complex(airy.airy_zeta(z))
    ai = bj.airy_ai(z, derivative)
    ai_s = bj.airy_ai(z, derivative, Scaling.SCALED)
    bi = bj.airy_bi(z, derivative)
    bi_s = bj.airy_bi(z, derivative, Scaling.SCALED)
    _check(ai.ok and ai_s.ok and bi.ok and bi_s.ok)
    _close(ai_s.value, complex(ai.value) * cmath.exp(zeta), 1e-11, "Ai")
    _close(bi_s.value, complex(bi.value) * cmath.exp(-abs(zeta.real)), 1e-11, "Bi")


def test_large_positive_argument_needs_scaling() -> None:
    z = 200.0
    ai = bj.airy_ai(z)
    _check(ai.ok)
    _check(complex(ai.value) == 0.0)
    _check(ai.underflow_count == 1)
    bi = bj.airy_bi(z)
    _check(bi.status == Status.OVERFLOW)
    _check(bj.airy_ai(z, kode=Scaling.SCALED).underflow_count == 0)
    _close(bj.Ai_scaled(z), complex(mp.airyai(z) * mp.exp(mp.mpf(2) / 3 * mp.mpf(z) ** 1.5)), 1e-11)
    _close(bj.Bi_scaled(z), complex(mp.airybi(z) * mp.exp(-mp.mpf(2) / 3 * mp.mpf(z) ** 1.5)), 1e-11)


def test_invalid_and_loss() -> None:
    res = bj.airy_ai("nope")
    _check(res.status == Status.INVALID_PARAMETER)
    res = bj.airy_bi(1.0, kode=0)
    _check(res.status == Status.INVALID_PARAMETER)
    res = bj.airy_ai(2.0 * machine.AA_AIRY)
    _check(res.status == Status.LOSS_OF_SIGNIFICANCE)
    with pytest.raises(bj.ComputationError):
        res.raise_for_status()


def test_unknown_kind_rejected() -> None:
    with pytest.raises(ValueError):
        airy.airy_value("ci", 1.0, False, Scaling.UNSCALED, 10)


@pytest.mark.parametrize("z", [-6.0, -0.4, 0.7, 4.0])
def test_real_on_real_axis(z) -> None:
    for fn in (bj.Ai, bj.Aip, bj.Bi, bj.Bip, bj.Bi_scaled):
        _check(fn(z).imag == 0.0, f"{fn.__name__} z={z}")
    if z >= 0.0:
        _check(bj.Ai_scaled(z).imag == 0.0)
    else:
        # exp(zeta) has modulus one left of the origin.
        _close(bj.Ai_scaled(z), bj.Ai(z) * cmath.exp(complex(airy.airy_zeta(complex(z)))), 1e-12)

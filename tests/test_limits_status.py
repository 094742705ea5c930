import logging
import threading

import pytest

import besseljax as bj
from besseljax import limits
from besseljax.results import (
    AiryResult,
    BesselError,
    BesselOverflowError,
    BesselResult,
    ComputationError,
    InvalidParameterError,
    Status,
    error_for_status,
)

from tests._test_checks import _check


@pytest.fixture(autouse=True)
def _restore_cap():
    yield
    limits.reset_max_iterations()


def test_status_codes_are_stable() -> None:
    _check([int(s) for s in Status] == [0, 1, 2, 3, 4])
    _check(int(bj.Scaling.UNSCALED) == 1 and int(bj.Scaling.SCALED) == 2)


def test_error_for_status_mapping() -> None:
    _check(error_for_status(Status.SUCCESS, "x") is None)
    _check(isinstance(error_for_status(Status.INVALID_PARAMETER, "x"), InvalidParameterError))
    _check(isinstance(error_for_status(Status.OVERFLOW, "x"), BesselOverflowError))
    err = error_for_status(Status.LOSS_OF_SIGNIFICANCE, "x")
    _check(isinstance(err, ComputationError) and err.status == Status.LOSS_OF_SIGNIFICANCE)
    err = error_for_status(Status.NO_CONVERGENCE, "x")
    _check(isinstance(err, ComputationError) and err.status == Status.NO_CONVERGENCE)
    _check(issubclass(InvalidParameterError, ValueError))
    _check(issubclass(BesselOverflowError, OverflowError))


def test_result_helpers() -> None:
    ok = BesselResult(None, 0, Status.SUCCESS)
    _check(ok.ok and ok.raise_for_status() is ok)
    bad = AiryResult(None, 0, Status.OVERFLOW)
    _check(not bad.ok)
    with pytest.raises(BesselOverflowError):
        bad.raise_for_status("ai")


def test_iteration_cap_configuration() -> None:
    _check(limits.get_max_iterations() == 500_000)
    limits.set_max_iterations(1234)
    _check(limits.get_max_iterations() == 1234)
    _check(int(limits.iteration_cap()) == 1234)
    with limits.max_iterations(7):
        _check(limits.get_max_iterations() == 7)
    _check(limits.get_max_iterations() == 1234)
    with pytest.raises(ValueError):
        limits.set_max_iterations(0)


def test_iteration_cap_is_per_thread() -> None:
    seen = []
    with limits.max_iterations(7):
        worker = threading.Thread(target=lambda: seen.append(limits.get_max_iterations()))
        worker.start()
        worker.join()
        _check(limits.get_max_iterations() == 7)
    _check(seen == [500_000], f"seen={seen}")


def test_base_error_is_a_failure() -> None:
    _check(BesselError("x").status == Status.NO_CONVERGENCE)
    _check(BesselError("x", Status.OVERFLOW).status == Status.OVERFLOW)


def test_tiny_cap_reports_no_convergence(caplog) -> None:
    with limits.max_iterations(2), caplog.at_level(logging.WARNING, logger="besseljax"):
        res = bj.bessel_i(6.0 + 4.0j, 0.25)
    _check(res.status == Status.NO_CONVERGENCE)
    _check(res.underflow_count == 0)
    _check(any("NO_CONVERGENCE" in rec.getMessage() for rec in caplog.records))
    with pytest.raises(ComputationError):
        res.raise_for_status()


def test_cap_change_keeps_converged_values() -> None:
    before = bj.bessel_k(3.0 + 1.0j, 0.5)
    with limits.max_iterations(100_000):
        after = bj.bessel_k(3.0 + 1.0j, 0.5)
    _check(complex(before.values[0]) == complex(after.values[0]))


def test_invalid_call_is_logged(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="besseljax"):
        bj.bessel_y(0.0, 1.0)
    _check(any("singular" in rec.getMessage() for rec in caplog.records))

from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple

import jax


class Scaling(IntEnum):
    UNSCALED = 1
    SCALED = 2


class Status(IntEnum):
    SUCCESS = 0
    INVALID_PARAMETER = 1
    OVERFLOW = 2
    LOSS_OF_SIGNIFICANCE = 3
    NO_CONVERGENCE = 4


class BesselError(Exception):
    """Base class for failed evaluations; ``status`` names the failure."""

    status = Status.NO_CONVERGENCE

    def __init__(self, message: str, status: Status | None = None):
        super().__init__(message)
        if status is not None:
            self.status = Status(status)


class InvalidParameterError(BesselError, ValueError):
    status = Status.INVALID_PARAMETER


class BesselOverflowError(BesselError, OverflowError):
    status = Status.OVERFLOW


class ComputationError(BesselError, ArithmeticError):
    status = Status.NO_CONVERGENCE


def error_for_status(status: Status, label: str) -> BesselError | None:
    status = Status(status)
    if status == Status.SUCCESS:
        return None
    if status == Status.INVALID_PARAMETER:
        return InvalidParameterError(f"{label}: invalid parameter")
    if status == Status.OVERFLOW:
        return BesselOverflowError(f"{label}: result overflows; retry with Scaling.SCALED")
    if status == Status.LOSS_OF_SIGNIFICANCE:
        return ComputationError(f"{label}: complete loss of significance", status)
    return ComputationError(f"{label}: iteration cap reached before convergence", status)


class BesselResult(NamedTuple):
    values: jax.Array
    underflow_count: int
    status: Status

    @property
    def ok(self) -> bool:
        return self.status == Status.SUCCESS

    def raise_for_status(self, label: str = "bessel") -> "BesselResult":
        err = error_for_status(self.status, label)
        if err is not None:
            raise err
        return self


class AiryResult(NamedTuple):
    value: jax.Array
    underflow_count: int
    status: Status

    @property
    def ok(self) -> bool:
        return self.status == Status.SUCCESS

    def raise_for_status(self, label: str = "airy") -> "AiryResult":
        err = error_for_status(self.status, label)
        if err is not None:
            raise err
        return self


__all__ = [
    "Scaling",
    "Status",
    "BesselError",
    "InvalidParameterError",
    "BesselOverflowError",
    "ComputationError",
    "error_for_status",
    "BesselResult",
    "AiryResult",
]

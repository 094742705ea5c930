from __future__ import annotations

import math
import numbers

from .results import InvalidParameterError, Scaling


def _require(cond: bool, msg: str, *args) -> None:
    if not cond:
        raise InvalidParameterError(msg.format(*args))


def _convert(kind, value, what: str, label: str):
    # complex("3") and float("1.5") parse text; numbers only here.
    _require(not isinstance(value, (str, bytes, bytearray)), "{}: {} must be a number, got {!r}", label, what, value)
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"{label}: {what} must be {kind.__name__}, got {value!r}") from exc


def check_argument(z, label: str) -> complex:
    z = _convert(complex, z, "argument", label)
    _require(math.isfinite(z.real) and math.isfinite(z.imag), "{}: argument must be finite, got {}", label, z)
    return z


def check_order(nu, label: str) -> float:
    _require(not isinstance(nu, complex), "{}: order must be real, got {!r}", label, nu)
    nu = _convert(float, nu, "order", label)
    _require(math.isfinite(nu), "{}: order must be finite, got {}", label, nu)
    _require(nu >= 0.0, "{}: order must be non-negative, got {}", label, nu)
    return nu


def check_count(n, label: str) -> int:
    _require(isinstance(n, numbers.Integral) and not isinstance(n, bool), "{}: count must be an integer, got {!r}", label, n)
    _require(int(n) >= 1, "{}: count must be at least 1, got {}", label, n)
    return int(n)


def check_scaling(kode, label: str) -> Scaling:
    allowed = tuple(int(s) for s in Scaling)
    _require(
        isinstance(kode, numbers.Integral) and not isinstance(kode, bool) and int(kode) in allowed,
        "{}: scaling must be one of {}, got {!r}",
        label,
        allowed,
        kode,
    )
    return Scaling(int(kode))


def check_nonzero(z: complex, label: str) -> None:
    _require(z != 0, "{}: function is singular at z = 0", label)


__all__ = ["check_argument", "check_order", "check_count", "check_scaling", "check_nonzero"]

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar

import jax.numpy as jnp

_DEFAULT_MAX_ITERATIONS = 500_000
# Per thread and per asyncio task; a new thread starts from the default.
_MAX_ITERATIONS: ContextVar[int] = ContextVar("besseljax_max_iterations", default=_DEFAULT_MAX_ITERATIONS)


def _validate(count: int) -> int:
    count = int(count)
    if count < 1:
        raise ValueError(f"iteration cap must be positive, got {count}")
    return count


def set_max_iterations(count: int) -> None:
    _MAX_ITERATIONS.set(_validate(count))


def get_max_iterations() -> int:
    return _MAX_ITERATIONS.get()


def reset_max_iterations() -> None:
    _MAX_ITERATIONS.set(_DEFAULT_MAX_ITERATIONS)


@contextmanager
def max_iterations(count: int):
    token = _MAX_ITERATIONS.set(_validate(count))
    try:
        yield
    finally:
        _MAX_ITERATIONS.reset(token)


def iteration_cap() -> jnp.ndarray:
    """Current cap as a traced-friendly operand, so changing it never retraces."""
    return jnp.int64(_MAX_ITERATIONS.get())


__all__ = [
    "set_max_iterations",
    "get_max_iterations",
    "reset_max_iterations",
    "max_iterations",
    "iteration_cap",
]

"""
Error taxonomy.

- InvalidArgument: rejected at the call boundary, never retried
- ComputationFailure: an unexpected fault inside an evolver

Cancellation is plain asyncio.CancelledError and is not part of this tree:
it only means "no tick was published this cycle".
"""


class LifeSimError(Exception):
    """Base class for all lifesim errors."""


class InvalidArgument(LifeSimError, ValueError):
    """A negative step count, a non-positive pacing parameter, a bad rule, ..."""


class ComputationFailure(LifeSimError, RuntimeError):
    """An evolver failed while computing a generation."""


def check_steps(steps: int, name: str = "steps") -> int:
    """Validate a generation count: a non-negative int, bools excluded."""
    if isinstance(steps, bool) or not isinstance(steps, int):
        raise InvalidArgument(f"{name} must be an int, got {type(steps).__name__}")
    if steps < 0:
        raise InvalidArgument(f"{name} must be non-negative, got {steps}")
    return steps

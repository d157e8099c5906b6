"""Result type for CLI handlers.

Handlers return a Result instead of raising, so the command layer only has
to decide what to print and which exit code to use.
"""

from typing import Any, Callable, Optional, TypedDict, TypeVar

from hpc_badge.errors import CoverageError

T = TypeVar("T")


class Result(TypedDict):
    """Outcome of a handler.

    Attributes:
        ok: True if the operation succeeded
        value: The successful result value (None if failed)
        error: Error message (None if succeeded)
        code: Exit code for the process (0 on success)
    """

    ok: bool
    value: Optional[Any]
    error: Optional[str]
    code: int


def success(value: T) -> Result:
    """Create a successful result."""
    return Result(ok=True, value=value, error=None, code=0)


def failure(error: str, code: int = 1) -> Result:
    """Create a failed result.

    Args:
        error: Error message describing the failure
        code: Exit code, never 0 for a failure

    Returns:
        Result with ok=False and the error message
    """
    return Result(ok=False, value=None, error=error, code=code or 1)


def from_exception(exc: Exception) -> Result:
    """Create a failed result from an exception.

    hpc-badge errors keep their own message and exit code; anything else is
    reported with its type name.
    """
    if isinstance(exc, CoverageError):
        return failure(str(exc), exc.exit_code)
    return failure(f"{type(exc).__name__}: {exc}")


def try_operation(operation: Callable[[], T]) -> Result:
    """Execute an operation and return a Result.

    Args:
        operation: Function to execute

    Returns:
        Result with either the return value or error
    """
    try:
        value = operation()
        return success(value)
    except Exception as exc:
        return from_exception(exc)


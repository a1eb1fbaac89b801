"""Tagged result types and the attempt-with-fallback helper.

Every call into a collaborator that may fail (storage, analysis step) is
wrapped by ``attempt``, which converts exceptions into ``Err`` values so the
failure branch is handled explicitly by the caller instead of leaking out of
the memory service.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying data."""
    data: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap_or(self, default: Any) -> T:
        return self.data


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying a human-readable reason."""
    reason: str

    @property
    def ok(self) -> bool:
        return False

    def unwrap_or(self, default: Any) -> Any:
        return default


Result = Union[Ok[T], Err]


async def attempt(
    operation: str,
    func: Callable[..., Awaitable[T]],
    *args,
    **kwargs
) -> Result:
    """
    Await ``func`` and capture any exception as ``Err``.

    If ``func`` itself returns a ``Result`` it is passed through untouched.

    Args:
        operation: Name used in log messages
        func: Coroutine function to call
        *args: Positional arguments for ``func``
        **kwargs: Keyword arguments for ``func``
    """
    try:
        value = await func(*args, **kwargs)
    except Exception as e:
        logger.error(f"{operation} failed: {e}", exc_info=True)
        return Err(f"{operation} failed: {e}")

    if isinstance(value, (Ok, Err)):
        if isinstance(value, Err):
            logger.warning(f"{operation} returned error: {value.reason}")
        return value
    return Ok(value)

"""
Result-capturing helpers for concurrent fan-outs.

Each branch of a fan-out is wrapped in ``capture`` so that it settles to an
``Outcome`` instead of raising; the caller joins the branches with
``asyncio.gather`` and inspects every outcome explicitly.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Generic, List, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Settled result of one concurrent branch: a value or an error."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        """Return the value on success, ``default`` on failure."""
        if self.error is not None or self.value is None:
            return default
        return self.value


async def capture(
    awaitable: Awaitable[T],
    timeout: Optional[float] = None,
    label: str = "task",
) -> Outcome[T]:
    """
    Await ``awaitable`` and settle it to an Outcome.

    Timeouts and ordinary exceptions become ``Outcome(error=...)``.
    Cancellation is not captured: ``asyncio.CancelledError`` propagates so a
    cancelled request also cancels its in-flight branches.

    Args:
        awaitable: Coroutine or future to run
        timeout: Seconds before the branch is abandoned, or None for no limit
        label: Name used in log messages

    Returns:
        Outcome holding either the value or the error
    """
    try:
        if timeout is None:
            value = await awaitable
        else:
            value = await asyncio.wait_for(awaitable, timeout=timeout)
        return Outcome(value=value)
    except asyncio.TimeoutError as e:
        logger.warning(f"{label} timed out after {timeout}s")
        return Outcome(error=e)
    except Exception as e:
        logger.warning(f"{label} failed: {e!r}")
        return Outcome(error=e)


async def gather_outcomes(*branches: Awaitable[Outcome]) -> List[Outcome]:
    """Join already-wrapped branches; none of them raises except on cancellation."""
    return list(await asyncio.gather(*branches))


"""Ordered "try next on non-success" combinator.

Both provider chains (identity and texture) are evaluated here so the
fallback policy lives in one place:

- candidates are tried in priority order, the first `Success` wins;
- `NotFound` / `Unavailable` / `Restricted` move on to the next candidate;
- the aggregate is `Success`, else `Restricted` if any candidate reported it,
  else `NotFound` (an all-`Unavailable` chain is still `NotFound`).

With `parallel=True` every candidate starts at once, but results are consumed
in priority order, so a lower-priority provider that answers first never beats
a higher-priority one that also succeeds. Pending tasks are cancelled as soon
as a winner is known or the caller is cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Sequence, TypeVar

from core.domain.results import (
    NotFound,
    ProviderResult,
    Restricted,
    Success,
    Unavailable,
    outcome_label,
)

logger = logging.getLogger(__name__)

C = TypeVar("C")
T = TypeVar("T")


@dataclass
class ChainOutcome(Generic[T]):
    """Aggregate of one chain evaluation."""

    result: Success[T] | NotFound | Restricted
    attempts: list[tuple[str, ProviderResult[T]]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return isinstance(self.result, Success)


async def call_with_budget(
    call: Awaitable[ProviderResult[T]],
    *,
    provider: str,
    timeout: float | None,
) -> ProviderResult[T]:
    """Run one provider call under its own time budget.

    A timeout is `Unavailable`, never `NotFound`. An unexpected exception is a
    broken provider, also `Unavailable`; it is logged with its traceback.
    """

    try:
        if timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError:
        return Unavailable(reason=f"timed out after {timeout:g}s", provider=provider)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.warning("provider %s raised %s", provider, type(exc).__name__, exc_info=True)
        return Unavailable(reason=f"{type(exc).__name__}: {exc}", provider=provider)


def _aggregate(attempts: list[tuple[str, ProviderResult[T]]]) -> NotFound | Restricted:
    for name, result in attempts:
        if isinstance(result, Restricted):
            return Restricted(reason=result.reason, provider=result.provider or name)
    return NotFound()


async def first_success(
    candidates: Sequence[C],
    attempt: Callable[[C], Awaitable[ProviderResult[T]]],
    *,
    name_of: Callable[[C], str],
    parallel: bool = False,
    on_attempt: Callable[[C, ProviderResult[T]], None] | None = None,
) -> ChainOutcome[T]:
    attempts: list[tuple[str, ProviderResult[T]]] = []

    def record(candidate: C, result: ProviderResult[T]) -> Success[T] | None:
        attempts.append((name_of(candidate), result))
        if on_attempt is not None:
            on_attempt(candidate, result)
        if isinstance(result, Success):
            if not result.provider:
                result = Success(value=result.value, provider=name_of(candidate))
            return result
        return None

    if not parallel or len(candidates) < 2:
        for candidate in candidates:
            won = record(candidate, await attempt(candidate))
            if won is not None:
                return ChainOutcome(result=won, attempts=attempts)
        return ChainOutcome(result=_aggregate(attempts), attempts=attempts)

    tasks = [asyncio.ensure_future(attempt(candidate)) for candidate in candidates]
    try:
        for candidate, task in zip(candidates, tasks):
            won = record(candidate, await task)
            if won is not None:
                return ChainOutcome(result=won, attempts=attempts)
        return ChainOutcome(result=_aggregate(attempts), attempts=attempts)
    finally:
        pending = [t for t in tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


def describe(result: ProviderResult[object]) -> dict[str, str]:
    """Event fields for a single provider result."""

    fields = {"outcome": outcome_label(result)}
    if isinstance(result, (Unavailable, Restricted)):
        fields["reason"] = result.reason
    return fields

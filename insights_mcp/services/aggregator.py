"""Concurrent multi-source fetching with independent failure handling."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, Literal, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class EndpointResult(Generic[T]):
    """Outcome of one source in a batch: either a value or the exception it raised."""

    label: str
    status: Literal["fulfilled", "rejected"]
    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.status == "fulfilled"


async def gather_settled(sources: Sequence[tuple[str, Awaitable[Any]]]) -> list[EndpointResult]:
    """Run every source concurrently and wait for all of them to settle.

    Results come back in input order.  A failing source never cancels its
    siblings; its exception is captured in the corresponding result.
    """
    if not sources:
        return []
    outcomes = await asyncio.gather(*(aw for _, aw in sources), return_exceptions=True)
    results: list[EndpointResult] = []
    for (label, _), outcome in zip(sources, outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            results.append(EndpointResult(label=label, status="rejected", error=outcome))
        else:
            results.append(EndpointResult(label=label, status="fulfilled", value=outcome))
    return results

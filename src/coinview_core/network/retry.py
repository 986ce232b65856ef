"""Retry policy for fetches.

Two modes:
    - uniform: repeat any failure immediately, up to ``attempts`` times.
    - by_kind: fail fast on errors a retry can't fix (bad URL, offline,
      400/401/403), wait ``rate_limit_delay_s`` before retrying a 429,
      retry everything else immediately.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal, TypeVar

import structlog

from coinview_core.exceptions import (
    CoinviewError,
    InvalidRequest,
    Offline,
    ServerError,
    ServerErrorKind,
)

log = structlog.get_logger("retry")

T = TypeVar("T")

_NON_RETRYABLE_KINDS = frozenset({
    ServerErrorKind.BAD_REQUEST,
    ServerErrorKind.UNAUTHORIZED,
    ServerErrorKind.FORBIDDEN,
})


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    mode: Literal["by_kind", "uniform"] = "by_kind"
    rate_limit_delay_s: float = 1.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")

    def should_retry(self, error: CoinviewError) -> bool:
        if self.mode == "uniform":
            return True
        if isinstance(error, (InvalidRequest, Offline)):
            return False
        if isinstance(error, ServerError) and error.kind in _NON_RETRYABLE_KINDS:
            return False
        return True

    def delay_before_retry(self, error: CoinviewError) -> float:
        if (
            self.mode == "by_kind"
            and isinstance(error, ServerError)
            and error.kind is ServerErrorKind.TOO_MANY_REQUESTS
        ):
            return self.rate_limit_delay_s
        return 0.0


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run *operation* until it succeeds or the policy gives up.

    The last failure is re-raised.
    """
    for attempt in range(1, policy.attempts + 1):
        try:
            return await operation()
        except CoinviewError as exc:
            if attempt >= policy.attempts or not policy.should_retry(exc):
                raise
            delay = policy.delay_before_retry(exc)
            log.warning(
                "fetch_retry",
                attempt=attempt,
                max_attempts=policy.attempts,
                error=str(exc),
                delay_s=delay,
            )
            if delay > 0:
                await sleep(delay)
    raise AssertionError("unreachable")

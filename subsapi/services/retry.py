# subsapi/services/retry.py
"""
Retry wrapper around store-backed operations.

Each call gets its own tenacity controller; only transient persistence
failures are retried. The executor hands back an ``Outcome`` instead of
raising, so callers decide how a failure is reported.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    stop_when_event_set,
    wait_exponential,
)

from subsapi.errors import (
    AppError,
    OperationCancelled,
    ServiceUnavailable,
    TransientPersistenceError,
    UnexpectedError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"


@dataclass
class Outcome(Generic[T]):
    status: OutcomeStatus
    value: Optional[T] = None
    error: Optional[BaseException] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    @property
    def retryable(self) -> bool:
        return isinstance(self.error, TransientPersistenceError)

    def unwrap(self) -> T:
        """Value on success, otherwise the caller-facing error."""
        if self.status is OutcomeStatus.SUCCESS:
            return self.value  # type: ignore[return-value]
        if self.status is OutcomeStatus.CANCELLED:
            raise OperationCancelled("Operation cancelled by caller") from self.error
        if self.retryable:
            raise ServiceUnavailable("Storage unavailable. Please try again.") from self.error
        if isinstance(self.error, AppError) and not isinstance(self.error, UnexpectedError):
            raise self.error
        raise UnexpectedError() from self.error


@dataclass(frozen=True)
class RetryPolicy:
    """Delay before retry k is ``multiplier * exp_base ** (k - 1)``: 2, 4, 8 s by default."""

    retries: int = 3
    multiplier: float = 2.0
    exp_base: float = 2.0
    max_delay: float = 60.0

    @classmethod
    def from_settings(cls, settings: Any) -> "RetryPolicy":
        return cls(
            retries=settings.RETRY_ATTEMPTS,
            multiplier=settings.RETRY_MULTIPLIER,
            exp_base=settings.RETRY_EXP_BASE,
            max_delay=settings.RETRY_MAX_DELAY,
        )


def _log_retry(name: str) -> Callable[[RetryCallState], None]:
    def _before_sleep(state: RetryCallState) -> None:
        err = state.outcome.exception() if state.outcome else None
        logger.warning(
            "retry op=%s attempt=%s sleep=%.2fs error=%s",
            name,
            state.attempt_number,
            state.next_action.sleep if state.next_action else 0.0,
            err,
        )
    return _before_sleep


class RetryingExecutor:
    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    def _controller(self, name: str, cancel_event: asyncio.Event | None) -> AsyncRetrying:
        stop = stop_after_attempt(self.policy.retries + 1)
        if cancel_event is not None:
            stop = stop | stop_when_event_set(cancel_event)
        return AsyncRetrying(
            stop=stop,
            wait=wait_exponential(
                multiplier=self.policy.multiplier,
                exp_base=self.policy.exp_base,
                max=self.policy.max_delay,
            ),
            retry=retry_if_exception_type(TransientPersistenceError),
            before_sleep=_log_retry(name),
            sleep=self._sleep,
            reraise=True,
        )

    async def execute(
        self,
        op: Callable[[], Awaitable[T]],
        *,
        name: str = "op",
        cancel_event: asyncio.Event | None = None,
    ) -> Outcome[T]:
        attempts = 0
        if cancel_event is not None and cancel_event.is_set():
            return Outcome(OutcomeStatus.CANCELLED, attempts=0)
        try:
            async for attempt in self._controller(name, cancel_event):
                with attempt:
                    if cancel_event is not None and cancel_event.is_set():
                        return Outcome(OutcomeStatus.CANCELLED, attempts=attempts)
                    attempts = attempt.retry_state.attempt_number
                    value = await op()
        except TransientPersistenceError as e:
            if cancel_event is not None and cancel_event.is_set():
                return Outcome(OutcomeStatus.CANCELLED, error=e, attempts=attempts)
            logger.error("retries exhausted op=%s attempts=%s error=%s", name, attempts, e)
            return Outcome(OutcomeStatus.FAILURE, error=e, attempts=attempts)
        except AppError as e:
            logger.info("op=%s rejected code=%s detail=%s", name, e.code, e.detail)
            return Outcome(OutcomeStatus.FAILURE, error=e, attempts=attempts)
        except Exception as e:
            logger.exception("op=%s failed unexpectedly", name)
            return Outcome(OutcomeStatus.FAILURE, error=e, attempts=attempts)
        return Outcome(OutcomeStatus.SUCCESS, value=value, attempts=attempts)

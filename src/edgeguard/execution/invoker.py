"""
Invocation wrapper: the retry driver every remote call goes through.

Manifesto:
    Remote calls to the function backend fail for two very different
    reasons: real application errors, and spurious "limit exceeded" reports
    that go away on their own. The wrapper retries only the second kind,
    with bounded exponential backoff, and keeps the user informed without
    flooding them with error toasts.

    - **Bounded:** at most ``max_attempts`` executions of the operation
    - **Sequential:** attempt n+1 starts only after attempt n failed and
      its backoff delay elapsed
    - **Independent:** two invocations with the same name share nothing
      but the diagnostics store; nothing is coalesced
    - **Never swallows:** a terminal failure is always re-raised

Architecture:
    ::

        invoke(name, op)
          │
          ▼
        ATTEMPTING ── success ──────────────────────────► SUCCEEDED
          │                       (attempt > 1: "recovered" toast)
          │ exception
          ▼
        CLASSIFYING ── unclassified, or budget spent ──► FAILED
          │                        (classified: "temporary issue" toast)
          │ classified and attempt < max_attempts       re-raise
          ▼
        RETRYING ── delay_for(attempt), sleep ──► ATTEMPTING (attempt + 1)
                    (attempt >= 3: "auto-correcting" toast)

Examples:
    >>> invoker = RemoteInvoker(ErrorClassifier())
    >>> result = await invoker.invoke(
    ...     "book-appointment",
    ...     lambda: client.functions.invoke("book-appointment", body=payload),
    ... )

    Rewriting an exhausted false positive for the caller:

    >>> await invoker.intercept_and_correct("send-prescription", send)
    Traceback (most recent call last):
    ...
    FalsePositiveLimitError: 'send-prescription' reported a usage limit ...

Guardrails:
    ``asyncio.CancelledError`` is not caught, so cancelling the awaiting
    task aborts an in-flight attempt or a pending backoff sleep. A per-attempt
    ``timeout`` turns a hung attempt into ``InvocationTimeoutError``, which
    is not classified and therefore not retried.

Tags:
    retry, backoff, resilience, state-machine, edgeguard
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

from edgeguard.core.errors import FalsePositiveLimitError, InvocationTimeoutError, categorize_error
from edgeguard.core.logging import LogContext, get_logger
from edgeguard.execution.backoff import BackoffPolicy
from edgeguard.execution.classifier import ErrorClassifier
from edgeguard.notifications.facade import Notifier

T = TypeVar("T")

logger = get_logger(__name__)

# Progress toasts start once this many attempts have failed
PROGRESS_NOTICE_AFTER = 3

Operation = Callable[[], Awaitable[T]]
RetryCallback = Callable[[int, BaseException, float], None]


class InvocationState(str, Enum):
    """States of one logical invocation."""

    ATTEMPTING = "attempting"
    CLASSIFYING = "classifying"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RemoteInvoker:
    """Runs zero-argument async operations with false-positive retries."""

    def __init__(
        self,
        classifier: ErrorClassifier,
        policy: BackoffPolicy | None = None,
        notifier: Notifier | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_retry: RetryCallback | None = None,
        attempt_timeout: float | None = None,
    ):
        self.classifier = classifier
        self.policy = policy or BackoffPolicy()
        self.notifier = notifier or Notifier()
        self._sleep = sleep
        self._on_retry = on_retry
        self.attempt_timeout = attempt_timeout

    async def invoke(
        self,
        name: str,
        op: Operation[T],
        *,
        timeout: float | None = None,
    ) -> T:
        """Execute ``op`` with classification, backoff and notifications.

        Args:
            name: Logical operation name (for logs, toasts, diagnostics)
            op: Zero-argument callable returning an awaitable
            timeout: Per-attempt timeout in seconds (default: ``attempt_timeout``)

        Returns:
            Whatever ``op`` returned on the successful attempt

        Raises:
            The original exception of the last attempt
        """
        return await self._run(name, op, timeout=timeout, notify_terminal=True)

    async def intercept_and_correct(
        self,
        name: str,
        op: Operation[T],
        *,
        silent: bool = False,
        timeout: float | None = None,
    ) -> T:
        """Like ``invoke`` but rewrites an exhausted false positive.

        With ``silent=False`` an exhausted classified failure is raised as
        ``FalsePositiveLimitError`` (original error chained). With
        ``silent=True`` no toast is shown and the original error is re-raised
        after a server-side log line. Unclassified errors pass through
        unchanged in both modes.
        """
        try:
            return await self._run(name, op, timeout=timeout, notify_terminal=not silent)
        except Exception as exc:
            rule = self.classifier.classify(exc)
            if rule is None:
                raise
            if silent:
                logger.warning(
                    "false_positive_suppressed",
                    operation=name,
                    rule=rule,
                    error=str(exc),
                )
                raise
            raise FalsePositiveLimitError(
                name,
                attempts=self.policy.max_attempts,
                cause=exc,
            ) from exc

    def guarded(self, name: str | None = None) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
        """Decorator routing every call of an async function through ``invoke``.

        Example:
            >>> @invoker.guarded("find-available-slots")
            ... async def find_slots(specialist_id):
            ...     return await functions.invoke("find-available-slots", ...)
        """

        def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
            op_name = name or func.__name__

            @functools.wraps(func)
            async def wrapper(*args: Any, **kwargs: Any) -> T:
                return await self.invoke(op_name, lambda: func(*args, **kwargs))

            return wrapper

        return decorator

    async def _attempt(self, name: str, op: Operation[T], attempt: int, timeout: float | None) -> T:
        if timeout is None:
            return await op()

        try:
            async with asyncio.timeout(timeout) as deadline:
                return await op()
        except TimeoutError as exc:
            if deadline.expired():
                raise InvocationTimeoutError(name, timeout, attempt) from exc
            raise

    async def _run(
        self,
        name: str,
        op: Operation[T],
        *,
        timeout: float | None,
        notify_terminal: bool,
    ) -> T:
        # Classifier, notifier and channel log lines inherit the operation
        with LogContext(operation=name):
            return await self._drive(name, op, timeout=timeout, notify_terminal=notify_terminal)

    async def _drive(
        self,
        name: str,
        op: Operation[T],
        *,
        timeout: float | None,
        notify_terminal: bool,
    ) -> T:
        max_attempts = self.policy.max_attempts
        effective_timeout = timeout if timeout is not None else self.attempt_timeout
        log = logger.bind(max_attempts=max_attempts)
        attempt = 1

        while True:
            log.debug("attempt_started", attempt=attempt, state=InvocationState.ATTEMPTING.value)
            try:
                result = await self._attempt(name, op, attempt, effective_timeout)
            except Exception as exc:
                classified = self.classifier.is_transient_false_positive(exc, operation=name)

                if classified and self.policy.should_retry(attempt):
                    delay = self.policy.delay_for(attempt)
                    log.info(
                        "retry_scheduled",
                        attempt=attempt,
                        next_attempt=attempt + 1,
                        delay=delay,
                        state=InvocationState.RETRYING.value,
                    )
                    if attempt >= PROGRESS_NOTICE_AFTER:
                        self.notifier.auto_correcting(name, attempt + 1, max_attempts)
                    if self._on_retry is not None:
                        self._on_retry(attempt, exc, delay)
                    await self._sleep(delay)
                    attempt += 1
                    continue

                if classified:
                    log.error(
                        "retries_exhausted",
                        attempts=attempt,
                        error=str(exc),
                        state=InvocationState.FAILED.value,
                    )
                    if notify_terminal:
                        self.notifier.temporary_issue(name, attempt)
                else:
                    log.info(
                        "invocation_failed",
                        attempts=attempt,
                        error=str(exc),
                        error_type=type(exc).__name__,
                        category=categorize_error(exc).value,
                        state=InvocationState.FAILED.value,
                    )
                raise

            if attempt > 1:
                log.info("retry_succeeded", attempts=attempt, state=InvocationState.SUCCEEDED.value)
                self.notifier.recovered(name, attempt)
            return result


__all__ = [
    "InvocationState",
    "PROGRESS_NOTICE_AFTER",
    "RemoteInvoker",
]

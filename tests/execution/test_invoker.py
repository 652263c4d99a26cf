"""Tests for the retry driver.

Covers:
- Retry bound and backoff schedule for persistent false positives
- Early success and the recovery toast
- Short-circuit on application errors
- Progress and terminal toasts
- intercept_and_correct rewriting (silent and non-silent)
- Per-attempt timeout
- Cancellation during backoff
"""

import asyncio

import pytest

from edgeguard.core.errors import AppError, FalsePositiveLimitError, InvocationTimeoutError
from edgeguard.execution.backoff import BackoffConfig, BackoffPolicy
from edgeguard.execution.invoker import RemoteInvoker
from edgeguard.notifications.protocol import ToastKind
from tests._support.operations import FALSE_POSITIVE, GENUINE, FlakyOperation


class TestRetryBound:
    """A persistent false positive is attempted exactly max_attempts times."""

    @pytest.mark.asyncio
    async def test_always_failing_false_positive(self, invoker, recording_sleep, store):
        op = FlakyOperation(failures=100)

        with pytest.raises(RuntimeError, match="Maximum edge function invocations"):
            await invoker.invoke("book-appointment", op)

        assert op.calls == 5
        assert recording_sleep.delays == [0.5, 0.75, 1.125, 1.6875]
        assert store.total_count == 5

    @pytest.mark.asyncio
    async def test_reraises_original_error_object(self, invoker):
        error = RuntimeError(FALSE_POSITIVE)
        op = FlakyOperation(failures=100, error=error)

        with pytest.raises(RuntimeError) as exc_info:
            await invoker.invoke("book-appointment", op)

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_single_attempt_policy(self, classifier, notifier, recording_sleep):
        invoker = RemoteInvoker(
            classifier,
            BackoffPolicy(BackoffConfig(max_attempts=1)),
            notifier,
            sleep=recording_sleep,
        )
        op = FlakyOperation(failures=1)

        with pytest.raises(RuntimeError):
            await invoker.invoke("send-prescription", op)

        assert op.calls == 1
        assert recording_sleep.delays == []


class TestEarlySuccess:
    @pytest.mark.asyncio
    async def test_succeeds_on_third_attempt(self, invoker, recording_sleep, toasts):
        op = FlakyOperation(failures=2, value={"booking_id": 17})

        result = await invoker.invoke("book-appointment", op)

        assert result == {"booking_id": 17}
        assert op.calls == 3
        assert recording_sleep.delays == [0.5, 0.75]
        assert toasts.kinds() == [ToastKind.SUCCESS]
        assert toasts.toasts[0].description == "Recovered automatically after 3 attempts"

    @pytest.mark.asyncio
    async def test_first_attempt_success_is_silent(self, invoker, recording_sleep, toasts):
        op = FlakyOperation(failures=0)

        assert await invoker.invoke("find-available-slots", op) == "ok"
        assert op.calls == 1
        assert recording_sleep.delays == []
        assert toasts.toasts == []


class TestApplicationErrors:
    @pytest.mark.asyncio
    async def test_unclassified_error_short_circuits(self, invoker, recording_sleep, toasts, store):
        op = FlakyOperation(failures=1, error=AppError(GENUINE, code="NO_AVAILABILITY"))

        with pytest.raises(AppError, match="no availability"):
            await invoker.invoke("book-appointment", op)

        assert op.calls == 1
        assert recording_sleep.delays == []
        assert toasts.toasts == []
        assert store.total_count == 0

    @pytest.mark.asyncio
    async def test_genuine_error_after_false_positive(self, invoker, recording_sleep):
        calls = 0

        async def op():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError(FALSE_POSITIVE)
            raise ValueError("Invalid prescription payload")

        with pytest.raises(ValueError):
            await invoker.invoke("send-prescription", op)

        assert calls == 2
        assert recording_sleep.delays == [0.5]


class TestToasts:
    @pytest.mark.asyncio
    async def test_progress_toasts_before_attempts_four_and_five(self, invoker, toasts):
        op = FlakyOperation(failures=100)

        with pytest.raises(RuntimeError):
            await invoker.invoke("generate-pdf", op)

        assert toasts.kinds() == [
            ToastKind.PROGRESS,
            ToastKind.PROGRESS,
            ToastKind.TERMINAL_FAILURE,
        ]
        assert [t.description for t in toasts.toasts[:2]] == ["Attempt 4 of 5", "Attempt 5 of 5"]
        assert toasts.toasts[2].context == {"operation": "generate-pdf", "attempts": 5}

    @pytest.mark.asyncio
    async def test_success_on_fourth_attempt(self, invoker, toasts):
        op = FlakyOperation(failures=3)

        await invoker.invoke("generate-pdf", op)

        assert toasts.kinds() == [ToastKind.PROGRESS, ToastKind.SUCCESS]

    @pytest.mark.asyncio
    async def test_toast_durations(self, invoker, toasts):
        with pytest.raises(RuntimeError):
            await invoker.invoke("generate-pdf", FlakyOperation(failures=100))

        assert [t.duration for t in toasts.toasts] == [1.5, 1.5, 4.0]


class TestInterceptAndCorrect:
    @pytest.mark.asyncio
    async def test_rewrites_exhausted_false_positive(self, invoker, toasts):
        original = RuntimeError(FALSE_POSITIVE)
        op = FlakyOperation(failures=100, error=original)

        with pytest.raises(FalsePositiveLimitError) as exc_info:
            await invoker.intercept_and_correct("send-prescription", op)

        error = exc_info.value
        assert error.__cause__ is original
        assert error.attempts == 5
        assert "send-prescription" in error.message
        assert op.calls == 5
        assert toasts.kinds()[-1] == ToastKind.TERMINAL_FAILURE

    @pytest.mark.asyncio
    async def test_silent_reraises_original_without_toast(self, invoker, toasts):
        original = RuntimeError(FALSE_POSITIVE)
        op = FlakyOperation(failures=100, error=original)

        with pytest.raises(RuntimeError) as exc_info:
            await invoker.intercept_and_correct("send-prescription", op, silent=True)

        assert exc_info.value is original
        assert ToastKind.TERMINAL_FAILURE not in toasts.kinds()

    @pytest.mark.asyncio
    async def test_application_error_passes_through(self, invoker):
        op = FlakyOperation(failures=1, error=AppError(GENUINE))

        with pytest.raises(AppError):
            await invoker.intercept_and_correct("book-appointment", op)

        assert op.calls == 1

    @pytest.mark.asyncio
    async def test_success_returns_value(self, invoker):
        op = FlakyOperation(failures=1, value=42)
        assert await invoker.intercept_and_correct("generate-pdf", op) == 42


class TestTimeout:
    @pytest.mark.asyncio
    async def test_hung_attempt_times_out_without_retry(self, invoker, recording_sleep):
        calls = 0

        async def hung():
            nonlocal calls
            calls += 1
            await asyncio.sleep(10)

        with pytest.raises(InvocationTimeoutError) as exc_info:
            await invoker.invoke("generate-pdf", hung, timeout=0.01)

        assert calls == 1
        assert exc_info.value.attempt == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_default_attempt_timeout(self, classifier, notifier, recording_sleep):
        invoker = RemoteInvoker(classifier, notifier=notifier, sleep=recording_sleep, attempt_timeout=0.01)

        async def hung():
            await asyncio.sleep(10)

        with pytest.raises(InvocationTimeoutError):
            await invoker.invoke("generate-pdf", hung)

    @pytest.mark.asyncio
    async def test_fast_attempt_unaffected(self, invoker):
        op = FlakyOperation(failures=0)
        assert await invoker.invoke("generate-pdf", op, timeout=5.0) == "ok"


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_during_backoff(self, classifier, notifier):
        invoker = RemoteInvoker(
            classifier,
            BackoffPolicy(BackoffConfig(base_delay=10.0, max_delay=10.0)),
            notifier,
        )
        op = FlakyOperation(failures=100)

        task = asyncio.create_task(invoker.invoke("book-appointment", op))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert op.calls == 1


class TestHooks:
    @pytest.mark.asyncio
    async def test_on_retry_callback(self, classifier, notifier, recording_sleep):
        seen = []
        invoker = RemoteInvoker(
            classifier,
            notifier=notifier,
            sleep=recording_sleep,
            on_retry=lambda attempt, exc, delay: seen.append((attempt, delay)),
        )

        await invoker.invoke("book-appointment", FlakyOperation(failures=2))

        assert seen == [(1, 0.5), (2, 0.75)]

    @pytest.mark.asyncio
    async def test_guarded_decorator(self, invoker, store):
        attempts = []

        @invoker.guarded()
        async def find_available_slots(specialist_id, *, day):
            attempts.append((specialist_id, day))
            if len(attempts) < 2:
                raise RuntimeError(FALSE_POSITIVE)
            return ["09:00", "10:30"]

        assert await find_available_slots(7, day="2026-03-02") == ["09:00", "10:30"]
        assert attempts == [(7, "2026-03-02"), (7, "2026-03-02")]
        assert store.entries()[0].operation == "find_available_slots"

    @pytest.mark.asyncio
    async def test_invocations_are_independent(self, invoker, recording_sleep):
        first = FlakyOperation(failures=1, value="a")
        second = FlakyOperation(failures=1, value="b")

        results = await asyncio.gather(
            invoker.invoke("book-appointment", first),
            invoker.invoke("book-appointment", second),
        )

        assert results == ["a", "b"]
        assert first.calls == 2
        assert second.calls == 2
        assert recording_sleep.delays == [0.5, 0.5]

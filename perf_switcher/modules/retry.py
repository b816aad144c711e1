import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from perf_switcher.errors import BackendError, TransportError
from perf_switcher.globals import RETRY_DELAY_MS, RETRY_MAX_ATTEMPTS

log = logging.getLogger(__name__)

Operation = Callable[[Callable[[Any], None], Callable[[Exception], None]], None]


@dataclass
class RetryContext:
    """State of one logical operation across its attempts."""
    operation: str
    attempt_count: int = 0
    max_attempts: int = RETRY_MAX_ATTEMPTS
    delay_ms: int = RETRY_DELAY_MS
    last_error: Optional[Exception] = None
    finished: bool = False
    cancelled: bool = False
    timer: Any = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return not (self.finished or self.cancelled)


class RetryExecutor:
    """
    Runs asynchronous operations with a bounded number of attempts.

    A failed attempt is retried after a fixed delay until max_attempts is
    reached. The next attempt is only scheduled once the failure of the
    previous one has been observed, so attempts never overlap.
    """

    def __init__(self, scheduler, max_attempts: int = RETRY_MAX_ATTEMPTS, delay_ms: int = RETRY_DELAY_MS):
        """
        :param scheduler: object with call_later(delay_ms, callback) -> handle
            and cancel(handle), normally a GLibScheduler
        :param max_attempts: default number of attempts per operation
        :param delay_ms: default delay between attempts in milliseconds
        """
        _validate(max_attempts, delay_ms)
        self._scheduler = scheduler
        self.max_attempts = max_attempts
        self.delay_ms = delay_ms
        self._contexts: List[RetryContext] = []

    @property
    def pending(self) -> List[RetryContext]:
        return [ctx for ctx in self._contexts if ctx.active]

    def run(
        self,
        operation: str,
        op: Operation,
        on_success: Callable[[Any], None],
        on_failure: Callable[[Exception], None],
        max_attempts: Optional[int] = None,
        delay_ms: Optional[int] = None,
    ) -> RetryContext:
        """
        Start op and keep retrying it on failure.

        op is called as op(on_result, on_error). on_success receives the
        first successful result, on_failure receives the last error once all
        attempts failed. Exactly one of them is called, exactly once, unless
        the context is cancelled first.

        :param operation: name used in log messages
        :return: the RetryContext tracking this operation
        """
        max_attempts = self.max_attempts if max_attempts is None else max_attempts
        delay_ms = self.delay_ms if delay_ms is None else delay_ms
        _validate(max_attempts, delay_ms)

        ctx = RetryContext(operation=operation, max_attempts=max_attempts, delay_ms=delay_ms)
        self._contexts.append(ctx)
        self._attempt(ctx, op, on_success, on_failure)
        return ctx

    def cancel(self, ctx: RetryContext) -> None:
        """Stop ctx; a pending retry never fires and late results are dropped."""
        if not ctx.active:
            return
        ctx.cancelled = True
        if ctx.timer is not None:
            self._scheduler.cancel(ctx.timer)
            ctx.timer = None
        self._forget(ctx)
        log.debug("%s cancelled after %d attempt(s)", ctx.operation, ctx.attempt_count)

    def cancel_all(self) -> None:
        for ctx in list(self._contexts):
            self.cancel(ctx)

    def _forget(self, ctx: RetryContext) -> None:
        if ctx in self._contexts:
            self._contexts.remove(ctx)

    def _attempt(self, ctx: RetryContext, op: Operation, on_success, on_failure) -> None:
        ctx.timer = None
        if not ctx.active:
            return

        ctx.attempt_count += 1
        attempt = ctx.attempt_count
        settled = False

        def is_stale() -> bool:
            return settled or not ctx.active or attempt != ctx.attempt_count

        def on_result(result) -> None:
            nonlocal settled
            if is_stale():
                log.debug("Ignoring late result of %s attempt %d", ctx.operation, attempt)
                return
            settled = True
            ctx.finished = True
            self._forget(ctx)
            if attempt > 1:
                log.info("%s succeeded on attempt %d", ctx.operation, attempt)
            on_success(result)

        def on_error(error: Exception) -> None:
            nonlocal settled
            if is_stale():
                log.debug("Ignoring late error of %s attempt %d: %s", ctx.operation, attempt, error)
                return
            settled = True
            self._on_attempt_failed(ctx, error, op, on_success, on_failure)

        try:
            op(on_result, on_error)
        except BackendError as e:
            on_error(e)
        except Exception as e:
            log.exception("Unexpected error in %s", ctx.operation)
            on_error(TransportError(str(e)))

    def _on_attempt_failed(self, ctx: RetryContext, error: Exception, op: Operation, on_success, on_failure) -> None:
        ctx.last_error = error
        if ctx.attempt_count < ctx.max_attempts:
            log.warning(
                "%s failed (attempt %d/%d): %s, retrying in %d ms",
                ctx.operation, ctx.attempt_count, ctx.max_attempts, error, ctx.delay_ms,
            )
            ctx.timer = self._scheduler.call_later(
                ctx.delay_ms, lambda: self._attempt(ctx, op, on_success, on_failure)
            )
            return

        ctx.finished = True
        self._forget(ctx)
        log.error("%s failed after %d attempts: %s", ctx.operation, ctx.attempt_count, error)
        on_failure(error)


def _validate(max_attempts: int, delay_ms: int) -> None:
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
    if delay_ms < 0:
        raise ValueError(f"delay_ms must not be negative, got {delay_ms}")

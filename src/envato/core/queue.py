from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Optional, Union

from .domain.enums import QueueEvent
from .errors import ExecutorTimeoutError
from .events import EventEmitter, Listener
from .ports.clock_port import ClockPort, SystemClock

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 65.0

Resolve = Callable[[Any], None]
Reject = Callable[[BaseException], None]
Retry = Callable[..., None]
Executor = Callable[[Resolve, Reject, Retry], Union[None, Awaitable[Any]]]


@dataclass(eq=False)
class QueueItem:
    fn: Executor
    future: "asyncio.Future[Any]"
    attempts: int = 0


class _Attempt:
    """A single admission of a QueueItem.

    Exactly one of resolve/reject/retry takes effect; the first call wins and any
    later call is logged and ignored.
    """

    def __init__(self, queue: "RequestQueue", item: QueueItem) -> None:
        self._queue = queue
        self.item = item
        self.settled = False
        self._watchdog: Optional[asyncio.TimerHandle] = None

    def _claim(self, action: str) -> bool:
        if self.settled:
            logger.warning(f"Ignoring {action}() on an attempt that already settled")
            return False
        self.settled = True
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None
        return True

    def resolve(self, value: Any = None) -> None:
        if self._claim("resolve"):
            self._queue._finish(self.item, value=value)

    def reject(self, error: BaseException) -> None:
        if self._claim("reject"):
            self._queue._finish(self.item, error=error)

    def retry(self, retry_after: Optional[float] = None) -> None:
        if self._claim("retry"):
            self._queue._retry(self.item, retry_after)

    def start_watchdog(self, timeout: float) -> None:
        loop = asyncio.get_running_loop()
        self._watchdog = loop.call_later(timeout, self._expire, timeout)

    def _expire(self, timeout: float) -> None:
        self._watchdog = None
        if not self.settled:
            logger.error(f"Executor did not settle within {timeout}s; rejecting")
            self.reject(ExecutorTimeoutError(f"Executor did not settle within {timeout} seconds"))


class RequestQueue:
    """Admission queue for outbound requests.

    Runs at most ``concurrency`` executors at once (0 means unlimited), admits them
    in submission order, and pauses every admission while a rate limit deferral
    window is active.

    Each executor receives three callbacks and must eventually call exactly one:

    - ``resolve(value)`` settles the pushed future with value and frees the slot.
    - ``reject(error)`` settles the pushed future with error and frees the slot.
    - ``retry(retry_after=None)`` registers a throttle event and re-attempts the same
      item once the window elapses, ahead of anything still queued. The slot
      stays occupied and the future stays pending.

    An executor that raises, or returns an awaitable that raises, is treated as if it
    had called ``reject`` with that exception.

    Example:
        queue = RequestQueue(concurrency=2)
        queue.on("ratelimit", lambda ms: print(f"paused for {ms} ms"))

        async def executor(resolve, reject, retry):
            response = await transport.send(request)
            if response.status_code == 429:
                return retry(5)
            resolve(response)

        response = await queue.push(executor)
    """

    def __init__(
        self,
        concurrency: Union[int, Callable[[], int]] = 3,
        *,
        clock: Optional[ClockPort] = None,
        default_retry_after: float = DEFAULT_RETRY_AFTER_SECONDS,
        settle_timeout: Optional[float] = None,
    ) -> None:
        """Initialize the queue.

        Args:
            concurrency: Maximum in-flight executors, or a zero-argument callable that is
                         consulted on every admission so the limit can change at any time.
                         Values <= 0 disable the cap.
            clock: Time source for deferral windows (defaults to SystemClock).
            default_retry_after: Window length in seconds when a throttle event carries
                                 no duration.
            settle_timeout: Optional seconds to wait for an executor that returned
                            without settling before rejecting it with
                            ExecutorTimeoutError. None disables the guard.
        """
        if callable(concurrency):
            self._concurrency: Callable[[], int] = concurrency
        else:
            limit = concurrency
            self._concurrency = lambda: limit
        self._clock: ClockPort = clock or SystemClock()
        self._default_retry_after = default_retry_after
        self._settle_timeout = settle_timeout

        self._pending: deque[QueueItem] = deque()
        self._retrying: deque[QueueItem] = deque()
        self._running = 0
        self._retry_until: Optional[float] = None
        self._throttled = False
        self._admitting = False

        self._events = EventEmitter()
        self._tasks: set[asyncio.Task[Any]] = set()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def concurrency(self) -> int:
        """The current limit, read fresh from the owner."""
        return int(self._concurrency() or 0)

    @property
    def length(self) -> int:
        """Outstanding work: queued items plus items currently running."""
        return len(self._pending) + self._running

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def running_count(self) -> int:
        return self._running

    @property
    def retrying_count(self) -> int:
        return len(self._retrying)

    @property
    def retry_until(self) -> Optional[float]:
        return self._retry_until

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: Union[str, QueueEvent], listener: Listener) -> Listener:
        """Subscribe to "ratelimit" (duration in ms) or "resume" (no payload)."""
        return self._events.on(event, listener)

    def once(self, event: Union[str, QueueEvent], listener: Listener) -> Listener:
        return self._events.once(event, listener)

    def off(self, event: Union[str, QueueEvent], listener: Optional[Listener] = None) -> None:
        self._events.off(event, listener)

    # ------------------------------------------------------------------
    # Rate limit deferral
    # ------------------------------------------------------------------

    def register_throttle_event(self, retry_after: Optional[float] = None) -> None:
        """Defer all admissions for retry_after seconds.

        Without a value the default window (65 seconds) applies; an explicit 0 is
        honoured as zero. The deadline never moves backwards while a window is
        active. The first event of an episode emits "ratelimit" and schedules a
        single "resume" that fires once the (possibly extended) window has passed.
        """
        seconds = self._default_retry_after if retry_after is None else max(0.0, float(retry_after))
        deadline = self._clock.now() + seconds
        if self._retry_until is None or not self.is_deferring() or deadline > self._retry_until:
            self._retry_until = deadline

        if self._throttled:
            logger.debug(f"Rate limit window extended; {self._remaining():.2f}s remaining")
            return

        self._throttled = True
        duration_ms = int(seconds * 1000)
        logger.warning(f"Rate limited; deferring requests for {duration_ms} ms")
        self._events.emit(QueueEvent.RATELIMIT, duration_ms)
        self._spawn(self._resume_when_ready())

    def is_deferring(self) -> bool:
        """True strictly before the recorded deferral deadline."""
        return self._retry_until is not None and self._clock.now() < self._retry_until

    async def defer(self) -> None:
        """Wait until the deferral window is over.

        The deadline is re-read after every sleep so that windows extended while
        waiting are honoured.
        """
        while self.is_deferring():
            await self._clock.sleep(self._remaining())

    def _remaining(self) -> float:
        if self._retry_until is None:
            return 0.0
        return max(0.0, self._retry_until - self._clock.now())

    async def _resume_when_ready(self) -> None:
        await self.defer()
        self._throttled = False
        logger.info("Rate limit window elapsed; resuming requests")
        self._events.emit(QueueEvent.RESUME)
        self._admit()

    # ------------------------------------------------------------------
    # Submission and admission
    # ------------------------------------------------------------------

    def push(self, executor: Executor) -> "asyncio.Future[Any]":
        """Queue executor and return a future settled by its resolve/reject.

        Must be called with a running event loop. When a slot is free and no
        rate limit window is active, executor is invoked before push returns.
        Cancelling the returned future while the item is still queued removes it
        without running it.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        item = QueueItem(fn=executor, future=future)
        self._pending.append(item)
        future.add_done_callback(partial(self._discard_if_cancelled, item))
        logger.debug(f"Queued request (pending={len(self._pending)}, running={self._running})")
        self._admit()
        return future

    def _has_free_slot(self) -> bool:
        limit = self.concurrency
        return limit <= 0 or self._running < limit

    def _admit(self) -> None:
        """Start waiting work: retried items first, then pending items in FIFO order.

        Nothing starts while a rate limit episode is open; the resume step calls
        back in once the window has elapsed. Re-entrant calls (an executor
        settling synchronously) return at once and leave the loop to the
        outermost call.
        """
        if self._admitting:
            return
        self._admitting = True
        try:
            while not self._throttled:
                if self._retrying:
                    item = self._retrying.popleft()
                    if item.future.done():
                        self._running -= 1
                        continue
                    self._start(item)
                elif self._pending and self._has_free_slot():
                    item = self._pending.popleft()
                    if item.future.done():
                        continue
                    self._running += 1
                    logger.debug(f"Admitted request (running={self._running}, limit={self.concurrency})")
                    self._start(item)
                else:
                    break
        finally:
            self._admitting = False

    def _discard_if_cancelled(self, item: QueueItem, future: "asyncio.Future[Any]") -> None:
        if not future.cancelled():
            return
        if item in self._pending:
            self._pending.remove(item)
            logger.debug("Removed cancelled request from the queue")
        elif item in self._retrying:
            self._retrying.remove(item)
            logger.debug("Dropped cancelled request waiting to retry")
            self._release()

    def _spawn(self, coro: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _start(self, item: QueueItem) -> None:
        item.attempts += 1
        attempt = _Attempt(self, item)
        try:
            result = item.fn(attempt.resolve, attempt.reject, attempt.retry)
        except Exception as exc:
            self._fail(attempt, exc)
            return

        if inspect.isawaitable(result):
            self._spawn(self._complete(attempt, result))
        elif not attempt.settled and self._settle_timeout is not None:
            attempt.start_watchdog(self._settle_timeout)

    async def _complete(self, attempt: _Attempt, awaitable: Awaitable[Any]) -> None:
        try:
            await awaitable
        except asyncio.CancelledError:
            if not attempt.settled:
                attempt.settled = True
                self._abandon(attempt.item)
            raise
        except Exception as exc:
            self._fail(attempt, exc)
            return

        if not attempt.settled and self._settle_timeout is not None:
            attempt.start_watchdog(self._settle_timeout)

    def _fail(self, attempt: _Attempt, exc: Exception) -> None:
        if attempt.settled:
            logger.warning(f"Executor raised after settling; ignoring {exc!r}")
        else:
            attempt.reject(exc)

    def _finish(self, item: QueueItem, *, value: Any = None, error: Optional[BaseException] = None) -> None:
        future = item.future
        if not future.done():
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(value)
        self._release()

    def _retry(self, item: QueueItem, retry_after: Optional[float]) -> None:
        logger.debug(f"Retrying request after attempt {item.attempts}")
        self._retrying.append(item)
        self.register_throttle_event(retry_after)

    def _release(self) -> None:
        self._running -= 1
        self._admit()

    def _abandon(self, item: QueueItem) -> None:
        if not item.future.done():
            item.future.cancel()
        self._release()


__all__ = [
    "DEFAULT_RETRY_AFTER_SECONDS",
    "Executor",
    "QueueItem",
    "RequestQueue",
]

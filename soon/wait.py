# Copyright (c) Meta Platforms, Inc. and affiliates.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# pyre-strict
from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable, Hashable, Sequence
from typing import Any, Generic, TypeVar

from .errors import WaitTimeoutError
from .listener import add_listener, EventSource, remove_listeners

if sys.version_info >= (3, 11):  # pragma: no cover
    from asyncio import timeout as timeout_context
else:  # pragma: no cover
    from async_timeout import timeout as timeout_context


T = TypeVar("T")
Predicate = Callable[[Any], object]

__all__: Sequence[str] = [
    "DEFAULT_WAITER",
    "PendingWait",
    "Waiter",
    "wait_for_event",
    "wait_with_timeout",
]


class PendingWait(Generic[T]):
    """
    Resolve-once gate for a single in-flight wait.

    Several sources (an event, a timer, an abort signal) race to settle it.
    The first resolve()/reject() wins and returns True, every later call is
    a no-op that returns False.
    """

    future: asyncio.Future[T]

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if loop is None:
            loop = asyncio.get_running_loop()
        self.future = loop.create_future()

    def done(self) -> bool:
        return self.future.done()

    def resolve(self, value: T) -> bool:
        if self.future.done():
            return False
        self.future.set_result(value)
        return True

    def reject(self, exc: BaseException) -> bool:
        if self.future.done():
            return False
        self.future.set_exception(exc)
        return True


def _format_ms(timeout_ms: float) -> str:
    if float(timeout_ms).is_integer():
        return str(int(timeout_ms))
    return str(timeout_ms)


def _expired(deadline: Any) -> bool:
    # asyncio.Timeout.expired is a method, async_timeout's is a property
    expired = deadline.expired
    return bool(expired() if callable(expired) else expired)


class Waiter:
    """
    Waits on events and awaitables under a deadline.

    Timeouts are in milliseconds; 0 means no deadline and None means use
    default_timeout_ms. Every wait cleans up after itself (listener, timer,
    abort watcher) before its caller sees the outcome, whichever way it ends.
    """

    logger: logging.Logger
    default_timeout_ms: float

    def __init__(
        self,
        *,
        logger: logging.Logger | None = None,
        default_timeout_ms: float = 0,
    ) -> None:
        if default_timeout_ms < 0:
            raise ValueError(
                f"default_timeout_ms must be >= 0: {default_timeout_ms}"
            )
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.default_timeout_ms = default_timeout_ms

    def _resolve_timeout(
        self, timeout_ms: float | None, *unused: Awaitable[object] | None
    ) -> float:
        """
        unused are awaitables the caller was handed; coroutines among them
        are closed when the timeout is rejected, so nothing warns about
        them never being awaited.
        """
        if timeout_ms is None:
            return self.default_timeout_ms
        if timeout_ms < 0:
            for awaitable in unused:
                if asyncio.iscoroutine(awaitable):
                    awaitable.close()
            raise ValueError(f"timeout_ms must be >= 0: {timeout_ms}")
        return timeout_ms

    async def _discard(self, task: asyncio.Future[object], name: Hashable) -> None:
        """
        Cancel a task we own and wait for it to finish.
        Whatever it ends with (a result, an error, or ignoring the cancel) is
        only logged, the wait's outcome was already decided. Our own
        cancellation is re-raised once the task is done.
        """
        task.cancel()
        own_cancel: asyncio.CancelledError | None = None
        while not task.done():
            try:
                # wait() never cancels what it waits on
                await asyncio.wait([task])
            except asyncio.CancelledError as ex:
                own_cancel = ex
        if not task.cancelled():
            exc = task.exception()
            self.logger.debug(
                "abort watcher for %s ended with %r",
                name,
                exc if exc is not None else task.result(),
            )
        if own_cancel is not None:
            raise own_cancel

    async def wait_for_event(
        self,
        source: EventSource,
        event_name: Hashable,
        predicate: Predicate,
        timeout_ms: float | None = None,
        abort: Awaitable[object] | None = None,
    ) -> Any:
        """
        Wait for the next event_name payload on source for which predicate()
        is truthy, and return it.

        Raises whatever predicate raises, WaitTimeoutError once timeout_ms
        expires, or the exception abort resolves to (or raises).
        If abort resolves to anything that isn't an exception, that value is
        returned instead. A cancelled abort is ignored.

        abort may be shared with other waits; it is only cancelled when we
        had to wrap it in a task ourselves.
        """
        timeout_ms = self._resolve_timeout(timeout_ms, abort)
        loop = asyncio.get_running_loop()
        pending: PendingWait[Any] = PendingWait(loop)

        def on_event(event: object) -> None:
            if pending.done():
                return
            try:
                matched = predicate(event)
            except Exception as e:
                pending.reject(e)
                return
            if matched:
                pending.resolve(event)

        def on_timeout() -> None:
            timed_out = WaitTimeoutError(
                f"Timeout exceeded while waiting for {event_name}"
            )
            if pending.reject(timed_out):
                self.logger.debug(
                    "gave up on %s after %sms", event_name, _format_ms(timeout_ms)
                )

        def on_abort(fut: asyncio.Future[object]) -> None:
            if fut.cancelled():
                return
            exc = fut.exception()
            result = exc if exc is not None else fut.result()
            if isinstance(result, BaseException):
                if pending.reject(result):
                    self.logger.debug("wait for %s aborted: %r", event_name, result)
            else:
                pending.resolve(result)

        listeners = [add_listener(source, event_name, on_event)]
        timer: asyncio.TimerHandle | None = None
        abort_fut: asyncio.Future[object] | None = None
        try:
            if timeout_ms:
                timer = loop.call_later(timeout_ms / 1000, on_timeout)
            if abort is not None:
                abort_fut = asyncio.ensure_future(abort)
                abort_fut.add_done_callback(on_abort)
            self.logger.debug("waiting for %s", event_name)
            return await pending.future
        finally:
            remove_listeners(listeners)
            if timer is not None:
                timer.cancel()
            if abort_fut is not None:
                abort_fut.remove_done_callback(on_abort)
                if abort_fut is not abort:
                    await self._discard(abort_fut, event_name)

    async def wait_with_timeout(
        self,
        awaitable: Awaitable[T],
        task_name: str,
        timeout_ms: float | None = None,
    ) -> T:
        """
        Await awaitable, giving up after timeout_ms with a WaitTimeoutError.
        On timeout awaitable is cancelled, as asyncio.wait_for() would.
        Anything awaitable raises on its own, including its own
        asyncio.TimeoutError, is passed through untouched.
        """
        timeout_ms = self._resolve_timeout(timeout_ms, awaitable)
        deadline = timeout_context(timeout_ms / 1000 if timeout_ms else None)
        try:
            async with deadline:
                return await awaitable
        except asyncio.TimeoutError:
            if not _expired(deadline):
                raise
            ms = _format_ms(timeout_ms)
            self.logger.debug("gave up on %s after %sms", task_name, ms)
            raise WaitTimeoutError(
                f"waiting for {task_name} failed: timeout {ms}ms exceeded"
            ) from None


# Shared Waiter behind the module level helpers
DEFAULT_WAITER: Waiter = Waiter()
wait_for_event = DEFAULT_WAITER.wait_for_event
wait_with_timeout = DEFAULT_WAITER.wait_with_timeout

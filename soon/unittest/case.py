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
"""
This TestCase fails any test that leaves work behind on the loop: tasks that
are still pending, or timers armed with loop.call_later() that were neither
cancelled nor fired. Any time asyncio calls logger.error() it is also
considered a test failure.
"""

from __future__ import annotations

import asyncio
import asyncio.log
import sys
import unittest.mock as mock
from collections.abc import Callable
from typing import Any, TypeVar
from unittest import IsolatedAsyncioTestCase as AsyncioTestCase

# Do not remove, even if Pyright complains about it.
# Setting global __unittest helps preserve proper tracebacks pointing to the specific error line when the test fails.
__unittest = True

_F = TypeVar("_F", bound=Callable[..., object])
_IGNORE_TASK_LEAKS_ATTR = "__soon_testcase_ignore_tasks__"
_IGNORE_TIMER_LEAKS_ATTR = "__soon_testcase_ignore_timers__"
_IGNORE_AIO_ERRS_ATTR = "__soon_testcase_ignore_asyncio__"


def ignoreAsyncioErrors(test_item: _F) -> _F:
    """Test is allowed to cause Asyncio Error Logs"""
    setattr(test_item, _IGNORE_AIO_ERRS_ATTR, True)
    return test_item


def ignoreTaskLeaks(test_item: _F) -> _F:
    """Test is allowed to leak tasks"""
    setattr(test_item, _IGNORE_TASK_LEAKS_ATTR, True)
    return test_item


def ignoreTimerLeaks(test_item: _F) -> _F:
    """Test is allowed to leave call_later() timers armed"""
    setattr(test_item, _IGNORE_TIMER_LEAKS_ATTR, True)
    return test_item


class TestCase(AsyncioTestCase):
    def _ignores(self, testMethod: Callable[..., None], attr: str) -> bool:
        return getattr(self, attr, getattr(testMethod, attr, False))

    def _callTestMethod(self, testMethod: Callable[..., None]) -> None:
        if sys.version_info >= (3, 11):  # pragma: nocover
            # pyre-fixme[16]: `TestCase` has no attribute `_asyncioRunner`.
            loop = self._asyncioRunner.get_loop()
        else:  # pragma: nocover
            loop = self._asyncioTestLoop

        start_tasks = asyncio.all_tasks(loop)
        timers: list[asyncio.TimerHandle] = []
        real_call_later = loop.call_later

        def call_later(
            delay: float, callback: Callable[..., object], *args: Any, **kws: Any
        ) -> asyncio.TimerHandle:
            handle = real_call_later(delay, callback, *args, **kws)
            timers.append(handle)
            return handle

        real_logger = asyncio.log.logger.error
        with mock.patch.object(
            asyncio.log.logger, "error", side_effect=real_logger
        ) as error, mock.patch.object(loop, "call_later", call_later):
            # pyre-fixme[16]: `AsyncioTestCase` has no attribute `_callTestMethod`.
            super()._callTestMethod(testMethod)

        if sys.version_info < (3, 11):  # pragma: nocover
            # Lets join the queue to insure all the tasks created by this case
            # are cleaned up
            loop.run_until_complete(self._asyncioCallsQueue.join())

        left_over_tasks = asyncio.all_tasks(loop) - start_tasks
        if left_over_tasks and not self._ignores(testMethod, _IGNORE_TASK_LEAKS_ATTR):
            tasks = "\n".join(repr(task) for task in left_over_tasks)
            self.fail(f"left over pending tasks:\n{tasks}")

        now = loop.time()
        armed = [t for t in timers if not t.cancelled() and t.when() > now]
        if armed and not self._ignores(testMethod, _IGNORE_TIMER_LEAKS_ATTR):
            handles = "\n".join(repr(timer) for timer in armed)
            self.fail(f"left over armed timers:\n{handles}")

        if error.called and not self._ignores(testMethod, _IGNORE_AIO_ERRS_ATTR):
            errors = "\n\n".join(c[0][0] for c in error.call_args_list)
            self.fail(f"asyncio logger.error() was called!\n{errors}")

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
from __future__ import annotations

import asyncio
import unittest
from typing import Any, Optional

from soon.unittest import (
    ignoreAsyncioErrors,
    ignoreTaskLeaks,
    ignoreTimerLeaks,
    TestCase,
)


saved_task: Optional[asyncio.Task[Any]] = None


def noop() -> None:
    pass


class TestTestCase(TestCase):
    @unittest.expectedFailure
    async def test_pending_task_left_over(self) -> None:
        global saved_task
        saved_task = asyncio.get_running_loop().create_task(asyncio.sleep(10))

    async def test_finished_task(self) -> None:
        global saved_task
        saved_task = asyncio.get_running_loop().create_task(asyncio.sleep(0.01))
        await saved_task

    @unittest.expectedFailure
    async def test_armed_timer_left_over(self) -> None:
        asyncio.get_running_loop().call_later(10, noop)

    async def test_cancelled_timer(self) -> None:
        handle = asyncio.get_running_loop().call_later(10, noop)
        handle.cancel()

    async def test_fired_timer(self) -> None:
        fired = asyncio.Event()
        asyncio.get_running_loop().call_later(0.01, fired.set)
        await fired.wait()

    @ignoreTimerLeaks
    async def test_ignore_timer_leaks(self) -> None:
        asyncio.get_running_loop().call_later(10, noop)

    @ignoreAsyncioErrors
    async def test_ignore_asyncio_error(self) -> None:
        asyncio.get_running_loop().call_exception_handler({"message": "oops"})

    @unittest.expectedFailure
    async def test_asyncio_error(self) -> None:
        asyncio.get_running_loop().call_exception_handler({"message": "oops"})

    @ignoreTaskLeaks
    async def test_ignore_task_leaks(self) -> None:
        # pyre-fixme[16]: `TestTestCase` has no attribute `_task`.
        self._task = asyncio.get_running_loop().create_task(asyncio.Event().wait())


@ignoreAsyncioErrors
class IgnoreAsyncioErrorsTestCase(TestCase):
    async def test_ignore_asyncio_error_on_case_class(self) -> None:
        asyncio.get_running_loop().call_exception_handler({"message": "oops"})


@ignoreTaskLeaks
class IgnoreTaskLeaksTestCase(TestCase):
    async def test_ignore_task_leaks_on_case_class(self) -> None:
        # pyre-fixme[16]: `IgnoreTaskLeaksTestCase` has no attribute `_task`.
        self._task = asyncio.get_running_loop().create_task(asyncio.Event().wait())


@ignoreTimerLeaks
class IgnoreTimerLeaksTestCase(TestCase):
    async def test_ignore_timer_leaks_on_case_class(self) -> None:
        asyncio.get_running_loop().call_later(10, noop)


if __name__ == "__main__":
    unittest.main()

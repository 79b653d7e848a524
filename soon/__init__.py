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

"""Waiting on asyncio events and awaitables, under a deadline"""

from .errors import WaitTimeoutError
from .event import EventEmitter
from .hooks import install_api_hooks
from .listener import add_listener, EventSource, RegisteredListener, remove_listeners
from .wait import PendingWait, wait_for_event, wait_with_timeout, Waiter

__version__ = "26.10.01"
__all__ = [
    "EventEmitter",
    "EventSource",
    "PendingWait",
    "RegisteredListener",
    "WaitTimeoutError",
    "Waiter",
    "add_listener",
    "install_api_hooks",
    "remove_listeners",
    "wait_for_event",
    "wait_with_timeout",
]

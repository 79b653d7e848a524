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

from collections.abc import Hashable
from contextlib import suppress

from .listener import Handler


class EventEmitter:
    """
    A plain in-process event source.
    Handlers are called synchronously by emit(), in the order they subscribed.
    The same handler may be subscribed more than once, and is then called once
    per subscription.
    """

    _handlers: dict[Hashable, list[Handler]]

    def __init__(self) -> None:
        self._handlers = {}

    def subscribe(self, event_name: Hashable, handler: Handler) -> None:
        self._handlers.setdefault(event_name, []).append(handler)

    def unsubscribe(self, event_name: Hashable, handler: Handler) -> None:
        handlers = self._handlers.get(event_name)
        if not handlers:
            return
        with suppress(ValueError):
            handlers.remove(handler)
        if not handlers:
            del self._handlers[event_name]

    def emit(self, event_name: Hashable, payload: object = None) -> bool:
        """
        Dispatch payload to a snapshot of the current handlers, so handlers
        that (un)subscribe while we dispatch only affect the next emit().
        Returns True if any handler was called.
        """
        handlers = tuple(self._handlers.get(event_name, ()))
        for handler in handlers:
            handler(payload)
        return bool(handlers)

    def listener_count(self, event_name: Hashable) -> int:
        return len(self._handlers.get(event_name, ()))

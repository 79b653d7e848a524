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

from collections.abc import Callable, Hashable, MutableSequence, Sequence
from typing import Any, NamedTuple, Protocol


Handler = Callable[[Any], None]

__all__: Sequence[str] = [
    "EventSource",
    "Handler",
    "RegisteredListener",
    "add_listener",
    "remove_listeners",
]


class EventSource(Protocol):
    """
    Anything that can dispatch named events to subscribed handlers.
    unsubscribe() must not raise for a handler that isn't subscribed.
    """

    def subscribe(
        self, event_name: Hashable, handler: Handler
    ) -> None:  # pragma: nocover
        ...

    def unsubscribe(
        self, event_name: Hashable, handler: Handler
    ) -> None:  # pragma: nocover
        ...


class RegisteredListener(NamedTuple):
    """One subscription, dead once it has been passed to remove_listeners()"""

    source: EventSource
    event_name: Hashable
    handler: Handler


def add_listener(
    source: EventSource, event_name: Hashable, handler: Handler
) -> RegisteredListener:
    source.subscribe(event_name, handler)
    return RegisteredListener(source, event_name, handler)


def remove_listeners(listeners: MutableSequence[RegisteredListener]) -> None:
    """
    Unsubscribe every listener in the batch, then drain the batch in place
    so anyone else holding it sees it empty.
    """
    for listener in listeners:
        listener.source.unsubscribe(listener.event_name, listener.handler)
    del listeners[:]

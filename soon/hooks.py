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
Instrumentation for the public API of a class.

Every public method can log its calls, and the coroutine methods named by the
caller get the stack of whoever called them attached to their failures, since
by the time a coroutine fails that stack is long gone.
"""

from __future__ import annotations

import functools
import inspect
import logging
import sys
import traceback
from collections.abc import Awaitable, Callable, Sequence
from typing import AbstractSet, Any, TypeVar


ASYNC_MARKER = "-- ASYNC --"
T = TypeVar("T")
TClass = TypeVar("TClass", bound=type)

__all__: Sequence[str] = ["ASYNC_MARKER", "install_api_hooks"]


def _add_note(exc: BaseException, note: str) -> None:
    if sys.version_info >= (3, 11):  # pragma: no cover
        exc.add_note(note)
    else:  # pragma: no cover
        exc.__notes__ = [*getattr(exc, "__notes__", []), note]


async def _annotate_failure(
    awaitable: Awaitable[T], stack: traceback.StackSummary
) -> T:
    try:
        return await awaitable
    except Exception as e:
        # the innermost hooked call already has the longest stack
        if not any(
            note.startswith(ASYNC_MARKER) for note in getattr(e, "__notes__", ())
        ):
            _add_note(e, ASYNC_MARKER + "\n" + "".join(stack.format()))
        raise


def _hook(
    method: Callable[..., Any],
    qualname: str,
    log: logging.Logger,
    is_async: bool,
) -> Callable[..., Any]:
    @functools.wraps(method)
    def wrapper(self: object, *args: Any, **kwargs: Any) -> Any:
        if log.isEnabledFor(logging.DEBUG):
            if kwargs:
                log.debug("%s %r %r", qualname, args, kwargs)
            elif args:
                log.debug("%s %r", qualname, args)
            else:
                log.debug("%s", qualname)
        if not is_async:
            return method(self, *args, **kwargs)
        # drop this frame, keep the caller's
        stack = traceback.StackSummary.from_list(traceback.extract_stack()[:-1])
        return _annotate_failure(method(self, *args, **kwargs), stack)

    return wrapper


def install_api_hooks(
    cls: TClass,
    *,
    async_methods: AbstractSet[str] = frozenset(),
    class_name: str | None = None,
    logger: logging.Logger | None = None,
) -> TClass:
    """
    Wrap the public functions defined on cls in place and return cls.

    async_methods names the coroutine methods whose failures get the caller's
    stack appended as an exception note. Everything else is only wrapped if
    the logger has DEBUG enabled at install time.
    """
    log = logger if logger is not None else logging.getLogger(__name__)
    name = class_name or cls.__name__
    members = vars(cls)
    for method_name in async_methods:
        if not inspect.iscoroutinefunction(members.get(method_name)):
            raise TypeError(f"{name}.{method_name} is not a coroutine method")

    for method_name, method in list(members.items()):
        if method_name.startswith("_") or not inspect.isfunction(method):
            continue
        is_async = method_name in async_methods
        if not is_async and not log.isEnabledFor(logging.DEBUG):
            continue
        setattr(cls, method_name, _hook(method, f"{name}.{method_name}", log, is_async))
    return cls

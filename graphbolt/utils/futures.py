# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import asyncio
from typing import Callable, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def completed_future(loop: asyncio.AbstractEventLoop, value: T) -> asyncio.Future[T]:
    future: asyncio.Future[T] = loop.create_future()
    future.set_result(value)
    return future


def complete_once(future: asyncio.Future[T], value: T) -> bool:
    """Set the result unless the future is already done. Return whether it was set."""
    if future.done():
        return False
    future.set_result(value)
    return True


def fail_once(future: asyncio.Future[T], error: BaseException) -> bool:
    """Set the exception unless the future is already done. Return whether it was set."""
    if future.done():
        return False
    future.set_exception(error)
    return True


def handle_future(
    source: asyncio.Future[T],
    handler: Callable[[T | None, BaseException | None], R],
) -> asyncio.Future[R]:
    """
    Return a new future resolving to `handler(result, error)` once `source`
    is done, with exactly one of the two arguments being non-None (or both
    None for a None result). A cancelled source cancels the returned future;
    an exception raised by the handler fails it.
    """

    target: asyncio.Future[R] = source.get_loop().create_future()

    def _on_done(done: asyncio.Future[T]) -> None:
        if target.done():
            return
        if done.cancelled():
            target.cancel()
            return
        error = done.exception()
        try:
            value = handler(None if error is not None else done.result(), error)
        except Exception as exc:
            target.set_exception(exc)
        else:
            target.set_result(value)

    source.add_done_callback(_on_done)
    return target

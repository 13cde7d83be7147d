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
import logging
from typing import Any, Awaitable, Callable, Protocol

from typing_extensions import Self

logger = logging.getLogger(__name__)

ReleaseAction = Callable[[], Awaitable[None]]


class ResponseHandler(Protocol):
    """Receives the server responses to one request written on a connection."""

    def on_success(self, metadata: dict[str, Any]) -> None: ...

    def on_failure(self, error: BaseException) -> None: ...

    def on_record(self, fields: list[Any]) -> None: ...


class Connection(Protocol):
    """
    The subset of a pooled server connection used while streaming a result.

    Establishing connections, encoding messages and dispatching responses to
    the handlers is up to the transport layer implementing this protocol.
    """

    @property
    def server_address(self) -> str: ...

    @property
    def server_agent(self) -> str | None: ...

    @property
    def protocol_version(self) -> str | None: ...

    def write_and_flush(self, message: Any, handler: ResponseHandler) -> None: ...

    def release(self) -> Awaitable[None]: ...


def _log_release_failure(future: asyncio.Future[None]) -> None:
    if future.cancelled():
        logger.warning("connection release was cancelled")
        return
    error = future.exception()
    if error is not None:
        logger.warning(f"connection release failed: {error!r}")


class ReleaseOnce:
    """
    A release action that runs at most once, however many times and from
    however many owners it is invoked.

    The first invocation starts the wrapped action and returns a future for its
    completion; all later invocations return that very same future.
    A missing action counts as an already-completed release. A failed release
    is logged, whether or not any owner awaits the returned future.
    """

    def __init__(self, action: ReleaseAction | None = None) -> None:
        self._action = action
        self._future: asyncio.Future[None] | None = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(released={self.released})"

    @property
    def released(self) -> bool:
        return self._future is not None

    def __call__(self) -> asyncio.Future[None]:
        if self._future is not None:
            logger.debug("release already invoked, reusing its outcome")
            return self._future
        if self._action is None:
            self._future = asyncio.get_running_loop().create_future()
            self._future.set_result(None)
        else:
            logger.debug("releasing connection")
            self._future = asyncio.ensure_future(self._action())
            self._future.add_done_callback(_log_release_failure)
        return self._future

    @classmethod
    def for_connection(cls, connection: Connection) -> Self:
        return cls(connection.release)

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
from typing import Any

from graphbolt.exceptions import ProtocolException
from graphbolt.messages import LAST_QUERY_ID

logger = logging.getLogger(__name__)


class RunResponseHandler:
    """
    Collects the response to the request that starts a query.

    On success, the result keys, the query id and the time the first record
    became available are recorded. Either way `run_future` resolves: to None
    on success, to the failure otherwise (as a value, never as an exception),
    so that the run outcome can be inspected before building a cursor.
    """

    _keys: list[str]
    _query_id: int
    _result_available_after: int | None
    run_future: asyncio.Future[BaseException | None]

    def __init__(self, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._keys = []
        self._query_id = LAST_QUERY_ID
        self._result_available_after = None
        _loop = loop if loop is not None else asyncio.get_running_loop()
        self.run_future = _loop.create_future()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(keys={self._keys}, "
            f"query_id={self._query_id}, done={self.run_future.done()})"
        )

    def on_success(self, metadata: dict[str, Any]) -> None:
        self._keys = list(metadata.get("fields") or [])
        qid = metadata.get("qid")
        self._query_id = int(qid) if qid is not None else LAST_QUERY_ID
        t_first = metadata.get("t_first")
        self._result_available_after = int(t_first) if t_first is not None else None
        logger.debug(f"query started, keys {self._keys}, query id {self._query_id}")
        if not self.run_future.done():
            self.run_future.set_result(None)

    def on_failure(self, error: BaseException) -> None:
        logger.debug(f"query failed to start: {error!r}")
        if not self.run_future.done():
            self.run_future.set_result(error)

    def on_record(self, fields: list[Any]) -> None:
        raise ProtocolException("A run response never carries records.")

    def query_keys(self) -> list[str]:
        """The keys of the result, empty until the run succeeded."""

        return list(self._keys)

    @property
    def query_id(self) -> int:
        return self._query_id

    @property
    def result_available_after(self) -> int | None:
        return self._result_available_after

    @property
    def run_error(self) -> BaseException | None:
        """The captured startup failure, if the run has failed."""

        if not self.run_future.done():
            return None
        return self.run_future.result()

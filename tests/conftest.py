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

"""
Main conftest for shared fixtures and fakes of the transport collaborators.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterator
from typing import Any

import pytest
from blockbuster import BlockBuster, blockbuster_ctx
from typing_extensions import override

from graphbolt.connection import ReleaseOnce, ResponseHandler
from graphbolt.constants import UNLIMITED_FETCH_SIZE, QueryType
from graphbolt.handlers.pull_handler import RecordConsumer, SummaryConsumer
from graphbolt.messages import DiscardMessage, PullMessage, Query
from graphbolt.records import Record
from graphbolt.summary import ResultSummary, ServerInfo, SummaryCounters

QUERY = Query("MATCH (n) RETURN n.name", {})
KEYS = ["n.name"]


@pytest.fixture(autouse=True)
def blockbuster() -> Iterator[BlockBuster]:
    with blockbuster_ctx("graphbolt") as bb:
        yield bb


def make_summary(**kwargs: Any) -> ResultSummary:
    return ResultSummary(
        query=kwargs.pop("query", QUERY),
        query_type=kwargs.pop("query_type", QueryType.READ_ONLY),
        counters=kwargs.pop("counters", SummaryCounters()),
        server=kwargs.pop(
            "server", ServerInfo(address="localhost:7687", agent=None, protocol_version="4.4")
        ),
        **kwargs,
    )


class FakeConnection:
    """Records what is written, and how many times it is released."""

    server_address = "localhost:7687"
    server_agent: str | None = "GraphServer/5.0.0"
    protocol_version: str | None = "4.4"

    def __init__(self) -> None:
        self.written: list[tuple[Any, ResponseHandler]] = []
        self.release_count = 0

    @property
    def messages(self) -> list[Any]:
        return [message for message, _ in self.written]

    def write_and_flush(self, message: Any, handler: ResponseHandler) -> None:
        self.written.append((message, handler))

    async def release(self) -> None:
        self.release_count += 1


class FakeRunOutcome:
    def __init__(self, keys: list[str] | None = None) -> None:
        self._keys = list(keys if keys is not None else KEYS)

    def query_keys(self) -> list[str]:
        return list(self._keys)


class ScriptedPullChannel:
    """
    A pull channel that only records how it is driven. Tests push the
    stream signals themselves with `emit_record` and `emit_summary`.

    Injected failures (`on_failure`) are only recorded, unless
    `forward_failures` is set: then they terminate the stream like a
    server failure would.
    """

    def __init__(self, *, forward_failures: bool = False) -> None:
        self.forward_failures = forward_failures
        self.record_consumer: RecordConsumer | None = None
        self.summary_consumer: SummaryConsumer | None = None
        self.installed_record_consumers: list[RecordConsumer] = []
        self.requests: list[int] = []
        self.cancel_count = 0
        self.failures: list[BaseException] = []
        self.release: ReleaseOnce | None = None

    def install_record_consumer(self, record_consumer: RecordConsumer) -> None:
        self.installed_record_consumers.append(record_consumer)
        self.record_consumer = record_consumer

    def install_summary_consumer(self, summary_consumer: SummaryConsumer) -> None:
        self.summary_consumer = summary_consumer

    def request(self, n: int) -> None:
        self.requests.append(n)

    def cancel(self) -> None:
        self.cancel_count += 1

    def on_failure(self, error: BaseException) -> None:
        self.failures.append(error)
        if self.forward_failures:
            self.emit_summary(make_summary(), error)

    def emit_record(self, *values: Any) -> None:
        assert self.record_consumer is not None
        self.record_consumer(Record(KEYS, list(values)), None)

    def emit_has_more(self) -> None:
        assert self.summary_consumer is not None
        self.summary_consumer(None, None)

    def emit_summary(
        self, summary: ResultSummary | None, error: BaseException | None = None
    ) -> None:
        assert self.summary_consumer is not None
        self.summary_consumer(summary, error)
        if self.record_consumer is not None:
            self.record_consumer(None, error)


async def settle() -> None:
    """Let pending done-callbacks on the loop run."""
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
async def drain_loop() -> AsyncIterator[None]:
    """Let the tasks started by a test (such as releases) finish before the loop closes."""
    yield
    await settle()


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def pull_channel() -> ScriptedPullChannel:
    return ScriptedPullChannel()


@pytest.fixture
def run_outcome() -> FakeRunOutcome:
    return FakeRunOutcome()


class ScriptedServer(FakeConnection):
    """
    A connection answering PULL and DISCARD requests from a list of rows,
    asynchronously (on the next loop iterations) like a real server would.

    Attributes:
        failure: if set, the stream fails with it at pull number `fail_at_pull`
            (1-based) instead of delivering records.
    """

    def __init__(
        self,
        rows: list[list[Any]],
        *,
        failure: BaseException | None = None,
        fail_at_pull: int = 1,
    ) -> None:
        super().__init__()
        self.rows = list(rows)
        self.failure = failure
        self.fail_at_pull = fail_at_pull
        self.pulls: list[int] = []

    @override
    def write_and_flush(self, message: Any, handler: ResponseHandler) -> None:
        super().write_and_flush(message, handler)
        loop = asyncio.get_running_loop()
        if isinstance(message, PullMessage):
            self.pulls.append(message.n)
            loop.call_soon(self._stream, message.n, handler)
        elif isinstance(message, DiscardMessage):
            loop.call_soon(self._discard, handler)

    def _stream(self, n: int, handler: ResponseHandler) -> None:
        if self.failure is not None and len(self.pulls) == self.fail_at_pull:
            handler.on_failure(self.failure)
            return
        count = len(self.rows) if n == UNLIMITED_FETCH_SIZE else min(n, len(self.rows))
        batch, self.rows = self.rows[:count], self.rows[count:]
        for row in batch:
            handler.on_record(row)
        if self.rows:
            handler.on_success({"has_more": True})
        else:
            handler.on_success({"type": "r", "t_last": 5, "db": "graph"})

    def _discard(self, handler: ResponseHandler) -> None:
        self.rows = []
        handler.on_success({"type": "r", "t_last": 1, "db": "graph"})

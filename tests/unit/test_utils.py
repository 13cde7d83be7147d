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
Unit tests for the future helpers, the connection release and the logging
utilities.
"""

from __future__ import annotations

import asyncio
import logging

import pytest

from graphbolt.connection import ReleaseOnce
from graphbolt.utils.futures import (
    complete_once,
    completed_future,
    fail_once,
    handle_future,
)
from graphbolt.utils.logging import TRACE, trace

from ..conftest import FakeConnection, settle


def _describe(value: int | None, error: BaseException | None) -> str:
    if error is not None:
        return f"error:{error}"
    return f"value:{value}"


class TestFutures:
    @pytest.mark.describe("test of completing and failing futures once")
    async def test_complete_fail_once(self) -> None:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[int] = loop.create_future()
        assert complete_once(future, 1)
        assert not complete_once(future, 2)
        assert not fail_once(future, ValueError("x"))
        assert await future == 1

        failing: asyncio.Future[int] = loop.create_future()
        assert fail_once(failing, ValueError("first"))
        assert not complete_once(failing, 3)
        with pytest.raises(ValueError, match="first"):
            await failing

        assert await completed_future(loop, "done") == "done"

    @pytest.mark.describe("test of handling the outcome of a future")
    async def test_handle_future(self) -> None:
        loop = asyncio.get_running_loop()
        source: asyncio.Future[int] = loop.create_future()
        handled = handle_future(source, _describe)
        assert not handled.done()
        source.set_result(5)
        assert await handled == "value:5"

        failed: asyncio.Future[int] = loop.create_future()
        failed.set_exception(ValueError("boom"))
        assert await handle_future(failed, _describe) == "error:boom"

    @pytest.mark.describe("test of handling a cancelled or raising future")
    async def test_handle_future_cancel_and_raise(self) -> None:
        loop = asyncio.get_running_loop()
        source: asyncio.Future[int] = loop.create_future()
        handled = handle_future(source, _describe)
        source.cancel()
        await settle()
        assert handled.cancelled()

        def _raising(value: int | None, error: BaseException | None) -> str:
            raise RuntimeError("handler failed")

        raising = handle_future(completed_future(loop, 1), _raising)
        with pytest.raises(RuntimeError, match="handler failed"):
            await raising


class TestReleaseOnce:
    @pytest.mark.describe("test of releasing a connection once across owners")
    async def test_release_once(self) -> None:
        connection = FakeConnection()
        release = ReleaseOnce.for_connection(connection)
        assert not release.released
        first = release()
        second = release()
        assert first is second
        assert release.released
        await first
        await release()
        assert connection.release_count == 1

    @pytest.mark.describe("test of a failed release being logged")
    async def test_release_failure_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        async def _failing_release() -> None:
            raise ConnectionError("pool closed")

        release = ReleaseOnce(_failing_release)
        with caplog.at_level(logging.WARNING, logger="graphbolt.connection"):
            release()
            await settle()
        assert "connection release failed" in caplog.text
        assert "pool closed" in caplog.text
        with pytest.raises(ConnectionError):
            await release()

    @pytest.mark.describe("test of a release with no action")
    async def test_release_no_action(self) -> None:
        release = ReleaseOnce()
        future = release()
        assert future.done()
        assert await future is None
        assert release() is future


class TestLogging:
    @pytest.mark.describe("test of the trace logging level")
    def test_trace_logging(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("graphbolt.test_trace")
        assert logging.getLevelName(TRACE) == "TRACE"
        with caplog.at_level(logging.DEBUG, logger="graphbolt.test_trace"):
            trace(logger, "hidden")
        assert "hidden" not in caplog.text
        with caplog.at_level(TRACE, logger="graphbolt.test_trace"):
            trace(logger, "shown")
        assert "shown" in caplog.text
        assert any(rec.levelname == "TRACE" for rec in caplog.records)

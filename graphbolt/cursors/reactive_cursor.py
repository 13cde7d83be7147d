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
from typing import Protocol

from graphbolt.connection import ReleaseOnce
from graphbolt.constants import MAX_DEMAND, UNLIMITED_FETCH_SIZE
from graphbolt.cursors.cursor import RecordConsumerStatus, discard_record_consumer
from graphbolt.exceptions import (
    ResultConsumedException,
    TransactionNestingException,
)
from graphbolt.handlers.pull_handler import RecordConsumer, SummaryConsumer
from graphbolt.summary import ResultSummary
from graphbolt.utils.futures import (
    complete_once,
    completed_future,
    fail_once,
    handle_future,
)

logger = logging.getLogger(__name__)


class RunOutcome(Protocol):
    """The already-resolved response to the request that started the query."""

    def query_keys(self) -> list[str]: ...


class PullChannel(Protocol):
    """Turns demand into pull/discard requests and delivers the stream."""

    def install_record_consumer(self, record_consumer: RecordConsumer) -> None: ...

    def install_summary_consumer(self, summary_consumer: SummaryConsumer) -> None: ...

    def request(self, n: int) -> None: ...

    def cancel(self) -> None: ...

    def on_failure(self, error: BaseException) -> None: ...

    @property
    def release(self) -> ReleaseOnce | None: ...

class ReactiveResultCursor:
    """
    A demand-driven cursor over the records of a query that has already been
    started on the server, successfully or not.

    Records flow only after a record consumer is installed and demand is
    declared with `request`; the consumer is invoked once per record and once
    more, with the terminal error or None, at the end of the stream.
    Alternatively, the summary can be requested straight away: the records
    are then discarded on the server.

    Whatever the path taken (streaming to the end, discarding, cancelling,
    rolling back, or failing) the outcome of the query resolves exactly once,
    to a summary, to a failure, or to None for a rolled-back result. A failure
    is reported to a single caller: whoever first asks for it through
    `get_run_error`, `summary_async` or the discard path.

    A cursor cannot be reused: once the result is consumed, installing a
    consumer or requesting records raises `ResultConsumedException`.

    This class is not meant to be instantiated by applications, which rather
    go through a `ReactiveResult`. All deferred results are asyncio futures
    bound to the loop the cursor is created on.

    Args:
        run_handler: provides the result keys.
        pull_handler: the channel streaming the records.
        run_error: the failure of the run request, if it failed.
        release: the connection release, run by `rollback`. It must be the
            `ReleaseOnce` shared with the pull handler, so that the connection
            is released only once overall. Defaults to the release of the
            pull handler (none, for a handler that does not own the connection).
        loop: the event loop. Defaults to the running loop.

    Raises:
        TypeError: if `release` is not a `ReleaseOnce`.
        ValueError: if `release` is not the release of the pull handler.
    """

    _consumer_status: RecordConsumerStatus
    _summary_future: asyncio.Future[ResultSummary | None]
    _run_error_surfaced: bool
    _summary_future_exposed: bool
    _stream_error_delivered: bool
    _result_consumed: bool

    def __init__(
        self,
        run_handler: RunOutcome,
        pull_handler: PullChannel,
        *,
        run_error: BaseException | None = None,
        release: ReleaseOnce | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if run_handler is None or pull_handler is None:
            raise ValueError("A cursor requires both a run handler and a pull handler.")
        self._run_handler = run_handler
        self._pull_handler = pull_handler
        self._run_error = run_error
        self._release = self._shared_release(release, pull_handler.release)
        self._loop = loop if loop is not None else asyncio.get_running_loop()
        self._summary_future = self._loop.create_future()
        self._summary_future.add_done_callback(self._log_resolution)
        self._run_error_surfaced = False
        self._summary_future_exposed = False
        self._stream_error_delivered = False
        self._result_consumed = False
        self._consumer_status = RecordConsumerStatus.NOT_INSTALLED
        self._pull_handler.install_summary_consumer(self._on_summary)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self._consumer_status.value}, "
            f"done={self.is_done()}, consumed={self._result_consumed})"
        )

    @property
    def consumer_status(self) -> RecordConsumerStatus:
        return self._consumer_status

    @property
    def result_consumed(self) -> bool:
        return self._result_consumed

    def keys(self) -> list[str]:
        """The result keys, i.e. the column names, in order."""

        return self._run_handler.query_keys()

    def install_record_consumer(self, record_consumer: RecordConsumer) -> None:
        """
        Install the callback receiving the records, if none is installed yet.

        If the query failed to start, the failure is pushed into the record
        stream right away.

        Args:
            record_consumer: a callable invoked as (record, None) for each
                record, then as (None, error-or-None) at the end of the stream.

        Raises:
            ResultConsumedException: if the result has already been consumed.
        """

        if self._result_consumed:
            raise ResultConsumedException()
        if self._consumer_status.is_installed:
            return
        self._consumer_status = (
            RecordConsumerStatus.DISCARD_INSTALLED
            if record_consumer is discard_record_consumer
            else RecordConsumerStatus.INSTALLED
        )
        logger.debug(f"record consumer installed: {self._consumer_status.value}")
        self._pull_handler.install_record_consumer(record_consumer)
        self._assert_run_completed_successfully()

    def request(self, n: int) -> None:
        """
        Declare demand for up to `n` more records. Requesting `MAX_DEMAND`
        records (or more) means requesting all of them.

        Raises:
            ResultConsumedException: if the result has already been consumed.
        """

        if self._result_consumed:
            raise ResultConsumedException()
        if n >= MAX_DEMAND:
            n = UNLIMITED_FETCH_SIZE
        self._pull_handler.request(n)

    def cancel(self) -> None:
        """
        Ask for the stream to stop as soon as possible. The outcome still
        resolves later, once the server acknowledges the end of the stream.
        """

        self._pull_handler.cancel()

    def discard_all_failure_async(self) -> asyncio.Future[BaseException | None]:
        """
        Bring the stream to its end, discarding any unread record, and resolve
        to the failure of the query, if any.

        A failure that was already reported elsewhere (through `get_run_error`,
        `summary_async`, or the record consumer) resolves to None instead.
        """

        return handle_future(self._summary_stage(), self._unreported_failure)

    def pull_all_failure_async(self) -> asyncio.Future[BaseException | None]:
        """
        Like `discard_all_failure_async`, but refuse to interfere with a stream
        that a consumer is still reading: in that case resolve right away to a
        `TransactionNestingException`.
        """

        if self._consumer_status.is_installed and not self.is_done():
            return completed_future(self._loop, TransactionNestingException())
        # either the streaming never started or it is over: safe to discard
        return self.discard_all_failure_async()

    def summary_async(self) -> asyncio.Future[ResultSummary | None]:
        """
        Return a future for the outcome of the query: the summary, or None if
        the result was rolled back. The future fails if the query failed.

        If the stream is not over, the remaining records are discarded.
        Cancelling the returned future does not affect the cursor.
        """

        self._summary_future_exposed = True
        return asyncio.shield(self._summary_stage())

    def is_done(self) -> bool:
        return self._summary_future.done()

    def get_run_error(self) -> BaseException | None:
        """Return the failure of the run request, if any, marking it as reported."""

        self._run_error_surfaced = True
        return self._run_error

    def rollback(self) -> asyncio.Future[None]:
        """
        Abandon the result without a summary: the outcome resolves to None and
        the connection is released (unless already released by another owner).
        """

        logger.info("rolling back result and releasing the connection")
        complete_once(self._summary_future, None)
        self._result_consumed = True
        return self._release()

    @staticmethod
    def _shared_release(
        release: ReleaseOnce | None, handler_release: ReleaseOnce | None
    ) -> ReleaseOnce:
        if release is None:
            return handler_release if handler_release is not None else ReleaseOnce()
        if not isinstance(release, ReleaseOnce):
            raise TypeError(
                "The release of a cursor must be a ReleaseOnce shared with its pull "
                f"handler, not {release!r}."
            )
        if handler_release is not None and release is not handler_release:
            raise ValueError(
                "The release of a cursor must be the same ReleaseOnce as the one "
                "of its pull handler."
            )
        return release

    def _summary_stage(self) -> asyncio.Future[ResultSummary | None]:
        if not self.is_done() and not self._result_consumed:
            logger.info("summary requested before the end of the stream, discarding records")
            self.install_record_consumer(discard_record_consumer)
            self.cancel()
            self._result_consumed = True
        return self._summary_future

    def _unreported_failure(
        self, summary: ResultSummary | None, error: BaseException | None
    ) -> BaseException | None:
        if error is None:
            return None
        if self._summary_future_exposed or self._stream_error_delivered:
            return None
        if error is self._run_error and self._run_error_surfaced:
            return None
        return error

    def _assert_run_completed_successfully(self) -> None:
        if self._run_error is not None:
            self._pull_handler.on_failure(self._run_error)

    def _on_summary(
        self, summary: ResultSummary | None, error: BaseException | None
    ) -> None:
        if error is not None:
            if self._consumer_status == RecordConsumerStatus.INSTALLED:
                # the record consumer gets this error too
                self._stream_error_delivered = True
            fail_once(self._summary_future, error)
        elif summary is not None:
            complete_once(self._summary_future, summary)
        # (None, None) only signals that a batch ended with more records left

    def _log_resolution(self, future: asyncio.Future[ResultSummary | None]) -> None:
        if future.cancelled():
            logger.debug("result outcome cancelled")
            return
        error = future.exception()
        if error is not None:
            logger.debug(f"result outcome resolved with failure: {error!r}")
        else:
            logger.debug("result outcome resolved")

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

import logging
from enum import Enum
from typing import Any, Callable, Optional

from graphbolt.connection import Connection, ReleaseOnce
from graphbolt.constants import MAX_DEMAND, UNLIMITED_FETCH_SIZE
from graphbolt.exceptions import ProtocolException
from graphbolt.handlers.completion import (
    BookmarkHolder,
    PullResponseCompletionListener,
    SessionPullResponseCompletionListener,
    TerminableTransaction,
    TransactionPullResponseCompletionListener,
)
from graphbolt.handlers.run_handler import RunResponseHandler
from graphbolt.messages import DiscardMessage, PullMessage, Query
from graphbolt.records import Record
from graphbolt.summary import ResultSummary, extract_summary
from graphbolt.utils.logging import trace
from graphbolt.utils.options import FullStreamOptions, defaultStreamOptions

# Invoked once per record as (record, None), then once as (None, error-or-None)
# at the end of the stream.
RecordConsumer = Callable[[Optional[Record], Optional[BaseException]], None]
# Invoked with (None, None) after each batch that leaves more records on the
# server, then once as (summary, error-or-None) when the stream is over.
SummaryConsumer = Callable[[Optional[ResultSummary], Optional[BaseException]], None]

logger = logging.getLogger(__name__)


class PullState(Enum):
    """
    This enum expresses the possible states of a `BasicPullResponseHandler`.

    Values:
        READY: no batch is in flight; records can be requested.
        STREAMING: a batch has been requested and records are arriving.
        CANCELLED: the caller gave up on the stream; remaining records
            are discarded on the server.
        SUCCEEDED: the stream completed (terminal).
        FAILURE: the stream failed (terminal).
    """

    READY = "ready"
    STREAMING = "streaming"
    CANCELLED = "cancelled"
    SUCCEEDED = "succeeded"
    FAILURE = "failure"

    @property
    def is_terminal(self) -> bool:
        return self in (PullState.SUCCEEDED, PullState.FAILURE)


class BasicPullResponseHandler:
    """
    Turns demand for records into PULL/DISCARD requests on a connection and
    dispatches the responses to a record consumer and a summary consumer.

    Records are requested in batches: while a batch is streaming, further
    demand is accumulated and flushed as a new PULL once the server reports
    that the batch is over and more records are available. Cancelling makes
    the handler discard whatever is left on the server.

    Both consumers must be installed before the stream is driven in any way.
    On termination the summary consumer is notified first, so that a summary
    is available by the time the record consumer sees the end of the stream;
    after that, the handler drops its references to the consumers.

    The connection release run by the completion listener, if the handler owns
    the connection (session queries), is exposed as `release` so that the cursor
    can share it.

    This class is not meant to be used directly by applications: it is driven
    by a `ReactiveResultCursor`.
    """

    _state: PullState
    _to_request: int
    _delivered: int
    _record_consumer: RecordConsumer | None
    _summary_consumer: SummaryConsumer | None

    def __init__(
        self,
        *,
        query: Query,
        run_handler: RunResponseHandler,
        connection: Connection,
        completion_listener: PullResponseCompletionListener,
        options: FullStreamOptions | None = None,
        release: ReleaseOnce | None = None,
    ) -> None:
        self.query = query
        self.run_handler = run_handler
        self.connection = connection
        self.completion_listener = completion_listener
        self.options = options if options is not None else defaultStreamOptions()
        self.release = release
        self._state = PullState.READY
        self._to_request = 0
        self._delivered = 0
        self._record_consumer = None
        self._summary_consumer = None

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}("{self.query.text}", '
            f"{self._state.value}, delivered so far: {self._delivered})"
        )

    @property
    def state(self) -> PullState:
        return self._state

    def is_done(self) -> bool:
        return self._state.is_terminal

    def install_record_consumer(self, record_consumer: RecordConsumer) -> None:
        if self._record_consumer is not None:
            raise ProtocolException("Record consumer already installed.")
        self._record_consumer = record_consumer

    def install_summary_consumer(self, summary_consumer: SummaryConsumer) -> None:
        if self._summary_consumer is not None:
            raise ProtocolException("Summary consumer already installed.")
        self._summary_consumer = summary_consumer

    def on_success(self, metadata: dict[str, Any]) -> None:
        self._ensure_consumers_installed()
        previous = self._state
        if previous.is_terminal:
            logger.debug(f"ignoring success response in state {previous.value}")
            self._state = PullState.SUCCEEDED
            return

        has_more = bool(metadata.get("has_more", False))
        if previous == PullState.STREAMING and has_more:
            self._state = PullState.READY
        elif previous == PullState.CANCELLED and has_more:
            self._discard_all()
        else:
            self._state = PullState.SUCCEEDED
        logger.debug(
            f"pull success (has_more={has_more}): "
            f"{previous.value} -> {self._state.value}"
        )

        if self._state == PullState.SUCCEEDED:
            self.completion_listener.after_success(metadata)
            error: BaseException | None = None
            try:
                summary = self._extract_summary(metadata)
            except ProtocolException as exc:
                summary = self._extract_summary({})
                error = exc
            self._complete(summary, error)
        elif self._state == PullState.READY:
            if self._to_request > 0 or self._to_request == UNLIMITED_FETCH_SIZE:
                pending = self._to_request
                self._to_request = 0
                self.request(pending)
            if self._summary_consumer is not None:
                self._summary_consumer(None, None)

    def on_failure(self, error: BaseException) -> None:
        self._ensure_consumers_installed()
        if self._state.is_terminal:
            logger.debug(f"ignoring failure in state {self._state.value}: {error!r}")
            self._state = PullState.FAILURE
            return
        logger.debug(f"pull failure in state {self._state.value}: {error!r}")
        self._state = PullState.FAILURE
        self.completion_listener.after_failure(error)
        self._complete(self._extract_summary({}), error)

    def on_record(self, fields: list[Any]) -> None:
        self._ensure_consumers_installed()
        if self._state != PullState.STREAMING or self._record_consumer is None:
            trace(logger, f"dropping record in state {self._state.value}")
            return
        record = Record(self.run_handler.query_keys(), fields)
        trace(logger, f"delivering record {record!r}")
        self._record_consumer(record, None)
        self._delivered += 1
        if 0 < self.options.max_record_count <= self._delivered:
            logger.info(
                f"max record count ({self.options.max_record_count}) reached, "
                "discarding the rest of the stream"
            )
            self.cancel()

    def request(self, n: int) -> None:
        """
        Declare demand for `n` more records, or for all of them if `n` is
        `UNLIMITED_FETCH_SIZE` (or larger than `MAX_DEMAND`).
        """

        self._ensure_consumers_installed()
        if n > MAX_DEMAND:
            n = UNLIMITED_FETCH_SIZE
        if n != UNLIMITED_FETCH_SIZE and n <= 0:
            raise ProtocolException(
                "Cannot request record amount that is less than or equal to 0. "
                f"Request amount: {n}"
            )
        if self._state == PullState.READY:
            self._state = PullState.STREAMING
            self._write_pull(n)
        elif self._state == PullState.STREAMING:
            self._add_to_request(n)
        else:
            logger.debug(f"ignoring request({n}) in state {self._state.value}")

    def cancel(self) -> None:
        self._ensure_consumers_installed()
        if self._state == PullState.READY:
            self._state = PullState.CANCELLED
            self._discard_all()
        elif self._state == PullState.STREAMING:
            # the discard goes out once the in-flight batch is over
            self._state = PullState.CANCELLED
        logger.debug(f"cancel requested, now {self._state.value}")

    def _add_to_request(self, to_add: int) -> None:
        if self._to_request == UNLIMITED_FETCH_SIZE:
            return
        if to_add == UNLIMITED_FETCH_SIZE:
            self._to_request = UNLIMITED_FETCH_SIZE
            return
        self._to_request = min(self._to_request + to_add, MAX_DEMAND)

    def _write_pull(self, n: int) -> None:
        logger.debug(f"writing PULL {n} for query {self.run_handler.query_id}")
        self.connection.write_and_flush(
            PullMessage(n=n, query_id=self.run_handler.query_id), self
        )

    def _discard_all(self) -> None:
        logger.debug(f"writing DISCARD all for query {self.run_handler.query_id}")
        self.connection.write_and_flush(
            DiscardMessage.discard_all(self.run_handler.query_id), self
        )

    def _extract_summary(self, metadata: dict[str, Any]) -> ResultSummary:
        return extract_summary(
            self.query,
            self.connection,
            self.run_handler.result_available_after,
            metadata,
        )

    def _ensure_consumers_installed(self) -> None:
        if self.is_done():
            return
        if self._record_consumer is None or self._summary_consumer is None:
            raise ProtocolException(
                "Access record stream without record consumer and/or summary "
                f"consumer. Record consumer={self._record_consumer}, "
                f"Summary consumer={self._summary_consumer}"
            )

    def _complete(self, summary: ResultSummary, error: BaseException | None) -> None:
        record_consumer, summary_consumer = self._record_consumer, self._summary_consumer
        self._record_consumer = None
        self._summary_consumer = None
        if summary_consumer is not None:
            summary_consumer(summary, error)
        if record_consumer is not None:
            record_consumer(None, error)


def new_pull_handler(
    query: Query,
    run_handler: RunResponseHandler,
    connection: Connection,
    *,
    release: ReleaseOnce | None = None,
    bookmark_holder: BookmarkHolder | None = None,
    tx: TerminableTransaction | None = None,
    options: FullStreamOptions | None = None,
) -> BasicPullResponseHandler:
    """
    Create a pull handler for a query, with the completion listener suited to
    the query owner: the transaction if one is given, the session otherwise.

    Args:
        query: the query whose records are to be pulled.
        run_handler: the handler that collected the run response.
        connection: the connection the query runs on.
        release: for session queries, the (shared) connection release action.
            Defaults to releasing `connection`. Either way it ends up as the
            `release` of the handler; transaction queries have none.
        bookmark_holder: for session queries, where to store the bookmark.
        tx: for transaction queries, the owning transaction.
        options: the stream options. Defaults to the grand defaults.

    Returns:
        a BasicPullResponseHandler.
    """

    completion_listener: PullResponseCompletionListener
    if tx is not None:
        completion_listener = TransactionPullResponseCompletionListener(tx)
        release = None
    else:
        if release is None:
            release = ReleaseOnce.for_connection(connection)
        completion_listener = SessionPullResponseCompletionListener(
            release,
            bookmark_holder if bookmark_holder is not None else BookmarkHolder(),
        )
    return BasicPullResponseHandler(
        query=query,
        run_handler=run_handler,
        connection=connection,
        completion_listener=completion_listener,
        options=options,
        release=release,
    )

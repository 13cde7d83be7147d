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
from typing import AsyncIterator, Optional, Tuple

from graphbolt.constants import UNLIMITED_FETCH_SIZE
from graphbolt.cursors import ReactiveResultCursor
from graphbolt.exceptions import ResultConsumedException
from graphbolt.records import Record
from graphbolt.summary import ResultSummary
from graphbolt.utils.meta import check_deprecated_alias
from graphbolt.utils.options import (
    FullStreamOptions,
    StreamOptions,
    _validate_fetch_size,
    defaultStreamOptions,
)

logger = logging.getLogger(__name__)

_Signal = Tuple[Optional[Record], Optional[BaseException]]


class ReactiveResult:
    """
    The result of a query, exposing its records as an asynchronous stream
    with backpressure: records are pulled from the server in batches, and a
    new batch is requested only once the previous one has been handed over
    to the code iterating over the records.

    The records can be iterated over once. Asking for the summary with
    `consume` before (or while) iterating discards the records not read yet.

    Args:
        cursor: the cursor over the query result.
        stream_options: settings overriding the defaults for this result,
            such as the batch size (`fetch_size`).

    Example:
        >>> result = ReactiveResult(cursor)
        >>> result.keys()
        ['n.name']
        >>> async for record in result.records():
        ...     print(record["n.name"])
        ...
        Alice
        Bob
        >>> summary = await result.consume()
        >>> summary.counters.nodes_created
        0
    """

    def __init__(
        self,
        cursor: ReactiveResultCursor,
        *,
        stream_options: FullStreamOptions | StreamOptions | None = None,
    ) -> None:
        self._cursor = cursor
        if isinstance(stream_options, FullStreamOptions):
            self.stream_options = stream_options
        else:
            self.stream_options = defaultStreamOptions().with_override(stream_options)
        self._records_started = False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._cursor!r})"

    def keys(self) -> list[str]:
        """
        The keys of the result, i.e. the column names, in order.

        Raises:
            the failure of the query, if it failed to start.
        """

        run_error = self._cursor.get_run_error()
        if run_error is not None:
            raise run_error
        return self._cursor.keys()

    def records(
        self,
        fetch_size: int | None = None,
        *,
        batch_size: int | None = None,
    ) -> AsyncIterator[Record]:
        """
        Iterate over the records of the result.

        Args:
            fetch_size: how many records to request from the server at a time;
                `UNLIMITED_FETCH_SIZE` (-1) requests all of them at once.
                Defaults to the `fetch_size` of the stream options.
            batch_size: *DEPRECATED* (removal in 2.0). An alias for `fetch_size`,
                accepted for callers still using the batch naming.

        Returns:
            an asynchronous iterator over the records. Leaving the iteration
            early cancels the stream.

        Raises:
            ResultConsumedException: if the records were already iterated over,
                or the result has been consumed.
            the failure of the query, from the iterator, if the stream fails.
        """

        _fetch_size = check_deprecated_alias(
            fetch_size,
            batch_size,
            new_name="fetch_size",
            deprecated_name="batch_size",
            deprecated_in="1.0.0",
            removed_in="2.0.0",
        )
        if _fetch_size is None:
            _fetch_size = self.stream_options.fetch_size
        _validate_fetch_size(_fetch_size)
        if self._records_started:
            raise ResultConsumedException(
                "The records of this result are already being iterated over."
            )
        self._records_started = True

        signals: asyncio.Queue[_Signal] = asyncio.Queue()
        self._cursor.install_record_consumer(
            lambda record, error: signals.put_nowait((record, error))
        )
        return self._iterate(signals, _fetch_size)

    async def _iterate(
        self,
        signals: asyncio.Queue[_Signal],
        fetch_size: int,
    ) -> AsyncIterator[Record]:
        outstanding = 0
        finished = False
        try:
            while True:
                if signals.empty() and outstanding == 0:
                    logger.debug(f"requesting a batch of {fetch_size} records")
                    self._cursor.request(fetch_size)
                    # with unlimited demand this never drops back to zero
                    outstanding = fetch_size
                record, error = await signals.get()
                if record is None:
                    finished = True
                    if error is not None:
                        raise error
                    return
                if fetch_size != UNLIMITED_FETCH_SIZE:
                    outstanding -= 1
                yield record
        finally:
            if not finished:
                logger.debug("record iteration left early, cancelling the stream")
                self._cursor.cancel()

    async def to_list(self) -> list[Record]:
        """Collect all records of the result into a list."""

        return [record async for record in self.records()]

    async def consume(self) -> ResultSummary | None:
        """
        Wait for the end of the query and return its summary, discarding the
        records not read yet. A rolled-back result has no summary (None).

        Raises:
            the failure of the query, if it failed.
        """

        return await self._cursor.summary_async()

    def is_open(self) -> bool:
        """Whether the result can still produce records or a summary."""

        return not self._cursor.is_done()

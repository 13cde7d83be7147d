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
Listeners notified when a record stream reaches a terminal state, before the
stream consumers are. What has to happen depends on who owns the stream:
an auto-commit query run by a session, or a query in an explicit transaction.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from graphbolt.connection import ReleaseOnce

logger = logging.getLogger(__name__)


class PullResponseCompletionListener(Protocol):
    def after_success(self, metadata: dict[str, Any]) -> None: ...

    def after_failure(self, error: BaseException) -> None: ...


class BookmarkHolder:
    """Keeps the last bookmark produced by the queries of a session."""

    bookmark: str | None

    def __init__(self, bookmark: str | None = None) -> None:
        self.bookmark = bookmark

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.bookmark!r})"


class TerminableTransaction(Protocol):
    def mark_terminated(self, error: BaseException) -> None: ...


class SessionPullResponseCompletionListener:
    """
    For auto-commit queries: the connection goes back to the pool as soon as
    the stream is over, and a successful stream updates the session bookmark.
    The release is not awaited here: a failure to release is logged by the
    `ReleaseOnce` itself.
    """

    def __init__(
        self,
        release: ReleaseOnce,
        bookmark_holder: BookmarkHolder,
    ) -> None:
        self.release = release
        self.bookmark_holder = bookmark_holder

    def after_success(self, metadata: dict[str, Any]) -> None:
        bookmark = metadata.get("bookmark")
        if bookmark is not None:
            self.bookmark_holder.bookmark = bookmark
        self.release()

    def after_failure(self, error: BaseException) -> None:
        self.release()


class TransactionPullResponseCompletionListener:
    """
    For queries in an explicit transaction: the connection belongs to the
    transaction, which is marked as terminated on any stream failure (the
    server forgets about a transaction after its first error, so it can only
    be rolled back from then on).
    """

    def __init__(self, tx: TerminableTransaction) -> None:
        self.tx = tx

    def after_success(self, metadata: dict[str, Any]) -> None:
        pass

    def after_failure(self, error: BaseException) -> None:
        logger.info(f"marking transaction as terminated after failure: {error!r}")
        self.tx.mark_terminated(error)

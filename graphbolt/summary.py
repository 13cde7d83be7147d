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

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from graphbolt.constants import QueryType
from graphbolt.exceptions import ProtocolException
from graphbolt.messages import Query

if TYPE_CHECKING:
    from graphbolt.connection import Connection


@dataclass(frozen=True)
class SummaryCounters:
    """
    The update statistics reported by the server for a query.

    A counter missing from the server metadata is zero.
    """

    nodes_created: int = 0
    nodes_deleted: int = 0
    relationships_created: int = 0
    relationships_deleted: int = 0
    properties_set: int = 0
    labels_added: int = 0
    labels_removed: int = 0
    indexes_added: int = 0
    indexes_removed: int = 0
    constraints_added: int = 0
    constraints_removed: int = 0
    system_updates: int = 0
    _contains_updates: bool | None = field(default=None, repr=False)
    _contains_system_updates: bool | None = field(default=None, repr=False)

    @property
    def contains_updates(self) -> bool:
        """Whether the query updated the graph (as opposed to the system)."""

        if self._contains_updates is not None:
            return self._contains_updates
        return any(
            (
                self.nodes_created,
                self.nodes_deleted,
                self.relationships_created,
                self.relationships_deleted,
                self.properties_set,
                self.labels_added,
                self.labels_removed,
                self.indexes_added,
                self.indexes_removed,
                self.constraints_added,
                self.constraints_removed,
            )
        )

    @property
    def contains_system_updates(self) -> bool:
        if self._contains_system_updates is not None:
            return self._contains_system_updates
        return self.system_updates > 0

    @staticmethod
    def from_stats(stats: dict[str, Any] | None) -> SummaryCounters:
        """Parse the "stats" section of the summary metadata."""

        if not stats:
            return SummaryCounters()

        def _int(key: str) -> int:
            return int(stats.get(key, 0))

        return SummaryCounters(
            nodes_created=_int("nodes-created"),
            nodes_deleted=_int("nodes-deleted"),
            relationships_created=_int("relationships-created"),
            relationships_deleted=_int("relationships-deleted"),
            properties_set=_int("properties-set"),
            labels_added=_int("labels-added"),
            labels_removed=_int("labels-removed"),
            indexes_added=_int("indexes-added"),
            indexes_removed=_int("indexes-removed"),
            constraints_added=_int("constraints-added"),
            constraints_removed=_int("constraints-removed"),
            system_updates=_int("system-updates"),
            _contains_updates=stats.get("contains-updates"),
            _contains_system_updates=stats.get("contains-system-updates"),
        )


@dataclass(frozen=True)
class Notification:
    """A notification (e.g. a performance hint) attached to a query summary."""

    code: str
    title: str
    description: str
    severity: str | None = None
    position: dict[str, int] | None = field(default=None, hash=False)

    @staticmethod
    def from_dict(raw: dict[str, Any]) -> Notification:
        return Notification(
            code=str(raw.get("code", "")),
            title=str(raw.get("title", "")),
            description=str(raw.get("description", "")),
            severity=raw.get("severity"),
            position=raw.get("position"),
        )


@dataclass(frozen=True)
class ServerInfo:
    """Where the query ran: server address, agent string and protocol version."""

    address: str
    agent: str | None
    protocol_version: str | None


@dataclass(frozen=True)
class ResultSummary:
    """
    The terminal metadata describing a completed query execution, distinct
    from the records themselves.

    Attributes:
        query: the query this summary is about.
        query_type: the kind of query, if reported by the server.
        counters: the update statistics.
        server: information about the server that ran the query.
        database: the name of the database the query ran against, if reported.
        result_available_after: milliseconds from submitting the query to the
            first record being available, if reported.
        result_consumed_after: milliseconds from the first record being
            available to the stream being consumed, if reported.
        notifications: notifications attached by the server.
        bookmark: the bookmark produced by the query, if any.

    Summaries can be hashed: the notifications do not take part in the hash.
    """

    query: Query
    query_type: QueryType | None
    counters: SummaryCounters
    server: ServerInfo
    database: str | None = None
    result_available_after: int | None = None
    result_consumed_after: int | None = None
    notifications: list[Notification] = field(default_factory=list, hash=False)
    bookmark: str | None = None


def _query_type_from_metadata(metadata: dict[str, Any]) -> QueryType | None:
    raw_type = metadata.get("type")
    if raw_type is None:
        return None
    try:
        return QueryType.coerce(raw_type)
    except ValueError:
        raise ProtocolException(f"Unexpected query type '{raw_type}' in summary.") from None


def _database_from_metadata(metadata: dict[str, Any]) -> str | None:
    raw_db = metadata.get("db")
    if isinstance(raw_db, dict):
        return raw_db.get("name")
    return raw_db


def extract_summary(
    query: Query,
    connection: Connection,
    result_available_after: int | None,
    metadata: dict[str, Any],
) -> ResultSummary:
    """
    Build the summary of a query out of the metadata of its final success
    response.

    Args:
        query: the query the summary is about.
        connection: the connection the query ran on, for the server information.
        result_available_after: the value collected from the run response.
        metadata: the metadata of the final success response. An empty dict
            yields an "empty" summary, as used for failed streams.

    Returns:
        a ResultSummary.

    Raises:
        ProtocolException: if the metadata reports an unknown query type.
    """

    t_last = metadata.get("t_last")
    return ResultSummary(
        query=query,
        query_type=_query_type_from_metadata(metadata),
        counters=SummaryCounters.from_stats(metadata.get("stats")),
        server=ServerInfo(
            address=connection.server_address,
            agent=connection.server_agent,
            protocol_version=connection.protocol_version,
        ),
        database=_database_from_metadata(metadata),
        result_available_after=result_available_after,
        result_consumed_after=int(t_last) if t_last is not None else None,
        notifications=[
            Notification.from_dict(raw_n) for raw_n in metadata.get("notifications") or []
        ],
        bookmark=metadata.get("bookmark"),
    )

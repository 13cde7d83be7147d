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
Descriptors of the requests sent to the server while running a query and
streaming its results. Encoding them on the wire is the transport's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# a query id that refers to the last query run on the connection
LAST_QUERY_ID = -1

# the "n" of a PULL/DISCARD message meaning "all remaining records"
ALL_RECORDS = -1


@dataclass(frozen=True)
class Query:
    """
    A query text with its parameters.

    Attributes:
        text: the query text.
        parameters: a dictionary of parameters referenced in the text.
    """

    text: str
    parameters: dict[str, Any] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class PullMessage:
    """Request the next `n` records (or all of them, if `n` is -1)."""

    n: int
    query_id: int = LAST_QUERY_ID

    @property
    def name(self) -> str:
        return "PULL"


@dataclass(frozen=True)
class DiscardMessage:
    """Ask the server to drop the next `n` records (or all of them)."""

    n: int
    query_id: int = LAST_QUERY_ID

    @property
    def name(self) -> str:
        return "DISCARD"

    @staticmethod
    def discard_all(query_id: int = LAST_QUERY_ID) -> DiscardMessage:
        return DiscardMessage(n=ALL_RECORDS, query_id=query_id)

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

from graphbolt.utils.str_enum import StrEnum

# Internal marker for "stream everything": forwarded to the pull handler
# in place of a numeric demand.
UNLIMITED_FETCH_SIZE = -1

# The largest numeric demand a caller can express. Requesting exactly this
# amount is normalized to UNLIMITED_FETCH_SIZE.
MAX_DEMAND = 2**63 - 1


class QueryType(StrEnum):
    """
    The kind of query, as reported by the server in the summary metadata.

    Values:
        READ_ONLY: the query only reads data.
        READ_WRITE: the query reads and writes data.
        WRITE_ONLY: the query only writes data.
        SCHEMA_WRITE: the query changes the schema.
    """

    READ_ONLY = "r"
    READ_WRITE = "rw"
    WRITE_ONLY = "w"
    SCHEMA_WRITE = "s"

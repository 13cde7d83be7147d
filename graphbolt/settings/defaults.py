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

# Defaults/settings for record streaming
DEFAULT_FETCH_SIZE = 1000
# a non-positive value means no cap on the number of records delivered
DEFAULT_MAX_RECORD_COUNT = -1

# Error message templates
RESULT_CONSUMED_MESSAGE = (
    "Cannot access records on this result any more as the result has already "
    "been consumed or the query runner where the result is created has "
    "already been closed."
)
TRANSACTION_NESTING_MESSAGE = (
    "You cannot run another query or begin a new transaction in the same "
    "session before you've fully consumed the previous run result."
)

# Server error classification
TRANSIENT_ERROR_CLASSIFICATION = "TransientError"

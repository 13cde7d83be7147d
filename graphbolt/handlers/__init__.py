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

from graphbolt.handlers.completion import (
    BookmarkHolder,
    SessionPullResponseCompletionListener,
    TransactionPullResponseCompletionListener,
)
from graphbolt.handlers.pull_handler import (
    BasicPullResponseHandler,
    PullState,
    RecordConsumer,
    SummaryConsumer,
    new_pull_handler,
)
from graphbolt.handlers.run_handler import RunResponseHandler

__all__ = [
    "BasicPullResponseHandler",
    "BookmarkHolder",
    "PullState",
    "RecordConsumer",
    "RunResponseHandler",
    "SessionPullResponseCompletionListener",
    "SummaryConsumer",
    "TransactionPullResponseCompletionListener",
    "new_pull_handler",
]

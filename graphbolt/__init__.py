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

__version__: str = "1.0.0"


import graphbolt.constants  # noqa: E402, F401
from graphbolt.cursors import ReactiveResultCursor, RecordConsumerStatus  # noqa: E402
from graphbolt.exceptions import (  # noqa: E402
    ResultConsumedException,
    TransactionNestingException,
)
from graphbolt.handlers import (  # noqa: E402
    BasicPullResponseHandler,
    RunResponseHandler,
    new_pull_handler,
)
from graphbolt.messages import Query  # noqa: E402
from graphbolt.reactive import ReactiveResult  # noqa: E402
from graphbolt.records import Record  # noqa: E402
from graphbolt.summary import ResultSummary  # noqa: E402
from graphbolt.utils.options import FullStreamOptions, StreamOptions  # noqa: E402

__all__ = [
    "BasicPullResponseHandler",
    "FullStreamOptions",
    "Query",
    "ReactiveResult",
    "ReactiveResultCursor",
    "Record",
    "RecordConsumerStatus",
    "ResultConsumedException",
    "ResultSummary",
    "RunResponseHandler",
    "StreamOptions",
    "TransactionNestingException",
    "__version__",
    "new_pull_handler",
]

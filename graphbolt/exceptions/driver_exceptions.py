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

from dataclasses import dataclass
from typing import Any

from graphbolt.settings.defaults import (
    RESULT_CONSUMED_MESSAGE,
    TRANSACTION_NESTING_MESSAGE,
    TRANSIENT_ERROR_CLASSIFICATION,
)


class GraphBoltException(Exception):
    """
    Any exception raised by graphbolt while executing queries and streaming
    their results, be it caused by the server or by misuse of the API.
    """

    pass


@dataclass
class ClientException(GraphBoltException):
    """
    The caller used the API in a way that is not allowed: the problem lies in
    the calling code and retrying the same operation will fail again.

    Attributes:
        text: a text message about the exception.
    """

    text: str

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text


@dataclass
class ResultConsumedException(ClientException):
    """
    The records of a result were accessed after the result had been fully
    consumed: its summary was requested, it was discarded or rolled back, or
    the session/transaction owning it was closed.

    This is a terminal condition: a consumed result cannot be streamed again.

    Attributes:
        text: a text message about the exception.
    """

    def __init__(self, text: str = RESULT_CONSUMED_MESSAGE) -> None:
        super().__init__(text)


@dataclass
class TransactionNestingException(ClientException):
    """
    A new query (or transaction) was started in a session while the record
    stream of a previous query in the same session was still being consumed.
    At most one result stream can be active per session.

    Attributes:
        text: a text message about the exception.
    """

    def __init__(self, text: str = TRANSACTION_NESTING_MESSAGE) -> None:
        super().__init__(text)


@dataclass
class ProtocolException(GraphBoltException):
    """
    A response handler was driven in a way that violates the protocol, such
    as requesting records before the consumers are installed or installing
    a consumer twice. This signals a bug in the layer driving the handler.

    Attributes:
        text: a text message about the exception.
    """

    text: str

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text


@dataclass
class DatabaseException(GraphBoltException):
    """
    The server reported a failure while running a query or streaming its
    results.

    Attributes:
        code: the status code reported by the server, in the dotted form
            "<Namespace>.<Classification>.<Category>.<Title>".
        text: the message reported by the server.
    """

    code: str
    text: str

    def __init__(self, text: str, *, code: str) -> None:
        super().__init__(f"{code}: {text}" if code else text)
        self.code = code
        self.text = text

    @property
    def classification(self) -> str | None:
        """The classification part of the code, e.g. "ClientError", if any."""

        parts = self.code.split(".")
        return parts[1] if len(parts) > 1 else None

    @staticmethod
    def from_metadata(metadata: dict[str, Any]) -> DatabaseException:
        """Parse the body of a server FAILURE message into this exception."""

        return DatabaseException(
            str(metadata.get("message") or ""),
            code=str(metadata.get("code") or ""),
        )


def is_retryable(error: BaseException) -> bool:
    """
    Whether repeating the operation that raised the error may succeed.

    Only failures that the server classifies as transient are retryable;
    client-side misuse never is.
    """

    if isinstance(error, DatabaseException):
        return error.classification == TRANSIENT_ERROR_CLASSIFICATION
    return False

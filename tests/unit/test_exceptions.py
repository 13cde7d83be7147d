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
Unit tests for the exception hierarchy.
"""

from __future__ import annotations

import pytest

from graphbolt.exceptions import (
    ClientException,
    DatabaseException,
    GraphBoltException,
    ProtocolException,
    ResultConsumedException,
    TransactionNestingException,
    is_retryable,
)
from graphbolt.settings.defaults import (
    RESULT_CONSUMED_MESSAGE,
    TRANSACTION_NESTING_MESSAGE,
)


class TestExceptions:
    @pytest.mark.describe("test of client exceptions and their default messages")
    def test_client_exceptions(self) -> None:
        consumed = ResultConsumedException()
        assert isinstance(consumed, ClientException)
        assert isinstance(consumed, GraphBoltException)
        assert consumed.text == RESULT_CONSUMED_MESSAGE
        assert str(consumed) == RESULT_CONSUMED_MESSAGE

        nesting = TransactionNestingException()
        assert isinstance(nesting, ClientException)
        assert nesting.text == TRANSACTION_NESTING_MESSAGE

        custom = ResultConsumedException("gone")
        assert custom.text == "gone"

    @pytest.mark.describe("test of protocol exceptions")
    def test_protocol_exception(self) -> None:
        exc = ProtocolException("bad order")
        assert isinstance(exc, GraphBoltException)
        assert not isinstance(exc, ClientException)
        with pytest.raises(ProtocolException, match="bad order"):
            raise exc

    @pytest.mark.describe("test of database exceptions from server metadata")
    def test_database_exception(self) -> None:
        exc = DatabaseException.from_metadata(
            {
                "code": "Graph.ClientError.Statement.SyntaxError",
                "message": "Invalid input",
            }
        )
        assert exc.code == "Graph.ClientError.Statement.SyntaxError"
        assert exc.text == "Invalid input"
        assert exc.classification == "ClientError"
        assert "Invalid input" in str(exc)
        assert "SyntaxError" in str(exc)

        bare = DatabaseException.from_metadata({})
        assert bare.code == ""
        assert bare.classification is None

    @pytest.mark.describe("test of the retryability of exceptions")
    def test_is_retryable(self) -> None:
        transient = DatabaseException(
            "lock", code="Graph.TransientError.Transaction.DeadlockDetected"
        )
        client = DatabaseException("syntax", code="Graph.ClientError.Statement.SyntaxError")
        assert is_retryable(transient)
        assert not is_retryable(client)
        assert not is_retryable(ResultConsumedException())
        assert not is_retryable(ValueError("x"))

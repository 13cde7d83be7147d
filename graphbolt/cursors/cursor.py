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

from enum import Enum

from graphbolt.records import Record


class RecordConsumerStatus(Enum):
    """
    Whether, and what kind of, record consumer has been installed on a
    `ReactiveResultCursor`.

    The status only ever moves once away from NOT_INSTALLED: later attempts
    to install a consumer leave it untouched.

    Values:
        NOT_INSTALLED: no consumer yet (installed=F, discard=F)
        INSTALLED: the caller's own consumer (installed=T, discard=F)
        DISCARD_INSTALLED: the internal no-op consumer, installed when the
            summary is requested without streaming (installed=T, discard=T)
    """

    NOT_INSTALLED = "not_installed"
    INSTALLED = "installed"
    DISCARD_INSTALLED = "discard_installed"

    @property
    def is_installed(self) -> bool:
        return self != RecordConsumerStatus.NOT_INSTALLED

    @property
    def is_discard_consumer(self) -> bool:
        return self == RecordConsumerStatus.DISCARD_INSTALLED


def discard_record_consumer(record: Record | None, error: BaseException | None) -> None:
    """The record consumer used when records are discarded: it does nothing."""

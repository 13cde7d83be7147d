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
Logging setup shared by the whole package.

Besides the standard levels, a TRACE level (5) is registered: it is used
for very chatty output such as the delivery of each single record.
"""

from __future__ import annotations

import logging

TRACE = 5

logging.addLevelName(TRACE, "TRACE")


def trace(logger: logging.Logger, msg: str) -> None:
    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, msg)

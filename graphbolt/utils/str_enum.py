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

from enum import Enum, EnumMeta
from typing import TypeVar

T = TypeVar("T", bound="StrEnum")


class StrEnumMeta(EnumMeta):
    def _member_for(cls, value: str) -> str | None:
        """Find the member name for a wire value or a member name, or None."""
        by_value = {member.value: name for name, member in cls._member_map_.items()}
        if value in by_value:
            return by_value[value]
        l_value = value.lower()
        for m_value, name in by_value.items():
            if m_value.lower() == l_value:
                return name
        for name in cls._member_map_:
            if name.lower() == l_value:
                return name
        return None

    def __contains__(cls, value: object) -> bool:
        if isinstance(value, str):
            return cls._member_for(value) is not None
        return isinstance(value, cls)


class StrEnum(Enum, metaclass=StrEnumMeta):
    @classmethod
    def coerce(cls: type[T], value: str | T) -> T:
        """
        Accept either a member of the enum or a string, which is matched
        first against the member values (as found on the wire), then
        against the member names, case-insensitively.

        Raises:
            ValueError: if the string matches no member.
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = cls._member_for(value)
            if name is not None:
                return cls[name]
        raise ValueError(
            f"Invalid value '{value}' for {cls.__name__}. "
            f"Allowed values are: {[e.value for e in cls]}"
        )

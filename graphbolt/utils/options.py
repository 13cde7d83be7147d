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

from graphbolt.constants import MAX_DEMAND, UNLIMITED_FETCH_SIZE
from graphbolt.settings.defaults import DEFAULT_FETCH_SIZE, DEFAULT_MAX_RECORD_COUNT
from graphbolt.utils.unset import _UNSET, UnsetType


def _validate_fetch_size(fetch_size: int) -> int:
    if isinstance(fetch_size, bool) or not isinstance(fetch_size, int):
        raise ValueError(f"Invalid fetch_size: {fetch_size!r} (an int is required).")
    if fetch_size <= 0 and fetch_size != UNLIMITED_FETCH_SIZE:
        raise ValueError(
            f"Invalid fetch_size: {fetch_size}. A positive value, or "
            f"{UNLIMITED_FETCH_SIZE} for unlimited, is required."
        )
    if fetch_size > MAX_DEMAND:
        raise ValueError(
            f"Invalid fetch_size: {fetch_size}. It cannot exceed {MAX_DEMAND}."
        )
    return fetch_size


@dataclass
class StreamOptions:
    """
    The group of settings controlling how records are pulled from the server
    for a result stream.

    This class is used to override specific settings: values that are left
    unspecified keep the values inherited from the "full" options in use.
    See `FullStreamOptions` for the fully-specified counterpart.

    Attributes:
        fetch_size: the number of records requested from the server in each
            batch by the reactive result facade. Use `UNLIMITED_FETCH_SIZE`
            (i.e. -1) to pull all records in one go. At most `MAX_DEMAND`.
            Defaults to 1000.
        max_record_count: a cap on the number of records delivered for a
            stream: once reached, the rest of the stream is discarded.
            A non-positive value means no cap. Defaults to no cap.
    """

    fetch_size: int | UnsetType = _UNSET
    max_record_count: int | UnsetType = _UNSET

    def __post_init__(self) -> None:
        if not isinstance(self.fetch_size, UnsetType):
            _validate_fetch_size(self.fetch_size)


@dataclass
class FullStreamOptions(StreamOptions):
    """
    The group of settings controlling how records are pulled from the server
    for a result stream.

    This is the "full" version of the class, with the guarantee that all of its
    members have defined values. This is what pull handlers and reactive results
    actually use, as opposed to the (non-full) `StreamOptions` counterpart class,
    which admits "unset" attributes and is used to override specific settings.

    Attributes:
        fetch_size: see `StreamOptions`.
        max_record_count: see `StreamOptions`.
    """

    fetch_size: int
    max_record_count: int

    def __init__(
        self,
        *,
        fetch_size: int,
        max_record_count: int,
    ) -> None:
        StreamOptions.__init__(
            self,
            fetch_size=fetch_size,
            max_record_count=max_record_count,
        )

    def with_override(self, other: StreamOptions | None) -> FullStreamOptions:
        """
        Given an "overriding" set of options, possibly not defined in all its
        attributes, apply the override logic and return a new full options object.

        Args:
            other: a not-necessarily-fully-specified options object. All its defined
                settings take precedence. If None, an identical copy is returned.
        """

        if other is None:
            return FullStreamOptions(
                fetch_size=self.fetch_size,
                max_record_count=self.max_record_count,
            )
        return FullStreamOptions(
            fetch_size=(
                other.fetch_size
                if not isinstance(other.fetch_size, UnsetType)
                else self.fetch_size
            ),
            max_record_count=(
                other.max_record_count
                if not isinstance(other.max_record_count, UnsetType)
                else self.max_record_count
            ),
        )


def defaultStreamOptions() -> FullStreamOptions:
    """
    Return the default StreamOptions object, based on 'grand defaults'
    hardcoded in graphbolt.
    """

    return FullStreamOptions(
        fetch_size=DEFAULT_FETCH_SIZE,
        max_record_count=DEFAULT_MAX_RECORD_COUNT,
    )

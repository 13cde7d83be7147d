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

from typing import Any, Iterator, Sequence, overload

_MISSING = object()


class Record:
    """
    A single row of a query result: an ordered mapping from the result keys
    (column names) to the values.

    Records are immutable. Values can be accessed by position or by key.
    Records are not hashable, since their values are often lists or maps.

    Example:
        >>> record = Record(["n.name", "n.age"], ["Alice", 33])
        >>> record["n.name"]
        'Alice'
        >>> record[1]
        33
        >>> record.data()
        {'n.name': 'Alice', 'n.age': 33}
    """

    __slots__ = ("_keys", "_values", "_index")

    def __init__(self, keys: Sequence[str], values: Sequence[Any]) -> None:
        if len(keys) != len(values):
            raise ValueError(
                f"A record needs as many values as keys (got {len(keys)} keys "
                f"and {len(values)} values)."
            )
        self._keys = tuple(keys)
        self._values = tuple(values)
        self._index = {key: idx for idx, key in enumerate(self._keys)}

    def __repr__(self) -> str:
        pairs = " ".join(f"{k}={v!r}" for k, v in zip(self._keys, self._values))
        return f"<Record {pairs}>"

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Record):
            return self._keys == other._keys and self._values == other._values
        return NotImplemented

    @overload
    def __getitem__(self, key: int) -> Any: ...

    @overload
    def __getitem__(self, key: str) -> Any: ...

    def __getitem__(self, key: int | str) -> Any:
        if isinstance(key, str):
            try:
                return self._values[self._index[key]]
            except KeyError:
                raise KeyError(f"Key not found in record: {key!r}") from None
        return self._values[key]

    def get(self, key: str, default: Any = None) -> Any:
        idx = self._index.get(key, _MISSING)
        if idx is _MISSING:
            return default
        return self._values[idx]  # type: ignore[index]

    def keys(self) -> list[str]:
        return list(self._keys)

    def values(self) -> list[Any]:
        return list(self._values)

    def items(self) -> list[tuple[str, Any]]:
        return list(zip(self._keys, self._values))

    def data(self) -> dict[str, Any]:
        """Return the record as a plain dictionary."""

        return dict(zip(self._keys, self._values))

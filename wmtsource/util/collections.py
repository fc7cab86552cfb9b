# This file is part of the wmtsource project.
# Copyright (C) 2026 The wmtsource authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

from typing import Iterable, Iterator, Mapping, Optional, TypeVar

V = TypeVar("V")


class NoCaseDict(Mapping[str, V]):
    """
    Mapping with case insensitive access to its values. The case of
    the key that was set first is kept for iteration.

    Keys are iterated in insertion order.

    >>> d = NoCaseDict([('Layer', 'roads'), ('STYLE', 'default')])
    >>> d['layer'], d['style']
    ('roads', 'default')
    >>> list(d)
    ['Layer', 'STYLE']
    >>> d.updated({'layer': 'rivers', 'TileRow': -1})
    NoCaseDict([('Layer', 'rivers'), ('STYLE', 'default'), ('TileRow', -1)])
    """

    def __init__(self, mapping: Iterable[tuple[str, V]] | Mapping[str, V] = ()) -> None:
        self._data: dict[str, tuple[str, V]] = {}
        self._update(mapping)

    def _key(self, key: str) -> str:
        return key.lower()

    def _update(self, mapping: Iterable[tuple[str, V]] | Mapping[str, V]) -> None:
        if isinstance(mapping, Mapping):
            items: Iterable[tuple[str, V]] = mapping.items()
        else:
            items = mapping
        for key, value in items:
            key_l = self._key(key)
            if key_l in self._data:
                key = self._data[key_l][0]
            self._data[key_l] = (key, value)

    def __getitem__(self, key: str) -> V:
        try:
            return self._data[self._key(key)][1]
        except KeyError:
            raise KeyError(key) from None

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        for original_key, _ in self._data.values():
            yield original_key

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str, default: Optional[V] = None) -> Optional[V]:  # type: ignore[override]
        if key in self:
            return self[key]
        return default

    def updated(self, mapping: Iterable[tuple[str, V]] | Mapping[str, V]) -> "NoCaseDict[V]":
        """
        Return a new `NoCaseDict` with all values from `mapping` set.
        This object is not modified.
        """
        new: NoCaseDict[V] = NoCaseDict(self)
        new._update(mapping)
        return new

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NoCaseDict):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self.items())!r})"

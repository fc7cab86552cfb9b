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

"""
Dimension values of WMTS sources (e.g. ``Time`` or ``Elevation``).
"""
from collections.abc import Mapping


def dimensions_key(dimensions):
    """
    Return a key for the combination of all dimension values. The names
    are sorted, so the key does not depend on the order of `dimensions`.

    >>> dimensions_key({'Time': '2020', 'Elevation': '500'})
    'Elevation-500/Time-2020'
    >>> dimensions_key({})
    ''
    """
    return '/'.join(
        '%s-%s' % (name, dimensions[name]) for name in sorted(dimensions)
    )


class Dimensions(Mapping):
    """
    Immutable snapshot of dimension values.

    >>> dims = Dimensions({'Time': '2020'})
    >>> dims.key
    'Time-2020'
    >>> dims.updated({'Elevation': '500'}).key
    'Elevation-500/Time-2020'
    >>> dims.key
    'Time-2020'
    """
    __slots__ = ('_values', '_key')

    def __init__(self, values=None):
        self._values = dict(values or {})
        self._key = dimensions_key(self._values)

    @property
    def key(self):
        return self._key

    def updated(self, patch):
        """
        Return a new snapshot with the values of `patch` added or
        overwritten. Dimensions are never removed.
        """
        values = dict(self._values)
        values.update(patch or {})
        return Dimensions(values)

    def __getitem__(self, name):
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other):
        if isinstance(other, Dimensions):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def __hash__(self):
        return hash(self._key)

    def __repr__(self):
        return 'Dimensions(%r)' % (self._values, )


def update_dimensions(dimensions, patch):
    """
    Merge `patch` into `dimensions` and return the result as a new
    `Dimensions` snapshot. Neither argument is modified.

    >>> current = {'Time': '2019', 'Elevation': '500'}
    >>> update_dimensions(current, {'Time': '2020'})
    Dimensions({'Time': '2020', 'Elevation': '500'})
    >>> current['Time']
    '2019'
    """
    if not isinstance(dimensions, Dimensions):
        dimensions = Dimensions(dimensions)
    return dimensions.updated(patch)

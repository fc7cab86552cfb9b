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

import math

from wmtsource.grid import GridError
from wmtsource.grid.resolutions import ogc_scale_to_res
from wmtsource.srs import SRS, srs_from_crs_code

import logging

log = logging.getLogger('wmtsource.grid')


class WMTSTileGrid(object):
    """
    This class represents the tile grid of a WMTS tile matrix set.
    Each level has its own resolution, top-left origin, tile size and
    matrix size.

    Tile coordinates are ``(z, x, y)`` tuples. `x` is the tile column.
    `y` counts from the top of the matrix with negative values, the first
    row of the matrix is ``y = -1``. The WMTS ``TileRow`` of a tile is
    ``-y - 1``.

    :ivar srs: the srs of the grid
    :type srs: `SRS`
    :ivar extent: optional extent that limits the tile ranges
    :ivar limits: optional ``(min_col, min_row, max_col, max_row)`` per level
    """

    def __init__(self, srs, resolutions, matrix_ids, origins, tile_sizes, sizes,
                 extent=None, limits=None, name=None):
        if isinstance(srs, (int, str)):
            srs = SRS(srs)
        self.srs = srs
        self.name = name
        self.resolutions = tuple(resolutions)
        self.matrix_ids = tuple(str(m) for m in matrix_ids)
        self.origins = tuple(tuple(o) for o in origins)
        self.tile_sizes = tuple(_tile_size(ts) for ts in tile_sizes)
        self.sizes = tuple(tuple(s) for s in sizes)
        self.extent = tuple(extent) if extent is not None else None
        if limits is None:
            limits = [None] * len(self.resolutions)
        self.limits = tuple(tuple(l) if l is not None else None for l in limits)

        n = len(self.resolutions)
        for attr, values in (('matrix_ids', self.matrix_ids), ('origins', self.origins),
                             ('tile_sizes', self.tile_sizes), ('sizes', self.sizes),
                             ('limits', self.limits)):
            if len(values) != n:
                raise GridError('%s has %d entries, expected %d' % (attr, len(values), n))

        self.tile_ranges = tuple(self._calc_tile_range(z) for z in range(n))

    @property
    def levels(self):
        return len(self.resolutions)

    def resolution(self, level):
        """
        Returns the resolution of the `level` in units/pixel.

        :param level: the zoom level index (zero is top)
        """
        try:
            return self.resolutions[level]
        except IndexError:
            raise GridError('invalid level %r' % (level, ))

    def matrix_id(self, level):
        """
        Returns the identifier of the tile matrix of `level`.
        """
        try:
            return self.matrix_ids[level]
        except IndexError:
            raise GridError('invalid level %r' % (level, ))

    def level_for_matrix_id(self, matrix_id):
        """
        Returns the level of the tile matrix `matrix_id` or ``None``.
        """
        try:
            return self.matrix_ids.index(str(matrix_id))
        except ValueError:
            return None

    def _calc_tile_range(self, level):
        width, height = self.sizes[level]
        min_col, min_row, max_col, max_row = 0, 0, width - 1, height - 1

        limit = self.limits[level]
        if limit is not None:
            min_col = max(min_col, limit[0])
            min_row = max(min_row, limit[1])
            max_col = min(max_col, limit[2])
            max_row = min(max_row, limit[3])

        if self.extent is not None:
            res = self.resolutions[level]
            origin_x, origin_y = self.origins[level]
            tile_w = res * self.tile_sizes[level][0]
            tile_h = res * self.tile_sizes[level][1]
            min_col = max(min_col, int(math.floor(round((self.extent[0] - origin_x) / tile_w, 8))))
            max_col = min(max_col, int(math.ceil(round((self.extent[2] - origin_x) / tile_w, 8))) - 1)
            min_row = max(min_row, int(math.floor(round((origin_y - self.extent[3]) / tile_h, 8))))
            max_row = min(max_row, int(math.ceil(round((origin_y - self.extent[1]) / tile_h, 8))) - 1)

        return (min_col, -max_row - 1, max_col, -min_row - 1)

    def tile_range(self, level):
        """
        Returns the range of valid tiles of `level` as
        ``(min_x, min_y, max_x, max_y)`` in tile coordinates.
        The range is empty (``min > max``) if no tile is available.
        """
        try:
            return self.tile_ranges[level]
        except IndexError:
            raise GridError('invalid level %r' % (level, ))

    def tile_bbox(self, tile_coord):
        """
        Returns the bbox of the given tile.

        >>> grid = WMTSTileGrid(3857, [156543.03392804097],
        ...     ['0'], [(-20037508.3428, 20037508.3428)], [256], [(1, 1)])
        >>> [round(x, 2) for x in grid.tile_bbox((0, 0, -1))]
        [-20037508.34, -20037508.34, 20037508.34, 20037508.34]
        """
        z, x, y = tile_coord
        res = self.resolution(z)
        origin_x, origin_y = self.origins[z]
        tile_w = res * self.tile_sizes[z][0]
        tile_h = res * self.tile_sizes[z][1]
        row = -y - 1

        x0 = origin_x + round(x * tile_w, 12)
        x1 = x0 + round(tile_w, 12)
        y1 = origin_y - round(row * tile_h, 12)
        y0 = y1 - round(tile_h, 12)
        return x0, y0, x1, y1

    def limit_tile(self, tile_coord):
        """
        Check if the `tile_coord` is in the grid.

        :returns: the `tile_coord` if it is within the ``grid``,
                  otherwise ``None``.
        """
        z, x, y = tile_coord
        if z < 0 or z >= self.levels:
            return None
        min_x, min_y, max_x, max_y = self.tile_ranges[z]
        if x < min_x or x > max_x or y < min_y or y > max_y:
            return None
        return tile_coord

    def wrap_tile(self, tile_coord):
        """
        Wrap the tile column into the matrix width of the level. For
        grids that span the whole world in x direction.
        """
        z, x, y = tile_coord
        if z < 0 or z >= self.levels:
            return tile_coord
        width = self.sizes[z][0]
        if 0 <= x < width:
            return tile_coord
        return z, x % width, y

    def _key(self):
        return (self.srs, self.resolutions, self.matrix_ids, self.origins,
                self.tile_sizes, self.sizes, self.extent, self.limits)

    def __eq__(self, other):
        if not isinstance(other, WMTSTileGrid):
            return NotImplemented
        return self._key() == other._key()

    def __ne__(self, other):
        equal_result = self.__eq__(other)
        if equal_result is NotImplemented:
            return NotImplemented
        return not equal_result

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return '%s(%r, name=%r, levels=%d)' % (
            self.__class__.__name__, self.srs, self.name, self.levels)


def _tile_size(tile_size):
    if isinstance(tile_size, (int, float)):
        return int(tile_size), int(tile_size)
    return tuple(int(v) for v in tile_size)


def tile_grid_from_capabilities_matrix_set(matrix_set, extent=None, limits=None):
    """
    Create a `WMTSTileGrid` from a ``TileMatrixSet`` of a parsed
    capabilities document.

    :param matrix_set: the ``TileMatrixSet`` dict
    :param extent: optional extent in the SRS of the matrix set
    :param limits: optional ``TileMatrixSetLimits`` list. Only tile matrices
        with limits are part of the grid, if the list is not empty.
    :raises GridError: if the ``SupportedCRS`` is unknown
    """
    code = matrix_set['SupportedCRS']
    srs = srs_from_crs_code(code)
    if srs is None:
        raise GridError("unsupported CRS '%s' for tile matrix set '%s'" % (
            code, matrix_set.get('Identifier')))

    meters_per_unit = srs.meters_per_unit
    # TopLeftCorner is in the axis order of the CRS
    switch_origin_xy = srs.is_axis_order_ne

    limits_by_id = {}
    for limit in limits or []:
        limits_by_id[str(limit['TileMatrix'])] = (
            int(limit['MinTileCol']), int(limit['MinTileRow']),
            int(limit['MaxTileCol']), int(limit['MaxTileRow']),
        )

    resolutions = []
    matrix_ids = []
    origins = []
    tile_sizes = []
    sizes = []
    level_limits = []

    matrices = sorted(matrix_set['TileMatrix'],
                      key=lambda m: float(m['ScaleDenominator']), reverse=True)
    for matrix in matrices:
        matrix_id = str(matrix['Identifier'])
        if limits_by_id and matrix_id not in limits_by_id:
            log.debug('skipping tile matrix %s of %s without limits',
                      matrix_id, matrix_set.get('Identifier'))
            continue
        matrix_ids.append(matrix_id)
        resolutions.append(ogc_scale_to_res(float(matrix['ScaleDenominator']), meters_per_unit))
        top_left = matrix['TopLeftCorner']
        if switch_origin_xy:
            origins.append((float(top_left[1]), float(top_left[0])))
        else:
            origins.append((float(top_left[0]), float(top_left[1])))
        tile_sizes.append((int(matrix['TileWidth']), int(matrix['TileHeight'])))
        sizes.append((int(matrix['MatrixWidth']), int(matrix['MatrixHeight'])))
        level_limits.append(limits_by_id.get(matrix_id))

    return WMTSTileGrid(srs, resolutions, matrix_ids, origins, tile_sizes, sizes,
                        extent=extent, limits=level_limits,
                        name=matrix_set.get('Identifier'))

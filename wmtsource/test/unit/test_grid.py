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

import copy

import pytest

from wmtsource.grid import GridError
from wmtsource.grid.resolutions import ogc_scale_to_res, res_to_ogc_scale
from wmtsource.grid.tile_grid import WMTSTileGrid, tile_grid_from_capabilities_matrix_set
from wmtsource.srs import SRS
from wmtsource.test.helper import load_capabilities_doc


def matrix_set(identifier):
    for ms in load_capabilities_doc()['Contents']['TileMatrixSet']:
        if ms['Identifier'] == identifier:
            return ms
    raise KeyError(identifier)


def layer_limits(layer):
    for l in load_capabilities_doc()['Contents']['Layer']:
        if l['Identifier'] == layer:
            return l['TileMatrixSetLink'][0]['TileMatrixSetLimits']
    raise KeyError(layer)


class TestResolutions(object):

    def test_scale_to_res(self):
        assert ogc_scale_to_res(559082264.0287178) == pytest.approx(156543.03392804097)

    def test_res_to_scale(self):
        assert res_to_ogc_scale(156543.03392804097) == pytest.approx(559082264.0287178)


class TestGridFromMatrixSet(object):

    def test_webmercator(self):
        grid = tile_grid_from_capabilities_matrix_set(matrix_set('WebMercator'))

        assert grid.srs == SRS(3857)
        assert grid.name == 'WebMercator'
        assert grid.levels == 4
        assert grid.matrix_ids == ('0', '1', '2', '3')
        for level in range(4):
            assert grid.resolution(level) == pytest.approx(156543.03392804097 / 2 ** level)
            assert grid.origins[level] == (-20037508.3428, 20037508.3428)
            assert grid.tile_sizes[level] == (256, 256)
            assert grid.sizes[level] == (2 ** level, 2 ** level)
        assert grid.tile_range(3) == (0, -8, 7, -1)

    def test_sorted_by_scale_and_switched_axis_order(self):
        ms = matrix_set('WGS84')
        orig = copy.deepcopy(ms)
        grid = tile_grid_from_capabilities_matrix_set(ms)

        assert ms == orig
        assert grid.srs == SRS(4326)
        assert grid.matrix_ids == ('0', '1')
        assert grid.resolution(0) == pytest.approx(0.703125)
        assert grid.resolution(1) == pytest.approx(0.3515625)
        assert grid.origins[0] == (-180.0, 90.0)
        assert grid.tile_range(0) == (0, -1, 1, -1)

    def test_limits(self):
        grid = tile_grid_from_capabilities_matrix_set(
            matrix_set('WebMercator'), limits=layer_limits('parcels'))

        assert grid.levels == 2
        assert grid.matrix_ids == ('1', '2')
        assert grid.resolution(0) == pytest.approx(156543.03392804097 / 2)
        assert grid.tile_range(0) == (1, -2, 1, -1)
        assert grid.tile_range(1) == (2, -3, 3, -2)

    def test_extent(self):
        grid = tile_grid_from_capabilities_matrix_set(
            matrix_set('WebMercator'), extent=(0, 0, 20037508.34, 20037508.34))

        assert grid.levels == 4
        assert grid.tile_range(0) == (0, -1, 0, -1)
        assert grid.tile_range(1) == (1, -1, 1, -1)
        assert grid.tile_range(2) == (2, -2, 3, -1)

    def test_unknown_crs(self):
        ms = matrix_set('WebMercator')
        ms['SupportedCRS'] = 'FOO:BAR'
        with pytest.raises(GridError):
            tile_grid_from_capabilities_matrix_set(ms)

    def test_equal(self):
        assert (tile_grid_from_capabilities_matrix_set(matrix_set('WebMercator')) ==
                tile_grid_from_capabilities_matrix_set(matrix_set('WebMercator')))
        assert (tile_grid_from_capabilities_matrix_set(matrix_set('WebMercator')) !=
                tile_grid_from_capabilities_matrix_set(matrix_set('WGS84')))


class TestWMTSTileGrid(object):

    def setup_method(self):
        self.grid = tile_grid_from_capabilities_matrix_set(matrix_set('WebMercator'))

    def test_matrix_id(self):
        assert self.grid.matrix_id(2) == '2'
        with pytest.raises(GridError):
            self.grid.matrix_id(4)
        assert self.grid.level_for_matrix_id('3') == 3
        assert self.grid.level_for_matrix_id(3) == 3
        assert self.grid.level_for_matrix_id('EPSG:3857:3') is None

    def test_tile_bbox(self):
        bbox = self.grid.tile_bbox((1, 1, -1))
        assert bbox == pytest.approx((0.0, 0.0, 20037508.3428, 20037508.3428), abs=1e-3)

    def test_limit_tile(self):
        assert self.grid.limit_tile((1, 1, -2)) == (1, 1, -2)
        assert self.grid.limit_tile((1, 2, -1)) is None
        assert self.grid.limit_tile((1, 0, 0)) is None
        assert self.grid.limit_tile((1, 0, -3)) is None
        assert self.grid.limit_tile((4, 0, -1)) is None
        assert self.grid.limit_tile((-1, 0, -1)) is None

    def test_wrap_tile(self):
        assert self.grid.wrap_tile((1, 2, -1)) == (1, 0, -1)
        assert self.grid.wrap_tile((1, -1, -1)) == (1, 1, -1)
        assert self.grid.wrap_tile((1, 1, -1)) == (1, 1, -1)
        assert self.grid.wrap_tile((9, 20, -1)) == (9, 20, -1)

    def test_invalid_lengths(self):
        with pytest.raises(GridError):
            WMTSTileGrid('EPSG:3857', [1000.0, 500.0], ['0'],
                         [(0, 0)] * 2, [256] * 2, [(1, 1)] * 2)

    def test_repr(self):
        assert repr(self.grid) == "WMTSTileGrid(SRS('EPSG:3857'), name='WebMercator', levels=4)"

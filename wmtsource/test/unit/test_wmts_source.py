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

import threading
from urllib.parse import parse_qsl, urlsplit

import pytest

from wmtsource.grid.tile_grid import tile_grid_from_capabilities_matrix_set
from wmtsource.request.wmts import KVP, REST
from wmtsource.source.dimensions import Dimensions
from wmtsource.source.wmts import WMTSSource
from wmtsource.test.helper import load_capabilities_doc


def webmercator_grid():
    caps = load_capabilities_doc()
    return tile_grid_from_capabilities_matrix_set(caps['Contents']['TileMatrixSet'][0])


def query_params(url):
    return dict(parse_qsl(urlsplit(url).query))


@pytest.fixture
def rest_source():
    return WMTSSource(
        layer='roads', style='default', matrix_set='WebMercator',
        tile_grid=webmercator_grid(),
        url='http://{a-b}.example.org/{Layer}/{Time}/{TileMatrix}/{TileRow}/{TileCol}.png',
        request_encoding=REST,
        dimensions={'Time': '2020'},
    )


@pytest.fixture
def kvp_source():
    return WMTSSource(
        layer='roads', style='default', matrix_set='WebMercator',
        tile_grid=webmercator_grid(),
        urls=['http://tiles.example.org/wmts?'],
        format='image/png',
    )


class TestWMTSSource(object):

    def test_kvp_tile_url(self, kvp_source):
        url = kvp_source.tile_url((2, 1, -3))
        assert query_params(url) == {
            'layer': 'roads',
            'style': 'default',
            'tilematrixset': 'WebMercator',
            'Service': 'WMTS',
            'Request': 'GetTile',
            'Version': '1.0.0',
            'Format': 'image/png',
            'TileMatrix': '2',
            'TileCol': '1',
            'TileRow': '2',
        }

    def test_rest_tile_url(self, rest_source):
        url = rest_source.tile_url((2, 1, -3))
        assert urlsplit(url).path == '/roads/2020/2/2/1.png'
        assert urlsplit(url).netloc in ('a.example.org', 'b.example.org')
        assert rest_source.urls == (
            'http://a.example.org/{Layer}/{Time}/{TileMatrix}/{TileRow}/{TileCol}.png',
            'http://b.example.org/{Layer}/{Time}/{TileMatrix}/{TileRow}/{TileCol}.png',
        )

    def test_absent_tiles(self, kvp_source):
        assert kvp_source.tile_url(None) is None
        assert kvp_source.tile_url((None, 0, -1)) is None
        assert kvp_source.tile_url((4, 0, -1)) is None
        assert kvp_source.tile_url((1, 2, -1)) is None
        assert kvp_source.tile_url((1, 0, 0)) is None

    def test_wrap_x(self):
        source = WMTSSource('roads', 'default', 'WebMercator', webmercator_grid(),
                            urls=['http://host/{TileMatrix}/{TileRow}/{TileCol}.png'],
                            request_encoding='REST', wrap_x=True)
        assert source.tile_url((1, 2, -1)) == 'http://host/1/0/0.png'
        assert source.tile_url((1, -1, -2)) == 'http://host/1/1/1.png'
        assert source.tile_url((1, 0, -3)) is None

    def test_tile_url_function(self, kvp_source):
        assert kvp_source.tile_url_function((0, 0, -1)) == kvp_source.tile_url((0, 0, -1))

    def test_without_urls(self):
        source = WMTSSource('roads', 'default', 'WebMercator', webmercator_grid())
        assert source.urls == ()
        assert source.tile_url((0, 0, -1)) is None

    def test_set_urls(self, kvp_source):
        kvp_source.set_urls(['http://other.example.org/wmts'])
        assert kvp_source.urls == ('http://other.example.org/wmts', )
        assert kvp_source.tile_url((0, 0, -1)).startswith('http://other.example.org/wmts?')
        assert kvp_source.revision == 1

    def test_set_urls_while_reading(self, kvp_source):
        hosts = ['http://a.example.org/wmts', 'http://b.example.org/wmts']
        urls = []

        def read():
            for _ in range(200):
                urls.append(kvp_source.tile_url((0, 0, -1)))

        def write():
            for i in range(200):
                kvp_source.set_urls([hosts[i % 2]])

        threads = [threading.Thread(target=read), threading.Thread(target=write)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for url in urls:
            assert url.split('?')[0] in hosts + ['http://tiles.example.org/wmts']
        assert kvp_source.urls == (hosts[1], )
        assert kvp_source.tile_url((0, 0, -1)).startswith(hosts[1] + '?')

    def test_properties(self, kvp_source):
        assert kvp_source.layer == 'roads'
        assert kvp_source.style == 'default'
        assert kvp_source.matrix_set == 'WebMercator'
        assert kvp_source.format == 'image/png'
        assert kvp_source.version == '1.0.0'
        assert kvp_source.request_encoding == KVP
        assert kvp_source.projection is None
        assert kvp_source.wrap_x is False
        assert kvp_source.cross_origin is None
        with pytest.raises(AttributeError):
            kvp_source.layer = 'rails'

    def test_unresolved_variables_warning(self, caplog):
        WMTSSource('roads', 'default', 'WebMercator', webmercator_grid(),
                   urls=['http://host/{Time}/{TileMatrix}/{TileRow}/{TileCol}.png'],
                   request_encoding=REST)
        assert 'unresolved variables Time' in caplog.text


class TestDimensions(object):

    def test_update(self, rest_source):
        assert rest_source.key == 'Time-2020'
        rest_source.update_dimensions({'Time': '2021'})
        assert rest_source.dimensions == {'Time': '2021'}
        assert urlsplit(rest_source.tile_url((0, 0, -1))).path == '/roads/2021/0/0/0.png'

    def test_successive_updates(self, kvp_source):
        kvp_source.update_dimensions({'time': '2020'})
        first_key = kvp_source.key
        kvp_source.update_dimensions({'time': '2021', 'elevation': '100'})
        second_key = kvp_source.key

        assert dict(kvp_source.dimensions) == {'time': '2021', 'elevation': '100'}
        assert 'time-2021' in second_key
        assert 'elevation-100' in second_key
        assert first_key != second_key
        assert kvp_source.revision == 2

        params = query_params(kvp_source.tile_url((0, 0, -1)))
        assert params['time'] == '2021'
        assert params['elevation'] == '100'

    def test_snapshot_unchanged(self, rest_source):
        dims = rest_source.dimensions
        rest_source.update_dimensions({'Time': '2021'})
        assert dims == Dimensions({'Time': '2020'})

    def test_key_listener(self, rest_source):
        keys = []
        rest_source.add_key_listener(keys.append)
        rest_source.update_dimensions({'Time': '2021'})
        rest_source.update_dimensions({'Elevation': '100'})
        assert keys == ['Time-2021', 'Elevation-100/Time-2021']

    def test_listener_updates_source(self, rest_source):
        keys = []

        def listener(key):
            keys.append(key)
            if 'Elevation' not in rest_source.dimensions:
                rest_source.update_dimensions({'Elevation': '1000'})

        rest_source.add_key_listener(listener)
        t = threading.Thread(target=rest_source.update_dimensions, args=({'Time': '2021'}, ))
        t.start()
        t.join(5)
        assert not t.is_alive()
        assert keys == ['Time-2021', 'Elevation-1000/Time-2021']
        assert rest_source.revision == 2

    def test_listener_adds_listener(self, rest_source):
        keys = []

        def listener(key):
            rest_source.add_key_listener(keys.append)

        rest_source.add_key_listener(listener)
        t = threading.Thread(target=rest_source.set_urls,
                             args=(['http://c.example.org/{TileMatrix}/{TileRow}/{TileCol}.png'], ))
        t.start()
        t.join(5)
        assert not t.is_alive()
        # new listeners are called on the next change
        assert keys == []
        rest_source.update_dimensions({'Time': '2021'})
        assert keys == ['Time-2021']

    def test_concurrent_updates(self, kvp_source):
        published = []
        kvp_source.add_key_listener(published.append)

        def update(n):
            for i in range(50):
                kvp_source.update_dimensions({'thread%d' % n: str(i)})

        threads = [threading.Thread(target=update, args=(n, )) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert kvp_source.revision == 200
        assert len(published) == 200
        assert kvp_source.key in published
        assert dict(kvp_source.dimensions) == {
            'thread0': '49', 'thread1': '49', 'thread2': '49', 'thread3': '49'}


class TestFromCapabilities(object):

    def test_kvp(self, capabilities):
        source = WMTSSource.from_capabilities(capabilities, {'layer': 'roads'})
        assert source.request_encoding == KVP
        assert source.format == 'image/png'
        assert source.version == '1.0.0'
        assert source.wrap_x is True
        assert source.key == 'Elevation-500/Time-2020'

        params = query_params(source.tile_url((2, 1, -3)))
        assert params['TileMatrix'] == '2'
        assert params['TileRow'] == '2'
        assert params['Time'] == '2020'
        assert params['Elevation'] == '500'

    def test_rest(self, rest_capabilities):
        source = WMTSSource.from_capabilities(
            rest_capabilities, {'layer': 'roads', 'matrix_set': 'WGS84'})
        assert source.request_encoding == REST
        assert source.tile_url((1, 5, -1)) == (
            'http://tiles.example.org/rest/roads/default/WGS84/1/0/1.png')
        # wrapped around the date line
        assert source.tile_url((1, 6, -2)) == (
            'http://tiles.example.org/rest/roads/default/WGS84/1/1/2.png')

    def test_layer_not_found(self, capabilities):
        assert WMTSSource.from_capabilities(capabilities, {'layer': 'rivers'}) is None

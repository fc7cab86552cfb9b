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
Tile source for WMTS services.
"""
import threading

from wmtsource.client.tile import (
    compile_tile_url_template,
    expand_url,
    null_tile_url_function,
    tile_url_function_from_functions,
)
from wmtsource.config import base_config
from wmtsource.request.wmts import KVP, request_encoding_from_string, static_context
from wmtsource.source.capabilities import options_from_capabilities
from wmtsource.source.dimensions import Dimensions

import logging
log = logging.getLogger('wmtsource.source')


class WMTSSource(object):
    """
    Creates the URLs for all tiles of a single WMTS layer.

    The URL templates are compiled once. Dimension values can be updated
    at any time; each update replaces the current `Dimensions` snapshot
    and publishes the new `key` to all key listeners.
    """
    def __init__(self, layer, style, matrix_set, tile_grid, urls=None, url=None,
                 format='image/jpeg', version='1.0.0', request_encoding=KVP,
                 dimensions=None, projection=None, wrap_x=False, cross_origin=None):
        self._layer = layer
        self._style = style
        self._matrix_set = matrix_set
        self.tile_grid = tile_grid
        self._format = format
        self._version = version
        self._request_encoding = request_encoding_from_string(request_encoding)
        self._projection = projection
        self._wrap_x = wrap_x
        self._cross_origin = cross_origin

        self._dimensions = Dimensions(dimensions)
        self._revision = 0
        self._key_listeners = []
        self._lock = threading.Lock()

        if urls is None and url is not None:
            urls = expand_url(url)
        # templates and their compiled function, replaced as a pair
        self._templates = ((), null_tile_url_function)
        self._compile(urls or [])

    @classmethod
    def from_capabilities(cls, capabilities, config):
        """
        Create a source for a layer of a parsed capabilities document.
        Returns ``None`` if the layer is not found.

        See `options_from_capabilities` for the `config` options.
        """
        options = options_from_capabilities(capabilities, config)
        if options is None:
            return None
        return cls(
            layer=options.layer,
            style=options.style,
            matrix_set=options.matrix_set,
            tile_grid=options.tile_grid,
            urls=options.urls,
            format=options.format or base_config().wmts.format,
            version=capabilities.get('version') or base_config().wmts.version,
            request_encoding=options.request_encoding,
            dimensions=options.dimensions,
            projection=options.projection,
            wrap_x=options.wrap_x,
            cross_origin=options.cross_origin,
        )

    def _compile(self, urls):
        context = static_context(
            self._layer, self._style, self._matrix_set,
            request_encoding=self._request_encoding,
            version=self._version, format=self._format,
        )
        funcs = []
        for template in urls:
            func = compile_tile_url_template(
                template, self._request_encoding, context, self.tile_grid)
            unresolved = func.unresolved_variables(self._dimensions)
            if unresolved:
                log.warning("unresolved variables %s in URL template %s of layer '%s'",
                            ', '.join(unresolved), template, self._layer)
            funcs.append(func)
        self._templates = (tuple(urls), tile_url_function_from_functions(funcs))

    def set_urls(self, urls):
        """
        Replace the URL templates of this source.
        """
        with self._lock:
            self._compile(list(urls))
            key, listeners = self._next_revision()
        self._notify(key, listeners)

    def tile_url(self, tile_coord, pixel_ratio=1, projection=None):
        """
        Return the URL of the tile `tile_coord` or ``None`` if the tile
        is not available. `pixel_ratio` and `projection` are accepted for
        compatibility with other tile sources; WMTS tiles do not depend
        on them.
        """
        if tile_coord is None or None in tile_coord:
            return None
        if self.tile_grid is not None:
            if self._wrap_x:
                tile_coord = self.tile_grid.wrap_tile(tile_coord)
            tile_coord = self.tile_grid.limit_tile(tile_coord)
            if tile_coord is None:
                return None
        # read snapshot and function once, both are replaced on updates
        dimensions = self._dimensions
        _urls, tile_url_func = self._templates
        return tile_url_func(tile_coord, dimensions)

    @property
    def tile_url_function(self):
        return self.tile_url

    def update_dimensions(self, patch):
        """
        Add or overwrite dimension values. Existing dimensions are never
        removed.
        """
        with self._lock:
            self._dimensions = self._dimensions.updated(patch)
            key, listeners = self._next_revision()
        self._notify(key, listeners)

    def _next_revision(self):
        # requires self._lock
        self._revision += 1
        return self._dimensions.key, list(self._key_listeners)

    def _notify(self, key, listeners):
        # called without the lock, listeners can update this source
        for listener in listeners:
            listener(key)

    def add_key_listener(self, func):
        """
        Register `func` to be called with the new `key` after each change.
        """
        with self._lock:
            self._key_listeners.append(func)

    @property
    def dimensions(self):
        return self._dimensions

    @property
    def key(self):
        return self._dimensions.key

    @property
    def revision(self):
        return self._revision

    @property
    def layer(self):
        return self._layer

    @property
    def style(self):
        return self._style

    @property
    def matrix_set(self):
        return self._matrix_set

    @property
    def format(self):
        return self._format

    @property
    def version(self):
        return self._version

    @property
    def request_encoding(self):
        return self._request_encoding

    @property
    def urls(self):
        return self._templates[0]

    @property
    def projection(self):
        return self._projection

    @property
    def wrap_x(self):
        return self._wrap_x

    @property
    def cross_origin(self):
        return self._cross_origin

    def __repr__(self):
        return '%s(%r, %r, %s)' % (
            self.__class__.__name__, self._layer, self._matrix_set, self._request_encoding)

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
Tile URL templates for WMTS sources.
"""
import re

from wmtsource.exception import InvalidWMTSTemplate
from wmtsource.request.base import append_params
from wmtsource.request.wmts import (
    KVP,
    dynamic_context,
    missing_rest_variables,
    substitute_template,
    template_variables,
)
from wmtsource.util.collections import NoCaseDict

import logging

log = logging.getLogger('wmtsource.client')


class WMTSTileURLTemplate(object):
    """
    A URL template for tiles of a single WMTS layer.

    The static `context` (layer, style, tile matrix set, etc.) is applied
    once for KVP templates. RESTful templates are substituted for each tile
    with the static context and the tile and dimension values on top.

    RESTful templates:

    >>> t = WMTSTileURLTemplate('http://foo/{Layer}/{TileMatrix}/{TileRow}/{TileCol}.png',
    ...     'REST', {'layer': 'roads'})
    >>> t.substitute((2, 5, -4))
    'http://foo/roads/2/3/5.png'

    Unknown variables are kept:

    >>> t = WMTSTileURLTemplate('http://foo/{Layer}/{Time}/{TileMatrix}/{TileRow}/{TileCol}.png',
    ...     'REST', {'layer': 'roads'})
    >>> t.substitute((2, 5, -4))
    'http://foo/roads/{Time}/2/3/5.png'
    >>> t.substitute((2, 5, -4), {'time': '2020'})
    'http://foo/roads/2020/2/3/5.png'

    KVP templates are base URLs:

    >>> t = WMTSTileURLTemplate('http://foo/wmts?', 'KVP', {'layer': 'roads'})
    >>> t.substitute((2, 5, -4))
    'http://foo/wmts?layer=roads&TileMatrix=2&TileCol=5&TileRow=3'

    >>> t.substitute(None) is None
    True
    """
    def __init__(self, template, request_encoding, context=None, tile_grid=None):
        if not isinstance(template, str) or not template.strip():
            raise InvalidWMTSTemplate('invalid WMTS URL template: %r' % (template, ))
        self.template = template
        self.request_encoding = request_encoding
        self.context = NoCaseDict(context or {})
        self.tile_grid = tile_grid

        if request_encoding == KVP:
            self.base_url = append_params(template, self.context)
        else:
            self.base_url = substitute_template(template, self.context)
            missing = missing_rest_variables(template)
            if missing:
                log.warning('missing variables %s in WMTS RESTful template %s',
                            ', '.join(missing), template)

    def substitute(self, tile_coord, dimensions=None):
        """
        Return the URL for `tile_coord` or ``None`` if there is no tile.
        """
        if tile_coord is None or None in tile_coord:
            return None
        if self.tile_grid is not None and not 0 <= tile_coord[0] < self.tile_grid.levels:
            return None

        context = dynamic_context(tile_coord, self.tile_grid, dimensions)
        if self.request_encoding == KVP:
            return append_params(self.base_url, context)
        # tile and dimension values replace static values of the same name
        return substitute_template(self.template, self.context.updated(context))

    def __call__(self, tile_coord, dimensions=None):
        return self.substitute(tile_coord, dimensions)

    def unresolved_variables(self, dimensions=None):
        """
        Return all variables that would stay in the URLs of this template.
        Only RESTful templates have variables.
        """
        if self.request_encoding == KVP:
            return []
        known = set(['tilematrix', 'tilerow', 'tilecol'])
        known.update(k.lower() for k in (dimensions or {}))
        return [v for v in template_variables(self.base_url) if v.lower() not in known]

    def __repr__(self):
        return '%s(%r, %r)' % (
            self.__class__.__name__, self.template, self.request_encoding)


def compile_tile_url_template(template, request_encoding, context, tile_grid=None):
    """
    Compile `template` into a function ``(tile_coord, dimensions=None)``
    that returns the tile URL, or ``None`` for an absent `tile_coord`.
    """
    return WMTSTileURLTemplate(template, request_encoding, context, tile_grid)


def find_unresolved_variables(url):
    """
    Return all ``{Variable}`` placeholders that remain in `url`.

    >>> find_unresolved_variables('http://foo/roads/{Time}/2/3/5.png')
    ['Time']
    >>> find_unresolved_variables('http://foo/roads/2/3/5.png')
    []
    """
    return template_variables(url)


_char_range_re = re.compile(r'\{([a-z])-([a-z])\}')
_num_range_re = re.compile(r'\{(\d+)-(\d+)\}')


def expand_url(url):
    """
    Expand the first ``{a-c}`` or ``{1-4}`` range of `url` into a list
    of URLs.

    >>> expand_url('http://{a-c}.tiles.example/wmts')
    ['http://a.tiles.example/wmts', 'http://b.tiles.example/wmts', 'http://c.tiles.example/wmts']
    >>> expand_url('http://tile{1-2}.example/{TileMatrix}')
    ['http://tile1.example/{TileMatrix}', 'http://tile2.example/{TileMatrix}']
    >>> expand_url('http://example/wmts')
    ['http://example/wmts']
    """
    match = _char_range_re.search(url)
    if match:
        start, stop = ord(match.group(1)), ord(match.group(2))
        return [url.replace(match.group(0), chr(c), 1) for c in range(start, stop + 1)]
    match = _num_range_re.search(url)
    if match:
        start, stop = int(match.group(1)), int(match.group(2))
        return [url.replace(match.group(0), str(i), 1) for i in range(start, stop + 1)]
    return [url]


def tile_coord_hash(tile_coord):
    """
    >>> tile_coord_hash((3, 2, -1))
    15
    """
    z, x, y = tile_coord
    return (x << z) + y


def null_tile_url_function(tile_coord, *args, **kw):
    return None


def tile_url_function_from_functions(tile_url_functions):
    """
    Combine multiple tile URL functions into one. Each tile coordinate is
    always mapped to the same function, so the URL of a tile is stable.
    """
    tile_url_functions = list(tile_url_functions)
    if not tile_url_functions:
        return null_tile_url_function
    if len(tile_url_functions) == 1:
        return tile_url_functions[0]

    def tile_url(tile_coord, *args, **kw):
        if tile_coord is None or None in tile_coord:
            return None
        index = tile_coord_hash(tile_coord) % len(tile_url_functions)
        return tile_url_functions[index](tile_coord, *args, **kw)

    return tile_url

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
WMTS GetTile request parameters for KVP and RESTful request encodings.
"""
import re

from wmtsource.util.collections import NoCaseDict

KVP = 'KVP'
REST = 'REST'

REQUEST_ENCODINGS = (KVP, REST)


def request_encoding_from_string(request_encoding):
    """
    >>> request_encoding_from_string('rest')
    'REST'
    >>> request_encoding_from_string('RESTful')
    'REST'
    >>> request_encoding_from_string('KVP')
    'KVP'
    """
    if request_encoding is not None:
        value = str(request_encoding).upper()
        if value == 'RESTFUL':
            value = REST
        if value in REQUEST_ENCODINGS:
            return value
    raise ValueError("unknown WMTS request encoding '%s'" % (request_encoding, ))


fixed_params = {'Service': 'WMTS', 'Request': 'GetTile'}

tile_params = ('TileMatrix', 'TileCol', 'TileRow')


def static_context(layer, style, matrix_set, request_encoding=KVP,
                   version='1.0.0', format='image/jpeg'):
    """
    Return the parameters that are fixed for all tiles of a source.
    Service, request, version and format are only part of KVP requests.

    >>> static_context('roads', 'default', 'WebMercator', REST)
    NoCaseDict([('layer', 'roads'), ('style', 'default'), ('tilematrixset', 'WebMercator')])
    """
    # lower case names, some services use different naming conventions
    # for the RESTful template variables
    context = [
        ('layer', layer),
        ('style', style),
        ('tilematrixset', matrix_set),
    ]
    if request_encoding == KVP:
        context.extend(fixed_params.items())
        context.append(('Version', version))
        context.append(('Format', format))
    return NoCaseDict(context)


def dynamic_context(tile_coord, tile_grid=None, dimensions=None):
    """
    Return the parameters of a single tile request. The ``TileRow`` counts
    from the top of the tile matrix, the internal row from the bottom,
    ``TileRow = -y - 1``.

    Without `tile_grid` the zoom level is used as ``TileMatrix``.

    >>> dynamic_context((2, 5, -4), dimensions={'Time': '2020'})
    NoCaseDict([('TileMatrix', '2'), ('TileCol', 5), ('TileRow', 3), ('Time', '2020')])
    """
    z, x, y = tile_coord
    if tile_grid is not None:
        matrix_id = tile_grid.matrix_id(z)
    else:
        matrix_id = str(z)
    context = [
        ('TileMatrix', matrix_id),
        ('TileCol', x),
        ('TileRow', -y - 1),
    ]
    if dimensions:
        protected = set(p.lower() for p in tile_params)
        for key, value in dimensions.items():
            if key.lower() not in protected:
                context.append((key, value))
    return NoCaseDict(context)


_template_var_re = re.compile(r'\{(\w+?)\}')

required_rest_variables = ('TileMatrix', 'TileRow', 'TileCol')


def template_variables(template):
    """
    Return the names of all ``{Variable}`` placeholders in `template`.

    >>> template_variables('http://host/{Layer}/{TileMatrix}/{TileRow}/{TileCol}.png')
    ['Layer', 'TileMatrix', 'TileRow', 'TileCol']
    """
    return _template_var_re.findall(template)


def missing_rest_variables(template):
    """
    Return the tile variables a RESTful template does not contain.

    >>> missing_rest_variables('http://host/{TileMatrix}/{tilerow}.png')
    ['TileCol']
    """
    found = set(v.lower() for v in template_variables(template))
    return [v for v in required_rest_variables if v.lower() not in found]


def substitute_template(template, context):
    """
    Replace all placeholders of `template` with the values from `context`.
    Names are compared case insensitive. Placeholders without a value stay
    in the result.

    >>> substitute_template('http://host/{Layer}/{TileMatrix}/{Style}.png',
    ...     NoCaseDict({'layer': 'roads', 'tilematrix': '2'}))
    'http://host/roads/2/{Style}.png'
    """
    if not isinstance(context, NoCaseDict):
        context = NoCaseDict(context)

    def substitute_var(match):
        var = match.group(1)
        if var in context and context[var] is not None:
            return str(context[var])
        return match.group(0)

    return _template_var_re.sub(substitute_var, template)

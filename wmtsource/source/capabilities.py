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
Resolve the configuration of a WMTS tile source from a parsed
capabilities document.

The capabilities document is the JSON-like tree of a parsed WMTS
GetCapabilities response (``Contents.Layer``, ``Contents.TileMatrixSet``,
``OperationsMetadata.GetTile.DCP.HTTP.Get``, etc.).
"""
import json
import os.path
from typing import Iterable

from jsonschema.exceptions import ValidationError
from jsonschema.validators import Draft202012Validator

from wmtsource.config import Options
from wmtsource.exception import MalformedCapabilities
from wmtsource.grid import GridError
from wmtsource.grid.tile_grid import tile_grid_from_capabilities_matrix_set
from wmtsource.request.wmts import KVP, REST, request_encoding_from_string
from wmtsource.srs import SRS, equivalent, get_srs, srs_from_crs_code
from wmtsource.util.bbox import TransformationError, bbox_contains
from wmtsource.util.yaml import load_yaml_file

import logging
log = logging.getLogger('wmtsource.capabilities')


with open(os.path.join(os.path.dirname(__file__), 'capabilities-schema.json')) as schema_file:
    schema = json.load(schema_file)


def get_error_messages(errors: Iterable[ValidationError]) -> list[str]:
    msgs = []
    for error in errors:
        path = error.json_path.replace('$', 'root')
        msg = f'{error.message} in {path}'
        msgs.append(msg)
        if error.context is not None:
            msgs += get_error_messages(error.context)
    return msgs


def validate_capabilities(capabilities: dict) -> list[str]:
    """
    Validate the structure of a parsed capabilities document.
    Returns a list with all errors, the list is empty for valid documents.
    """
    validator = Draft202012Validator(schema=schema)
    errors_iter = validator.iter_errors(capabilities)
    return [] if errors_iter is None else get_error_messages(errors_iter)


def load_capabilities(file_or_filename):
    """
    Load a parsed capabilities document from a JSON or YAML file.

    :raises MalformedCapabilities: if the document is not valid
    """
    capabilities = load_yaml_file(file_or_filename)
    errors = validate_capabilities(capabilities)
    if errors:
        raise MalformedCapabilities('invalid capabilities document', errors)
    return capabilities


_config_aliases = {
    'matrixSet': 'matrix_set',
    'requestEncoding': 'request_encoding',
    'crossOrigin': 'cross_origin',
}


def _resolver_config(config):
    conf = {}
    for key, value in config.items():
        conf[_config_aliases.get(key, key)] = value
    return conf


def _find(items, key, value):
    for item in items:
        if item.get(key) == value:
            return item
    return None


def _srs_from_config(projection):
    if projection is None:
        return None
    return get_srs(projection)


def _matrix_set_matches_projection(matrix_set, projection, projection_srs):
    supported_crs = matrix_set['SupportedCRS']
    matrix_set_srs = srs_from_crs_code(supported_crs)
    if matrix_set_srs is not None and projection_srs is not None:
        return equivalent(matrix_set_srs, projection_srs)
    return supported_crs == str(projection)


def _select_matrix_set_link(layer, matrix_sets, conf):
    links = layer['TileMatrixSetLink']
    if len(links) == 1:
        return links[0]

    if conf.get('matrix_set') is not None:
        link = _find(links, 'TileMatrixSet', conf['matrix_set'])
        if link is not None:
            return link
        log.debug("matrix set '%s' not linked to layer '%s'",
                  conf['matrix_set'], layer['Identifier'])

    projection = conf.get('projection')
    if projection is not None:
        projection_srs = _srs_from_config(projection)
        for link in links:
            matrix_set = _matrix_set_by_id(matrix_sets, link['TileMatrixSet'])
            if _matrix_set_matches_projection(matrix_set, projection, projection_srs):
                return link
        log.debug("no matrix set of layer '%s' matches projection %s",
                  layer['Identifier'], projection)

    log.debug("using first matrix set '%s' of layer '%s'",
              links[0]['TileMatrixSet'], layer['Identifier'])
    return links[0]


def _matrix_set_by_id(matrix_sets, identifier):
    matrix_set = _find(matrix_sets, 'Identifier', identifier)
    if matrix_set is None:
        raise MalformedCapabilities(
            "tile matrix set '%s' not found in capabilities" % (identifier, ))
    return matrix_set


def _select_style(layer, style_title):
    styles = layer['Style']
    if style_title is not None:
        style = _find(styles, 'Title', style_title)
        if style is None:
            log.debug("style '%s' not found for layer '%s'", style_title, layer['Identifier'])
            style = styles[0]
        return style['Identifier']
    for style in styles:
        if style.get('isDefault'):
            return style['Identifier']
    return styles[0]['Identifier']


def _default_dimensions(layer):
    dimensions = {}
    for dimension in layer.get('Dimension', []):
        value = dimension.get('Default')
        if value is None:
            values = dimension.get('Value') or [None]
            value = values[0]
        dimensions[dimension['Identifier']] = value
    return dimensions


def _select_projection(matrix_set, conf):
    projection = None
    code = matrix_set.get('SupportedCRS')
    if code:
        projection = srs_from_crs_code(code)

    configured = _srs_from_config(conf.get('projection'))
    if configured is not None:
        if projection is None or equivalent(configured, projection):
            projection = configured
    return projection


def _extent_and_wrap_x(layer, projection):
    wgs84_bbox = layer.get('WGS84BoundingBox')
    if wgs84_bbox is None:
        return None, False

    wgs84 = SRS(4326)
    wgs84_extent = wgs84.valid_extent
    wrap_x = (wgs84_bbox[0] == wgs84_extent[0] and wgs84_bbox[2] == wgs84_extent[2])
    if projection is None:
        return None, wrap_x

    try:
        extent = wgs84.transform_bbox_to(projection, tuple(wgs84_bbox))
    except TransformationError:
        log.debug('unable to transform WGS84BoundingBox of %s to %r',
                  layer['Identifier'], projection)
        return None, wrap_x

    valid_extent = projection.valid_extent
    # the extent of a layer should never exceed the projection
    if valid_extent is not None and not bbox_contains(valid_extent, extent):
        log.debug('ignoring WGS84BoundingBox of %s, not within %r',
                  layer['Identifier'], projection)
        extent = None
    return extent, wrap_x


def _get_encodings(binding):
    constraint = _find(binding['Constraint'], 'name', 'GetEncoding')
    if constraint is None:
        return None
    try:
        encodings = list(constraint['AllowedValues']['Value'])
    except (KeyError, TypeError):
        encodings = []
    if not encodings:
        raise MalformedCapabilities(
            "GetEncoding constraint of '%s' without AllowedValues" % (binding.get('href'), ))
    return encodings


def _get_tile_bindings(capabilities):
    try:
        return capabilities['OperationsMetadata']['GetTile']['DCP']['HTTP']['Get']
    except (KeyError, TypeError):
        return []


def _negotiate_urls(capabilities, request_encoding):
    """
    Return the request encoding and the URLs of the GetTile operation.
    The URLs are empty if no KVP binding is available.
    """
    urls = []
    for binding in _get_tile_bindings(capabilities):
        encodings = None
        if binding.get('Constraint'):
            encodings = _get_encodings(binding)

        if encodings is None:
            # unconstrained bindings only support KVP
            if binding.get('href'):
                request_encoding = KVP
                urls.append(binding['href'])
            continue

        if request_encoding is None:
            request_encoding = KVP if encodings[0].upper() == KVP else REST
        if request_encoding != KVP:
            break
        if KVP in [e.upper() for e in encodings]:
            urls.append(binding['href'])
    return request_encoding, urls


def options_from_capabilities(capabilities, config):
    """
    Resolve the options of a WMTS tile source for a layer of the
    `capabilities` document.

    `config` needs the ``layer`` identifier and can contain
    ``matrix_set``, ``projection``, ``style`` (the style title),
    ``format``, ``request_encoding`` and ``cross_origin``.
    The camel case names ``matrixSet``, ``requestEncoding`` and
    ``crossOrigin`` are accepted as well.

    :returns: the `Options` for `WMTSSource` or ``None`` if the layer
        is not in the capabilities document.
    :raises MalformedCapabilities: for invalid capabilities documents
    """
    errors = validate_capabilities(capabilities)
    if errors:
        raise MalformedCapabilities('invalid capabilities document', errors)

    conf = _resolver_config(config)
    contents = capabilities['Contents']
    layer = _find(contents['Layer'], 'Identifier', conf.get('layer'))
    if layer is None:
        log.info("layer '%s' not found in capabilities", conf.get('layer'))
        return None

    matrix_sets = contents['TileMatrixSet']
    link = _select_matrix_set_link(layer, matrix_sets, conf)
    matrix_set = _matrix_set_by_id(matrix_sets, link['TileMatrixSet'])
    limits = link.get('TileMatrixSetLimits')

    format = conf.get('format')
    if format is None and layer.get('Format'):
        format = layer['Format'][0]

    style = _select_style(layer, conf.get('style'))
    dimensions = _default_dimensions(layer)
    projection = _select_projection(matrix_set, conf)
    extent, wrap_x = _extent_and_wrap_x(layer, projection)

    try:
        tile_grid = tile_grid_from_capabilities_matrix_set(matrix_set, extent, limits)
    except GridError as ex:
        raise MalformedCapabilities(
            "unable to create tile grid for '%s'" % (matrix_set['Identifier'], ), [str(ex)])

    request_encoding = conf.get('request_encoding')
    if request_encoding is not None:
        request_encoding = request_encoding_from_string(request_encoding)
    request_encoding, urls = _negotiate_urls(capabilities, request_encoding)

    if not urls:
        log.debug("no KVP GetTile URL for layer '%s', using ResourceURL templates",
                  layer['Identifier'])
        request_encoding = REST
        for resource in layer.get('ResourceURL', []):
            if resource['resourceType'] == 'tile':
                format = resource.get('format', format)
                urls.append(resource['template'])

    return Options(
        urls=urls,
        layer=conf.get('layer'),
        matrix_set=link['TileMatrixSet'],
        format=format,
        style=style,
        projection=projection,
        request_encoding=request_encoding,
        dimensions=dimensions,
        tile_grid=tile_grid,
        wrap_x=wrap_x,
        cross_origin=conf.get('cross_origin'),
    )

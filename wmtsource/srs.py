# -*- coding: utf-8 -*-
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
Spatial reference systems and transformation of coordinates.
"""
import math
import re
import threading

from pyproj import CRS, Transformer
from pyproj import datadir
from pyproj.exceptions import CRSError

from wmtsource.config import base_config
from wmtsource.util.bbox import calculate_bbox

import logging

log_system = logging.getLogger('wmtsource.system')
log_proj = logging.getLogger('wmtsource.proj')


def get_epsg_num(epsg_code):
    """
    >>> get_epsg_num('ePsG:4326')
    4326
    >>> get_epsg_num(4313)
    4313
    >>> get_epsg_num('31466')
    31466
    >>> get_epsg_num('IGNF:ETRS89UTM28') is None
    True
    """
    if isinstance(epsg_code, str):
        if ':' in epsg_code and epsg_code.upper().startswith('EPSG'):
            epsg_code = int(epsg_code.split(':')[1])
        elif epsg_code.isdigit():
            epsg_code = int(epsg_code)
        else:
            return
    return epsg_code


def get_authority(srs_code):
    """
    >>> get_authority('IAU:1000')
    ('IAU', '1000')
    """
    if isinstance(srs_code, str) and ':' in srs_code:
        auth_name, auth_id = srs_code.rsplit(':', 1)
        return auth_name, auth_id


def _clean_srs_code(code):
    """
    >>> _clean_srs_code(4326)
    'EPSG:4326'
    >>> _clean_srs_code('31466')
    'EPSG:31466'
    >>> _clean_srs_code('crs:84')
    'CRS:84'
    """
    if isinstance(code, str) and ':' in code:
        return code.upper()
    else:
        return 'EPSG:' + str(code)


_proj_initialized = False


def _init_proj():
    global _proj_initialized
    if not _proj_initialized:
        proj_data_dir = base_config().srs.get('proj_data_dir')
        if proj_data_dir:
            log_system.info('loading proj data from %s', proj_data_dir)
            datadir.set_data_dir(proj_data_dir)
        _proj_initialized = True


_thread_local = threading.local()


def SRS(srs_code):
    _init_proj()
    if isinstance(srs_code, _SRS):
        return srs_code

    srs_code = _clean_srs_code(srs_code)

    if not hasattr(_thread_local, 'srs_cache'):
        _thread_local.srs_cache = {}

    if srs_code in _thread_local.srs_cache:
        return _thread_local.srs_cache[srs_code]
    else:
        srs = _SRS(srs_code)
        _thread_local.srs_cache[srs_code] = srs
        return srs


WEBMERCATOR_EPSG = set(('EPSG:900913', 'EPSG:3857',
                        'EPSG:102100', 'EPSG:102113'))

_WEBMERCATOR_EXTENT = (-20037508.342789244, -20037508.342789244,
                       20037508.342789244, 20037508.342789244)

_default_extents = {
    'EPSG:4326': (-180.0, -90.0, 180.0, 90.0),
    'CRS:84': (-180.0, -90.0, 180.0, 90.0),
}
for _epsg in WEBMERCATOR_EPSG:
    _default_extents[_epsg] = _WEBMERCATOR_EXTENT


class _SRS(object):
    """
    This class represents a Spatial Reference System.

    Abstracts transformations between different projections.
    Uses the Proj API via pyproj >=2.
    """

    def __init__(self, srs_code):
        """
        Create a new SRS with the given `srs_code` code.
        """
        self.srs_code = srs_code

        if srs_code in WEBMERCATOR_EPSG:
            epsg_num = 3857
        elif srs_code == 'CRS:84':
            epsg_num = 4326
        else:
            epsg_num = get_epsg_num(srs_code)

        if epsg_num is not None:
            self.proj = CRS.from_epsg(epsg_num)
        else:
            auth_name, auth_id = get_authority(srs_code)
            self.proj = CRS.from_authority(auth_name, auth_id)

        self._transformers = {}

    def _transformer(self, other_srs):
        if other_srs in self._transformers:
            return self._transformers[other_srs]

        t = Transformer.from_crs(self.proj, other_srs.proj, always_xy=True)
        self._transformers[other_srs] = t
        return t

    def transform_to(self, other_srs, points):
        """
        :type points: ``(x, y)`` or ``[(x1, y1), (x2, y2), …]``

        >>> srs1 = SRS(4326)
        >>> srs2 = SRS(900913)
        >>> [str(round(x, 5)) for x in srs1.transform_to(srs2, (8.22, 53.15))]
        ['915046.21432', '7010792.20171']
        >>> srs1.transform_to(srs1, (8.25, 53.5))
        (8.25, 53.5)
        """
        if self == other_srs:
            return points

        transformer = self._transformer(other_srs)
        if isinstance(points[0], (int, float)) and 2 >= len(points) <= 3:
            return transformer.transform(*points)

        x = [p[0] for p in points]
        y = [p[1] for p in points]
        transf_pts = transformer.transform(x, y)
        return zip(transf_pts[0], transf_pts[1])

    def transform_bbox_to(self, other_srs, bbox, with_points=16):
        """

        :param with_points: the number of points to use for the transformation.
            A bbox transformation with only two or four points may cut off some
            parts due to distortions.

        >>> ['%.3f' % x for x in
        ...  SRS(4326).transform_bbox_to(SRS(3857), (-180.0, -90.0, 180.0, 90.0))]
        ['-20037508.343', '-20037508.343', '20037508.343', '20037508.343']
        >>> ['%.5f' % x for x in
        ...  SRS(4326).transform_bbox_to(SRS(3857), (8.2, 53.1, 8.3, 53.2))]
        ['912819.82450', '7001516.67745', '923951.77358', '7020078.53264']
        >>> SRS(4326).transform_bbox_to(SRS(4326), (8.25, 53.0, 8.5, 53.75))
        (8.25, 53.0, 8.5, 53.75)
        """
        if self == other_srs:
            return bbox
        points = generate_envelope_points(bbox, with_points)
        transf_pts = list(self.transform_to(other_srs, points))
        result = calculate_bbox(transf_pts)

        log_proj.debug('transformed from %r to %r (%s -> %s)',
                       self, other_srs, bbox, result)

        # 3857 is only defined within 85.06 N/S, Proj returns 'inf' for coords
        # outside of these bounds. Clamp 4326->3857 transformations to the
        # web mercator extent.
        if self.srs_code in ('EPSG:4326', 'CRS:84') and other_srs.srs_code in WEBMERCATOR_EPSG:
            minx, miny, maxx, maxy = result
            if bbox[0] <= -180.0:
                minx = _WEBMERCATOR_EXTENT[0]
            if bbox[1] <= -85.06:
                miny = _WEBMERCATOR_EXTENT[1]
            if bbox[2] >= 180.0:
                maxx = _WEBMERCATOR_EXTENT[2]
            if bbox[3] >= 85.06:
                maxy = _WEBMERCATOR_EXTENT[3]
            result = (minx, miny, maxx, maxy)
        return result

    @property
    def is_latlong(self):
        """
        >>> SRS(4326).is_latlong
        True
        >>> SRS(31466).is_latlong
        False
        """
        return self.proj.is_geographic

    @property
    def is_axis_order_ne(self):
        """
        Returns `True` if the axis order is North, then East
        (i.e. y/x or lat/lon).

        >>> SRS(4326).is_axis_order_ne
        True
        >>> SRS('CRS:84').is_axis_order_ne
        False
        >>> SRS(31468).is_axis_order_ne
        True
        >>> SRS(25831).is_axis_order_ne
        False
        """
        if self.srs_code in base_config().srs.axis_order_ne:
            return True
        if self.srs_code in base_config().srs.axis_order_en:
            return False
        if self.srs_code == 'CRS:84':
            return False
        return self.proj.axis_info[0].direction == 'north'

    @property
    def is_axis_order_en(self):
        """
        Returns `True` if the axis order is East then North
        (i.e. x/y or lon/lat).
        """
        return not self.is_axis_order_ne

    @property
    def meters_per_unit(self):
        """
        Length of one unit of the first axis in meters.

        >>> SRS(3857).meters_per_unit
        1.0
        >>> round(SRS(4326).meters_per_unit, 4)
        111319.4908
        """
        if self.is_latlong:
            return 2 * math.pi * self.proj.ellipsoid.semi_major_metre / 360
        return self.proj.axis_info[0].unit_conversion_factor

    @property
    def valid_extent(self):
        """
        The validity extent of this SRS in its own units, or ``None`` if
        unknown. Extents from the ``srs.valid_extents`` option take
        precedence over the built-in extents.

        >>> SRS(4326).valid_extent
        (-180.0, -90.0, 180.0, 90.0)
        >>> SRS(31467).valid_extent is None
        True
        """
        extent = base_config().srs.valid_extents.get(self.srs_code)
        if extent is not None:
            return extent
        return _default_extents.get(self.srs_code)

    def __eq__(self, other):
        """
        >>> SRS(4326) == SRS("EpsG:4326")
        True
        >>> SRS(4326) == SRS("4326")
        True
        >>> SRS(4326) == SRS(3857)
        False
        """
        if isinstance(other, _SRS):
            return self.proj.srs == other.proj.srs
        else:
            return NotImplemented

    def __ne__(self, other):
        """
        >>> SRS(3857) != SRS(3857)
        False
        >>> SRS(4326) != SRS(900913)
        True
        """
        equal_result = self.__eq__(other)
        if equal_result is NotImplemented:
            return NotImplemented
        else:
            return not equal_result

    def __str__(self):
        return "SRS %s ('%s')" % (self.srs_code, self.proj.srs)

    def __repr__(self):
        """
        >>> repr(SRS(4326))
        "SRS('EPSG:4326')"
        """
        return "SRS('%s')" % (self.srs_code,)

    def __hash__(self):
        return hash(self.proj.srs)


def generate_envelope_points(bbox, n):
    """
    Generates points that form a linestring around a given bbox.

    @param bbox: bbox to generate linestring for
    @param n: the number of points to generate around the bbox

    >>> generate_envelope_points((10.0, 5.0, 20.0, 15.0), 4)
    [(10.0, 5.0), (20.0, 5.0), (20.0, 15.0), (10.0, 15.0)]
    >>> generate_envelope_points((10.0, 5.0, 20.0, 15.0), 8)
    ... #doctest: +NORMALIZE_WHITESPACE
    [(10.0, 5.0), (15.0, 5.0), (20.0, 5.0), (20.0, 10.0),\
     (20.0, 15.0), (15.0, 15.0), (10.0, 15.0), (10.0, 10.0)]
    """
    (minx, miny, maxx, maxy) = bbox
    if n <= 4:
        n = 0
    else:
        n = int(math.ceil((n - 4) / 4.0))

    width = maxx - minx
    height = maxy - miny

    minx, maxx = min(minx, maxx), max(minx, maxx)
    miny, maxy = min(miny, maxy), max(miny, maxy)

    n += 1
    xstep = width / n
    ystep = height / n
    result = []
    for i in range(n+1):
        result.append((minx + i*xstep, miny))
    for i in range(1, n):
        result.append((maxx, miny + i*ystep))
    for i in range(n, -1, -1):
        result.append((minx + i*xstep, maxy))
    for i in range(n-1, 0, -1):
        result.append((minx, miny + i*ystep))
    return result


_urn_crs_re = re.compile(r'urn:ogc:def:crs:(\w+):(.*:)?(\w+)$', re.IGNORECASE)


def normalize_crs_code(crs_code):
    """
    Convert CRS codes from capabilities documents into the short
    ``AUTH:CODE`` form. Returns the code unchanged if there is nothing
    to normalize.

    >>> normalize_crs_code('urn:ogc:def:crs:EPSG:6.18.3:3857')
    'EPSG:3857'
    >>> normalize_crs_code('urn:ogc:def:crs:EPSG::4326')
    'EPSG:4326'
    >>> normalize_crs_code('urn:ogc:def:crs:OGC:1.3:CRS84')
    'CRS:84'
    >>> normalize_crs_code('EPSG:900913')
    'EPSG:3857'
    >>> normalize_crs_code('EPSG:25832')
    'EPSG:25832'
    """
    code = _urn_crs_re.sub(r'\1:\3', crs_code)
    if code.upper() == 'OGC:CRS84':
        return 'CRS:84'
    elif code.upper() == 'EPSG:900913':
        return 'EPSG:3857'
    return code


def get_srs(srs_code):
    """
    Return the `SRS` for `srs_code` or ``None`` if the code is unknown.

    >>> get_srs('EPSG:4326')
    SRS('EPSG:4326')
    >>> get_srs('EPSG:0') is None
    True
    >>> get_srs(None) is None
    True
    """
    if not srs_code:
        return None
    try:
        return SRS(srs_code)
    except (CRSError, ValueError, TypeError) as ex:
        log_proj.debug('unknown SRS %r: %s', srs_code, ex)
        return None


def srs_from_crs_code(crs_code):
    """
    Return the `SRS` for a CRS code as found in capabilities documents.
    URN codes are normalized first. The raw code is used if the normalized
    code is unknown.

    >>> srs_from_crs_code('urn:ogc:def:crs:EPSG::3857')
    SRS('EPSG:3857')
    >>> srs_from_crs_code('foo:bar') is None
    True
    """
    if not crs_code:
        return None
    return get_srs(normalize_crs_code(crs_code)) or get_srs(crs_code)


def equivalent(srs1, srs2):
    """
    Returns ``True`` if both SRS describe the same reference system.
    The axis order is ignored.

    >>> equivalent(SRS('EPSG:4326'), SRS('CRS:84'))
    True
    >>> equivalent(SRS('EPSG:900913'), SRS('EPSG:3857'))
    True
    >>> equivalent(SRS('EPSG:4326'), SRS('EPSG:3857'))
    False
    """
    if srs1 == srs2:
        return True
    return srs1.proj.equals(srs2.proj, ignore_axis_order=True)

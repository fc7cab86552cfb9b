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

OGC_PIXEL_SIZE = 0.00028  # m/px


def ogc_scale_to_res(scale, meters_per_unit=1.0):
    """
    Convert an OGC scale denominator to the resolution in units of
    the SRS per pixel.

    >>> round(ogc_scale_to_res(559082264.0287178), 4)
    156543.0339
    >>> round(ogc_scale_to_res(279541132.0143589, 111319.49079327357), 10)
    0.703125
    """
    return scale * OGC_PIXEL_SIZE / meters_per_unit


def res_to_ogc_scale(res, meters_per_unit=1.0):
    return res * meters_per_unit / OGC_PIXEL_SIZE

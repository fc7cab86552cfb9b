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

wmts = dict(
    version = '1.0.0',
    format = 'image/jpeg',
)

srs = dict(
    # user sets
    axis_order_ne = set(),
    axis_order_en = set(),
    # default sets, both will be combined in config:finish_base_config
    axis_order_ne_ = set(['EPSG:4326', 'EPSG:4258', 'EPSG:31466', 'EPSG:31467', 'EPSG:31468']),
    axis_order_en_ = set(['CRS:84', 'EPSG:900913', 'EPSG:3857', 'EPSG:25831', 'EPSG:25832', 'EPSG:25833']),
    # validity extents for SRS without a built-in extent, e.g.
    # {'EPSG:25832': [-1877994.66, 3932281.56, 836715.13, 9440581.95]}
    valid_extents = {},
    proj_data_dir = None,
)

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

import yaml


CAPABILITIES = """
version: 1.0.0
OperationsMetadata:
  GetTile:
    DCP:
      HTTP:
        Get:
          - href: "http://tiles.example.org/wmts?"
            Constraint:
              - name: GetEncoding
                AllowedValues:
                  Value: [KVP]
Contents:
  Layer:
    - Identifier: roads
      Title: Roads
      Format: [image/png, image/jpeg]
      WGS84BoundingBox: [-180.0, -85.0, 180.0, 85.0]
      Style:
        - Identifier: night
          Title: Night
        - Identifier: default
          Title: Default
          isDefault: true
      Dimension:
        - Identifier: Time
          Default: "2020"
          Value: ["2019", "2020"]
        - Identifier: Elevation
          Value: ["500", "1000"]
      TileMatrixSetLink:
        - TileMatrixSet: WebMercator
        - TileMatrixSet: WGS84
      ResourceURL:
        - format: image/png
          resourceType: tile
          template: "http://tiles.example.org/rest/roads/{Style}/{TileMatrixSet}/{TileMatrix}/{TileRow}/{TileCol}.png"
        - format: application/json
          resourceType: FeatureInfo
          template: "http://tiles.example.org/rest/roads/{TileMatrix}/{TileRow}/{TileCol}/{J}/{I}.json"
    - Identifier: parcels
      Format: [image/png]
      Style:
        - Identifier: default
          isDefault: true
      TileMatrixSetLink:
        - TileMatrixSet: WebMercator
          TileMatrixSetLimits:
            - TileMatrix: "1"
              MinTileRow: 0
              MaxTileRow: 1
              MinTileCol: 1
              MaxTileCol: 1
            - TileMatrix: "2"
              MinTileRow: 1
              MaxTileRow: 2
              MinTileCol: 2
              MaxTileCol: 3
  TileMatrixSet:
    - Identifier: WebMercator
      SupportedCRS: "urn:ogc:def:crs:EPSG::3857"
      TileMatrix:
        - Identifier: "0"
          ScaleDenominator: 559082264.0287178
          TopLeftCorner: [-20037508.3428, 20037508.3428]
          TileWidth: 256
          TileHeight: 256
          MatrixWidth: 1
          MatrixHeight: 1
        - Identifier: "1"
          ScaleDenominator: 279541132.0143589
          TopLeftCorner: [-20037508.3428, 20037508.3428]
          TileWidth: 256
          TileHeight: 256
          MatrixWidth: 2
          MatrixHeight: 2
        - Identifier: "2"
          ScaleDenominator: 139770566.00717944
          TopLeftCorner: [-20037508.3428, 20037508.3428]
          TileWidth: 256
          TileHeight: 256
          MatrixWidth: 4
          MatrixHeight: 4
        - Identifier: "3"
          ScaleDenominator: 69885283.00358972
          TopLeftCorner: [-20037508.3428, 20037508.3428]
          TileWidth: 256
          TileHeight: 256
          MatrixWidth: 8
          MatrixHeight: 8
    - Identifier: WGS84
      SupportedCRS: "urn:ogc:def:crs:EPSG::4326"
      TileMatrix:
        - Identifier: "1"
          ScaleDenominator: 139770566.00717944
          TopLeftCorner: [90.0, -180.0]
          TileWidth: 256
          TileHeight: 256
          MatrixWidth: 4
          MatrixHeight: 2
        - Identifier: "0"
          ScaleDenominator: 279541132.0143589
          TopLeftCorner: [90.0, -180.0]
          TileWidth: 256
          TileHeight: 256
          MatrixWidth: 2
          MatrixHeight: 1
"""


def load_capabilities_doc():
    return yaml.safe_load(CAPABILITIES)


def get_tile_bindings(caps):
    return caps['OperationsMetadata']['GetTile']['DCP']['HTTP']['Get']

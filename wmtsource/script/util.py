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
Command line tools for WMTS capabilities documents.
"""
import logging
import optparse
import sys

from wmtsource.config import load_base_config
from wmtsource.grid.resolutions import res_to_ogc_scale
from wmtsource.exception import WMTSError
from wmtsource.source.capabilities import load_capabilities, options_from_capabilities
from wmtsource.source.wmts import WMTSSource
from wmtsource.util.yaml import YAMLError, dump_yaml
from wmtsource.version import version


def setup_logging(level=logging.INFO, format=None):
    wmtsource_log = logging.getLogger('wmtsource')
    wmtsource_log.setLevel(level)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    if not format:
        format = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
    formatter = logging.Formatter(format)
    ch.setFormatter(formatter)
    wmtsource_log.addHandler(ch)


def _source_option_parser(usage):
    parser = optparse.OptionParser(usage)
    parser.add_option("-l", "--layer", dest="layer",
        help="identifier of the layer")
    parser.add_option("--matrix-set", dest="matrix_set",
        help="identifier of the preferred tile matrix set")
    parser.add_option("--projection", dest="projection",
        help="preferred projection, e.g. EPSG:3857")
    parser.add_option("--style", dest="style",
        help="title of the style")
    parser.add_option("--format", dest="format",
        help="image format, e.g. image/png")
    parser.add_option("--request-encoding", dest="request_encoding",
        help="KVP or REST")
    parser.add_option("-f", "--base-config", dest="base_config",
        help="YAML file with base configuration")
    parser.add_option("-v", "--verbose", default=False, action="store_true",
        help="log debug messages")
    return parser


def _resolver_config(options):
    config = {'layer': options.layer}
    for name in ('matrix_set', 'projection', 'style', 'format', 'request_encoding'):
        value = getattr(options, name)
        if value is not None:
            config[name] = value
    return config


def _parse_args(parser, args):
    if args:
        args = args[1:]  # remove script name
    options, args = parser.parse_args(args)
    if not args or not options.layer:
        parser.print_help()
        sys.exit(1)

    setup_logging(logging.DEBUG if options.verbose else logging.WARNING)
    if options.base_config:
        load_base_config(config_file=options.base_config)
    return options, args


def _load_capabilities(filename):
    try:
        return load_capabilities(filename)
    except (WMTSError, YAMLError, IOError) as ex:
        print('ERROR: unable to load capabilities %s: %s' % (filename, ex), file=sys.stderr)
        sys.exit(2)


def tile_grid_summary(tile_grid):
    return {
        'name': tile_grid.name,
        'srs': tile_grid.srs.srs_code,
        'tile_matrices': [
            {
                'id': tile_grid.matrix_id(level),
                'res': tile_grid.resolution(level),
                'scale': res_to_ogc_scale(tile_grid.resolution(level), tile_grid.srs.meters_per_unit),
                'tile_range': list(tile_grid.tile_range(level)),
            }
            for level in range(tile_grid.levels)
        ],
    }


def options_summary(options):
    """
    Return the resolved `options` as a dictionary of basic types.
    """
    return {
        'layer': options.layer,
        'matrix_set': options.matrix_set,
        'style': options.style,
        'format': options.format,
        'request_encoding': options.request_encoding,
        'urls': list(options.urls),
        'projection': options.projection.srs_code if options.projection else None,
        'dimensions': dict(options.dimensions),
        'wrap_x': options.wrap_x,
        'tile_grid': tile_grid_summary(options.tile_grid),
    }


def resolve_command(args=None):
    parser = _source_option_parser("%prog resolve [options] capabilities.json")
    options, args = _parse_args(parser, args)

    capabilities = _load_capabilities(args[0])
    try:
        resolved = options_from_capabilities(capabilities, _resolver_config(options))
    except WMTSError as ex:
        print('ERROR: %s' % (ex, ), file=sys.stderr)
        sys.exit(2)
    if resolved is None:
        print("ERROR: layer '%s' not found" % (options.layer, ), file=sys.stderr)
        sys.exit(2)

    sys.stdout.write(dump_yaml(options_summary(resolved)))


def parse_tile(tile):
    """
    Parse a ``TileMatrix,TileCol,TileRow`` string into the matrix
    identifier, column and row.

    >>> parse_tile('5,17,10')
    ('5', 17, 10)
    >>> parse_tile('EPSG:3857:5/17/10')
    ('EPSG:3857:5', 17, 10)
    """
    sep = '/' if '/' in tile else ','
    matrix_id, col, row = tile.rsplit(sep, 2)
    return matrix_id, int(col), int(row)


def tile_url_command(args=None):
    parser = _source_option_parser(
        "%prog tile-url [options] capabilities.json TileMatrix,TileCol,TileRow")
    parser.add_option("-d", "--dimension", dest="dimensions", action="append", default=[],
        help="dimension value as NAME=VALUE, can be used multiple times")
    options, args = _parse_args(parser, args)
    if len(args) != 2:
        parser.print_help()
        sys.exit(1)

    try:
        matrix_id, col, row = parse_tile(args[1])
    except ValueError:
        print('ERROR: invalid tile %s' % (args[1], ), file=sys.stderr)
        sys.exit(1)

    dimensions = {}
    for dimension in options.dimensions:
        if '=' not in dimension:
            print('ERROR: invalid dimension %s, expected NAME=VALUE' % (dimension, ),
                  file=sys.stderr)
            sys.exit(1)
        name, value = dimension.split('=', 1)
        dimensions[name] = value

    capabilities = _load_capabilities(args[0])
    try:
        source = WMTSSource.from_capabilities(capabilities, _resolver_config(options))
    except WMTSError as ex:
        print('ERROR: %s' % (ex, ), file=sys.stderr)
        sys.exit(2)
    if source is None:
        print("ERROR: layer '%s' not found" % (options.layer, ), file=sys.stderr)
        sys.exit(2)

    if dimensions:
        source.update_dimensions(dimensions)

    level = source.tile_grid.level_for_matrix_id(matrix_id)
    url = None
    if level is not None:
        url = source.tile_url((level, col, -row - 1))
    if url is None:
        print('ERROR: tile %s not in tile matrix set %s' % (args[1], source.matrix_set),
              file=sys.stderr)
        sys.exit(2)
    print(url)


commands = {
    'resolve': {
        'func': resolve_command,
        'help': 'Resolve the tile source options of a layer.',
    },
    'tile-url': {
        'func': tile_url_command,
        'help': 'Print the URL of a single tile.',
    },
}


class NonStrictOptionParser(optparse.OptionParser):
    def _process_args(self, largs, rargs, values):
        while rargs:
            arg = rargs[0]
            try:
                if arg == "--":
                    del rargs[0]
                    return
                elif arg[0:2] == "--":
                    self._process_long_opt(rargs, values)
                elif arg[:1] == "-" and len(arg) > 1:
                    self._process_short_opts(rargs, values)
                elif self.allow_interspersed_args:
                    largs.append(arg)
                    del rargs[0]
                else:
                    return
            except optparse.BadOptionError:
                largs.append(arg)


def print_items(data, title='Commands'):
    name_len = max(len(name) for name in data)

    if title:
        print('%s:' % (title, ), file=sys.stdout)
    for name, item in data.items():
        help = item.get('help', '')
        name = ('%%-%ds' % name_len) % name
        if help:
            help = '  ' + help
        print('  %s%s' % (name, help), file=sys.stdout)


def main():
    parser = NonStrictOptionParser("usage: %prog COMMAND [options]",
        add_help_option=False)
    options, args = parser.parse_args()

    if len(args) < 1 or args[0] in ('--help', '-h'):
        parser.print_help()
        print()
        print_items(commands)
        sys.exit(1)

    if len(args) == 1 and args[0] == '--version':
        print('wmtsource ' + version)
        sys.exit(1)

    command = args[0]
    if command not in commands:
        parser.print_help()
        print()
        print_items(commands)
        print('\nERROR: unknown command %s' % (command,), file=sys.stdout)
        sys.exit(1)

    args = sys.argv[0:1] + sys.argv[2:]
    commands[command]['func'](args)


if __name__ == '__main__':
    main()

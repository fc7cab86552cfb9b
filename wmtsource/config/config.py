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
System-wide configuration.
"""
import os
import copy
import contextlib
import threading

from wmtsource.util.yaml import load_yaml_file


class Options(dict):
    """
    Dictionary with attribute style access.

    >>> o = Options(bar='foo')
    >>> o.bar
    'foo'
    """
    def __repr__(self):
        return '%s(%s)' % (self.__class__.__name__, dict.__repr__(self))

    def __getattr__(self, name):
        if name in self:
            return self[name]
        else:
            raise AttributeError(name)

    __setattr__ = dict.__setitem__

    def __delattr__(self, name):
        if name in self:
            del self[name]
        else:
            raise AttributeError(name)

    def update(self, other=None, **kw):
        if other is not None:
            if hasattr(other, 'items'):
                it = other.items()
            else:
                it = iter(other)
        else:
            it = iter(kw.items())
        for key, value in it:
            if key in self and isinstance(self[key], Options):
                self[key].update(value)
            else:
                self[key] = value

    def __deepcopy__(self, memo):
        return Options(copy.deepcopy(list(self.items()), memo))


class _ConfigStack(threading.local):
    def __init__(self):
        self.stack = []

    def push(self, conf):
        self.stack.append(conf)

    def pop(self):
        return self.stack.pop()

    @property
    def top(self):
        if self.stack:
            return self.stack[-1]
        return None


_config = _ConfigStack()


def base_config():
    """
    Returns the context-local system-wide configuration.
    The default configuration is loaded on first access.
    """
    config = _config.top
    if config is None:
        config = load_default_config()
        config.conf_base_dir = os.getcwd()
        finish_base_config(config)
        _config.push(config)
    return config


@contextlib.contextmanager
def local_base_config(conf):
    """
    Temporarily set the global configuration (wmtsource.config.base_config).

    The configuration is thread-local. Use `local_base_config` to
    run code with a different configuration, e.g. in tests.
    """
    _config.push(conf)
    try:
        yield
    finally:
        _config.pop()


def _to_options_map(mapping):
    if isinstance(mapping, dict):
        opt = Options()
        for key, value in mapping.items():
            opt[key] = _to_options_map(value)
        return opt
    elif isinstance(mapping, list):
        return [_to_options_map(m) for m in mapping]
    else:
        return mapping


def finish_base_config(bc=None):
    bc = bc or base_config()
    if 'srs' in bc:
        # build union of default axis_order_xx_ and the user configured axis_order_xx
        default_ne = set(bc.srs.get('axis_order_ne_', ()))
        default_en = set(bc.srs.get('axis_order_en_', ()))
        # remove from default to allow overwrites
        default_ne.difference_update(set(bc.srs.axis_order_en))
        default_en.difference_update(set(bc.srs.axis_order_ne))
        bc.srs.axis_order_ne = default_ne.union(set(bc.srs.axis_order_ne))
        bc.srs.axis_order_en = default_en.union(set(bc.srs.axis_order_en))
        if bc.srs.get('proj_data_dir') and 'conf_base_dir' in bc:
            bc.srs.proj_data_dir = os.path.join(bc.conf_base_dir, bc.srs.proj_data_dir)
        valid_extents = {}
        for code, extent in (bc.srs.get('valid_extents') or {}).items():
            valid_extents[code.upper()] = tuple(float(v) for v in extent)
        bc.srs.valid_extents = valid_extents


def _defaults_dict():
    from wmtsource.config import defaults
    config_dict = {}
    for k, v in defaults.__dict__.items():
        if k.startswith('_'):
            continue
        config_dict[k] = copy.deepcopy(v)
    return config_dict


def load_default_config():
    default_conf = Options()
    load_config(default_conf, config_dict=_defaults_dict())
    return default_conf


def load_base_config(config_file=None, clear_existing=False):
    """
    Load system wide base configuration.

    :param config_file: the file name of the YAML configuration.
                        if ``None``, load the internal defaults
    :param clear_existing: if ``True`` remove the existing configuration settings,
                           else overwrite the settings.
    """
    bc = base_config()
    if config_file is None:
        conf_base_dir = os.getcwd()
        load_config(bc, config_dict=_defaults_dict(), clear_existing=clear_existing)
    else:
        conf_base_dir = os.path.abspath(os.path.dirname(config_file))
        if clear_existing:
            load_config(bc, config_dict=_defaults_dict(), clear_existing=True)
        load_config(bc, config_file=config_file)

    bc.conf_base_dir = conf_base_dir
    finish_base_config(bc)


def load_config(config, config_file=None, config_dict=None, clear_existing=False):
    if clear_existing:
        for key in list(config.keys()):
            del config[key]

    if config_dict is None:
        config_dict = load_yaml_file(config_file)

    defaults = _to_options_map(config_dict)

    if defaults:
        for key, value in defaults.items():
            if key in config and hasattr(config[key], 'update'):
                config[key].update(value)
            else:
                config[key] = value

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
Query string handling for tile requests.
"""
from urllib.parse import quote


def url_query_keys(url):
    """
    Return the lower-case names of all query parameters of `url`.

    >>> sorted(url_query_keys('http://host/wmts?SERVICE=WMTS&layer=&foo'))
    ['foo', 'layer', 'service']
    >>> url_query_keys('http://host/wmts')
    set()
    """
    if '?' not in url:
        return set()
    query = url.split('?', 1)[1].split('#', 1)[0]
    keys = set()
    for part in query.split('&'):
        if not part:
            continue
        keys.add(part.split('=', 1)[0].lower())
    return keys


def query_string(params):
    """
    The parameters as a query string. Parameters with ``None`` values are
    skipped.

    >>> query_string({'foo': 'egg', 'bar': 'ham%eggs', 'baz': 100, 'none': None})
    'foo=egg&bar=ham%25eggs&baz=100'
    """
    kv_pairs = []
    for key, value in params.items():
        if value is None:
            continue
        kv_pairs.append(key + '=' + quote(str(value).encode('utf-8'), safe=','))
    return '&'.join(kv_pairs)


def append_params(url, params):
    """
    Append `params` to the query string of `url`. Parameters that are
    already in the query string of `url` (compared case insensitive) are
    not added again. New parameters are added after the existing ones.

    >>> append_params('http://host/wmts', {'Service': 'WMTS', 'Layer': 'roads'})
    'http://host/wmts?Service=WMTS&Layer=roads'
    >>> append_params('http://host/wmts?', {'Format': 'image/png'})
    'http://host/wmts?Format=image%2Fpng'
    >>> append_params('http://host/wmts?layer=foo&', {'Layer': 'roads', 'Style': 'default'})
    'http://host/wmts?layer=foo&Style=default'
    """
    existing = url_query_keys(url)
    new_params = {}
    for key, value in params.items():
        if key.lower() in existing:
            continue
        existing.add(key.lower())
        new_params[key] = value
    qs = query_string(new_params)
    if not qs:
        return url

    if url.endswith('?') or url.endswith('&'):
        url = url[:-1]
    if '?' in url:
        return url + '&' + qs
    return url + '?' + qs

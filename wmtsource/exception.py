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
Exceptions for capabilities resolution and tile addressing.
"""


class WMTSError(Exception):
    pass


class MalformedCapabilities(WMTSError):
    """
    Raised for capabilities documents that lack required structure,
    e.g. a layer that links to an unknown tile matrix set.

    :ivar errors: list with all error messages
    """
    def __init__(self, message, errors=None):
        WMTSError.__init__(self, message)
        self.msg = message
        self.errors = errors or [message]

    def __str__(self):
        if self.errors != [self.msg]:
            return '%s: %s' % (self.msg, '; '.join(self.errors))
        return self.msg


class InvalidWMTSTemplate(WMTSError):
    pass

"""
Copyright 2015 Basho Technologies, Inc.

This file is provided to you under the Apache License,
Version 2.0 (the "License"); you may not use this file
except in compliance with the License.  You may obtain
a copy of the License at

  http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing,
software distributed under the License is distributed on an
"AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
KIND, either express or implied.  See the License for the
specific language governing permissions and limitations
under the License.
"""


class RiakError(Exception):
    """
    Base class for exceptions generated in the Riak API.
    """
    def __init__(self, *args, **kwargs):
        super(RiakError, self).__init__(*args, **kwargs)
        if len(args) > 0:
            self.value = args[0]
        else:
            self.value = 'unknown'

    def __str__(self):
        return repr(self.value)


class TransportError(RiakError):
    """
    Raised when a request produced no response at all (connection
    refused, DNS failure, timeout) and the caller needs one.
    """
    def __init__(self, message='No response received', url=None):
        super(TransportError, self).__init__(message)
        self.url = url


class ServerUnreachable(TransportError):
    """
    Raised when a response is validated but the server was never
    reached (status code ``0``).
    """
    def __init__(self, url):
        super(ServerUnreachable, self).__init__(
            'Could not contact Riak Server: {0}!'.format(url), url)


class UnexpectedStatus(RiakError):
    """
    Raised when the server answered with a status code that none of
    the candidate actions accept.

    :ivar actions: the action names the response was validated against
    :ivar status: the received HTTP status code
    :ivar reasons: a dict of action name to the matched description
    :ivar url: the request URL, when known
    """
    def __init__(self, message, actions, status, reasons, url=None):
        super(UnexpectedStatus, self).__init__(message)
        self.actions = actions
        self.status = status
        self.reasons = reasons
        self.url = url


class DataError(RiakError):
    """
    Raised when object data cannot be encoded or decoded, e.g. a
    malformed JSON body or auto-indexing data that is not a mapping.
    """
    pass

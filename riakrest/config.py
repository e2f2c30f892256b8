# Copyright 2010-present Basho Technologies, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import numbers

from riakrest.transports.transport import Transport

#: Default quorum for reads, writes and durable writes
DEFAULT_QUORUM = 2

#: Default per-request timeout, in seconds
DEFAULT_TIMEOUT = 60


class RiakConfig(object):
    """
    Holds the connection settings, URL prefixes and default quorum
    values shared by a :class:`~riakrest.client.RiakClient` and every
    bucket and object created from it.

    A bucket consults its own overrides first and falls back to the
    values held here.
    """

    def __init__(self, host='127.0.0.1', port=8098, ssl=False,
                 prefix='riak', bucket_prefix='buckets', key_prefix='keys',
                 index_prefix='index', mapred_prefix='mapred',
                 ping_prefix='ping', stats_prefix='stats',
                 r=DEFAULT_QUORUM, w=DEFAULT_QUORUM, dw=DEFAULT_QUORUM,
                 client_id=None, enable_profiling=False,
                 timeout=DEFAULT_TIMEOUT):
        """
        :param host: the Riak node's host name or address
        :type host: string
        :param port: the Riak node's HTTP port
        :type port: integer
        :param ssl: whether to connect with HTTPS
        :type ssl: boolean
        :param prefix: the path prefix for object and bucket requests
        :type prefix: string
        :param r: default read quorum
        :type r: integer, string
        :param w: default write quorum
        :type w: integer, string
        :param dw: default durable write quorum
        :type dw: integer, string
        :param client_id: the client ID sent with every write, generated
           when not given
        :type client_id: string
        :param enable_profiling: log the elapsed time of each request
        :type enable_profiling: boolean
        :param timeout: per-request timeout, in seconds
        :type timeout: integer, float
        """
        self.host = host
        self.port = int(port)
        self.ssl = bool(ssl)
        self.prefix = prefix
        self.bucket_prefix = bucket_prefix
        self.key_prefix = key_prefix
        self.index_prefix = index_prefix
        self.mapred_prefix = mapred_prefix
        self.ping_prefix = ping_prefix
        self.stats_prefix = stats_prefix
        self.r = r
        self.w = w
        self.dw = dw
        self.client_id = client_id or Transport.make_random_client_id()
        self.enable_profiling = bool(enable_profiling)
        self.timeout = timeout

    def _get_timeout(self):
        return self._timeout

    def _set_timeout(self, value):
        if (isinstance(value, bool) or
                not isinstance(value, numbers.Real) or value <= 0):
            raise ValueError('timeout must be a positive number of '
                             'seconds, got %r' % (value,))
        self._timeout = value

    timeout = property(_get_timeout, _set_timeout,
                       doc="""the per-request timeout, in seconds""")

    @property
    def scheme(self):
        return 'https' if self.ssl else 'http'

    def base_url(self):
        """
        Returns the ``scheme://host:port`` the client talks to.

        :rtype: string
        """
        return '{0}://{1}:{2}'.format(self.scheme, self.host, self.port)

    def __repr__(self):
        return '<RiakConfig {0} prefix={1!r}>'.format(self.base_url(),
                                                      self.prefix)

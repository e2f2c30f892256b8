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

from weakref import WeakValueDictionary

from riakrest.bucket import RiakBucket
from riakrest.config import RiakConfig
from riakrest.mapreduce import RiakMapReduce, RiakMapReduceChain
from riakrest.transports.http import HttpTransport, connection_class_for
from riakrest.transports.http.multi import MultiRequestPool

#: ``storage_backend`` stat value of the backend supporting 2i
INDEX_BACKEND = 'riak_kv_eleveldb_backend'
MULTI_BACKEND = 'riak_kv_multi_backend'


def config_property(name, doc=None):
    def _prop_getter(self):
        return getattr(self._config, name)

    def _prop_setter(self, value):
        setattr(self._config, name, value)

    return property(_prop_getter, _prop_setter, doc=doc)


class RiakClient(RiakMapReduceChain):
    """
    The ``RiakClient`` object holds information necessary to connect
    to Riak. Requests can be made to Riak directly through the client
    or by using the methods on related objects.
    """

    def __init__(self, config=None, connection_class=None,
                 multiget_pool_size=None, **options):
        """
        Construct a new ``RiakClient`` object.

        :param config: the settings to use; built from ``options`` when
           not given
        :type config: :class:`~riakrest.config.RiakConfig`
        :param connection_class: the HTTP connection class used for each
           request, chosen from the ``ssl`` setting by default
        :param multiget_pool_size: the number of threads to keep for
           :meth:`RiakBucket.multiget
           <riakrest.bucket.RiakBucket.multiget>`; without it every
           batch starts its own threads
        :type multiget_pool_size: int
        :param options: keyword arguments for
           :class:`~riakrest.config.RiakConfig`
        """
        if config is None:
            config = RiakConfig(**options)
        elif options:
            raise TypeError('Pass either a RiakConfig or keyword options, '
                            'not both')
        self._config = config

        if connection_class is None:
            connection_class = connection_class_for(config)

        if multiget_pool_size:
            self._multiget_pool = MultiRequestPool(size=multiget_pool_size)
        else:
            self._multiget_pool = None

        self.transport = HttpTransport(config,
                                       client=self,
                                       connection_class=connection_class,
                                       multi_pool=self._multiget_pool)
        self._buckets = WeakValueDictionary()
        self._mapreduce = None
        self._stats = None

    @property
    def config(self):
        return self._config

    r = config_property('r', doc="""
    The default R-value for buckets that do not set their own.
    """)

    w = config_property('w', doc="""
    The default W-value for buckets that do not set their own.
    """)

    dw = config_property('dw', doc="""
    The default DW-value for buckets that do not set their own.
    """)

    client_id = config_property('client_id', doc="""
    The client ID for this client instance
    """)

    def bucket(self, name):
        """
        Get the bucket by the specified name. Since buckets always exist,
        this will always return a
        :class:`RiakBucket <riakrest.bucket.RiakBucket>`.

        :param name: the bucket name
        :type name: str
        :rtype: :class:`RiakBucket <riakrest.bucket.RiakBucket>`
        """
        if not isinstance(name, str):
            raise TypeError('Bucket name must be a string')

        return self._buckets.setdefault(name, RiakBucket(self, name))

    def buckets(self):
        """
        Get every bucket that holds data.

        .. warning:: Do not use this in production, as it requires
           traversing through all keys stored in a cluster.

        :rtype: list of :class:`RiakBucket <riakrest.bucket.RiakBucket>`
        """
        return [self.bucket(name) for name in self.transport.get_buckets()]

    def is_alive(self):
        """
        Check if the Riak server for this client is alive.

        :rtype: boolean
        """
        return self.transport.ping()

    def stats(self, refresh=False):
        """
        Gets performance statistics and server information, cached
        after the first request.

        :rtype: dict
        """
        if refresh or self._stats is None:
            self._stats = self.transport.stats()
        return self._stats

    def is_secondary_index_supported(self):
        """
        Whether the storage backend of the node supports secondary
        indexes.
        """
        return self.stats().get('storage_backend') == INDEX_BACKEND

    def is_multi_backend_supported(self):
        return self.stats().get('storage_backend') == MULTI_BACKEND

    def get_mapreduce(self, reset=False):
        """
        Returns the Map/Reduce job shared by this client and its
        objects, starting a new one when ``reset`` is set.

        :rtype: :class:`~riakrest.mapreduce.RiakMapReduce`
        """
        if reset or self._mapreduce is None:
            self._mapreduce = RiakMapReduce(self)
        return self._mapreduce

    def close(self):
        """
        Stops the worker threads kept for multi-get requests.
        """
        if self._multiget_pool is not None:
            self._multiget_pool.stop()
            self._multiget_pool = None
            self.transport._multi_pool = None

    def __repr__(self):
        return '<RiakClient %s>' % self._config.base_url()

"""
Copyright 2010 Rusty Klophaus <rusty@basho.com>
Copyright 2010 Justin Sheehy <justin@basho.com>
Copyright 2009 Jay Baird <jay@mochimedia.com>

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
from riakrest.link import RiakLink
from riakrest.riak_error import RiakError


def bucket_property(name, doc=None):
    def _prop_getter(self):
        return self.get_property(name)

    def _prop_setter(self, value):
        return self.set_property(name, value)

    return property(_prop_getter, _prop_setter, doc=doc)


class RiakBucket(object):
    """
    The ``RiakBucket`` object allows you to access and change information
    about a Riak bucket, and provides methods to create or retrieve
    objects within the bucket.

    Bucket properties and the key list are fetched once and cached;
    pass ``refresh=True`` to fetch them again.
    """

    def __init__(self, client, name):
        """
        Returns a new ``RiakBucket`` instance.

        :param client: A :class:`RiakClient <riakrest.client.RiakClient>`
               instance
        :type client: :class:`RiakClient <riakrest.client.RiakClient>`
        :param name: The bucket name
        :type name: string
        """

        if not isinstance(name, str):
            raise TypeError('Bucket name must be a string')

        self._client = client
        self.name = name
        self._r = None
        self._w = None
        self._dw = None
        self._properties = None
        self._keys = None

    def __hash__(self):
        return hash((self.name, self._client))

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return hash(self) == hash(other)
        else:
            return False

    def __ne__(self, other):
        return not self.__eq__(other)

    # Quorum values, falling back to the client's defaults

    def get_r(self, r=None):
        """
        Get the R-value for this bucket, if it is set, otherwise return
        the R-value for the client.

        :param r: an explicit value, returned as-is when given
        :rtype: integer
        """
        if r is not None:
            return r
        if self._r is not None:
            return self._r
        return self._client.r

    def set_r(self, r):
        """
        Set the R-value for this bucket. :meth:`get` and
        :meth:`get_binary` operations that do not specify an R-value
        will use this value.

        :rtype: :class:`RiakBucket`
        """
        self._r = r
        return self

    def get_w(self, w=None):
        if w is not None:
            return w
        if self._w is not None:
            return self._w
        return self._client.w

    def set_w(self, w):
        self._w = w
        return self

    def get_dw(self, dw=None):
        if dw is not None:
            return dw
        if self._dw is not None:
            return self._dw
        return self._client.dw

    def set_dw(self, dw):
        self._dw = dw
        return self

    # Objects

    def new(self, key=None, data=None, content_type='application/json'):
        """A shortcut for manually instantiating a new JSON
        :class:`~riakrest.riak_object.RiakObject`.

        :param key: Name of the key. Leaving this to be None (default)
                    will make Riak generate the key on store.
        :type key: str
        :param data: The data to store, must be JSON-serializable
        :type data: object
        :param content_type: The media type of the data
        :type content_type: str
        :rtype: :class:`~riakrest.riak_object.RiakObject`
        """
        from riakrest.riak_object import RiakObject
        obj = RiakObject(self._client, self, key)
        obj.content_type = content_type
        obj.data = data
        return obj

    def new_binary(self, key=None, data=None,
                   content_type='application/octet-stream'):
        """
        Create a new object whose data is stored as-is rather than
        JSON-encoded.

        :rtype: :class:`~riakrest.riak_object.RiakObject`
        """
        obj = self.new(key, data, content_type)
        obj.jsonize = False
        return obj

    def get(self, key, r=None):
        """
        Retrieve an object from Riak, JSON-decoding its data. A missing
        key yields an object whose ``exists`` is ``False``.

        :param key: Name of the key.
        :type key: string
        :param r: R-Value of the request (defaults to bucket's R)
        :type r: integer
        :rtype: :class:`RiakObject <riakrest.riak_object.RiakObject>`
        """
        return self.new(key).reload(r)

    def get_binary(self, key, r=None):
        """
        Retrieve an object from Riak without decoding its data.

        :rtype: :class:`RiakObject <riakrest.riak_object.RiakObject>`
        """
        return self.new_binary(key).reload(r)

    def multiget(self, keys, r=None):
        """
        Retrieves a list of keys belonging to this bucket in parallel.

        :param keys: the keys to fetch
        :type keys: list
        :param r: R-Value for the requests (defaults to bucket's R)
        :type r: integer
        :rtype: list of :class:`RiakObjects <riakrest.riak_object.RiakObject>`
            or ``(bucket, key, error)`` tuples for failed fetches
        """
        return self._multiget([self.new(key) for key in keys], r)

    def multiget_binary(self, keys, r=None):
        return self._multiget([self.new_binary(key) for key in keys], r)

    def _multiget(self, objs, r):
        r = self.get_r(r)
        results = []
        for result in self._client.transport.get_multi(objs, r=r):
            if not isinstance(result, tuple):
                try:
                    result._adopt_first_sibling(r)
                except RiakError as err:
                    result = (self.name, result.key, err)
            results.append(result)
        return results

    def delete(self, key, dw=None):
        """
        Deletes a key from Riak. Short hand for
        ``bucket.new(key).delete()``.

        :rtype: :class:`RiakObject <riakrest.riak_object.RiakObject>`
        """
        return self.new(key).delete(dw)

    # Properties

    n_val = bucket_property('n_val', doc="""
    N-value for this bucket, which is the number of replicas
    that will be written of each object in the bucket.

    .. warning:: Set this once before you write any data to the
       bucket, and never change it again, otherwise unpredictable
       things could happen. This should only be used if you know what
       you are doing.
    """)

    allow_mult = bucket_property('allow_mult', doc="""
    If set to True, then writes with conflicting data will be stored
    and returned to the client.

    :type bool: boolean
    """)

    def set_property(self, key, value):
        """
        Set a bucket property.

        :param key: Property to set.
        :type key: string
        :param value: Property value.
        :type value: mixed
        """
        return self.set_properties({key: value})

    def get_property(self, key, refresh=False):
        """
        Retrieve a bucket property, or ``None`` if Riak did not
        report it.

        :param key: The property to retrieve.
        :type key: string
        :rtype: mixed
        """
        return self.get_properties(refresh).get(key)

    def set_properties(self, props):
        """
        Set multiple bucket properties in one call. The cached
        properties are dropped.

        :param props: A dictionary of properties
        :type props: dict
        """
        self._client.transport.set_bucket_props(self, props)
        self._properties = None
        return True

    def get_properties(self, refresh=False):
        """
        Retrieve a dict of all bucket properties.

        :param refresh: fetch them again even if cached
        :type refresh: boolean
        :rtype: dict
        """
        if refresh or self._properties is None:
            self._properties = self._client.transport.get_bucket_props(self)
        return self._properties

    def get_keys(self, refresh=False):
        """
        Return all keys within the bucket.

        .. warning:: At current, this requires traversing all keys in
           the cluster and should not be used in production.

        :param refresh: list them again even if cached
        :type refresh: boolean
        :rtype: list of keys
        """
        if refresh or self._keys is None:
            self._keys = self._client.transport.get_keys(self)
        return self._keys

    def index_search(self, name, type, start_or_exact, end=None,
                     dedupe=False):
        """
        Queries the secondary index ``<name>_<type>`` for an exact value,
        or a range when ``end`` is given.

        :param name: the index field name
        :type name: string
        :param type: ``'int'`` or ``'bin'``
        :type type: string
        :param start_or_exact: the value, or the start of the range
        :param end: the end of the range
        :param dedupe: drop repeated keys
        :type dedupe: boolean
        :rtype: list of :class:`~riakrest.link.RiakLink`
        """
        from riakrest.riak_object import index_name
        keys = self._client.transport.get_index(
            self, index_name(name, type), start_or_exact, end)
        if dedupe:
            keys = list(dict.fromkeys(keys))
        return [RiakLink(self.name, key, client=self._client)
                for key in keys]

    def __str__(self):
        return '<RiakBucket %r>' % self.name

    __repr__ = __str__

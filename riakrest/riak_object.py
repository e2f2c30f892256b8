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

from riakrest.link import RiakLink
from riakrest.transports.http.headers import HttpHeaders
from riakrest.util import coerce_index_value

INDEX_TYPES = ('int', 'bin')


def index_name(name, type):
    """
    Builds the full index name, e.g. ``age_int``, from a field name and
    an index type.
    """
    if type not in INDEX_TYPES:
        raise ValueError('Index type must be one of %s, got %r' %
                         (', '.join(INDEX_TYPES), type))
    return '%s_%s' % (name, type)


class RiakObject(object):
    """
    The RiakObject holds meta information about a Riak object, plus the
    object's data.

    Its state is rebuilt from scratch every time a response from Riak
    is applied to it; callers change it between a load and a store.
    """

    def __init__(self, client, bucket, key=None):
        """
        Construct a new RiakObject.

        :param client: A RiakClient object.
        :type client: :class:`RiakClient <riakrest.client.RiakClient>`
        :param bucket: A RiakBucket object.
        :type bucket: :class:`RiakBucket <riakrest.bucket.RiakBucket>`
        :param key: An optional key. If not specified, then the key
         is generated by the server when :func:`store` is called.
        :type key: string
        """
        self.client = client
        self.bucket = bucket
        self.key = key
        self.jsonize = True
        self.clear()
        self.content_type = 'application/json'

    def clear(self):
        """
        Resets the object to the empty, non-existent state. The key,
        bucket and JSON mode are kept.

        :rtype: :class:`RiakObject`
        """
        self.headers = HttpHeaders()
        self.status = None
        self.exists = False
        self.links = []
        self.siblings = None
        self.indexes = {}
        self.auto_indexes = {}
        self.meta = {}
        self._data = None
        return self

    def _get_data(self):
        return self._data

    def _set_data(self, value):
        self._data = value

    data = property(_get_data, _set_data, doc="""
        The data stored in this object. A JSON-compatible value when
        ``jsonize`` is set, raw bytes or text otherwise.
        """)

    def _get_content_type(self):
        return self.headers.get('content-type') or 'application/json'

    def _set_content_type(self, value):
        self.headers['content-type'] = value

    content_type = property(_get_content_type, _set_content_type,
                            doc="""The MIME type of the object's data""")

    @property
    def vclock(self):
        """
        The opaque vector clock Riak returned with this object, or
        ``None``.
        """
        value = self.headers.get('x-riak-vclock')
        if isinstance(value, list):
            return value[-1]
        return value

    # Links

    def add_link(self, obj, tag=None):
        """
        Add a link to a RiakObject.

        :param obj: Either a RiakObject or a RiakLink object.
        :type obj: :class:`RiakObject` or :class:`RiakLink`
        :param tag: Optional link tag. Defaults to bucket name. It is
         ignored if ``obj`` is a RiakLink instance.
        :type tag: string
        :rtype: :class:`RiakObject`
        """
        newlink = self._as_link(obj, tag)
        self.remove_link(newlink)
        self.links.append(newlink)
        return self

    def remove_link(self, obj, tag=None):
        """
        Remove a link to a RiakObject.

        :param obj: Either a RiakObject or a RiakLink object.
        :type obj: :class:`RiakObject` or :class:`RiakLink`
        :param tag: Optional link tag. Defaults to bucket name. It is
         ignored if ``obj`` is a RiakLink instance.
        :type tag: string
        :rtype: :class:`RiakObject`
        """
        oldlink = self._as_link(obj, tag)
        self.links = [link for link in self.links if link != oldlink]
        return self

    def _as_link(self, obj, tag):
        if isinstance(obj, RiakLink):
            link = obj
        else:
            link = RiakLink(obj.bucket.name, obj.key, tag)
        if link.client is None:
            link.client = self.client
        return link

    # Secondary indexes

    def add_index(self, name, type, value):
        """
        Adds a value to a secondary index.

        :param name: the field name, e.g. ``age``
        :type name: string
        :param type: ``'int'`` or ``'bin'``
        :type type: string
        :param value: the indexed value
        :type value: integer, string
        :rtype: :class:`RiakObject`
        """
        index = index_name(name, type)
        value = coerce_index_value(index, value)
        values = self.indexes.setdefault(index, [])
        if value not in values:
            values.append(value)
        return self

    def set_index(self, name, type, values):
        """
        Replaces every value of a secondary index.

        :param values: a single value or a list of values
        :rtype: :class:`RiakObject`
        """
        if not isinstance(values, (list, tuple, set)):
            values = [values]
        self.remove_index(name, type)
        for value in values:
            self.add_index(name, type, value)
        return self

    def get_index(self, name, type):
        """
        Returns the values of a secondary index, or an empty list.

        :rtype: list
        """
        return list(self.indexes.get(index_name(name, type), []))

    def remove_index(self, name, type, value=None):
        """
        Removes one value from an index, or the whole index when no
        value is given.

        :rtype: :class:`RiakObject`
        """
        index = index_name(name, type)
        if value is None:
            self.indexes.pop(index, None)
        elif index in self.indexes:
            value = coerce_index_value(index, value)
            values = [v for v in self.indexes[index] if v != value]
            if values:
                self.indexes[index] = values
            else:
                del self.indexes[index]
        return self

    def remove_all_indexes(self):
        self.indexes = {}
        return self

    def add_auto_index(self, field, type):
        """
        Indexes the value of ``field`` in the object's data, which must
        be a mapping, every time the object is stored.

        :rtype: :class:`RiakObject`
        """
        self.auto_indexes[index_name(field, type)] = field
        return self

    def has_auto_index(self, field, type):
        return index_name(field, type) in self.auto_indexes

    def remove_auto_index(self, field, type):
        self.auto_indexes.pop(index_name(field, type), None)
        return self

    def remove_all_auto_indexes(self):
        self.auto_indexes = {}
        return self

    # User metadata

    def get_meta(self, name, default=None):
        return self.meta.get(name.lower(), default)

    def set_meta(self, name, value):
        """
        Sets a metadata value, sent as an ``X-Riak-Meta-<name>`` header.
        Names are case-insensitive and kept in lower case.

        :rtype: :class:`RiakObject`
        """
        self.meta[name.lower()] = value
        return self

    def remove_meta(self, name):
        self.meta.pop(name.lower(), None)
        return self

    def remove_all_meta(self):
        self.meta = {}
        return self

    # Persistence

    def store(self, w=None, dw=None):
        """
        Store the object in Riak. When this operation completes, the
        object reflects what Riak returned, including a server-assigned
        key for objects created without one.

        :param w: W-value, wait for this many partitions to respond
         before returning to client.
        :type w: integer
        :param dw: DW-value, wait for this many partitions to
         confirm the write before returning to client.
        :type dw: integer
        :rtype: :class:`RiakObject`
        """
        return self.client.transport.put(self,
                                         w=self.bucket.get_w(w),
                                         dw=self.bucket.get_dw(dw))

    def reload(self, r=None):
        """
        Reload the object from Riak. When this operation completes, the
        object could contain new metadata and a new value, if the object
        was updated in Riak since it was last retrieved.

        When Riak reports siblings, the data of the first sibling is
        adopted as this object's data and the vtags stay available
        through :attr:`siblings`.

        :param r: R-Value, wait for this many partitions to respond
         before returning to client.
        :type r: integer
        :rtype: :class:`RiakObject`
        """
        r = self.bucket.get_r(r)
        self.client.transport.get(self, r=r)
        self._adopt_first_sibling(r)
        return self

    def _adopt_first_sibling(self, r=None):
        if self.has_siblings():
            self._data = self.get_sibling(0, r).data
        return self

    def delete(self, dw=None):
        """
        Delete this object from Riak. Deleting a missing object is not
        an error.

        :param dw: DW-value. Wait until this many partitions have
         deleted the object before responding.
        :type dw: integer
        :rtype: :class:`RiakObject`
        """
        return self.client.transport.delete(self, dw=self.bucket.get_dw(dw))

    # Siblings

    def has_siblings(self):
        """
        Return True if this object has siblings.

        :rtype: boolean
        """
        return self.sibling_count() > 0

    def sibling_count(self):
        return len(self.siblings or [])

    def get_sibling(self, i, r=None):
        """
        Retrieve a sibling by sibling number.

        :param i: Sibling number.
        :type i: integer
        :param r: R-Value. Wait until this many partitions have
         responded before returning to client.
        :type r: integer
        :rtype: :class:`RiakObject`
        """
        vtag = self.siblings[i]
        obj = RiakObject(self.client, self.bucket, self.key)
        obj.jsonize = self.jsonize
        return self.client.transport.get(obj, r=self.bucket.get_r(r),
                                         vtag=vtag)

    def get_siblings(self, r=None):
        """
        Retrieve every sibling.

        :rtype: list of :class:`RiakObject`
        """
        return [self.get_sibling(i, r) for i in range(self.sibling_count())]

    # Link walking and Map/Reduce

    def walk(self, spec):
        """
        Follows this object's links. ``spec`` is a list of
        ``(bucket, tag, keep)`` phases where ``None`` for the bucket or
        tag matches anything.

        :rtype: list of lists of :class:`RiakObject`, one per kept phase
        """
        return self.client.transport.walk(self, spec)

    def get_mapreduce(self, reset=False):
        """
        Returns the client's shared Map/Reduce job.
        """
        return self.client.get_mapreduce(reset)

    def add(self, *args):
        """
        Start assembling a Map/Reduce operation with this object as
        the first input.

        :rtype: :class:`~riakrest.mapreduce.RiakMapReduce`
        """
        from riakrest.mapreduce import RiakMapReduce
        mr = RiakMapReduce(self.client)
        mr.add(self.bucket.name, self.key)
        return mr.add(*args)

    def link(self, *args):
        """
        Start assembling a Map/Reduce operation that follows links
        from this object.

        :rtype: :class:`~riakrest.mapreduce.RiakMapReduce`
        """
        from riakrest.mapreduce import RiakMapReduce
        mr = RiakMapReduce(self.client)
        mr.add(self.bucket.name, self.key)
        return mr.link(*args)

    def map(self, *args):
        from riakrest.mapreduce import RiakMapReduce
        mr = RiakMapReduce(self.client)
        mr.add(self.bucket.name, self.key)
        return mr.map(*args)

    def reduce(self, *args):
        from riakrest.mapreduce import RiakMapReduce
        mr = RiakMapReduce(self.client)
        mr.add(self.bucket.name, self.key)
        return mr.reduce(*args)

    def __repr__(self):
        return '<RiakObject %s/%s exists=%s>' % (self.bucket.name, self.key,
                                                 self.exists)

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


class RiakLink(object):
    """
    A tagged pointer from one object to another bucket/key pair. The
    tag defaults to the name of the target bucket.

    Links compare equal when bucket, key and (defaulted) tag all
    match.
    """

    def __init__(self, bucket, key, tag=None, client=None):
        """
        :param bucket: the target bucket name
        :type bucket: string
        :param key: the target key
        :type key: string
        :param tag: the link tag, or ``None`` to use the bucket name
        :type tag: string
        :param client: the client used by :meth:`get`
        :type client: :class:`~riakrest.client.RiakClient`
        """
        self.bucket = bucket
        self.key = key
        self._tag = tag
        self.client = client

    def _get_tag(self):
        if self._tag is None:
            return self.bucket
        return self._tag

    def _set_tag(self, value):
        self._tag = value

    tag = property(_get_tag, _set_tag,
                   doc="""the tag, falling back to the bucket name""")

    def get(self, r=None):
        """
        Fetches the object this link points to.

        :param r: read quorum
        :rtype: :class:`~riakrest.riak_object.RiakObject`
        """
        return self.client.bucket(self.bucket).get(self.key, r)

    def get_binary(self, r=None):
        """
        Fetches the object this link points to without JSON-decoding
        its body.

        :rtype: :class:`~riakrest.riak_object.RiakObject`
        """
        return self.client.bucket(self.bucket).get_binary(self.key, r)

    def __eq__(self, other):
        if not isinstance(other, RiakLink):
            return NotImplemented
        return (self.bucket == other.bucket and
                self.key == other.key and
                self.tag == other.tag)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((self.bucket, self.key, self.tag))

    def __iter__(self):
        return iter((self.bucket, self.key, self.tag))

    def __repr__(self):
        return 'RiakLink(%r, %r, %r)' % (self.bucket, self.key, self.tag)

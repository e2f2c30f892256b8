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

import logging

from collections.abc import Iterable

from riakrest.bucket import RiakBucket
from riakrest.link import RiakLink

#: The phase run when a job has none, echoing its inputs back
IDENTITY_REDUCE = ['riak_kv_mapreduce', 'reduce_identity']


def _bucket_name(bucket):
    if isinstance(bucket, RiakBucket):
        return bucket.name
    return bucket


class RiakMapReduce(object):
    """
    A Map/Reduce job under construction. Inputs are either explicit
    bucket/key pairs, a whole bucket (optionally narrowed by key
    filters), or a search or secondary index query; the three kinds do
    not mix. Builder methods return the job so calls can be chained::

        client.add('people').map('Riak.mapValuesJson').run()
    """
    def __init__(self, client):
        self._client = client
        self._phases = []
        self._inputs = []
        self._key_filters = []
        self._input_mode = None

    def add(self, arg1, arg2=None, arg3=None):
        """
        Adds inputs. ``add(obj)`` adds one object, ``add(bucket)`` the
        whole bucket, and ``add(bucket, key_or_keys, keydata)`` the
        named keys with optional data passed to the phases.

        :rtype: :class:`RiakMapReduce`
        """
        from riakrest.riak_object import RiakObject
        if arg2 is None and arg3 is None:
            if isinstance(arg1, RiakObject):
                return self.add_object(arg1)
            return self.add_bucket(arg1)
        return self.add_bucket_key_data(arg1, arg2, arg3)

    def add_object(self, obj):
        return self.add_bucket_key_data(obj.bucket.name, obj.key, None)

    def add_bucket_key_data(self, bucket, key, data):
        """
        Adds ``[bucket, key, data]`` inputs, one per key when ``key`` is
        a list.

        :raises ValueError: when the job already takes a bucket or a
           query as input
        :rtype: :class:`RiakMapReduce`
        """
        if self._input_mode is not None:
            raise ValueError("Can't add bucket/key inputs to a job "
                             "already in %s mode" % self._input_mode)
        bucket = _bucket_name(bucket)
        if isinstance(key, Iterable) and not isinstance(key, str):
            keys = key
        else:
            keys = [key]
        self._inputs.extend([bucket, k, data] for k in keys)
        return self

    def add_bucket(self, bucket):
        """
        Makes every key of the bucket an input, replacing earlier
        inputs.
        """
        self._input_mode = 'bucket'
        self._inputs = {'bucket': _bucket_name(bucket)}
        return self

    def add_key_filters(self, key_filters):
        """
        Appends filters, each a list such as ``['eq', '2005']``, to
        the bucket input.

        :rtype: :class:`RiakMapReduce`
        """
        self._check_filterable()
        self._key_filters.extend(list(f) for f in key_filters)
        return self

    def add_key_filter(self, *args):
        return self.add_key_filters([args])

    def key_filter(self, *filters):
        """
        Same as :meth:`key_filter_and`.
        """
        return self.key_filter_and(*filters)

    def key_filter_and(self, *filters):
        """
        Narrows the bucket input to keys matching both the filters
        already set and ``filters``.
        """
        return self._combine_key_filters('and', filters)

    def key_filter_or(self, *filters):
        """
        Widens the key filters to keys matching either the filters
        already set or ``filters``.
        """
        return self._combine_key_filters('or', filters)

    def _check_filterable(self):
        if self._input_mode == 'query':
            raise ValueError('Key filters cannot narrow a query input')

    def _combine_key_filters(self, operator, filters):
        if self._input_mode != 'bucket':
            raise ValueError('Key filters need a bucket input')
        filters = [list(f) for f in filters]
        if self._key_filters:
            filters = [[operator, self._key_filters, filters]]
        self._key_filters = filters
        return self

    def search(self, bucket, query):
        """
        Takes the results of a Riak Search query as input. Fails at run
        time on clusters without Riak Search.
        """
        self._input_mode = 'query'
        self._inputs = {'module': 'riak_search',
                        'function': 'mapred_search',
                        'arg': [str(bucket), str(query)]}
        return self

    def index(self, bucket, index, startkey, endkey=None):
        """
        Takes the keys matched by a secondary index query as input: an
        exact match on ``startkey``, or the range up to ``endkey`` when
        it is given.

        :param index: the full index name, e.g. ``age_int``
        :rtype: :class:`RiakMapReduce`
        """
        self._input_mode = 'query'
        inputs = {'bucket': _bucket_name(bucket), 'index': index}
        if endkey is None:
            inputs['key'] = startkey
        else:
            inputs['start'] = startkey
            inputs['end'] = endkey
        self._inputs = inputs
        return self

    def link(self, bucket='_', tag='_', keep=False):
        """
        Appends a phase following links; ``'_'`` matches any bucket or
        tag.
        """
        self._phases.append(RiakLinkPhase(bucket, tag, keep))
        return self

    def map(self, function, options=None):
        """
        Appends a map phase.

        :param function: a named Javascript function such as
           ``'Riak.mapValuesJson'``, Javascript source, a stored
           ``[bucket, key]`` function, or ``[module, function]`` when the
           language is Erlang
        :type function: string, list
        :param options: ``language``, ``keep`` and ``arg`` overrides
        :type options: dict
        :rtype: :class:`RiakMapReduce`
        """
        return self._add_phase('map', function, options)

    def reduce(self, function, options=None):
        """
        Appends a reduce phase; arguments are as for :meth:`map`.
        """
        return self._add_phase('reduce', function, options)

    def _add_phase(self, type, function, options):
        options = options or {}
        # a [module, function] pair is taken for Erlang unless told
        # otherwise
        default_language = 'erlang' if isinstance(function, list) \
            else 'javascript'
        self._phases.append(
            RiakMapReducePhase(type, function,
                               options.get('language', default_language),
                               options.get('keep', False),
                               options.get('arg')))
        return self

    def run(self, timeout=None):
        """
        Submits the job and waits for its results. When the last phase
        follows links, or the job has no phases, the results are
        returned as :class:`~riakrest.link.RiakLink` objects.

        :param timeout: server-side timeout in milliseconds
        :type timeout: integer
        :rtype: list
        """
        inputs, query, link_results = self._normalize_query()

        logging.debug('Running Map/Reduce job with %d phase(s)', len(query))
        result = self._client.transport.mapred(inputs, query, timeout)

        if self._phases and isinstance(self._phases[-1], RiakLinkPhase):
            link_results = True
        if not link_results:
            return result

        return [RiakLink(item[0], item[1],
                         item[2] if len(item) > 2 else None,
                         client=self._client)
                for item in result or []]

    def _normalize_query(self):
        """
        Returns the wire form of the inputs, the phase list and whether
        results are links. The job itself is left unchanged.
        """
        phases = self._phases
        link_results = not phases
        if link_results:
            phases = [RiakMapReducePhase('reduce', IDENTITY_REDUCE,
                                         'erlang', False, None)]

        # Riak returns only kept phases; keep the last if none is
        kept = any(phase._keep for phase in phases)
        query = [phase.to_array() for phase in phases[:-1]]
        query.append(phases[-1].to_array(keep=True if not kept else None))

        inputs = self._inputs
        if self._input_mode == 'bucket':
            if self._key_filters:
                inputs = {'bucket': inputs['bucket'],
                          'key_filters': self._key_filters}
            else:
                inputs = inputs['bucket']

        return inputs, query, link_results


class RiakMapReducePhase(object):
    """
    A map or reduce step of a :class:`RiakMapReduce` job. Built by
    :meth:`RiakMapReduce.map` and :meth:`RiakMapReduce.reduce`.
    """

    def __init__(self, type, function, language, keep, arg):
        self._type = type
        self._language = language
        self._function = function
        self._keep = keep
        self._arg = arg

    def _function_fields(self):
        function = self._function
        if isinstance(function, list):
            if self._language == 'erlang':
                return {'module': function[0], 'function': function[1]}
            # Javascript stored under a bucket/key
            return {'bucket': function[0], 'key': function[1]}
        if self._language == 'javascript' and '{' not in function:
            return {'name': function}
        return {'source': function}

    def to_array(self, keep=None):
        """
        The JSON-ready form of the phase. ``keep`` overrides the
        phase's own flag.

        :rtype: dict
        """
        stepdef = {'keep': self._keep if keep is None else keep,
                   'language': self._language,
                   'arg': self._arg}
        stepdef.update(self._function_fields())
        return {self._type: stepdef}


class RiakLinkPhase(object):
    """
    A link-following step of a :class:`RiakMapReduce` job.
    """

    def __init__(self, bucket, tag, keep):
        self._bucket = bucket
        self._tag = tag
        self._keep = keep

    def to_array(self, keep=None):
        return {'link': {'bucket': self._bucket,
                         'tag': self._tag,
                         'keep': self._keep if keep is None else keep}}


class RiakKeyFilter(object):
    """
    Builds key filter lists. Any public attribute is a filter name, so
    ``key_filter.tokenize('-', 1).eq('2005')`` gives
    ``[['tokenize', '-', 1], ['eq', '2005']]``. ``+`` concatenates
    filter lists while ``&`` and ``|`` wrap them in ``and``/``or``
    clauses; repeating the same operator extends the clause rather than
    nesting it.
    """

    def __init__(self, *args):
        self._filters = [list(args)] if args else []

    @classmethod
    def _from_list(cls, filters):
        f = cls()
        f._filters = filters
        return f

    def __add__(self, other):
        return self._from_list(self._filters + other._filters)

    def _combine(self, operator, other):
        if self._filters and self._filters[0][0] == operator:
            clause = list(self._filters[0]) + [other._filters]
            return self._from_list([clause] + self._filters[1:])
        return RiakKeyFilter(operator, self._filters, other._filters)

    def __and__(self, other):
        return self._combine('and', other)

    def __or__(self, other):
        return self._combine('or', other)

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)

        def add_filter(*args):
            return self + RiakKeyFilter(name, *args)
        return add_filter

    def __iter__(self):
        return iter(self._filters)

    def __repr__(self):
        return str(self._filters)


class RiakMapReduceChain(object):
    """
    Mixin that lets the client start a Map/Reduce job with any of the
    job's builder methods, e.g. ``client.add('people')``.
    """

    def add(self, *args):
        return RiakMapReduce(self).add(*args)

    def search(self, *args):
        return RiakMapReduce(self).search(*args)

    def index(self, *args):
        return RiakMapReduce(self).index(*args)

    def link(self, *args):
        return RiakMapReduce(self).link(*args)

    def map(self, *args):
        return RiakMapReduce(self).map(*args)

    def reduce(self, *args):
        return RiakMapReduce(self).reduce(*args)

import re

from urllib.parse import quote_plus, urlencode

from riakrest.util import lazy_property, bytes_to_str


class HttpResources(object):
    """
    Methods for HttpTransport related to URL generation, i.e.
    creating the proper paths.
    """

    def base_url(self):
        return self._config.base_url()

    def ping_path(self):
        return mkpath(self.riak_kv_wm_ping)

    def stats_path(self):
        return mkpath(self.riak_kv_wm_stats)

    def mapred_path(self, **options):
        return mkpath(self.riak_kv_wm_mapred, **options)

    def bucket_list_path(self, **options):
        query = {'buckets': True}
        query.update(options)
        return mkpath(self.riak_kv_wm_raw, **query)

    def bucket_properties_path(self, bucket, **options):
        query = {'props': True, 'keys': False}
        query.update(options)
        return mkpath(self.riak_kv_wm_raw, quote_plus(bucket), **query)

    def key_list_path(self, bucket, **options):
        query = {'keys': True, 'props': False}
        query.update(options)
        return mkpath(self.riak_kv_wm_buckets, quote_plus(bucket),
                      self.riak_kv_wm_keys, **query)

    def object_path(self, bucket, key=None, spec=None, **options):
        """
        Builds the URL of an object, or of a link walk starting at it
        when ``spec`` is given.

        :param spec: link-walk phases as ``(bucket, tag, keep)``
           triples; ``None`` for bucket or tag means any
        :type spec: list
        """
        if key:
            key = quote_plus(key)
        walk = None
        if spec:
            walk = '/'.join(link_phase_segment(*phase) for phase in spec)
        return mkpath(self.riak_kv_wm_raw, quote_plus(bucket), key, walk,
                      **options)

    def index_path(self, bucket, index, start, finish=None, **options):
        if finish is not None:
            finish = quote_plus(str(finish))
        return mkpath(self.riak_kv_wm_buckets, quote_plus(bucket),
                      self.riak_kv_wm_index, quote_plus(index),
                      quote_plus(str(start)), finish, **options)

    # Resource root paths
    @lazy_property
    def riak_kv_wm_raw(self):
        return "/" + self._config.prefix

    @lazy_property
    def riak_kv_wm_buckets(self):
        return "/" + self._config.bucket_prefix

    @lazy_property
    def riak_kv_wm_keys(self):
        return self._config.key_prefix

    @lazy_property
    def riak_kv_wm_index(self):
        return self._config.index_prefix

    @lazy_property
    def riak_kv_wm_mapred(self):
        return "/" + self._config.mapred_prefix

    @lazy_property
    def riak_kv_wm_ping(self):
        return "/" + self._config.ping_prefix

    @lazy_property
    def riak_kv_wm_stats(self):
        return "/" + self._config.stats_prefix


def link_phase_segment(bucket=None, tag=None, keep=None):
    """
    Encodes one link-walk phase as the ``bucket,tag,keep`` path segment
    Riak expects, using ``_`` for "any" and "default".
    """
    bucket = '_' if bucket in (None, '_') else quote_plus(bucket)
    tag = '_' if tag in (None, '_') else quote_plus(tag)
    if keep is None or keep == '_':
        keep = '_'
    else:
        keep = '1' if keep else '0'
    return ','.join((bucket, tag, keep))


def mkpath(*segments, **query):
    """
    Constructs the path & query portion of a URI from path segments
    and a dict.
    """
    # Remove empty segments (e.g. no key specified)
    segments = [bytes_to_str(s) for s in segments if s is not None]
    # Join the segments into a path
    pathstring = '/'.join(segments)
    # Remove extra slashes
    pathstring = re.sub('/+', '/', pathstring)

    # Add the query string if it exists
    _query = {}
    for key in query:
        if isinstance(query[key], bool):
            _query[key] = str(query[key]).lower()
        elif query[key] is not None:
            _query[key] = query[key]

    if len(_query) > 0:
        pathstring += "?" + urlencode(_query)

    if not pathstring.startswith('/'):
        pathstring = '/' + pathstring

    return pathstring

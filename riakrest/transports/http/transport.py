import json
import logging

from http.client import HTTPConnection

from riakrest.riak_error import RiakError, DataError
from riakrest.transports.transport import Transport
from riakrest.transports.http.resources import HttpResources
from riakrest.transports.http.connection import HttpConnection
from riakrest.transports.http.codec import HttpCodec
from riakrest.transports.http.multi import multi_request
from riakrest.transports.http.status import StatusValidator
from riakrest.util import bytes_to_str

from urllib.parse import unquote_plus


class HttpTransport(Transport,
                    HttpConnection, HttpResources, HttpCodec,
                    StatusValidator):
    """
    The HttpTransport object holds information necessary to
    connect to Riak via HTTP.
    """

    def __init__(self, config,
                 client=None,
                 connection_class=HTTPConnection,
                 multi_pool=None):
        """
        Construct a new HTTP transport to Riak.

        :param config: connection settings and URL prefixes
        :type config: :class:`~riakrest.config.RiakConfig`
        :param client: the client objects are created for
        :type client: :class:`~riakrest.client.RiakClient`
        :param connection_class: the class instantiated for each request
        :param multi_pool: a worker pool for batched fetches, or
           ``None`` to use a transient one per batch
        """
        super(HttpTransport, self).__init__()

        self._config = config
        self._client = client
        self._connection_class = connection_class
        self._multi_pool = multi_pool

    def _get_client_id(self):
        return self._config.client_id

    def _set_client_id(self, value):
        self._config.client_id = value

    client_id = property(_get_client_id, _set_client_id,
                         doc="""the client ID for this connection""")

    def ping(self):
        """
        Check server is alive over HTTP
        """
        response = self._request('GET', self.ping_path())
        return (response is not None and response.status == 200 and
                bytes_to_str(response.body).strip() == 'OK')

    def stats(self):
        """
        Gets performance statistics and server information
        """
        url = self.stats_path()
        response = self._request('GET', url, {'Accept': 'application/json'})
        self.validate(response, 'status', url)
        return self._load_json(response, url)

    def get(self, robj, r=None, vtag=None):
        """
        Get a bucket/key from the server
        """
        url = self.object_path(robj.bucket.name, robj.key, r=r, vtag=vtag)
        response = self._request('GET', url)
        return self._populate(robj, response, 'fetchObject', url)

    def get_multi(self, robjs, r=None):
        """
        Fetches several objects concurrently. Returns a list holding,
        for each object in order, either the populated object or a
        ``(bucket, key, error)`` tuple.
        """
        urls = [self.object_path(robj.bucket.name, robj.key, r=r)
                for robj in robjs]
        responses = multi_request(self, urls, pool=self._multi_pool)

        results = []
        for robj, url in zip(robjs, urls):
            try:
                results.append(self._populate(robj, responses.get(url),
                                              'fetchObject', url))
            except RiakError as err:
                logging.debug('Batched fetch of %s failed: %s', url, err)
                results.append((robj.bucket.name, robj.key, err))
        return results

    def put(self, robj, w=None, dw=None):
        """
        Puts a (possibly new) object.
        """
        params = {'returnbody': True, 'w': w, 'dw': dw}
        url = self.object_path(robj.bucket.name, robj.key, **params)
        headers = self._build_put_headers(robj)
        content = self._encode_data(robj)

        if robj.key is None:
            method = 'POST'
        else:
            method = 'PUT'

        response = self._request(method, url, headers, content)
        return self._populate(robj, response,
                              ['storeObject', 'fetchObject'], url)

    def delete(self, robj, dw=None):
        """
        Delete an object.
        """
        url = self.object_path(robj.bucket.name, robj.key, dw=dw)
        response = self._request('DELETE', url)
        self.validate(response, 'deleteObject', url)
        robj.clear()
        robj.status = response.status
        return robj

    def walk(self, robj, spec):
        """
        Follows links from the object through each phase in ``spec``
        and returns, per kept phase, the list of objects reached.
        """
        url = self.object_path(robj.bucket.name, robj.key, spec=spec)
        response = self._request('GET', url)
        self.validate(response, 'linkWalking', url)

        results = []
        for phase in self._parse_walk_body(response):
            objects = []
            for bucket, key, part in phase:
                obj = self._client.bucket(bucket).new(key)
                content_type = part.headers.get('content-type', '')
                obj.jsonize = content_type.startswith('application/json')
                objects.append(self._populate(obj, part, 'fetchObject',
                                              url))
            results.append(objects)
        return results

    def get_buckets(self):
        """
        Fetch a list of all buckets
        """
        url = self.bucket_list_path()
        response = self._request('GET', url)
        self.validate(response, 'listBuckets', url)
        return self._load_json(response, url)['buckets']

    def get_bucket_props(self, bucket):
        """
        Get properties for a bucket
        """
        url = self.bucket_properties_path(bucket.name)
        response = self._request('GET', url)
        self.validate(response, 'getBucketProperties', url)
        return self._load_json(response, url)['props']

    def set_bucket_props(self, bucket, props):
        """
        Set the properties on the bucket object given
        """
        url = self.bucket_properties_path(bucket.name)
        headers = {'Content-Type': 'application/json'}
        content = json.dumps({'props': props})

        # Run the request...
        response = self._request('PUT', url, headers, content)
        self.validate(response, 'setBucketProperties', url)
        return True

    def get_keys(self, bucket):
        """
        Fetch a list of keys for the bucket
        """
        url = self.key_list_path(bucket.name, keys='stream')
        response = self._request('GET', url)
        self.validate(response, 'listKeys', url)
        return self._decode_key_stream(response.body)

    def get_index(self, bucket, index, startkey, endkey=None):
        """
        Performs a secondary index query.
        """
        url = self.index_path(bucket.name, index, startkey, endkey)
        response = self._request('GET', url)
        self.validate(response, 'secondaryIndex', url)
        json_data = self._load_json(response, url)
        return [unquote_plus(key) for key in json_data.get('keys', [])]

    def mapred(self, inputs, query, timeout=None):
        """
        Run a MapReduce query.
        """
        # Construct the job, optionally set the timeout...
        content = self._construct_mapred_json(inputs, query, timeout)

        # Do the request...
        url = self.mapred_path()
        headers = {'Content-Type': 'application/json'}
        response = self._request('POST', url, headers, content)

        # Make sure the expected status code came back...
        self.validate(response, 'mapReduce', url)
        return self._load_json(response, url)

    def _load_json(self, response, url):
        try:
            return json.loads(bytes_to_str(response.body))
        except ValueError as err:
            raise DataError('Malformed JSON from %s: %s' % (url, err))

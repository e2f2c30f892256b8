import base64
import json
import random


class Transport(object):
    """
    Class to encapsulate transport details and methods. All protocol
    transports are subclasses of this class.
    """

    def _get_client_id(self):
        return self._client_id

    def _set_client_id(self, value):
        self._client_id = value

    client_id = property(_get_client_id, _set_client_id,
                         doc="""the client ID for this connection""")

    @classmethod
    def make_random_client_id(self):
        """
        Returns a random client identifier
        """
        return ('py_%s' %
                base64.b64encode(bytes(str(random.randint(1, 0x40000000)),
                                       'ascii')).decode('ascii'))

    def ping(self):
        """
        Ping the remote server
        """
        raise NotImplementedError

    def stats(self):
        """
        Gets performance statistics and server information
        """
        raise NotImplementedError

    def get(self, robj, r=None, vtag=None):
        """
        Fetches an object.
        """
        raise NotImplementedError

    def get_multi(self, robjs, r=None):
        """
        Fetches several objects concurrently.
        """
        raise NotImplementedError

    def put(self, robj, w=None, dw=None):
        """
        Stores an object.
        """
        raise NotImplementedError

    def delete(self, robj, dw=None):
        """
        Deletes an object.
        """
        raise NotImplementedError

    def walk(self, robj, spec):
        """
        Follows links from an object.
        """
        raise NotImplementedError

    def get_buckets(self):
        """
        Gets the list of buckets as strings.
        """
        raise NotImplementedError

    def get_bucket_props(self, bucket):
        """
        Fetches properties for the given bucket.
        """
        raise NotImplementedError

    def set_bucket_props(self, bucket, props):
        """
        Sets properties on the given bucket.
        """
        raise NotImplementedError

    def get_keys(self, bucket):
        """
        Lists all keys in a bucket.
        """
        raise NotImplementedError

    def get_index(self, bucket, index, startkey, endkey=None):
        """
        Performs a secondary index query.
        """
        raise NotImplementedError

    def mapred(self, inputs, query, timeout=None):
        """
        Sends a MapReduce request synchronously.
        """
        raise NotImplementedError

    def _construct_mapred_json(self, inputs, query, timeout=None):
        job = {'inputs': inputs, 'query': query}
        if timeout is not None:
            job['timeout'] = timeout

        content = json.dumps(job)
        return content

import unittest

from riakrest.config import RiakConfig
from riakrest.transports.http import HttpTransport
from riakrest.transports.http.resources import link_phase_segment, mkpath


class MkpathTests(unittest.TestCase):
    def test_segments(self):
        self.assertEqual(mkpath('/riak', 'b', None, None), '/riak/b')
        self.assertEqual(mkpath('riak', 'b', 'k'), '/riak/b/k')
        self.assertEqual(mkpath('/riak/', '/b'), '/riak/b')
        self.assertEqual(mkpath(b'/riak', b'b'), '/riak/b')

    def test_query(self):
        self.assertEqual(mkpath('/riak', 'b', props=True, keys=False),
                         '/riak/b?props=true&keys=false')
        self.assertEqual(mkpath('/riak', 'b', 'k', r=None), '/riak/b/k')
        self.assertEqual(mkpath('/riak', 'b', 'k', r=1), '/riak/b/k?r=1')
        self.assertEqual(mkpath('/riak', 'b', 'k', r='quorum'),
                         '/riak/b/k?r=quorum')


class ResourceTests(unittest.TestCase):
    def setUp(self):
        self.transport = HttpTransport(RiakConfig())

    def test_roots(self):
        self.assertEqual(self.transport.ping_path(), '/ping')
        self.assertEqual(self.transport.stats_path(), '/stats')
        self.assertEqual(self.transport.mapred_path(), '/mapred')
        self.assertEqual(self.transport.mapred_path(chunked=True),
                         '/mapred?chunked=true')
        self.assertEqual(self.transport.bucket_list_path(),
                         '/riak?buckets=true')

    def test_custom_prefixes(self):
        transport = HttpTransport(RiakConfig(prefix='raw',
                                             mapred_prefix='mr',
                                             bucket_prefix='bkts'))
        self.assertEqual(transport.object_path('b', 'k'), '/raw/b/k')
        self.assertEqual(transport.mapred_path(), '/mr')
        self.assertEqual(transport.index_path('b', 'f_bin', 'x'),
                         '/bkts/b/index/f_bin/x')

    def test_bucket_paths(self):
        self.assertEqual(self.transport.bucket_properties_path('b'),
                         '/riak/b?props=true&keys=false')
        self.assertEqual(self.transport.key_list_path('b'),
                         '/buckets/b/keys?keys=true&props=false')
        self.assertEqual(self.transport.key_list_path('b', keys='stream'),
                         '/buckets/b/keys?keys=stream&props=false')

    def test_object_paths(self):
        self.assertEqual(self.transport.object_path('b'), '/riak/b')
        self.assertEqual(self.transport.object_path('b', 'k', r=2),
                         '/riak/b/k?r=2')
        self.assertEqual(
            self.transport.object_path('b', 'k', returnbody=True, w=2,
                                       dw=2),
            '/riak/b/k?returnbody=true&w=2&dw=2')
        self.assertEqual(self.transport.object_path('my bucket', 'a/b&c'),
                         '/riak/my+bucket/a%2Fb%26c')

    def test_walk_paths(self):
        spec = [('people', 'friend', True), (None, None, None)]
        self.assertEqual(self.transport.object_path('b', 'k', spec=spec),
                         '/riak/b/k/people,friend,1/_,_,_')
        self.assertEqual(link_phase_segment('_', 'a tag', False),
                         '_,a+tag,0')
        self.assertEqual(link_phase_segment(), '_,_,_')

    def test_index_paths(self):
        self.assertEqual(self.transport.index_path('b', 'age_int', 10),
                         '/buckets/b/index/age_int/10')
        self.assertEqual(
            self.transport.index_path('b', 'age_int', 10, 20),
            '/buckets/b/index/age_int/10/20')
        self.assertEqual(
            self.transport.index_path('b', 'name_bin', 'a b', 'z'),
            '/buckets/b/index/name_bin/a+b/z')


if __name__ == '__main__':
    unittest.main()

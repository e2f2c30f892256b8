# -*- coding: utf-8 -*-
import json
import unittest

from riakrest.link import RiakLink
from riakrest.riak_error import DataError, ServerUnreachable, \
    UnexpectedStatus
from riakrest.transports.http.codec import MAX_LINK_HEADER_SIZE
from riakrest.transports.http.connection import HttpResponse
from riakrest.transports.http.headers import HttpHeaders, parse_headers
from riakrest.tests import FakeServer, make_client


def response(status, headers=(), body=b''):
    raw = 'HTTP/1.1 %d Whatever\r\n' % status
    raw += ''.join('%s: %s\r\n' % pair for pair in headers)
    if isinstance(body, str):
        body = body.encode('utf-8')
    return HttpResponse(status, parse_headers(raw), body)


class CodecTestCase(unittest.TestCase):
    def setUp(self):
        self.client = make_client(FakeServer(), client_id='py_test')
        self.transport = self.client.transport
        self.bucket = self.client.bucket('people')


class LinkCodecTests(CodecTestCase):
    def test_parse_links(self):
        header = ('</riak/people>; rel="up", '
                  '</riak/people/bob>; riaktag="friend", '
                  "</buckets/pets/keys/rex>; riaktag='owns', "
                  '</riak/people/bob>; riaktag="friend", '
                  '</riak/my+people/a%2Fb>; riaktag="odd+tag"')
        links = self.transport._parse_links(header)
        self.assertEqual(links, [RiakLink('people', 'bob', 'friend'),
                                 RiakLink('pets', 'rex', 'owns'),
                                 RiakLink('my people', 'a/b', 'odd tag')])
        self.assertTrue(all(link.client is self.client for link in links))

    def test_parse_repeated_link_headers(self):
        links = self.transport._parse_links(
            ['</riak/b/k1>; riaktag="t"', '</riak/b/k2>; riaktag="t"'])
        self.assertEqual([link.key for link in links], ['k1', 'k2'])

    def test_link_header(self):
        self.assertEqual(
            self.transport._to_link_header(RiakLink('b', 'k', 'a tag')),
            '</riak/b/k>; riaktag="a+tag"')
        self.assertEqual(
            self.transport._to_link_header(RiakLink('b', 'k')),
            '</riak/b/k>; riaktag="b"')

    def test_unsafe_characters_round_trip(self):
        link = RiakLink('my bucket', 'a/b c', 'best friend')
        header = self.transport._to_link_header(link)
        self.assertEqual(header, '</riak/my+bucket/a%2Fb+c>; '
                                 'riaktag="best+friend"')
        self.assertEqual(self.transport._parse_links(header), [link])

    def test_long_link_headers_are_split(self):
        obj = self.bucket.new('alice', {})
        for i in range(400):
            obj.add_link(RiakLink('people', 'friend-%04d' % i, 'friend'))
        headers = self.transport._add_links_for_riak_object(obj,
                                                            HttpHeaders())
        values = headers.get_all('Link')
        self.assertGreater(len(values), 1)
        for value in values:
            self.assertLessEqual(len(value), MAX_LINK_HEADER_SIZE)
        self.assertEqual(self.transport._parse_links(values), obj.links)


class PutHeaderTests(CodecTestCase):
    def test_basic_headers(self):
        obj = self.bucket.new('alice', {'name': 'Alice'})
        obj.headers['X-Riak-Vclock'] = 'vclock-1'
        obj.set_meta('Color', 'blue')
        obj.add_link(self.bucket.new('bob'), 'friend')
        obj.add_index('age', 'int', 30)
        obj.add_index('email', 'bin', 'alice@example.com')
        obj.add_index('email', 'bin', 'a+l@example.com')

        headers = self.transport._build_put_headers(obj)
        self.assertEqual(headers['Content-Type'], 'application/json')
        self.assertEqual(headers['X-Riak-ClientId'], 'py_test')
        self.assertEqual(headers['X-Riak-Vclock'], 'vclock-1')
        self.assertEqual(headers['Link'], '</riak/people/bob>; '
                                          'riaktag="friend"')
        self.assertEqual(headers['X-Riak-Meta-color'], 'blue')
        self.assertEqual(headers['X-Riak-Index-age_int'], '30')
        self.assertEqual(headers['X-Riak-Index-email_bin'],
                         'alice%40example.com, a%2Bl%40example.com')
        self.assertNotIn('X-Riak-Meta-client-autoindex', headers)

    def test_auto_index_headers(self):
        obj = self.bucket.new('alice', {'age': 30, 'name': 'Alice'})
        obj.add_auto_index('age', 'int')
        obj.add_auto_index('name', 'bin')
        obj.add_index('age', 'int', 30)

        headers = self.transport._build_put_headers(obj)
        self.assertEqual(headers['X-Riak-Index-age_int'], '30')
        self.assertEqual(headers['X-Riak-Index-name_bin'], 'Alice')
        self.assertEqual(json.loads(headers['X-Riak-Meta-client-autoindex']),
                         {'age_int': 'age', 'name_bin': 'name'})
        self.assertEqual(
            json.loads(headers['X-Riak-Meta-client-autoindexcollision']),
            {'age_int': 30})
        # The object's own indexes are untouched
        self.assertEqual(obj.indexes, {'age_int': [30]})

    def test_auto_index_needs_mapping(self):
        obj = self.bucket.new('alice', ['not', 'a', 'mapping'])
        obj.add_auto_index('age', 'int')
        self.assertRaises(DataError, self.transport._build_put_headers, obj)

    def test_encode_data(self):
        obj = self.bucket.new('k', {'name': u'Zoë'})
        self.assertEqual(json.loads(self.transport._encode_data(obj)
                                    .decode('utf-8')), {'name': u'Zoë'})
        self.assertIn(u'Zoë'.encode('utf-8'),
                      self.transport._encode_data(obj))
        binary = self.bucket.new_binary('k', b'\x00\x01', 'image/png')
        self.assertEqual(self.transport._encode_data(binary), b'\x00\x01')
        text = self.bucket.new_binary('k', u'héllo', 'text/plain')
        self.assertEqual(self.transport._encode_data(text),
                         u'héllo'.encode('utf-8'))
        self.assertEqual(self.transport._encode_data(
            self.bucket.new_binary('k')), b'')

    def test_encode_unserializable(self):
        obj = self.bucket.new('k', object())
        self.assertRaises(DataError, self.transport._encode_data, obj)


class PopulateTests(CodecTestCase):
    def test_not_found(self):
        obj = self.bucket.new('k', {'stale': True})
        obj.add_index('age', 'int', 1)
        self.transport._populate(obj, response(404), 'fetchObject')
        self.assertFalse(obj.exists)
        self.assertEqual(obj.status, 404)
        self.assertIsNone(obj.data)
        self.assertEqual(obj.indexes, {})

    def test_no_response(self):
        obj = self.bucket.new('k')
        self.assertRaises(ServerUnreachable, self.transport._populate,
                          obj, None, 'fetchObject')

    def test_unexpected_status(self):
        obj = self.bucket.new('k')
        self.assertRaises(UnexpectedStatus, self.transport._populate,
                          obj, response(503), 'fetchObject')

    def test_ok(self):
        obj = self.bucket.new('k')
        self.transport._populate(obj, response(200, [
            ('Content-Type', 'application/json'),
            ('X-Riak-Vclock', 'vclock-2'),
            ('Link', '</riak/people/bob>; riaktag="friend"'),
            ('X-Riak-Meta-Color', 'blue'),
            ('X-Riak-Index-age_int', '30, 31'),
            ('X-Riak-Index-email_bin', 'a%40example.com'),
        ], '{"name": "Alice"}'), 'fetchObject')
        self.assertTrue(obj.exists)
        self.assertEqual(obj.status, 200)
        self.assertEqual(obj.data, {'name': 'Alice'})
        self.assertEqual(obj.vclock, 'vclock-2')
        self.assertEqual(obj.links, [RiakLink('people', 'bob', 'friend')])
        self.assertEqual(obj.meta, {'color': 'blue'})
        self.assertEqual(obj.indexes, {'age_int': [30, 31],
                                       'email_bin': ['a@example.com']})

    def test_bad_json(self):
        obj = self.bucket.new('k')
        self.assertRaises(DataError, self.transport._populate, obj,
                          response(200, [('Content-Type',
                                          'application/json')], '{nope'),
                          'fetchObject')

    def test_binary_and_text(self):
        obj = self.bucket.new_binary('k')
        self.transport._populate(obj, response(200, [
            ('Content-Type', 'image/png')], b'\x89PNG'), 'fetchObject')
        self.assertEqual(obj.data, b'\x89PNG')
        self.assertEqual(obj.content_type, 'image/png')

        obj = self.bucket.new_binary('k')
        self.transport._populate(obj, response(200, [
            ('Content-Type', 'text/plain')], u'héllo'), 'fetchObject')
        self.assertEqual(obj.data, u'héllo')

    def test_text_charset(self):
        obj = self.bucket.new_binary('k')
        self.transport._populate(obj, response(200, [
            ('Content-Type', 'text/plain; charset="ISO-8859-1"')],
            b'caf\xe9'), 'fetchObject')
        self.assertEqual(obj.data, u'caf\xe9')

        for content_type in ('text/plain', 'text/plain; charset=klingon'):
            obj = self.bucket.new_binary('k')
            self.assertRaises(DataError, self.transport._populate, obj,
                              response(200, [('Content-Type', content_type)],
                                       b'caf\xe9'), 'fetchObject')

    def test_rejected_store_keeps_object(self):
        obj = self.bucket.new('k', {'a': 1})
        obj.add_index('age', 'int', 1)
        self.assertRaises(UnexpectedStatus, self.transport._populate, obj,
                          response(404), ['storeObject', 'fetchObject'])
        self.assertEqual(obj.data, {'a': 1})
        self.assertEqual(obj.indexes, {'age_int': [1]})

    def test_siblings(self):
        obj = self.bucket.new('k')
        self.transport._populate(obj, response(300, [
            ('Content-Type', 'text/plain')],
            'Siblings:\n4v5xOg4bVR96ikaKrN1W0Q\n7HRVsb3mDuEHSSr0yYxD1M\n'),
            'fetchObject')
        self.assertTrue(obj.exists)
        self.assertEqual(obj.siblings, ['4v5xOg4bVR96ikaKrN1W0Q',
                                        '7HRVsb3mDuEHSSr0yYxD1M'])
        self.assertEqual(obj.sibling_count(), 2)
        self.assertIsNone(obj.data)

    def test_created_key(self):
        obj = self.bucket.new(None, {'a': 1})
        self.transport._populate(obj, response(201, [
            ('Content-Type', 'application/json'),
            ('Location', '/riak/people/Gu7xOgpaVm1yl9P8Ewq1lUR5qgB')],
            '{"a": 1}'), ['storeObject', 'fetchObject'])
        self.assertEqual(obj.key, 'Gu7xOgpaVm1yl9P8Ewq1lUR5qgB')
        self.assertEqual(obj.data, {'a': 1})

    def test_no_content(self):
        obj = self.bucket.new('k', {'a': 1})
        self.transport._populate(obj, response(204),
                                 ['storeObject', 'fetchObject'])
        self.assertTrue(obj.exists)
        self.assertEqual(obj.status, 204)
        self.assertEqual(obj.data, b'')

    def test_auto_indexes_are_hidden(self):
        obj = self.bucket.new('k')
        self.transport._populate(obj, response(200, [
            ('Content-Type', 'application/json'),
            ('X-Riak-Meta-client-autoindex',
             '{"age_int": "age", "name_bin": "name"}'),
            ('X-Riak-Meta-client-autoindexcollision', '{"age_int": 30}'),
            ('X-Riak-Index-age_int', '30'),
            ('X-Riak-Index-name_bin', 'Alice'),
            ('X-Riak-Index-team_bin', 'red'),
        ], '{"age": 30, "name": "Alice"}'), 'fetchObject')
        self.assertEqual(obj.auto_indexes, {'age_int': 'age',
                                            'name_bin': 'name'})
        # age was also set explicitly, name only automatically
        self.assertEqual(obj.indexes, {'age_int': [30],
                                       'team_bin': ['red']})

    def test_auto_indexes_need_mapping_data(self):
        obj = self.bucket.new('k')
        self.transport._populate(obj, response(200, [
            ('Content-Type', 'application/json'),
            ('X-Riak-Meta-client-autoindex', '{"age_int": "age"}'),
            ('X-Riak-Index-age_int', '30'),
        ], '[1, 2]'), 'fetchObject')
        self.assertEqual(obj.data, [1, 2])
        self.assertEqual(obj.auto_indexes, {'age_int': 'age'})
        self.assertEqual(obj.indexes, {'age_int': [30]})

    def test_auto_index_round_trip(self):
        obj = self.bucket.new('k', {'age': 30})
        obj.add_auto_index('age', 'int')
        headers = self.transport._build_put_headers(obj)
        stored = response(200, headers.items(), '{"age": 30}')
        fetched = self.transport._populate(self.bucket.new('k'), stored,
                                           'fetchObject')
        self.assertEqual(fetched.auto_indexes, {'age_int': 'age'})
        self.assertEqual(fetched.indexes, {})


class KeyStreamTests(CodecTestCase):
    def test_concatenated_documents(self):
        body = (b'{"props":{"name":"b"}}{"keys":[]}'
                b'{"keys":["a","b%20c"]}\n{"keys":["a","d"]}{"keys":[]}')
        self.assertEqual(self.transport._decode_key_stream(body),
                         ['a', 'b c', 'd'])

    def test_empty(self):
        self.assertEqual(self.transport._decode_key_stream(b''), [])
        self.assertEqual(self.transport._decode_key_stream(b'{"keys":[]}'),
                         [])

    def test_malformed(self):
        self.assertRaises(DataError, self.transport._decode_key_stream,
                          b'{"keys":["a"]}{"keys":[')


class WalkBodyTests(CodecTestCase):
    def test_phases(self):
        body = ('\r\n--outer\r\n'
                'Content-Type: multipart/mixed; boundary=inner1\r\n'
                '\r\n'
                '--inner1\r\n'
                'X-Riak-Vclock: v1\r\n'
                'Location: /riak/people/bob\r\n'
                'Content-Type: application/json\r\n'
                '\r\n'
                '{"name": "Bob"}\r\n'
                '--inner1\r\n'
                'Location: /riak/people/carol\r\n'
                'Content-Type: text/plain\r\n'
                '\r\n'
                'Carol\r\n'
                '--inner1--\r\n'
                '\r\n'
                '--outer\r\n'
                'Content-Type: multipart/mixed; boundary=inner2\r\n'
                '\r\n'
                '--inner2--\r\n'
                '\r\n'
                '--outer--\r\n')
        resp = response(200, [('Content-Type',
                               'multipart/mixed; boundary=outer')], body)
        phases = self.transport._parse_walk_body(resp)
        self.assertEqual(len(phases), 2)
        self.assertEqual(phases[1], [])
        (b1, k1, r1), (b2, k2, r2) = phases[0]
        self.assertEqual((b1, k1), ('people', 'bob'))
        self.assertEqual(json.loads(r1.body.decode('utf-8')),
                         {'name': 'Bob'})
        self.assertEqual(r1.headers['x-riak-vclock'], 'v1')
        self.assertEqual((b2, k2), ('people', 'carol'))
        self.assertEqual(r2.body.strip(), b'Carol')

    def test_not_multipart(self):
        resp = response(200, [('Content-Type', 'text/plain')], 'nothing')
        self.assertEqual(self.transport._parse_walk_body(resp), [])


if __name__ == '__main__':
    unittest.main()

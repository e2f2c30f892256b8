import json
import re

from email import message_from_bytes
from urllib.parse import unquote_plus, quote_plus

from riakrest.link import RiakLink
from riakrest.riak_error import DataError
from riakrest.transports.http.connection import HttpResponse
from riakrest.transports.http.headers import HttpHeaders
from riakrest.util import bytes_to_str, str_to_bytes, quacks_like_dict, \
    decode_index_value, coerce_index_value


# subtract length of "Link: " header string and newline
MAX_LINK_HEADER_SIZE = 8192 - 8

#: Metadata key recording which fields were indexed automatically
AUTOINDEX_META = 'client-autoindex'
#: Metadata key recording auto-index values also set explicitly
AUTOINDEX_COLLISION_META = 'client-autoindexcollision'

CHARSET = re.compile(r";\s*charset=[\"']?([^\"';\s]+)", re.I)
LINK_OLDFORM = re.compile(
    "</([^/]+)/([^/]+)/([^/]+)>; ?riaktag=[\"']([^\"']+)[\"']")
LINK_NEWFORM = re.compile(
    "</(buckets)/([^/]+)/keys/([^/]+)>; ?riaktag=[\"']([^\"']+)[\"']")


class HttpCodec(object):
    """
    Methods for HTTP transport that marshals and unmarshals HTTP
    messages.
    """

    def _populate(self, robj, response, actions, url=None):
        """
        Resets the object and rebuilds it from the response. Only for
        use by the Riak client library. A rejected response leaves the
        object untouched.

        :param robj: the object to populate
        :type robj: :class:`~riakrest.riak_object.RiakObject`
        :param response: the response, ``None`` if there was none
        :type response: HttpResponse
        :param actions: the action name(s) to validate the status against
        :type actions: string, list
        :rtype: :class:`~riakrest.riak_object.RiakObject`
        """
        # A missing object is a valid answer for fetches and deletes
        if self.is_not_found(response, actions):
            robj.clear()
            robj.status = 404
            return robj

        self.validate(response, actions, url)

        robj.clear()
        status, headers, body = response
        robj.headers = headers
        robj.status = status
        robj._data = body
        robj.exists = True

        if 'link' in headers:
            robj.links = self._parse_links(headers['link'])

        # If 300(Siblings), keep the vtags; the body is not object data
        if status == 300:
            lines = bytes_to_str(body).strip().split('\n')[1:]
            robj.siblings = [line.strip() for line in lines if line.strip()]
            robj._data = None
            return robj

        # If 201 Created, the server assigned the key
        if status == 201 and 'location' in headers:
            location = headers['location'].strip().rstrip('/')
            robj.key = unquote_plus(location.split('/')[-1])

        if status in (200, 201):
            robj._data = self._decode_data(robj, body)

        robj.indexes = self._parse_indexes(headers)
        robj.meta = self._parse_meta(headers)
        self._reconcile_auto_indexes(robj)
        return robj

    def _decode_data(self, robj, body):
        if robj.jsonize:
            try:
                return json.loads(bytes_to_str(body))
            except ValueError as err:
                raise DataError('Could not decode JSON body of %s/%s: %s' %
                                (robj.bucket.name, robj.key, err))
        if robj.content_type.startswith('text/'):
            match = CHARSET.search(robj.content_type)
            charset = match.group(1) if match else 'utf-8'
            try:
                return bytes_to_str(body, charset)
            except (LookupError, UnicodeDecodeError) as err:
                raise DataError('Could not decode %s body of %s/%s: %s' %
                                (robj.content_type, robj.bucket.name,
                                 robj.key, err))
        return body

    def _encode_data(self, robj):
        """
        Encodes the object's data into the request body.
        """
        if robj.jsonize:
            try:
                return str_to_bytes(json.dumps(robj.data,
                                               ensure_ascii=False))
            except (TypeError, ValueError) as err:
                raise DataError('Could not encode data of %s/%s as JSON: %s'
                                % (robj.bucket.name, robj.key, err))
        elif robj.data is None:
            return b''
        else:
            return str_to_bytes(robj.data)

    def _parse_indexes(self, headers):
        indexes = {}
        for header in headers.keys():
            if not header.startswith('x-riak-index-'):
                continue
            field = header[len('x-riak-index-'):]
            for value in headers.get_all(header):
                for token in value.split(','):
                    token = token.strip()
                    if not token:
                        continue
                    token = decode_index_value(field, unquote_plus(token))
                    values = indexes.setdefault(field, [])
                    if token not in values:
                        values.append(token)
        return indexes

    def _parse_meta(self, headers):
        meta = {}
        for header in headers.keys():
            if header.startswith('x-riak-meta-'):
                value = headers[header]
                if isinstance(value, list):
                    value = ', '.join(value)
                meta[header[len('x-riak-meta-'):]] = value
        return meta

    def _reconcile_auto_indexes(self, robj):
        """
        Restores the auto-index definitions from the object's metadata
        and drops the explicit index values they produced, keeping
        values that were also set explicitly at store time.
        """
        if AUTOINDEX_META not in robj.meta:
            return
        try:
            robj.auto_indexes = json.loads(robj.meta[AUTOINDEX_META])
            collisions = json.loads(
                robj.meta.get(AUTOINDEX_COLLISION_META) or '{}')
        except ValueError as err:
            raise DataError('Malformed auto-index metadata: %s' % err)

        data = robj.data
        if not quacks_like_dict(data):
            return
        for index, field in robj.auto_indexes.items():
            if field not in data or index not in robj.indexes:
                continue
            if index in collisions and \
                    coerce_index_value(index, collisions[index]) == \
                    coerce_index_value(index, data[field]):
                continue
            value = coerce_index_value(index, data[field])
            values = [v for v in robj.indexes[index] if v != value]
            if values:
                robj.indexes[index] = values
            else:
                del robj.indexes[index]

    def _to_link_header(self, link):
        """
        Convert the link to a link header string. Used internally.
        """
        url = self.object_path(link.bucket, link.key)
        header = '<%s>; riaktag="%s"' % (url, quote_plus(link.tag))
        return header

    def _parse_links(self, linkHeaders):
        """
        Parses Link header values into :class:`RiakLink` objects,
        skipping entries that do not point at an object.
        """
        if isinstance(linkHeaders, list):
            linkHeaders = ','.join(linkHeaders)
        links = []
        for linkHeader in linkHeaders.strip().split(','):
            linkHeader = linkHeader.strip()
            matches = (LINK_NEWFORM.match(linkHeader) or
                       LINK_OLDFORM.match(linkHeader))
            if matches is not None:
                link = RiakLink(unquote_plus(matches.group(2)),
                                unquote_plus(matches.group(3)),
                                unquote_plus(matches.group(4)),
                                client=self._client)
                if link not in links:
                    links.append(link)
        return links

    def _add_links_for_riak_object(self, robject, headers):
        links = robject.links
        if links:
            current_header = ''
            for link in links:
                header = self._to_link_header(link)
                if current_header and (len(current_header) + 2 +
                                       len(header) > MAX_LINK_HEADER_SIZE):
                    headers.add('Link', current_header)
                    current_header = ''

                if current_header != '':
                    header = ', ' + header
                current_header += header

            headers.add('Link', current_header)

        return headers

    def _build_index_values(self, robj):
        """
        Merges the explicit indexes with the values of auto-indexed
        fields. Returns the merged indexes and the auto-index values
        that were already present explicitly.
        """
        indexes = dict((index, list(values))
                       for index, values in robj.indexes.items())
        collisions = {}
        if not robj.auto_indexes:
            return indexes, collisions

        data = robj.data
        if not quacks_like_dict(data):
            raise DataError('Auto-indexing %s/%s requires data to be a '
                            'mapping' % (robj.bucket.name, robj.key))
        for index, field in robj.auto_indexes.items():
            if field not in data:
                continue
            value = coerce_index_value(index, data[field])
            values = indexes.setdefault(index, [])
            if value in values:
                collisions[index] = data[field]
            else:
                values.append(value)
        return indexes, collisions

    def _build_put_headers(self, robj):
        """Build the headers for a POST/PUT request."""
        headers = HttpHeaders([('Accept', 'text/plain, */*; q=0.5'),
                               ('Content-Type', robj.content_type),
                               ('X-Riak-ClientId', self.client_id)])

        # Add the vclock if it exists...
        if robj.vclock is not None:
            headers['X-Riak-Vclock'] = robj.vclock

        # Create the header from metadata
        self._add_links_for_riak_object(robj, headers)

        indexes, collisions = self._build_index_values(robj)

        meta = dict((key, value) for key, value in robj.meta.items()
                    if key not in (AUTOINDEX_META, AUTOINDEX_COLLISION_META))
        if robj.auto_indexes:
            meta[AUTOINDEX_META] = json.dumps(robj.auto_indexes,
                                              sort_keys=True)
            if collisions:
                meta[AUTOINDEX_COLLISION_META] = json.dumps(
                    collisions, sort_keys=True)
        for key in sorted(meta):
            headers.add('X-Riak-Meta-%s' % key, str(meta[key]))

        for field in sorted(indexes):
            if indexes[field]:
                headers.add('X-Riak-Index-%s' % field,
                            ', '.join(quote_plus(str(v))
                                      for v in indexes[field]))

        return headers

    def _decode_key_stream(self, body):
        """
        Decodes a key listing, which is either one JSON document or
        several concatenated ones, into a list of unique keys in the
        order received.
        """
        text = bytes_to_str(body) or ''
        decoder = json.JSONDecoder()
        keys = []
        seen = set()
        idx = 0
        end = len(text)
        while True:
            while idx < end and text[idx].isspace():
                idx += 1
            if idx >= end:
                break
            try:
                document, idx = decoder.raw_decode(text, idx)
            except ValueError as err:
                raise DataError('Malformed key listing: %s' % err)
            if not isinstance(document, dict):
                continue
            for key in document.get('keys', []):
                key = unquote_plus(key)
                if key not in seen:
                    seen.add(key)
                    keys.append(key)
        return keys

    def _parse_walk_body(self, response):
        """
        Splits a multipart/mixed link-walk response into one list of
        ``(bucket, key, HttpResponse)`` per kept phase.
        """
        content_type = response.headers.get('content-type', '')
        raw = (b'Content-Type: ' + str_to_bytes(content_type) +
               b'\r\n\r\n' + (response.body or b''))
        message = message_from_bytes(raw)
        if not message.is_multipart():
            return []

        phases = []
        for phase in message.get_payload():
            results = []
            parts = phase.get_payload() if phase.is_multipart() else []
            for part in parts:
                headers = HttpHeaders((name.lower(), value)
                                      for name, value in part.items())
                location = headers.get('location', '').strip('/')
                segments = location.split('/')
                if len(segments) < 2:
                    continue
                body = part.get_payload(decode=True) or b''
                results.append((unquote_plus(segments[-2]),
                                unquote_plus(segments[-1]),
                                HttpResponse(200, headers, body)))
            phases.append(results)
        return phases

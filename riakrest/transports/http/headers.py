"""
Parsing of raw HTTP header blocks into case-insensitive mappings that
keep every value of a repeated header.
"""

import re

# A CRLF followed by a space or tab continues the previous header line
FOLDED_LINE = re.compile(r'\r?\n[ \t]+')
STATUS_LINE = re.compile(r'^HTTP/\d+(?:\.\d+)?\s+\d{3}')
HEADER_LINE = re.compile(r'^([^:]+):\s*(.*)$')


def title_case(name):
    """
    Normalizes a header name to the conventional capitalization, e.g.
    ``x-riak-vclock`` becomes ``X-Riak-Vclock``.
    """
    return '-'.join(part[:1].upper() + part[1:]
                    for part in name.lower().split('-'))


class HttpHeaders(object):
    """
    An ordered, case-insensitive multi-valued header mapping.

    Lookups by name return a string when a header was seen once and a
    list when it was repeated, so ``Link`` and ``X-Riak-Index-*``
    headers sent several times are never overwritten. Use
    :meth:`get_all` to always get a list.
    """

    def __init__(self, items=None):
        self._items = []
        if items is not None:
            if hasattr(items, 'items'):
                items = items.items()
            for name, value in items:
                self.add(name, value)

    def add(self, name, value):
        """
        Appends a value for the given header name, keeping any values
        already present.
        """
        self._items.append((name, value))

    def get_all(self, name):
        """
        Returns every value of the named header, in the order received.

        :rtype: list
        """
        key = name.lower()
        return [v for (n, v) in self._items if n.lower() == key]

    def get(self, name, default=None):
        values = self.get_all(name)
        if not values:
            return default
        elif len(values) == 1:
            return values[0]
        else:
            return values

    def __getitem__(self, name):
        values = self.get_all(name)
        if not values:
            raise KeyError(name)
        return values[0] if len(values) == 1 else values

    def __setitem__(self, name, value):
        key = name.lower()
        self._items = [(n, v) for (n, v) in self._items
                       if n.lower() != key]
        self._items.append((name, value))

    def __delitem__(self, name):
        key = name.lower()
        if key not in self:
            raise KeyError(name)
        self._items = [(n, v) for (n, v) in self._items
                       if n.lower() != key]

    def __contains__(self, name):
        key = name.lower()
        return any(n.lower() == key for (n, _) in self._items)

    def __iter__(self):
        return iter(self.keys())

    def __len__(self):
        return len(self.keys())

    def __eq__(self, other):
        if isinstance(other, HttpHeaders):
            return self.as_dict() == other.as_dict()
        return NotImplemented

    def keys(self):
        """
        Lower-cased header names, each once, in first-seen order.
        """
        seen = []
        for name, _ in self._items:
            key = name.lower()
            if key not in seen:
                seen.append(key)
        return seen

    def items(self):
        """
        Every ``(name, value)`` pair as added, including repeats. This is
        the form written onto the wire.
        """
        return list(self._items)

    def as_dict(self):
        """
        A plain dict keyed by lower-cased name.
        """
        return dict((key, self[key]) for key in self.keys())

    def title_case(self):
        """
        A plain dict of the same headers keyed by Title-Case names.
        """
        return dict((title_case(key), self[key]) for key in self.keys())

    def __repr__(self):
        return 'HttpHeaders(%r)' % (self._items,)


def parse_headers(raw):
    """
    Parse an HTTP Header string into an :class:`HttpHeaders` of
    response headers.

    Status lines are collected under ``http_status``; more than one is
    present when the raw text spans an interim response such as
    ``100 Continue``.

    :param raw: the raw header block, lines separated by CRLF
    :type raw: string
    :rtype: HttpHeaders
    """
    headers = HttpHeaders()
    if not raw:
        return headers
    if isinstance(raw, bytes):
        raw = raw.decode('iso-8859-1')

    for line in FOLDED_LINE.sub(' ', raw).splitlines():
        line = line.strip()
        if not line:
            continue
        if STATUS_LINE.match(line):
            headers.add('http_status', line)
            continue
        matches = HEADER_LINE.match(line)
        if matches is None:
            continue
        headers.add(matches.group(1).strip().lower(),
                    matches.group(2).strip())
    return headers


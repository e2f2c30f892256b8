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

from collections.abc import Mapping

from riakrest.riak_error import DataError


def quacks_like_dict(object):
    """Check if object is dict-like"""
    return isinstance(object, Mapping)


class lazy_property(object):
    '''
    A method decorator meant to be used for lazy evaluation and
    memoization of an object attribute. The property should represent
    immutable data, as it replaces itself on first access.
    '''
    def __init__(self, fget):
        self.fget = fget
        self.func_name = fget.__name__

    def __get__(self, obj, cls):
        if obj is None:
            return None
        value = self.fget(obj)
        setattr(obj, self.func_name, value)
        return value


def decode_index_value(index, value):
    """
    Converts a raw index value into its Python form: integers for
    ``_int`` indexes, strings otherwise.
    """
    if bytes_to_str(index).endswith("_int"):
        return str_to_long(bytes_to_str(value))
    else:
        return bytes_to_str(value)


def bytes_to_str(value, encoding='utf-8'):
    if isinstance(value, str) or value is None:
        return value
    elif isinstance(value, list):
        return [bytes_to_str(elem) for elem in value]
    else:
        return value.decode(encoding)


def str_to_bytes(value, encoding='utf-8'):
    if value is None or isinstance(value, bytes):
        return value
    elif isinstance(value, list):
        return [str_to_bytes(elem) for elem in value]
    else:
        return value.encode(encoding)


def str_to_long(value, base=10):
    if value is None:
        return None
    elif isinstance(value, int):
        return value
    else:
        return int(value.strip(), base)


def coerce_index_value(index, value):
    """
    Converts a value into the form stored for the given index:
    integers for ``_int`` indexes, strings otherwise.
    """
    if bytes_to_str(index).endswith("_int"):
        try:
            return int(value)
        except (TypeError, ValueError):
            raise DataError('Invalid value %r for integer index %s' %
                            (value, index))
    elif isinstance(value, bytes):
        return bytes_to_str(value)
    else:
        return str(value)

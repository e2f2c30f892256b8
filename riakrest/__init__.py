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

"""
A client for Riak's HTTP interface. It lets you create, modify, and
delete Riak objects, add and remove links and secondary indexes on
them, list buckets and keys, and run Javascript (and Erlang) based
Map/Reduce and Linkwalking operations.
"""

__version__ = "1.0.0"

from riakrest.riak_error import RiakError, TransportError, \
    ServerUnreachable, UnexpectedStatus, DataError
from riakrest.config import RiakConfig
from riakrest.client import RiakClient
from riakrest.bucket import RiakBucket
from riakrest.riak_object import RiakObject
from riakrest.link import RiakLink
from riakrest.mapreduce import RiakKeyFilter, RiakMapReduce, \
    RiakMapReducePhase, RiakLinkPhase

__all__ = ['RiakBucket', 'RiakClient', 'RiakConfig', 'RiakObject',
           'RiakLink', 'RiakMapReduce', 'RiakMapReducePhase',
           'RiakLinkPhase', 'RiakKeyFilter', 'RiakError',
           'TransportError', 'ServerUnreachable',
           'UnexpectedStatus', 'DataError',
           'ONE', 'ALL', 'QUORUM', 'key_filter']

ONE = "one"
ALL = "all"
QUORUM = "quorum"

key_filter = RiakKeyFilter()

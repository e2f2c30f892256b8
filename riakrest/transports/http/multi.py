"""
Copyright 2013 Basho Technologies, Inc.

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

from collections import namedtuple
from multiprocessing import cpu_count
from queue import Queue, Empty
from threading import Thread, Lock, Event

__all__ = ['multi_request', 'MultiRequestPool']


try:
    #: The default size of the worker pool, either based on the number
    #: of CPUS or defaulting to 6
    POOL_SIZE = cpu_count()
except NotImplementedError:
    # Make an educated guess
    POOL_SIZE = 6

#: A :class:`namedtuple` for requests that are fed to workers in the
#: pool.
Task = namedtuple('Task', ['transport', 'outq', 'url', 'headers'])


class MultiRequestPool(object):
    """
    Encapsulates a pool of threads issuing GET requests. These threads
    can be used across many batches.
    """

    def __init__(self, size=POOL_SIZE):
        """
        :param size: the desired size of the worker pool
        :type size: int
        """

        self._inq = Queue()
        self._size = size
        self._started = Event()
        self._stop = Event()
        self._lock = Lock()
        self._workers = []

    def enq(self, task):
        """
        Enqueues a request task to the pool of workers. This will raise
        a RuntimeError if the pool is stopped or in the process of
        stopping.

        :param task: the Task object
        :type task: Task
        """
        if not self._stop.is_set():
            self._inq.put(task)
        else:
            raise RuntimeError("Attempted to enqueue a request while "
                               "multi-request pool was shutdown!")

    def start(self):
        """
        Starts the worker threads if they are not already started.
        This method is thread-safe and will be called automatically
        when executing a batch.
        """
        # Check whether we are already started, skip if we are.
        if not self._started.is_set():
            # If we are not started, try to capture the lock.
            if self._lock.acquire(False):
                # If we got the lock, go ahead and start the worker
                # threads, set the started flag, and release the lock.
                for i in range(self._size):
                    name = "riakrest.multi-worker-{0}".format(i)
                    worker = Thread(target=self._worker_method, name=name)
                    worker.daemon = True
                    worker.start()
                    self._workers.append(worker)
                self._started.set()
                self._lock.release()
            else:
                # We didn't get the lock, so someone else is already
                # starting the worker threads. Wait until they have
                # signaled that the threads are started.
                self._started.wait()

    def stop(self):
        """
        Signals the worker threads to exit and waits on them.
        """
        if not self.stopped():
            self._stop.set()
            for worker in self._workers:
                worker.join()

    def stopped(self):
        """
        Detects whether this pool has been stopped.
        """
        return self._stop.is_set()

    def _worker_method(self):
        """
        The body of the worker. Loops until :meth:`_should_quit`
        returns ``True``, taking tasks off the input queue, issuing
        the request, and putting ``(url, response)`` on the output
        queue. A request that raises yields a ``None`` response.
        """
        while not self._should_quit():
            try:
                task = self._inq.get(block=True, timeout=0.25)
            except Empty:
                continue

            try:
                response = task.transport._request('GET', task.url,
                                                   task.headers)
                task.outq.put((task.url, response))
            except KeyboardInterrupt:
                raise
            except Exception as err:
                logging.error('Batched GET %s failed: %r', task.url, err)
                task.outq.put((task.url, None))
            finally:
                self._inq.task_done()

    def _should_quit(self):
        """
        Worker threads should exit when the stop flag is set and the
        input queue is empty. Once the stop flag is set, new enqueues
        are disallowed, meaning that the workers can safely drain the
        queue before exiting.

        :rtype: bool
        """
        return self.stopped() and self._inq.empty()


def multi_request(transport, urls, headers=None, pool=None):
    """Executes GET requests for several URLs across multiple threads.
    Returns a dict mapping each URL to its
    :class:`~riakrest.transports.http.connection.HttpResponse`, or to
    ``None`` when that request failed. One failing request never
    affects the others.

    If a ``pool`` is given, the requests will use it and not a
    transient :class:`MultiRequestPool`.

    :param transport: the transport issuing each request
    :type transport: :class:`~riakrest.transports.http.HttpTransport`
    :param urls: the paths to fetch
    :type urls: list
    :param headers: request headers shared by every request
    :type headers: dict, None
    :rtype: dict
    """
    urls = list(urls)
    if not urls:
        return {}

    transient_pool = False
    outq = Queue()

    if pool is None:
        pool = MultiRequestPool(size=min(POOL_SIZE, len(urls)))
        transient_pool = True

    try:
        pool.start()
        for url in urls:
            pool.enq(Task(transport, outq, url,
                          dict(headers) if headers else None))

        results = {}
        for _ in range(len(urls)):
            if pool.stopped():
                raise RuntimeError(
                        'Multi-request operation interrupted by pool '
                        'stopping!')
            url, response = outq.get()
            results[url] = response
            outq.task_done()
    finally:
        if transient_pool:
            pool.stop()

    return results

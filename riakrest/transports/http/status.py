"""
Expected and error status codes for every HTTP action the client
performs, and validation of responses against them.
"""

import logging

from riakrest.riak_error import ServerUnreachable, UnexpectedStatus

#: Status codes each action accepts as success
EXPECTED_STATUSES = {
    'listBuckets': [200],
    'listKeys': [200],
    'getBucketProperties': [200],
    'setBucketProperties': [204],
    'fetchObject': [200, 300, 304],
    'storeObject': [200, 201, 204, 300],
    'deleteObject': [204, 404],
    'linkWalking': [200],
    'mapReduce': [200],
    'secondaryIndex': [200],
    'ping': [200],
    'status': [200],
    'listResource': [200],
}

#: Descriptions of the known failure codes for each action
ERROR_STATUSES = {
    'setBucketProperties': {
        400: 'Submitted JSON is invalid',
        415: 'The Content-Type was not set to application/json in the '
             'request',
    },
    'fetchObject': {
        400: 'Bad request, e.g. r parameter is invalid (> N)',
        404: 'The object could not be found on enough partitions',
        503: 'The request timed out',
    },
    'storeObject': {
        400: 'Bad request, e.g. r, w, or dw parameters are invalid (> N)',
        412: 'Precondition Failed (r, w, or dw parameters are invalid '
             '(> N))',
    },
    'deleteObject': {
        400: 'Bad request, e.g. rw parameter is invalid (> N)',
    },
    'linkWalking': {
        400: 'Format of the query in the URL is invalid',
        404: 'Origin object of the walk was missing',
    },
    'mapReduce': {
        400: 'Invalid job is submitted.',
        500: 'There was an error in processing a map or reduce function',
        503: 'The job timed out before it could complete',
    },
    'secondaryIndex': {
        400: 'The index name or index value is invalid.',
        500: 'There was an error in processing a map or reduce function, '
             'or indexing is not supported by the system.',
        503: 'The job timed out before it could complete',
    },
    'status': {
        404: 'The setting "riak_kv_stat" may be disabled',
    },
}

#: Actions for which a missing object is a normal answer
NOT_FOUND_ACTIONS = ('fetchObject', 'deleteObject')


def expected_statuses(action):
    """
    Returns the status codes the given action accepts; unknown actions
    accept only ``200``.

    :rtype: list
    """
    return EXPECTED_STATUSES.get(action, [200])


def error_description(action, status):
    return ERROR_STATUSES.get(action, {}).get(
        status, 'An undefined error has occurred during %s!' % action)


class StatusValidator(object):
    """
    Mixin for HttpTransport that checks response codes against the
    status tables above.
    """

    def validate(self, response, actions, url=None):
        """
        Checks that the response status is acceptable for at least one
        of the given actions.

        :param response: the response to check, ``None`` when the request
           never produced one
        :type response: HttpResponse
        :param actions: an action name or list of action names
        :type actions: string, list
        :param url: the request URL, reported in errors
        :type url: string
        :rtype: True
        :raises ServerUnreachable: when no response reached the server
        :raises UnexpectedStatus: when no action accepts the status
        """
        if isinstance(actions, str):
            actions = [actions]

        if response is None or not response.status:
            logging.error('No response from %s for %s',
                          self.base_url(), url)
            raise ServerUnreachable(self.base_url())

        status = response.status
        for action in actions:
            if status in expected_statuses(action):
                return True

        reasons = dict((action, error_description(action, status))
                       for action in actions)
        status_lines = response.headers.get_all('http_status') or \
            [str(status)]
        message = '%s - %s' % (
            ', '.join(status_lines),
            '; '.join('%s: %s' % (action, reasons[action])
                      for action in actions))
        if url is not None:
            message = '%s (%s)' % (message, url)
        logging.error('Unexpected status: %s', message)
        raise UnexpectedStatus(message, actions, status, reasons, url)

    def is_not_found(self, response, actions):
        """
        Whether the response is a 404 that every one of the actions
        treats as "no such object" rather than a failure. A store that
        also accepts fetch answers still fails on 404.
        """
        if isinstance(actions, str):
            actions = [actions]
        return (response is not None and response.status == 404 and
                all(action in NOT_FOUND_ACTIONS for action in actions))

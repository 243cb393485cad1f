"""Loggable ``Retry()`` adapter for ``requests`` package"""

import logging

from urllib3 import Retry


class LoggingRetry(Retry):
    """When the explorer API throttles us or flakes, be verbose about it.

    Example how to use:

    .. code-block:: python

        retry_policy = LoggingRetry(
            total=5,
            backoff_factor=0.1,
            status_forcelist=[429, 500, 502, 503, 504],
        )
        session.mount('http://', HTTPAdapter(max_retries=retry_policy))
        session.mount('https://', HTTPAdapter(max_retries=retry_policy))
    """

    def __init__(self, *args, **kwargs):
        self.logger = kwargs.pop('logger', logging.getLogger(__name__))
        super().__init__(*args, **kwargs)

    def new(self, **kw):
        # Retry.increment() clones itself through new(), keep our logger
        new_retry = super().new(**kw)
        new_retry.logger = self.logger
        return new_retry

    def increment(self, method=None, url=None, response=None, error=None, _pool=None, _stacktrace=None):
        if response:
            status = response.status
            reason = response.reason
        else:
            status = None
            reason = str(error)

        url_shortened = (url or "")[0:96]
        self.logger.warning("Retrying: %s %s (status: %s, reason: %s), attempts left: %s", method, url_shortened, status, reason, self.total)
        return super().increment(method, url, response, error, _pool, _stacktrace)

#!/usr/bin/env python
#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import time
from logging import getLogger
from typing import Any, Callable, TypeVar

from botocore.exceptions import (
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from .constants import DEFAULT_MAX_RETRY_ATTEMPTS
from .errors import RetryExhaustedError
from .time_util import BackoffPolicy, ExponentialBackoff, TimeoutBackoffCtx

logger = getLogger(__name__)

T = TypeVar("T")

# error codes AWS uses to signal throttling or a momentary service fault
TRANSIENT_ERROR_CODES = frozenset(
    [
        "ThrottlingException",
        "Throttling",
        "TooManyRequestsException",
        "RequestLimitExceeded",
        "SlowDown",
        "ProvisionedThroughputExceededException",
        "InternalServerException",
        "InternalError",
        "ServiceUnavailable",
        "RequestTimeout",
    ]
)

TRANSIENT_ERRORS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ReadTimeoutError,
    ConnectTimeoutError,
)


def is_transient(exc: BaseException) -> bool:
    """Whether a failed remote call is worth retrying."""
    if isinstance(exc, TRANSIENT_ERRORS):
        return True
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        if error.get("Code") in TRANSIENT_ERROR_CODES:
            return True
        # Athena reports throttling on InvalidRequestException with a detail code
        return exc.response.get("AthenaErrorCode") == "THROTTLING"
    return False


class RetryPolicy:
    """Wraps remote calls in a bounded exponential backoff loop.

    Only throttling and transport errors are retried, anything else is raised
    immediately. Once ``max_attempts`` calls have failed the last error is
    raised wrapped in a ``RetryExhaustedError``.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_RETRY_ATTEMPTS,
        backoff_policy: BackoffPolicy | None = None,
        quiet: bool = False,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._backoff_policy = (
            backoff_policy if backoff_policy is not None else ExponentialBackoff()
        )
        self._quiet = quiet

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def invoke(self, operation: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        ctx = TimeoutBackoffCtx(
            max_retry_attempts=self._max_attempts - 1,
            backoff_policy=self._backoff_policy,
        )
        name = getattr(operation, "__name__", repr(operation))
        while True:
            try:
                return operation(*args, **kwargs)
            except Exception as e:
                if not is_transient(e):
                    raise
                if not ctx.should_retry():
                    logger.debug(
                        "%s failed %d times, giving up", name, self._max_attempts
                    )
                    raise RetryExhaustedError(self._max_attempts, e) from e
                ctx.increment()
                if not self._quiet:
                    logger.warning(
                        "%s: %s, retrying in %s seconds (attempt %d of %d)",
                        name,
                        e,
                        ctx.current_sleep_time,
                        ctx.current_retry_count + 1,
                        self._max_attempts,
                    )
                time.sleep(ctx.current_sleep_time)

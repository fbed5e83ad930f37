#!/usr/bin/env python
#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import logging
from logging import getLogger

from .errorcode import (
    ER_CREDENTIALS_EXPIRED,
    ER_MALFORMED_LOCATION,
    ER_MISSING_DEPENDENCY,
    ER_QUERY_CANCELLED,
    ER_QUERY_FAILED,
    ER_QUERY_TIMEOUT,
    ER_RESULT_CLEARED,
    ER_RETRY_EXHAUSTED,
)

logger = getLogger(__name__)


class Error(Exception):
    """Base Athena connector exception class."""

    def __init__(
        self,
        msg: str | None = None,
        errno: int | None = None,
        query_id: str | None = None,
        done_format_msg: bool | None = None,
    ) -> None:
        super().__init__(msg)
        self.msg = msg
        self.raw_msg = msg
        self.errno = errno or -1
        self.query_id = query_id

        if not self.msg:
            self.msg = "Unknown error"

        if self.errno != -1 and not done_format_msg:
            if self.query_id and logger.getEffectiveLevel() in (
                logging.INFO,
                logging.DEBUG,
            ):
                self.msg = f"{self.errno:06d}: {self.query_id}: {self.msg}"
            else:
                self.msg = f"{self.errno:06d}: {self.msg}"

    def __repr__(self) -> str:
        return self.__str__()

    def __str__(self) -> str:
        return self.msg


class InterfaceError(Error):
    """Exception for errors related to the interface."""

    pass


class DatabaseError(Error):
    """Exception for errors related to the database."""

    pass


class InternalError(DatabaseError):
    """Exception for errors internal database errors."""

    pass


class OperationalError(DatabaseError):
    """Exception for errors related to the database's operation."""

    pass


class ProgrammingError(DatabaseError):
    """Exception for errors programming errors."""

    pass


class NotSupportedError(DatabaseError):
    """Exception for errors when an unsupported database feature was used."""

    pass


class ResultClearedError(InterfaceError):
    """Raised when a cursor is used after its result has been cleared."""

    def __init__(self, query_id: str | None = None) -> None:
        super().__init__(
            msg="Result already cleared",
            errno=ER_RESULT_CLEARED,
            query_id=query_id,
            done_format_msg=True,
        )


class QueryFailedError(DatabaseError):
    """Raised when data is requested of a query the service reports as FAILED.

    The message is the failure reason reported by the service.
    """

    def __init__(self, reason: str | None, query_id: str | None = None) -> None:
        super().__init__(
            msg=reason or "Query failed without a reported reason",
            errno=ER_QUERY_FAILED,
            query_id=query_id,
            done_format_msg=True,
        )


class QueryCancelledError(DatabaseError):
    """Raised when data is requested of a cancelled query."""

    def __init__(self, reason: str | None, query_id: str | None = None) -> None:
        super().__init__(
            msg=reason or "Query was cancelled",
            errno=ER_QUERY_CANCELLED,
            query_id=query_id,
            done_format_msg=True,
        )


class QueryTimeoutError(OperationalError):
    """Raised when a query does not reach a terminal state before the poll deadline."""

    def __init__(self, timeout: float, query_id: str | None = None) -> None:
        self.timeout = timeout
        super().__init__(
            msg=f"Query did not finish within {timeout} seconds",
            errno=ER_QUERY_TIMEOUT,
            query_id=query_id,
        )


class RetryExhaustedError(OperationalError):
    """Raised when a remote call keeps failing with transient errors."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            msg=f"Remote call failed after {attempts} attempts: {last_error}",
            errno=ER_RETRY_EXHAUSTED,
        )


class CredentialsExpiredError(OperationalError):
    """Raised when the connection's credentials have passed their expiration."""

    def __init__(self, expiration) -> None:
        self.expiration = expiration
        super().__init__(
            msg=f"AWS credentials expired at {expiration.isoformat()}, please reconnect",
            errno=ER_CREDENTIALS_EXPIRED,
        )


class MalformedLocationError(ProgrammingError):
    """Raised when a result location is not of the form scheme://bucket/key."""

    def __init__(self, uri: str | None) -> None:
        self.uri = uri
        super().__init__(
            msg=f"Malformed result location: {uri!r}",
            errno=ER_MALFORMED_LOCATION,
        )


class MissingDependencyError(Error):
    """Exception for missing extras dependencies."""

    def __init__(self, dependency: str) -> None:
        super().__init__(
            msg=f"Missing optional dependency: {dependency}",
            errno=ER_MISSING_DEPENDENCY,
        )

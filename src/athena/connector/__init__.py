#!/usr/bin/env python
#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import logging
from functools import wraps
from logging import NullHandler

from .cache import CacheConfig, ResultCache
from .connection import AthenaConnection
from .constants import QueryState
from .cursor import AthenaCursor
from .errors import (
    CredentialsExpiredError,
    DatabaseError,
    Error,
    InterfaceError,
    InternalError,
    MalformedLocationError,
    MissingDependencyError,
    NotSupportedError,
    OperationalError,
    ProgrammingError,
    QueryCancelledError,
    QueryFailedError,
    QueryTimeoutError,
    ResultClearedError,
    RetryExhaustedError,
)
from .reclaimer import ResultCleanupWarning, TeardownResult, TeardownStatus
from .version import VERSION

logging.getLogger(__name__).addHandler(NullHandler())


@wraps(AthenaConnection.__init__)
def Connect(**kwargs) -> AthenaConnection:
    return AthenaConnection(**kwargs)


connect = Connect

ATHENA_CONNECTOR_VERSION = ".".join(str(v) for v in VERSION[0:3])
__version__ = ATHENA_CONNECTOR_VERSION

__all__ = [
    "AthenaConnection",
    "AthenaCursor",
    "CacheConfig",
    "ResultCache",
    "QueryState",
    "TeardownResult",
    "TeardownStatus",
    "ResultCleanupWarning",
    # Error handling
    "Error",
    "InterfaceError",
    "DatabaseError",
    "InternalError",
    "OperationalError",
    "ProgrammingError",
    "NotSupportedError",
    "CredentialsExpiredError",
    "MalformedLocationError",
    "MissingDependencyError",
    "QueryCancelledError",
    "QueryFailedError",
    "QueryTimeoutError",
    "ResultClearedError",
    "RetryExhaustedError",
    "connect",
    "Connect",
]

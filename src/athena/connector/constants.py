#!/usr/bin/env python
#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

"""Various constants."""

from __future__ import annotations

from enum import Enum, unique

UTF8 = "utf-8"

# Athena caps GetQueryResults at 1000 rows per call
PAGE_SIZE_CEILING = 1000

DEFAULT_WORK_GROUP = "primary"
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_MAX_RETRY_ATTEMPTS = 5
DEFAULT_LOG_MAX_QUERY_LENGTH = 80

METADATA_SUFFIX = ".metadata"
MANIFEST_SUFFIX = "-manifest.csv"
CSV_SUFFIX = ".csv"


@unique
class QueryState(Enum):
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    [QueryState.SUCCEEDED, QueryState.FAILED, QueryState.CANCELLED]
)


@unique
class StatementType(Enum):
    DDL = "DDL"
    DML = "DML"
    UTILITY = "UTILITY"


@unique
class RowFormat(Enum):
    """Layout of a materialized result object."""

    # header-bearing CSV, written for SELECT and CTAS statements
    CSV = "csv"
    # newline-delimited records without a header, written for DDL/utility output
    LINES = "lines"

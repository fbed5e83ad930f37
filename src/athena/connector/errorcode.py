#!/usr/bin/env python
#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

# remote calls
ER_RETRY_EXHAUSTED = 250004
ER_CREDENTIALS_EXPIRED = 250005

# cursor
ER_RESULT_CLEARED = 251001
ER_INVALID_VALUE = 251002
ER_NOT_POSITIVE_SIZE = 251003
ER_EMPTY_STATEMENT = 251004

# query execution
ER_QUERY_FAILED = 252001
ER_QUERY_CANCELLED = 252002
ER_QUERY_TIMEOUT = 252003

# result storage
ER_MALFORMED_LOCATION = 253001

# dependencies
ER_MISSING_DEPENDENCY = 254001

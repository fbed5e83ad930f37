#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

from collections import namedtuple

from .constants import CSV_SUFFIX, MANIFEST_SUFFIX, METADATA_SUFFIX, RowFormat
from .errors import MalformedLocationError

"""
Result Location: S3 bucket name + object key
"""
ResultLocation = namedtuple(
    "ResultLocation", ["bucket", "key"]  # S3 bucket name  # S3 object key
)

SCHEME_SEPARATOR = "://"


def parse_result_location(uri: str | None) -> ResultLocation:
    """Splits ``scheme://bucket/key`` into its bucket and key.

    Both parts must be non-empty, a URI without an object key is rejected.
    """
    if not isinstance(uri, str) or SCHEME_SEPARATOR not in uri:
        raise MalformedLocationError(uri)
    scheme, _, path = uri.partition(SCHEME_SEPARATOR)
    bucket, _, key = path.partition("/")
    if not scheme or not bucket or not key:
        raise MalformedLocationError(uri)
    return ResultLocation(bucket, key)


def metadata_key(location: ResultLocation) -> str:
    return location.key + METADATA_SUFFIX


def manifest_key(location: ResultLocation) -> str:
    return location.key + MANIFEST_SUFFIX


def row_format(location: ResultLocation) -> RowFormat:
    """CSV results carry a header row, anything else is plain lines."""
    if location.key.endswith(CSV_SUFFIX):
        return RowFormat.CSV
    return RowFormat.LINES

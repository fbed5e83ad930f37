#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

DATA_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB", "PB")


def format_data_scanned(num_bytes: int) -> str:
    """Human readable byte count in base 1024, e.g. ``1.21 KB``."""
    if num_bytes <= 0:
        return "0 Bytes"
    exponent = 0
    while num_bytes >= 1024 ** (exponent + 1) and exponent < len(DATA_SIZE_UNITS) - 1:
        exponent += 1
    value = round(num_bytes / 1024**exponent, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {DATA_SIZE_UNITS[exponent]}"


def format_query_for_log(query: str, max_length: int) -> str:
    """Collapses whitespace and truncates a statement before it is logged."""
    return " ".join(query.split())[:max_length]

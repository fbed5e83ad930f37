#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

from logging import getLogger
from typing import Any, NamedTuple

from .constants import PAGE_SIZE_CEILING
from .errorcode import ER_NOT_POSITIVE_SIZE
from .errors import ProgrammingError
from .execution import ExecutionHandle
from .remote_client import QueryExecutionClient
from .retry import RetryPolicy

logger = getLogger(__name__)


class ColumnInfo(NamedTuple):
    name: str
    type: str

    @classmethod
    def from_column(cls, col: dict[str, Any]) -> ColumnInfo:
        """Initializes a ColumnInfo from an entry of ``ResultSetMetadata.ColumnInfo``."""
        return cls(col["Name"], col["Type"])


class Page(NamedTuple):
    """Rows read by one ``fetch_page`` call.

    ``next_token`` is None once the end of the result has been reached.
    """

    rows: list[tuple]
    columns: list[ColumnInfo]
    next_token: str | None

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def to_dicts(self) -> list[dict[str, str | None]]:
        names = self.column_names
        return [dict(zip(names, row)) for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)


def _parse_row(row: dict[str, Any]) -> tuple:
    # cells without a value come back as empty dicts
    return tuple(cell.get("VarCharValue") for cell in row.get("Data", []))


class PaginatedFetcher:
    """Reads results through the service's paginated results call."""

    def __init__(self, client: QueryExecutionClient, retry: RetryPolicy) -> None:
        self._client = client
        self._retry = retry
        self._columns: dict[str, list[ColumnInfo]] = {}

    def columns(self, handle: ExecutionHandle) -> list[ColumnInfo]:
        """Probes the result schema with a one row request."""
        cached = self._columns.get(handle.execution_id)
        if cached is not None:
            return cached
        response = self._retry.invoke(
            self._client.get_query_results, handle.execution_id, 1
        )
        columns = [
            ColumnInfo.from_column(col)
            for col in response["ResultSet"]["ResultSetMetadata"]["ColumnInfo"]
        ]
        self._columns[handle.execution_id] = columns
        return columns

    def forget(self, handle: ExecutionHandle) -> None:
        """Drops the probed schema of a released execution."""
        self._columns.pop(handle.execution_id, None)

    def fetch_page(
        self, handle: ExecutionHandle, max_rows: int
    ) -> tuple[Page, ExecutionHandle]:
        """Reads up to ``max_rows`` rows following on from where ``handle`` left off.

        Requests above the service's page size are split into several calls
        chained by continuation token. Reading stops early when the service
        returns no token, or returns the token that was just sent. The header
        row the service puts at the start of a result is dropped.

        Returns the page and the handle to continue reading from.
        """
        if isinstance(max_rows, bool) or not isinstance(max_rows, int) or max_rows < 1:
            raise ProgrammingError(
                msg=f"The number of rows is not a positive integer: {max_rows}",
                errno=ER_NOT_POSITIVE_SIZE,
            )
        columns = self.columns(handle)
        if handle.exhausted:
            return Page([], columns, None), handle

        drop_header = handle.at_start
        remaining = max_rows + 1 if drop_header else max_rows
        token = handle.next_token
        rows: list[tuple] = []
        while remaining > 0:
            chunk = min(remaining, PAGE_SIZE_CEILING)
            response = self._retry.invoke(
                self._client.get_query_results, handle.execution_id, chunk, token
            )
            page_rows = [_parse_row(r) for r in response["ResultSet"].get("Rows", [])]
            remaining -= len(page_rows)
            if drop_header:
                page_rows = page_rows[1:]
                drop_header = False
            rows.extend(page_rows)

            next_token = response.get("NextToken")
            if next_token is None or next_token == token:
                if next_token is not None:
                    logger.debug(
                        "continuation token did not advance for %s, treating as end of result",
                        handle.execution_id,
                    )
                token = None
                break
            token = next_token

        logger.debug(
            "fetched %d rows for %s, next token: %s",
            len(rows),
            handle.execution_id,
            token,
        )
        return Page(rows, columns, token), handle.advanced_to(token)

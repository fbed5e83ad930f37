#!/usr/bin/env python
#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import math
import warnings
from logging import getLogger
from threading import Lock
from types import TracebackType
from typing import TYPE_CHECKING, Any

from typing_extensions import Self

from .errors import ResultClearedError
from .execution import ExecutionHandle, QueryExecution
from .reclaimer import TeardownResult, TeardownStatus
from .result_set import ColumnInfo, Page

if TYPE_CHECKING:  # pragma: no cover
    from .connection import AthenaConnection

logger = getLogger(__name__)


class AthenaCursor:
    """The result of one submitted statement.

    A cursor owns the remote execution it was created for: it polls it, reads
    its rows either page by page or as a whole, and releases it on ``close``.
    Paginated reads are stateful, each ``fetch_page`` continues where the
    previous one stopped.

    Attributes:
        query_id: Athena query execution id.
        statement: The submitted statement text.
    """

    def __init__(self, connection: AthenaConnection, handle: ExecutionHandle) -> None:
        self._connection: AthenaConnection | None = connection
        self._handle = handle
        self._lock = Lock()

    @property
    def query_id(self) -> str:
        return self._handle.execution_id

    @property
    def statement(self) -> str:
        return self._handle.statement

    @property
    def handle(self) -> ExecutionHandle:
        return self._handle

    @property
    def connection(self) -> AthenaConnection | None:
        return self._connection

    def is_valid(self) -> bool:
        return self._connection is not None and not self._connection.is_closed()

    def _check_valid(self) -> AthenaConnection:
        if not self.is_valid():
            raise ResultClearedError(query_id=self._handle.execution_id)
        return self._connection

    def poll(self, timeout: float | None = None) -> QueryExecution:
        """Waits for the execution to finish and returns its description.

        A failed or cancelled execution is returned, not raised.
        """
        connection = self._check_valid()
        if timeout is None:
            timeout = connection.poll_timeout
        return connection._poller.poll(self._handle, timeout=timeout)

    def _completed_execution(self) -> QueryExecution:
        execution = self.poll()
        execution.raise_for_state()
        return execution

    def has_completed(self) -> bool:
        """Whether the execution has reached a terminal state, checked without waiting."""
        connection = self._check_valid()
        return connection._poller.status(self._handle).state.is_terminal

    def column_info(self) -> list[ColumnInfo]:
        """Names and Athena types of the result columns."""
        connection = self._check_valid()
        self._completed_execution()
        return connection._paginator.columns(self._handle)

    def statistics(self) -> dict[str, Any]:
        """Execution statistics as reported by the service."""
        return self._completed_execution().statistics

    def info(self) -> dict[str, Any]:
        self._check_valid()
        return {
            "query_execution_id": self._handle.execution_id,
            "next_token": self._handle.next_token,
            "statement": self._handle.statement,
            "work_group": self._handle.work_group,
        }

    def fetch_page(self, max_rows: int) -> Page:
        """Reads the next ``max_rows`` rows at most as raw string values."""
        connection = self._check_valid()
        self._completed_execution()
        with self._lock:
            page, self._handle = connection._paginator.fetch_page(
                self._handle, max_rows
            )
        return page

    def fetch_all(self) -> Any:
        """Downloads and decodes the whole result."""
        connection = self._check_valid()
        execution = self._completed_execution()
        columns = connection._paginator.columns(self._handle)
        return connection._bulk_fetcher.fetch_all(execution, columns)

    def fetch(self, n: int | float = -1) -> Any:
        """Fetches ``n`` rows as a table, all remaining rows when ``n`` is negative or infinite.

        Bounded fetches page through the results and carry on from the
        previous call, unbounded ones download the complete result object.
        """
        if n is None or n < 0 or n == math.inf:
            return self.fetch_all()
        connection = self._check_valid()
        if n == 0:
            return connection.decoder.from_rows([], self.column_info())
        page = self.fetch_page(int(n))
        return connection.decoder.from_rows(page.rows, page.columns)

    def close(self, raise_on_failure: bool = True) -> TeardownResult:
        """Stops the execution if still running and frees its remote resources.

        Result objects are deleted only when result caching is disabled, a
        cached execution is still needed by later submissions. Closing twice
        only warns.
        """
        if not self.is_valid():
            warnings.warn("Result already cleared", stacklevel=2)
            return TeardownResult(TeardownStatus.SUCCEEDED, noop=True)

        connection = self._connection

        def release() -> None:
            connection._paginator.forget(self._handle)
            self._connection = None

        result = connection._reclaimer.close(
            self._handle,
            delete_results=not connection.cache.enabled,
            on_released=release,
        )
        logger.debug(
            "closed cursor for %s: %s", self._handle.execution_id, result.status.name
        )
        if raise_on_failure:
            result.raise_for_status()
        return result

    def __enter__(self) -> Self:
        """Context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self.is_valid():
            self.close()

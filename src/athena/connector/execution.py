#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import dataclasses
import time
from datetime import datetime
from logging import getLogger
from typing import Any

from .cache import ResultCache, cache_key
from .constants import DEFAULT_LOG_MAX_QUERY_LENGTH, DEFAULT_POLL_INTERVAL, QueryState
from .errorcode import ER_EMPTY_STATEMENT
from .errors import (
    CredentialsExpiredError,
    ProgrammingError,
    QueryCancelledError,
    QueryFailedError,
    QueryTimeoutError,
)
from .remote_client import QueryExecutionClient
from .retry import RetryPolicy
from .s3_util import ResultLocation, parse_result_location
from .time_util import is_expired
from .util_text import format_query_for_log

logger = getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ExecutionHandle:
    """Client side reference to one remote execution.

    Handles are immutable, reading a page yields a new handle carrying the
    continuation token to resume from.
    """

    execution_id: str
    cache_key: str
    statement: str
    work_group: str | None = None
    next_token: str | None = None
    # set once a paginated read has consumed the whole result
    exhausted: bool = False

    @property
    def at_start(self) -> bool:
        """Whether no page has been read yet, the next page then starts with the header row."""
        return self.next_token is None and not self.exhausted

    def with_token(self, next_token: str | None) -> ExecutionHandle:
        return dataclasses.replace(self, next_token=next_token, exhausted=False)

    def advanced_to(self, next_token: str | None) -> ExecutionHandle:
        """The handle after a page read that ended on ``next_token``."""
        return dataclasses.replace(
            self, next_token=next_token, exhausted=next_token is None
        )


class QueryExecution:
    """Read-only view over the service's description of an execution."""

    def __init__(self, raw: dict[str, Any]) -> None:
        self.raw = raw

    @property
    def query_id(self) -> str | None:
        return self.raw.get("QueryExecutionId")

    @property
    def state(self) -> QueryState:
        return QueryState(self.raw["Status"]["State"])

    @property
    def state_change_reason(self) -> str | None:
        return self.raw["Status"].get("StateChangeReason")

    @property
    def output_location(self) -> str | None:
        return self.raw.get("ResultConfiguration", {}).get("OutputLocation")

    @property
    def result_location(self) -> ResultLocation:
        return parse_result_location(self.output_location)

    @property
    def statement_type(self) -> str | None:
        return self.raw.get("StatementType")

    @property
    def statistics(self) -> dict[str, Any]:
        return self.raw.get("Statistics", {})

    @property
    def data_scanned_in_bytes(self) -> int:
        return int(self.statistics.get("DataScannedInBytes", 0))

    def raise_for_state(self) -> None:
        """Raises if the execution ended without producing a result."""
        state = self.state
        if state == QueryState.FAILED:
            raise QueryFailedError(self.state_change_reason, query_id=self.query_id)
        if state == QueryState.CANCELLED:
            raise QueryCancelledError(self.state_change_reason, query_id=self.query_id)

    def __repr__(self) -> str:
        return f"QueryExecution(query_id={self.query_id!r}, state={self.state.name})"


class QuerySubmitter:
    """Starts executions, reusing a cached execution of the same statement when possible."""

    def __init__(
        self,
        client: QueryExecutionClient,
        retry: RetryPolicy,
        cache: ResultCache,
        work_group: str | None = None,
        s3_staging_dir: str | None = None,
        expiration: datetime | None = None,
        log_max_query_length: int = DEFAULT_LOG_MAX_QUERY_LENGTH,
    ) -> None:
        self._client = client
        self._retry = retry
        self._cache = cache
        self._work_group = work_group
        self._s3_staging_dir = s3_staging_dir
        self._expiration = expiration
        self._log_max_query_length = log_max_query_length

    def _format_query_for_log(self, query: str) -> str:
        return format_query_for_log(query, self._log_max_query_length)

    def submit(
        self, statement: str, s3_staging_dir: str | None = None
    ) -> ExecutionHandle:
        if not isinstance(statement, str) or not statement.strip():
            raise ProgrammingError(
                msg="Statement must be a non-empty string", errno=ER_EMPTY_STATEMENT
            )
        key = cache_key(statement, self._work_group)
        try:
            handle = self._cache.lookup(key)
            if handle is not None:
                logger.debug(
                    "reusing execution %s for query: [%s]",
                    handle.execution_id,
                    self._format_query_for_log(statement),
                )
                return handle

            logger.debug(
                "starting query: [%s]", self._format_query_for_log(statement)
            )
            execution_id = self._retry.invoke(
                self._client.start_query_execution,
                statement,
                s3_staging_dir or self._s3_staging_dir,
                self._work_group,
            )
            logger.debug("started execution %s", execution_id)
            handle = ExecutionHandle(
                execution_id=execution_id,
                cache_key=key,
                statement=statement,
                work_group=self._work_group,
            )
            # cached on start, an execution that later fails stays cached until evicted
            self._cache.insert(key, handle)
            return handle
        finally:
            self._check_expiration()

    def _check_expiration(self) -> None:
        if is_expired(self._expiration):
            raise CredentialsExpiredError(self._expiration)


class StatusPoller:
    """Blocks until an execution reaches a terminal state."""

    def __init__(
        self,
        client: QueryExecutionClient,
        retry: RetryPolicy,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._client = client
        self._retry = retry
        self._poll_interval = poll_interval

    def status(self, handle: ExecutionHandle) -> QueryExecution:
        """Fetches the current description of the execution once."""
        return QueryExecution(
            self._retry.invoke(self._client.get_query_execution, handle.execution_id)
        )

    def poll(
        self, handle: ExecutionHandle, timeout: float | None = None
    ) -> QueryExecution:
        """Returns the execution once it is terminal, whatever the terminal state.

        Raises ``QueryTimeoutError`` if ``timeout`` seconds pass first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            execution = self.status(handle)
            if execution.state.is_terminal:
                logger.debug(
                    "execution %s finished with state %s",
                    handle.execution_id,
                    execution.state.name,
                )
                return execution
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise QueryTimeoutError(timeout, query_id=handle.execution_id)
                time.sleep(min(self._poll_interval, remaining))
            else:
                time.sleep(self._poll_interval)

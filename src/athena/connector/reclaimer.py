#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import dataclasses
import warnings
from enum import Enum, unique
from logging import getLogger
from typing import Callable

from .constants import StatementType
from .errors import MalformedLocationError
from .execution import ExecutionHandle, QueryExecution, StatusPoller
from .remote_client import ObjectStore, QueryExecutionClient
from .retry import RetryPolicy
from .s3_util import manifest_key, metadata_key

logger = getLogger(__name__)


class ResultCleanupWarning(UserWarning):
    """A remote result artifact could not be removed."""


@unique
class TeardownStatus(Enum):
    SUCCEEDED = "succeeded"
    # the execution was released but some result objects were left behind
    PARTIAL = "partial"
    # the execution could not be inspected or stopped
    FAILED = "failed"


@dataclasses.dataclass
class TeardownResult:
    status: TeardownStatus
    # (object uri, error) for every result object that could not be deleted
    cleanup_failures: list[tuple[str, Exception]] = dataclasses.field(
        default_factory=list
    )
    error: Exception | None = None
    # True when the result had already been cleared and nothing was done
    noop: bool = False

    @property
    def ok(self) -> bool:
        return self.status != TeardownStatus.FAILED

    def raise_for_status(self) -> None:
        if self.error is not None:
            raise self.error


class ResourceReclaimer:
    """Stops an execution if it is still running and removes its result objects."""

    def __init__(
        self,
        client: QueryExecutionClient,
        object_store: ObjectStore,
        retry: RetryPolicy,
        poller: StatusPoller,
    ) -> None:
        self._client = client
        self._object_store = object_store
        self._retry = retry
        self._poller = poller

    def close(
        self,
        handle: ExecutionHandle,
        delete_results: bool = True,
        on_released: Callable[[], None] | None = None,
    ) -> TeardownResult:
        """Releases everything the execution behind ``handle`` holds.

        ``on_released`` runs once the execution is known to be stopped, before
        any result object is deleted. Result objects are kept when
        ``delete_results`` is False, a cached handle still needs them.
        """
        try:
            execution = self._poller.status(handle)
            if not execution.state.is_terminal:
                logger.debug("stopping execution %s", handle.execution_id)
                self._retry.invoke(
                    self._client.stop_query_execution, handle.execution_id
                )
        except Exception as e:
            logger.debug(
                "failed to release execution %s: %s", handle.execution_id, e
            )
            return TeardownResult(TeardownStatus.FAILED, error=e)

        if on_released is not None:
            on_released()

        if not delete_results:
            return TeardownResult(TeardownStatus.SUCCEEDED)

        failures = self._delete_results(execution)
        if failures:
            return TeardownResult(TeardownStatus.PARTIAL, cleanup_failures=failures)
        return TeardownResult(TeardownStatus.SUCCEEDED)

    def _delete_results(
        self, execution: QueryExecution
    ) -> list[tuple[str, Exception]]:
        try:
            location = execution.result_location
        except MalformedLocationError as e:
            self._warn(execution.output_location, e)
            return [(str(execution.output_location), e)]

        keys = [metadata_key(location), location.key]
        if execution.statement_type == StatementType.DDL.value:
            # CTAS statements leave a manifest of the files they wrote
            keys.append(manifest_key(location))

        failures = []
        for key in keys:
            uri = f"s3://{location.bucket}/{key}"
            try:
                self._retry.invoke(self._object_store.delete, location.bucket, key)
            except Exception as e:
                self._warn(uri, e)
                failures.append((uri, e))
        return failures

    @staticmethod
    def _warn(uri: str | None, e: Exception) -> None:
        logger.debug("failed to delete %s", uri, exc_info=True)
        warnings.warn(
            f"Failed to delete result object {uri}: {e}",
            ResultCleanupWarning,
            # attributed to the caller of AthenaCursor.close
            stacklevel=5,
        )

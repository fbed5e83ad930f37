#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

from abc import ABC, abstractmethod
from logging import getLogger
from typing import Any

logger = getLogger(__name__)


class QueryExecutionClient(ABC):
    """The four calls the cursor makes against the query service.

    Request and response payloads use the Athena API's shapes, so a boto3
    ``athena`` client can be wrapped without translation.
    """

    @abstractmethod
    def start_query_execution(
        self,
        statement: str,
        output_location: str | None,
        work_group: str | None,
    ) -> str:
        """Starts executing ``statement`` and returns the execution id."""

    @abstractmethod
    def get_query_execution(self, execution_id: str) -> dict[str, Any]:
        """Returns the ``QueryExecution`` structure of an execution."""

    @abstractmethod
    def stop_query_execution(self, execution_id: str) -> None:
        pass

    @abstractmethod
    def get_query_results(
        self,
        execution_id: str,
        max_results: int,
        next_token: str | None = None,
    ) -> dict[str, Any]:
        """Returns a page of results: ``ResultSet`` and, unless it is the last page, ``NextToken``."""


class ObjectStore(ABC):
    """Where the service materializes result objects."""

    @abstractmethod
    def download(self, bucket: str, key: str, local_path: str) -> None:
        pass

    @abstractmethod
    def delete(self, bucket: str, key: str) -> None:
        pass


class Boto3QueryExecutionClient(QueryExecutionClient):
    def __init__(self, client) -> None:
        self._client = client

    def start_query_execution(
        self,
        statement: str,
        output_location: str | None,
        work_group: str | None,
    ) -> str:
        request: dict[str, Any] = {"QueryString": statement}
        if work_group:
            request["WorkGroup"] = work_group
        if output_location:
            request["ResultConfiguration"] = {"OutputLocation": output_location}
        return self._client.start_query_execution(**request)["QueryExecutionId"]

    def get_query_execution(self, execution_id: str) -> dict[str, Any]:
        return self._client.get_query_execution(QueryExecutionId=execution_id)[
            "QueryExecution"
        ]

    def stop_query_execution(self, execution_id: str) -> None:
        self._client.stop_query_execution(QueryExecutionId=execution_id)

    def get_query_results(
        self,
        execution_id: str,
        max_results: int,
        next_token: str | None = None,
    ) -> dict[str, Any]:
        request: dict[str, Any] = {
            "QueryExecutionId": execution_id,
            "MaxResults": max_results,
        }
        if next_token is not None:
            request["NextToken"] = next_token
        return self._client.get_query_results(**request)


class Boto3ObjectStore(ObjectStore):
    def __init__(self, client) -> None:
        self._client = client

    def download(self, bucket: str, key: str, local_path: str) -> None:
        logger.debug("downloading s3://%s/%s to %s", bucket, key, local_path)
        self._client.download_file(bucket, key, local_path)

    def delete(self, bucket: str, key: str) -> None:
        logger.debug("deleting s3://%s/%s", bucket, key)
        self._client.delete_object(Bucket=bucket, Key=key)

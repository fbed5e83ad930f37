#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

"""Scripted stand-ins for the Athena API and S3 used by the unit tests."""

from __future__ import annotations

import itertools
from typing import Any, Sequence

from botocore.exceptions import ClientError

from athena.connector.remote_client import ObjectStore, QueryExecutionClient

DEFAULT_BUCKET = "my-bucket"


def client_error(code: str, operation: str = "GetQueryResults") -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": f"{code} raised by fake"}}, operation
    )


def to_csv(columns: Sequence[tuple[str, str]], rows: Sequence[tuple]) -> bytes:
    """Renders rows the way Athena writes CSV results: everything quoted, nulls empty."""

    def cell(value):
        return "" if value is None else '"' + str(value).replace('"', '""') + '"'

    lines = [",".join(cell(name) for name, _ in columns)]
    lines.extend(",".join(cell(v) for v in row) for row in rows)
    return ("\n".join(lines) + "\n").encode("utf-8")


class FakeExecution:
    def __init__(
        self,
        execution_id: str,
        statement: str,
        work_group: str | None,
        output_location: str,
        columns: Sequence[tuple[str, str]],
        rows: Sequence[tuple],
        states: Sequence[str],
        statement_type: str,
        reason: str | None,
        data_scanned: int,
    ) -> None:
        self.execution_id = execution_id
        self.statement = statement
        self.work_group = work_group
        self.output_location = output_location
        self.columns = list(columns)
        self.rows = list(rows)
        self.states = list(states)
        self.statement_type = statement_type
        self.reason = reason
        self.data_scanned = data_scanned
        self.stopped = False

    def next_state(self) -> str:
        if self.stopped:
            return "CANCELLED"
        if len(self.states) > 1:
            return self.states.pop(0)
        return self.states[0]

    def raw_rows(self) -> list[tuple]:
        # the header row comes first, as it does from Athena
        return [tuple(name for name, _ in self.columns)] + self.rows


class FakeAthena(QueryExecutionClient):
    """An in-memory Athena.

    Every started statement gets an execution with the configured columns,
    rows and state sequence. Continuation tokens are ``tok-<offset>``.
    """

    PAGE_LIMIT = 1000

    def __init__(
        self,
        columns: Sequence[tuple[str, str]] = (("_col0", "integer"),),
        rows: Sequence[tuple] = (("1",),),
        states: Sequence[str] = ("SUCCEEDED",),
        statement_type: str = "DML",
        reason: str | None = None,
        data_scanned: int = 1240,
        output_prefix: str = f"s3://{DEFAULT_BUCKET}/results/",
        output_suffix: str = ".csv",
    ) -> None:
        self.columns = columns
        self.rows = rows
        self.states = states
        self.statement_type = statement_type
        self.reason = reason
        self.data_scanned = data_scanned
        self.output_prefix = output_prefix
        self.output_suffix = output_suffix
        self.executions: dict[str, FakeExecution] = {}
        self.calls: list[tuple[str, tuple]] = []
        # queued exceptions raised by the next calls of the named operation
        self.failures: dict[str, list[BaseException]] = {}
        # when set, get_query_results keeps returning this token
        self.stuck_token: str | None = None
        self._ids = itertools.count(1)

    def fail_next(self, operation: str, *errors: BaseException) -> None:
        self.failures.setdefault(operation, []).extend(errors)

    def calls_to(self, operation: str) -> list[tuple]:
        return [args for name, args in self.calls if name == operation]

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        pending = self.failures.get(operation)
        if pending:
            raise pending.pop(0)

    def start_query_execution(
        self, statement: str, output_location: str | None, work_group: str | None
    ) -> str:
        self._record("start_query_execution", statement, output_location, work_group)
        execution_id = f"qid-{next(self._ids)}"
        prefix = output_location or self.output_prefix
        if not prefix.endswith("/"):
            prefix += "/"
        self.executions[execution_id] = FakeExecution(
            execution_id,
            statement,
            work_group,
            prefix + execution_id + self.output_suffix,
            self.columns,
            self.rows,
            self.states,
            self.statement_type,
            self.reason,
            self.data_scanned,
        )
        return execution_id

    def _execution(self, execution_id: str, operation: str) -> FakeExecution:
        try:
            return self.executions[execution_id]
        except KeyError:
            raise client_error("InvalidRequestException", operation) from None

    def get_query_execution(self, execution_id: str) -> dict[str, Any]:
        self._record("get_query_execution", execution_id)
        execution = self._execution(execution_id, "GetQueryExecution")
        status: dict[str, Any] = {"State": execution.next_state()}
        if status["State"] == "FAILED" and execution.reason:
            status["StateChangeReason"] = execution.reason
        return {
            "QueryExecutionId": execution.execution_id,
            "Query": execution.statement,
            "StatementType": execution.statement_type,
            "ResultConfiguration": {"OutputLocation": execution.output_location},
            "Status": status,
            "Statistics": {
                "DataScannedInBytes": execution.data_scanned,
                "EngineExecutionTimeInMillis": 120,
            },
            "WorkGroup": execution.work_group,
        }

    def stop_query_execution(self, execution_id: str) -> None:
        self._record("stop_query_execution", execution_id)
        self._execution(execution_id, "StopQueryExecution").stopped = True

    def get_query_results(
        self, execution_id: str, max_results: int, next_token: str | None = None
    ) -> dict[str, Any]:
        self._record("get_query_results", execution_id, max_results, next_token)
        if max_results > self.PAGE_LIMIT:
            raise client_error("InvalidRequestException")
        execution = self._execution(execution_id, "GetQueryResults")
        raw = execution.raw_rows()
        offset = int(next_token.split("-")[1]) if next_token else 0
        chunk = raw[offset : offset + max_results]
        response: dict[str, Any] = {
            "ResultSet": {
                "Rows": [
                    {"Data": [{} if v is None else {"VarCharValue": v} for v in row]}
                    for row in chunk
                ],
                "ResultSetMetadata": {
                    "ColumnInfo": [
                        {"Name": name, "Label": name, "Type": type_}
                        for name, type_ in execution.columns
                    ]
                },
            }
        }
        if self.stuck_token is not None:
            response["NextToken"] = self.stuck_token
        elif offset + max_results < len(raw):
            response["NextToken"] = f"tok-{offset + max_results}"
        return response


class FakeObjectStore(ObjectStore):
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.downloads: list[tuple[str, str, str]] = []
        self.deletes: list[tuple[str, str]] = []
        # keys whose deletion raises the mapped error
        self.delete_errors: dict[str, BaseException] = {}

    def put(self, uri: str, body: bytes) -> None:
        bucket, key = uri[len("s3://") :].split("/", 1)
        self.objects[(bucket, key)] = body

    def download(self, bucket: str, key: str, local_path: str) -> None:
        self.downloads.append((bucket, key, local_path))
        try:
            body = self.objects[(bucket, key)]
        except KeyError:
            raise client_error("404", "HeadObject") from None
        with open(local_path, "wb") as f:
            f.write(body)

    def delete(self, bucket: str, key: str) -> None:
        self.deletes.append((bucket, key))
        if key in self.delete_errors:
            raise self.delete_errors[key]
        self.objects.pop((bucket, key), None)

    def deleted_keys(self) -> list[str]:
        return [key for _, key in self.deletes]

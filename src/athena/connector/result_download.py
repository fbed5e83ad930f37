#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import os
import tempfile
from logging import getLogger
from typing import Any, Sequence

from .arrow_decoder import RowDecoder
from .execution import QueryExecution
from .remote_client import ObjectStore
from .result_set import ColumnInfo
from .retry import RetryPolicy
from .s3_util import row_format
from .util_text import format_data_scanned

logger = getLogger(__name__)


class BulkFetcher:
    """Downloads a complete result object and hands it to the row decoder."""

    def __init__(
        self,
        object_store: ObjectStore,
        retry: RetryPolicy,
        decoder: RowDecoder,
    ) -> None:
        self._object_store = object_store
        self._retry = retry
        self._decoder = decoder

    def fetch_all(
        self, execution: QueryExecution, columns: Sequence[ColumnInfo]
    ) -> Any:
        logger.info(
            "(Data scanned: %s)", format_data_scanned(execution.data_scanned_in_bytes)
        )
        location = execution.result_location
        with tempfile.TemporaryDirectory() as tmp_dir:
            local_path = os.path.join(tmp_dir, os.path.basename(location.key))
            self._retry.invoke(
                self._object_store.download, location.bucket, location.key, local_path
            )
            return self._decoder.decode(local_path, columns, row_format(location))

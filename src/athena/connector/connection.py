#!/usr/bin/env python
#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import os
import warnings
from datetime import datetime
from difflib import get_close_matches
from logging import getLogger
from types import TracebackType
from typing import Any

import boto3
from typing_extensions import Self

from .arrow_decoder import RowDecoder, decoder_for
from .cache import CacheConfig, ResultCache
from .constants import (
    DEFAULT_LOG_MAX_QUERY_LENGTH,
    DEFAULT_MAX_RETRY_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_WORK_GROUP,
)
from .cursor import AthenaCursor
from .errorcode import ER_INVALID_VALUE
from .errors import InterfaceError, ProgrammingError
from .execution import QuerySubmitter, StatusPoller
from .reclaimer import ResourceReclaimer
from .remote_client import (
    Boto3ObjectStore,
    Boto3QueryExecutionClient,
    ObjectStore,
    QueryExecutionClient,
)
from .result_download import BulkFetcher
from .result_set import PaginatedFetcher
from .retry import RetryPolicy
from .time_util import BackoffPolicy

logger = getLogger(__name__)

DEFAULT_CONFIGURATION: dict[str, tuple[Any, type | tuple[type, ...]]] = {
    "region_name": (None, (type(None), str)),
    "profile_name": (None, (type(None), str)),
    "work_group": (DEFAULT_WORK_GROUP, str),
    "s3_staging_dir": (None, (type(None), str)),  # default output location
    "expiration": (None, (type(None), datetime)),  # credentials expiration
    "cache_size": (0, int),  # 0 disables result reuse
    "result_cache": (None, (type(None), ResultCache)),  # share one cache across connections
    "max_retry_attempts": (DEFAULT_MAX_RETRY_ATTEMPTS, int),
    "retry_quiet": (False, bool),
    "backoff_policy": (None, (type(None), BackoffPolicy)),
    "poll_interval": (DEFAULT_POLL_INTERVAL, (int, float)),
    "poll_timeout": (None, (type(None), int, float)),  # infinite by default
    "file_parser": ("arrow", str),  # "arrow" or "pandas"
    "log_max_query_length": (DEFAULT_LOG_MAX_QUERY_LENGTH, int),
    "athena_client": (None, (type(None), QueryExecutionClient)),
    "object_store": (None, (type(None), ObjectStore)),
    "boto3_session": (None, object),
}

# connection parameters read from the environment when not passed explicitly
ENVIRONMENT_CONFIGURATION = {
    "region_name": ("AWS_REGION", "AWS_DEFAULT_REGION"),
    "work_group": ("AWS_ATHENA_WORK_GROUP",),
    "s3_staging_dir": ("AWS_ATHENA_S3_STAGING_DIR",),
}


class AthenaConnection:
    """Implementation of the connection object for Athena.

    Holds the remote clients and the configuration every cursor created from
    it shares. Use ``connect()`` or ``AthenaConnection(**kwargs)``.

    Attributes:
        work_group: Work group statements are executed in and cached under.
        s3_staging_dir: Default S3 location results are written to.
        cache: The result cache submissions consult, disabled unless ``cache_size`` > 0.
        expiration: Moment the connection's credentials stop being valid, if known.
    """

    def __init__(self, validate_default_parameters: bool = True, **kwargs) -> None:
        for name, (value, _) in DEFAULT_CONFIGURATION.items():
            setattr(self, f"_{name}", value)
        self._validate_default_parameters = validate_default_parameters
        self._closed = False

        self.__config(**kwargs)
        self.__open_connection()

    def __config(self, **kwargs) -> None:
        """Sets up parameters in the connection object."""
        logger.debug("__config")
        for name, env_names in ENVIRONMENT_CONFIGURATION.items():
            if name in kwargs:
                continue
            for env_name in env_names:
                if os.environ.get(env_name):
                    kwargs[name] = os.environ[env_name]
                    break

        for name, value in kwargs.items():
            if self._validate_default_parameters:
                if name not in DEFAULT_CONFIGURATION.keys():
                    close_matches = get_close_matches(
                        name, DEFAULT_CONFIGURATION.keys(), n=1, cutoff=0.8
                    )
                    guess = close_matches[0] if len(close_matches) > 0 else None
                    warnings.warn(
                        "'{}' is an unknown connection parameter{}".format(
                            name, f", did you mean '{guess}'?" if guess else ""
                        ),
                        # Raise warning from where class was initiated
                        stacklevel=4,
                    )
                elif not isinstance(value, DEFAULT_CONFIGURATION[name][1]):
                    accepted_types = DEFAULT_CONFIGURATION[name][1]
                    warnings.warn(
                        "'{}' connection parameter should be of type '{}', but is a '{}'".format(
                            name,
                            (
                                str(tuple(e.__name__ for e in accepted_types)).replace(
                                    "'", ""
                                )
                                if isinstance(accepted_types, tuple)
                                else accepted_types.__name__
                            ),
                            type(value).__name__,
                        ),
                        # Raise warning from where class was initiated
                        stacklevel=4,
                    )
            setattr(self, "_" + name, value)

        if self._cache_size < 0:
            raise ProgrammingError(
                msg=f"cache_size must not be negative: {self._cache_size}",
                errno=ER_INVALID_VALUE,
            )
        if self._max_retry_attempts < 1:
            raise ProgrammingError(
                msg=f"max_retry_attempts must be at least 1: {self._max_retry_attempts}",
                errno=ER_INVALID_VALUE,
            )

        logger.info(
            "Athena Connector for Python, region: %s, work group: %s, cache size: %s",
            self._region_name,
            self._work_group,
            self._cache_size,
        )

    def __open_connection(self) -> None:
        if self._athena_client is None or self._object_store is None:
            session = self._boto3_session or boto3.Session(
                profile_name=self._profile_name, region_name=self._region_name
            )
            if self._athena_client is None:
                self._athena_client = Boto3QueryExecutionClient(
                    session.client("athena")
                )
            if self._object_store is None:
                self._object_store = Boto3ObjectStore(session.client("s3"))

        self._cache = (
            self._result_cache
            if self._result_cache is not None
            else ResultCache(CacheConfig(capacity=self._cache_size))
        )
        self._retry = RetryPolicy(
            max_attempts=self._max_retry_attempts,
            backoff_policy=self._backoff_policy,
            quiet=self._retry_quiet,
        )
        self._decoder = decoder_for(self._file_parser)
        self._submitter = QuerySubmitter(
            self._athena_client,
            self._retry,
            self._cache,
            work_group=self._work_group,
            s3_staging_dir=self._s3_staging_dir,
            expiration=self._expiration,
            log_max_query_length=self._log_max_query_length,
        )
        self._poller = StatusPoller(
            self._athena_client, self._retry, poll_interval=self._poll_interval
        )
        self._paginator = PaginatedFetcher(self._athena_client, self._retry)
        self._bulk_fetcher = BulkFetcher(self._object_store, self._retry, self._decoder)
        self._reclaimer = ResourceReclaimer(
            self._athena_client, self._object_store, self._retry, self._poller
        )

    @property
    def work_group(self) -> str:
        return self._work_group

    @property
    def s3_staging_dir(self) -> str | None:
        return self._s3_staging_dir

    @property
    def expiration(self) -> datetime | None:
        return self._expiration

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def poll_timeout(self) -> float | None:
        return self._poll_timeout

    @property
    def decoder(self) -> RowDecoder:
        return self._decoder

    @property
    def log_max_query_length(self) -> int:
        return self._log_max_query_length

    def is_closed(self) -> bool:
        return self._closed

    def cursor(
        self, statement: str, s3_staging_dir: str | None = None
    ) -> AthenaCursor:
        """Submits ``statement`` and returns the cursor over its result."""
        logger.debug("cursor")
        if self.is_closed():
            raise InterfaceError(msg="Connection is closed")
        handle = self._submitter.submit(statement, s3_staging_dir=s3_staging_dir)
        return AthenaCursor(self, handle)

    execute = cursor

    def close(self) -> None:
        """Closes the connection, cursors created from it become unusable."""
        logger.debug("closed")
        self._closed = True

    def __enter__(self) -> Self:
        """Context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

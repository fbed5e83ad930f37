#!/usr/bin/env python
#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from logging import getLogger
from typing import Any

logger = getLogger(__name__)

INITIAL_TIMEOUT_SLEEP_TIME = 1


def is_expired(expiration: datetime | None) -> bool:
    """Whether an absolute deadline has passed. Naive datetimes are taken as UTC."""
    if expiration is None:
        return False
    if expiration.tzinfo is None:
        expiration = expiration.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc) >= expiration


class BackoffPolicy(ABC):
    DEFAULT_BACKOFF_BASE = 1
    DEFAULT_BACKOFF_CAP = 16
    DEFAULT_BACKOFF_FACTOR = 2
    DEFAULT_ENABLE_JITTER = True

    def __init__(
        self,
        base: int = DEFAULT_BACKOFF_BASE,
        cap: int = DEFAULT_BACKOFF_CAP,
        factor: int = DEFAULT_BACKOFF_FACTOR,
        enable_jitter: bool = DEFAULT_ENABLE_JITTER,
    ):
        """Initialize a Backoff
        base: Integer constant term used in backoff computations. Usage depends on implementation.
        factor: Integer constant term used in backoff computations. Usage depends on implementation.
        cap: Maximum backoff time in integer seconds.
        enable_jitter: Boolean specifying whether to enable randomized jitter on computed backoff times.
        """
        self._base = base
        self._cap = cap
        self._factor = factor
        self._enable_jitter = enable_jitter

    @abstractmethod
    def next_sleep(self, cnt: Any, sleep: int) -> int:
        """Implement this method if using a custom Backoff"""
        pass


class LinearBackoff(BackoffPolicy):
    """Standard linear backoff"""

    def next_sleep(self, cnt: int, _: Any) -> int:
        t = min(self._cap, self._base + self._factor * cnt)
        return random.randint(0, t) if self._enable_jitter else t


class ExponentialBackoff(BackoffPolicy):
    """Standard exponential backoff, full jitter when enabled.

    See https://www.awsarchitectureblog.com/2015/03/backoff.html
    """

    def next_sleep(self, cnt: int, _: Any) -> int:
        t = min(self._cap, self._base * (self._factor**cnt))
        return random.randint(0, t) if self._enable_jitter else t


class TimeoutBackoffCtx:
    """Base context for handling attempt ceilings and backoffs on retries"""

    DEFAULT_BACKOFF_POLICY = ExponentialBackoff

    def __init__(
        self,
        max_retry_attempts: int | None = None,
        backoff_policy: BackoffPolicy | None = None,
    ) -> None:
        self._backoff_policy = (
            backoff_policy
            if backoff_policy is not None
            else TimeoutBackoffCtx.DEFAULT_BACKOFF_POLICY()
        )

        self._current_retry_count = 0
        self._current_sleep_time = INITIAL_TIMEOUT_SLEEP_TIME

        self._max_retry_attempts = max_retry_attempts

    @property
    def current_retry_count(self) -> int:
        return int(self._current_retry_count)

    @property
    def current_sleep_time(self) -> int:
        return int(self._current_sleep_time)

    def should_retry(self) -> bool:
        """Decides whether another attempt is allowed."""
        if self._max_retry_attempts is None:
            return True
        return self._current_retry_count < self._max_retry_attempts

    def increment(self) -> None:
        """Updates retry count and sleep time for another retry"""
        self._current_retry_count += 1
        self._current_sleep_time = self._backoff_policy.next_sleep(
            self._current_retry_count, self._current_sleep_time
        )
        logger.debug(f"Update retry count to {self._current_retry_count}")
        logger.debug(f"Update sleep time to {self._current_sleep_time} seconds")

#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import dataclasses
import hashlib
from collections import OrderedDict
from threading import Lock
from typing import TYPE_CHECKING

from .constants import UTF8

if TYPE_CHECKING:  # pragma: no cover
    from .execution import ExecutionHandle


def cache_key(statement: str, work_group: str | None) -> str:
    """Derives the key a statement is cached under.

    The work group is part of the digest so that the same text run in two
    work groups never shares an execution.
    """
    digest = hashlib.sha256()
    digest.update((work_group or "").encode(UTF8))
    digest.update(b"\x00")
    digest.update(statement.encode(UTF8))
    return digest.hexdigest()


@dataclasses.dataclass(frozen=True)
class CacheConfig:
    """How many completed executions to remember, 0 disables caching."""

    capacity: int = 0

    def __post_init__(self) -> None:
        if self.capacity < 0:
            raise ValueError(f"cache capacity must not be negative: {self.capacity}")

    @property
    def enabled(self) -> bool:
        return self.capacity > 0


class ResultCache:
    """A size bounded, insertion ordered map from cache key to execution handle.

    The oldest inserted entry is evicted first once the configured capacity is
    exceeded. Entries are snapshots: a handle returned by ``lookup`` never
    carries a continuation token, so each cursor reading from it starts at the
    beginning of the result.

    ``lookup`` and ``insert`` hold the same lock, a key is therefore present at
    most once even when the same statement is submitted from several threads.
    """

    def __init__(self, config: CacheConfig | None = None) -> None:
        self._config = config if config is not None else CacheConfig()
        self._cache: OrderedDict[str, ExecutionHandle] = OrderedDict()
        self._lock = Lock()
        self._reset_telemetry()

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    @property
    def capacity(self) -> int:
        return self._config.capacity

    def lookup(self, key: str) -> ExecutionHandle | None:
        if not self.enabled:
            return None
        with self._lock:
            handle = self._cache.get(key)
            if handle is None:
                self.telemetry["miss"] += 1
            else:
                self.telemetry["hit"] += 1
            return handle

    def insert(self, key: str, handle: ExecutionHandle) -> None:
        if not self.enabled:
            return
        snapshot = handle.with_token(None)
        with self._lock:
            # re-inserting moves the key to the newest position
            self._cache.pop(key, None)
            self._cache[key] = snapshot
            while len(self._cache) > self._config.capacity:
                self._cache.popitem(last=False)
                self.telemetry["eviction"] += 1
            self.telemetry["size"] = len(self._cache)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._cache.keys())

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def _reset_telemetry(self) -> None:
        self.telemetry = {
            "hit": 0,
            "miss": 0,
            "eviction": 0,
            "size": 0,
        }

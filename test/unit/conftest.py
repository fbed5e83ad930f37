#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import time

import pytest
from mock_athena import FakeAthena, FakeObjectStore

from athena.connector.connection import AthenaConnection
from athena.connector.retry import RetryPolicy
from athena.connector.time_util import ExponentialBackoff


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Retries and polling never wait in unit tests, sleeps are recorded instead."""
    sleeps = []
    monkeypatch.setattr(time, "sleep", sleeps.append)
    return sleeps


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (
        "AWS_REGION",
        "AWS_DEFAULT_REGION",
        "AWS_ATHENA_WORK_GROUP",
        "AWS_ATHENA_S3_STAGING_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_athena() -> FakeAthena:
    return FakeAthena()


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def retry() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, backoff_policy=ExponentialBackoff(enable_jitter=False))


@pytest.fixture
def make_connection(fake_athena, object_store):
    def _make(**kwargs) -> AthenaConnection:
        config = {
            "athena_client": fake_athena,
            "object_store": object_store,
            "work_group": "primary",
            "s3_staging_dir": "s3://my-bucket/results/",
            "poll_interval": 0,
            "backoff_policy": ExponentialBackoff(enable_jitter=False),
        }
        config.update(kwargs)
        return AthenaConnection(**config)

    return _make

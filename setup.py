#!/usr/bin/env python
#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

import os

from setuptools import find_namespace_packages, setup

CONNECTOR_SRC_DIR = os.path.join("src", "athena", "connector")

VERSION = (1, 0, 0, None)  # Default
with open(os.path.join(CONNECTOR_SRC_DIR, "version.py"), encoding="utf-8") as f:
    exec(f.read())
version = ".".join([str(v) for v in VERSION if v is not None])

setup(
    name="athena-connector-python",
    version=version,
    description="Athena Connector for Python",
    license="Apache-2.0",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_namespace_packages("src", include=["athena.*"]),
    install_requires=[
        "boto3>=1.26",
        "botocore>=1.29",
        "pyarrow>=10.0.1",
        "typing_extensions>=4.3,<5",
    ],
    extras_require={
        "pandas": [
            "pandas>=1.0.0",
        ],
        "development": [
            "pytest",
            "pytest-cov",
        ],
    },
)

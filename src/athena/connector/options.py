#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import importlib
from logging import getLogger
from types import ModuleType
from typing import Union

from .errors import MissingDependencyError

logger = getLogger(__name__)

"""This module helps to manage optional dependencies.

It implements MissingOptionalDependency as a base class. If a module is unavailable an instance of this will be
returned. The point of these classes is that if someone tries to use pandas code then by importing pandas from this
module if they did pandas.xxx then that would raise a MissingDependencyError.
"""


class MissingOptionalDependency:
    """A class to replace missing dependencies.

    The only thing this class is supposed to do is raise a MissingDependencyError when __getattr__ is called.
    This will be triggered whenever module.member is going to be called.
    """

    _dep_name = "not set"

    def __getattr__(self, item):
        raise MissingDependencyError(self._dep_name)


class MissingPandas(MissingOptionalDependency):
    """The class is specifically for pandas optional dependency."""

    _dep_name = "pandas"


ModuleLikeObject = Union[ModuleType, MissingOptionalDependency]


def _import_or_missing_pandas_option() -> tuple[ModuleLikeObject, bool]:
    """This function tries importing pandas.

    If available it returns the pandas package with a flag of whether it was imported.
    """
    try:
        pandas = importlib.import_module("pandas")
        return pandas, True
    except ImportError:
        logger.debug("pandas is not installed, DataFrame results are unavailable")
        return MissingPandas(), False


# Create actual constants to be imported from this file
pandas, installed_pandas = _import_or_missing_pandas_option()

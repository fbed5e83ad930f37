#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

"""Turns downloaded result objects and result pages into tables."""

from __future__ import annotations

from abc import ABC, abstractmethod
from logging import getLogger
from typing import TYPE_CHECKING, Any, Sequence

import pyarrow
from pyarrow import csv as pyarrow_csv

from .constants import UTF8, RowFormat
from .errorcode import ER_INVALID_VALUE
from .errors import ProgrammingError
from .options import installed_pandas, pandas

if TYPE_CHECKING:  # pragma: no cover
    from .result_set import ColumnInfo

logger = getLogger(__name__)

LINES_DELIMITER = "\t"

ATHENA_TO_ARROW_TYPES = {
    "boolean": pyarrow.bool_(),
    "tinyint": pyarrow.int8(),
    "smallint": pyarrow.int16(),
    "integer": pyarrow.int32(),
    "int": pyarrow.int32(),
    "bigint": pyarrow.int64(),
    "float": pyarrow.float32(),
    "real": pyarrow.float32(),
    "double": pyarrow.float64(),
    "decimal": pyarrow.float64(),
    "date": pyarrow.date32(),
    "timestamp": pyarrow.timestamp("ms"),
}


def arrow_type(athena_type: str) -> pyarrow.DataType:
    """Arrow type for an Athena column type, anything unknown (varchar, json, arrays, ...) is kept as a string."""
    return ATHENA_TO_ARROW_TYPES.get(athena_type.lower(), pyarrow.string())


def arrow_schema(columns: Sequence[ColumnInfo]) -> pyarrow.Schema:
    return pyarrow.schema([(c.name, arrow_type(c.type)) for c in columns])


class RowDecoder(ABC):
    """Builds the caller facing table from result data."""

    @abstractmethod
    def decode(
        self, path: str, columns: Sequence[ColumnInfo], row_format: RowFormat
    ) -> Any:
        """Decodes a downloaded result object."""

    @abstractmethod
    def from_rows(self, rows: Sequence[tuple], columns: Sequence[ColumnInfo]) -> Any:
        """Builds a table from rows of raw string values."""


class ArrowRowDecoder(RowDecoder):
    """Decodes into ``pyarrow.Table`` objects."""

    def decode(
        self, path: str, columns: Sequence[ColumnInfo], row_format: RowFormat
    ) -> pyarrow.Table:
        if row_format == RowFormat.CSV:
            return self._read_csv(path, columns)
        return self._read_lines(path, columns)

    def from_rows(
        self, rows: Sequence[tuple], columns: Sequence[ColumnInfo]
    ) -> pyarrow.Table:
        arrays = []
        for i, column in enumerate(columns):
            values = [row[i] if i < len(row) else None for row in rows]
            arrays.append(
                pyarrow.array(values, type=pyarrow.string()).cast(arrow_type(column.type))
            )
        return pyarrow.Table.from_arrays(arrays, schema=arrow_schema(columns))

    def _read_csv(self, path: str, columns: Sequence[ColumnInfo]) -> pyarrow.Table:
        logger.debug("reading csv result %s", path)
        names = [c.name for c in columns]
        return pyarrow_csv.read_csv(
            path,
            read_options=pyarrow_csv.ReadOptions(
                column_names=names, skip_rows=1, encoding=UTF8
            ),
            convert_options=pyarrow_csv.ConvertOptions(
                column_types={c.name: arrow_type(c.type) for c in columns},
                null_values=[""],
                strings_can_be_null=True,
                # Athena quotes every value and leaves nulls unquoted
                quoted_strings_can_be_null=False,
                include_columns=names,
            ),
        )

    def _read_lines(self, path: str, columns: Sequence[ColumnInfo]) -> pyarrow.Table:
        logger.debug("reading line delimited result %s", path)
        with open(path, encoding=UTF8) as f:
            rows = [
                tuple(field.strip() for field in line.rstrip("\n").split(LINES_DELIMITER))
                for line in f
                if line.strip()
            ]
        return self.from_rows(rows, columns)


class PandasRowDecoder(ArrowRowDecoder):
    """Decodes into ``pandas.DataFrame`` objects, going through Arrow."""

    def decode(self, path, columns, row_format):
        return super().decode(path, columns, row_format).to_pandas()

    def from_rows(self, rows, columns):
        return super().from_rows(rows, columns).to_pandas()


def decoder_for(file_parser: str) -> RowDecoder:
    """The decoder selected by the ``file_parser`` connection option."""
    if file_parser == "arrow":
        return ArrowRowDecoder()
    if file_parser == "pandas":
        if not installed_pandas:
            # raises MissingDependencyError
            pandas.DataFrame
        return PandasRowDecoder()
    raise ProgrammingError(
        msg=f"Unknown file_parser {file_parser!r}, expected 'arrow' or 'pandas'",
        errno=ER_INVALID_VALUE,
    )

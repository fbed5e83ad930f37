#
# Copyright (c) 2012-2023 Snowflake Computing Inc. All rights reserved.
#

from __future__ import annotations

import pyarrow
import pytest
from mock_athena import to_csv

from athena.connector import arrow_decoder
from athena.connector.arrow_decoder import (
    ArrowRowDecoder,
    PandasRowDecoder,
    arrow_schema,
    arrow_type,
    decoder_for,
)
from athena.connector.constants import RowFormat
from athena.connector.errors import MissingDependencyError, ProgrammingError
from athena.connector.options import MissingPandas
from athena.connector.result_set import ColumnInfo

COLUMNS = [
    ColumnInfo("id", "integer"),
    ColumnInfo("name", "varchar"),
    ColumnInfo("price", "double"),
]


@pytest.mark.parametrize(
    "athena_type, expected",
    [
        ("integer", pyarrow.int32()),
        ("BIGINT", pyarrow.int64()),
        ("double", pyarrow.float64()),
        ("decimal", pyarrow.float64()),
        ("date", pyarrow.date32()),
        ("varchar", pyarrow.string()),
        ("array", pyarrow.string()),
        ("json", pyarrow.string()),
    ],
)
def test_arrow_type(athena_type, expected):
    assert arrow_type(athena_type) == expected


def test_arrow_schema():
    schema = arrow_schema(COLUMNS)
    assert schema.names == ["id", "name", "price"]
    assert schema.field("price").type == pyarrow.float64()


class TestArrowRowDecoder:
    def test_decode_csv(self, tmp_path):
        path = tmp_path / "qid-1.csv"
        path.write_bytes(
            to_csv(
                [(c.name, c.type) for c in COLUMNS],
                [("1", "apple", "1.5"), ("2", "", None), (None, "pear, ripe", "3")],
            )
        )
        table = ArrowRowDecoder().decode(str(path), COLUMNS, RowFormat.CSV)
        assert table.schema == arrow_schema(COLUMNS)
        assert table.num_rows == 3
        assert table.column("id").to_pylist() == [1, 2, None]
        # an empty quoted value stays an empty string, an unquoted one is null
        assert table.column("name").to_pylist() == ["apple", "", "pear, ripe"]
        assert table.column("price").to_pylist() == [1.5, None, 3.0]

    def test_decode_csv_header_only(self, tmp_path):
        path = tmp_path / "qid-1.csv"
        path.write_bytes(to_csv([(c.name, c.type) for c in COLUMNS], []))
        table = ArrowRowDecoder().decode(str(path), COLUMNS, RowFormat.CSV)
        assert table.num_rows == 0
        assert table.schema == arrow_schema(COLUMNS)

    def test_decode_lines(self, tmp_path):
        path = tmp_path / "qid-1.txt"
        path.write_text("1\tapple \t1.5\n2\tpear\t2\n\n")
        table = ArrowRowDecoder().decode(str(path), COLUMNS, RowFormat.LINES)
        assert table.to_pydict() == {
            "id": [1, 2],
            "name": ["apple", "pear"],
            "price": [1.5, 2.0],
        }

    def test_from_rows_casts_to_column_types(self):
        table = ArrowRowDecoder().from_rows([("7", "x", None), ("8", None, "0.25")], COLUMNS)
        assert table.schema == arrow_schema(COLUMNS)
        assert table.to_pydict() == {
            "id": [7, 8],
            "name": ["x", None],
            "price": [None, 0.25],
        }

    def test_from_rows_empty(self):
        table = ArrowRowDecoder().from_rows([], COLUMNS)
        assert table.num_rows == 0
        assert table.column_names == ["id", "name", "price"]


class TestDecoderFor:
    def test_arrow(self):
        assert type(decoder_for("arrow")) is ArrowRowDecoder

    def test_pandas(self):
        pytest.importorskip("pandas")
        decoder = decoder_for("pandas")
        assert isinstance(decoder, PandasRowDecoder)
        df = decoder.from_rows([("1", "a", "2.5")], COLUMNS)
        assert list(df.columns) == ["id", "name", "price"]
        assert df["price"].tolist() == [2.5]

    def test_pandas_not_installed(self, monkeypatch):
        monkeypatch.setattr(arrow_decoder, "installed_pandas", False)
        monkeypatch.setattr(arrow_decoder, "pandas", MissingPandas())
        with pytest.raises(MissingDependencyError, match="pandas"):
            decoder_for("pandas")

    def test_unknown(self):
        with pytest.raises(ProgrammingError, match="file_parser"):
            decoder_for("polars")

"""Tests for result rows and the driver base class."""

import datetime
from typing import Any, Callable

import pytest

from sqlrepo.driver import GeneratedKeys, ResultColumns, ResultRow
from sqlrepo.exceptions import MappingError, MappingErrorReason


def test_row_lookup_by_name_and_position() -> None:
    row = ResultRow(ResultColumns(["CONF_KEY", "conf_value"]), ["k", "v"])

    assert row["CONF_KEY"] == "k"
    assert row["conf_key"] == "k"
    assert row["CONF_VALUE"] == "v"
    assert row[1] == "v"
    assert len(row) == 2
    assert list(row) == ["k", "v"]
    assert row.as_dict() == {"CONF_KEY": "k", "conf_value": "v"}


def test_exact_name_wins_over_case_insensitive_match() -> None:
    row = ResultRow(ResultColumns(["id", "ID"]), [1, 2])

    assert row["id"] == 1
    assert row["ID"] == 2
    assert row["Id"] == 1


def test_missing_column_is_a_mapping_error() -> None:
    row = ResultRow(ResultColumns(["A"]), [1])

    with pytest.raises(MappingError) as exc_info:
        row["B"]
    assert exc_info.value.reason is MappingErrorReason.MISSING_COLUMN
    with pytest.raises(MappingError):
        row[3]


def test_generated_keys_lookup() -> None:
    keys = GeneratedKeys(affected_rows=1, keys={"ID": 5})

    assert keys.get("ID") == 5
    assert keys.get("id") == 5
    assert keys.get("other") is None


def test_prepare_driver_parameters(make_driver: Callable[..., Any]) -> None:
    driver = make_driver()
    driver.type_coercion_map = {bool: int, datetime.date: lambda value: value.isoformat()}

    prepared = driver.prepare_driver_parameters(
        {"flag": True, "day": datetime.datetime(2015, 1, 2, 3, 4), "none": None, "text": "x"}
    )

    assert prepared == {"flag": 1, "day": "2015-01-02T03:04:00", "none": None, "text": "x"}


def test_select_maps_rows_in_order(make_driver: Callable[..., Any]) -> None:
    driver = make_driver(columns=["N"], rows=[(1,), (2,), (3,)])

    class IndexMapper:
        def map_row(self, row: ResultRow, row_number: int) -> "tuple[int, Any]":
            return row_number, row["n"]

    assert driver.select("SELECT N FROM T", {}, IndexMapper()) == [(0, 1), (1, 2), (2, 3)]

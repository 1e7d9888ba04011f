from __future__ import annotations

import json

import pytest

from nse_tracker.data_feed.stocks import NOT_AVAILABLE, StockRecord, parse_stock_response, parse_stock_snapshot


def test_parse_should_map_documented_example() -> None:
    body = json.dumps(
        {
            "data": [
                {
                    "symbol": "SBIN",
                    "lastPrice": 812.5,
                    "meta": {"industry": "Banks", "companyName": "State Bank of India"},
                }
            ]
        }
    )
    records = parse_stock_response(body)
    assert records == [
        StockRecord(
            symbol="SBIN",
            price=812.5,
            industry="Banks",
            company_name="State Bank of India",
        )
    ]
    assert records[0].day_high == 0.0


def test_parse_should_map_every_numeric_field(snapshot_body) -> None:
    body = snapshot_body(
        {
            "symbol": "RELIANCE",
            "lastPrice": 2950.1,
            "dayHigh": 2975,
            "dayLow": 2921.35,
            "yearHigh": 3024.9,
            "yearLow": 2220.3,
            "nearWKH": 2.47,
            "nearWKL": -32.87,
            "pChange": 0.83,
            "perChange30d": 4.12,
            "perChange365d": 21.5,
            "ffmc": 1023456789.5,
            "meta": {"industry": "Refineries", "companyName": "Reliance Industries Limited"},
        }
    )
    (record,) = parse_stock_response(body)
    assert record.price == 2950.1
    assert record.day_high == 2975.0
    assert record.day_low == 2921.35
    assert record.year_high == 3024.9
    assert record.year_low == 2220.3
    assert record.week_high == 2.47
    assert record.week_low == -32.87
    assert record.p_change == 0.83
    assert record.per_change_30d == 4.12
    assert record.per_change_365d == 21.5
    assert record.ffmc == 1023456789.5
    assert record.industry == "Refineries"


def test_parse_should_default_missing_fields(snapshot_body) -> None:
    (record,) = parse_stock_response(snapshot_body({"symbol": "TCS"}))
    assert record == StockRecord(symbol="TCS")
    assert record.industry == NOT_AVAILABLE
    assert record.company_name == NOT_AVAILABLE
    assert record.per_change_365d == 0.0


def test_parse_should_default_mistyped_fields(snapshot_body) -> None:
    body = snapshot_body(
        {
            "symbol": "INFY",
            "lastPrice": "1540.25",
            "dayHigh": "-",
            "dayLow": True,
            "pChange": None,
            "ffmc": {"value": 1},
            "meta": {"industry": 42, "companyName": ["Infosys"]},
        }
    )
    (record,) = parse_stock_response(body)
    assert record.price == 1540.25
    assert record.day_high == 0.0
    assert record.day_low == 0.0
    assert record.p_change == 0.0
    assert record.ffmc == 0.0
    assert record.industry == NOT_AVAILABLE
    assert record.company_name == NOT_AVAILABLE


def test_parse_should_tolerate_non_object_meta(snapshot_body) -> None:
    (record,) = parse_stock_response(snapshot_body({"symbol": "ITC", "meta": "n/a"}))
    assert record.industry == NOT_AVAILABLE


def test_parse_should_skip_rows_without_symbol(snapshot_body) -> None:
    assert parse_stock_response(snapshot_body({"lastPrice": 100})) == []


def test_parse_should_skip_null_and_non_object_rows(snapshot_body) -> None:
    body = json.dumps({"data": [{"symbol": None}, {"symbol": "  "}, "SBIN", 7, {"symbol": "HDFCBANK"}]})
    assert [record.symbol for record in parse_stock_response(body)] == ["HDFCBANK"]


def test_parse_should_keep_order_and_duplicates(snapshot_body) -> None:
    body = snapshot_body(
        {"symbol": "NIFTY 500", "lastPrice": 21000},
        {"symbol": "SBIN", "lastPrice": 810},
        {"lastPrice": 1},
        {"symbol": "SBIN", "lastPrice": 812},
        {"symbol": "AXISBANK"},
    )
    records = parse_stock_response(body)
    assert [record.symbol for record in records] == ["NIFTY 500", "SBIN", "SBIN", "AXISBANK"]
    assert [record.price for record in records[1:3]] == [810.0, 812.0]


@pytest.mark.parametrize(
    "body",
    [
        "[]",
        "42",
        '"data"',
        "null",
        "{}",
        '{"records": []}',
        '{"data": {"symbol": "SBIN"}}',
        '{"data": null}',
        "<html>Access Denied</html>",
        '{"data": [',
    ],
)
def test_parse_should_return_empty_for_unusable_bodies(body: str) -> None:
    assert parse_stock_response(body) == []
    assert parse_stock_snapshot(body) is None


def test_snapshot_should_tell_empty_array_from_malformed_payload(snapshot_body) -> None:
    assert parse_stock_snapshot(snapshot_body()) == []
    assert parse_stock_snapshot(snapshot_body({"lastPrice": 100})) == []
    assert parse_stock_snapshot("{}") is None


def test_parse_should_default_numbers_too_large_for_a_float() -> None:
    body = '{"data": [{"symbol": "SBIN", "lastPrice": 812.5, "ffmc": ' + "9" * 400 + "}]}"
    (record,) = parse_stock_response(body)
    assert record.price == 812.5
    assert record.ffmc == 0.0


def test_parse_should_reject_deeply_nested_bodies() -> None:
    depth = 100_000
    body = '{"data": [{"symbol": "SBIN", "meta": ' + "[" * depth + "]" * depth + "}]}"
    assert parse_stock_response(body) == []
    assert parse_stock_snapshot(body) is None


def test_to_dict_should_use_camel_case_wire_keys() -> None:
    record = StockRecord(symbol="SBIN", price=812.5, week_high=1.2, p_change=-0.4, company_name="State Bank of India")
    assert record.to_dict() == {
        "symbol": "SBIN",
        "price": 812.5,
        "dayHigh": 0.0,
        "dayLow": 0.0,
        "weekHigh": 1.2,
        "weekLow": 0.0,
        "yearHigh": 0.0,
        "yearLow": 0.0,
        "pChange": -0.4,
        "perChange30d": 0.0,
        "perChange365d": 0.0,
        "ffmc": 0.0,
        "industry": "N/A",
        "companyName": "State Bank of India",
    }

"""Tests for decoding gateway JSON."""

import pytest
from envoy_stats import decode
from envoy_stats.errors import DecodeError, ProductionLengthError, ProductionShapeError

PRODUCTION_JSON = {
    "production": [
        {"type": "inverters", "activeCount": 2, "readingTime": 1000, "wNow": 240},
        {
            "type": "eim",
            "activeCount": 1,
            "measurementType": "production",
            "readingTime": 1000,
            "wNow": 250.5,
            "whLifetime": 500000,
            "rmsVoltage": 241.2,
            "whToday": 1200,
            "whLastSevenDays": 8000,
        },
    ],
    "consumption": [
        {
            "type": "eim",
            "measurementType": "total-consumption",
            "readingTime": 1000,
            "wNow": 300.7,
            "whToday": 900,
            "whLastSevenDays": 6000,
            "whLifetime": 20000,
        },
        {
            "type": "eim",
            "measurementType": "net-consumption",
            "readingTime": 1000,
            "wNow": -50.2,
            "whToday": 300,
            "whLastSevenDays": 2000,
            "whLifetime": 10000,
        },
    ],
    "storage": [{"type": "acb", "activeCount": 0}],
}


def test_decode_production():
    snapshot = decode.decode_production(PRODUCTION_JSON)

    assert snapshot.inverters.active_count == 2
    assert snapshot.production.measurement_type == "production"
    assert snapshot.production.w_now == 250.5
    assert snapshot.production.wh_today == 1200.0
    assert snapshot.production.rms_voltage == 241.2
    assert snapshot.production.active_count == 1
    assert [r.measurement_type for r in snapshot.consumption] == [
        "total-consumption",
        "net-consumption",
    ]
    # Consumption first, production last
    assert [r.measurement_type for r in snapshot.readings] == [
        "total-consumption",
        "net-consumption",
        "production",
    ]


def test_missing_and_null_fields_decode_to_zero():
    payload = {
        "production": [{}, {"measurementType": "production", "wNow": None}],
        "consumption": [],
    }

    snapshot = decode.decode_production(payload)

    assert snapshot.inverters.active_count == 0
    assert snapshot.production.w_now == 0.0
    assert snapshot.production.reading_time == 0


def test_missing_consumption_is_empty():
    payload = {"production": [{"activeCount": 1}, {"measurementType": "production"}]}

    snapshot = decode.decode_production(payload)

    assert snapshot.consumption == []


def test_extra_production_elements_are_ignored():
    payload = {
        "production": [{"activeCount": 1}, {"measurementType": "production"}, {"type": "rgms"}],
        "consumption": [],
    }

    snapshot = decode.decode_production(payload)

    assert snapshot.production.measurement_type == "production"


def test_production_wrong_length():
    payload = {"production": [{"activeCount": 1}], "consumption": []}

    with pytest.raises(ProductionLengthError, match="expected 2 elements, got 1"):
        decode.decode_production(payload)


def test_production_wrong_shape():
    payload = {"production": [{"activeCount": 1}, "eim"], "consumption": []}

    with pytest.raises(ProductionShapeError, match=r"production\[1\]"):
        decode.decode_production(payload)


def test_production_wrong_field_type():
    payload = {"production": [{"activeCount": "two"}, {}], "consumption": []}

    with pytest.raises(ProductionShapeError, match="activeCount: expected integer"):
        decode.decode_production(payload)


def test_production_not_an_array():
    with pytest.raises(ProductionShapeError):
        decode.decode_production({"production": {"activeCount": 1}})


def test_consumption_wrong_type():
    payload = {"production": [{}, {}], "consumption": [{"wNow": "fast"}]}

    with pytest.raises(DecodeError, match="wNow: expected number") as excinfo:
        decode.decode_production(payload)
    assert excinfo.value.step == "decode_consumption"


def test_booleans_are_not_numbers():
    with pytest.raises(DecodeError):
        decode.decode_aggregate_reading({"wNow": True})


def test_integral_float_accepted_for_integer():
    reading = decode.decode_aggregate_reading({"readingTime": 1000.0})
    assert reading.reading_time == 1000


def test_fractional_float_rejected_for_integer():
    with pytest.raises(DecodeError, match="readingTime"):
        decode.decode_aggregate_reading({"readingTime": 1000.5})


def test_decode_inverters_keeps_order():
    payload = [
        {
            "serialNumber": "121703012346",
            "lastReportDate": 1544000300,
            "devType": 1,
            "lastReportWatts": 201,
            "maxReportWatts": 250,
        },
        {
            "serialNumber": "121703012345",
            "lastReportDate": 1544000200,
            "devType": 1,
            "lastReportWatts": 198.5,
            "maxReportWatts": 249,
        },
    ]

    readings = decode.decode_inverters(payload)

    assert [r.serial_number for r in readings] == ["121703012346", "121703012345"]
    assert readings[0].last_report_watts == 201.0
    assert readings[1].last_report_date == 1544000200
    assert readings[1].dev_type == 1


def test_decode_inverters_requires_array():
    with pytest.raises(DecodeError, match="expected array"):
        decode.decode_inverters({"serialNumber": "1"})

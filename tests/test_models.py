import dataclasses
import json
from datetime import datetime, timedelta, timezone

import pytest

from airly.api import models
from helpers import INSTALLATION_JSON, MEASUREMENTS_JSON


def assert_fields_preserved(source, encoded):
    """Każde pole źródłowego JSON musi pojawić się w zakodowanym słowniku z tą samą wartością."""
    if isinstance(source, dict):
        for key, value in source.items():
            assert key in encoded
            assert_fields_preserved(value, encoded[key])
    elif isinstance(source, list):
        assert len(source) == len(encoded)
        for s, e in zip(source, encoded):
            assert_fields_preserved(s, e)
    else:
        assert source == encoded


def test_installation_round_trip():
    source = json.loads(INSTALLATION_JSON)
    installation = models.Installation.from_json(source)
    encoded = installation.to_json()

    assert_fields_preserved(source, encoded)
    assert models.Installation.from_json(encoded) == installation
    assert encoded["sponsor"]["id"] == 0
    assert encoded["sponsor"]["displayName"] == ""


def test_measurements_round_trip():
    source = json.loads(MEASUREMENTS_JSON)
    measurements = models.Measurements.from_json(source)
    encoded = measurements.to_json()

    assert_fields_preserved(source, encoded)
    assert models.Measurements.from_json(encoded) == measurements
    assert encoded["current"]["fromDateTime"] == "2018-08-24T08:24:48.652Z"


def test_unicode_fields_decoded():
    installation = models.Installation.from_json(json.loads(INSTALLATION_JSON))
    assert installation.address.city == "Kraków"
    assert installation.address.street == "Mikołajska"
    assert installation.sponsor.logo == "https://cdn.airly.org/logo/KrakówOddycha.jpg"


def test_missing_fields_take_zero_values():
    installation = models.Installation.from_json({"id": 7})

    assert installation == models.Installation(id=7)
    assert installation.location == models.Location(0.0, 0.0)
    assert installation.address.display_address1 == ""
    assert installation.elevation == 0.0
    assert installation.airly is False
    assert installation.sponsor == models.Sponsor()


def test_null_fields_take_zero_values():
    measurements = models.Measurements.from_json({"current": None, "history": None, "forecast": None})

    assert measurements.current == models.Measurement()
    assert measurements.current.from_date_time is None
    assert measurements.current.values == ()
    assert measurements.history == ()
    assert measurements.forecast == ()


def test_unknown_fields_ignored():
    value = models.Value.from_json({"name": "PM10", "value": 21, "unit": "µg/m³"})
    assert value == models.Value(name="PM10", value=21.0)
    assert isinstance(value.value, float)


def test_timestamp_keeps_milliseconds_in_utc():
    measurement = models.Measurement.from_json({"fromDateTime": "2018-08-24T08:24:48.652Z"})

    assert measurement.from_date_time == datetime(2018, 8, 24, 8, 24, 48, 652000, tzinfo=timezone.utc)
    assert measurement.from_date_time.utcoffset() == timedelta(0)


def test_timestamp_with_offset_converted_to_utc():
    measurement = models.Measurement.from_json({"fromDateTime": "2018-08-24T10:24:48.652+02:00"})

    assert measurement.from_date_time == datetime(2018, 8, 24, 8, 24, 48, 652000, tzinfo=timezone.utc)
    assert measurement.from_date_time.tzinfo == timezone.utc


def test_format_timestamp():
    value = datetime(2018, 8, 24, 9, 24, 48, 652000, tzinfo=timezone.utc)
    assert models.format_timestamp(value) == "2018-08-24T09:24:48.652Z"
    assert models.format_timestamp(None) is None


@pytest.mark.parametrize("decode, raw", [
    (models.Installation.from_json, {"id": "204"}),
    (models.Installation.from_json, {"id": 204.5}),
    (models.Installation.from_json, {"airly": "true"}),
    (models.Installation.from_json, {"elevation": True}),
    (models.Installation.from_json, {"location": [50.0, 19.0]}),
    (models.Address.from_json, {"city": 12}),
    (models.Measurement.from_json, {"values": {"name": "PM1"}}),
    (models.Measurement.from_json, {"fromDateTime": 1535099088}),
    (models.Measurements.from_json, []),
])
def test_type_mismatch_raises_type_error(decode, raw):
    with pytest.raises(TypeError):
        decode(raw)


def test_invalid_timestamp_raises_value_error():
    with pytest.raises(ValueError, match="fromDateTime"):
        models.Measurement.from_json({"fromDateTime": "yesterday"})


def test_models_are_immutable():
    installation = models.Installation(id=204)
    with pytest.raises(dataclasses.FrozenInstanceError):
        installation.id = 205


@pytest.mark.parametrize("value", [
    "2018-08-24",
    "2018-08-24T08:24:48",
    "2018-08-24 08:24:48.652Z",
    "2018-08-24T08:24Z",
    "2018-13-24T08:24:48.652Z",
])
def test_non_rfc3339_timestamp_rejected(value):
    with pytest.raises(ValueError, match="fromDateTime"):
        models.Measurement.from_json({"fromDateTime": value})


@pytest.mark.parametrize("value, expected", [
    ("2018-08-24T08:24:48Z", datetime(2018, 8, 24, 8, 24, 48, tzinfo=timezone.utc)),
    ("2018-08-24T08:24:48.6Z", datetime(2018, 8, 24, 8, 24, 48, 600000, tzinfo=timezone.utc)),
    ("2018-08-24T08:24:48.65Z", datetime(2018, 8, 24, 8, 24, 48, 650000, tzinfo=timezone.utc)),
    ("2018-08-24T08:24:48.652123456Z", datetime(2018, 8, 24, 8, 24, 48, 652123, tzinfo=timezone.utc)),
    ("2018-08-24t08:24:48.652z", datetime(2018, 8, 24, 8, 24, 48, 652000, tzinfo=timezone.utc)),
    ("2018-08-24T03:24:48.652-05:00", datetime(2018, 8, 24, 8, 24, 48, 652000, tzinfo=timezone.utc)),
])
def test_rfc3339_fraction_and_offset_variants(value, expected):
    measurement = models.Measurement.from_json({"fromDateTime": value})
    assert measurement.from_date_time == expected
    assert measurement.from_date_time.tzinfo == timezone.utc

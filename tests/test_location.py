from types import SimpleNamespace
from unittest import mock

import pytest

from airly import location
from airly.api import models


def test_find_position():
    with mock.patch.object(location, "Nominatim") as nominatim:
        nominatim.return_value.geocode.return_value = SimpleNamespace(latitude=50.06, longitude=19.94)
        assert location.find_position("Kraków") == models.Location(latitude=50.06, longitude=19.94)
    nominatim.return_value.geocode.assert_called_once_with("Kraków", exactly_one=True)


def test_find_position_unknown_place():
    with mock.patch.object(location, "Nominatim") as nominatim:
        nominatim.return_value.geocode.return_value = None
        with pytest.raises(LookupError):
            location.find_position("Atlantyda")


def test_current_location():
    with mock.patch.object(location.geocoder, "ip", return_value=SimpleNamespace(latlng=[52.23, 21.01])):
        assert location.current_location() == models.Location(latitude=52.23, longitude=21.01)


def test_current_location_failure():
    with mock.patch.object(location.geocoder, "ip", return_value=SimpleNamespace(latlng=[])):
        with pytest.raises(LookupError):
            location.current_location()

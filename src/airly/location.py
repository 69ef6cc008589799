from geopy import Nominatim
import geocoder

import airly.api.models as models


def find_position(location_name: str) -> models.Location:
    """
    Zamienia nazwę miejsca na współrzędne przy pomocy Nominatim (OpenStreetMap).

    Raises:
        LookupError: Gdy nie znaleziono podanego miejsca.
    """
    locator = Nominatim(user_agent="airly-collector")
    location = locator.geocode(location_name, exactly_one=True)
    if location is None:
        raise LookupError(f"Unknown place: {location_name}")
    return models.Location(latitude=location.latitude, longitude=location.longitude)

def current_location() -> models.Location:
    """Przybliżona lokalizacja na podstawie publicznego adresu IP."""
    latlng = geocoder.ip('me').latlng
    if not latlng:
        raise LookupError("Unable to determine current location")
    return models.Location(latitude=latlng[0], longitude=latlng[1])

import json
import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable

import requests

import airly.api.exceptions as exceptions
import airly.api.models as models
from airly.config import DEFAULT_MAX_DISTANCE_KM, DEFAULT_MAX_RESULTS

T = typing.TypeVar("T")


class Transport(typing.Protocol):
    """Dowolny obiekt wysyłający przygotowane żądanie HTTP, np. requests.Session."""

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        ...


# Współdzielony transport używany gdy klient nie dostał własnego
DEFAULT_TRANSPORT: Transport = requests.Session()


@dataclass
class NearestOptions:
    """Parametry wyszukiwania najbliższych instalacji."""
    max_distance_km: float = DEFAULT_MAX_DISTANCE_KM
    max_results: int = DEFAULT_MAX_RESULTS


NearestOption = Callable[[NearestOptions], None]


def max_distance(max_distance_km: float) -> NearestOption:
    """Ogranicza wyszukiwanie do podanej odległości w kilometrach."""
    def apply(options: NearestOptions) -> None:
        options.max_distance_km = max_distance_km
    return apply


def max_results(count: int) -> NearestOption:
    """Ogranicza liczbę zwracanych instalacji."""
    if isinstance(count, bool) or not isinstance(count, int):
        raise TypeError(f"max_results expects an integer, got {type(count).__name__}")
    def apply(options: NearestOptions) -> None:
        options.max_results = count
    return apply


def _nearest_options(options: typing.Iterable[NearestOption]) -> NearestOptions:
    config = NearestOptions()
    for option in options:
        option(config)
    return config


def _format_arg(value: Any) -> str:
    # Współrzędne i odległości zawsze z sześcioma cyframi po przecinku
    if isinstance(value, float):
        return f"{value:f}"
    return str(value)


def _list_of(decode: Callable[[Any], T]) -> Callable[[Any], list[T]]:
    def decode_list(raw: Any) -> list[T]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise TypeError(f"cannot decode {type(raw).__name__} into list")
        return [decode(entry) for entry in raw]
    return decode_list


class Client:
    """
    Klient HTTP dla API Airly (https://airapi.airly.eu/v2),
    dołączający klucz API i preferowany język do każdego żądania
    oraz mapujący odpowiedzi na modele z airly.api.models.

    Błędy transportu są przekazywane bez zmian, odpowiedzi ze statusem
    innym niż 200 kończą się APIError, a niepoprawna treść DecodeError.
    """

    __BASE = "https://airapi.airly.eu/v2"

    def __init__(self, key: str, language: str = "", transport: Transport = None):
        """
        Args:
            key (str): Klucz API Airly wysyłany w nagłówku `apikey`.
            language (str, opcjonalnie): Język odpowiedzi ("en" lub "pl"). Pusty oznacza brak nagłówka.
            transport (Transport, opcjonalnie): Obiekt wysyłający żądania. Domyślnie DEFAULT_TRANSPORT.
        """
        self._key = key
        self._language = language
        self._transport = transport if transport is not None else DEFAULT_TRANSPORT

    @property
    def key(self) -> str:
        return self._key

    @property
    def language(self) -> str:
        return self._language

    def make_url(self, endpoint: str, args: dict[str, Any] = None) -> str:
        """
        Buduje pełny URL z bazowego adresu, ścieżki oraz parametrów zapytania.

        Args:
            endpoint (str): Ścieżka API (np. "installations/nearest").
            args (dict[str, Any], opcjonalnie): Parametry query string w kolejności wstawienia.

        Returns:
            str: Pełny adres URL.
        """
        url = f"{self.__BASE}/{endpoint}"
        if args:
            url += "?" + "&".join(f"{key}={_format_arg(value)}" for key, value in args.items())
        return url

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "apikey": self._key,
        }
        if self._language:
            headers["Accept-Language"] = self._language
        return headers

    def _get(
        self,
        endpoint: str,
        decode: Callable[[Any], T],
        args: dict[str, Any] = None,
    ) -> T:
        """
        Wykonuje żądanie GET, sprawdza status odpowiedzi i dekoduje JSON.

        Args:
            endpoint (str): Ścieżka API.
            decode (Callable[[Any], T]): Funkcja budująca model ze zdeserializowanego JSON.
            args (dict[str, Any], opcjonalnie): Parametry query string.

        Returns:
            T: Zdekodowany model.

        Raises:
            exceptions.APIError: Gdy status odpowiedzi jest różny od 200.
            exceptions.TooManyRequests: Gdy przekroczono limit zapytań (HTTP 429).
            exceptions.DecodeError: Gdy treści odpowiedzi nie da się zdekodować.
        """
        url = self.make_url(endpoint, args)
        request = requests.Request("GET", url, headers=self._headers()).prepare()
        logging.info(f"API Request: {url}")
        response = self._transport.send(request)
        with response:
            body = response.content or b""

        if response.status_code != 200:
            text = body.decode("utf-8", errors="replace")
            if response.status_code == 429:
                raise exceptions.TooManyRequests(response.status_code, text)
            raise exceptions.APIError(response.status_code, text)

        logging.info("API Request finished!")
        try:
            return decode(json.loads(body))
        except (ValueError, TypeError, RecursionError) as e:
            raise exceptions.DecodeError(str(e)) from e

    def fetch_installation(self, installation_id: int) -> models.Installation:
        """
        Pobiera metadane instalacji o podanym identyfikatorze.

        Args:
            installation_id (int): Identyfikator instalacji.

        Returns:
            models.Installation: Instalacja z lokalizacją, adresem i sponsorem.
        """
        return self._get(f"installations/{installation_id}", models.Installation.from_json)

    def fetch_nearest_installations(
        self,
        location: models.Location,
        *options: NearestOption,
    ) -> list[models.Installation]:
        """
        Pobiera instalacje najbliższe podanemu punktowi.

        Args:
            location (models.Location): Punkt odniesienia.
            *options (NearestOption): Modyfikatory max_distance() i max_results(), stosowane po kolei.

        Returns:
            list[models.Installation]: Lista instalacji uporządkowana przez API według odległości.
        """
        config = _nearest_options(options)
        return self._get(
            "installations/nearest",
            _list_of(models.Installation.from_json),
            args={
                "lat": float(location.latitude),
                "lng": float(location.longitude),
                "maxDistanceKM": float(config.max_distance_km),
                "maxResults": config.max_results,
            },
        )

    def fetch_nearest_measurements(
        self,
        location: models.Location,
        *options: NearestOption,
    ) -> models.Measurements:
        """
        Pobiera pomiary instalacji najbliższej podanemu punktowi.

        Endpoint nie obsługuje limitu wyników, więc max_results() nie trafia do zapytania.

        Args:
            location (models.Location): Punkt odniesienia.
            *options (NearestOption): Modyfikatory wyszukiwania.

        Returns:
            models.Measurements: Pomiary bieżące, historyczne i prognoza.
        """
        config = _nearest_options(options)
        return self._get(
            "measurements/nearest",
            models.Measurements.from_json,
            args={
                "lat": float(location.latitude),
                "lng": float(location.longitude),
                "maxDistanceKM": float(config.max_distance_km),
            },
        )

    def fetch_point_measurements(self, location: models.Location) -> models.Measurements:
        """
        Pobiera pomiary dla dowolnego punktu, interpolowane przez API z pobliskich czujników.

        Args:
            location (models.Location): Punkt, dla którego liczona jest średnia ważona.

        Returns:
            models.Measurements: Pomiary bieżące, historyczne i prognoza.
        """
        return self._get(
            "measurements/point",
            models.Measurements.from_json,
            args={"lat": float(location.latitude), "lng": float(location.longitude)},
        )

    def fetch_installation_measurements(self, installation_id: int) -> models.Measurements:
        return self._get(
            "measurements/installation",
            models.Measurements.from_json,
            args={"installationId": installation_id},
        )

    def fetch_index_types(self) -> list[models.IndexType]:
        """Pobiera typy indeksów wraz z poziomami zdefiniowanymi dla każdego z nich."""
        return self._get("meta/measurements", _list_of(models.IndexType.from_json))

    def fetch_measurement_types(self) -> list[models.MeasurementType]:
        """Pobiera typy pomiarów z nazwami i jednostkami."""
        return self._get("meta/measurements", _list_of(models.MeasurementType.from_json))

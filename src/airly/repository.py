import logging
from datetime import datetime
from typing import Callable, Optional

import requests.exceptions

import airly.api.models as api_models
import airly.database.views as views
from airly.api.client import Client as APIClient, NearestOption
from airly.config import UPDATE_INTERVALS
from airly.database.client import Client as DatabaseClient, installation_source, nearest_source, point_source


class Repository:
    """
    Repozytorium odpowiedzialne za pobieranie danych z API Airly
    i synchronizację ich z lokalną bazą danych.

    Metody update_* zawsze odpytują API i zapisują wynik w bazie.
    Metody fetch_* odświeżają bazę tylko po upływie interwału
    z UPDATE_INTERVALS, a następnie zwracają dane z bazy.
    """

    def __init__(self, api_client: APIClient, database_client: DatabaseClient):
        """
        Inicjalizuje instancję repozytorium.

        Args:
            api_client (api.Client): Klient do komunikacji z API Airly.
            database_client (database.Client): Klient do operacji na lokalnej bazie danych.
        """
        self._api_client = api_client
        self._database_client = database_client

    def clone(self):
        return Repository(self._api_client, self._database_client.duplicate_connection())

    def close(self):
        self._database_client.close()

    def update_installation(self, installation_id: int) -> api_models.Installation:
        installation = self._api_client.fetch_installation(installation_id)
        self._database_client.update_installations([installation])
        return installation

    def update_nearest_installations(
            self,
            location: api_models.Location,
            *options: NearestOption
    ) -> list[api_models.Installation]:
        installations = self._api_client.fetch_nearest_installations(location, *options)
        self._database_client.update_installations(installations)
        return installations

    def fetch_installation(self, installation_id: int) -> Optional[api_models.Installation]:
        """
        Zwraca instalację z bazy, odświeżając ją jeśli upłynął interwał `UPDATE_INTERVALS['installation']`.

        Args:
            installation_id (int): Identyfikator instalacji.

        Returns:
            models.Installation | None: Instalacja lub None, gdy nie udało się jej jeszcze pobrać.
        """
        last_update_at = self._database_client.fetch_last_installation_update(installation_id)
        elapsed = datetime.now() - last_update_at

        try:
            if elapsed >= UPDATE_INTERVALS['installation']:
                self.update_installation(installation_id)
        except requests.exceptions.ConnectionError as e:
            logging.warning("Error while updating installation: %s", e)

        return self._database_client.fetch_installation(installation_id)

    def get_installation_list_view(self) -> list[views.InstallationListView]:
        return self._database_client.get_installation_list_view()

    # Metody update_*_measurements nie są prywatne, bo służą kolektorowi do odświeżania
    def update_installation_measurements(self, installation_id: int) -> api_models.Measurements:
        measurements = self._api_client.fetch_installation_measurements(installation_id)
        self._database_client.update_measurements(installation_source(installation_id), measurements)
        return measurements

    def update_nearest_measurements(
            self,
            location: api_models.Location,
            *options: NearestOption
    ) -> api_models.Measurements:
        measurements = self._api_client.fetch_nearest_measurements(location, *options)
        self._database_client.update_measurements(nearest_source(location), measurements)
        return measurements

    def update_point_measurements(self, location: api_models.Location) -> api_models.Measurements:
        measurements = self._api_client.fetch_point_measurements(location)
        self._database_client.update_measurements(point_source(location), measurements)
        return measurements

    def _fetch_measurements_view(
            self,
            source: str,
            update: Callable[[], api_models.Measurements]
    ) -> Optional[views.MeasurementsView]:
        last_update_at = self._database_client.fetch_last_measurements_update(source)
        elapsed = datetime.now() - last_update_at

        try:
            if elapsed >= UPDATE_INTERVALS['measurements']:
                update()
        except requests.exceptions.ConnectionError as e:
            logging.warning("Error while updating measurements for %s: %s", source, e)

        return self._database_client.fetch_measurements_view(source)

    def fetch_installation_measurements(self, installation_id: int) -> Optional[views.MeasurementsView]:
        """
        Zwraca pomiary instalacji z bazy, odświeżając je jeśli upłynął interwał
        `UPDATE_INTERVALS['measurements']`.

        Args:
            installation_id (int): Identyfikator instalacji.

        Returns:
            views.MeasurementsView | None: Zapisane pomiary lub None, gdy nie udało się ich jeszcze pobrać.
        """
        return self._fetch_measurements_view(
            installation_source(installation_id),
            lambda: self.update_installation_measurements(installation_id)
        )

    def fetch_nearest_measurements(
            self,
            location: api_models.Location,
            *options: NearestOption
    ) -> Optional[views.MeasurementsView]:
        return self._fetch_measurements_view(
            nearest_source(location),
            lambda: self.update_nearest_measurements(location, *options)
        )

    def fetch_point_measurements(self, location: api_models.Location) -> Optional[views.MeasurementsView]:
        return self._fetch_measurements_view(
            point_source(location),
            lambda: self.update_point_measurements(location)
        )

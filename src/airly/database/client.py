import json
import sqlite3
from datetime import datetime
from typing import Iterable, List, Optional

import airly.api.models as api_models
import airly.database.views as views


# Rodzaje okien pomiarowych przechowywanych w tabeli measurement
CURRENT = "current"
HISTORY = "history"
FORECAST = "forecast"

_NOW = "CAST(strftime('%s', 'now') AS INTEGER)"


def installation_source(installation_id: int) -> str:
    return f"installation/{installation_id}"

def nearest_source(location: api_models.Location) -> str:
    return f"nearest/{location.latitude:f},{location.longitude:f}"

def point_source(location: api_models.Location) -> str:
    return f"point/{location.latitude:f},{location.longitude:f}"


class Client:
    """
    Klient SQLite do:
      - inicjalizacji schematu,
      - przechowywania/aktualizacji instalacji i okien pomiarowych,
      - odczytu widoków zdefiniowanych w airly.database.views.

    Pomiary są zapisywane per źródło (np. "installation/204"), czyli per
    zapytanie do API, z którego pochodzą.
    """

    def __init__(self, database_filepath: str):
        """
        Inicjalizuje połączenie i tworzy brakujące tabele.

        Args:
            database_filepath: ścieżka do pliku SQLite lub ":memory:".
        """
        self._filepath = database_filepath
        self._conn = sqlite3.connect(database_filepath)
        self._conn.row_factory = sqlite3.Row
        self._cursor = self._conn.cursor()

        self._populate_tables()

    def close(self) -> None:
        """Zamyka kursor i połączenie."""
        self._cursor.close()
        self._conn.close()

    def __enter__(self) -> 'Client':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def duplicate_connection(self) -> 'Client':
        """Zwraca nową instancję Client na tym samym pliku bazy."""
        return Client(self._filepath)

    def _populate_tables(self) -> None:
        """Tworzy wszystkie tabele i triggery."""
        self._cursor.execute("""
            CREATE TABLE IF NOT EXISTS installation (
                id INTEGER PRIMARY KEY,
                latitude REAL NOT NULL,
                longitude REAL NOT NULL,
                elevation REAL NOT NULL DEFAULT 0,
                airly INTEGER NOT NULL DEFAULT 0,
                country TEXT,
                city TEXT,
                street TEXT,
                number TEXT,
                display_address1 TEXT,
                display_address2 TEXT,
                sponsor TEXT,
                last_update_at INTEGER NOT NULL DEFAULT 0
            )
        """)
        self._cursor.execute(f"""
            CREATE TRIGGER IF NOT EXISTS tgr_on_insert_installation
            AFTER INSERT ON installation
            FOR EACH ROW
            BEGIN
                UPDATE installation
                SET last_update_at = {_NOW}
                WHERE id = NEW.id;
            END
        """)

        self._cursor.execute("""
            CREATE TABLE IF NOT EXISTS measurement_update (
                source TEXT PRIMARY KEY,
                last_update_at INTEGER NOT NULL DEFAULT 0
            )
        """)

        # okna pomiarowe, payload to JSON zgodny z API
        self._cursor.execute("""
            CREATE TABLE IF NOT EXISTS measurement (
                source TEXT NOT NULL,
                kind TEXT NOT NULL,
                from_date_time TEXT NOT NULL,
                till_date_time TEXT,
                payload TEXT NOT NULL,
                PRIMARY KEY(source, kind, from_date_time)
            )
        """)
        self._cursor.execute(f"""
            CREATE TRIGGER IF NOT EXISTS tgr_on_insert_measurement
            AFTER INSERT ON measurement
            FOR EACH ROW
            BEGIN
                INSERT INTO measurement_update
                  (source, last_update_at)
                VALUES
                  (NEW.source, {_NOW})
                ON CONFLICT(source) DO UPDATE
                  SET last_update_at =
                    EXCLUDED.last_update_at;
            END
        """)
        self._conn.commit()

    def update_installations(self, installations: Iterable[api_models.Installation]) -> None:
        """
        Wstawia lub aktualizuje instalacje.

        Args:
            installations: iterable obiektów Installation z API.
        """
        params = [
            {
                "id": i.id,
                "latitude": i.location.latitude,
                "longitude": i.location.longitude,
                "elevation": i.elevation,
                "airly": int(i.airly),
                "country": i.address.country,
                "city": i.address.city,
                "street": i.address.street,
                "number": i.address.number,
                "display_address1": i.address.display_address1,
                "display_address2": i.address.display_address2,
                "sponsor": json.dumps(i.sponsor.to_json(), ensure_ascii=False),
            }
            for i in installations
        ]
        self._cursor.executemany(
            """
            INSERT OR REPLACE INTO installation
              (id, latitude, longitude, elevation, airly, country, city, street, number,
               display_address1, display_address2, sponsor)
            VALUES
              (:id, :latitude, :longitude, :elevation, :airly, :country, :city, :street, :number,
               :display_address1, :display_address2, :sponsor)
            """,
            params
        )
        self._conn.commit()

    def fetch_installation(self, installation_id: int) -> Optional[api_models.Installation]:
        """Zwraca zapisaną instalację lub None."""
        row = self._cursor.execute(
            "SELECT * FROM installation WHERE id = ?",
            (installation_id,)
        ).fetchone()
        if row is None:
            return None
        return api_models.Installation(
            id=row["id"],
            location=api_models.Location(latitude=row["latitude"], longitude=row["longitude"]),
            address=api_models.Address(
                country=row["country"] or "",
                city=row["city"] or "",
                street=row["street"] or "",
                number=row["number"] or "",
                display_address1=row["display_address1"] or "",
                display_address2=row["display_address2"] or "",
            ),
            elevation=row["elevation"],
            airly=bool(row["airly"]),
            sponsor=api_models.Sponsor.from_json(json.loads(row["sponsor"] or "{}")),
        )

    def fetch_last_installation_update(self, installation_id: int) -> datetime:
        """
        Zwraca datetime ostatniej aktualizacji instalacji.

        Args:
            installation_id: id instalacji.
        """
        row = self._cursor.execute(
            "SELECT last_update_at FROM installation WHERE id = ?",
            (installation_id,)
        ).fetchone()
        return datetime.fromtimestamp(row["last_update_at"] if row else 0)

    def get_installation_list_view(self) -> List[views.InstallationListView]:
        """Zwraca listę instalacji (id, współrzędne, adres)."""
        rows = self._cursor.execute("""
            SELECT id, latitude, longitude, display_address1, display_address2, airly
            FROM installation
            ORDER BY id
        """).fetchall()
        return [
            views.InstallationListView(
                id=r["id"],
                latitude=r["latitude"],
                longitude=r["longitude"],
                display_address=", ".join(
                    part for part in (r["display_address1"], r["display_address2"]) if part
                ),
                airly=bool(r["airly"])
            ) for r in rows
        ]

    def update_measurements(self, source: str, measurements: api_models.Measurements) -> None:
        """
        Zapisuje pomiary pobrane z danego źródła.

        Bieżące okno i prognoza są zastępowane, historia jest dopisywana.

        Args:
            source: klucz źródła, np. wynik installation_source().
            measurements: obiekt Measurements z API.
        """
        self._cursor.execute(
            "DELETE FROM measurement WHERE source = ? AND kind IN (?, ?)",
            (source, CURRENT, FORECAST)
        )
        rows = [(CURRENT, measurements.current)]
        rows += [(HISTORY, m) for m in measurements.history]
        rows += [(FORECAST, m) for m in measurements.forecast]

        self._cursor.executemany(
            """
            INSERT OR REPLACE INTO measurement
              (source, kind, from_date_time, till_date_time, payload)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (
                    source,
                    kind,
                    api_models.format_timestamp(m.from_date_time) or "",
                    api_models.format_timestamp(m.till_date_time),
                    json.dumps(m.to_json(), ensure_ascii=False),
                )
                for kind, m in rows
            ]
        )
        self._conn.commit()

    def fetch_last_measurements_update(self, source: str) -> datetime:
        """Zwraca czas ostatniej aktualizacji pomiarów danego źródła."""
        row = self._cursor.execute(
            "SELECT last_update_at FROM measurement_update WHERE source = ?",
            (source,)
        ).fetchone()
        return datetime.fromtimestamp(row["last_update_at"] if row else 0)

    def fetch_measurements_view(self, source: str) -> Optional[views.MeasurementsView]:
        """
        Zwraca zapisane pomiary źródła lub None, jeśli nigdy ich nie pobrano.

        Args:
            source: klucz źródła.
        """
        update = self._cursor.execute(
            "SELECT last_update_at FROM measurement_update WHERE source = ?",
            (source,)
        ).fetchone()
        if update is None:
            return None

        view = views.MeasurementsView(
            source=source,
            updated_at=datetime.fromtimestamp(update["last_update_at"]),
        )
        rows = self._cursor.execute(
            """
            SELECT kind, payload FROM measurement
            WHERE source = ?
            ORDER BY from_date_time
            """,
            (source,)
        ).fetchall()
        for r in rows:
            measurement = api_models.Measurement.from_json(json.loads(r["payload"]))
            match r["kind"]:
                case "current":
                    view.current = measurement
                case "history":
                    view.history.append(measurement)
                case "forecast":
                    view.forecast.append(measurement)
        return view

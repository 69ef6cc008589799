from datetime import timedelta

# Domyślne parametry wyszukiwania najbliższych instalacji
DEFAULT_MAX_DISTANCE_KM = 3.0
DEFAULT_MAX_RESULTS = 1

LANGUAGES = ("en", "pl")

UPDATE_INTERVALS = {
    "installation": timedelta(days=1),
    "measurements": timedelta(minutes=15),
}

# Odstęp między kolejnymi pobraniami pomiarów przez kolektor
COLLECT_INTERVAL = timedelta(minutes=15)

DATABASE_FILEPATH = "airly.db"

API_KEY_ENV = "AIRLY_API_KEY"

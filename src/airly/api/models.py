"""
Objekty przechowujące dane z API Airly

Każdy model potrafi zbudować się z fragmentu JSON (`from_json`) oraz
zserializować z powrotem do słownika o kluczach zgodnych z API (`to_json`).
Brakujące pola oraz wartości `null` przyjmują wartości zerowe.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

T = TypeVar("T")

_RFC3339 = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})"
)


def _object(raw: Any, name: str) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise TypeError(f"cannot decode {type(raw).__name__} into {name}")
    return raw


def _string(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field '{key}': expected string, got {type(value).__name__}")
    return value


def _number(raw: dict[str, Any], key: str) -> float:
    value = raw.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"field '{key}': expected number, got {type(value).__name__}")
    return float(value)


def _integer(raw: dict[str, Any], key: str) -> int:
    value = raw.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"field '{key}': expected integer, got {type(value).__name__}")
    return value


def _boolean(raw: dict[str, Any], key: str) -> bool:
    value = raw.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise TypeError(f"field '{key}': expected boolean, got {type(value).__name__}")
    return value


def _timestamp(raw: dict[str, Any], key: str) -> datetime | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"field '{key}': expected timestamp string, got {type(value).__name__}")
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f"field '{key}': invalid RFC3339 timestamp: {value!r}")
    # fromisoformat w 3.10 przyjmuje tylko 3 lub 6 cyfr ułamka, więcej niż mikrosekundy ucinamy
    fraction = (match["fraction"] or "")[:6].ljust(6, "0")
    offset = "+00:00" if match["offset"] in ("Z", "z") else match["offset"]
    try:
        parsed = datetime.fromisoformat(f"{match['date']}T{match['time']}.{fraction}{offset}")
    except ValueError as e:
        raise ValueError(f"field '{key}': {e}") from e
    return parsed.astimezone(timezone.utc)


def _sequence(raw: dict[str, Any], key: str, decode: Callable[[Any], T]) -> tuple[T, ...]:
    value = raw.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise TypeError(f"field '{key}': expected array, got {type(value).__name__}")
    return tuple(decode(entry) for entry in value)


def format_timestamp(value: datetime | None) -> str | None:
    """Formatuje datę w postaci RFC3339 z milisekundami i sufiksem Z."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Location:
    latitude: float = 0.0
    longitude: float = 0.0

    @classmethod
    def from_json(cls, raw: Any) -> "Location":
        raw = _object(raw, cls.__name__)
        return cls(
            latitude=_number(raw, "latitude"),
            longitude=_number(raw, "longitude"),
        )

    def to_json(self) -> dict[str, Any]:
        return {"latitude": self.latitude, "longitude": self.longitude}

@dataclass(frozen=True)
class Address:
    country: str = ""
    city: str = ""
    street: str = ""
    number: str = ""
    display_address1: str = ""
    display_address2: str = ""

    @classmethod
    def from_json(cls, raw: Any) -> "Address":
        raw = _object(raw, cls.__name__)
        return cls(
            country=_string(raw, "country"),
            city=_string(raw, "city"),
            street=_string(raw, "street"),
            number=_string(raw, "number"),
            display_address1=_string(raw, "displayAddress1"),
            display_address2=_string(raw, "displayAddress2"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "country": self.country,
            "city": self.city,
            "street": self.street,
            "number": self.number,
            "displayAddress1": self.display_address1,
            "displayAddress2": self.display_address2,
        }

@dataclass(frozen=True)
class Sponsor:
    id: int = 0
    name: str = ""
    description: str = ""
    logo: str = ""
    link: str = ""
    display_name: str = ""

    @classmethod
    def from_json(cls, raw: Any) -> "Sponsor":
        raw = _object(raw, cls.__name__)
        return cls(
            id=_integer(raw, "id"),
            name=_string(raw, "name"),
            description=_string(raw, "description"),
            logo=_string(raw, "logo"),
            link=_string(raw, "link"),
            display_name=_string(raw, "displayName"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "logo": self.logo,
            "link": self.link,
            "displayName": self.display_name,
        }

@dataclass(frozen=True)
class Installation:
    id: int = 0
    location: Location = field(default_factory=Location)
    address: Address = field(default_factory=Address)
    elevation: float = 0.0
    airly: bool = False
    sponsor: Sponsor = field(default_factory=Sponsor)

    @classmethod
    def from_json(cls, raw: Any) -> "Installation":
        raw = _object(raw, cls.__name__)
        return cls(
            id=_integer(raw, "id"),
            location=Location.from_json(raw.get("location")),
            address=Address.from_json(raw.get("address")),
            elevation=_number(raw, "elevation"),
            airly=_boolean(raw, "airly"),
            sponsor=Sponsor.from_json(raw.get("sponsor")),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "location": self.location.to_json(),
            "address": self.address.to_json(),
            "elevation": self.elevation,
            "airly": self.airly,
            "sponsor": self.sponsor.to_json(),
        }

@dataclass(frozen=True)
class Value:
    name: str = ""
    value: float = 0.0

    @classmethod
    def from_json(cls, raw: Any) -> "Value":
        raw = _object(raw, cls.__name__)
        return cls(name=_string(raw, "name"), value=_number(raw, "value"))

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}

@dataclass(frozen=True)
class Index:
    name: str = ""
    value: float = 0.0
    level: str = ""
    description: str = ""
    advice: str = ""
    color: str = ""

    @classmethod
    def from_json(cls, raw: Any) -> "Index":
        raw = _object(raw, cls.__name__)
        return cls(
            name=_string(raw, "name"),
            value=_number(raw, "value"),
            level=_string(raw, "level"),
            description=_string(raw, "description"),
            advice=_string(raw, "advice"),
            color=_string(raw, "color"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "level": self.level,
            "description": self.description,
            "advice": self.advice,
            "color": self.color,
        }

@dataclass(frozen=True)
class Standard:
    name: str = ""
    pollutant: str = ""
    limit: float = 0.0
    percent: float = 0.0

    @classmethod
    def from_json(cls, raw: Any) -> "Standard":
        raw = _object(raw, cls.__name__)
        return cls(
            name=_string(raw, "name"),
            pollutant=_string(raw, "pollutant"),
            limit=_number(raw, "limit"),
            percent=_number(raw, "percent"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "pollutant": self.pollutant,
            "limit": self.limit,
            "percent": self.percent,
        }

@dataclass(frozen=True)
class Measurement:
    from_date_time: datetime | None = None
    till_date_time: datetime | None = None
    values: tuple[Value, ...] = ()
    indexes: tuple[Index, ...] = ()
    standards: tuple[Standard, ...] = ()

    @classmethod
    def from_json(cls, raw: Any) -> "Measurement":
        raw = _object(raw, cls.__name__)
        return cls(
            from_date_time=_timestamp(raw, "fromDateTime"),
            till_date_time=_timestamp(raw, "tillDateTime"),
            values=_sequence(raw, "values", Value.from_json),
            indexes=_sequence(raw, "indexes", Index.from_json),
            standards=_sequence(raw, "standards", Standard.from_json),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "fromDateTime": format_timestamp(self.from_date_time),
            "tillDateTime": format_timestamp(self.till_date_time),
            "values": [v.to_json() for v in self.values],
            "indexes": [i.to_json() for i in self.indexes],
            "standards": [s.to_json() for s in self.standards],
        }

@dataclass(frozen=True)
class Measurements:
    current: Measurement = field(default_factory=Measurement)
    history: tuple[Measurement, ...] = ()
    forecast: tuple[Measurement, ...] = ()

    @classmethod
    def from_json(cls, raw: Any) -> "Measurements":
        raw = _object(raw, cls.__name__)
        return cls(
            current=Measurement.from_json(raw.get("current")),
            history=_sequence(raw, "history", Measurement.from_json),
            forecast=_sequence(raw, "forecast", Measurement.from_json),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "current": self.current.to_json(),
            "history": [m.to_json() for m in self.history],
            "forecast": [m.to_json() for m in self.forecast],
        }

@dataclass(frozen=True)
class Level:
    values: str = ""
    level: str = ""
    description: str = ""
    color: str = ""

    @classmethod
    def from_json(cls, raw: Any) -> "Level":
        raw = _object(raw, cls.__name__)
        return cls(
            values=_string(raw, "values"),
            level=_string(raw, "level"),
            description=_string(raw, "description"),
            color=_string(raw, "color"),
        )

@dataclass(frozen=True)
class IndexType:
    name: str = ""
    levels: tuple[Level, ...] = ()

    @classmethod
    def from_json(cls, raw: Any) -> "IndexType":
        raw = _object(raw, cls.__name__)
        return cls(name=_string(raw, "name"), levels=_sequence(raw, "levels", Level.from_json))

@dataclass(frozen=True)
class MeasurementType:
    name: str = ""
    label: str = ""
    unit: str = ""

    @classmethod
    def from_json(cls, raw: Any) -> "MeasurementType":
        raw = _object(raw, cls.__name__)
        return cls(
            name=_string(raw, "name"),
            label=_string(raw, "label"),
            unit=_string(raw, "unit"),
        )

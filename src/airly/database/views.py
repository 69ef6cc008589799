"""
Objekty przechowujące dane z bazy danych
"""


from dataclasses import dataclass, field
from datetime import datetime

import airly.api.models as api_models

@dataclass
class InstallationListView:
    id: int
    latitude: float
    longitude: float
    display_address: str
    airly: bool

@dataclass
class MeasurementsView:
    source: str
    updated_at: datetime
    current: api_models.Measurement | None = None
    history: list[api_models.Measurement] = field(default_factory=list)
    forecast: list[api_models.Measurement] = field(default_factory=list)

"""Derived forecast values: snapshots, point weather, history series."""

from dataclasses import dataclass, field

from flightcat.models.category import FlightCategory

HORIZON_HOURS: dict[str, int] = {"now": 0, "2h": 2, "4h": 4, "8h": 8, "24h": 24}


@dataclass(frozen=True)
class TafSnapshot:
    """Fixed-horizon categories computed once at fetch time."""

    now: FlightCategory | None
    h2: FlightCategory | None
    h4: FlightCategory | None
    h8: FlightCategory | None
    h24: FlightCategory | None

    def as_dict(self) -> dict[str, str | None]:
        return {
            "now": _value(self.now),
            "2h": _value(self.h2),
            "4h": _value(self.h4),
            "8h": _value(self.h8),
            "24h": _value(self.h24),
        }


@dataclass(frozen=True)
class ForecastWeather:
    wspd: int | None = None
    wgst: int | None = None
    wdir: int | None = None
    ceiling: int | None = None


@dataclass(frozen=True)
class OutlookItem:
    label: str
    hours: int
    in_range: bool
    category: FlightCategory | None
    gust: int
    gust_warning: bool


@dataclass(frozen=True)
class MetarPoint:
    icao_id: str
    report_time: str
    obs_time: int | None
    flt_cat: FlightCategory | None
    ceiling: int | None
    visib: str | None
    wspd: int | None
    wgst: int | None


@dataclass(frozen=True)
class TafPoint:
    icao_id: str
    time: int
    category: FlightCategory | None
    weather: ForecastWeather | None
    fetch_time: int


@dataclass(frozen=True)
class VerificationPoint:
    icao_id: str
    obs_time: int
    observed: FlightCategory | None
    forecast: FlightCategory | None
    result: str | None  # "exact" | "worse" | "better"


@dataclass
class VerificationSummary:
    icao_id: str
    points: list[VerificationPoint] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def compared(self) -> int:
        return sum(self.counts.values())

    @property
    def exact_ratio(self) -> float | None:
        if not self.compared:
            return None
        return self.counts.get("exact", 0) / self.compared


def _value(cat: FlightCategory | None) -> str | None:
    return cat.value if cat is not None else None

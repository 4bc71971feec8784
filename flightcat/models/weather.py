"""Structured METAR and TAF models as delivered by the weather data provider."""

from dataclasses import dataclass
from enum import StrEnum

from flightcat.models.category import FlightCategory

Visibility = str | float | int


class CloudCover(StrEnum):
    SKC = "SKC"
    CLR = "CLR"
    FEW = "FEW"
    SCT = "SCT"
    BKN = "BKN"
    OVC = "OVC"
    OVX = "OVX"


CEILING_COVERS = frozenset({CloudCover.BKN, CloudCover.OVC, CloudCover.OVX})


class ChangeIndicator(StrEnum):
    BECMG = "BECMG"
    TEMPO = "TEMPO"
    PROB = "PROB"
    FM = "FM"


@dataclass(frozen=True)
class CloudLayer:
    cover: CloudCover
    base: int | None = None  # feet AGL


@dataclass(frozen=True)
class ForecastPeriod:
    """One base period or change group of a TAF. Times are unix seconds."""

    time_from: int
    time_to: int
    fcst_change: ChangeIndicator | None = None
    time_bec: int | None = None
    probability: int | None = None
    clouds: tuple[CloudLayer, ...] = ()
    visib: Visibility | None = None
    wdir: int | None = None
    wspd: int | None = None
    wgst: int | None = None
    wx_string: str | None = None

    @property
    def is_base(self) -> bool:
        return self.fcst_change is None

    def covers(self, t: int) -> bool:
        return self.time_from <= t < self.time_to


@dataclass(frozen=True)
class TafDocument:
    icao_id: str
    valid_time_from: int
    valid_time_to: int
    fcsts: tuple[ForecastPeriod, ...] = ()
    issue_time: str | None = None
    raw_taf: str | None = None

    def is_valid_at(self, t: int) -> bool:
        return self.valid_time_from <= t < self.valid_time_to

    @property
    def base_periods(self) -> list[ForecastPeriod]:
        return [p for p in self.fcsts if p.is_base]

    @property
    def change_groups(self) -> list[ForecastPeriod]:
        return [p for p in self.fcsts if not p.is_base]


@dataclass(frozen=True)
class Metar:
    icao_id: str
    report_time: str
    obs_time: int | None = None
    flt_cat: FlightCategory | None = None
    clouds: tuple[CloudLayer, ...] = ()
    visib: Visibility | None = None
    wdir: int | None = None
    wspd: int | None = None
    wgst: int | None = None
    temp: float | None = None
    dewp: float | None = None
    altim: float | None = None
    wx_string: str | None = None
    raw_ob: str = ""

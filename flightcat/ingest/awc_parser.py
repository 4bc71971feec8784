"""Convert provider METAR/TAF JSON objects into immutable models."""

import logging

from flightcat.models.category import FlightCategory
from flightcat.models.weather import (
    ChangeIndicator,
    CloudCover,
    CloudLayer,
    ForecastPeriod,
    Metar,
    TafDocument,
)

logger = logging.getLogger(__name__)


def _int(value: object) -> int | None:
    """Integer or None; non-numeric values such as "VRB" become None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _visibility(value: object) -> str | float | None:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return str(value)


def parse_clouds(raw: object) -> tuple[CloudLayer, ...]:
    """Parse a cloud list, preserving provider order. Unknown covers are skipped."""
    if not isinstance(raw, list):
        return ()
    layers = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            cover = CloudCover(str(item.get("cover", "")).upper())
        except ValueError:
            continue
        layers.append(CloudLayer(cover=cover, base=_int(item.get("base"))))
    return tuple(layers)


def parse_change_indicator(raw: object) -> ChangeIndicator | None:
    if raw is None or raw == "":
        return None
    text = str(raw).strip().upper()
    if text.startswith("PROB"):
        return ChangeIndicator.PROB
    try:
        return ChangeIndicator(text)
    except ValueError:
        logger.debug("Unknown change indicator %r, treating as TEMPO", raw)
        return ChangeIndicator.TEMPO


def parse_period(raw: dict) -> ForecastPeriod | None:
    time_from = _int(raw.get("timeFrom"))
    time_to = _int(raw.get("timeTo"))
    if time_from is None or time_to is None:
        return None
    return ForecastPeriod(
        time_from=time_from,
        time_to=time_to,
        fcst_change=parse_change_indicator(raw.get("fcstChange")),
        time_bec=_int(raw.get("timeBec")),
        probability=_int(raw.get("probability")),
        clouds=parse_clouds(raw.get("clouds")),
        visib=_visibility(raw.get("visib")),
        wdir=_int(raw.get("wdir")),
        wspd=_int(raw.get("wspd")),
        wgst=_int(raw.get("wgst")),
        wx_string=raw.get("wxString") or None,
    )


def parse_taf(raw: dict) -> TafDocument | None:
    """Parse one provider TAF object. Returns None without icaoId or validity."""
    icao = raw.get("icaoId")
    valid_from = _int(raw.get("validTimeFrom"))
    valid_to = _int(raw.get("validTimeTo"))
    if not icao or valid_from is None or valid_to is None:
        return None

    periods = []
    for item in raw.get("fcsts") or []:
        if not isinstance(item, dict):
            continue
        period = parse_period(item)
        if period is not None:
            periods.append(period)

    return TafDocument(
        icao_id=str(icao).upper(),
        valid_time_from=valid_from,
        valid_time_to=valid_to,
        fcsts=tuple(periods),
        issue_time=raw.get("issueTime"),
        raw_taf=raw.get("rawTAF"),
    )


def parse_metar(raw: dict) -> Metar | None:
    """Parse one provider METAR object. Returns None without icaoId."""
    icao = raw.get("icaoId")
    if not icao:
        return None
    return Metar(
        icao_id=str(icao).upper(),
        report_time=str(raw.get("reportTime") or ""),
        obs_time=_int(raw.get("obsTime")),
        flt_cat=FlightCategory.parse(raw.get("fltCat")),
        clouds=parse_clouds(raw.get("clouds")),
        visib=_visibility(raw.get("visib")),
        wdir=_int(raw.get("wdir")),
        wspd=_int(raw.get("wspd")),
        wgst=_int(raw.get("wgst")),
        temp=_float(raw.get("temp")),
        dewp=_float(raw.get("dewp")),
        altim=_float(raw.get("altim")),
        wx_string=raw.get("wxString") or None,
        raw_ob=str(raw.get("rawOb") or ""),
    )

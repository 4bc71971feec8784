"""Live evaluation of METAR/TAF pairs at "now" and at fixed horizons."""

from flightcat.forecast.ceiling import ceiling
from flightcat.forecast.classifier import (
    FOUR_TIER,
    ClassificationScheme,
    SchemeName,
    classify,
)
from flightcat.forecast.period import has_visibility
from flightcat.forecast.taf_engine import category_at
from flightcat.models.category import FlightCategory
from flightcat.models.common import HOUR
from flightcat.models.snapshot import HORIZON_HOURS, OutlookItem, TafSnapshot
from flightcat.models.weather import Metar, TafDocument

DEFAULT_GUST_WARNING_KT = 20
CURRENT = "current"
NEXT_HORIZON = {CURRENT: "2h", "2h": "4h", "4h": "8h", "8h": "24h", "24h": None}
OUTLOOK_HORIZONS = ("2h", "4h", "8h", "24h")

IMPROVING = "improving"
DETERIORATING = "deteriorating"


def horizon_time(now: int, horizon: str) -> int:
    hours = 0 if horizon == CURRENT else HORIZON_HOURS[horizon]
    return now + hours * HOUR


def snapshot_categories(
    taf: TafDocument | None, at: int, scheme: ClassificationScheme = FOUR_TIER
) -> TafSnapshot:
    return TafSnapshot(
        now=category_at(taf, at, scheme),
        h2=category_at(taf, horizon_time(at, "2h"), scheme),
        h4=category_at(taf, horizon_time(at, "4h"), scheme),
        h8=category_at(taf, horizon_time(at, "8h"), scheme),
        h24=category_at(taf, horizon_time(at, "24h"), scheme),
    )


def metar_category(
    metar: Metar | None, scheme: ClassificationScheme = FOUR_TIER
) -> FlightCategory | None:
    """Observed category.

    The provider's own category is used under the four-tier scheme; otherwise
    the METAR's clouds and visibility are classified here.
    """
    if metar is None:
        return None
    if scheme.name == SchemeName.FOUR_TIER and metar.flt_cat is not None:
        return metar.flt_cat
    ceil = ceiling(metar.clouds)
    if ceil is None and not has_visibility(metar.visib):
        return None
    return classify(ceil, metar.visib, scheme)


def display_category(
    metar: Metar | None,
    taf: TafDocument | None,
    horizon: str,
    now: int,
    scheme: ClassificationScheme = FOUR_TIER,
) -> FlightCategory | None:
    observed = metar_category(metar, scheme)
    if horizon not in OUTLOOK_HORIZONS:
        return observed
    return category_at(taf, horizon_time(now, horizon), scheme) or observed


def trend(
    metar: Metar | None,
    taf: TafDocument | None,
    horizon: str,
    now: int,
    scheme: ClassificationScheme = FOUR_TIER,
) -> str | None:
    """Direction of change from `horizon` to the next horizon in the chain."""
    next_horizon = NEXT_HORIZON.get(horizon)
    if next_horizon is None:
        return None
    current = display_category(metar, taf, horizon, now, scheme)
    if current is None:
        return None
    upcoming = display_category(metar, taf, next_horizon, now, scheme)
    if upcoming is None:
        return None
    if upcoming.severity > current.severity:
        return DETERIORATING
    if upcoming.severity < current.severity:
        return IMPROVING
    return None


def forecast_gust_at(taf: TafDocument | None, t: int) -> int:
    """Largest gust of any TAF period covering t, 0 when none."""
    if taf is None:
        return 0
    gusts = [p.wgst for p in taf.fcsts if p.covers(t) and p.wgst]
    return max(gusts, default=0)


def max_gust(metar: Metar | None, taf: TafDocument | None, now: int) -> int:
    """Largest of the observed gust and every TAF period not yet ended."""
    best = metar.wgst if metar is not None and metar.wgst else 0
    if taf is not None:
        for period in taf.fcsts:
            if period.time_to > now and period.wgst and period.wgst > best:
                best = period.wgst
    return best


def has_gust_warning(
    metar: Metar | None,
    taf: TafDocument | None,
    now: int,
    threshold_kt: int = DEFAULT_GUST_WARNING_KT,
) -> bool:
    return max_gust(metar, taf, now) >= threshold_kt


def forecast_outlook(
    taf: TafDocument | None,
    now: int,
    threshold_kt: int = DEFAULT_GUST_WARNING_KT,
    scheme: ClassificationScheme = FOUR_TIER,
) -> list[OutlookItem]:
    """Per-horizon categories and gusts; empty when no horizon is in range."""
    if taf is None or not taf.fcsts:
        return []
    times = {h: horizon_time(now, h) for h in OUTLOOK_HORIZONS}
    if not any(taf.is_valid_at(t) for t in times.values()):
        return []

    items = []
    for label in OUTLOOK_HORIZONS:
        t = times[label]
        in_range = taf.is_valid_at(t)
        gust = forecast_gust_at(taf, t) if in_range else 0
        items.append(
            OutlookItem(
                label=f"+{label}",
                hours=HORIZON_HOURS[label],
                in_range=in_range,
                category=category_at(taf, t, scheme) if in_range else None,
                gust=gust,
                gust_warning=gust >= threshold_kt,
            )
        )
    return items

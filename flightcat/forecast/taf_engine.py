"""TAF evaluation at an arbitrary point in time.

Category resolution (category_at):
    1. Outside [valid_time_from, valid_time_to) there is no answer.
    2. The first base period covering the target gives the base category.
    3. Every BECMG group that has started (time_from <= t) is folded in with
       the worst-case rule and stays in effect for the rest of the TAF.
    4. Every other change group (TEMPO, PROB, FM) covering the target is
       overlaid with the worst-case rule.

Weather resolution (weather_at) uses point values instead of severities:
started BECMG groups overwrite whatever fields they report, covering
TEMPO/PROB groups contribute the more extreme value per field (higher
wind and gust, lower ceiling). Direction is only ever replaced by BECMG.

The time_bec completion marker of BECMG groups is not used.

All functions are pure and never raise on missing optional fields.
"""

from dataclasses import replace

from flightcat.forecast.ceiling import ceiling
from flightcat.forecast.classifier import FOUR_TIER, ClassificationScheme
from flightcat.forecast.period import period_category
from flightcat.models.category import FlightCategory, worse
from flightcat.models.snapshot import ForecastWeather
from flightcat.models.weather import ChangeIndicator, ForecastPeriod, TafDocument


def _is_becmg(period: ForecastPeriod) -> bool:
    return period.fcst_change == ChangeIndicator.BECMG


def _in_authority(taf: TafDocument | None, t: int) -> bool:
    return bool(taf and taf.fcsts) and taf.is_valid_at(t)


def base_period_at(taf: TafDocument, t: int) -> ForecastPeriod | None:
    """First base period covering t, in document order."""
    for period in taf.base_periods:
        if period.covers(t):
            return period
    return None


def started_becmg_groups(taf: TafDocument, t: int) -> list[ForecastPeriod]:
    return [p for p in taf.change_groups if _is_becmg(p) and p.time_from <= t]


def temporary_groups_at(taf: TafDocument, t: int) -> list[ForecastPeriod]:
    return [p for p in taf.change_groups if not _is_becmg(p) and p.covers(t)]


def category_at(
    taf: TafDocument | None,
    t: int,
    scheme: ClassificationScheme = FOUR_TIER,
) -> FlightCategory | None:
    """Worst-case flight category forecast for time t (unix seconds)."""
    if not _in_authority(taf, t):
        return None

    base = base_period_at(taf, t)
    category = period_category(base, scheme) if base is not None else None

    for group in started_becmg_groups(taf, t):
        category = worse(category, period_category(group, scheme))

    for group in temporary_groups_at(taf, t):
        category = worse(category, period_category(group, scheme))

    return category


def _higher(a: int | None, b: int | None) -> int | None:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def _lower_ceiling(a: int | None, b: int | None) -> int | None:
    # None is "no ceiling", i.e. unlimited
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


def _overwrite(weather: ForecastWeather, group: ForecastPeriod) -> ForecastWeather:
    changes: dict[str, int | None] = {}
    if group.wspd is not None:
        changes["wspd"] = group.wspd
    if group.wgst is not None:
        changes["wgst"] = group.wgst
    if group.wdir is not None:
        changes["wdir"] = group.wdir
    if group.clouds:
        changes["ceiling"] = ceiling(group.clouds)
    return replace(weather, **changes) if changes else weather


def _overlay(weather: ForecastWeather, group: ForecastPeriod) -> ForecastWeather:
    return replace(
        weather,
        wspd=_higher(weather.wspd, group.wspd),
        wgst=_higher(weather.wgst, group.wgst),
        ceiling=_lower_ceiling(weather.ceiling, ceiling(group.clouds)),
    )


def weather_at(taf: TafDocument | None, t: int) -> ForecastWeather | None:
    """Wind, gust, direction and ceiling forecast for time t.

    Returns None outside the validity window; inside it, individual fields
    are None when nothing reports them.
    """
    if not _in_authority(taf, t):
        return None

    base = base_period_at(taf, t)
    if base is not None:
        weather = ForecastWeather(
            wspd=base.wspd, wgst=base.wgst, wdir=base.wdir, ceiling=ceiling(base.clouds)
        )
    else:
        weather = ForecastWeather()

    for group in started_becmg_groups(taf, t):
        weather = _overwrite(weather, group)

    for group in temporary_groups_at(taf, t):
        weather = _overlay(weather, group)

    return weather


def overlapping_base_periods(
    taf: TafDocument,
) -> list[tuple[ForecastPeriod, ForecastPeriod]]:
    """Pairs of base periods whose windows overlap.

    category_at resolves overlaps by taking the first match; callers use this
    to report them.
    """
    base = taf.base_periods
    overlaps = []
    for i, a in enumerate(base):
        for b in base[i + 1:]:
            if a.time_from < b.time_to and b.time_from < a.time_to:
                overlaps.append((a, b))
    return overlaps

"""Category of a single TAF period from its own clouds and visibility."""

from flightcat.forecast.ceiling import ceiling
from flightcat.forecast.classifier import FOUR_TIER, ClassificationScheme, classify
from flightcat.models.category import FlightCategory
from flightcat.models.weather import ForecastPeriod


def has_visibility(visib: object) -> bool:
    return visib is not None and visib != ""


def period_category(
    period: ForecastPeriod, scheme: ClassificationScheme = FOUR_TIER
) -> FlightCategory | None:
    """None when the period reports neither a ceiling nor a visibility."""
    ceil = ceiling(period.clouds)
    if ceil is None and not has_visibility(period.visib):
        return None
    return classify(ceil, period.visib, scheme)

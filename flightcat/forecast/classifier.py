"""Flight-category classification from ceiling and visibility.

Two threshold tables are provided. Each table lists, from most to least
severe, the category that applies when a value falls under a limit. A value
that passes every limit is VFR.

Four-tier (ceiling ft / visibility SM):
    LIFR:  ceiling < 500      or  visibility < 1
    IFR:   ceiling < 1000     or  visibility < 3
    MVFR:  ceiling <= 3000    or  visibility <= 5
    VFR:   otherwise

Two-tier (ceiling ft / visibility km):
    IFR:   ceiling <= 1500    or  visibility <= 5 km
    VFR:   otherwise
"""

import re
from dataclasses import dataclass
from enum import StrEnum

from flightcat.models.category import FlightCategory, worse

SM_TO_KM = 1.60934
PLUS_EPSILON = 0.1

_MIXED_FRACTION = re.compile(r"^(\d+)\s+(\d+)/(\d+)$")
_FRACTION = re.compile(r"^(\d+)/(\d+)$")
_LEADING_NUMBER = re.compile(r"^(\d+(?:\.\d*)?|\.\d+)")


class SchemeName(StrEnum):
    FOUR_TIER = "four-tier"
    TWO_TIER = "two-tier"


@dataclass(frozen=True)
class Threshold:
    category: FlightCategory
    limit: float
    inclusive: bool = False

    def matches(self, value: float) -> bool:
        return value <= self.limit if self.inclusive else value < self.limit


@dataclass(frozen=True)
class ClassificationScheme:
    name: SchemeName
    ceiling_thresholds: tuple[Threshold, ...]
    visibility_thresholds: tuple[Threshold, ...]
    visibility_factor: float = 1.0  # statute miles -> table unit


FOUR_TIER = ClassificationScheme(
    name=SchemeName.FOUR_TIER,
    ceiling_thresholds=(
        Threshold(FlightCategory.LIFR, 500),
        Threshold(FlightCategory.IFR, 1000),
        Threshold(FlightCategory.MVFR, 3000, inclusive=True),
    ),
    visibility_thresholds=(
        Threshold(FlightCategory.LIFR, 1),
        Threshold(FlightCategory.IFR, 3),
        Threshold(FlightCategory.MVFR, 5, inclusive=True),
    ),
)

TWO_TIER = ClassificationScheme(
    name=SchemeName.TWO_TIER,
    ceiling_thresholds=(Threshold(FlightCategory.IFR, 1500, inclusive=True),),
    visibility_thresholds=(Threshold(FlightCategory.IFR, 5, inclusive=True),),
    visibility_factor=SM_TO_KM,
)

SCHEMES = {s.name: s for s in (FOUR_TIER, TWO_TIER)}


def get_scheme(name: str | SchemeName) -> ClassificationScheme:
    return SCHEMES[SchemeName(name)]


def parse_visibility(visib: str | float | int | None) -> float | None:
    """Parse provider visibility in statute miles.

    "6+" means "6 or more" and parses to 6.1 so it ranks strictly above 6.
    Fractions ("1/2", "1 1/2") and a leading "M" (less than) are accepted.
    Anything unparseable returns None, i.e. no restriction.
    """
    if visib is None or isinstance(visib, bool):
        return None
    if isinstance(visib, (int, float)):
        return float(visib)

    text = str(visib).strip().upper()
    if not text:
        return None
    if text.startswith("M"):
        text = text[1:].strip()

    if "+" in text:
        m = _LEADING_NUMBER.match(text)
        return float(m.group(1)) + PLUS_EPSILON if m else None

    m = _MIXED_FRACTION.match(text)
    if m:
        whole, num, den = (int(g) for g in m.groups())
        return whole + num / den if den else None

    m = _FRACTION.match(text)
    if m:
        num, den = int(m.group(1)), int(m.group(2))
        return num / den if den else None

    m = _LEADING_NUMBER.match(text)
    return float(m.group(1)) if m else None


def _category_for(value: float | None, thresholds: tuple[Threshold, ...]) -> FlightCategory:
    if value is None:
        return FlightCategory.VFR
    for threshold in thresholds:
        if threshold.matches(value):
            return threshold.category
    return FlightCategory.VFR


def ceiling_category(
    ceiling_ft: int | None, scheme: ClassificationScheme = FOUR_TIER
) -> FlightCategory:
    return _category_for(ceiling_ft, scheme.ceiling_thresholds)


def visibility_category(
    visibility: str | float | int | None, scheme: ClassificationScheme = FOUR_TIER
) -> FlightCategory:
    vis_sm = parse_visibility(visibility)
    value = vis_sm * scheme.visibility_factor if vis_sm is not None else None
    return _category_for(value, scheme.visibility_thresholds)


def classify(
    ceiling_ft: int | None,
    visibility: str | float | int | None,
    scheme: ClassificationScheme = FOUR_TIER,
) -> FlightCategory:
    """Worse of the ceiling and visibility categories.

    A missing axis places no restriction, so classify(None, None) is VFR.
    """
    return worse(
        ceiling_category(ceiling_ft, scheme),
        visibility_category(visibility, scheme),
    )

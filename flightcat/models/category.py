"""Flight category ordering and the worst-case combination rule."""

from enum import StrEnum


class FlightCategory(StrEnum):
    """Flight category ordered by severity: VFR < MVFR < IFR < LIFR."""

    VFR = "VFR"
    MVFR = "MVFR"
    IFR = "IFR"
    LIFR = "LIFR"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def parse(cls, value: str | None) -> "FlightCategory | None":
        """Parse a provider category string, None when absent or unknown."""
        if not value:
            return None
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


_SEVERITY = {
    FlightCategory.VFR: 0,
    FlightCategory.MVFR: 1,
    FlightCategory.IFR: 2,
    FlightCategory.LIFR: 3,
}


def worse(
    a: FlightCategory | None, b: FlightCategory | None
) -> FlightCategory | None:
    """Return the more severe of two categories.

    None means "no data" and always loses: worse(None, X) == X.
    Ties keep the first argument.
    """
    if a is None:
        return b
    if b is None:
        return a
    return a if a.severity >= b.severity else b


def compare_categories(
    observed: FlightCategory | None, forecast: FlightCategory | None
) -> str | None:
    """Compare an observed category with a forecast one.

    Returns "exact", "worse" (observed more severe), "better", or None when
    either side is missing.
    """
    if observed is None or forecast is None:
        return None
    if observed == forecast:
        return "exact"
    if observed.severity > forecast.severity:
        return "worse"
    return "better"

"""Tests for single-period categories."""

from flightcat.forecast.classifier import TWO_TIER
from flightcat.forecast.period import has_visibility, period_category
from flightcat.models.category import FlightCategory
from flightcat.models.weather import CloudCover, CloudLayer, ForecastPeriod


def _period(clouds=(), visib=None) -> ForecastPeriod:
    return ForecastPeriod(time_from=0, time_to=3600, clouds=tuple(clouds), visib=visib)


class TestPeriodCategory:
    def test_no_data_is_none(self):
        assert period_category(_period()) is None

    def test_clouds_without_ceiling_and_no_visibility_is_none(self):
        p = _period(clouds=[CloudLayer(CloudCover.SCT, 1500)])
        assert period_category(p) is None

    def test_reported_clear_is_vfr(self):
        assert period_category(_period(visib="6+")) == FlightCategory.VFR

    def test_ceiling_only(self):
        p = _period(clouds=[CloudLayer(CloudCover.OVC, 700)])
        assert period_category(p) == FlightCategory.IFR

    def test_visibility_only(self):
        assert period_category(_period(visib="1/2")) == FlightCategory.LIFR

    def test_scheme_threaded_through(self):
        p = _period(clouds=[CloudLayer(CloudCover.BKN, 1400)], visib=10)
        assert period_category(p) == FlightCategory.MVFR
        assert period_category(p, TWO_TIER) == FlightCategory.IFR


class TestHasVisibility:
    def test_values(self):
        assert has_visibility("6+")
        assert has_visibility(0)
        assert not has_visibility(None)
        assert not has_visibility("")

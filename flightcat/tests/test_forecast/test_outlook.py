"""Tests for live outlook evaluation: horizons, trend and gusts."""

import pytest

from flightcat.forecast import outlook
from flightcat.forecast.classifier import TWO_TIER
from flightcat.ingest.awc_parser import parse_metar, parse_taf
from flightcat.models.category import FlightCategory
from flightcat.models.weather import Metar

T0 = 1717200000
H = 3600
NOW = T0 + 6 * H


@pytest.fixture
def taf(taf_json):
    return parse_taf(taf_json)


@pytest.fixture
def metar(metar_json):
    return parse_metar(metar_json)


class TestSnapshotCategories:
    def test_fixed_horizons(self, taf):
        snap = outlook.snapshot_categories(taf, NOW)
        assert snap.as_dict() == {
            "now": "VFR",
            "2h": "VFR",
            "4h": "IFR",
            "8h": "LIFR",
            "24h": None,
        }

    def test_no_document(self):
        snap = outlook.snapshot_categories(None, NOW)
        assert set(snap.as_dict().values()) == {None}


class TestMetarCategory:
    def test_provider_category_under_four_tier(self, metar):
        assert outlook.metar_category(metar) == FlightCategory.MVFR

    def test_recomputed_under_two_tier(self, metar):
        assert outlook.metar_category(metar, TWO_TIER) == FlightCategory.VFR

    def test_classified_when_provider_silent(self):
        m = Metar(icao_id="LOWI", report_time="", visib="2")
        assert outlook.metar_category(m) == FlightCategory.IFR

    def test_no_data(self):
        assert outlook.metar_category(None) is None
        assert outlook.metar_category(Metar(icao_id="LOWI", report_time="")) is None


class TestDisplayAndTrend:
    def test_current_shows_observation(self, metar, taf):
        assert outlook.display_category(metar, taf, outlook.CURRENT, NOW) == FlightCategory.MVFR

    def test_now_label_shows_observation(self, metar, taf):
        assert outlook.display_category(metar, taf, "now", NOW) == FlightCategory.MVFR

    def test_future_horizons_use_forecast(self, metar, taf):
        assert outlook.display_category(metar, taf, "2h", NOW) == FlightCategory.VFR
        assert outlook.display_category(metar, taf, "4h", NOW) == FlightCategory.IFR

    def test_falls_back_to_observation(self, metar, taf):
        assert outlook.display_category(metar, taf, "24h", NOW) == FlightCategory.MVFR
        assert outlook.display_category(metar, None, "2h", NOW) == FlightCategory.MVFR

    def test_trend(self, metar, taf):
        assert outlook.trend(metar, taf, outlook.CURRENT, NOW) == outlook.IMPROVING
        assert outlook.trend(metar, taf, "2h", NOW) == outlook.DETERIORATING
        assert outlook.trend(metar, taf, "24h", NOW) is None

    def test_trend_without_data(self):
        assert outlook.trend(None, None, outlook.CURRENT, NOW) is None


class TestGusts:
    def test_forecast_gust_at(self, taf):
        assert outlook.forecast_gust_at(taf, T0 + 15 * H) == 35
        assert outlook.forecast_gust_at(taf, NOW) == 0
        assert outlook.forecast_gust_at(None, NOW) == 0

    def test_max_gust_includes_future_periods(self, metar, taf):
        assert outlook.max_gust(metar, taf, NOW) == 35

    def test_max_gust_ignores_ended_periods(self, metar, taf):
        assert outlook.max_gust(metar, taf, T0 + 16 * H) == 26

    def test_max_gust_nothing(self):
        assert outlook.max_gust(None, None, NOW) == 0

    def test_warning_threshold(self, metar, taf):
        assert outlook.has_gust_warning(metar, taf, NOW)
        assert not outlook.has_gust_warning(metar, taf, NOW, threshold_kt=40)


class TestForecastOutlook:
    def test_items(self, taf):
        items = outlook.forecast_outlook(taf, NOW)
        assert [i.label for i in items] == ["+2h", "+4h", "+8h", "+24h"]
        assert [i.hours for i in items] == [2, 4, 8, 24]
        assert [i.category for i in items] == [
            FlightCategory.VFR,
            FlightCategory.IFR,
            FlightCategory.LIFR,
            None,
        ]
        assert items[2].gust == 35
        assert items[2].gust_warning
        assert not items[3].in_range
        assert items[3].gust == 0

    def test_empty_when_out_of_range(self, taf):
        assert outlook.forecast_outlook(taf, T0 + 30 * H) == []

    def test_empty_without_document(self):
        assert outlook.forecast_outlook(None, NOW) == []

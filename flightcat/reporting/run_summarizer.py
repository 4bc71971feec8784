"""Run summarizer: aggregates fetch pipeline outputs into a RunSummary."""

from flightcat.models.category import FlightCategory
from flightcat.models.reporting import RunSummary

NO_DATA = "NODATA"


class RunSummarizer:
    def __init__(self, run_id: str):
        self.summary = RunSummary(run_id=run_id)

    def record_request(self, airports: int) -> None:
        self.summary.airports_requested = airports

    def record_metars(self, fetched: int, stored: int) -> None:
        self.summary.metars_fetched = fetched
        self.summary.metars_stored = stored

    def record_tafs(self, fetched: int, stored: int) -> None:
        self.summary.tafs_fetched = fetched
        self.summary.tafs_stored = stored

    def record_coverage(self, metar_airports: list[str], taf_airports: list[str]) -> None:
        """Airports that returned a METAR and a TAF this cycle."""
        self.summary.metar_airports = sorted(metar_airports)
        self.summary.taf_airports = sorted(taf_airports)

    def record_category(self, category: FlightCategory | None) -> None:
        key = category.value if category is not None else NO_DATA
        self.summary.category_counts[key] = self.summary.category_counts.get(key, 0) + 1

    def record_gust_warning(self, icao_id: str) -> None:
        self.summary.gust_warnings.append(icao_id)

    def record_overlaps(self, count: int) -> None:
        self.summary.overlap_warnings += count

    def record_duration(self, seconds: float) -> None:
        self.summary.duration_seconds = seconds

    def record_error(self, error: str) -> None:
        self.summary.errors.append(error)

    def finalize(self) -> RunSummary:
        return self.summary

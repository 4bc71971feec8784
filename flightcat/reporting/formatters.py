"""Output formatters for run summaries and airport status."""

import json

from flightcat.models.reporting import AirportStatus, RunSummary

_ORDER = ("VFR", "MVFR", "IFR", "LIFR", "NODATA")
_TREND_MARK = {"improving": "↑", "deteriorating": "↓"}


def format_summary_text(s: RunSummary) -> str:
    """Plain text summary for logging."""
    lines = [
        f"=== Fetch Complete | Run {s.run_id[:8]} ===",
        f"Airports: {s.airports_requested} requested",
        f"METAR: {s.metars_fetched} fetched, {s.metars_stored} new",
        f"TAF: {s.tafs_fetched} fetched, {s.tafs_stored} new",
    ]
    if s.category_counts:
        counts = ", ".join(
            f"{k} {s.category_counts[k]}" for k in _ORDER if k in s.category_counts
        )
        lines.append(f"Categories: {counts}")
    if s.gust_warnings:
        lines.append(f"Gust warnings: {', '.join(s.gust_warnings)}")
    if s.overlap_warnings:
        lines.append(f"Overlapping TAF base periods: {s.overlap_warnings}")
    if s.errors:
        lines.append(f"Errors: {len(s.errors)}")
    lines.append(f"Duration: {s.duration_seconds:.1f}s")
    return "\n".join(lines)


def format_summary_json(s: RunSummary) -> str:
    """JSON summary for programmatic consumption."""
    data = {
        "run_id": s.run_id,
        "airports_requested": s.airports_requested,
        "metars_fetched": s.metars_fetched,
        "metars_stored": s.metars_stored,
        "tafs_fetched": s.tafs_fetched,
        "tafs_stored": s.tafs_stored,
        "metar_airports": s.metar_airports,
        "taf_airports": s.taf_airports,
        "category_counts": s.category_counts,
        "gust_warnings": s.gust_warnings,
        "overlap_warnings": s.overlap_warnings,
        "duration_seconds": s.duration_seconds,
        "errors": s.errors,
    }
    return json.dumps(data, indent=2)


def format_status_table(statuses: list[AirportStatus]) -> str:
    """One line per airport: observed category, horizons, trend, gusts."""
    header = f"{'ICAO':<5} {'NOW':<5} {'+2h':<5} {'+4h':<5} {'+8h':<5} {'+24h':<5} {'':<2} GUST"
    lines = [header]
    for st in statuses:
        cells = [st.observed or "-"] + [
            st.forecast.get(h) or "-" for h in ("2h", "4h", "8h", "24h")
        ]
        gust = f"G{st.max_gust}kt" if st.max_gust else ""
        if st.gust_warning:
            gust += " !"
        lines.append(
            f"{st.icao_id:<5} "
            + " ".join(f"{c:<5}" for c in cells)
            + f" {_TREND_MARK.get(st.trend or '', ''):<2} {gust}".rstrip()
        )
    return "\n".join(lines)

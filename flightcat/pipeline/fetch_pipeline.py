"""Fetch pipeline: one METAR/TAF ingestion cycle."""

import json
import logging
import time
import uuid

from flightcat.config.loader import snapshot_config
from flightcat.config.schema import FlightcatConfig
from flightcat.forecast import outlook
from flightcat.forecast.ceiling import ceiling
from flightcat.forecast.classifier import get_scheme
from flightcat.forecast.taf_engine import overlapping_base_periods
from flightcat.ingest.awc_client import AviationWeatherClient
from flightcat.ingest.weather_fetcher import WeatherFetcher
from flightcat.models.common import epoch_now
from flightcat.models.reporting import RunSummary
from flightcat.reporting.formatters import format_summary_text
from flightcat.reporting.run_summarizer import RunSummarizer
from flightcat.storage import metar_repo, state_repo, taf_repo
from flightcat.storage.database import connect, run_migrations

logger = logging.getLogger(__name__)


def build_fetcher(config: FlightcatConfig) -> WeatherFetcher:
    provider = config.provider
    client = AviationWeatherClient(
        base_url=provider.base_url,
        user_agent=provider.user_agent,
        timeout=provider.timeout_seconds,
        max_retries=provider.max_retries,
        retry_base_delay=provider.retry_base_delay,
    )
    return WeatherFetcher(
        client,
        batch_size=provider.batch_size,
        cache_ttl=config.ops.cache_ttl_seconds,
    )


class FetchPipeline:
    def __init__(
        self,
        config: FlightcatConfig,
        db_path: str = "data/flightcat.db",
        fetcher: WeatherFetcher | None = None,
    ):
        self.config = config
        self.db_path = db_path
        self.fetcher = fetcher or build_fetcher(config)

    def run(self, force: bool = False, now: int | None = None) -> RunSummary:
        """Execute a full fetch cycle."""
        start_time = time.monotonic()
        run_id = str(uuid.uuid4())
        fetch_time = now if now is not None else epoch_now()
        scheme = get_scheme(self.config.classification.scheme)
        threshold = self.config.classification.gust_warning_kt

        # 1. INIT
        conn = connect(self.db_path)
        run_migrations(conn)

        c_hash = snapshot_config(self.config, conn)
        state_repo.create_run(conn, run_id, c_hash)
        summarizer = RunSummarizer(run_id)

        if state_repo.is_paused(conn):
            logger.warning("System paused, aborting fetch")
            summarizer.record_error("System paused")
            summary = summarizer.finalize()
            state_repo.complete_run(conn, run_id, "aborted")
            conn.close()
            return summary

        try:
            # 2. FETCH
            icaos = self.config.enabled_icaos
            summarizer.record_request(len(icaos))
            metars = self.fetcher.fetch_metars(icaos, force=force)
            tafs = self.fetcher.fetch_tafs(icaos, force=force)
            logger.info(
                "Fetched %d METARs, %d TAFs for %d airports",
                len(metars), len(tafs), len(icaos),
            )
            summarizer.record_coverage(list(metars), list(tafs))

            # 3. STORE METARS
            metars_stored = 0
            for icao, fetched in metars.items():
                row_id = metar_repo.store_metar(
                    conn,
                    fetch_time,
                    fetched.metar,
                    ceiling(fetched.metar.clouds),
                    json.dumps(fetched.raw),
                )
                if row_id is not None:
                    metars_stored += 1
            summarizer.record_metars(len(metars), metars_stored)

            # 4. EVALUATE + STORE TAFS
            tafs_stored = 0
            for icao, fetched in tafs.items():
                for a, b in overlapping_base_periods(fetched.taf):
                    logger.warning(
                        "%s TAF base periods overlap: %d-%d and %d-%d, first match wins",
                        icao, a.time_from, a.time_to, b.time_from, b.time_to,
                    )
                    summarizer.record_overlaps(1)
                snapshot = outlook.snapshot_categories(fetched.taf, fetch_time, scheme)
                row_id = taf_repo.store_taf(
                    conn, fetch_time, fetched.taf, snapshot, json.dumps(fetched.raw)
                )
                if row_id is not None:
                    tafs_stored += 1
            summarizer.record_tafs(len(tafs), tafs_stored)

            # 5. CURRENT CONDITIONS
            for icao in icaos:
                metar = metars[icao].metar if icao in metars else None
                taf = tafs[icao].taf if icao in tafs else None
                summarizer.record_category(outlook.metar_category(metar, scheme))
                if outlook.has_gust_warning(metar, taf, fetch_time, threshold):
                    summarizer.record_gust_warning(icao)

            # 6. REPORT
            summarizer.record_duration(time.monotonic() - start_time)
            summary = summarizer.finalize()

            state_repo.complete_run(
                conn,
                run_id,
                "completed",
                summary_json=json.dumps({
                    "category_counts": summary.category_counts,
                    "gust_warnings": summary.gust_warnings,
                    "overlap_warnings": summary.overlap_warnings,
                }),
                airports_requested=summary.airports_requested,
                metars_fetched=summary.metars_fetched,
                metars_stored=summary.metars_stored,
                tafs_fetched=summary.tafs_fetched,
                tafs_stored=summary.tafs_stored,
            )

            logger.info("\n%s", format_summary_text(summary))
            return summary

        except Exception as e:
            logger.exception("Fetch pipeline failed")
            summarizer.record_error(str(e))
            summarizer.record_duration(time.monotonic() - start_time)
            summary = summarizer.finalize()
            state_repo.complete_run(
                conn, run_id, "failed", error_message=str(e)
            )
            return summary

        finally:
            conn.close()

"""Weather fetcher: batched METAR/TAF retrieval with a short-lived cache."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from flightcat.ingest.awc_client import AviationWeatherClient
from flightcat.ingest.awc_parser import parse_metar, parse_taf
from flightcat.models.weather import Metar, TafDocument

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 40
DEFAULT_CACHE_TTL = 120.0


@dataclass(frozen=True)
class FetchedMetar:
    metar: Metar
    raw: dict


@dataclass(frozen=True)
class FetchedTaf:
    taf: TafDocument
    raw: dict


class ProviderError(Exception):
    """A batch could not be loaded from the weather data provider."""


class WeatherFetcher:
    def __init__(
        self,
        client: AviationWeatherClient,
        batch_size: int = DEFAULT_BATCH_SIZE,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.batch_size = batch_size
        self.cache_ttl = cache_ttl
        self._clock = clock
        self._cache: dict[tuple[str, str], tuple[float, list[dict]]] = {}
        self._lock = threading.Lock()

    def fetch_metars(
        self, icao_ids: list[str], force: bool = False, strict: bool = False
    ) -> dict[str, FetchedMetar]:
        """Latest METAR per airport; airports without a report are absent.

        With ``strict`` a failing batch raises ProviderError instead of
        being skipped.
        """
        results: dict[str, FetchedMetar] = {}
        for raw in self._fetch("metar", icao_ids, force, strict):
            metar = parse_metar(raw)
            if metar is not None:
                results[metar.icao_id] = FetchedMetar(metar, raw)
        return results

    def fetch_tafs(
        self, icao_ids: list[str], force: bool = False, strict: bool = False
    ) -> dict[str, FetchedTaf]:
        """Current TAF per airport; airports without a TAF are absent."""
        results: dict[str, FetchedTaf] = {}
        for raw in self._fetch("taf", icao_ids, force, strict):
            taf = parse_taf(raw)
            if taf is not None:
                results[taf.icao_id] = FetchedTaf(taf, raw)
        return results

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    def _fetch(
        self, product: str, icao_ids: list[str], force: bool, strict: bool
    ) -> list[dict]:
        items: list[dict] = []
        for start in range(0, len(icao_ids), self.batch_size):
            batch = icao_ids[start:start + self.batch_size]
            items.extend(self._fetch_batch(product, batch, force, strict))
        return items

    def _cached(self, key: tuple[str, str], now: float) -> list[dict] | None:
        with self._lock:
            cached = self._cache.get(key)
            if cached is None:
                return None
            stored_at, data = cached
            if now - stored_at <= self.cache_ttl:
                logger.debug(
                    "%s cache hit for %s (age %.0fs)", key[0].upper(), key[1], now - stored_at
                )
                return data
            self._cache.pop(key, None)
            return None

    def _store(self, key: tuple[str, str], now: float, data: list[dict]) -> None:
        with self._lock:
            expired = [
                k for k, (stored_at, _) in self._cache.items()
                if now - stored_at > self.cache_ttl
            ]
            for k in expired:
                self._cache.pop(k, None)
            self._cache[key] = (now, data)

    def _fetch_batch(
        self, product: str, batch: list[str], force: bool, strict: bool
    ) -> list[dict]:
        """Fetch one batch, serving from cache when fresh.

        Only successful responses are cached. A failing batch is logged and
        yields nothing, so other batches still load.
        """
        key = (product, ",".join(batch))
        now = self._clock()
        if not force:
            data = self._cached(key, now)
            if data is not None:
                return data

        try:
            if product == "metar":
                data = self.client.get_metars(batch)
            else:
                data = self.client.get_tafs(batch)
        except Exception as e:
            logger.exception("Failed to fetch %s for %s", product.upper(), key[1])
            if strict:
                raise ProviderError(f"{product.upper()} fetch failed for {key[1]}") from e
            return []

        data = [item for item in data if isinstance(item, dict)]
        self._store(key, now, data)
        return data

"""aviationweather.gov data API client with retry and rate limit handling."""

import logging
import time

import httpx

logger = logging.getLogger(__name__)

AWC_BASE_URL = "https://aviationweather.gov"
DEFAULT_USER_AGENT = "flightcat/0.1.0"


class AviationWeatherClient:
    def __init__(
        self,
        base_url: str = AWC_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_base_delay: float = 5.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    def get_metars(self, icao_ids: list[str]) -> list[dict]:
        """Fetch the latest METAR objects for a batch of ICAO codes."""
        return self._get_json("metar", icao_ids)

    def get_tafs(self, icao_ids: list[str]) -> list[dict]:
        """Fetch the current TAF objects for a batch of ICAO codes."""
        return self._get_json("taf", icao_ids)

    def _get_json(self, product: str, icao_ids: list[str]) -> list[dict]:
        """GET /api/data/<product>?ids=...&format=json.

        Retries on 503/429 and transport errors with exponential backoff.
        An empty body (204 or no content) means no reports.
        """
        if not icao_ids:
            return []
        url = f"{self.base_url}/api/data/{product}"
        params = {"ids": ",".join(icao_ids), "format": "json"}
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}

        last_error: Exception | None = None
        for attempt in range(self.max_retries + 1):
            try:
                resp = httpx.get(url, params=params, headers=headers, timeout=self.timeout)
                if resp.status_code in (503, 429) and attempt < self.max_retries:
                    delay = self.retry_base_delay * (2**attempt)
                    logger.warning(
                        "AWC %s returned %d, retrying in %.1fs (attempt %d/%d)",
                        product, resp.status_code, delay, attempt + 1, self.max_retries,
                    )
                    time.sleep(delay)
                    continue
                resp.raise_for_status()
                if resp.status_code == 204 or not resp.content.strip():
                    return []
                data = resp.json()
                return data if isinstance(data, list) else []
            except httpx.RequestError as e:
                last_error = e
                if attempt < self.max_retries:
                    delay = self.retry_base_delay * (2**attempt)
                    logger.warning(
                        "AWC request error, retrying in %.1fs: %s", delay, e
                    )
                    time.sleep(delay)
                    continue
                raise

        assert last_error is not None
        raise last_error

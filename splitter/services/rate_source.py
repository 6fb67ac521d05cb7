"""Exchange-rate tables from the remote currency API."""
import logging
import math
import os
import time
from typing import Callable, Optional

import requests

from splitter.errors import NetworkError, ParseError, RateError
from splitter.schemas import RateTable

logger = logging.getLogger(__name__)

RATE_API_URL = os.getenv(
    "RATE_API_URL",
    "https://cdn.jsdelivr.net/npm/@fawazahmed0/currency-api@latest/v1/currencies/{base}.json",
)
RATE_FETCH_TIMEOUT = float(os.getenv("RATE_FETCH_TIMEOUT", "5"))
FETCH_ATTEMPTS = 2
RETRY_BACKOFF_SECONDS = 0.2


def parse_rate_response(base: str, data, fetched_at: Optional[float] = None) -> RateTable:
    """
    Build a RateTable from a decoded provider document.

    The document looks like {"date": "2025-12-06", "twd": {"usd": 0.031, ...}}.
    The base currency itself is always present at 1.0.
    """
    base_key = base.strip().lower()
    if not isinstance(data, dict):
        raise ParseError("rate response is not a JSON object")

    date = data.get("date")
    if not isinstance(date, str):
        date = ""

    raw_rates = data.get(base_key)
    if raw_rates is None:
        raise ParseError(f"no rates for {base_key} in response")
    if not isinstance(raw_rates, dict):
        raise ParseError(f"rates for {base_key} are not an object")

    rates: dict[str, float] = {}
    for code, rate in raw_rates.items():
        if isinstance(rate, bool) or not isinstance(rate, (int, float)):
            raise ParseError(f"invalid rate for {code}: {rate!r}")
        try:
            value = float(rate)
        except (OverflowError, ValueError) as e:
            raise ParseError(f"rate for {code} out of range") from e
        if not math.isfinite(value):
            raise ParseError(f"rate for {code} out of range")
        rates[code.lower()] = value
    rates[base_key] = 1.0

    return RateTable(
        base=base_key,
        rates=rates,
        date=date,
        fetched_at=time.time() if fetched_at is None else fetched_at,
    )


class HTTPRateSource:
    """Fetches one base currency's rate table per call."""

    def __init__(self, url_template: str = RATE_API_URL, timeout: float = RATE_FETCH_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.url_template = url_template
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, base: str) -> RateTable:
        base_key = base.strip().lower()
        url = self.url_template.format(base=base_key)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"rate request failed: {e}") from e

        if response.status_code != 200:
            raise NetworkError(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(f"invalid JSON from rate provider: {e}") from e

        return parse_rate_response(base_key, data)


def fetch_with_retry(
    source,
    base: str,
    attempts: int = FETCH_ATTEMPTS,
    backoff: float = RETRY_BACKOFF_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> RateTable:
    """Call source.fetch up to `attempts` times with linear backoff; re-raise the last error."""
    attempts = max(attempts, 1)
    last_error: Optional[RateError] = None
    for attempt in range(1, attempts + 1):
        try:
            return source.fetch(base)
        except RateError as e:
            last_error = e
            logger.warning("rate fetch for %s failed (attempt %d/%d): %s", base, attempt, attempts, e)
            if attempt < attempts:
                sleep(backoff * attempt)
    raise last_error

"""Convert bill amounts into a common base currency."""
import logging
import math
import os
import time
from typing import Callable

from splitter.errors import AmountError, MissingRateError, RateError
from splitter.schemas import Bill, RateTable
from splitter.services.rate_cache import RateCache
from splitter.services.rate_source import fetch_with_retry

logger = logging.getLogger(__name__)

RATE_CACHE_TTL_SECONDS = float(os.getenv("RATE_CACHE_TTL_SECONDS", str(30 * 60)))


class CurrencyNormalizer:
    def __init__(
        self,
        cache: RateCache,
        source,
        ttl: float = RATE_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        fetch: Callable[..., RateTable] = fetch_with_retry,
    ):
        self.cache = cache
        self.source = source
        self.ttl = ttl
        self.clock = clock
        self.fetch = fetch

    def rate_table(self, base: str) -> RateTable:
        """
        Return a usable rate table for `base`.

        Fresh cached tables are used as-is. A stale table triggers one refresh
        and is kept if the refresh fails. Without any cached table the fetch
        error propagates.
        """
        base_key = base.strip().lower()
        cached = self.cache.get(base_key)

        if cached is not None:
            if self.clock() - cached.fetched_at < self.ttl:
                return cached
            try:
                fresh = self.fetch(self.source, base_key)
            except RateError as e:
                logger.warning("refresh of %s rates failed, using table from %s: %s",
                               base_key, cached.date or "unknown date", e)
                return cached
            self.cache.set(base_key, fresh)
            logger.info("refreshed %s rates (date %s)", base_key, fresh.date)
            return fresh

        fresh = self.fetch(self.source, base_key)
        self.cache.set(base_key, fresh)
        logger.info("fetched %s rates (date %s)", base_key, fresh.date)
        return fresh

    def normalize(self, base: str, bills: list[Bill]) -> tuple[list[Bill], str]:
        """
        Fill in amount_base on copies of `bills`; return them with the rate date.

        Raises RateError when no rate table can be obtained and
        MissingRateError when a bill's currency has no usable rate.
        """
        base_key = base.strip().lower()
        table = self.rate_table(base_key)

        converted: list[Bill] = []
        for bill in bills:
            cur = (bill.currency or "").strip().lower() or base_key
            if cur == base_key:
                amount_base = bill.amount
            else:
                rate = table.rates.get(cur)
                if not rate:
                    raise MissingRateError(cur, table.date)
                amount_base = bill.amount / rate
                if not math.isfinite(amount_base):
                    raise AmountError(bill.id)
            converted.append(bill.model_copy(update={"amount_base": amount_base}))
        return converted, table.date

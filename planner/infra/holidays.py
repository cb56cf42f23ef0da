"""Public-holiday lookup used by the default work-mode oracle.

Holidays are fetched per year from a JSON endpoint whose keys are
YYYY-MM-DD dates, and kept in an injected per-process cache.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Callable

import httpx

from planner.core.calendar_math import format_date_local, normalize_to_midnight
from planner.infra.resilience import RetryPolicy, is_transient_error, retry_async

LOGGER = logging.getLogger(__name__)

DEFAULT_HOLIDAYS_URL = "https://calendrier.api.gouv.fr/jours-feries/metropole/{year}.json"


class HolidayCache:
    """Holiday sets keyed by year; lives as long as the process that owns it."""

    def __init__(self) -> None:
        self._years: dict[int, frozenset[str]] = {}

    def get(self, year: int) -> frozenset[str] | None:
        return self._years.get(year)

    def put(self, year: int, holidays: frozenset[str]) -> None:
        self._years[year] = holidays

    def clear(self) -> None:
        self._years.clear()

    def __contains__(self, year: object) -> bool:
        return year in self._years


class HolidayProvider:
    def __init__(
        self,
        cache: HolidayCache,
        *,
        url_template: str = DEFAULT_HOLIDAYS_URL,
        timeout_seconds: float = 10.0,
        retry_policy: RetryPolicy | None = None,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        enabled: bool = True,
    ) -> None:
        self._cache = cache
        self._url_template = url_template
        self._timeout_seconds = timeout_seconds
        self._retry_policy = retry_policy or RetryPolicy()
        self._client_factory = client_factory or (lambda: httpx.AsyncClient(timeout=timeout_seconds))
        self._enabled = enabled

    async def holidays_for_year(self, year: int) -> frozenset[str]:
        cached = self._cache.get(year)
        if cached is not None:
            return cached
        if not self._enabled:
            return frozenset()
        try:
            holidays = await self._fetch(year)
        except (httpx.HTTPError, ValueError, asyncio.TimeoutError):
            # Not cached: the next lookup retries the endpoint.
            LOGGER.exception("holidays fetch failed year=%s", year)
            return frozenset()
        self._cache.put(year, holidays)
        LOGGER.info("holidays loaded year=%s count=%s", year, len(holidays))
        return holidays

    async def is_holiday(self, day: date | datetime) -> bool:
        value = normalize_to_midnight(day)
        holidays = await self.holidays_for_year(value.year)
        return format_date_local(value) in holidays

    async def _fetch(self, year: int) -> frozenset[str]:
        url = self._url_template.format(year=year)

        async def _call() -> frozenset[str]:
            async with self._client_factory() as client:
                response = await client.get(url)
                response.raise_for_status()
                payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError("holidays payload is not an object")
            return frozenset(key for key in payload if isinstance(key, str))

        return await retry_async(
            _call,
            policy=self._retry_policy,
            timeout_seconds=self._timeout_seconds,
            logger=LOGGER,
            name="holidays.fetch",
            is_retryable=is_transient_error,
        )

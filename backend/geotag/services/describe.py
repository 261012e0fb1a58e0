from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import httpx

from geotag.codec import PRECISION_KM, DecodeFailure, is_valid, normalize, parse
from geotag.core.settings import Settings, get_settings


logger = logging.getLogger(__name__)


class DescribeProviderError(Exception):
    pass


class DescribeRateLimitedError(DescribeProviderError):
    pass


class DescribeTimeoutError(DescribeProviderError):
    pass


@dataclass(frozen=True)
class LocationDescription:
    formatted: str
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None


def _first(address: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = address.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def description_from_payload(data: Any) -> LocationDescription | None:
    """Flatten a Nominatim reverse payload; None when it has no address."""

    if not isinstance(data, dict):
        return None
    address = data.get("address")
    if not isinstance(address, dict):
        return None

    neighborhood = _first(
        address, "neighbourhood", "suburb", "district", "quarter", "residential"
    )
    city = _first(address, "city", "town", "municipality", "village", "hamlet")
    state = _first(address, "state", "province", "region", "county", "state_district")
    country = _first(address, "country")

    parts: list[str] = []
    if neighborhood:
        parts.append(neighborhood)
    if city and city != neighborhood:
        parts.append(city)
    if country:
        parts.append(country)

    display_name = data.get("display_name")
    fallback = display_name if isinstance(display_name, str) and display_name else "Unknown location"

    return LocationDescription(
        formatted=", ".join(parts) or fallback,
        neighborhood=neighborhood,
        city=city,
        state=state,
        country=country,
    )


class NominatimClient:
    """Minimal Nominatim reverse-geocoding client with 429/5xx exponential backoff.

    Public instance policy is at most 1 request/s; callers are expected to sit
    behind `DescriptionCache` so each cell is looked up once.
    """

    def __init__(
        self,
        *,
        base_url: str,
        user_agent: str,
        zoom: int,
        timeout_s: float,
        max_retries: int,
        backoff_base_s: float,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self._url = base_url.rstrip("/") + "/reverse"
        self._headers = {"User-Agent": user_agent}
        self._zoom = zoom
        self._timeout = timeout_s
        self._max_retries = max(1, max_retries)
        self._backoff_base = backoff_base_s
        self._client = http_client
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> NominatimClient:
        return cls(
            base_url=settings.nominatim_base_url,
            user_agent=settings.nominatim_user_agent,
            zoom=int(settings.nominatim_zoom),
            timeout_s=float(settings.nominatim_timeout_s),
            max_retries=int(settings.nominatim_max_retries),
            backoff_base_s=float(settings.nominatim_backoff_base_s),
            http_client=http_client,
            sleep=sleep,
        )

    async def _get_json(self, *, params: dict[str, Any]) -> Any:
        close_client = False
        client = self._client
        if client is None:
            close_client = True
            client = httpx.AsyncClient()

        try:
            for attempt in range(self._max_retries):
                try:
                    resp = await client.get(
                        self._url,
                        params=params,
                        headers=self._headers,
                        timeout=self._timeout,
                    )
                except httpx.TimeoutException as e:
                    raise DescribeTimeoutError("Nominatim request timed out") from e
                except httpx.HTTPError as e:
                    raise DescribeProviderError("Nominatim request failed") from e

                if resp.status_code == 429:
                    if attempt >= self._max_retries - 1:
                        raise DescribeRateLimitedError("Nominatim rate limited")
                    await self._sleep(self._backoff_base * (2**attempt))
                    continue

                if 500 <= resp.status_code < 600:
                    if attempt >= self._max_retries - 1:
                        raise DescribeProviderError(
                            f"Nominatim server error: {resp.status_code}"
                        )
                    await self._sleep(self._backoff_base * (2**attempt))
                    continue

                if resp.status_code != 200:
                    raise DescribeProviderError(
                        f"Nominatim unexpected status: {resp.status_code}"
                    )
                try:
                    return resp.json()
                except ValueError as e:
                    raise DescribeProviderError("Nominatim returned invalid JSON") from e

            raise DescribeProviderError("Nominatim request retries exhausted")
        finally:
            if close_client:
                await client.aclose()

    async def reverse(self, *, latitude: float, longitude: float) -> LocationDescription | None:
        params = {
            "format": "json",
            "lat": latitude,
            "lon": longitude,
            "addressdetails": 1,
            "zoom": self._zoom,
        }
        return description_from_payload(await self._get_json(params=params))


def _consume_exception(task: asyncio.Future[Any]) -> None:
    # Every waiter may have been cancelled; mark the failure as retrieved.
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Shared description lookup failed", exc_info=task.exception())


class DescriptionCache:
    """In-memory LRU of descriptions keyed by canonical token.

    Concurrent lookups for the same token share one provider call. Provider
    failures are not cached; "no address here" answers are.
    """

    def __init__(self, *, max_entries: int = 4096) -> None:
        self._max_entries = max(1, max_entries)
        self._entries: OrderedDict[str, LocationDescription | None] = OrderedDict()
        self._inflight: dict[str, asyncio.Future[LocationDescription | None]] = {}

    def __contains__(self, token: object) -> bool:
        return token in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, token: str) -> LocationDescription | None:
        if token not in self._entries:
            return None
        self._entries.move_to_end(token)
        return self._entries[token]

    def put(self, token: str, description: LocationDescription | None) -> None:
        self._entries[token] = description
        self._entries.move_to_end(token)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_fetch(
        self,
        token: str,
        fetch: Callable[[], Awaitable[LocationDescription | None]],
    ) -> LocationDescription | None:
        if token in self._entries:
            return self.get(token)

        task = self._inflight.get(token)
        if task is None:
            task = asyncio.ensure_future(self._fill(token, fetch))
            task.add_done_callback(_consume_exception)
            self._inflight[token] = task
        # A cancelled caller must not cancel the lookup other callers wait on.
        return await asyncio.shield(task)

    async def _fill(
        self,
        token: str,
        fetch: Callable[[], Awaitable[LocationDescription | None]],
    ) -> LocationDescription | None:
        try:
            description = await fetch()
            self.put(token, description)
            return description
        finally:
            self._inflight.pop(token, None)


async def describe_location(
    token: str,
    *,
    cache: DescriptionCache,
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
    sleep: Callable[[float], Any] | None = None,
) -> tuple[LocationDescription | None, bool]:
    """Return (description, degraded).

    - description is None when the token is unusable, the provider has no
      address for the cell, or the provider failed.
    - degraded=True means the provider failed; nothing is raised.
    """

    if not is_valid(token):
        return None, False
    canonical = normalize(token)
    if canonical in cache:
        return cache.get(canonical), False

    try:
        area = parse(canonical)
    except DecodeFailure:
        return None, False

    # Query at the cell center, never at user coordinates.
    client = NominatimClient.from_settings(
        settings or get_settings(), http_client=http_client, sleep=sleep
    )
    try:
        description = await cache.get_or_fetch(
            canonical,
            lambda: client.reverse(latitude=area.center.lat, longitude=area.center.lng),
        )
    except DescribeProviderError as e:
        logger.warning("Reverse geocoding failed for %s: %s", canonical, e)
        return None, True

    return description, False


def tooltip_text(token: str, description: LocationDescription | None) -> str:
    suffix = f"{token} (~{PRECISION_KM:g}km area)"
    if description is None:
        return suffix
    return f"{description.formatted}\n{suffix}"


async def location_tooltip(
    token: str,
    *,
    cache: DescriptionCache,
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
    sleep: Callable[[float], Any] | None = None,
) -> str:
    description, _ = await describe_location(
        token, cache=cache, settings=settings, http_client=http_client, sleep=sleep
    )
    return tooltip_text(token, description)

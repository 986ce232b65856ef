"""CoinAPI REST client — connectivity gate, error classification, retry.

Endpoints return raw bytes; decoding is the caller's job.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
import structlog

from coinview_core.exceptions import (
    DecodingFailed,
    InvalidRequest,
    Offline,
    ServerError,
    ServerErrorKind,
)
from coinview_core.models.decoding import decode_one
from coinview_core.models.market import ServerErrorBody
from coinview_core.network.connectivity import (
    ConnectivityMonitor,
    ConnectivityStatus,
    ProbeConnectivityMonitor,
    StaticConnectivity,
)
from coinview_core.network.retry import RetryPolicy, with_retry

if TYPE_CHECKING:
    from coinview_core.config.schema import AppConfig

log = structlog.get_logger("coinapi_client")

API_KEY_HEADER = "X-CoinAPI-Key"
DEFAULT_BASE_URL = "https://rest.coinapi.io/v1"
HISTORY_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _path_segment(value: Any, what: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise InvalidRequest(f"missing {what}")
    return quote(text, safe="")


def _history_time(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(HISTORY_TIME_FORMAT)


def describe_error_body(body: bytes) -> str:
    """Best human-readable message for a non-200 body.

    Tries the ``{"error": ...}`` envelope, then plain text, then falls back
    to describing the bytes.
    """
    try:
        return decode_one(ServerErrorBody, body).error
    except DecodingFailed:
        pass
    try:
        text = body.decode("utf-8").strip()
    except UnicodeDecodeError:
        return f"<{len(body)} bytes of binary data>"
    return text or "<empty response body>"


class CoinApiClient:
    """Async client for CoinAPI's market-data REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        *,
        quote_asset: str = "EUR",
        connectivity: ConnectivityMonitor | None = None,
        retry: RetryPolicy | None = None,
        connectivity_grace_s: float = 2.0,
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.quote_asset = quote_asset
        # No monitor means no gating.
        self.connectivity = connectivity or StaticConnectivity(ConnectivityStatus.SATISFIED)
        self.retry = retry or RetryPolicy()
        self.connectivity_grace_s = connectivity_grace_s
        self._timeout_s = timeout_s
        self._transport = transport
        self._sleep = sleep
        self._http: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls,
        config: "AppConfig",
        *,
        connectivity: ConnectivityMonitor | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> CoinApiClient:
        """Build a client from an AppConfig, probing the API host by default."""
        if connectivity is None:
            connectivity = ProbeConnectivityMonitor(
                config.api.base_url,
                interval_s=config.network.probe_interval_s,
            )
        return cls(
            api_key=config.api.api_key,
            base_url=config.api.base_url,
            quote_asset=config.api.quote_asset,
            connectivity=connectivity,
            retry=RetryPolicy(
                attempts=config.network.retry_attempts,
                mode=config.network.retry_mode,
                rate_limit_delay_s=config.network.rate_limit_delay_s,
            ),
            connectivity_grace_s=config.network.connectivity_grace_s,
            timeout_s=config.api.timeout_s,
            transport=transport,
        )

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                timeout=self._timeout_s,
                transport=self._transport,
            )
        return self._http

    async def start(self) -> None:
        """Start the connectivity monitor, if it runs in the background."""
        start = getattr(self.connectivity, "start", None)
        if start is not None:
            await start()

    async def close(self) -> None:
        stop = getattr(self.connectivity, "stop", None)
        if stop is not None:
            await stop()
        if self._http and not self._http.is_closed:
            await self._http.aclose()

    async def __aenter__(self) -> CoinApiClient:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ── Requests ──────────────────────────────────────────────

    def build_headers(self) -> dict[str, str]:
        return {
            API_KEY_HEADER: self.api_key,
            "Accept-Encoding": "deflate, gzip",
            "Accept": "application/json",
        }

    async def ensure_online(self) -> None:
        """Raise Offline unless the connectivity provider reports SATISFIED.

        An UNKNOWN status gets one grace period to resolve.
        """
        status = self.connectivity.status()
        if status is ConnectivityStatus.UNKNOWN:
            log.debug("connectivity_unknown_waiting", grace_s=self.connectivity_grace_s)
            await self._sleep(self.connectivity_grace_s)
            status = self.connectivity.status()
        if status is not ConnectivityStatus.SATISFIED:
            raise Offline()

    async def fetch(self, url: str | None, params: dict[str, str] | None = None) -> bytes:
        """GET *url* with retries; return the body of a 200 response."""
        if not url:
            raise InvalidRequest("missing URL")
        try:
            request_url = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise InvalidRequest(str(exc)) from exc
        if request_url.scheme not in ("http", "https") or not request_url.host:
            raise InvalidRequest(f"unsupported URL: {url}")

        # Gate once per fetch, not per attempt.
        await self.ensure_online()
        return await with_retry(
            lambda: self._fetch_once(request_url, params),
            self.retry,
            sleep=self._sleep,
        )

    async def _fetch_once(self, url: httpx.URL, params: dict[str, str] | None) -> bytes:
        http = self._get_http()
        log.debug("coinapi_request", url=str(url), params=params)
        try:
            resp = await http.get(url, params=params, headers=self.build_headers())
        except httpx.RequestError as exc:
            # Includes bodies that fail gzip/deflate decoding, not just transport failures.
            log.warning("coinapi_transport_error", url=str(url), error=repr(exc))
            raise ServerError(None, f"Invalid server response: {exc}") from exc

        if resp.status_code == 200:
            return resp.content

        kind = ServerErrorKind.from_status(resp.status_code)
        message = describe_error_body(resp.content)
        log.warning(
            "coinapi_server_error",
            url=str(url),
            status_code=resp.status_code,
            kind=kind.name if kind else None,
            message=message,
        )
        raise ServerError(kind, message, resp.status_code)

    # ── URLs ──────────────────────────────────────────────────

    def _url(self, *segments: str) -> str:
        return "/".join([self.base_url, *segments])

    def assets_url(self) -> str:
        return self._url("assets")

    def asset_url(self, asset_id: str) -> str:
        return self._url("assets", _path_segment(asset_id, "asset id"))

    def asset_icons_url(self, icon_size: int) -> str:
        if isinstance(icon_size, bool) or not isinstance(icon_size, int) or icon_size <= 0:
            raise InvalidRequest(f"icon size must be a positive integer, got {icon_size!r}")
        return self._url("assets", "icons", str(icon_size))

    def exchange_rate_url(self, asset_id_base: str, asset_id_quote: str) -> str:
        return self._url(
            "exchangerate",
            _path_segment(asset_id_base, "base asset id"),
            _path_segment(asset_id_quote, "quote asset id"),
        )

    def exchange_rate_history_url(self, asset_id_base: str, asset_id_quote: str) -> str:
        return self.exchange_rate_url(asset_id_base, asset_id_quote) + "/history"

    # ── Endpoints ─────────────────────────────────────────────

    async def fetch_assets(self) -> bytes:
        """``GET /assets`` — JSON array of Asset."""
        return await self.fetch(self.assets_url())

    async def fetch_asset(self, asset_id: str) -> bytes:
        """``GET /assets/{id}`` — JSON array holding one Asset."""
        return await self.fetch(self.asset_url(asset_id))

    async def fetch_asset_icons(self, icon_size: int) -> bytes:
        """``GET /assets/icons/{size}`` — JSON array of AssetIcon."""
        return await self.fetch(self.asset_icons_url(icon_size))

    async def fetch_exchange_rate(self, asset_id_base: str, asset_id_quote: str) -> bytes:
        """``GET /exchangerate/{base}/{quote}`` — one ExchangeRate."""
        return await self.fetch(self.exchange_rate_url(asset_id_base, asset_id_quote))

    async def fetch_exchange_rate_history(
        self,
        asset_id_base: str,
        start: datetime,
        end: datetime,
        *,
        asset_id_quote: str | None = None,
        period: str = "1DAY",
    ) -> bytes:
        """``GET /exchangerate/{base}/{quote}/history`` — JSON array of TimeSeriesData.

        The quote currency defaults to the client's fixed ``quote_asset``.
        """
        if end < start:
            raise InvalidRequest("time series end is before its start")
        url = self.exchange_rate_history_url(asset_id_base, asset_id_quote or self.quote_asset)
        params = {
            "period": period,
            "time_start": _history_time(start),
            "time_end": _history_time(end),
        }
        return await self.fetch(url, params=params)

"""
Single HTTP egress point for the journal API.

Every backend call goes through :class:`HttpGateway`, which injects the
bearer credential, retries rate-limited responses with exponential backoff and
turns failure statuses into process-wide signals before raising.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

import httpx

from journal_client.config import ClientSettings
from journal_client.errors import ApiError, error_for_status
from journal_client.signals import Signal, SignalBus

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]
Sleep = Callable[[float], Awaitable[None]]


class HttpGateway:
    """Async API client with credential injection, retry and failure signals."""

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        signals: Optional[SignalBus] = None,
        *,
        token_provider: Optional[TokenProvider] = None,
        on_login_redirect: Optional[Callable[[str], None]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.settings = settings or ClientSettings()
        self.signals = signals or SignalBus()
        self.token_provider = token_provider
        self.on_login_redirect = on_login_redirect
        self._sleep = sleep or asyncio.sleep
        self._client = httpx.AsyncClient(
            base_url=self.settings.api_url,
            timeout=httpx.Timeout(self.settings.timeout_s),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        authenticate: bool = True,
    ) -> Any:
        """
        Send one API call and return its decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to the configured API url
            json: Request body, sent unchanged on every retry
            params: Query parameters; None values are dropped
            headers: Extra headers; an explicit Authorization header wins
            authenticate: Whether to attach the current credential

        Returns:
            The decoded body, or None for an empty response.

        Raises:
            ApiError: A classified failure status (after any signal has run).
            httpx.HTTPError: Transport failures and timeouts, never retried.
        """
        method = method.upper()
        request_headers: Dict[str, str] = dict(headers or {})
        if authenticate and "Authorization" not in request_headers:
            token = self.token_provider() if self.token_provider else None
            if token:
                request_headers["Authorization"] = f"Bearer {token}"
        query = {key: value for key, value in (params or {}).items() if value is not None}

        attempt = 0
        while True:
            logger.debug("%s %s (attempt %d)", method, path, attempt)
            response = await self._client.request(
                method,
                path,
                json=json,
                params=query or None,
                headers=request_headers,
            )
            if response.is_success:
                return self._decode(response)

            status = response.status_code
            payload = self._decode(response)
            if status == 429 and attempt < self.settings.max_retries:
                attempt += 1
                delay = self.settings.retry_base_delay_s * (2 ** attempt)
                logger.warning(
                    "Rate limited on %s %s; retry %d/%d in %.2fs",
                    method,
                    path,
                    attempt,
                    self.settings.max_retries,
                    delay,
                )
                await self._sleep(delay)
                continue

            raise self._classify(status, payload, method, path)

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpGateway":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _classify(self, status: int, payload: Any, method: str, path: str) -> ApiError:
        error = error_for_status(status, payload)

        if status == 401:
            logger.info("Unauthorized response on %s %s; ending session", method, path)
            self.signals.emit(Signal.LOGOUT, {"status": status, "path": path})
            self._redirect_to_login()
        elif status == 403:
            self.signals.emit(Signal.FORBIDDEN, payload)
        elif 500 <= status < 600:
            logger.warning("Server error %d on %s %s", status, method, path)
            self.signals.emit(Signal.SERVER_ERROR, {"status": status, "data": payload})

        return error

    def _redirect_to_login(self) -> None:
        if self.on_login_redirect is None:
            return
        try:
            self.on_login_redirect(self.settings.login_route)
        except Exception:
            logger.exception("Login redirect hook failed")

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

"""Async DeepL API client for LinguaBridge.

All translations performed by the relay flow through this client.  It
handles authentication, picks the free or pro endpoint from the key, and
turns error responses into :class:`DeepLError`.

Failed calls are not retried: a relay branch whose translation fails is
simply dropped by the orchestrator.

Usage::

    from linguabridge.translation.deepl import DeepLClient

    async with DeepLClient(api_key="...:fx") as client:
        text = await client.translate("Hallo Welt", "DE", "EN-US")
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from linguabridge.relay.errors import ProviderFailure

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PRO_BASE_URL: str = "https://api.deepl.com/v2"
"""Endpoint for paid DeepL API keys."""

FREE_BASE_URL: str = "https://api-free.deepl.com/v2"
"""Endpoint for free DeepL API keys (keys ending in ``:fx``)."""

_STATUS_MESSAGES: dict[int, str] = {
    403: "Authorization failed, check DEEPL_API_KEY",
    429: "Too many requests",
    456: "Translation quota exceeded",
}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DeepLError(ProviderFailure):
    """Raised when the DeepL API rejects a request."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(f"DeepL error: {message}", status_code=status_code)


def default_base_url(api_key: str) -> str:
    """Return the endpoint matching *api_key* (free keys end in ``:fx``)."""
    return FREE_BASE_URL if api_key.endswith(":fx") else PRO_BASE_URL


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class DeepLClient:
    """Async client for the DeepL translation API.

    The HTTP session is created lazily on first use and reused for the
    lifetime of the client.  Call :meth:`close` (or use the client as an
    async context manager) to release it.

    Args:
        api_key: DeepL authentication key.
        base_url: API base URL.  ``None`` picks the free or pro endpoint
            from the key.
        timeout: Total seconds allowed per request.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._api_key: str = api_key
        self._base_url: str = (base_url or default_base_url(api_key)).rstrip("/")
        self._timeout: float = timeout
        self._session: aiohttp.ClientSession | None = None
        self.characters_translated: int = 0
        """Characters sent for translation through this client."""

    @property
    def base_url(self) -> str:
        return self._base_url

    # -- Async context manager ----------------------------------------------

    async def __aenter__(self) -> DeepLClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    # -- Internal helpers ---------------------------------------------------

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"DeepL-Auth-Key {self._api_key}",
            "User-Agent": "linguabridge/0.1",
        }

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Return the shared session, creating it lazily if needed.

        The session is created outside ``__init__`` to avoid requiring an
        active event loop at construction time.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self._get_headers(),
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
        return self._session

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Execute one HTTP request and return the decoded JSON body.

        Raises:
            DeepLError: On any HTTP status of 400 or above, or when the
                request itself fails or times out.
        """
        session = await self._ensure_session()
        url = f"{self._base_url}{endpoint}"
        try:
            async with session.request(method, url, json=json, params=params) as resp:
                if resp.status >= 400:
                    detail = await resp.text()
                    message = _STATUS_MESSAGES.get(resp.status, f"HTTP {resp.status}")
                    raise DeepLError(f"{message}: {detail[:200]}", status_code=resp.status)
                return await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise DeepLError(f"request to {endpoint} timed out after {self._timeout}s", status_code=0) from e
        except aiohttp.ClientError as e:
            raise DeepLError(f"request to {endpoint} failed: {e}", status_code=0) from e

    @staticmethod
    def _parse_translation(body: Any) -> str:
        try:
            return body["translations"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise DeepLError(f"unexpected response body: {body!r}"[:300], status_code=200) from e

    # -- Public API ---------------------------------------------------------

    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        """Translate *text* from *source_lang* to *target_lang*.

        Args:
            text: Text to translate.
            source_lang: DeepL source language code (e.g. ``"DE"``).
            target_lang: DeepL target language code (e.g. ``"EN-US"``).

        Returns:
            The translated text.

        Raises:
            DeepLError: If the API rejects the request.
        """
        payload = {
            "text": [text],
            "source_lang": source_lang.upper(),
            "target_lang": target_lang.upper(),
        }
        body = await self._request("POST", "/translate", json=payload)
        self.characters_translated += len(text)
        return self._parse_translation(body)

    async def supported_languages(self, kind: str = "target") -> set[str]:
        """Return the language codes DeepL accepts as *kind* (``source``/``target``)."""
        if kind not in ("source", "target"):
            raise ValueError(f"kind must be 'source' or 'target', got {kind!r}")
        body = await self._request("GET", "/languages", params={"type": kind})
        return {str(item["language"]).upper() for item in body or [] if item.get("language")}

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

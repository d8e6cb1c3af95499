"""
HTTP JSON fetch collaborator.

Fetches users and products from a REST endpoint with aiohttp and maps the
JSON bodies through ``User.from_json`` / ``Product.from_json``. Transport
errors, non-2xx statuses and undecodable bodies all surface as
:class:`FetchFailure` so the loading controllers can turn them into
display messages.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional

import aiohttp

from loadingkit.core.exceptions import FetchFailure
from loadingkit.models import Product, User

__all__ = ["HttpJsonService"]

logger = logging.getLogger(__name__)


class HttpJsonService:
    """Minimal REST client for ``/users/{id}`` and ``/products``.

    An external ``session`` is reused and never closed here; otherwise a
    session is created lazily and released by :meth:`close`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_s: float = 10.0,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._ext_session = session
        self._session: Optional[aiohttp.ClientSession] = None
        self._timeout = aiohttp.ClientTimeout(total=float(timeout_s))

    async def __aenter__(self) -> "HttpJsonService":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def get_user(self, user_id: str) -> User:
        body = await self._get_json(f"/users/{user_id}")
        if not isinstance(body, dict):
            raise FetchFailure("unexpected user payload")
        return User.from_json(body)

    async def get_all_products(self) -> List[Product]:
        return self._products(await self._get_json("/products"))

    async def search_products(
        self, query: str, category: Optional[str] = None
    ) -> List[Product]:
        products = await self.get_all_products()
        # the endpoint has no server-side search; filter the listing
        return [
            p
            for p in products
            if (not query or p.matches(query))
            and (not category or p.category == category)
        ]

    # Internals -----------------------------------------------------------

    def _products(self, body: Any) -> List[Product]:
        if not isinstance(body, list):
            raise FetchFailure("unexpected product payload")
        return [Product.from_json(item) for item in body if isinstance(item, dict)]

    def _client(self) -> aiohttp.ClientSession:
        if self._ext_session is not None:
            return self._ext_session
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def _get_json(self, path: str) -> Any:
        url = self._base + path
        try:
            async with self._client().get(url) as resp:
                if resp.status >= 400:
                    raise FetchFailure(f"HTTP {resp.status} for {path}")
                return await resp.json(content_type=None)
        except FetchFailure:
            raise
        except asyncio.TimeoutError as e:
            logger.info("request timed out: %s", url)
            raise FetchFailure(f"Request timed out: {path}") from e
        except (aiohttp.ClientError, ValueError) as e:
            logger.info("request failed: %s (%s)", url, e)
            raise FetchFailure(f"Network error: {e}") from e

"""
HTTP line provider - fetches line tables from a web server.

Tables are requested from `<base_url>/<locale>.json` the first time
lines are prepared for a locale, and each locale is requested at most
once. Network failures never break a run: they are logged and the
affected lines resolve as missing.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

import httpx

from dialogue_runner.core.errors import LineTableError
from dialogue_runner.lines.files import parse_line_table
from dialogue_runner.lines.provider import LineEntry, LineProvider, LocalizedLine

logger = logging.getLogger(__name__)


class HttpLineProvider(LineProvider):
    """
    Line provider backed by JSON tables served over HTTP.

    Usage:
        provider = HttpLineProvider("https://cdn.example.com/lines", locale="fr-FR")
        await provider.prepare(["greet"])
        provider.resolve("greet")
    """

    def __init__(
        self,
        base_url: str,
        locale: str = "en-US",
        fallback_locale: str = "en-US",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        super().__init__(locale, fallback_locale)
        self.base_url = base_url.rstrip('/')
        self._client = client
        self._timeout = timeout
        self._tables: dict[str, dict[str, LineEntry]] = {}
        # Locales already requested, whether or not the request succeeded
        self._attempted_locales: set[str] = set()

    @property
    def loaded_locales(self) -> set[str]:
        return set(self._tables)

    def resolve(
        self,
        line_id: str,
        substitutions: Sequence[str] = (),
    ) -> Optional[LocalizedLine]:
        for locale in (self.locale, self.fallback_locale):
            entry = self._tables.get(locale, {}).get(line_id)
            if entry is not None:
                return self._localize(entry, substitutions)
        return None

    async def prepare(self, line_ids: Iterable[str]) -> None:
        if await self._ensure_locale(self.locale):
            return

        if self.fallback_locale != self.locale:
            await self._ensure_locale(self.fallback_locale)

    async def _ensure_locale(self, locale: str) -> bool:
        """Fetch a locale table unless it was already requested."""
        if locale not in self._attempted_locales:
            self._attempted_locales.add(locale)
            await self._fetch_locale(locale)
        return locale in self._tables

    async def _fetch_locale(self, locale: str) -> None:
        """Fetch one locale table into the cache."""
        url = f"{self.base_url}/{locale}.json"
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch line table {url}: {e}")
            return

        if not response.is_success:
            logger.warning(f"Line table {url} returned HTTP {response.status_code}")
            return

        try:
            table = parse_line_table(response.json(), source=url)
        except (ValueError, LineTableError) as e:
            logger.warning(f"Ignoring line table {url}: {e}")
            return

        self._tables[locale] = table
        logger.info(f"Fetched {len(table)} lines for {locale} from {url}")

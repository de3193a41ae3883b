"""
Open*Facts family provider (OpenFoodFacts, OpenBeautyFacts, OpenPetFoodFacts).

All three databases are fully open (no key, no quota) and share one API:

  GET {base_url}/{barcode}.json
    → {"status": 1, "product": {...}}   found
    → {"status": 0, ...}                not found

Failures are isolated here: a timeout, an HTTP error, a network error or an
unparseable body is logged and returned as NotFound, so the chain moves on
to the next source instead of aborting the lookup.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from providers.base import BarcodeProvider, Found, LookupResult, NotFound, ProviderSource, RawProduct

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_USER_AGENT = "BarcodeResolver/1.0"

# Keyed by ProviderSource.name, in default priority order
OPEN_FACTS_SOURCES: dict[str, ProviderSource] = {
    "openfoodfacts": ProviderSource(
        name="openfoodfacts",
        label="OpenFoodFacts",
        base_url="https://world.openfoodfacts.org/api/v0/product",
    ),
    "openbeautyfacts": ProviderSource(
        name="openbeautyfacts",
        label="OpenBeautyFacts",
        base_url="https://world.openbeautyfacts.org/api/v0/product",
    ),
    "openpetfoodfacts": ProviderSource(
        name="openpetfoodfacts",
        label="OpenPetFoodFacts",
        base_url="https://world.openpetfoodfacts.org/api/v0/product",
    ),
}


class _HTTPStatusError(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status


class OpenFactsProvider(BarcodeProvider):

    def __init__(
        self,
        source: ProviderSource,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        user_agent: str = DEFAULT_USER_AGENT,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ) -> None:
        self.source = source
        self.timeout_ms = timeout_ms
        self.max_redirects = max_redirects
        self._headers = {
            "User-Agent": user_agent,
            "Accept":     "application/json",
        }

    @property
    def name(self) -> str:
        return self.source.name

    def product_url(self, barcode: str) -> str:
        return f"{self.source.base_url.rstrip('/')}/{barcode}.json"

    async def lookup(self, barcode: str) -> LookupResult:
        label = self.source.label
        logger.info("[%s] Querying for barcode %s", label, barcode)

        try:
            payload = await asyncio.wait_for(
                self._fetch(barcode),
                timeout=self.timeout_ms / 1000,
            )
        except asyncio.TimeoutError:
            logger.error("[%s] Timed out after %dms for barcode %s", label, self.timeout_ms, barcode)
            return NotFound(self.name, "timeout")
        except _HTTPStatusError as exc:
            if exc.status == 404:
                logger.info("[%s] Not found for barcode %s (HTTP 404)", label, barcode)
                return NotFound(self.name, "not_found")
            logger.error("[%s] HTTP %d for barcode %s", label, exc.status, barcode)
            return NotFound(self.name, "http_error")
        except aiohttp.ClientError as exc:
            logger.error("[%s] Network error for barcode %s: %s", label, barcode, exc)
            return NotFound(self.name, "network_error")
        except Exception as exc:
            logger.error("[%s] Unexpected error for barcode %s: %s", label, barcode, exc)
            return NotFound(self.name, "unexpected_error")

        if not isinstance(payload, dict):
            logger.error("[%s] Malformed response for barcode %s", label, barcode)
            return NotFound(self.name, "malformed")

        product = payload.get("product")
        if payload.get("status") != 1 or not product or not isinstance(product, dict):
            logger.info("[%s] Not found for barcode %s", label, barcode)
            return NotFound(self.name, "not_found")

        raw = _to_raw_product(product, self.name)
        logger.info("[%s] Found: %r for barcode %s", label, raw.name, barcode)
        return Found(raw)

    # ── HTTP helper ───────────────────────────────────────────────────────────

    async def _fetch(self, barcode: str) -> Any:
        """Single GET against the product endpoint. Returns the decoded JSON body."""
        async with aiohttp.ClientSession() as session:
            async with session.get(
                self.product_url(barcode),
                headers=self._headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_ms / 1000),
                max_redirects=self.max_redirects,
            ) as resp:
                if resp.status != 200:
                    raise _HTTPStatusError(resp.status)
                # Some mirrors answer with text/plain; decode regardless
                return await resp.json(content_type=None)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _to_raw_product(product: dict, source: str) -> RawProduct:
    return RawProduct(
        name=_field(product, "product_name"),
        brand=_field(product, "brands"),
        quantity=_field(product, "quantity"),
        category=_field(product, "categories"),
        image=_field(product, "image_url"),
        source=source,
    )


def _field(product: dict, key: str) -> Optional[str]:
    value = product.get(key)
    # false / 0 / [] / {} mean "absent"; only scalar text or numbers are kept
    if not value or isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return str(value)

"""
resolver.py — public interface for barcode resolution.

The rest of the app imports only from here:
  from resolver import resolve_barcode, InvalidBarcodeError

Flow for one barcode:
  1. Validate format (12 or 13 ASCII digits), failing before any I/O
  2. Cache lookup  → hit: return the stored product unchanged
  3. Cache miss    → ask the provider chain (first hit wins)
  4. Provider hit  → normalize, insert into the cache, return the stored row
  5. Provider miss → return None, nothing is written

Cache entries never expire and are never updated.
"""
from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Iterable, Optional

from cache_store import ProductCache, SQLiteProductCache
from database import DuplicateBarcodeError, MasterProduct
from normalizer import NormalizedProduct, normalize
from providers.manager import ProviderChain, build_default_chain

logger = logging.getLogger(__name__)

__all__ = [
    "BarcodeResolver",
    "InvalidBarcodeError",
    "get_resolver",
    "resolve_barcode",
    "resolve_many",
    "validate_barcode",
]

# [0-9] rather than \d: \d also matches non-ASCII digits such as "١٢٣"
_BARCODE_RE = re.compile(r"[0-9]{12,13}")


class InvalidBarcodeError(ValueError):
    def __init__(self, barcode: object) -> None:
        super().__init__("Invalid barcode format. Must be 12 or 13 digits.")
        self.barcode = barcode


def validate_barcode(barcode: object) -> str:
    """Return barcode unchanged if it is 12 or 13 ASCII digits, else raise."""
    if not isinstance(barcode, str) or not _BARCODE_RE.fullmatch(barcode):
        raise InvalidBarcodeError(barcode)
    return barcode


class BarcodeResolver:
    """Cache-aside lookup in front of an ordered provider chain."""

    def __init__(self, chain: ProviderChain, cache: ProductCache) -> None:
        self.chain = chain
        self.cache = cache

    async def resolve(self, barcode: str) -> Optional[MasterProduct]:
        """
        Resolve a barcode to its cached product.

        Returns None when no provider knows the barcode.
        Raises InvalidBarcodeError for malformed input; storage errors propagate.
        """
        validate_barcode(barcode)

        cached = await self.cache.find_by_barcode(barcode)
        if cached is not None:
            logger.info("Cache hit for barcode %s (source: %s)", barcode, cached.source)
            return cached

        logger.info("Cache miss for barcode %s. Querying %s", barcode, ", ".join(self.chain.names))

        raw = await self.chain.lookup(barcode)
        if raw is None:
            logger.info("Barcode %s not found in any external source", barcode)
            return None

        saved = await self._persist(barcode, normalize(raw))
        logger.info(
            "Saved barcode %s (source: %s, confidence: %s)",
            barcode, saved.source, saved.confidence,
        )
        return saved

    async def _persist(self, barcode: str, product: NormalizedProduct) -> MasterProduct:
        """
        Insert the product. If a concurrent resolution cached the same barcode
        first, return that record instead.
        """
        try:
            return await self.cache.insert(barcode, product, datetime.now(timezone.utc))
        except DuplicateBarcodeError:
            winner = await self.cache.find_by_barcode(barcode)
            if winner is None:
                raise
            logger.info("Barcode %s was cached concurrently, using existing record", barcode)
            return winner


# ── Default resolver ──────────────────────────────────────────────────────────

_resolver: Optional[BarcodeResolver] = None


def get_resolver() -> BarcodeResolver:
    """Return the shared resolver, building it from config on first call."""
    global _resolver
    if _resolver is None:
        _resolver = BarcodeResolver(build_default_chain(), SQLiteProductCache())
        logger.info("Barcode providers: %s", " → ".join(_resolver.chain.names))
    return _resolver


async def resolve_barcode(barcode: str) -> Optional[MasterProduct]:
    return await get_resolver().resolve(barcode)


async def resolve_many(barcodes: Iterable[str]) -> dict[str, Optional[MasterProduct]]:
    """
    Resolve several barcodes concurrently.
    Every barcode is validated before any lookup starts; repeated barcodes
    are resolved once. Returns {barcode: product or None}.
    """
    unique = list(dict.fromkeys(validate_barcode(b) for b in barcodes))
    shared = get_resolver()
    results = await asyncio.gather(*[shared.resolve(b) for b in unique])
    return dict(zip(unique, results))

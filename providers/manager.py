"""
Provider Manager — builds and runs the ordered chain of barcode providers.

Behaviour:
  • providers are tried one at a time, in the configured order
  • the first provider that knows the barcode wins, the rest are skipped
  • each provider gets exactly one attempt per lookup (no retries)

The default order comes from config.PROVIDER_SOURCES, e.g.
  PROVIDER_SOURCES=openfoodfacts,openbeautyfacts,openpetfoodfacts
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import config
from providers.base import BarcodeProvider, Found, NotFound, RawProduct

logger = logging.getLogger(__name__)


class ProviderChain:
    """An immutable, ordered list of providers queried first-hit-wins."""

    def __init__(self, providers: Sequence[BarcodeProvider]) -> None:
        self._providers: tuple[BarcodeProvider, ...] = tuple(providers)

    @property
    def providers(self) -> tuple[BarcodeProvider, ...]:
        return self._providers

    @property
    def names(self) -> list[str]:
        return [p.name for p in self._providers]

    async def lookup(self, barcode: str) -> Optional[RawProduct]:
        """Return the first provider's product for barcode, or None if all miss."""
        for provider in self._providers:
            result = await _safe_lookup(provider, barcode)
            if isinstance(result, Found):
                return result.product
            logger.debug("[%s] miss for %s (%s)", provider.name, barcode, result.reason)
        return None


async def _safe_lookup(provider: BarcodeProvider, barcode: str):
    try:
        result = await provider.lookup(barcode)
    except Exception as exc:
        logger.error("[%s] Provider raised for barcode %s: %s", provider.name, barcode, exc)
        return NotFound(provider.name, "unexpected_error")
    if not isinstance(result, (Found, NotFound)):
        logger.error("[%s] Provider returned %r for barcode %s", provider.name, result, barcode)
        return NotFound(provider.name, "malformed")
    return result


def build_default_chain() -> ProviderChain:
    """
    Instantiate one OpenFactsProvider per name in config.PROVIDER_SOURCES,
    keeping the configured order. Unknown names are skipped with a warning.
    """
    from providers.openfacts_provider import OPEN_FACTS_SOURCES, OpenFactsProvider

    providers: list[BarcodeProvider] = []
    for name in config.provider_source_names():
        source = OPEN_FACTS_SOURCES.get(name)
        if source is None:
            known = ", ".join(OPEN_FACTS_SOURCES)
            logger.warning("Skipped unknown provider source '%s' (known: %s)", name, known)
            continue
        if any(p.name == name for p in providers):
            logger.warning("Skipped duplicate provider source '%s'", name)
            continue
        providers.append(
            OpenFactsProvider(
                source,
                timeout_ms=config.PROVIDER_TIMEOUT_MS,
                user_agent=config.PROVIDER_USER_AGENT,
                max_redirects=config.PROVIDER_MAX_REDIRECTS,
            )
        )
        logger.info("Loaded provider: %s", source.label)

    if not providers:
        raise RuntimeError(
            "No barcode providers available.\n"
            f"PROVIDER_SOURCES={config.PROVIDER_SOURCES!r} names no known source.\n"
            "Use any of: openfoodfacts, openbeautyfacts, openpetfoodfacts"
        )

    return ProviderChain(providers)

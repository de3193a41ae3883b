"""
Shared types and base class for all barcode data providers.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union


# ── Provider descriptor ────────────────────────────────────────────────────────

@dataclass
class ProviderSource:
    """Where a provider lives and how it shows up in logs."""
    name: str           # stable identifier, stored as MasterProduct.source
    label: str          # human label for log prefixes, e.g. "OpenFoodFacts"
    base_url: str       # product endpoint, barcode is appended as /{barcode}.json


# ── Shared result types ────────────────────────────────────────────────────────

@dataclass
class RawProduct:
    """
    A provider's record, reshaped into common keys but otherwise untouched.
    Never persisted; the normalizer turns it into the cached shape.
    """
    name: Optional[str] = None
    brand: Optional[str] = None
    quantity: Optional[str] = None      # free-text pack size, e.g. "500 g"
    category: Optional[str] = None
    image: Optional[str] = None         # URL
    source: Optional[str] = None        # ProviderSource.name


@dataclass
class Found:
    product: RawProduct


@dataclass
class NotFound:
    provider: str
    # not_found | timeout | http_error | network_error | malformed | unexpected_error
    reason: str = "not_found"


LookupResult = Union[Found, NotFound]


# ── Abstract base ──────────────────────────────────────────────────────────────

class BarcodeProvider(ABC):
    """Base class all barcode providers must implement."""

    name: str

    @abstractmethod
    async def lookup(self, barcode: str) -> LookupResult:
        """
        Look up a barcode at this provider.
        Must not raise for transport or provider trouble: return NotFound instead.
        """
        ...

"""
normalizer.py — turn a provider's RawProduct into the cached product shape.

Pure and deterministic: the same RawProduct always yields the same
NormalizedProduct, including the confidence score.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from providers.base import RawProduct


@dataclass
class NormalizedProduct:
    name: Optional[str]
    brand: Optional[str]
    quantity: Optional[str]
    category: Optional[str]
    image: Optional[str]
    source: Optional[str]
    confidence: float


def sanitize(value: Any) -> Optional[str]:
    """Trim whitespace; empty or missing becomes None."""
    if value is None:
        return None
    trimmed = str(value).strip()
    return trimmed or None


def title_case(value: Optional[str]) -> Optional[str]:
    """
    Lowercase everything, then uppercase the first letter of each
    space-separated word. Unlike str.title(), letters after hyphens or
    apostrophes stay lowercase ("coca-cola" → "Coca-cola").
    """
    if not value:
        return value
    return " ".join(word[:1].upper() + word[1:] for word in value.lower().split(" "))


def compute_confidence(
    name: Optional[str],
    brand: Optional[str],
    quantity: Optional[str],
) -> float:
    """
    Completeness score:
      name + brand + quantity → 0.9
      name + brand            → 0.75
      name only               → 0.6
      anything without name   → 0.3
    """
    if name and brand and quantity:
        return 0.9
    if name and brand:
        return 0.75
    if name:
        return 0.6
    return 0.3


def normalize(raw: RawProduct) -> NormalizedProduct:
    name     = sanitize(raw.name)
    brand    = sanitize(raw.brand)
    quantity = sanitize(raw.quantity)

    return NormalizedProduct(
        name=title_case(name),
        brand=title_case(brand),
        quantity=quantity,
        category=title_case(sanitize(raw.category)),
        image=sanitize(raw.image),
        source=sanitize(raw.source),
        confidence=compute_confidence(name, brand, quantity),
    )

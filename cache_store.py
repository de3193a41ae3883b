"""
Abstract cache store used by the resolver.

The resolver only ever reads one product by barcode or inserts a new one;
every backend must return the same MasterProduct, whatever it is stored in.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

import database as db
from database import MasterProduct
from normalizer import NormalizedProduct


class ProductCache(ABC):
    """All cache backends must implement this interface."""

    @abstractmethod
    async def find_by_barcode(self, barcode: str) -> Optional[MasterProduct]:
        ...

    @abstractmethod
    async def insert(
        self,
        barcode: str,
        product: NormalizedProduct,
        resolved_at: datetime,
    ) -> MasterProduct:
        """
        Persist a new product and return it as stored.
        Raises database.DuplicateBarcodeError if the barcode already exists.
        """
        ...


class SQLiteProductCache(ProductCache):

    async def find_by_barcode(self, barcode: str) -> Optional[MasterProduct]:
        return await db.get_master_product(barcode)

    async def insert(
        self,
        barcode: str,
        product: NormalizedProduct,
        resolved_at: datetime,
    ) -> MasterProduct:
        return await db.insert_master_product(barcode, product, resolved_at)

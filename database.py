"""
database.py — async SQLite persistence via aiosqlite.

Tables:
  master_products  — one normalized product per barcode (write-once cache)

The DB file is created automatically on first run.
"""
from __future__ import annotations

import asyncio
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import aiosqlite

import config

if TYPE_CHECKING:
    from normalizer import NormalizedProduct

logger = logging.getLogger(__name__)

# Store the DB in a dedicated data/ directory so Docker volume mounts work
# correctly (mount ./data:/app/data) and the file survives container restarts.
_DATA_DIR = Path(config.DATA_DIR)
_DATA_DIR.mkdir(parents=True, exist_ok=True)

DB_PATH = str(_DATA_DIR / "barcode_cache.db")
_lock = asyncio.Lock()          # serialise schema creation


class DuplicateBarcodeError(Exception):
    """A master product for this barcode already exists."""

    def __init__(self, barcode: str) -> None:
        super().__init__(f"Barcode '{barcode}' is already cached.")
        self.barcode = barcode


# ── Data models ───────────────────────────────────────────────────────────────

@dataclass
class MasterProduct:
    id: int
    barcode: str                # 12–13 digits, unique, never changes
    name: Optional[str]
    brand: Optional[str]
    quantity: Optional[str]     # free-text pack size, e.g. "500 g"
    category: Optional[str]
    image: Optional[str]
    source: Optional[str]       # provider that supplied the data
    confidence: float           # 0–1, completeness of name/brand/quantity
    resolved_at: datetime
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        return {
            "barcode":     self.barcode,
            "name":        self.name,
            "brand":       self.brand,
            "quantity":    self.quantity,
            "category":    self.category,
            "image":       self.image,
            "source":      self.source,
            "confidence":  self.confidence,
            "resolved_at": self.resolved_at.isoformat(),
            "created_at":  self.created_at.isoformat(),
            "updated_at":  self.updated_at.isoformat(),
        }


# ── Schema ────────────────────────────────────────────────────────────────────

_SCHEMA = """
CREATE TABLE IF NOT EXISTS master_products (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    barcode     TEXT    NOT NULL UNIQUE,
    name        TEXT,
    brand       TEXT,
    quantity    TEXT,
    category    TEXT,
    image       TEXT,
    source      TEXT,
    confidence  REAL    NOT NULL DEFAULT 0.3
                        CHECK (confidence >= 0 AND confidence <= 1),
    resolved_at TEXT    NOT NULL,
    created_at  TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_master_products_source ON master_products (source);
"""


async def init_db() -> None:
    """Create tables if they don't exist. Safe to call multiple times."""
    async with _lock:
        async with aiosqlite.connect(DB_PATH) as db:
            await db.executescript(_SCHEMA)
            await db.commit()
    logger.info("Database initialised at %s", DB_PATH)


def _row_to_product(r: aiosqlite.Row) -> MasterProduct:
    return MasterProduct(
        id=r["id"],
        barcode=r["barcode"],
        name=r["name"],
        brand=r["brand"],
        quantity=r["quantity"],
        category=r["category"],
        image=r["image"],
        source=r["source"],
        confidence=r["confidence"],
        resolved_at=datetime.fromisoformat(r["resolved_at"]),
        created_at=datetime.fromisoformat(r["created_at"]),
        updated_at=datetime.fromisoformat(r["updated_at"]),
    )


# ── Master product operations ─────────────────────────────────────────────────

async def get_master_product(barcode: str) -> Optional[MasterProduct]:
    """Return the cached product for barcode, or None."""
    async with aiosqlite.connect(DB_PATH) as db:
        db.row_factory = aiosqlite.Row
        async with db.execute(
            "SELECT * FROM master_products WHERE barcode = ?", (barcode,)
        ) as cur:
            row = await cur.fetchone()
    return _row_to_product(row) if row else None


async def insert_master_product(
    barcode: str,
    product: "NormalizedProduct",
    resolved_at: Optional[datetime] = None,
) -> MasterProduct:
    """
    Insert a new master product and return it exactly as stored.
    Raises DuplicateBarcodeError if the barcode is already cached.
    """
    now = datetime.now(timezone.utc)
    resolved_at = resolved_at or now
    async with aiosqlite.connect(DB_PATH) as db:
        db.row_factory = aiosqlite.Row
        try:
            await db.execute(
                """INSERT INTO master_products
                   (barcode, name, brand, quantity, category, image, source,
                    confidence, resolved_at, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    barcode, product.name, product.brand, product.quantity,
                    product.category, product.image, product.source,
                    product.confidence, resolved_at.isoformat(),
                    now.isoformat(), now.isoformat(),
                ),
            )
            await db.commit()
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" in str(exc):
                raise DuplicateBarcodeError(barcode) from exc
            raise

        async with db.execute(
            "SELECT * FROM master_products WHERE barcode = ?", (barcode,)
        ) as cur:
            row = await cur.fetchone()

    return _row_to_product(row)


async def get_master_product_count() -> int:
    async with aiosqlite.connect(DB_PATH) as db:
        async with db.execute("SELECT COUNT(*) FROM master_products") as cur:
            row = await cur.fetchone()
    return row[0] if row else 0


async def get_source_breakdown() -> dict[str, int]:
    """Return {source: cached product count}, largest first."""
    async with aiosqlite.connect(DB_PATH) as db:
        async with db.execute(
            """SELECT COALESCE(source, 'unknown'), COUNT(*) AS n
               FROM master_products
               GROUP BY source
               ORDER BY n DESC"""
        ) as cur:
            rows = await cur.fetchall()
    return {r[0]: r[1] for r in rows}

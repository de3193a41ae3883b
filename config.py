"""
Central configuration — reads from .env file.

Every module reads config.X at call time (never copies a value at import),
so tests and operators can override a setting by assigning the attribute.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# ── Storage ───────────────────────────────────────────────────────────────────
# SQLite cache and the log file both live here so a single Docker volume
# mount (./data:/app/data) keeps them across restarts.
DATA_DIR: str = os.getenv("DATA_DIR", "data")

# ── Product data providers ────────────────────────────────────────────────────
# Ordered, comma-separated list of built-in sources to query on a cache miss.
# The first source that knows the barcode wins; later ones are not queried.
#   openfoodfacts     → groceries, drinks
#   openbeautyfacts   → cosmetics, toiletries
#   openpetfoodfacts  → pet food
PROVIDER_SOURCES: str = os.getenv(
    "PROVIDER_SOURCES", "openfoodfacts,openbeautyfacts,openpetfoodfacts"
)

# Hard ceiling per provider request. A slow provider counts as "not found".
PROVIDER_TIMEOUT_MS: int    = int(os.getenv("PROVIDER_TIMEOUT_MS", "5000"))
PROVIDER_MAX_REDIRECTS: int = int(os.getenv("PROVIDER_MAX_REDIRECTS", "5"))

# The Open*Facts APIs ask every client to identify itself
PROVIDER_USER_AGENT: str = os.getenv("PROVIDER_USER_AGENT", "BarcodeResolver/1.0")

# ── Lookup server ─────────────────────────────────────────────────────────────
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8080"))

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


def provider_source_names() -> list[str]:
    """PROVIDER_SOURCES split into a clean, ordered list of lowercase names."""
    return [
        name.strip().lower()
        for name in PROVIDER_SOURCES.split(",")
        if name.strip()
    ]

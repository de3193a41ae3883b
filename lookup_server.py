"""
lookup_server.py — HTTP front end for barcode resolution.

Runs as an aiohttp web server in the app's asyncio event loop.

Endpoints:
  GET /barcode/{barcode}  → JSON envelope with the resolved product
  GET /health             → plain-text health check (for uptime monitors / nginx)
  GET /stats              → JSON cache stats (total + per-source counts)

Every JSON reply uses the same envelope:
  {"data": <product or null>, "message": "...", "statusCode": <int>}
"""
from __future__ import annotations

import logging
from typing import Any

from aiohttp import web

import config
import database as db
from resolver import InvalidBarcodeError, resolve_barcode

logger = logging.getLogger(__name__)


def _envelope(data: Any, message: str, status: int) -> web.Response:
    return web.json_response(
        {"data": data, "message": message, "statusCode": status},
        status=status,
    )


# ── Request handlers ───────────────────────────────────────────────────────────

async def handle_barcode(request: web.Request) -> web.Response:
    barcode = request.match_info["barcode"]
    try:
        product = await resolve_barcode(barcode)
    except InvalidBarcodeError as exc:
        return _envelope(None, str(exc), 400)
    except Exception as exc:
        logger.error("Lookup failed for barcode %s: %s", barcode, exc, exc_info=True)
        return _envelope(None, "Barcode lookup failed.", 500)

    if product is None:
        return _envelope(None, "Product not found with this barcode", 404)
    return _envelope(product.to_dict(), "Product found", 200)


async def handle_health(request: web.Request) -> web.Response:
    """Health check — returns 200 OK. Use with uptime monitors."""
    total = await db.get_master_product_count()
    return web.Response(
        text=f"OK — {total} products cached",
        content_type="text/plain",
    )


async def handle_stats(request: web.Request) -> web.Response:
    total     = await db.get_master_product_count()
    by_source = await db.get_source_breakdown()
    return web.json_response({"total": total, "by_source": by_source})


# ── App factory ────────────────────────────────────────────────────────────────

def build_web_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/health",            handle_health)
    app.router.add_get("/stats",             handle_stats)
    app.router.add_get("/barcode/{barcode}", handle_barcode)
    return app


async def start_server() -> web.AppRunner:
    """Start the web server. Returns runner so caller can shut it down cleanly."""
    app    = build_web_app()
    runner = web.AppRunner(app, access_log=logger)
    await runner.setup()
    site = web.TCPSite(runner, config.SERVER_HOST, config.SERVER_PORT)
    await site.start()
    logger.info("Barcode lookup server listening on %s:%d", config.SERVER_HOST, config.SERVER_PORT)
    return runner

"""Minimal FastAPI wrapper that exposes the geocoded rinks as JSON."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rink_scraper import config
from rink_scraper.crawler import FetchError
from rink_scraper.geocode_store import CacheIOError
from rink_scraper.geocoding import ProviderConfigError, ProviderError
from rink_scraper.service import RinkGeocodingService

# Restore request-level logging (including httpx request lines) in the app process.
logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logging.getLogger("httpx").setLevel(logging.INFO)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

app = FastAPI(title="Montreal Rinks")

# One service per process so the listing cache survives between requests.
service = RinkGeocodingService()


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    ip = request.client.host if request.client else "unknown"
    if ip.startswith("::ffff:"):
        return ip[len("::ffff:"):]
    return ip


@app.get("/api/rinks")
async def rinks(request: Request):
    logger.info("GET /api/rinks - IP: %s", _client_ip(request))
    try:
        listings = await service.get_geocoded_rinks()
    except (FetchError, ProviderError) as exc:
        logger.error("Upstream failure while building rinks: %s", exc)
        return JSONResponse({"error": "upstream_unavailable", "detail": str(exc)}, status_code=502)
    except (ProviderConfigError, CacheIOError) as exc:
        logger.error("Server misconfiguration while building rinks: %s", exc)
        return JSONResponse({"error": "server_error", "detail": str(exc)}, status_code=500)
    except Exception as exc:
        logger.exception("Unexpected failure while building rinks")
        return JSONResponse({"error": "server_error", "detail": str(exc)}, status_code=500)
    return listings.to_dict()


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.head("/healthz")
def healthz_head():
    return healthz()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.PORT)

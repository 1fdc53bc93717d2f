"""FastAPI application serving swap quotes.

Each request carries the full pool snapshot it is quoted against, so the
service keeps no pool state between requests. Quoting is CPU bound and runs
off the event loop (see ``swap_router.api.endpoints``).

Rate limiting is left to the reverse proxy in front of the service.
"""

import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from swap_router import __version__
from swap_router.api.endpoints import router

HOST = os.environ.get("SWAP_ROUTER_HOST", "0.0.0.0")
PORT = int(os.environ.get("SWAP_ROUTER_PORT", "8000"))
DEBUG = os.environ.get("SWAP_ROUTER_DEBUG", "false").lower() in ("true", "1", "yes")

# Body size is dominated by the inline pool snapshot; 10 MB holds a few
# thousand pools with their per-coin balances, weights and fees.
MAX_REQUEST_SIZE = int(os.environ.get("SWAP_ROUTER_MAX_REQUEST_SIZE", str(10 * 1024 * 1024)))

app = FastAPI(
    title="Swap Router",
    description="Multi-pool swap routing and CMMM pricing",
    version=__version__,
)


@app.middleware("http")
async def reject_oversized_snapshots(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Answer 413 before parsing when the declared body exceeds MAX_REQUEST_SIZE."""
    declared = request.headers.get("content-length")
    if declared and int(declared) > MAX_REQUEST_SIZE:
        return JSONResponse(
            status_code=413,
            content={"detail": f"Request body exceeds {MAX_REQUEST_SIZE} bytes"},
        )
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Liveness probe with the running package version."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Serve the quote API with uvicorn (console script ``swap-router-serve``).

    Environment:
        SWAP_ROUTER_HOST / SWAP_ROUTER_PORT: Bind address (default 0.0.0.0:8000)
        SWAP_ROUTER_DEBUG: Auto-reload on code changes
        SWAP_ROUTER_QUOTE_TIMEOUT: Seconds allowed per quote
        SWAP_ROUTER_MAX_REQUEST_SIZE: Largest accepted body in bytes
        SWAP_ROUTER_*: Router tuning, read by ``RouterConfig.from_env``
    """
    uvicorn.run(
        "swap_router.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()

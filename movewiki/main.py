"""FastAPI application — movewiki.

Start with::

    uvicorn movewiki.main:app --reload --port 3000

Or::

    python -m movewiki.main
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from movewiki.config import settings
from movewiki.database import init_db
from movewiki.routers import listings, moves
from movewiki.templating import STATIC_DIR, templates

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)

app = FastAPI(
    title="movewiki",
    description="A community wiki of tabletop moves, listings and votes.",
    version="1.0.0",
)

# ── Register route modules ──────────────────────────────────────────────
# Listing routes go first: /moves/{slug}/listings would otherwise be taken
# for a single definition with id "listings".
app.include_router(listings.router)
app.include_router(moves.router)

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@app.exception_handler(StarletteHTTPException)
async def _not_found(request: Request, exc: StarletteHTTPException):
    if exc.status_code != 404:
        return await http_exception_handler(request, exc)
    return templates.TemplateResponse(
        request,
        "404.html",
        {"message": exc.detail if exc.detail != "Not Found" else f"Nothing lives at {request.url.path}."},
        status_code=404,
    )


@app.on_event("startup")
async def _startup() -> None:
    init_db()
    logging.getLogger(__name__).info("Database initialised — server ready")


@app.get("/health", include_in_schema=False)
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "movewiki.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

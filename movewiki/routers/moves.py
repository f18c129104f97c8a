"""Move pages — index, tag search, feed, create, edit, preview and votes."""

from __future__ import annotations

import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from movewiki.config import settings
from movewiki.database import MoveRecord, get_db
from movewiki.models.move import MoveForm, MovePage
from movewiki.services import listings as listing_service
from movewiki.services import moves as move_service
from movewiki.services.text import parse_tags
from movewiki.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["moves"])

DB = Annotated[Session, Depends(get_db)]
Page = Annotated[int, Query(ge=1, le=settings.max_page)]

_TAG_SEPARATORS = re.compile(r"[+,\s]+")


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def _load_move(db: Session, move_id: str) -> MoveRecord:
    move = move_service.get_move(db, move_id)
    if not move:
        raise HTTPException(status_code=404, detail=f"No move has the id {move_id}.")
    return move


def _page_size(per_page: int | None) -> int:
    if not per_page or per_page < 1:
        return settings.page_size
    return min(per_page, settings.max_page_size)


def _render_index(request: Request, db: Session, page: MovePage, **extra):
    return templates.TemplateResponse(
        request,
        "moves/index.html",
        {
            "page": page,
            "moves": page.moves,
            "top_listings": move_service.top_listings(db, page.moves),
            **extra,
        },
    )


@router.get("/", include_in_schema=False)
async def root():
    return _redirect("/moves")


@router.get("/moves", response_class=HTMLResponse)
async def index(request: Request, page: Page = 1, per_page: int | None = None, db: DB = None):  # type: ignore[assignment]
    """Newest moves first."""
    result = move_service.list_moves(db, page=page, per_page=_page_size(per_page))
    return _render_index(request, db, result)


@router.post("/moves")
async def create(
    condition: Annotated[str, Form()] = "",
    definition: Annotated[str, Form()] = "",
    tags: Annotated[str, Form()] = "",
    db: DB = None,  # type: ignore[assignment]
):
    """Create a move; invalid submissions go back to the form."""
    form = MoveForm(condition=condition, definition=definition, tags=tags)
    try:
        move = move_service.create_move(db, form)
    except move_service.InvalidMove as exc:
        logger.info("Rejected new move %r: %s", condition, exc.errors)
        return _redirect("/moves/new")
    return _redirect(move.url)


@router.get("/moves/new", response_class=HTMLResponse)
async def new(request: Request):
    return templates.TemplateResponse(request, "moves/new.html", {"move": None})


@router.get("/moves/rss")
async def rss(request: Request, db: DB = None):  # type: ignore[assignment]
    """RSS 2.0 feed of the most recent moves."""
    moves = move_service.recent_moves(db, settings.feed_size)
    return templates.TemplateResponse(
        request,
        "moves/rss.xml",
        {"moves": moves, "base_url": str(request.base_url).rstrip("/")},
        media_type="application/rss+xml",
    )


@router.get("/moves/tagged/{tags}", response_class=HTMLResponse)
async def tagged(
    request: Request,
    tags: str,
    page: Page = 1,
    per_page: int | None = None,
    db: DB = None,  # type: ignore[assignment]
):
    """Moves carrying every tag in the path (``+`` or ``,`` separated)."""
    wanted = parse_tags(_TAG_SEPARATORS.split(tags))
    result = move_service.moves_tagged(db, wanted, page=page, per_page=_page_size(per_page))
    return _render_index(request, db, result, tags=wanted)


@router.post("/preview", response_class=HTMLResponse)
async def preview(
    request: Request,
    definition: Annotated[str, Form()] = "",
    condition: Annotated[str, Form()] = "",
):
    """Render a definition and its validation errors without saving anything."""
    result = move_service.preview_move(condition, definition)
    return templates.TemplateResponse(request, "preview.html", {"preview": result})


@router.get("/moves/{move_id}/up")
async def vote_up(request: Request, move_id: str, db: DB = None):  # type: ignore[assignment]
    return _vote(request, db, move_id, up=True)


@router.get("/moves/{move_id}/down")
async def vote_down(request: Request, move_id: str, db: DB = None):  # type: ignore[assignment]
    return _vote(request, db, move_id, up=False)


def _vote(request: Request, db: Session, move_id: str, up: bool) -> RedirectResponse:
    move = move_service.vote_move(db, move_id, up=up)
    if move is None:
        raise HTTPException(status_code=404, detail=f"No move has the id {move_id}.")
    return _redirect(request.headers.get("referer") or move.url)


@router.get("/moves/{move_id}/edit", response_class=HTMLResponse)
async def edit(request: Request, move_id: str, db: DB = None):  # type: ignore[assignment]
    move = _load_move(db, move_id)
    return templates.TemplateResponse(request, "moves/edit.html", {"move": move})


@router.post("/moves/{move_id}")
async def update(
    move_id: str,
    condition: Annotated[str | None, Form()] = None,
    definition: Annotated[str | None, Form()] = None,
    tags: Annotated[str | None, Form()] = None,
    db: DB = None,  # type: ignore[assignment]
):
    """Merge the submitted fields onto an existing move."""
    move = _load_move(db, move_id)
    changes = {"condition": condition, "definition": definition, "tags": tags}
    try:
        move = move_service.update_move(db, move, changes)
    except move_service.InvalidMove as exc:
        logger.info("Rejected edit of move %s: %s", move_id, exc.errors)
        return _redirect(move.edit_url)
    return _redirect(move.url)


@router.get("/moves/{slug}", response_class=HTMLResponse)
async def show(request: Request, slug: str, db: DB = None):  # type: ignore[assignment]
    """Every definition sharing the slug, most upvoted first."""
    moves = move_service.find_by_slug(db, slug)
    if not moves:
        raise HTTPException(status_code=404, detail=f"There is no move called {slug}.")
    return templates.TemplateResponse(
        request,
        "moves/show.html",
        {
            "slug": slug,
            "moves": moves,
            "listings": listing_service.listings_for(db, slug),
            "top_listings": move_service.top_listings(db, moves),
        },
    )


@router.get("/moves/{slug}/{move_id}", response_class=HTMLResponse)
async def show_definition(request: Request, slug: str, move_id: str, db: DB = None):  # type: ignore[assignment]
    """A single definition of a move."""
    move = _load_move(db, move_id)
    if move.slug != slug:
        raise HTTPException(status_code=404, detail=f"There is no move called {slug}.")
    return templates.TemplateResponse(
        request,
        "moves/show.html",
        {
            "slug": slug,
            "moves": [move],
            "listings": listing_service.listings_for(db, slug),
            "top_listings": move_service.top_listings(db, [move]),
        },
    )

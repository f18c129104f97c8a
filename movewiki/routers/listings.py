"""Listing pages — nested under a move's slug — and listing votes."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from movewiki.database import ListingRecord, MoveRecord, get_db
from movewiki.models.listing import ListingForm
from movewiki.services import listings as listing_service
from movewiki.services import moves as move_service
from movewiki.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["listings"])

DB = Annotated[Session, Depends(get_db)]


def _load_move(db: Session, slug: str) -> MoveRecord:
    moves = move_service.find_by_slug(db, slug)
    if not moves:
        raise HTTPException(status_code=404, detail=f"There is no move called {slug}.")
    return moves[0]


def _load_listing(db: Session, listing_id: str) -> ListingRecord:
    listing = listing_service.get_listing(db, listing_id)
    if not listing:
        raise HTTPException(status_code=404, detail=f"No listing has the id {listing_id}.")
    return listing


@router.get("/moves/{slug}/listings", response_class=HTMLResponse)
async def index(request: Request, slug: str, db: DB = None):  # type: ignore[assignment]
    """All listings for a move, top first."""
    move = _load_move(db, slug)
    return templates.TemplateResponse(
        request,
        "listings/index.html",
        {"move": move, "listings": listing_service.listings_for(db, slug)},
    )


@router.get("/moves/{slug}/listings/new", response_class=HTMLResponse)
async def new(request: Request, slug: str, db: DB = None):  # type: ignore[assignment]
    move = _load_move(db, slug)
    return templates.TemplateResponse(request, "listings/new.html", {"move": move})


@router.post("/moves/{slug}/listings")
async def create(
    slug: str,
    description: Annotated[str, Form()] = "",
    success: Annotated[str, Form()] = "",
    partial: Annotated[str, Form()] = "",
    failure: Annotated[str, Form()] = "",
    db: DB = None,  # type: ignore[assignment]
):
    """Attach a listing to a move and refresh its top listing."""
    move = _load_move(db, slug)
    form = ListingForm(description=description, success=success, partial=partial, failure=failure)
    try:
        listing_service.create_listing(db, move, form)
    except listing_service.InvalidListing as exc:
        logger.info("Rejected listing for %s: %s", slug, exc)
        return RedirectResponse(f"{move.url}/listings/new", status_code=303)
    return RedirectResponse(move.url, status_code=303)


@router.get("/listings/{listing_id}")
async def show(listing_id: str, db: DB = None):  # type: ignore[assignment]
    listing = _load_listing(db, listing_id)
    return RedirectResponse(f"{listing.move_url}#listing-{listing.id}", status_code=303)


@router.get("/listings/{listing_id}/up")
async def vote_up(listing_id: str, db: DB = None):  # type: ignore[assignment]
    return _vote(db, listing_id, up=True)


@router.get("/listings/{listing_id}/down")
async def vote_down(listing_id: str, db: DB = None):  # type: ignore[assignment]
    return _vote(db, listing_id, up=False)


def _vote(db: Session, listing_id: str, up: bool) -> RedirectResponse:
    listing = listing_service.vote_listing(db, listing_id, up=up)
    if listing is None:
        raise HTTPException(status_code=404, detail=f"No listing has the id {listing_id}.")
    return RedirectResponse(listing.move_url, status_code=303)

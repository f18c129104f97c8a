"""Listing persistence, voting and the cached top-listing reference."""

from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from movewiki.database import ListingRecord, MoveRecord
from movewiki.models.listing import ListingForm

logger = logging.getLogger(__name__)


class InvalidListing(ValueError):
    """Raised when a submitted listing has no description."""


def get_listing(db: Session, listing_id: str) -> ListingRecord | None:
    return db.get(ListingRecord, listing_id)


def listings_for(db: Session, slug: str) -> list[ListingRecord]:
    """Listings attached to ``slug``, most upvoted first (oldest wins ties)."""
    return (
        db.query(ListingRecord)
        .filter(ListingRecord.move_slug == slug)
        .order_by(ListingRecord.upvotes.desc(), ListingRecord.date.asc())
        .all()
    )


def create_listing(db: Session, move: MoveRecord, form: ListingForm) -> ListingRecord:
    """Persist a listing under ``move`` and refresh the move's top listing."""
    if form.is_blank:
        raise InvalidListing("Description can't be blank.")

    listing = ListingRecord(
        description=form.description,
        success=form.success,
        partial=form.partial,
        failure=form.failure,
        stat=move.stat,
        move_slug=move.slug,
        upvotes=0,
        downvotes=0,
    )
    db.add(listing)
    db.commit()
    db.refresh(listing)
    logger.info("Created listing %s under %s", listing.id, move.slug)

    update_top_listing(db, move.slug)
    return listing


def update_top_listing(db: Session, slug: str) -> str | None:
    """Point every move with ``slug`` at its most upvoted listing.

    Runs as its own write after the vote or insert that triggered it, so
    a failure here only leaves the cached reference stale.
    """
    top = (
        db.query(ListingRecord)
        .filter(ListingRecord.move_slug == slug)
        .order_by(ListingRecord.upvotes.desc(), ListingRecord.date.asc())
        .first()
    )
    if top is None:
        return None

    db.execute(
        update(MoveRecord)
        .where(MoveRecord.slug == slug)
        .values(top_listing_id=top.id)
    )
    db.commit()
    logger.debug("Top listing for %s is now %s", slug, top.id)
    return top.id


def vote_listing(db: Session, listing_id: str, up: bool = True) -> ListingRecord | None:
    """Add one up or down vote to a listing, then recompute the top listing.

    Returns ``None`` when the listing does not exist.
    """
    column = ListingRecord.upvotes if up else ListingRecord.downvotes
    result = db.execute(
        update(ListingRecord)
        .where(ListingRecord.id == listing_id)
        .values({column: column + 1})
    )
    db.commit()
    if not result.rowcount:
        return None
    logger.info("Vote %s on listing %s", "up" if up else "down", listing_id)

    listing = db.get(ListingRecord, listing_id)
    update_top_listing(db, listing.move_slug)
    return listing

"""Move persistence — create, edit, look up, page through and vote."""

from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from movewiki.database import ListingRecord, MoveRecord
from movewiki.models.move import MoveForm, MovePage, MovePreview
from movewiki.services.text import render_markdown, slugify
from movewiki.services.validation import extract_stat, validate_move

logger = logging.getLogger(__name__)


class InvalidMove(ValueError):
    """Raised when a submitted move fails validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


def _apply(move: MoveRecord, form: MoveForm) -> None:
    errors = validate_move(form.condition, form.definition)
    if errors:
        raise InvalidMove(errors)

    move.condition = form.condition.strip()
    move.definition = form.definition
    move.tags = form.tags
    # Derived fields are recomputed on every save
    move.slug = slugify(move.condition)
    move.stat = extract_stat(move.definition)


def create_move(db: Session, form: MoveForm) -> MoveRecord:
    """Validate and persist a new move."""
    move = MoveRecord(upvotes=0, downvotes=0)
    _apply(move, form)
    db.add(move)
    db.commit()
    db.refresh(move)
    logger.info("Created move %s (%s)", move.id, move.slug)
    return move


def update_move(db: Session, move: MoveRecord, changes: dict[str, object]) -> MoveRecord:
    """Merge submitted fields onto ``move``, re-validate and persist.

    Fields missing from ``changes`` keep their stored values. Nothing is
    written when the merged move is invalid.
    """
    merged = {
        "condition": move.condition,
        "definition": move.definition,
        "tags": move.tags,
    }
    merged.update({k: v for k, v in changes.items() if k in merged and v is not None})
    _apply(move, MoveForm.model_validate(merged))
    db.commit()
    db.refresh(move)
    logger.info("Updated move %s (%s)", move.id, move.slug)
    return move


def preview_move(condition: str | None, definition: str | None) -> MovePreview:
    """Render a definition and report its validation errors without saving."""
    return MovePreview(
        condition=condition or "",
        html=render_markdown(definition),
        stat=extract_stat(definition),
        errors=validate_move(condition, definition),
    )


def get_move(db: Session, move_id: str) -> MoveRecord | None:
    return db.get(MoveRecord, move_id)


def find_by_slug(db: Session, slug: str) -> list[MoveRecord]:
    """All definitions sharing ``slug``, most upvoted first."""
    return (
        db.query(MoveRecord)
        .filter(MoveRecord.slug == slug)
        .order_by(MoveRecord.upvotes.desc(), MoveRecord.date.asc())
        .all()
    )


def _paginate(query, page: int, per_page: int) -> MovePage:
    page = max(page, 1)
    rows = (
        query.order_by(MoveRecord.date.desc())
        .offset((page - 1) * per_page)
        .limit(per_page + 1)
        .all()
    )
    return MovePage(
        moves=rows[:per_page],
        page=page,
        per_page=per_page,
        has_next=len(rows) > per_page,
    )


def list_moves(db: Session, page: int = 1, per_page: int = 10) -> MovePage:
    return _paginate(db.query(MoveRecord), page, per_page)


def moves_tagged(db: Session, tags: list[str], page: int = 1, per_page: int = 10) -> MovePage:
    """Moves carrying every tag in ``tags``, newest first."""
    query = db.query(MoveRecord)
    for tag in tags:
        # Tags only hold [a-z0-9_-]; "_" is the one LIKE wildcard to escape.
        pattern = '%"' + tag.replace("_", "\\_") + '"%'
        query = query.filter(MoveRecord.tags_json.like(pattern, escape="\\"))
    return _paginate(query, page, per_page)


def recent_moves(db: Session, limit: int) -> list[MoveRecord]:
    return db.query(MoveRecord).order_by(MoveRecord.date.desc()).limit(limit).all()


def top_listings(db: Session, moves: list[MoveRecord]) -> dict[str, ListingRecord]:
    """Map move id to its cached top listing, skipping moves without one."""
    ids = {m.top_listing_id for m in moves if m.top_listing_id}
    if not ids:
        return {}
    by_id = {
        listing.id: listing
        for listing in db.query(ListingRecord).filter(ListingRecord.id.in_(ids))
    }
    return {m.id: by_id[m.top_listing_id] for m in moves if m.top_listing_id in by_id}


def vote_move(db: Session, move_id: str, up: bool = True) -> MoveRecord | None:
    """Add one up or down vote to a move; returns ``None`` for an unknown id."""
    column = MoveRecord.upvotes if up else MoveRecord.downvotes
    result = db.execute(
        update(MoveRecord).where(MoveRecord.id == move_id).values({column: column + 1})
    )
    db.commit()
    if not result.rowcount:
        return None
    logger.info("Vote %s on move %s", "up" if up else "down", move_id)
    return db.get(MoveRecord, move_id)

"""Jinja2 template environment shared by the routers."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path

from fastapi.templating import Jinja2Templates
from markupsafe import Markup

from movewiki.config import settings
from movewiki.services.text import render_markdown

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
STATIC_DIR = Path(__file__).resolve().parent / "static"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


def _as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back naive; they are stored in UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def markdown_filter(text: str | None) -> Markup:
    return Markup(render_markdown(text))


def date_filter(value: datetime | None) -> str:
    """``18 Oct 2026`` style display date."""
    return value.strftime("%d %b %Y") if value else ""


def rfc822_filter(value: datetime | None) -> str:
    return format_datetime(_as_utc(value), usegmt=True) if value else ""


templates.env.filters["markdown"] = markdown_filter
templates.env.filters["date"] = date_filter
templates.env.filters["rfc822"] = rfc822_filter
templates.env.globals["site_title"] = settings.site_title

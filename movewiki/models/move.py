"""Move form, preview and page models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from movewiki.database import MoveRecord
from movewiki.services.text import parse_tags


class MoveForm(BaseModel):
    """Fields submitted from the new / edit move forms."""

    condition: str = ""
    definition: str = ""  # raw markdown
    tags: list[str] = Field(default_factory=list)

    @field_validator("condition", "definition", mode="before")
    @classmethod
    def _none_to_empty(cls, value: str | None) -> str:
        return value or ""

    @field_validator("tags", mode="before")
    @classmethod
    def _normalise_tags(cls, value: str | list[str] | None) -> list[str]:
        return parse_tags(value)


class MovePreview(BaseModel):
    """Rendered definition plus the errors the move would be rejected with."""

    condition: str = ""
    html: str = ""
    stat: str | None = None
    errors: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class MovePage(BaseModel):
    """One page of moves, newest first."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    moves: list[MoveRecord] = Field(default_factory=list)
    page: int = 1
    per_page: int = 10
    has_next: bool = False

    @property
    def has_prev(self) -> bool:
        return self.page > 1

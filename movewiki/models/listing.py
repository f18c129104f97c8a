"""Listing form model."""

from __future__ import annotations

from pydantic import BaseModel, field_validator


class ListingForm(BaseModel):
    """Fields submitted from the new listing form."""

    description: str = ""
    success: str = ""
    partial: str = ""
    failure: str = ""

    @field_validator("description", "success", "partial", "failure", mode="before")
    @classmethod
    def _none_to_empty(cls, value: str | None) -> str:
        return value or ""

    @property
    def is_blank(self) -> bool:
        return not self.description.strip()

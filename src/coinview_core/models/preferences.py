"""User filter preferences persisted between sessions."""

from __future__ import annotations

from pydantic import BaseModel


class Preferences(BaseModel):
    search_text: str = ""
    favorites_only: bool = False

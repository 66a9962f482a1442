"""Settings schema for hunkview."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

ViewModeSetting = Literal["unified", "side-by-side"]


class AppearanceSettings(BaseModel):
    theme: str = Field(default="textual-dark", description="Textual theme name")


class HighlightSettings(BaseModel):
    style: str = Field(default="monokai", description="Pygments style name")
    intraline: bool = Field(default=True, description="Emphasize changed characters in paired lines")
    min_similarity: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Similarity ratio below which paired lines get no character emphasis; 0 emphasizes every pair",
    )

    @field_validator("style")
    @classmethod
    def validate_style(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("style must not be empty")
        return value


class ViewSettings(BaseModel):
    mode: ViewModeSetting = Field(default="unified")
    show_footer: bool = Field(default=True)
    page_size: int = Field(default=10, ge=1, le=200)
    file_list_width: int = Field(default=30, ge=10, le=80)
    tab_width: int = Field(default=4, ge=1, le=16)


class AppSettings(BaseModel):
    schema_version: int = Field(default=1)
    appearance: AppearanceSettings = Field(default_factory=AppearanceSettings)
    highlight: HighlightSettings = Field(default_factory=HighlightSettings)
    view: ViewSettings = Field(default_factory=ViewSettings)

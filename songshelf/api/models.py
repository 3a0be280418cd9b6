"""
API models for Songshelf.

This module defines Pydantic models for the metadata service responses.
"""

from pydantic import BaseModel, ConfigDict, field_validator


class VideoInfo(BaseModel):
    """Response body of the metadata endpoint's /info route."""
    title: str
    audioUrl: str
    coverUrl: str

    model_config = ConfigDict(extra="ignore")

    @field_validator("title", "audioUrl", "coverUrl")
    def validate_not_blank(cls, v: str):
        """Reject empty strings; they cannot name a folder or be fetched."""
        if not v or not v.strip():
            raise ValueError("Field must not be empty")
        return v

"""
Shared data models for the Mood NFT service.

This module defines the core domain models used across multiple layers
of the application (registry, metadata encoding, CLI, API).
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Mood(str, Enum):
    """Binary mood attached to every token."""

    HAPPY = "HAPPY"
    SAD = "SAD"

    def flipped(self) -> "Mood":
        return Mood.SAD if self is Mood.HAPPY else Mood.HAPPY


class ImageSet(BaseModel):
    """The two image URIs shared by all tokens of a collection."""

    model_config = ConfigDict(frozen=True)

    happy_image_uri: str = Field(..., description="Image shown while HAPPY")
    sad_image_uri: str = Field(..., description="Image shown while SAD")

    def for_mood(self, mood: Mood) -> str:
        if mood is Mood.HAPPY:
            return self.happy_image_uri
        return self.sad_image_uri


class TokenState(BaseModel):
    """Represents the current state of a single token."""

    token_id: int = Field(..., ge=0, description="Sequential token id")
    mood: Mood = Field(..., description="The token's current mood")
    owner: str = Field(..., description="Identity that owns the token")


class TokenEvent(BaseModel):
    """A mint or mood flip published to stream subscribers."""

    kind: Literal["mint", "flip"] = Field(..., description="What happened")
    token_id: int = Field(..., ge=0)
    mood: Mood = Field(..., description="Mood after the event")
    owner: str = Field(..., description="Owner at the time of the event")
    timestamp: float | None = Field(
        None, description="Unix timestamp when the event occurred"
    )

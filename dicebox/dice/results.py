"""Result models returned by the dice engine.

These are plain pydantic models so the HTTP layer can serialize them
without a separate response schema.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class RollGroup(BaseModel):
    """Outcome of one dice term."""

    count: int
    sides: int
    modifier: str = Field(default="", description="Normalized suffix notation, e.g. 'kh3' or '>=5'.")
    results: list[int] = Field(
        description="Raw die values in draw order, exploded extras appended at the end."
    )
    kept: list[int] = Field(description="Values retained after keep/drop, in draw order.")
    subtotal: int


class RollResult(BaseModel):
    """Outcome of a full expression."""

    expression: str
    rolls: list[RollGroup] = Field(default_factory=list)
    total: int | float
    details: str
    critical: Literal["success", "failure"] | None = None


class ValidationResult(BaseModel):
    valid: bool
    error: str | None = None

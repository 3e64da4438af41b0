"""Pydantic request/response models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from dicebox.dice.results import RollResult


class ValidateRequest(BaseModel):
    expression: str = Field(description="Dice expression to check, e.g. '4d6kh3'.")


class RollRequest(BaseModel):
    expression: str = Field(description="Dice expression, e.g. '2d6+3' or 'd20+@strength'.")
    label: str | None = Field(default=None, description="Optional heading, e.g. 'Attack Roll'.")
    variables: dict[str, int | float] = Field(
        default_factory=dict,
        description="Values for @name references in the expression.",
    )
    times: int = Field(default=1, ge=1, le=20, description="How many times to roll.")


class RollResponse(BaseModel):
    results: list[RollResult]
    display: str = Field(description="Markdown rendering suitable for chat.")
    total: int | float = Field(description="Sum of all result totals.")
    average: float

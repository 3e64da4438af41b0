"""Dice rolling routes: validate and roll expressions."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from dicebox.dice import (
    DiceError,
    ValidationResult,
    format_multiple_rolls,
    format_roll_for_display,
    roll,
    roll_multiple,
    validate_expression,
)
from dicebox.schemas import RollRequest, RollResponse, ValidateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/rolls/validate", response_model=ValidationResult)
async def validate_roll(body: ValidateRequest) -> ValidationResult:
    """Check an expression without rolling it."""
    return validate_expression(body.expression)


@router.post("/rolls", response_model=RollResponse)
async def create_roll(body: RollRequest) -> RollResponse:
    """Roll an expression one or more times and return results plus a chat rendering."""
    try:
        if body.times > 1:
            results = roll_multiple(body.expression, body.times, body.variables)
            display = format_multiple_rolls(results, body.label)
        else:
            results = [roll(body.expression, body.variables)]
            display = format_roll_for_display(results[0], body.label)
    except DiceError as exc:
        logger.debug("Rejected roll %r: %s", body.expression, exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    total = sum(r.total for r in results)
    return RollResponse(
        results=results,
        display=display,
        total=total,
        average=total / len(results),
    )

"""Validate endpoint for decoded programs."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from glyphvm.errors import ProgramLoadError
from glyphvm.loader import jump_warnings, program_from_dict

router = APIRouter()


class ValidateRequest(BaseModel):
    """Request body for program validation."""
    program: Dict[str, Any]


class ValidateResponse(BaseModel):
    """Response body for program validation."""
    valid: bool
    program_id: Optional[str] = None
    instruction_count: int = 0
    digest: Optional[str] = None
    errors: List[str] = []
    warnings: List[str] = []


@router.post("/validate", response_model=ValidateResponse)
def validate_program(request: ValidateRequest):
    """Validate a decoded program without running it."""
    try:
        program = program_from_dict(request.program)
    except ProgramLoadError as e:
        return ValidateResponse(valid=False, errors=[str(e)])

    return ValidateResponse(
        valid=True,
        program_id=program.program_id,
        instruction_count=len(program),
        digest=program.digest(),
        warnings=jump_warnings(program),
    )

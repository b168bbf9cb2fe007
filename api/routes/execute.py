"""Execute endpoint for program runs."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from glyphvm.errors import ConfigurationError, ProgramLoadError, StepLimitExceeded
from glyphvm.loader import program_from_dict
from glyphvm.runtime.executor import ExecutionConfig
from glyphvm.runtime.interpreter import Interpreter

router = APIRouter()

# Runs triggered over HTTP always carry a step limit.
DEFAULT_MAX_STEPS = 100_000


class ExecuteRequest(BaseModel):
    """Request body for a program run."""
    program: Dict[str, Any]
    input: str = ""
    options: Optional[Dict[str, Any]] = None


class ExecuteResponse(BaseModel):
    """Response body for a program run."""
    status: str
    curses: int
    steps: int
    output: str
    reason: Optional[str] = None
    at_index: Optional[int] = None
    program_digest: str = ""
    backend: Dict[str, Any] = {}
    final_state: Optional[Dict[str, Any]] = None
    trace: Optional[List[Dict[str, Any]]] = None
    execution_time_ms: float = 0.0


@router.post("/execute", response_model=ExecuteResponse)
def execute_program(request: ExecuteRequest):
    """Run a decoded program against the given input text."""
    options = dict(request.options or {})
    if options.get("max_steps") is None:
        options["max_steps"] = DEFAULT_MAX_STEPS
    try:
        program = program_from_dict(request.program)
        config = ExecutionConfig.from_dict(options)
    except (ProgramLoadError, ConfigurationError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    interpreter = Interpreter(config)
    try:
        report = interpreter.run_buffered(program, request.input)
    except StepLimitExceeded as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ExecuteResponse(**report.to_dict())

"""
glyphvm Program Loader

JSON form of an already decoded program, validated with pydantic:

    {"program_id": "hello",
     "instructions": [
        {"op": "PUSH", "span": 1, "magnitude": 72},
        {"op": "OUTPUT_CHAR", "span": 1},
        {"op": "COMBINE", "combine": "add", "span": 2}]}

The loader does not decode glyphs; it only moves decoder output across a
file or HTTP boundary.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json

from pydantic import BaseModel, Field, ValidationError

from glyphvm.errors import ProgramLoadError
from glyphvm.runtime.program import CombineOp, Instruction, OpKind, Program


class InstructionModel(BaseModel):
    """One serialized instruction."""
    op: OpKind
    span: int = Field(default=0, ge=0)
    magnitude: int = Field(default=0, ge=0)
    origin: Optional[int] = None
    combine: Optional[CombineOp] = None


class ProgramModel(BaseModel):
    """A serialized program."""
    program_id: str = ""
    instructions: List[InstructionModel]


def program_from_dict(data: Dict[str, Any]) -> Program:
    """Build a Program from its JSON form."""
    try:
        model = ProgramModel.model_validate(data)
    except ValidationError as e:
        raise ProgramLoadError(f"Invalid program: {e}") from e

    instructions = []
    for position, item in enumerate(model.instructions):
        try:
            instructions.append(Instruction(
                opcode=item.op,
                span=item.span,
                magnitude=item.magnitude,
                origin=position if item.origin is None else item.origin,
                combine=item.combine,
            ))
        except ValueError as e:
            raise ProgramLoadError(f"Instruction {position}: {e}") from e
    return Program(instructions, program_id=model.program_id)


def program_to_dict(program: Program) -> Dict[str, Any]:
    return {
        "program_id": program.program_id,
        "instructions": [i.to_dict() for i in program],
    }


def load_program(path: Union[str, Path]) -> Program:
    """Load a program from a JSON file."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ProgramLoadError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ProgramLoadError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ProgramLoadError(f"{path}: expected a JSON object at top level")
    program = program_from_dict(data)
    if not program.program_id:
        program.program_id = path.stem
    return program


def jump_warnings(program: Program) -> List[str]:
    """Jump instructions whose target would abort the run if taken."""
    warnings = []
    for index, instruction in enumerate(program):
        if instruction.opcode.is_jump and not program.is_valid_target(instruction.magnitude):
            warnings.append(
                f"Instruction {index} ({instruction.mnemonic}) targets "
                f"{instruction.magnitude}, outside [0, {len(program)}]"
            )
    return warnings

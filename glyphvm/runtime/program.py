"""
glyphvm Program Structure

Decoded instructions and the immutable program that holds them. Instructions
are produced once by a decoder (or the JSON loader) and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple
import hashlib
import json


class OpKind(Enum):
    PUSH = "PUSH"
    COMBINE = "COMBINE"
    TRANSFER_TO_QUEUE = "TRANSFER_TO_QUEUE"
    TRANSFER_FROM_QUEUE = "TRANSFER_FROM_QUEUE"
    DUPLICATE_SPREAD = "DUPLICATE_SPREAD"
    JUMP_IF_NONPOSITIVE = "JUMP_IF_NONPOSITIVE"
    JUMP_ALWAYS = "JUMP_ALWAYS"
    OUTPUT_NUMBER = "OUTPUT_NUMBER"
    OUTPUT_CHAR = "OUTPUT_CHAR"
    INPUT_NUMBER = "INPUT_NUMBER"
    INPUT_CHAR = "INPUT_CHAR"
    TERMINATE = "TERMINATE"

    @property
    def is_jump(self) -> bool:
        return self in (OpKind.JUMP_IF_NONPOSITIVE, OpKind.JUMP_ALWAYS)


class CombineOp(Enum):
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"


# Opcodes that address exactly stack `span`; stack 0 does not exist.
SINGLE_STACK_OPS = frozenset({
    OpKind.TRANSFER_TO_QUEUE,
    OpKind.TRANSFER_FROM_QUEUE,
    OpKind.JUMP_IF_NONPOSITIVE,
    OpKind.OUTPUT_NUMBER,
    OpKind.OUTPUT_CHAR,
    OpKind.INPUT_NUMBER,
    OpKind.INPUT_CHAR,
})


@dataclass(frozen=True)
class Instruction:
    """
    One decoded instruction.

    `origin` is the position of the glyph in the source and is only used in
    diagnostics. `combine` is set for COMBINE and nothing else.
    """
    opcode: OpKind
    span: int = 0
    magnitude: int = 0
    origin: int = -1
    combine: Optional[CombineOp] = None

    def __post_init__(self):
        if self.span < 0:
            raise ValueError(f"span must be non-negative, got {self.span}")
        if self.magnitude < 0:
            raise ValueError(f"magnitude must be non-negative, got {self.magnitude}")
        if (self.opcode is OpKind.COMBINE) != (self.combine is not None):
            raise ValueError("combine operator is required for COMBINE and only for COMBINE")
        if self.opcode in SINGLE_STACK_OPS and self.span < 1:
            raise ValueError(f"{self.opcode.value} needs span >= 1")

    @property
    def mnemonic(self) -> str:
        if self.combine is not None:
            return f"{self.opcode.value}({self.combine.value})"
        return self.opcode.value

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "op": self.opcode.value,
            "span": self.span,
            "magnitude": self.magnitude,
            "origin": self.origin,
        }
        if self.combine is not None:
            data["combine"] = self.combine.value
        return data


class Program:
    """Immutable, 0-indexed sequence of instructions."""

    def __init__(self, instructions: Sequence[Instruction], program_id: str = ""):
        self._instructions: Tuple[Instruction, ...] = tuple(instructions)
        self.program_id = program_id

    def __len__(self) -> int:
        return len(self._instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self._instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        return self._instructions

    def contains(self, ip: int) -> bool:
        return 0 <= ip < len(self._instructions)

    def is_valid_target(self, target: int) -> bool:
        """Jump targets may point one past the end, which halts normally."""
        return 0 <= target <= len(self._instructions)

    def digest(self) -> str:
        """SHA-256 of the canonical JSON form of the instruction stream."""
        canon = json.dumps([i.to_dict() for i in self._instructions],
                           sort_keys=True, separators=(",", ":"))
        return "sha256:" + hashlib.sha256(canon.encode("utf-8")).hexdigest()

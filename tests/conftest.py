"""Test fixtures for the glyphvm test suite."""
import pytest
import sys
from pathlib import Path
from typing import Dict, Any

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from glyphvm.runtime.environment import BufferedIO
from glyphvm.runtime.evaluator import InstructionEvaluator
from glyphvm.runtime.program import CombineOp, Instruction, OpKind, Program
from glyphvm.runtime.rational import ArbitraryBackend, BoundedBackend, Rational
from glyphvm.runtime.state import MachineState


def r(numerator: int, denominator: int = 1) -> Rational:
    """Shorthand for building Rational values in tests."""
    return Rational(numerator, denominator)


def ins(opcode: OpKind, span: int = 0, magnitude: int = 0,
        combine: CombineOp = None) -> Instruction:
    """Shorthand for building instructions in tests."""
    return Instruction(opcode=opcode, span=span, magnitude=magnitude, combine=combine)


@pytest.fixture
def state() -> MachineState:
    """Fresh machine state."""
    return MachineState()


@pytest.fixture
def io() -> BufferedIO:
    """Empty in-memory I/O adapter."""
    return BufferedIO()


@pytest.fixture
def evaluator(state, io) -> InstructionEvaluator:
    """Evaluator on the arbitrary-precision backend."""
    return InstructionEvaluator(ArbitraryBackend(), io, state)


@pytest.fixture
def bounded_evaluator(state, io) -> InstructionEvaluator:
    """Evaluator on the 64-bit bounded backend."""
    return InstructionEvaluator(BoundedBackend(64), io, state)


@pytest.fixture
def hello_program_dict() -> Dict[str, Any]:
    """Program printing "Hi" followed by 3 + 3."""
    return {
        "program_id": "hello",
        "instructions": [
            {"op": "PUSH", "span": 1, "magnitude": 72},
            {"op": "OUTPUT_CHAR", "span": 1},
            {"op": "PUSH", "span": 1, "magnitude": 105},
            {"op": "OUTPUT_CHAR", "span": 1},
            {"op": "PUSH", "span": 1, "magnitude": 2},
            {"op": "PUSH", "span": 2, "magnitude": 3},
            {"op": "COMBINE", "combine": "add", "span": 2},
            {"op": "OUTPUT_NUMBER", "span": 2},
        ],
    }


@pytest.fixture
def countdown_program() -> Program:
    """Prints 3, 2, 1 by looping on stack 1 until it reaches zero."""
    return Program([
        ins(OpKind.PUSH, 1, 3),                          # 0  s1: n
        ins(OpKind.JUMP_IF_NONPOSITIVE, 1, 11),          # 1
        ins(OpKind.DUPLICATE_SPREAD, 2),                 # 2  s2: n
        ins(OpKind.OUTPUT_NUMBER, 2),                    # 3
        ins(OpKind.PUSH, 1, 1),                          # 4  s1: n, 1
        ins(OpKind.TRANSFER_TO_QUEUE, 1),                # 5  queue: 1
        ins(OpKind.TRANSFER_FROM_QUEUE, 2),              # 6  s2: 1
        ins(OpKind.COMBINE, 2, combine=CombineOp.SUB),   # 7  s2: n - 1
        ins(OpKind.TRANSFER_TO_QUEUE, 2),                # 8
        ins(OpKind.TRANSFER_FROM_QUEUE, 1),              # 9  s1: n - 1
        ins(OpKind.JUMP_ALWAYS, 0, 1),                   # 10
        ins(OpKind.TERMINATE),                           # 11
    ])

"""
glyphvm Runtime Engine

This package provides the execution core:
- Rational: exact arithmetic with arbitrary and bounded backends
- StackBank / ValueQueue / CurseCounter: machine state
- InstructionEvaluator: executes one instruction
- Executor: run loop and pointer resolution
- Interpreter: host entry point with tracing

Soft faults (curses) are counted and never abort a run; an out-of-range
jump target is the only fatal condition.
"""

from glyphvm.runtime.rational import (
    Rational,
    Outcome,
    NumericBackend,
    ArbitraryBackend,
    BoundedBackend,
    create_backend,
    ZERO,
)
from glyphvm.runtime.state import StackBank, ValueQueue, CurseCounter, MachineState
from glyphvm.runtime.program import OpKind, CombineOp, Instruction, Program
from glyphvm.runtime.environment import IOAdapter, StreamIO, BufferedIO
from glyphvm.runtime.evaluator import InstructionEvaluator, PointerUpdate, UpdateKind
from glyphvm.runtime.executor import Executor, ExecutionConfig, ExecutionResult, RunStatus
from glyphvm.runtime.interpreter import Interpreter, RunReport, TraceEvent

__all__ = [
    "Rational",
    "Outcome",
    "NumericBackend",
    "ArbitraryBackend",
    "BoundedBackend",
    "create_backend",
    "ZERO",
    "StackBank",
    "ValueQueue",
    "CurseCounter",
    "MachineState",
    "OpKind",
    "CombineOp",
    "Instruction",
    "Program",
    "IOAdapter",
    "StreamIO",
    "BufferedIO",
    "InstructionEvaluator",
    "PointerUpdate",
    "UpdateKind",
    "Executor",
    "ExecutionConfig",
    "ExecutionResult",
    "RunStatus",
    "Interpreter",
    "RunReport",
    "TraceEvent",
]

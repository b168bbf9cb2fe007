"""
glyphvm - interpreter core for a glyph-driven stack-machine language

Executes an already decoded instruction stream against a bank of rational
value stacks, a shared queue and a curse counter.

Exports:
- Interpreter / ExecutionConfig: run programs
- Program / Instruction / OpKind / CombineOp: decoded program structure
- Rational: exact arithmetic value
- load_program / program_from_dict: JSON program loader
"""

from glyphvm.runtime import (
    Interpreter,
    ExecutionConfig,
    ExecutionResult,
    RunStatus,
    Program,
    Instruction,
    OpKind,
    CombineOp,
    Rational,
    BufferedIO,
    StreamIO,
)
from glyphvm.loader import load_program, program_from_dict, program_to_dict
from glyphvm.errors import (
    GlyphVMError,
    InvalidJumpTarget,
    StepLimitExceeded,
    ProgramLoadError,
    ConfigurationError,
)

__version__ = "0.3.0"

__all__ = [
    "Interpreter",
    "ExecutionConfig",
    "ExecutionResult",
    "RunStatus",
    "Program",
    "Instruction",
    "OpKind",
    "CombineOp",
    "Rational",
    "BufferedIO",
    "StreamIO",
    "load_program",
    "program_from_dict",
    "program_to_dict",
    "GlyphVMError",
    "InvalidJumpTarget",
    "StepLimitExceeded",
    "ProgramLoadError",
    "ConfigurationError",
]

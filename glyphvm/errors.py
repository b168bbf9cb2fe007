"""
glyphvm error hierarchy

Recoverable faults (curses) are never raised; they are counted by the
CurseCounter. Everything here is either fatal for a run or belongs to the
host layers (loader, CLI, API).
"""

from __future__ import annotations

from typing import Optional


class GlyphVMError(Exception):
    """Base class for all glyphvm errors."""


class InvalidJumpTarget(GlyphVMError):
    """A jump instruction targeted an index outside [0, program length]."""

    reason = "invalid-jump-target"

    def __init__(self, index: int, target: int, length: int, steps: int = 0):
        super().__init__(
            f"instruction {index} jumps to {target}, outside [0, {length}]"
        )
        self.index = index
        self.target = target
        self.length = length
        self.steps = steps


class StepLimitExceeded(GlyphVMError):
    """The host-supplied step limit was reached before the program halted."""

    def __init__(self, max_steps: int, ip: Optional[int] = None):
        super().__init__(f"step limit of {max_steps} exceeded")
        self.max_steps = max_steps
        self.ip = ip


class ProgramLoadError(GlyphVMError):
    """A serialized program could not be loaded."""


class ConfigurationError(GlyphVMError):
    """An execution option is invalid."""

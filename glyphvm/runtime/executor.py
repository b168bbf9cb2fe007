"""
glyphvm Program Executor

The run loop: fetch the instruction at the pointer, dispatch it, apply the
pointer update. Walking off the end of the program is the normal way to
finish; a jump outside [0, len(program)] is the only fatal condition.

Key classes:
- ExecutionConfig: recognized run options
- ExecutionResult: Completed(curses) or Aborted(reason, index)
- Executor: the run loop
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional
import logging
import time

from glyphvm.errors import ConfigurationError, InvalidJumpTarget, StepLimitExceeded
from glyphvm.runtime.environment import IOAdapter
from glyphvm.runtime.evaluator import InstructionEvaluator, PointerUpdate, UpdateKind
from glyphvm.runtime.program import Instruction, Program
from glyphvm.runtime.rational import BACKENDS, BoundedBackend, NumericBackend, create_backend
from glyphvm.runtime.state import MachineState

logger = logging.getLogger(__name__)

StepObserver = Callable[[int, Instruction, PointerUpdate, MachineState], None]


@dataclass
class ExecutionConfig:
    """Configuration for a run."""
    numeric_backend: str = "arbitrary"
    bounded_bits: int = 64
    max_steps: Optional[int] = None
    trace: bool = False
    include_state: bool = False

    def __post_init__(self):
        self._check_types()
        if self.numeric_backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown numeric backend: {self.numeric_backend!r} "
                f"(expected one of {sorted(BACKENDS)})"
            )
        if self.numeric_backend == "bounded" and self.bounded_bits not in BoundedBackend.SUPPORTED_BITS:
            raise ConfigurationError(
                f"bounded_bits must be one of {BoundedBackend.SUPPORTED_BITS}, got {self.bounded_bits}"
            )
        if self.max_steps is not None and self.max_steps < 1:
            raise ConfigurationError(f"max_steps must be positive, got {self.max_steps}")

    def _check_types(self) -> None:
        # bool is an int subclass; neither width nor step count may be one
        def is_int(value: Any) -> bool:
            return isinstance(value, int) and not isinstance(value, bool)

        if not isinstance(self.numeric_backend, str):
            raise ConfigurationError(
                f"numeric_backend must be a string, got {self.numeric_backend!r}"
            )
        if not is_int(self.bounded_bits):
            raise ConfigurationError(f"bounded_bits must be an integer, got {self.bounded_bits!r}")
        if self.max_steps is not None and not is_int(self.max_steps):
            raise ConfigurationError(f"max_steps must be an integer, got {self.max_steps!r}")
        for name in ("trace", "include_state"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be a boolean, got {getattr(self, name)!r}")

    @classmethod
    def from_dict(cls, options: Optional[Dict[str, Any]]) -> "ExecutionConfig":
        """Build a config from CLI/API options, rejecting unknown keys."""
        options = dict(options or {})
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}")
        return cls(**options)

    def create_backend(self) -> NumericBackend:
        return create_backend(self.numeric_backend, self.bounded_bits)


class RunStatus(Enum):
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"


@dataclass
class ExecutionResult:
    """Result of one run."""
    status: RunStatus
    curses: int
    steps: int = 0
    reason: Optional[str] = None
    at_index: Optional[int] = None
    program_digest: str = ""
    backend: Dict[str, Any] = field(default_factory=dict)
    final_state: Optional[Dict[str, Any]] = None
    execution_time_ms: float = 0.0

    @property
    def completed(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @classmethod
    def completed_with(cls, curses: int, **kwargs: Any) -> "ExecutionResult":
        return cls(status=RunStatus.COMPLETED, curses=curses, **kwargs)

    @classmethod
    def aborted_with(cls, reason: str, at_index: int, curses: int,
                     **kwargs: Any) -> "ExecutionResult":
        return cls(status=RunStatus.ABORTED, curses=curses, reason=reason,
                   at_index=at_index, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "curses": self.curses,
            "steps": self.steps,
            "reason": self.reason,
            "at_index": self.at_index,
            "program_digest": self.program_digest,
            "backend": self.backend,
            "final_state": self.final_state,
            "execution_time_ms": self.execution_time_ms,
        }


class Executor:
    """
    Runs a Program to completion.

    Each call to `execute` builds a fresh MachineState, so independent runs
    never share stacks, queue or curse count.
    """

    def __init__(self, config: ExecutionConfig = None):
        self.config = config or ExecutionConfig()

    def execute(self,
                program: Program,
                io: IOAdapter,
                observer: Optional[StepObserver] = None) -> ExecutionResult:
        """
        Execute `program` against `io`.

        Returns a COMPLETED or ABORTED result. StepLimitExceeded propagates
        when the host configured `max_steps`.
        """
        start = time.time()
        backend = self.config.create_backend()
        state = MachineState()
        evaluator = InstructionEvaluator(backend, io, state)

        common = {
            "program_digest": program.digest(),
            "backend": backend.describe(),
        }
        logger.info(f"Running {len(program)} instructions on the {backend.name} backend")

        steps = 0
        try:
            steps = self._run(program, evaluator, state, observer)
        except InvalidJumpTarget as e:
            logger.warning(f"Run aborted: {e}")
            result = ExecutionResult.aborted_with(
                InvalidJumpTarget.reason, e.index, state.curses.count,
                steps=e.steps, **common
            )
        else:
            result = ExecutionResult.completed_with(
                state.curses.count, steps=steps, **common
            )
            logger.info(f"Run completed after {steps} steps with {state.curses.count} curses")

        if self.config.include_state:
            result.final_state = state.to_dict()
        result.execution_time_ms = (time.time() - start) * 1000
        return result

    def _run(self,
             program: Program,
             evaluator: InstructionEvaluator,
             state: MachineState,
             observer: Optional[StepObserver]) -> int:
        max_steps = self.config.max_steps
        ip = 0
        steps = 0
        while program.contains(ip):
            if max_steps is not None and steps >= max_steps:
                raise StepLimitExceeded(max_steps, ip)

            instruction = program[ip]
            update = evaluator.dispatch(instruction, ip)
            steps += 1
            if observer is not None:
                observer(ip, instruction, update, state)

            if update.kind is UpdateKind.ADVANCE:
                ip += 1
            elif update.kind is UpdateKind.JUMP_TO:
                if not program.is_valid_target(update.target):
                    raise InvalidJumpTarget(ip, update.target, len(program), steps)
                ip = update.target
            else:
                break
        return steps

"""
glyphvm Interpreter

Host-facing entry point around the Executor. Adds an optional step trace and
the in-memory convenience used by the CLI and the HTTP API.

Key classes:
- TraceEvent: one dispatched instruction as seen by the host
- RunReport: ExecutionResult plus captured output and trace
- Interpreter: runs programs, each with fresh machine state
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from glyphvm.runtime.environment import BufferedIO, IOAdapter
from glyphvm.runtime.evaluator import PointerUpdate
from glyphvm.runtime.executor import ExecutionConfig, ExecutionResult, Executor
from glyphvm.runtime.program import Instruction, Program
from glyphvm.runtime.state import MachineState

logger = logging.getLogger(__name__)


@dataclass
class TraceEvent:
    """One step of a traced run."""
    step_index: int
    ip: int
    instruction: str
    origin: int
    update: str
    target: Optional[int]
    curses: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_index": self.step_index,
            "ip": self.ip,
            "instruction": self.instruction,
            "origin": self.origin,
            "update": self.update,
            "target": self.target,
            "curses": self.curses,
        }


@dataclass
class RunReport:
    """Result of `Interpreter.run_buffered`."""
    result: ExecutionResult
    output: str = ""
    trace: List[TraceEvent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.result.to_dict()
        data["output"] = self.output
        if self.trace:
            data["trace"] = [event.to_dict() for event in self.trace]
        return data


class Interpreter:
    """
    Runs programs.

    The interpreter itself keeps only the trace of the most recent run;
    machine state is created inside every `interpret` call.
    """

    def __init__(self, config: ExecutionConfig = None):
        self.config = config or ExecutionConfig()
        self.executor = Executor(self.config)
        self.trace_events: List[TraceEvent] = []

    def interpret(self, program: Program, io: IOAdapter) -> ExecutionResult:
        """Run `program` against `io` and return its result."""
        self.trace_events = []
        observer = self._record if self.config.trace else None
        return self.executor.execute(program, io, observer)

    def run_buffered(self, program: Program, input_text: str = "") -> RunReport:
        """Run with in-memory input and return the captured output alongside the result."""
        io = BufferedIO(input_text)
        result = self.interpret(program, io)
        return RunReport(result=result, output=io.output, trace=list(self.trace_events))

    def _record(self,
                ip: int,
                instruction: Instruction,
                update: PointerUpdate,
                state: MachineState) -> None:
        event = TraceEvent(
            step_index=len(self.trace_events),
            ip=ip,
            instruction=instruction.mnemonic,
            origin=instruction.origin,
            update=update.kind.value,
            target=update.target,
            curses=state.curses.count,
        )
        logger.debug("step %d: ip=%d %s -> %s",
                     event.step_index, ip, event.instruction, event.update)
        self.trace_events.append(event)

    def get_trace(self) -> List[Dict[str, Any]]:
        return [event.to_dict() for event in self.trace_events]

"""
glyphvm Instruction Evaluator

Executes one decoded instruction against the machine state and tells the run
loop where to go next.

Every stack, queue and arithmetic primitive hands back an Outcome; the
evaluator records each fault on the CurseCounter and carries on with the
policy value. Nothing in here raises for a data-dependent condition.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional
import logging

from glyphvm.runtime.environment import IOAdapter
from glyphvm.runtime.program import CombineOp, Instruction, OpKind
from glyphvm.runtime.rational import ZERO, NumericBackend, Outcome, Rational
from glyphvm.runtime.state import MachineState

logger = logging.getLogger(__name__)

MAX_CODEPOINT = 0x10FFFF
SURROGATES = range(0xD800, 0xE000)


class UpdateKind(Enum):
    ADVANCE = "ADVANCE"
    JUMP_TO = "JUMP_TO"
    HALT = "HALT"


@dataclass(frozen=True)
class PointerUpdate:
    """What the run loop does with the instruction pointer after a dispatch."""
    kind: UpdateKind
    target: Optional[int] = None

    @classmethod
    def advance(cls) -> "PointerUpdate":
        return cls(UpdateKind.ADVANCE)

    @classmethod
    def jump_to(cls, target: int) -> "PointerUpdate":
        return cls(UpdateKind.JUMP_TO, target)

    @classmethod
    def halt(cls) -> "PointerUpdate":
        return cls(UpdateKind.HALT)


ADVANCE = PointerUpdate.advance()
HALT = PointerUpdate.halt()


class InstructionEvaluator:
    """
    Dispatches instructions.

    Holds no machine state of its own beyond references to the run's
    MachineState, the numeric backend and the I/O adapter.
    """

    def __init__(self,
                 backend: NumericBackend,
                 io: IOAdapter,
                 state: MachineState):
        self.backend = backend
        self.io = io
        self.state = state
        self._handlers: Dict[OpKind, Callable[[Instruction, int], PointerUpdate]] = {
            OpKind.PUSH: self._eval_push,
            OpKind.COMBINE: self._eval_combine,
            OpKind.TRANSFER_TO_QUEUE: self._eval_transfer_to_queue,
            OpKind.TRANSFER_FROM_QUEUE: self._eval_transfer_from_queue,
            OpKind.DUPLICATE_SPREAD: self._eval_duplicate_spread,
            OpKind.JUMP_IF_NONPOSITIVE: self._eval_jump_if_nonpositive,
            OpKind.JUMP_ALWAYS: self._eval_jump_always,
            OpKind.OUTPUT_NUMBER: self._eval_output_number,
            OpKind.OUTPUT_CHAR: self._eval_output_char,
            OpKind.INPUT_NUMBER: self._eval_input_number,
            OpKind.INPUT_CHAR: self._eval_input_char,
            OpKind.TERMINATE: self._eval_terminate,
        }
        self._combiners: Dict[CombineOp, Callable[[Rational, Rational], Outcome]] = {
            CombineOp.ADD: backend.add,
            CombineOp.SUB: backend.subtract,
            CombineOp.MUL: backend.multiply,
            CombineOp.DIV: backend.divide,
        }

    def dispatch(self, instruction: Instruction, ip: int) -> PointerUpdate:
        """Execute `instruction`, located at index `ip`, and return the pointer update."""
        return self._handlers[instruction.opcode](instruction, ip)

    def _curse(self, ip: int, instruction: Instruction, reason: str) -> None:
        self.state.curses.curse()
        logger.debug("Curse #%d at %d (%s): %s",
                     self.state.curses.count, ip, instruction.mnemonic, reason)

    def _take(self, outcome: Outcome, ip: int, instruction: Instruction, reason: str) -> Rational:
        if outcome.fault:
            self._curse(ip, instruction, reason)
        return outcome.value

    def _eval_push(self, instruction: Instruction, ip: int) -> PointerUpdate:
        value = self._take(self.backend.from_integer(instruction.magnitude),
                           ip, instruction, "magnitude out of range")
        for index in range(1, instruction.span + 1):
            self.state.stacks.push(index, value)
        return ADVANCE

    def _eval_combine(self, instruction: Instruction, ip: int) -> PointerUpdate:
        """
        Chain `op` across stacks 1..span.

        Step i pops stack i (left operand) and stack i+1 (right operand) and
        pushes the result back onto stack i+1, so the accumulated value ends
        on stack `span`. A faulting step contributes 0/1 and the chain goes on.
        """
        stacks = self.state.stacks
        combine = self._combiners[instruction.combine]
        for i in range(1, instruction.span):
            left = self._take(stacks.pop(i), ip, instruction, f"stack {i} is empty")
            right = self._take(stacks.pop(i + 1), ip, instruction, f"stack {i + 1} is empty")
            reason = ("division by zero" if instruction.combine is CombineOp.DIV
                      and right.sign() == 0 else "arithmetic overflow")
            stacks.push(i + 1, self._take(combine(left, right), ip, instruction, reason))
        return ADVANCE

    def _eval_transfer_to_queue(self, instruction: Instruction, ip: int) -> PointerUpdate:
        index = instruction.span
        value = self._take(self.state.stacks.pop(index), ip, instruction,
                           f"stack {index} is empty")
        self.state.queue.enqueue(value)
        return ADVANCE

    def _eval_transfer_from_queue(self, instruction: Instruction, ip: int) -> PointerUpdate:
        value = self._take(self.state.queue.dequeue(), ip, instruction, "queue is empty")
        self.state.stacks.push(instruction.span, value)
        return ADVANCE

    def _eval_duplicate_spread(self, instruction: Instruction, ip: int) -> PointerUpdate:
        stacks = self.state.stacks
        value = self._take(stacks.peek(1), ip, instruction, "stack 1 is empty")
        for index in range(2, instruction.span + 1):
            stacks.push(index, value)
        return ADVANCE

    def _eval_jump_if_nonpositive(self, instruction: Instruction, ip: int) -> PointerUpdate:
        sign, fault = self.state.stacks.peek_sign(instruction.span)
        if fault:
            self._curse(ip, instruction, f"stack {instruction.span} is empty")
        if sign <= 0:
            return PointerUpdate.jump_to(instruction.magnitude)
        return ADVANCE

    def _eval_jump_always(self, instruction: Instruction, ip: int) -> PointerUpdate:
        return PointerUpdate.jump_to(instruction.magnitude)

    def _eval_output_number(self, instruction: Instruction, ip: int) -> PointerUpdate:
        index = instruction.span
        value = self._take(self.state.stacks.pop(index), ip, instruction,
                           f"stack {index} is empty")
        self.io.write_text(str(value))
        return ADVANCE

    def _eval_output_char(self, instruction: Instruction, ip: int) -> PointerUpdate:
        index = instruction.span
        outcome = self.state.stacks.pop(index)
        if outcome.fault:
            self._curse(ip, instruction, f"stack {index} is empty")
            return ADVANCE

        codepoint = outcome.value.to_integer()
        if codepoint is None or codepoint < 0 or codepoint > MAX_CODEPOINT \
                or codepoint in SURROGATES:
            self._curse(ip, instruction, f"{outcome.value} is not a code point")
            return ADVANCE

        self.io.write_codepoint(codepoint)
        return ADVANCE

    def _eval_input_number(self, instruction: Instruction, ip: int) -> PointerUpdate:
        token = self.io.read_number()
        if token is None:
            self._curse(ip, instruction, "end of input")
            value = ZERO
        else:
            parsed = Rational.parse(token)
            if parsed is None:
                self._curse(ip, instruction, f"cannot parse {token!r}")
                value = ZERO
            else:
                value = self._take(self.backend.admit(parsed), ip, instruction,
                                   "input out of range")
        self.state.stacks.push(instruction.span, value)
        return ADVANCE

    def _eval_input_char(self, instruction: Instruction, ip: int) -> PointerUpdate:
        codepoint = self.io.read_codepoint()
        if codepoint is None:
            self._curse(ip, instruction, "end of input")
            value = ZERO
        else:
            value = self._take(self.backend.from_integer(codepoint), ip, instruction,
                               "code point out of range")
        self.state.stacks.push(instruction.span, value)
        return ADVANCE

    def _eval_terminate(self, instruction: Instruction, ip: int) -> PointerUpdate:
        return HALT

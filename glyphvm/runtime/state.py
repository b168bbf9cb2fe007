"""
glyphvm Machine State

The mutable state one run owns: the stack bank, the shared queue and the
curse counter. Stored values are only reachable through the primitives
defined here; an empty pop, peek or dequeue yields the policy value 0/1 and
a fault flag instead of failing.

Key classes:
- StackBank: lazily created stacks keyed by positive index
- ValueQueue: single FIFO buffer
- CurseCounter: monotonically non-decreasing fault counter
- MachineState: the three of them, created fresh per run
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Tuple

from glyphvm.runtime.rational import Outcome, Rational


class StackBank:
    """
    Sparse bank of independent value stacks.

    A stack comes into existence, empty, the first time its index is
    referenced and lives for the rest of the run.
    """

    def __init__(self):
        self._stacks: Dict[int, List[Rational]] = {}

    def _stack(self, index: int) -> List[Rational]:
        if index < 1:
            raise ValueError(f"stack index must be >= 1, got {index}")
        return self._stacks.setdefault(index, [])

    def push(self, index: int, value: Rational) -> None:
        self._stack(index).append(value)

    def pop(self, index: int) -> Outcome:
        stack = self._stack(index)
        if not stack:
            return Outcome.cursed()
        return Outcome(stack.pop())

    def peek(self, index: int) -> Outcome:
        stack = self._stack(index)
        if not stack:
            return Outcome.cursed()
        return Outcome(stack[-1])

    def peek_sign(self, index: int) -> Tuple[int, bool]:
        """Sign of the top of a stack; an empty stack reads as sign 0 with a fault."""
        outcome = self.peek(index)
        return outcome.value.sign(), outcome.fault

    def depth(self, index: int) -> int:
        return len(self._stack(index))

    def values(self, index: int) -> List[Rational]:
        """Copy of a stack, bottom first."""
        return list(self._stack(index))

    def indices(self) -> List[int]:
        return sorted(self._stacks)

    def snapshot(self) -> Dict[str, List[str]]:
        return {str(i): [str(v) for v in self._stacks[i]] for i in self.indices()}


class ValueQueue:
    """FIFO shared by the whole run: enqueue at the back, dequeue from the front."""

    def __init__(self):
        self._items: Deque[Rational] = deque()

    def enqueue(self, value: Rational) -> None:
        self._items.append(value)

    def dequeue(self) -> Outcome:
        if not self._items:
            return Outcome.cursed()
        return Outcome(self._items.popleft())

    def __len__(self) -> int:
        return len(self._items)

    def snapshot(self) -> List[str]:
        return [str(v) for v in self._items]


class CurseCounter:
    """Counts recoverable faults. Only ever grows, by exactly one per fault."""

    def __init__(self):
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    def curse(self) -> None:
        self._count += 1

    def record(self, fault: bool) -> bool:
        """Count `fault` if set and hand it back, so callers can chain on it."""
        if fault:
            self._count += 1
        return fault

    def __int__(self) -> int:
        return self._count


@dataclass
class MachineState:
    """
    Mutable context for one run.

    Passed by reference into the dispatcher; never shared between runs.
    """
    stacks: StackBank = field(default_factory=StackBank)
    queue: ValueQueue = field(default_factory=ValueQueue)
    curses: CurseCounter = field(default_factory=CurseCounter)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stacks": self.stacks.snapshot(),
            "queue": self.queue.snapshot(),
            "curses": self.curses.count,
        }

"""
glyphvm I/O Environment

The I/O adapter is the only way a running program touches the outside world.
The core calls four synchronous methods and never sees buffering, encoding
or stream lifecycle.

Key classes:
- IOAdapter: protocol the dispatcher consumes
- CodepointIO: shared token logic over a code point source
- StreamIO: UTF-8 byte stream in, text stream out (console use)
- BufferedIO: in-memory input and captured output (tests, HTTP API)
"""

from __future__ import annotations

from typing import BinaryIO, Iterator, List, Optional, Protocol, TextIO, runtime_checkable
import logging

logger = logging.getLogger(__name__)

_CONTINUATION_MASKS = (0x7F, 0x1F, 0x0F, 0x07)


@runtime_checkable
class IOAdapter(Protocol):
    def read_number(self) -> Optional[str]:
        """Next whitespace-delimited token, or None at end of input."""
        ...

    def read_codepoint(self) -> Optional[int]:
        """Next code point, or None at end of input."""
        ...

    def write_text(self, text: str) -> None:
        ...

    def write_codepoint(self, codepoint: int) -> None:
        ...


def read_codepoint(stream: BinaryIO) -> Optional[int]:
    """
    Decode one UTF-8 code point from a byte stream.

    Returns None at end of stream and for malformed sequences, which the
    program observes the same way as end of input.
    """
    first = stream.read(1)
    if not first:
        return None
    lead = first[0]
    if lead & 0x80 == 0:
        return lead
    if lead & 0xE0 == 0xC0:
        extra = 1
    elif lead & 0xF0 == 0xE0:
        extra = 2
    elif lead & 0xF8 == 0xF0:
        extra = 3
    else:
        logger.debug(f"Invalid UTF-8 lead byte 0x{lead:02x}")
        return None

    tail = stream.read(extra)
    if len(tail) != extra or not all(b & 0xC0 == 0x80 for b in tail):
        logger.debug("Truncated or malformed UTF-8 sequence")
        return None

    codepoint = lead & _CONTINUATION_MASKS[extra]
    for b in tail:
        codepoint = (codepoint << 6) | (b & 0x3F)
    return codepoint


class CodepointIO:
    """
    Base adapter: numeric tokens are built from the code point source.

    A token is a maximal run of non-whitespace code points; the whitespace
    that ends it is consumed.
    """

    def _next_codepoint(self) -> Optional[int]:
        raise NotImplementedError

    def _emit(self, text: str) -> None:
        raise NotImplementedError

    def read_codepoint(self) -> Optional[int]:
        return self._next_codepoint()

    def read_number(self) -> Optional[str]:
        cp = self._next_codepoint()
        while cp is not None and chr(cp).isspace():
            cp = self._next_codepoint()
        if cp is None:
            return None

        chars: List[str] = []
        while cp is not None and not chr(cp).isspace():
            chars.append(chr(cp))
            cp = self._next_codepoint()
        return "".join(chars)

    def write_text(self, text: str) -> None:
        self._emit(text)

    def write_codepoint(self, codepoint: int) -> None:
        self._emit(chr(codepoint))


class StreamIO(CodepointIO):
    """Console adapter: reads UTF-8 bytes, writes text."""

    def __init__(self, stdin: BinaryIO, stdout: TextIO):
        self.stdin = stdin
        self.stdout = stdout

    def _next_codepoint(self) -> Optional[int]:
        return read_codepoint(self.stdin)

    def _emit(self, text: str) -> None:
        self.stdout.write(text)

    def close(self) -> None:
        self.stdout.flush()


class BufferedIO(CodepointIO):
    """In-memory adapter with captured output."""

    def __init__(self, input_text: str = ""):
        self._input: Iterator[str] = iter(input_text)
        self._output: List[str] = []

    def _next_codepoint(self) -> Optional[int]:
        ch = next(self._input, None)
        return None if ch is None else ord(ch)

    def _emit(self, text: str) -> None:
        self._output.append(text)

    @property
    def output(self) -> str:
        return "".join(self._output)

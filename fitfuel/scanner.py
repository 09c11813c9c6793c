"""
Character scanner for partial JSON streamed from the LLM.

Tracks object/array nesting and string/escape state so that a truncated
response can be cut at a safe point and closed again.
"""

from dataclasses import dataclass, field
from typing import List, Optional

CLOSER_FOR = {"{": "}", "[": "]"}
OPENER_FOR = {"}": "{", "]": "["}


@dataclass
class ScanState:
    """Nesting and string state after scanning some text from its start"""
    brace_depth: int = 0
    bracket_depth: int = 0
    in_string: bool = False
    pending_escape: bool = False
    # Open containers, outermost first
    open_stack: List[str] = field(default_factory=list)

    @property
    def closable(self) -> bool:
        """False while the scan ended inside a string or right after a backslash"""
        return not self.in_string and not self.pending_escape

    @property
    def balanced(self) -> bool:
        return self.closable and not self.open_stack

    def closing_suffix(self) -> str:
        """Closers for every open container, innermost first"""
        return "".join(CLOSER_FOR[opener] for opener in reversed(self.open_stack))


class ScanCursor:
    """
    Incremental scanner over an append-only buffer.

    Feeding fragments one after another gives the same state as scanning
    their concatenation in one go, because string and escape state are
    carried across fragment edges.
    """

    def __init__(self):
        self.state = ScanState()
        self.offset = 0
        # Offset just past the most recent "}" seen outside a string
        self.last_object_end: Optional[int] = None

    def feed(self, text: str) -> ScanState:
        state = self.state
        stack = state.open_stack
        for char in text:
            self.offset += 1

            if state.pending_escape:
                # Escaped character is taken literally, even a quote
                state.pending_escape = False
                continue

            if state.in_string:
                if char == "\\":
                    state.pending_escape = True
                elif char == '"':
                    state.in_string = False
                continue

            # A backslash outside a string is not an escape and is ignored
            if char == '"':
                state.in_string = True
            elif char == "{":
                state.brace_depth += 1
                stack.append(char)
            elif char == "[":
                state.bracket_depth += 1
                stack.append(char)
            elif char == "}":
                state.brace_depth -= 1
                if stack and stack[-1] == OPENER_FOR[char]:
                    stack.pop()
                self.last_object_end = self.offset
            elif char == "]":
                state.bracket_depth -= 1
                if stack and stack[-1] == OPENER_FOR[char]:
                    stack.pop()
        return state


def scan(text: str) -> ScanState:
    """Scan text from its first character"""
    cursor = ScanCursor()
    return cursor.feed(text)


def repair(prefix: str) -> str:
    """
    Append the closing brackets/braces a truncated prefix is missing.

    A balanced prefix comes back unchanged. Nothing is done about a value,
    key or string left half written, so the result may still not parse;
    callers are expected to handle that.
    """
    return prefix + scan(prefix).closing_suffix()

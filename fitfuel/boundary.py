"""
Cheap checks that decide when a streamed buffer is worth parsing
"""

import re
from typing import Optional

from fitfuel.scanner import ScanCursor

# A closed nutrition object with at least a calorie figure, e.g.
# "nutrition": {"calories": 450, "protein": 25, ...}
NUTRITION_BLOCK_RE = re.compile(r'"nutrition"\s*:\s*\{[^{}]*"calories"\s*:\s*-?\d[^{}]*\}')


def count_nutrition_blocks(text: str) -> int:
    return len(NUTRITION_BLOCK_RE.findall(text))


def last_complete_record_end(buffer: str) -> Optional[int]:
    """Offset just past the rightmost object-closing brace outside a string"""
    cursor = ScanCursor()
    cursor.feed(buffer)
    return cursor.last_object_end


class BoundaryDetector:
    """
    Two-stage gate in front of the parse step.

    A new fragment must contain a closing brace, and the buffer must hold
    more nutrition blocks than at the last successful check, before the
    structural cut point is looked up at all.
    """

    def __init__(self):
        self.checked_blocks = 0
        self.last_boundary: Optional[int] = None
        self._pending_blocks = 0

    def candidate(self, fragment: str, buffer: str, cursor: ScanCursor) -> Optional[int]:
        """Return the offset to cut the buffer at, or None when nothing new closed"""
        if "}" not in fragment:
            return None

        blocks = count_nutrition_blocks(buffer)
        if blocks <= self.checked_blocks:
            return None

        end = cursor.last_object_end
        if end is None or end == self.last_boundary:
            return None

        self._pending_blocks = blocks
        return end

    def confirm(self, end: int) -> None:
        """Record that the cut at `end` parsed, so it is not tried again"""
        self.checked_blocks = self._pending_blocks
        self.last_boundary = end

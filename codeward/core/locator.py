#!/usr/bin/env python3
"""
Codeward Match Locator
Finds every occurrence of a rule pattern in raw file content and maps
character offsets back to 1-based line/column positions.
"""

import re
import time
from dataclasses import dataclass
from typing import List, Optional

from codeward.exceptions import MatchTimeoutError


@dataclass(frozen=True)
class RawMatch:
    """A pattern occurrence before position resolution"""
    offset: int
    matched_text: str


@dataclass(frozen=True)
class Position:
    """1-based line and column"""
    line: int
    column: int


class MatchLocator:
    """
    Stateful-cursor pattern matching over whole-file content.

    Each search resumes at the end of the previous match. A zero-length
    match moves the cursor one character forward so that patterns able to
    match the empty string still terminate.
    """

    def locate(self, content: str, rule, deadline: Optional[float] = None) -> List[RawMatch]:
        """
        Find all occurrences of a rule's pattern.

        Args:
            content: File content
            rule: Rule whose compiled pattern is applied
            deadline: Optional time.monotonic() value after which matching
                for this rule is abandoned

        Raises:
            MatchTimeoutError: if the deadline passes between two matches
        """
        return self.find_all(content, rule.pattern, deadline=deadline, label=rule.id)

    def find_all(self, content: str, pattern: re.Pattern,
                 deadline: Optional[float] = None, label: str = "pattern") -> List[RawMatch]:
        matches: List[RawMatch] = []
        started = time.monotonic()
        pos = 0
        end = len(content)

        while pos <= end:
            match = pattern.search(content, pos)
            if match is None:
                break

            matches.append(RawMatch(offset=match.start(), matched_text=match.group(0)))

            if match.end() == match.start():
                pos = match.end() + 1
            else:
                pos = match.end()

            if deadline is not None and time.monotonic() > deadline:
                raise MatchTimeoutError(label, time.monotonic() - started)

        return matches

    @staticmethod
    def resolve_position(content: str, offset: int) -> Position:
        """Convert a character offset into a 1-based line and column"""
        line = content.count('\n', 0, offset) + 1
        column = offset - content.rfind('\n', 0, offset)
        return Position(line=line, column=column)

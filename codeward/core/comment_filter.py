#!/usr/bin/env python3
"""
Codeward Comment Filter

Suppresses matches that sit inside comments so that documentation and
commented-out examples do not produce findings.

Two modes:
1. heuristic (default): looks only at the line prefix up to the match.
   A '//' anywhere in that prefix suppresses the match, including one inside
   a string literal such as "http://...".
2. lexical: walks the same prefix tracking string literals, so comment
   markers inside strings are ignored. Still line-local.
"""

from typing import Tuple

from codeward.exceptions import ConfigError

COMMENT_MODES: Tuple[str, ...] = ('heuristic', 'lexical')

_QUOTES = ('"', "'", '`')


class CommentFilter:
    """Line-local comment detection for match suppression"""

    def __init__(self, mode: str = 'heuristic'):
        if mode not in COMMENT_MODES:
            raise ConfigError(f"Unknown comment mode '{mode}' (expected one of: {', '.join(COMMENT_MODES)})")
        self.mode = mode

    def __repr__(self) -> str:
        return f"CommentFilter(mode={self.mode!r})"

    def is_suppressed(self, line_text: str, column: int) -> bool:
        """
        Check whether a match at the given 1-based column is inside a comment.

        Args:
            line_text: Untrimmed text of the matched line
            column: 1-based column of the match start

        Returns:
            True if the match should be dropped
        """
        if self.mode == 'lexical':
            return self._in_comment_lexical(line_text[:column - 1])
        return self._in_comment_heuristic(line_text[:column])

    @staticmethod
    def _in_comment_heuristic(before: str) -> bool:
        # Single-line comment anywhere before the match
        if '//' in before:
            return True

        # Block comment opened and not closed on this line
        block_start = before.rfind('/*')
        block_end = before.rfind('*/')
        if block_start != -1 and block_start > block_end:
            return True

        return False

    @staticmethod
    def _in_comment_lexical(before: str) -> bool:
        quote = None
        in_block = False
        i = 0
        n = len(before)

        while i < n:
            char = before[i]
            pair = before[i:i + 2]

            if in_block:
                if pair == '*/':
                    in_block = False
                    i += 2
                    continue
            elif quote:
                if char == '\\':
                    i += 2
                    continue
                if char == quote:
                    quote = None
            elif char in _QUOTES:
                quote = char
            elif pair == '//':
                return True
            elif pair == '/*':
                in_block = True
                i += 2
                continue
            i += 1

        return in_block

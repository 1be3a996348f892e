"""
Tests for match location and position resolution
"""
import re
import time

import pytest

from codeward.core.locator import MatchLocator, Position
from codeward.exceptions import MatchTimeoutError
from codeward.rules import get_catalog


@pytest.fixture
def locator():
    return MatchLocator()


class TestFindAll:
    """Stateful-cursor matching"""

    def test_all_occurrences_in_order(self, locator):
        matches = locator.find_all("eval(a); eval(b); eval(c)", re.compile(r'eval\('))
        assert [m.offset for m in matches] == [0, 9, 18]
        assert all(m.matched_text == 'eval(' for m in matches)

    def test_no_match(self, locator):
        assert locator.find_all("const a = 1;", re.compile(r'eval\(')) == []

    def test_empty_content(self, locator):
        assert locator.find_all("", re.compile(r'eval\(')) == []

    def test_zero_length_pattern_terminates(self, locator):
        matches = locator.find_all("axxb", re.compile(r'x*'))
        assert [m.offset for m in matches] == [0, 1, 3, 4]

    def test_empty_pattern_on_empty_content(self, locator):
        matches = locator.find_all("", re.compile(r''))
        assert [m.offset for m in matches] == [0]

    def test_matches_do_not_overlap(self, locator):
        matches = locator.find_all("aaaa", re.compile(r'aa'))
        assert [m.offset for m in matches] == [0, 2]

    def test_expired_deadline_raises(self, locator):
        with pytest.raises(MatchTimeoutError) as exc_info:
            locator.find_all("eval(a); eval(b)", re.compile(r'eval\('),
                             deadline=time.monotonic() - 1, label='CW-EVAL-001')

        assert exc_info.value.rule_id == 'CW-EVAL-001'
        assert exc_info.value.elapsed >= 0

    def test_expired_deadline_without_matches(self, locator):
        # Deadline is only checked between matches
        matches = locator.find_all("nothing here", re.compile(r'eval\('),
                                   deadline=time.monotonic() - 1)
        assert matches == []

    def test_locate_uses_rule_pattern(self, locator):
        rule = get_catalog().get('CW-RAND-001')
        matches = locator.locate("x = Math.random();", rule)
        assert [m.offset for m in matches] == [4]


class TestResolvePosition:
    """Offset to line/column conversion"""

    def test_first_character(self):
        assert MatchLocator.resolve_position("eval(x)", 0) == Position(line=1, column=1)

    def test_later_line(self):
        content = "line one\nline two\n  eval(x)"
        offset = content.index('eval')
        assert MatchLocator.resolve_position(content, offset) == Position(line=3, column=3)

    def test_offset_right_after_newline(self):
        content = "a\nb"
        assert MatchLocator.resolve_position(content, 2) == Position(line=2, column=1)

    def test_crlf_counts_lines_by_newline(self):
        content = "a\r\nb\r\neval()"
        offset = content.index('eval')
        assert MatchLocator.resolve_position(content, offset).line == 3

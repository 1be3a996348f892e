#!/usr/bin/env python3
"""
Codeward Pattern Scanner
Applies every rule of a RuleCatalog to one file's content
"""

import logging
import time
from typing import List, Optional, Sequence, Tuple

from codeward.core.comment_filter import CommentFilter
from codeward.core.locator import MatchLocator
from codeward.exceptions import MatchTimeoutError
from codeward.models import FileRecord, SecurityIssue
from codeward.rules import Rule, RuleCatalog, get_catalog
from codeward.scanners.base import BaseScanner, FileScanResult

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = ['.js', '.jsx', '.ts', '.tsx', '.mjs', '.cjs']


class PatternScanner(BaseScanner):
    """
    Regex rule scanner for JavaScript/TypeScript sources

    For each rule in catalog order:
    - locate every match in the file content
    - resolve its line/column and evidence line
    - drop it if the comment filter says it sits in a comment
    - emit one SecurityIssue otherwise

    Issues from different rules on the same code are all kept.
    """

    def __init__(self,
                 catalog: Optional[RuleCatalog] = None,
                 comment_filter: Optional[CommentFilter] = None,
                 match_timeout: Optional[float] = None,
                 extensions: Optional[Sequence[str]] = None):
        super().__init__()
        self.catalog = catalog if catalog is not None else get_catalog()
        self.comment_filter = comment_filter or CommentFilter()
        # Seconds per (file, rule) pair; None or 0 disables the bound
        self.match_timeout = match_timeout or None
        self.extensions = [ext.lower() for ext in (extensions or DEFAULT_EXTENSIONS)]
        self.locator = MatchLocator()

    def get_file_extensions(self) -> List[str]:
        return list(self.extensions)

    def scan_file(self, record: FileRecord) -> FileScanResult:
        """Read (if needed) and scan one file record"""
        start_time = time.time()

        content = record.content
        if content is None:
            try:
                with open(record.path, 'r', encoding='utf-8', newline='') as f:
                    content = f.read()
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping %s: %s", record.relative_path, e)
                return FileScanResult(
                    scanner_name=self.name,
                    file_path=record.path,
                    relative_path=record.relative_path,
                    issues=(),
                    scan_time=time.time() - start_time,
                    success=False,
                    error_message=f"Read failed: {e}",
                )

        try:
            issues, timed_out = self._scan(record.path, record.relative_path, content)
        except Exception as e:
            logger.warning("Error scanning %s: %s", record.relative_path, e, exc_info=True)
            return FileScanResult(
                scanner_name=self.name,
                file_path=record.path,
                relative_path=record.relative_path,
                issues=(),
                scan_time=time.time() - start_time,
                success=False,
                error_message=f"Scan failed: {e}",
            )

        if issues:
            logger.debug("%s: found %d issue(s)", record.relative_path, len(issues))

        return FileScanResult(
            scanner_name=self.name,
            file_path=record.path,
            relative_path=record.relative_path,
            issues=tuple(issues),
            scan_time=time.time() - start_time,
            success=True,
            timed_out_rules=tuple(timed_out),
        )

    def scan_content(self, path: str, relative_path: str, content: str) -> List[SecurityIssue]:
        """
        Scan in-memory content.

        Args:
            path: Absolute file path recorded on each issue
            relative_path: Workspace-relative path recorded on each issue
            content: Full file text

        Returns:
            Issues in rule order, then match order
        """
        issues, _ = self._scan(path, relative_path, content)
        return issues

    def _scan(self, path: str, relative_path: str, content: str) -> Tuple[List[SecurityIssue], List[str]]:
        lines = content.split('\n')
        issues: List[SecurityIssue] = []
        timed_out: List[str] = []

        for rule in self.catalog:
            deadline = time.monotonic() + self.match_timeout if self.match_timeout else None
            try:
                matches = self.locator.locate(content, rule, deadline=deadline)
            except MatchTimeoutError as e:
                # Abandon this rule for this file only
                logger.warning("Skipping rule %s for %s: %s", rule.id, relative_path, e)
                timed_out.append(rule.id)
                continue

            for match in matches:
                position = self.locator.resolve_position(content, match.offset)
                line_text = lines[position.line - 1]

                if self.comment_filter.is_suppressed(line_text, position.column):
                    continue

                issues.append(self._make_issue(rule, path, relative_path,
                                               position.line, position.column, line_text))

        return issues, timed_out

    @staticmethod
    def _make_issue(rule: Rule, path: str, relative_path: str,
                    line: int, column: int, line_text: str) -> SecurityIssue:
        return SecurityIssue(
            kind=rule.kind,
            severity=rule.severity,
            confidence=rule.confidence,
            file_path=path,
            relative_path=relative_path,
            line=line,
            column=column,
            code=line_text.strip(),
            message=rule.message,
            description=rule.description,
            recommendation=rule.recommendation,
            rule_id=rule.id,
            cwe_id=rule.cwe_id,
            owasp_category=rule.owasp_category,
        )

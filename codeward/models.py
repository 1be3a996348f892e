#!/usr/bin/env python3
"""
Codeward Data Model
Vulnerability taxonomy, security issues and workspace scan results
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple


class VulnerabilityKind(Enum):
    """Vulnerability categories understood by every consumer of a scan result"""
    HARDCODED_SECRET = "hardcoded-secret"
    SQL_INJECTION = "sql-injection"
    XSS_VULNERABILITY = "xss-vulnerability"
    COMMAND_INJECTION = "command-injection"
    PATH_TRAVERSAL = "path-traversal"
    INSECURE_RANDOM = "insecure-random"
    WEAK_CRYPTO = "weak-crypto"
    UNSAFE_EVAL = "unsafe-eval"
    PROTOTYPE_POLLUTION = "prototype-pollution"
    XXE_VULNERABILITY = "xxe-vulnerability"
    OPEN_REDIRECT = "open-redirect"
    INSECURE_DESERIALIZATION = "insecure-deserialization"
    SENSITIVE_DATA_EXPOSURE = "sensitive-data-exposure"
    CORS_MISCONFIGURATION = "cors-misconfiguration"
    CSRF_VULNERABILITY = "csrf-vulnerability"
    INFORMATION_DISCLOSURE = "information-disclosure"

    @property
    def display_name(self) -> str:
        """Title-cased name, e.g. 'Sql Injection'"""
        return ' '.join(word.capitalize() for word in self.value.split('-'))


class Severity(Enum):
    """Issue severity levels"""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class Confidence(Enum):
    """How likely a positive match of a rule is a true positive"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class FileRecord:
    """
    One file handed to the engine by the file collector.

    content is None when the collector deferred reading; the scanner
    then reads the file itself and treats read failures as a skipped file.
    """
    path: str
    relative_path: str
    content: Optional[str] = None


@dataclass(frozen=True)
class SecurityIssue:
    """Individual security issue produced by one rule match"""
    kind: VulnerabilityKind
    severity: Severity
    confidence: Confidence
    file_path: str
    relative_path: str
    line: int
    column: int
    code: str
    message: str
    description: str
    recommendation: str
    rule_id: str
    cwe_id: Optional[str] = None
    owasp_category: Optional[str] = None

    @property
    def cwe_link(self) -> Optional[str]:
        """MITRE link for the CWE reference, if any"""
        if not self.cwe_id or not self.cwe_id.startswith('CWE-'):
            return None
        return f"https://cwe.mitre.org/data/definitions/{self.cwe_id[4:]}.html"

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization"""
        return {
            'type': self.kind.value,
            'severity': self.severity.value,
            'confidence': self.confidence.value,
            'file': self.file_path,
            'relative_path': self.relative_path,
            'line': self.line,
            'column': self.column,
            'code': self.code,
            'message': self.message,
            'description': self.description,
            'recommendation': self.recommendation,
            'rule_id': self.rule_id,
            'cwe_id': self.cwe_id,
            'cwe_link': self.cwe_link,
            'owasp_category': self.owasp_category,
        }


@dataclass(frozen=True)
class ScanResult:
    """
    Result of one full workspace scan.

    Build it with ScanResult.build() so the severity counts are always
    partitions of the final issue list.
    """
    issues: Tuple[SecurityIssue, ...]
    files_scanned: int
    total_issues: int
    critical_count: int
    high_count: int
    medium_count: int
    low_count: int
    scan_duration: float
    timestamp: datetime
    skipped_files: Tuple[str, ...] = ()
    skipped_matches: Tuple[Tuple[str, str], ...] = field(default=())

    @classmethod
    def build(cls,
              issues: Sequence[SecurityIssue],
              files_scanned: int,
              scan_duration: float,
              timestamp: Optional[datetime] = None,
              skipped_files: Sequence[str] = (),
              skipped_matches: Sequence[Tuple[str, str]] = ()) -> 'ScanResult':
        """Create a result, deriving all counts from the issue list"""
        issues = tuple(issues)
        by_severity = Counter(issue.severity for issue in issues)
        return cls(
            issues=issues,
            files_scanned=files_scanned,
            total_issues=len(issues),
            critical_count=by_severity[Severity.CRITICAL],
            high_count=by_severity[Severity.HIGH],
            medium_count=by_severity[Severity.MEDIUM],
            low_count=by_severity[Severity.LOW],
            scan_duration=scan_duration,
            timestamp=timestamp or datetime.now(),
            skipped_files=tuple(skipped_files),
            skipped_matches=tuple(skipped_matches),
        )

    def count_for(self, severity: Severity) -> int:
        return {
            Severity.CRITICAL: self.critical_count,
            Severity.HIGH: self.high_count,
            Severity.MEDIUM: self.medium_count,
            Severity.LOW: self.low_count,
        }[severity]

    def issues_by_kind(self) -> Dict[VulnerabilityKind, List[SecurityIssue]]:
        """Group issues by vulnerability kind, preserving scan order"""
        grouped: Dict[VulnerabilityKind, List[SecurityIssue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.kind, []).append(issue)
        return grouped

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization"""
        return {
            'files_scanned': self.files_scanned,
            'total_issues': self.total_issues,
            'critical_count': self.critical_count,
            'high_count': self.high_count,
            'medium_count': self.medium_count,
            'low_count': self.low_count,
            'scan_duration': self.scan_duration,
            'timestamp': self.timestamp.isoformat(),
            'skipped_files': list(self.skipped_files),
            'skipped_matches': [
                {'file': path, 'rule_id': rule_id}
                for path, rule_id in self.skipped_matches
            ],
            'issues': [issue.to_dict() for issue in self.issues],
        }

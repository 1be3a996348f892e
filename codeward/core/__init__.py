"""
Codeward Core Module
Matching, comment filtering, orchestration, risk classification and reporting
"""

from codeward.core.comment_filter import CommentFilter
from codeward.core.locator import MatchLocator
from codeward.core.risk import RiskLevel, classify
from codeward.core.parallel import WorkspaceScanner
from codeward.core.reporter import ReportGenerator

__all__ = [
    "CommentFilter",
    "MatchLocator",
    "RiskLevel",
    "classify",
    "WorkspaceScanner",
    "ReportGenerator",
]

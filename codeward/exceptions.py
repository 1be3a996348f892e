#!/usr/bin/env python3
"""
Codeward Exceptions Module

Exception hierarchy shared by the rule catalog, the scanners and the
workspace orchestrator.
"""

__all__ = [
    "CodewardError",
    "RuleCatalogError",
    "ConfigError",
    "ScanCancelledError",
    "MatchTimeoutError",
]


class CodewardError(Exception):
    """Base exception for all Codeward errors"""
    pass


class RuleCatalogError(CodewardError):
    """Raised at load time when a rule definition is malformed"""
    pass


class ConfigError(CodewardError):
    """Raised when a configuration value is invalid"""
    pass


class ScanCancelledError(CodewardError):
    """Raised when a workspace scan is cancelled between files"""
    pass


class MatchTimeoutError(CodewardError):
    """Raised when matching one rule against one file exceeds its deadline"""

    def __init__(self, rule_id: str, elapsed: float):
        super().__init__(f"Rule {rule_id} exceeded its match deadline after {elapsed:.3f}s")
        self.rule_id = rule_id
        self.elapsed = elapsed

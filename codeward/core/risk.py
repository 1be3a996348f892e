#!/usr/bin/env python3
"""
Codeward Risk Classifier
Maps aggregated severity counts to one overall risk level
"""

from enum import Enum

from codeward.models import ScanResult


class RiskLevel(Enum):
    """Overall risk of a scanned workspace"""
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    CLEAN = "CLEAN"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {
    RiskLevel.CRITICAL: 4,
    RiskLevel.HIGH: 3,
    RiskLevel.MEDIUM: 2,
    RiskLevel.LOW: 1,
    RiskLevel.CLEAN: 0,
}


def classify_counts(critical: int, high: int, medium: int, low: int) -> RiskLevel:
    """
    Decision table, first match wins:

    1. any critical        -> CRITICAL
    2. 5+ high             -> HIGH
    3. any high, 10+ medium -> MEDIUM
    4. any medium or low   -> LOW
    5. nothing             -> CLEAN
    """
    if critical > 0:
        return RiskLevel.CRITICAL
    if high >= 5:
        return RiskLevel.HIGH
    if high > 0 or medium >= 10:
        return RiskLevel.MEDIUM
    if medium > 0 or low > 0:
        return RiskLevel.LOW
    return RiskLevel.CLEAN


def classify(result: ScanResult) -> RiskLevel:
    """Risk level of a workspace scan result"""
    return classify_counts(
        result.critical_count,
        result.high_count,
        result.medium_count,
        result.low_count,
    )

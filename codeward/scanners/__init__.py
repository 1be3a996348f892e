"""
Codeward Scanners
Per-file scanners that turn one file record into security issues
"""

from codeward.scanners.base import BaseScanner, FileScanResult
from codeward.scanners.pattern_scanner import PatternScanner

__all__ = ["BaseScanner", "FileScanResult", "PatternScanner"]

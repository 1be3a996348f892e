#!/usr/bin/env python3
"""
Codeward Base Scanner Class
Abstract base class for per-file security scanners
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from codeward.models import FileRecord, SecurityIssue


@dataclass(frozen=True)
class FileScanResult:
    """Result from scanning a single file"""
    scanner_name: str
    file_path: str
    relative_path: str
    issues: Tuple[SecurityIssue, ...]
    scan_time: float
    success: bool = True
    error_message: Optional[str] = None
    timed_out_rules: Tuple[str, ...] = ()


class BaseScanner(ABC):
    """
    Abstract base class for all Codeward scanners

    Each scanner implements:
    - File type detection (which files it can scan)
    - Scanning logic (how one file record becomes a list of issues)

    Scanners are handed to worker processes, so implementations must stay
    picklable and must not keep per-scan state on the instance.
    """

    def __init__(self):
        self.name = self.__class__.__name__

    @abstractmethod
    def get_file_extensions(self) -> List[str]:
        """
        Return list of file extensions this scanner handles
        Example: ['.js', '.ts']
        """
        pass

    @abstractmethod
    def scan_file(self, record: FileRecord) -> FileScanResult:
        """
        Scan a single file and return results

        Args:
            record: File to scan; content is read from disk if absent

        Returns:
            FileScanResult; failures are reported through success/error_message,
            never raised
        """
        pass

    def can_scan(self, file_path: Path) -> bool:
        """
        Check if this scanner can handle the given file

        Args:
            file_path: Path to file to check

        Returns:
            True if this scanner can scan the file
        """
        return Path(file_path).suffix.lower() in self.get_file_extensions()

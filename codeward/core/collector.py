#!/usr/bin/env python3
"""
Codeward File Collector
Turns a project directory into the flat list of file records the engine
consumes. The engine itself never walks the filesystem.
"""

import fnmatch
import logging
import os
from pathlib import Path
from typing import List, Optional

from codeward.config import CodewardConfig
from codeward.models import FileRecord

logger = logging.getLogger(__name__)


class FileCollector:
    """Collect scannable source files under a project root"""

    def __init__(self, project_root: Path, config: Optional[CodewardConfig] = None):
        self.project_root = Path(project_root).absolute()
        self.config = config or CodewardConfig()
        self.extensions = {ext.lower() for ext in self.config.extensions}
        self._dir_patterns = [pattern.rstrip('/') for pattern in self.config.exclude_paths]

    def collect(self) -> List[FileRecord]:
        """
        Find all files that can be scanned.

        Returns:
            Records sorted by relative path; content is left for the scanner to read
        """
        records = []

        for root, dirs, files in os.walk(self.project_root):
            root_path = Path(root)
            dirs[:] = sorted(
                d for d in dirs
                if not self._is_dir_excluded(root_path / d)
            )

            for name in files:
                file_path = root_path / name
                if file_path.suffix.lower() not in self.extensions:
                    continue
                if self._is_file_excluded(name):
                    continue
                records.append(FileRecord(
                    path=str(file_path),
                    relative_path=file_path.relative_to(self.project_root).as_posix(),
                ))

        records.sort(key=lambda record: record.relative_path)
        logger.debug("Collected %d files under %s", len(records), self.project_root)
        return records

    def _is_dir_excluded(self, dir_path: Path) -> bool:
        """Check a directory against the path exclusion patterns"""
        relative_path = dir_path.relative_to(self.project_root).as_posix()

        for pattern in self._dir_patterns:
            # Directory name match (e.g. node_modules, *-env)
            if fnmatch.fnmatch(dir_path.name, pattern):
                return True
            # Nested path match (e.g. tests/fixtures)
            if '/' in pattern and fnmatch.fnmatch(relative_path, f"*{pattern}"):
                return True

        return False

    def _is_file_excluded(self, file_name: str) -> bool:
        return any(fnmatch.fnmatch(file_name, pattern) for pattern in self.config.exclude_files)

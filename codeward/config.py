#!/usr/bin/env python3
"""
Codeward Configuration Management
Handles .codeward.yml configuration files
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from codeward.core.comment_filter import COMMENT_MODES
from codeward.exceptions import ConfigError
from codeward.models import Severity

logger = logging.getLogger(__name__)


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return a nested config section, which must be a mapping when present"""
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Invalid configuration: '{name}' must be a mapping, got {type(section).__name__}")
    return section


def _resolve_path(path: str, base_dir: Optional[Path]) -> str:
    """Anchor a relative path at base_dir (absolute paths are kept as-is)"""
    path = Path(path)
    if base_dir is None or path.is_absolute():
        return str(path)
    return str(Path(base_dir) / path)


@dataclass
class CodewardConfig:
    """Codeward configuration structure"""

    # File selection
    extensions: List[str] = field(default_factory=lambda: [
        '.js', '.jsx', '.ts', '.tsx', '.mjs', '.cjs',
    ])

    # Directories that should never be scanned (names or globs)
    exclude_paths: List[str] = field(default_factory=lambda: [
        # === JavaScript/Node.js dependencies ===
        "node_modules/",
        "bower_components/",
        "vendor/",

        # === Build output ===
        "dist/",
        "build/",
        "out/",
        ".next/",
        ".nuxt/",
        "coverage/",

        # === Version control ===
        ".git/",
        ".svn/",
        ".hg/",

        # === Python tooling that may sit alongside JS ===
        "__pycache__/",
        ".venv/",
        "venv/",
    ])

    exclude_files: List[str] = field(default_factory=lambda: [
        "*.min.js",
        "*.bundle.js",
        "*.map",
    ])

    # Severity threshold for a failing exit code (None = never fail)
    fail_on: Optional[str] = None

    # Scan settings
    workers: Optional[int] = None  # None = auto-detect
    match_timeout: float = 5.0     # seconds per (file, rule); 0 disables
    comment_mode: str = "heuristic"

    # Rule selection
    rules_disabled: List[str] = field(default_factory=list)
    rules_custom: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Raise ConfigError for out-of-range values"""
        if self.fail_on is not None:
            try:
                Severity(str(self.fail_on).lower())
            except ValueError:
                raise ConfigError(f"Invalid fail_on level: {self.fail_on}") from None
            self.fail_on = str(self.fail_on).lower()
        if self.comment_mode not in COMMENT_MODES:
            raise ConfigError(f"Invalid comment_mode: {self.comment_mode}")
        if self.match_timeout is None or self.match_timeout < 0:
            raise ConfigError(f"Invalid match_timeout: {self.match_timeout}")
        if self.workers is not None and self.workers < 1:
            raise ConfigError(f"Invalid workers: {self.workers}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> 'CodewardConfig':
        """
        Create config from dictionary, keeping defaults for absent keys

        Args:
            data: Parsed .codeward.yml content
            base_dir: Directory that relative rules.custom paths are resolved
                against (normally the directory holding the config file)
        """
        defaults = cls()

        exclude = _section(data, 'exclude')
        rules = _section(data, 'rules')
        scan = _section(data, 'scan')

        try:
            exclude_paths = defaults.exclude_paths
            if 'paths' in exclude:
                # Merge user paths with the defaults (don't replace)
                exclude_paths = list(dict.fromkeys(defaults.exclude_paths + list(exclude['paths'] or [])))

            custom = rules.get('custom', []) or []
            if isinstance(custom, str):
                custom = [custom]
            custom = [_resolve_path(path, base_dir) for path in custom]

            return cls(
                extensions=list(data.get('extensions', defaults.extensions)),
                exclude_paths=exclude_paths,
                exclude_files=list(exclude.get('files', defaults.exclude_files)),
                fail_on=data.get('fail_on', defaults.fail_on),
                workers=scan.get('workers', defaults.workers),
                match_timeout=float(scan.get('match_timeout', defaults.match_timeout)),
                comment_mode=scan.get('comment_mode', defaults.comment_mode),
                rules_disabled=list(rules.get('disabled', []) or []),
                rules_custom=custom,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for YAML export"""
        return {
            'extensions': self.extensions,
            'exclude': {
                'paths': self.exclude_paths,
                'files': self.exclude_files,
            },
            'fail_on': self.fail_on,
            'scan': {
                'workers': self.workers,
                'match_timeout': self.match_timeout,
                'comment_mode': self.comment_mode,
            },
            'rules': {
                'disabled': self.rules_disabled,
                'custom': self.rules_custom,
            },
        }


class ConfigManager:
    """Manage Codeward configuration files"""

    DEFAULT_CONFIG_NAME = ".codeward.yml"

    @staticmethod
    def find_config(start_path: Path = None) -> Optional[Path]:
        """
        Find .codeward.yml by walking up directory tree

        Args:
            start_path: Starting directory (default: current directory)

        Returns:
            Path to .codeward.yml or None if not found
        """
        current = Path(start_path or Path.cwd()).absolute()

        # Walk up directory tree
        while True:
            config_file = current / ConfigManager.DEFAULT_CONFIG_NAME
            if config_file.exists():
                return config_file
            if current == current.parent:
                return None
            current = current.parent

    @staticmethod
    def load_config(config_path: Path = None, start_path: Path = None) -> CodewardConfig:
        """
        Load configuration from .codeward.yml

        Args:
            config_path: Path to config file (default: search upwards)
            start_path: Where the upward search begins (default: current directory)

        Returns:
            CodewardConfig object

        Raises:
            ConfigError: if the file parses but holds invalid values
        """
        if config_path is None:
            config_path = ConfigManager.find_config(start_path)

        # Return default config if no file found
        if config_path is None or not Path(config_path).exists():
            return CodewardConfig()

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            logger.warning("Failed to load config from %s: %s", config_path, e)
            return CodewardConfig()

        if data is None:
            return CodewardConfig()
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path}: top level must be a mapping")

        # rules.custom paths are relative to the config file, not the cwd
        config = CodewardConfig.from_dict(data, base_dir=Path(config_path).absolute().parent)
        logger.debug("Loaded config from %s", config_path)
        return config

    @staticmethod
    def save_config(config: CodewardConfig, config_path: Path) -> bool:
        """
        Save configuration to .codeward.yml

        Args:
            config: CodewardConfig object
            config_path: Path where to save

        Returns:
            True if successful
        """
        try:
            # Create directory if needed
            config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.dump(
                    config.to_dict(),
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    indent=2
                )

            return True

        except OSError as e:
            logger.error("Failed to save config to %s: %s", config_path, e)
            return False

    @staticmethod
    def create_default_config(project_root: Path) -> Optional[Path]:
        """
        Create default .codeward.yml in project root

        Args:
            project_root: Project directory

        Returns:
            Path to created config file, or None if it could not be written
        """
        config = CodewardConfig()
        config_path = Path(project_root) / ConfigManager.DEFAULT_CONFIG_NAME

        if not ConfigManager.save_config(config, config_path):
            return None

        return config_path

#!/usr/bin/env python3
"""
Codeward Rule Catalog

Rules are declared in YAML files in this directory and compiled once at load
time into an immutable RuleCatalog. The default catalog (javascript.yaml)
targets JavaScript/TypeScript sources.

Any malformed rule raises RuleCatalogError while loading, before a scan can
start.
"""

import collections.abc
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import yaml

from codeward.exceptions import RuleCatalogError
from codeward.models import Confidence, Severity, VulnerabilityKind

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('id', 'kind', 'severity', 'confidence', 'pattern',
                   'message', 'description', 'recommendation')

# YAML flag names -> re flags
FLAG_MAP = {
    'ignorecase': re.IGNORECASE,
    'multiline': re.MULTILINE,
    'dotall': re.DOTALL,
    # JavaScript-style \w, \b and \d (ASCII only)
    'ascii': re.ASCII,
}


@dataclass(frozen=True)
class Rule:
    """A single vulnerability rule"""
    id: str
    kind: VulnerabilityKind
    severity: Severity
    confidence: Confidence
    pattern: re.Pattern
    message: str
    description: str
    recommendation: str
    cwe_id: Optional[str] = None
    owasp_category: Optional[str] = None


class RuleCatalog(collections.abc.Sequence):
    """Immutable, ordered collection of compiled rules"""

    def __init__(self, rules: Iterable[Rule]):
        self._rules: Tuple[Rule, ...] = tuple(rules)
        seen = set()
        for rule in self._rules:
            if rule.id in seen:
                raise RuleCatalogError(f"Duplicate rule id: {rule.id}")
            seen.add(rule.id)

    def __getitem__(self, index):
        return self._rules[index]

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __repr__(self) -> str:
        return f"RuleCatalog({len(self._rules)} rules)"

    def get(self, rule_id: str) -> Optional[Rule]:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def by_kind(self, kind: VulnerabilityKind) -> List[Rule]:
        return [rule for rule in self._rules if rule.kind == kind]

    def kinds(self) -> List[VulnerabilityKind]:
        """Kinds covered by at least one rule, in catalog order"""
        kinds: List[VulnerabilityKind] = []
        for rule in self._rules:
            if rule.kind not in kinds:
                kinds.append(rule.kind)
        return kinds

    def without(self, rule_ids: Iterable[str]) -> 'RuleCatalog':
        """Return a new catalog with the given rule ids removed"""
        excluded = set(rule_ids)
        unknown = excluded - {rule.id for rule in self._rules}
        if unknown:
            logger.warning("Ignoring unknown rule ids: %s", ', '.join(sorted(unknown)))
        return RuleCatalog(rule for rule in self._rules if rule.id not in excluded)

    def extended(self, rules: Iterable[Rule]) -> 'RuleCatalog':
        """Return a new catalog with extra rules appended"""
        return RuleCatalog(self._rules + tuple(rules))


class RuleLoader:
    """
    Loads and validates Codeward rules from YAML files.

    Usage:
        catalog = RuleLoader().load()

        # Or add project-specific rules
        extra = RuleLoader().load_rules_from_file(Path('my-rules.yaml'))
        catalog = catalog.extended(extra)
    """

    # Default rules directory (relative to this file)
    RULES_DIR = Path(__file__).parent
    DEFAULT_FILES = ('javascript.yaml',)

    def __init__(self, rules_dir: Optional[Path] = None):
        self.rules_dir = rules_dir or self.RULES_DIR

    def load(self, files: Sequence[str] = DEFAULT_FILES) -> RuleCatalog:
        """
        Load the catalog from the given files in the rules directory.

        Args:
            files: YAML file names, loaded in order

        Returns:
            RuleCatalog with rules in file order, then declaration order
        """
        rules: List[Rule] = []
        for name in files:
            rules.extend(self.load_rules_from_file(self.rules_dir / name))
        catalog = RuleCatalog(rules)
        logger.debug("Loaded %d rules from %s", len(catalog), self.rules_dir)
        return catalog

    def load_rules_from_file(self, filepath: Path) -> List[Rule]:
        """
        Load rules from a single YAML file.

        Supports two layouts:
        1. Standard: rules: [...]
        2. Root list: - id: ... (rules at document root)

        Raises:
            RuleCatalogError: if the file cannot be read or any rule is invalid
        """
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            raise RuleCatalogError(f"Failed to load rules from {filepath}: {e}") from e

        if isinstance(data, dict) and 'rules' in data:
            rules_data = data.get('rules') or []
        elif isinstance(data, list):
            rules_data = data
        else:
            raise RuleCatalogError(f"No rules found in {filepath}")

        rules = []
        for index, rule_data in enumerate(rules_data):
            if not isinstance(rule_data, dict):
                raise RuleCatalogError(f"{filepath}: rule #{index + 1} is not a mapping")
            rules.append(self._parse_rule(rule_data, source=f"{filepath} rule #{index + 1}"))
        return rules

    def _parse_rule(self, data: Dict[str, Any], source: str = "<rule>") -> Rule:
        """Parse and compile a single rule, failing loudly on any defect"""
        missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
        if missing:
            raise RuleCatalogError(f"{source}: missing required field(s): {', '.join(missing)}")

        rule_id = str(data['id'])
        kind = self._parse_enum(VulnerabilityKind, data['kind'], 'kind', rule_id)
        severity = self._parse_enum(Severity, data['severity'], 'severity', rule_id)
        confidence = self._parse_enum(Confidence, data['confidence'], 'confidence', rule_id)

        flags = 0
        raw_flags = data.get('flags') or []
        if isinstance(raw_flags, str):
            raw_flags = [raw_flags]
        for name in raw_flags:
            try:
                flags |= FLAG_MAP[str(name).lower()]
            except KeyError:
                raise RuleCatalogError(f"Rule {rule_id}: unknown regex flag '{name}'") from None

        try:
            pattern = re.compile(str(data['pattern']), flags)
        except re.error as e:
            raise RuleCatalogError(f"Rule {rule_id}: invalid pattern: {e}") from e

        return Rule(
            id=rule_id,
            kind=kind,
            severity=severity,
            confidence=confidence,
            pattern=pattern,
            message=str(data['message']),
            description=str(data['description']),
            recommendation=str(data['recommendation']),
            cwe_id=data.get('cwe'),
            owasp_category=data.get('owasp'),
        )

    @staticmethod
    def _parse_enum(enum_cls, value: Any, field_name: str, rule_id: str):
        try:
            return enum_cls(str(value).lower())
        except ValueError:
            raise RuleCatalogError(
                f"Rule {rule_id}: unknown {field_name} '{value}'"
            ) from None


@lru_cache(maxsize=1)
def get_catalog() -> RuleCatalog:
    """Load the default catalog once and reuse it"""
    return RuleLoader().load()


def build_catalog(disabled: Iterable[str] = (), custom_files: Iterable[str] = ()) -> RuleCatalog:
    """
    Default catalog with project customisations applied.

    Args:
        disabled: Rule ids to drop
        custom_files: Extra YAML rule files, appended after the defaults
    """
    catalog = get_catalog()
    loader = RuleLoader()
    for path in custom_files:
        catalog = catalog.extended(loader.load_rules_from_file(Path(path)))
    disabled = list(disabled)
    if disabled:
        catalog = catalog.without(disabled)
    return catalog

"""
Tests for the rule catalog and YAML rule loader
"""
import re
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from codeward.exceptions import RuleCatalogError
from codeward.models import Confidence, Severity, VulnerabilityKind
from codeward.rules import Rule, RuleCatalog, RuleLoader, build_catalog, get_catalog

VALID_RULE = """
  - id: TEST-001
    kind: unsafe-eval
    severity: critical
    confidence: high
    pattern: 'setTimeout\\s*\\(\\s*[''"]'
    message: String passed to setTimeout
    description: setTimeout with a string argument evaluates code
    recommendation: Pass a function instead
    cwe: CWE-95
"""


def write_rules(tmp_path: Path, body: str, name: str = "rules.yaml") -> Path:
    path = tmp_path / name
    path.write_text(body, encoding='utf-8')
    return path


class TestDefaultCatalog:
    """The packaged JavaScript/TypeScript catalog"""

    def test_rule_count(self):
        assert len(get_catalog()) == 17

    def test_catalog_order(self):
        ids = [rule.id for rule in get_catalog()]
        assert ids[0] == 'CW-SECRET-001'
        assert ids[-1] == 'CW-INFO-001'
        assert ids.index('CW-EVAL-001') < ids.index('CW-RAND-001')

    def test_unique_ids(self):
        ids = [rule.id for rule in get_catalog()]
        assert len(ids) == len(set(ids))

    def test_patterns_compiled(self):
        assert all(isinstance(rule.pattern, re.Pattern) for rule in get_catalog())

    def test_every_rule_has_cwe_and_owasp(self):
        for rule in get_catalog():
            assert rule.cwe_id and rule.cwe_id.startswith('CWE-'), rule.id
            assert rule.owasp_category and rule.owasp_category.startswith('A'), rule.id

    def test_reserved_kinds_have_no_rules(self):
        kinds = get_catalog().kinds()
        assert VulnerabilityKind.XXE_VULNERABILITY not in kinds
        assert VulnerabilityKind.INSECURE_DESERIALIZATION not in kinds
        assert VulnerabilityKind.CSRF_VULNERABILITY not in kinds
        assert len(kinds) == 13

    def test_rule_attributes(self):
        rule = get_catalog().get('CW-INFO-001')
        assert rule.kind == VulnerabilityKind.INFORMATION_DISCLOSURE
        assert rule.severity == Severity.LOW
        assert rule.confidence == Confidence.LOW
        assert rule.cwe_id == 'CWE-209'

    def test_ignorecase_flag_applied(self):
        assert get_catalog().get('CW-SECRET-001').pattern.flags & re.IGNORECASE
        assert not get_catalog().get('CW-EVAL-001').pattern.flags & re.IGNORECASE

    def test_word_rules_use_ascii_semantics(self):
        catalog = get_catalog()
        for rule_id in ('CW-SQL-001', 'CW-EVAL-001', 'CW-PROTO-001'):
            assert catalog.get(rule_id).pattern.flags & re.ASCII, rule_id
        assert catalog.get('CW-SQL-001').pattern.flags & re.IGNORECASE

    def test_ascii_word_boundary(self):
        pattern = get_catalog().get('CW-EVAL-001').pattern
        # 'ё' is not a word character under ASCII rules, so a boundary precedes 'eval'
        assert pattern.search('ёeval(x)')
        assert not pattern.search('myeval(x)')

    def test_get_catalog_is_cached(self):
        assert get_catalog() is get_catalog()

    def test_by_kind(self):
        rules = get_catalog().by_kind(VulnerabilityKind.UNSAFE_EVAL)
        assert [rule.id for rule in rules] == ['CW-EVAL-001', 'CW-EVAL-002']

    def test_get_unknown_id(self):
        assert get_catalog().get('CW-NOPE-999') is None

    def test_rules_are_frozen(self):
        rule = get_catalog()[0]
        with pytest.raises(FrozenInstanceError):
            rule.severity = Severity.LOW


class TestCatalogOperations:
    """Derived catalogs"""

    def test_without(self):
        catalog = get_catalog().without(['CW-RAND-001', 'CW-INFO-001'])
        assert len(catalog) == 15
        assert catalog.get('CW-RAND-001') is None
        assert len(get_catalog()) == 17

    def test_without_unknown_id_is_ignored(self):
        assert len(get_catalog().without(['CW-NOPE-999'])) == 17

    def test_extended(self, tmp_path):
        extra = RuleLoader().load_rules_from_file(write_rules(tmp_path, "rules:" + VALID_RULE))
        catalog = get_catalog().extended(extra)
        assert len(catalog) == 18
        assert catalog[-1].id == 'TEST-001'

    def test_duplicate_id_rejected(self):
        rule = get_catalog()[0]
        with pytest.raises(RuleCatalogError, match="Duplicate"):
            RuleCatalog([rule, rule])

    def test_build_catalog(self, tmp_path):
        custom = write_rules(tmp_path, "rules:" + VALID_RULE)
        catalog = build_catalog(disabled=['CW-EVAL-002'], custom_files=[str(custom)])
        assert len(catalog) == 17
        assert catalog.get('TEST-001') is not None
        assert catalog.get('CW-EVAL-002') is None

    def test_build_catalog_defaults(self):
        assert build_catalog() is get_catalog()


class TestRuleLoader:
    """YAML parsing and validation"""

    def test_root_list_layout(self, tmp_path):
        rules = RuleLoader().load_rules_from_file(write_rules(tmp_path, VALID_RULE))
        assert len(rules) == 1
        assert isinstance(rules[0], Rule)
        assert rules[0].pattern.search("setTimeout('alert(1)', 10)")

    def test_load_from_custom_dir(self, tmp_path):
        write_rules(tmp_path, "rules:" + VALID_RULE, name="extra.yaml")
        catalog = RuleLoader(rules_dir=tmp_path).load(['extra.yaml'])
        assert [rule.id for rule in catalog] == ['TEST-001']

    def test_enum_values_case_insensitive(self, tmp_path):
        body = VALID_RULE.replace('severity: critical', 'severity: CRITICAL')
        rules = RuleLoader().load_rules_from_file(write_rules(tmp_path, body))
        assert rules[0].severity == Severity.CRITICAL

    def test_flag_names(self, tmp_path):
        body = VALID_RULE.replace('    cwe: CWE-95\n', '    cwe: CWE-95\n    flags: [IgnoreCase, ascii]\n')
        rule = RuleLoader().load_rules_from_file(write_rules(tmp_path, body))[0]
        assert rule.pattern.flags & re.IGNORECASE
        assert rule.pattern.flags & re.ASCII

    def test_optional_fields_absent(self, tmp_path):
        body = VALID_RULE.replace('    cwe: CWE-95\n', '')
        rule = RuleLoader().load_rules_from_file(write_rules(tmp_path, body))[0]
        assert rule.cwe_id is None
        assert rule.owasp_category is None

    @pytest.mark.parametrize("old, new, error", [
        ('    message: String passed to setTimeout\n', '', 'missing required field'),
        ('kind: unsafe-eval', 'kind: buffer-overflow', 'unknown kind'),
        ('severity: critical', 'severity: severe', 'unknown severity'),
        ('confidence: high', 'confidence: certain', 'unknown confidence'),
        ("pattern: 'setTimeout", "pattern: '(setTimeout", 'invalid pattern'),
        ('    cwe: CWE-95\n', '    cwe: CWE-95\n    flags: [verbose]\n', 'unknown regex flag'),
    ])
    def test_malformed_rule(self, tmp_path, old, new, error):
        body = VALID_RULE.replace(old, new)
        assert body != VALID_RULE
        with pytest.raises(RuleCatalogError, match=error):
            RuleLoader().load_rules_from_file(write_rules(tmp_path, body))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(RuleCatalogError, match="Failed to load"):
            RuleLoader().load_rules_from_file(write_rules(tmp_path, "rules: [unclosed"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuleCatalogError):
            RuleLoader().load_rules_from_file(tmp_path / "absent.yaml")

    def test_no_rules_key(self, tmp_path):
        with pytest.raises(RuleCatalogError, match="No rules"):
            RuleLoader().load_rules_from_file(write_rules(tmp_path, "version: 1\n"))

    def test_rule_not_a_mapping(self, tmp_path):
        with pytest.raises(RuleCatalogError, match="not a mapping"):
            RuleLoader().load_rules_from_file(write_rules(tmp_path, "rules:\n  - just a string\n"))

    def test_duplicate_ids_across_files(self, tmp_path):
        write_rules(tmp_path, "rules:" + VALID_RULE, name="a.yaml")
        write_rules(tmp_path, "rules:" + VALID_RULE, name="b.yaml")
        with pytest.raises(RuleCatalogError, match="Duplicate rule id: TEST-001"):
            RuleLoader(rules_dir=tmp_path).load(['a.yaml', 'b.yaml'])

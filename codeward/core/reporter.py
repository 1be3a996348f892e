#!/usr/bin/env python3
"""
Codeward Security Report Generator
Generates JSON/Markdown reports and a console summary from a ScanResult
"""

import json
import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List

from rich.console import Console

from codeward import __version__
from codeward.core.risk import RiskLevel, classify
from codeward.models import ScanResult, SecurityIssue, Severity

logger = logging.getLogger(__name__)

# Snippets are stored whole and only shortened for display
MAX_CODE_LENGTH = 120


def sort_issues(issues: Iterable[SecurityIssue]) -> List[SecurityIssue]:
    """Deterministic presentation order: severity (highest first), file, line, column"""
    return sorted(
        issues,
        key=lambda issue: (-issue.severity.rank, issue.file_path, issue.line, issue.column),
    )


def truncate_code(code: str, limit: int = MAX_CODE_LENGTH) -> str:
    if len(code) <= limit:
        return code
    return code[:limit - 3] + '...'


class ReportGenerator:
    """Generate security reports from Codeward scans"""

    SEVERITY_STYLES = {
        Severity.CRITICAL: 'bold red',
        Severity.HIGH: 'dark_orange',
        Severity.MEDIUM: 'yellow',
        Severity.LOW: 'cyan',
    }

    SEVERITY_ICONS = {
        Severity.CRITICAL: '🔴',
        Severity.HIGH: '🟠',
        Severity.MEDIUM: '🟡',
        Severity.LOW: '🔵',
    }

    def __init__(self, output_dir: Path = None):
        self.output_dir = output_dir or Path.cwd() / ".codeward" / "reports"

    def build_report(self, result: ScanResult) -> Dict[str, Any]:
        """Serializable report structure shared by all output formats"""
        risk_level = classify(result)
        by_kind = Counter(issue.kind.value for issue in result.issues)
        data = result.to_dict()

        return {
            'timestamp': result.timestamp.isoformat(),
            'codeward_version': __version__,
            'scan_summary': {
                'files_scanned': result.files_scanned,
                'total_issues': result.total_issues,
                'scan_duration_ms': round(result.scan_duration, 2),
                'risk_level': risk_level.value,
            },
            'severity_breakdown': {
                severity.value: result.count_for(severity)
                for severity in Severity
            },
            'issues_by_type': dict(by_kind.most_common()),
            'skipped_files': data['skipped_files'],
            'skipped_matches': data['skipped_matches'],
            'issues': data['issues'],
        }

    def _default_path(self, suffix: str) -> Path:
        timestamp = datetime.now().strftime('%Y%m%d-%H%M%S')
        return self.output_dir / f"codeward-scan-{timestamp}.{suffix}"

    def generate_json_report(self, result: ScanResult, output_path: Path = None) -> Path:
        """Generate JSON report"""
        output_path = output_path or self._default_path('json')
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(self.build_report(result), f, indent=2)

        logger.info("JSON report written to %s", output_path)
        return output_path

    def generate_markdown_report(self, result: ScanResult, output_path: Path = None) -> Path:
        """Generate Markdown report"""
        output_path = output_path or self._default_path('md')
        output_path.parent.mkdir(parents=True, exist_ok=True)

        report = self.build_report(result)
        summary = report['scan_summary']

        md = []
        md.append("# Codeward Security Scan Report")
        md.append("")
        md.append(f"**Generated:** {report['timestamp']}  ")
        md.append(f"**Codeward Version:** {__version__}")
        md.append("")
        md.append("## Summary")
        md.append("")
        md.append("| Metric | Value |")
        md.append("|--------|-------|")
        md.append(f"| Risk Level | {summary['risk_level']} |")
        md.append(f"| Files Scanned | {summary['files_scanned']} |")
        md.append(f"| Total Issues | {summary['total_issues']} |")
        md.append(f"| Scan Duration | {summary['scan_duration_ms'] / 1000:.2f}s |")
        md.append("")
        md.append("## Severity Breakdown")
        md.append("")
        md.append("| Severity | Count |")
        md.append("|----------|-------|")
        for severity in Severity:
            md.append(f"| {severity.value.upper()} | {result.count_for(severity)} |")
        md.append("")

        if result.issues:
            md.append("## Findings")
            md.append("")
            for issue in sort_issues(result.issues):
                md.append(f"### [{issue.severity.value.upper()}] {issue.message}")
                md.append("")
                md.append(f"- **Location:** `{issue.relative_path}:{issue.line}:{issue.column}`")
                md.append(f"- **Type:** {issue.kind.display_name}")
                md.append(f"- **Rule:** {issue.rule_id} (confidence: {issue.confidence.value})")
                if issue.cwe_id:
                    md.append(f"- **CWE:** [{issue.cwe_id}]({issue.cwe_link})")
                if issue.owasp_category:
                    md.append(f"- **OWASP:** {issue.owasp_category}")
                md.append(f"- **Fix:** {issue.recommendation}")
                md.append("")
                md.append("```")
                md.append(truncate_code(issue.code))
                md.append("```")
                md.append("")
        else:
            md.append("✅ No security vulnerabilities detected.")
            md.append("")

        if result.skipped_files:
            md.append("## Skipped Files")
            md.append("")
            for path in result.skipped_files:
                md.append(f"- `{path}`")
            md.append("")

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write('\n'.join(md))

        logger.info("Markdown report written to %s", output_path)
        return output_path

    def print_summary(self, result: ScanResult, console: Console = None):
        """Print the scan summary to the console"""
        console = console or Console()
        risk_level = classify(result)

        console.print()
        console.print("=" * 80)
        console.print("[bold]🛡️  SECURITY SCAN SUMMARY[/bold]")
        console.print("=" * 80)

        console.print("\n[bold]📊 SCAN STATISTICS:[/bold]")
        console.print(f"   Files Scanned: {result.files_scanned}")
        console.print(f"   Total Issues: {result.total_issues}")
        console.print(f"   Scan Duration: {result.scan_duration / 1000:.2f}s")
        if result.skipped_files:
            console.print(f"   [yellow]Skipped Files: {len(result.skipped_files)}[/yellow]")

        console.print("\n[bold]⚠️  SEVERITY BREAKDOWN:[/bold]")
        for severity in Severity:
            style = self.SEVERITY_STYLES[severity]
            console.print(
                f"   {self.SEVERITY_ICONS[severity]} "
                f"[{style}]{severity.value.capitalize()}: {result.count_for(severity)}[/{style}]"
            )

        console.print(f"\n[bold]🎯 RISK LEVEL:[/bold] {self._risk_markup(risk_level)}")

        if result.total_issues == 0:
            console.print("\n[green]✅ No security vulnerabilities detected![/green]")
            return

        console.print("\n[bold]🔍 ISSUES BY TYPE:[/bold]")
        by_kind = Counter(issue.kind for issue in result.issues)
        for kind, count in by_kind.most_common():
            console.print(f"   • {kind.display_name}: {count}")

        critical_issues = [i for i in result.issues if i.severity == Severity.CRITICAL][:5]
        if critical_issues:
            console.print("\n[bold red]🚨 TOP CRITICAL ISSUES:[/bold red]")
            for index, issue in enumerate(critical_issues, 1):
                console.print(f"\n   {index}. {issue.message}")
                console.print(f"      File: {issue.relative_path}:{issue.line}", markup=False)
                console.print(f"      Code: {truncate_code(issue.code)}", markup=False)
                console.print(f"      Fix: {issue.recommendation}", markup=False)

        console.print("\n[bold]💡 NEXT STEPS:[/bold]")
        console.print("   1. Review critical issues first")
        console.print("   2. Open the generated report for full details")
        console.print("   3. Apply recommended fixes")
        console.print("   4. Re-scan after fixing to verify")

    @staticmethod
    def _risk_markup(risk_level: RiskLevel) -> str:
        style = {
            RiskLevel.CRITICAL: 'bold red',
            RiskLevel.HIGH: 'dark_orange',
            RiskLevel.MEDIUM: 'yellow',
            RiskLevel.LOW: 'cyan',
            RiskLevel.CLEAN: 'green',
        }[risk_level]
        return f"[{style}]{risk_level.value}[/{style}]"

#!/usr/bin/env python3
"""
Codeward CLI - Command-line interface
Click-based front end for workspace security scanning
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from codeward import __version__
from codeward.config import ConfigManager
from codeward.exceptions import CodewardError
from codeward.models import Severity, VulnerabilityKind

console = Console()

FORMAT_CHOICES = ['json', 'markdown', 'all']


def _setup_logging(verbose: bool):
    """Route engine logging through rich"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def print_banner():
    console.print(f"\n[bold magenta]🛡️  Codeward v{__version__} - Static Security Scanner[/bold magenta]\n")


def _exceeds_threshold(result, fail_on: str) -> bool:
    """True if any issue is at or above the fail_on severity"""
    threshold = Severity(fail_on).rank
    return any(issue.severity.rank >= threshold for issue in result.issues)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version and exit')
@click.pass_context
def main(ctx, version):
    """
    Codeward - Static Security Pattern Scanner

    Rule-based detection of hardcoded secrets, injection vectors, unsafe
    APIs and weak cryptography in JavaScript/TypeScript code.

    Examples:
        codeward scan .               # Scan current directory
        codeward scan --fail-on high  # Fail CI on HIGH+ issues
        codeward rules                # List the rule catalog
        codeward init                 # Write a default .codeward.yml
    """
    if version:
        click.echo(f"Codeward v{__version__}")
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        print_banner()
        click.echo(ctx.get_help())


@main.command()
@click.argument('target', type=click.Path(exists=True, file_okay=False), default='.')
@click.option('-w', '--workers', type=int, default=None,
              help='Number of worker processes (default: config or auto-detect)')
@click.option('--fail-on', type=click.Choice([s.value for s in Severity]), default=None,
              help='Exit with code 1 if issues at this level or higher are found')
@click.option('-o', '--output', type=click.Path(), default=None,
              help='Output directory for reports')
@click.option('--format', 'output_formats', multiple=True,
              type=click.Choice(FORMAT_CHOICES), default=['json'],
              help='Report format(s): json, markdown, or all (can specify multiple)')
@click.option('--no-report', is_flag=True, help='Skip report generation')
@click.option('--comment-mode', type=click.Choice(['heuristic', 'lexical']), default=None,
              help='Comment suppression mode (default: heuristic)')
@click.option('--timeout', 'match_timeout', type=float, default=None,
              help='Seconds allowed per file and rule before the rule is skipped (0 disables)')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False), default=None,
              help='Path to .codeward.yml (default: search upwards from TARGET)')
@click.option('--no-progress', is_flag=True, help='Hide the progress bar')
@click.option('-v', '--verbose', is_flag=True, help='Show debug logging')
def scan(target, workers, fail_on, output, output_formats, no_report, comment_mode,
         match_timeout, config_path, no_progress, verbose):
    """
    Scan a directory for security issues.

    Examples:
        codeward scan .                     # Scan current directory
        codeward scan --fail-on high .      # Fail on HIGH+ issues
        codeward scan --format all -o out . # JSON and Markdown reports
    """
    from codeward.core.collector import FileCollector
    from codeward.core.comment_filter import CommentFilter
    from codeward.core.parallel import WorkspaceScanner
    from codeward.core.reporter import ReportGenerator
    from codeward.rules import build_catalog
    from codeward.scanners.pattern_scanner import PatternScanner

    _setup_logging(verbose)
    print_banner()

    target_path = Path(target).absolute()

    try:
        if config_path:
            config = ConfigManager.load_config(Path(config_path))
        else:
            config = ConfigManager.load_config(start_path=target_path)

        # Command-line flags override the config file
        fail_on = fail_on or config.fail_on
        comment_mode = comment_mode or config.comment_mode
        if match_timeout is None:
            match_timeout = config.match_timeout

        catalog = build_catalog(config.rules_disabled, config.rules_custom)
        scanner = PatternScanner(
            catalog=catalog,
            comment_filter=CommentFilter(comment_mode),
            match_timeout=match_timeout,
            extensions=config.extensions,
        )
    except CodewardError as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(2)

    console.print(f"[cyan]🎯 Target:[/cyan] {target_path}")
    console.print(f"[cyan]📐 Rules:[/cyan] {len(catalog)} ({len(catalog.kinds())} vulnerability types)")

    files = FileCollector(target_path, config).collect()
    if not files:
        console.print("[yellow]⚠️  No files found to scan[/yellow]")
        return

    console.print(f"[green]📁 Found {len(files)} scannable files[/green]\n")

    orchestrator = WorkspaceScanner(
        scanner,
        workers=workers or config.workers,
        show_progress=not no_progress,
    )
    result = orchestrator.scan(files)

    reporter = ReportGenerator(Path(output) if output else None)
    reporter.print_summary(result, console)

    if not no_report:
        formats = set(output_formats)
        if 'all' in formats:
            formats = {'json', 'markdown'}

        generated = []
        if 'json' in formats:
            generated.append(('JSON', reporter.generate_json_report(result)))
        if 'markdown' in formats:
            generated.append(('Markdown', reporter.generate_markdown_report(result)))

        console.print("\n[bold]📊 Reports generated:[/bold]")
        for format_name, file_path in generated:
            console.print(f"   {format_name:10} → {file_path}")

    if fail_on and _exceeds_threshold(result, fail_on):
        console.print(f"\n[red]❌ Found issues at {fail_on.upper()}+ level[/red]")
        sys.exit(1)

    console.print("\n[green]✅ Scan complete![/green]")


@main.command()
@click.option('--kind', type=click.Choice([k.value for k in VulnerabilityKind]), default=None,
              help='Only show rules of this vulnerability type')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False), default=None,
              help='Path to .codeward.yml (default: search upwards from the current directory)')
def rules(kind, config_path):
    """List the rules a scan from here would apply."""
    from codeward.rules import build_catalog

    try:
        config = ConfigManager.load_config(Path(config_path) if config_path else None)
        catalog = build_catalog(config.rules_disabled, config.rules_custom)
    except CodewardError as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(2)

    selected = catalog.by_kind(VulnerabilityKind(kind)) if kind else list(catalog)

    table = Table(title=f"Codeward Rules ({len(selected)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Severity")
    table.add_column("Confidence")
    table.add_column("CWE")
    table.add_column("Message")

    for rule in selected:
        table.add_row(
            rule.id,
            rule.kind.value,
            rule.severity.value,
            rule.confidence.value,
            rule.cwe_id or '-',
            rule.message,
        )

    console.print(table)


@main.command()
@click.option('--force', is_flag=True, help='Overwrite existing configuration')
def init(force):
    """Write a default .codeward.yml in the current directory."""
    config_path = Path.cwd() / ConfigManager.DEFAULT_CONFIG_NAME

    if config_path.exists() and not force:
        console.print(f"[yellow]⚠️  {config_path} already exists (use --force to overwrite)[/yellow]")
        sys.exit(1)

    if ConfigManager.create_default_config(Path.cwd()) is None:
        console.print(f"[red]❌ Could not write {config_path}[/red]")
        sys.exit(1)

    console.print(f"[green]✅ Created {config_path}[/green]")


if __name__ == '__main__':
    main()

"""Rich output formatting helpers for the toolscout CLI.

Found tools are green, missing essential tools bold red, other missing
tools dim. Summaries follow each table.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from toolscout.detection.models import (
    CategoryReport,
    DetectionReport,
    DetectionRule,
    ToolDetectionResult,
)

console = Console()


def _status_text(result: ToolDetectionResult, essential: bool) -> Text:
    if result.found:
        return Text("FOUND", style="bold green")
    if essential:
        return Text("MISSING", style="bold red")
    return Text("missing", style="dim")


def print_category(report: CategoryReport, essential: set[str]) -> None:
    """Print one category's tool table."""
    table = Table(title=report.category, show_header=True, header_style="bold")
    table.add_column("Tool", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Version")
    table.add_column("Path / Error", style="dim")

    for tool in report.tools:
        name = f"{tool.name} *" if tool.name in essential else tool.name
        detail = (tool.path or "") if tool.found else (tool.error or "")
        table.add_row(
            name, _status_text(tool, tool.name in essential),
            tool.version or "-", detail[:80],
        )
    console.print(table)


def print_report(report: DetectionReport, essential: set[str]) -> None:
    """Print the system header, every category table and the summary line.

    Args:
        report: Completed detection report.
        essential: Names of tools flagged essential (marked with ``*``).
    """
    info = report.system_info
    header = Text.assemble(
        ("Platform: ", "bold"), (info.platform.value, ""),
        ("  Arch: ", "bold"), (info.architecture.value, ""),
        ("  OS: ", "bold"), (info.version, "dim"),
    )
    if info.distribution:
        header.append(f"  ({info.distribution} {info.distribution_version or ''})".rstrip())
    console.print(Panel(header, title="System"))

    if not report.categories:
        console.print("[dim]No categories selected.[/dim]")
    for category in report.categories:
        print_category(category, essential)

    summary = report.summary
    parts = [
        f"[bold]{summary.total_found}/{summary.total_checked}[/bold] tools found",
        f"{summary.success_rate:.1f}% success",
    ]
    if report.essential_missing:
        parts.append(f"[red]{report.essential_missing} essential missing[/red]")
    else:
        parts.append("[green]all essential tools present[/green]")
    if summary.cache_hits:
        parts.append(f"{summary.cache_hits} cached")
    parts.append(f"{summary.detection_time_ms:.0f}ms")
    console.print(" | ".join(parts))
    for error in report.errors:
        console.print(f"[dim]  ! {escape(error)}[/dim]")


def print_tool(result: ToolDetectionResult) -> None:
    """Print a single tool detection result."""
    status = _status_text(result, essential=True)
    header = Text.assemble(("Tool: ", "bold"), (result.name, ""), ("  Status: ", "bold"), status)
    console.print(Panel(header, title="Detection Result"))
    console.print(f"  Method:  {result.detection_method.value}")
    if result.version:
        console.print(f"  Version: [bold]{result.version}[/bold]")
    if result.path:
        console.print(f"  Path:    {result.path}")
    if result.error:
        console.print(f"  Error:   [dim]{result.error}[/dim]")


def print_rules(registry: dict[str, tuple[DetectionRule, ...]]) -> None:
    """Print registered rules grouped by category."""
    table = Table(title="Detection Rules", show_header=True, header_style="bold")
    table.add_column("Category", style="bold")
    table.add_column("Tool")
    table.add_column("Essential", justify="center")
    table.add_column("Platforms", style="dim")
    for category, rules in registry.items():
        for rule in rules:
            platforms = ", ".join(
                f"{s.platform.value}:{s.method.value}" for s in rule.strategies
            )
            table.add_row(category, rule.name, "yes" if rule.essential else "", platforms)
    console.print(table)


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout."""
    console.print_json(json.dumps(data, default=str))

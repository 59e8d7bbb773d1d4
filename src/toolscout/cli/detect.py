"""``toolscout detect`` -- Scan the host for installed developer tools.

Runs a full detection scan over every registered category (or the ones
given with ``--category``) and prints one table per category plus a
summary line. Progress is shown on stderr while probes run.

Exit Codes:
    0 -- Every essential tool in the scanned categories was found.
    1 -- One or more essential tools are missing.
    2 -- Invalid options, config file, or rules file.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from toolscout.config import DetectionConfig, load_config
from toolscout.detection.detector import SystemDetector
from toolscout.detection.events import DetectionEvent, ToolDetected
from toolscout.detection.rules import RuleRegistry, default_rules, load_rules
from toolscout.exceptions import ConfigError, RuleLoadError
from toolscout.cli.output import print_json, print_report


def configure_logging(verbose: bool) -> None:
    """Route log records through Rich; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def build_detector(
    config_path: Path | None,
    rules_path: Path | None,
    **overrides: object,
) -> SystemDetector:
    """Assemble a detector from optional config/rules files and CLI overrides.

    Raises:
        click.UsageError: If the config or rules file is invalid.
    """
    try:
        config = load_config(config_path) if config_path else DetectionConfig()
        config = config.with_overrides(**overrides)
        registry: RuleRegistry = load_rules(rules_path) if rules_path else default_rules()
    except (ConfigError, RuleLoadError) as exc:
        raise click.UsageError(str(exc)) from exc
    return SystemDetector(config=config, rules=registry)


def _progress_printer(event: DetectionEvent) -> None:
    if isinstance(event, ToolDetected):
        p = event.progress
        click.echo(
            f"[{p.tools_completed}/{p.total_tools}] {event.tool}", err=True,
        )


@click.command("detect")
@click.option(
    "--category", "categories", multiple=True,
    help="Category to scan (repeatable). Defaults to all categories.",
)
@click.option("--sequential", is_flag=True, default=False,
              help="Scan categories one at a time.")
@click.option("--max-concurrency", type=click.IntRange(min=1), default=None,
              help="Maximum categories scanned at once.")
@click.option("--unbounded", is_flag=True, default=False,
              help="Scan every category at once, ignoring --max-concurrency.")
@click.option("--timeout", "timeout_ms", type=click.IntRange(min=1), default=None,
              help="Default probe timeout in milliseconds.")
@click.option("--no-cache", is_flag=True, default=False,
              help="Do not consult or update the result cache.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="YAML configuration file.")
@click.option("--rules", "rules_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="YAML detection rules file.")
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Output the report as JSON.")
@click.option("--quiet", is_flag=True, default=False, help="Hide progress output.")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging.")
def detect_command(
    categories: tuple[str, ...],
    sequential: bool,
    max_concurrency: int | None,
    unbounded: bool,
    timeout_ms: int | None,
    no_cache: bool,
    config_path: Path | None,
    rules_path: Path | None,
    as_json: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Detect installed developer tools and their versions."""
    configure_logging(verbose)
    detector = build_detector(
        config_path,
        rules_path,
        parallel=False if sequential else None,
        max_concurrency=max_concurrency,
        bounded_concurrency=False if unbounded else None,
        default_timeout_ms=timeout_ms,
        cache_results=False if no_cache else None,
    )

    unknown = [c for c in categories if c not in detector.categories]
    if unknown:
        raise click.BadParameter(
            f"Unknown category: {', '.join(unknown)}. "
            f"Known: {', '.join(detector.categories)}",
            param_hint="--category",
        )

    on_event = None if (quiet or as_json) else _progress_printer
    report = asyncio.run(
        detector.detect_tools(list(categories) or None, on_event=on_event)
    )

    if as_json:
        print_json(report.to_dict())
    else:
        essential = {
            rule.name
            for category in detector.categories
            for rule in detector.rules_for(category)
            if rule.essential
        }
        print_report(report, essential)

    sys.exit(1 if report.essential_missing else 0)

"""``toolscout tool NAME`` -- Detect a single tool by rule name.

Exit Codes:
    0 -- The tool was found.
    1 -- The tool was not found (or no rule exists for it).
    2 -- Invalid options, config file, or rules file.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from toolscout.cli.detect import build_detector, configure_logging
from toolscout.cli.output import print_json, print_tool


@click.command("tool")
@click.argument("name")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="YAML configuration file.")
@click.option("--rules", "rules_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="YAML detection rules file.")
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Output the result as JSON.")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging.")
def tool_command(
    name: str,
    config_path: Path | None,
    rules_path: Path | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Detect whether a single tool is installed and report its version."""
    configure_logging(verbose)
    detector = build_detector(config_path, rules_path)
    result = asyncio.run(detector.detect_tool(name))

    if as_json:
        print_json(result.to_dict())
    else:
        print_tool(result)
    sys.exit(0 if result.found else 1)

"""toolscout CLI -- Detect developer tools installed on this machine.

Entry point for the ``toolscout`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    detect -- Scan all (or selected) categories and print a report.
    tool   -- Detect one tool by name.
    rules  -- List the registered detection rules.

Usage::

    toolscout detect
    toolscout detect --category version-control --sequential
    toolscout detect --json --config toolscout.yaml
    toolscout tool Git
    toolscout rules --rules my-rules.yaml
"""

from __future__ import annotations

import click

from toolscout import __version__
from toolscout.cli.detect import detect_command
from toolscout.cli.rules_cmd import rules_command
from toolscout.cli.tool_cmd import tool_command


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """toolscout: Detect installed developer tools and their versions.

    Probes the host for programming languages, editors, version control,
    containers and package managers, caching results between probes.
    """


cli.add_command(detect_command)
cli.add_command(tool_command)
cli.add_command(rules_command)

"""``toolscout rules`` -- List registered detection rules.

Exit Codes:
    0 -- Rules listed.
    2 -- The rules file is invalid.
"""

from __future__ import annotations

from pathlib import Path

import click

from toolscout.cli.output import print_json, print_rules
from toolscout.detection.rules import default_rules, load_rules
from toolscout.exceptions import RuleLoadError


@click.command("rules")
@click.option("--rules", "rules_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="YAML detection rules file.")
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Output the rules as JSON.")
def rules_command(rules_path: Path | None, as_json: bool) -> None:
    """List detection rules grouped by category."""
    try:
        registry = load_rules(rules_path) if rules_path else default_rules()
    except RuleLoadError as exc:
        raise click.UsageError(str(exc)) from exc

    if as_json:
        print_json({
            category: [
                {
                    "name": rule.name,
                    "essential": rule.essential,
                    "platforms": [s.platform.value for s in rule.strategies],
                }
                for rule in rules
            ]
            for category, rules in registry.items()
        })
    else:
        print_rules(registry)

"""List the rules the orchestrator discovers."""

import click

from drizzleaudit.pipeline.ui import console, print_header, rules_table
from drizzleaudit.utils.error_handler import handle_exceptions


@click.command("rules")
@click.option(
    "--preset",
    type=click.Choice(["recommended", "strict", "all"]),
    default=None,
    help="Show severities under this preset",
)
@handle_exceptions
def rules_command(preset):
    """List every rule with its default and active severity.

    Examples:
      daud rules
      daud rules --preset recommended"""
    from drizzleaudit.config_runtime import RuntimeConfig
    from drizzleaudit.rules.orchestrator import RulesOrchestrator

    config = RuntimeConfig.defaults(preset)
    orchestrator = RulesOrchestrator(config=config)

    rows = []
    for name, rule in sorted(orchestrator.rules_by_name().items()):
        active = config.severity(name)
        rows.append(
            (
                name,
                rule.metadata.default_severity.value,
                active.value if active else None,
                rule.metadata.description,
            )
        )

    print_header(f"RULES ({preset or 'defaults'})")
    console.print(rules_table(rows))

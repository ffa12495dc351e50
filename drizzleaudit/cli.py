"""drizzleaudit CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click

from drizzleaudit import __version__


@click.group()
@click.version_option(version=__version__, prog_name="daud")
@click.help_option("-h", "--help")
def cli():
    """drizzleaudit - Static checks for Drizzle ORM schemas and queries

    \b
    QUICK START:
      daud scan                 # Scan the current directory
      daud scan --preset strict # Every rule as an error
      daud rules                # List available rules

    \b
    For detailed options: daud <command> --help"""
    pass


from drizzleaudit.commands.rules import rules_command
from drizzleaudit.commands.scan import scan

cli.add_command(scan)
cli.add_command(rules_command)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()

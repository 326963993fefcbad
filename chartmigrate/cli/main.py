"""Main CLI entry point for chartmigrate."""

import click

from chartmigrate import __version__
from chartmigrate.cli.commands.list_rules import list_rules
from chartmigrate.cli.commands.migrate import migrate
from chartmigrate.cli.commands.validate import validate


@click.group()
@click.version_option(version=__version__)
def main():
    """chartmigrate - Rule-driven Helm chart values migration."""
    pass


# Register commands
main.add_command(migrate)
main.add_command(validate)
main.add_command(list_rules)


if __name__ == "__main__":
    main()

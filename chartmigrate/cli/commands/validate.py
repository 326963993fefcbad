"""CLI command for validating values files against a chart schema."""

import sys

import click

from chartmigrate.core.exceptions import MigratorError
from chartmigrate.core.logging import configure_logging
from chartmigrate.core.pipeline import validate_document
from chartmigrate.models.loader import apply_overrides, load_document, load_settings


@click.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--target-version", help="Chart version to validate against (default: latest known)")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Settings YAML file")
@click.option("--schema-url", help="Schema URL template with {version} or {bare_version}")
@click.option("--schema-dir", type=click.Path(file_okay=False), help="Read schemas from <dir>/<version>.json")
@click.option("--cache-dir", type=click.Path(file_okay=False), help="On-disk schema cache directory")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Log level (default: WARNING)",
)
def validate(
    input_path: str,
    target_version: str | None,
    config_path: str | None,
    schema_url: str | None,
    schema_dir: str | None,
    cache_dir: str | None,
    log_level: str,
):
    """Validate a values file against a chart schema, without migrating.

    Examples:

        chartmigrate validate values-v25.1.1.yaml
        chartmigrate validate values.yaml --target-version v5.9.0 --schema-dir ./schemas
    """
    configure_logging(level=log_level)

    try:
        settings = apply_overrides(
            load_settings(config_path),
            schema_url=schema_url,
            schema_dir=schema_dir,
            cache_dir=cache_dir,
        )
        document = load_document(input_path)
        report = validate_document(document, target_version, settings)
    except MigratorError as e:
        click.echo(f"✗ Validation could not run: {e}", err=True)
        sys.exit(1)

    if not report.ok:
        click.echo(
            f"✗ {len(report.issues)} violation(s) against schema {report.schema_version}:",
            err=True,
        )
        for issue in report.issues:
            click.echo(f"  {issue.path or '/'}: [{issue.kind}] {issue.message}", err=True)
        sys.exit(1)

    click.echo(f"✓ {input_path} is valid against schema {report.schema_version}")

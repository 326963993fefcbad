"""CLI command for migrating values files."""

import sys

import click

from chartmigrate.core.exceptions import (
    ConfigError,
    DocumentShapeError,
    InputParseError,
    MigratorError,
    OutputWriteError,
    RuleApplicationError,
    SchemaFetchError,
    SchemaValidationError,
    VersionDetectionError,
)
from chartmigrate.core.logging import configure_logging
from chartmigrate.core.pipeline import execute
from chartmigrate.core.report import (
    REPORT_FORMATS,
    build_payload,
    dump_payload,
    recommendations,
    render_report,
)
from chartmigrate.models.loader import apply_overrides, load_document, load_settings


@click.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--workload-version", help="Workload version (vX.Y.Z) when the file has no image.tag")
@click.option("--console-version", help="Console version (vX.Y.Z) when the file has no console.image.tag")
@click.option("--source-version", help="Source chart version (default: oldest known)")
@click.option("--target-version", help="Target chart version (default: latest known)")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Settings YAML file")
@click.option("--schema-url", help="Schema URL template with {version} or {bare_version}")
@click.option("--schema-dir", type=click.Path(file_okay=False), help="Read schemas from <dir>/<version>.json")
@click.option("--cache-dir", type=click.Path(file_okay=False), help="On-disk schema cache directory")
@click.option("--allow-stale-schema", is_flag=True, help="Use a compatible cached schema if fetching fails")
@click.option("--output-dir", type=click.Path(file_okay=False), help="Directory for the migrated file")
@click.option("--sequential", is_flag=True, help="Do not fetch the schema while rules are applied")
@click.option("--dry-run", is_flag=True, help="Migrate and validate without writing")
@click.option(
    "--report-format",
    default="text",
    type=click.Choice(REPORT_FORMATS),
    help="Report format on stdout (default: text)",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Log level (default: INFO)",
)
@click.option(
    "--json-logs",
    is_flag=True,
    help="Use JSON format for logs",
)
def migrate(
    input_path: str,
    workload_version: str | None,
    console_version: str | None,
    source_version: str | None,
    target_version: str | None,
    config_path: str | None,
    schema_url: str | None,
    schema_dir: str | None,
    cache_dir: str | None,
    allow_stale_schema: bool,
    output_dir: str | None,
    sequential: bool,
    dry_run: bool,
    report_format: str,
    log_level: str,
    json_logs: bool,
):
    """Migrate a legacy values file to the target chart schema.

    The migrated file is written next to the input as
    <name>-<target>.<ext> (with -1, -2, ... if that name is taken) and only
    when it validates against the target schema.

    Examples:

        chartmigrate migrate values.yaml
        chartmigrate migrate values.yaml --workload-version v24.1.1
        chartmigrate migrate values.yaml --schema-dir ./schemas --dry-run
        chartmigrate migrate values.json --report-format json --json-logs
        chartmigrate migrate values.yaml --report-format yaml --dry-run
    """
    configure_logging(level=log_level, json_format=json_logs)

    try:
        settings = apply_overrides(
            load_settings(config_path),
            schema_url=schema_url,
            schema_dir=schema_dir,
            cache_dir=cache_dir,
            allow_stale_schema=True if allow_stale_schema else None,
            parallel=False if sequential else None,
            output_dir=output_dir,
        )
        document = load_document(input_path)
        result = execute(
            document,
            settings,
            workload_version=workload_version,
            console_version=console_version,
            source_version=source_version,
            target_version=target_version,
            input_path=input_path,
            dry_run=dry_run,
        )
    except SchemaValidationError as e:
        click.echo("Migrated document failed schema validation:", err=True)
        for issue in e.report.issues:
            click.echo(f"  {issue.path or '/'}: [{issue.kind}] {issue.message}", err=True)
        click.echo(
            f"Validation status: INVALID against {e.report.schema_version} "
            f"({len(e.report.issues)} error(s))",
            err=True,
        )
        click.echo("Recommendations:", err=True)
        for advice in recommendations(None, e.report):
            click.echo(f"  - {advice}", err=True)
        sys.exit(1)
    except (InputParseError, ConfigError) as e:
        click.echo(f"Input error: {e}", err=True)
        sys.exit(1)
    except VersionDetectionError as e:
        click.echo(f"Version error: {e}", err=True)
        sys.exit(1)
    except DocumentShapeError as e:
        click.echo(f"Document error: {e}", err=True)
        sys.exit(1)
    except RuleApplicationError as e:
        click.echo(f"Rule set error: {e}", err=True)
        sys.exit(1)
    except SchemaFetchError as e:
        click.echo(f"Schema error: {e}", err=True)
        sys.exit(1)
    except OutputWriteError as e:
        click.echo(f"Write error: {e}", err=True)
        sys.exit(1)
    except MigratorError as e:
        click.echo(f"Migration error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)

    if report_format != "text":
        payload = build_payload(
            result.report,
            result.versions,
            result.validation,
            output_path=result.output_path,
        )
        click.echo(dump_payload(payload, report_format))
        return

    click.echo(render_report(result.report, result.versions, result.validation))
    click.echo("")
    if result.output_path is not None:
        click.echo(f"✓ Wrote {result.output_path}")
    else:
        click.echo("✓ Dry run: migrated document is valid, nothing written")

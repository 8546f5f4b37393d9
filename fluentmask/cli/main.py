#!/usr/bin/env python3
"""fluentmask CLI - mask JSON/YAML records with a declarative profile."""

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
import yaml

from fluentmask.core.exceptions import ProfileValidationError, SerializationError
from fluentmask.core.profile_loader import ProfileLoader
from fluentmask.formats.registry import SupportedFormat, get_format_registry
from fluentmask.masking.builders import BUILDERS
from fluentmask.observability.config import LoggingConfig
from fluentmask.observability.logging import configure_logging, correlation_context

logger = logging.getLogger(__name__)


def _read_records(input_path: Path) -> tuple[list[Any], bool]:
    """Read records from ``input_path``.

    Returns:
        The records and whether the input held a single record
    """
    fmt = get_format_registry().detect_format_from_path(input_path) or SupportedFormat.JSON
    text = input_path.read_text(encoding="utf-8")

    try:
        if fmt is SupportedFormat.JSONL:
            return [json.loads(line) for line in text.splitlines() if line.strip()], False
        if fmt is SupportedFormat.YAML:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot parse {input_path} as {fmt.value}: {e}") from e

    if isinstance(data, list):
        return data, False
    return [data], True


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging level for diagnostics written to stderr",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str) -> None:
    """fluentmask - declarative property masking for structured records."""
    ctx.ensure_object(dict)
    configure_logging(LoggingConfig(level=log_level, format="text"))


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--profile",
    "-p",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to mask profile YAML file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output file path (default: stdout)",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "yaml"]),
    default="json",
    help="Output format for the masked records",
)
@click.option(
    "--behavior",
    type=click.Choice(["include", "exclude", "remove"]),
    help="Override the profile's property behavior",
)
@click.pass_context
def mask(
    ctx: click.Context,
    input_file: str,
    profile: str,
    output: str | None,
    format: str,
    behavior: str | None,
) -> None:
    """Mask every record of INPUT_FILE (JSON, YAML or JSON Lines)."""
    input_path = Path(input_file)

    try:
        masking_profile = ProfileLoader().load_profile(profile)
    except ProfileValidationError as e:
        raise click.ClickException(f"Invalid profile: {e.message}") from e

    masker = masking_profile.create_masker(output_format=format)
    if behavior:
        masker.set_property_rule_behavior(behavior)

    records, single = _read_records(input_path)
    masked: list[Any] = []
    failures: list[str] = []

    with correlation_context():
        for index, record in enumerate(records):
            try:
                result = masking_profile.mask_record(record, masker=masker)
            except TypeError as e:
                raise click.ClickException(f"record[{index}]: {e}") from e
            masked.append(result.data)
            failures.extend(f"record[{index}]: {error}" for error in result.errors)
            logger.info(f"Masked record {index}: {result.stats.properties_by_outcome}")

    payload_structure = masked[0] if single and masked else masked
    try:
        payload = masker.serializer.serialize(payload_structure)
    except SerializationError as e:
        raise click.ClickException(str(e)) from e

    if output:
        Path(output).write_text(payload if payload.endswith("\n") else payload + "\n", encoding="utf-8")
        click.echo(f"✓ Masked {len(masked)} record(s) to {output}", err=True)
    else:
        click.echo(payload.rstrip("\n"))

    if failures:
        for failure in failures:
            click.echo(f"Error: {failure}", err=True)
        ctx.exit(1)


@cli.command()
@click.argument("profile", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx: click.Context, profile: str) -> None:
    """Validate a mask profile file."""
    errors = ProfileLoader().validate_profile_file(profile)
    if errors:
        for error in errors:
            click.echo(f"✗ {error}", err=True)
        ctx.exit(1)
    click.echo(f"✓ {profile} is valid")


@cli.command()
def rules() -> None:
    """List the rule steps available to each property type."""
    for kind, builder_cls in BUILDERS.items():
        click.echo(f"{kind}:")
        for step in builder_cls.steps:
            if step != "add_rule":
                click.echo(f"  - {step}")


@cli.command()
def version() -> None:
    """Show fluentmask version."""
    from fluentmask import __version__

    click.echo(f"fluentmask v{__version__}")


def main() -> int:
    """Main entry point."""
    try:
        cli()
        return 0
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Validate command for glyphvm CLI."""

import json
import sys

import click

from glyphvm.errors import ProgramLoadError
from glyphvm.loader import jump_warnings, load_program


@click.command()
@click.argument("program", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "-j", "json_output", is_flag=True, help="Output as JSON")
def validate_command(program, json_output):
    """Check that a program file loads, and flag jumps that would abort."""
    try:
        loaded = load_program(program)
    except ProgramLoadError as e:
        if json_output:
            click.echo(json.dumps({"valid": False, "errors": [str(e)]}, indent=2))
        else:
            click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    warnings = jump_warnings(loaded)
    output = {
        "valid": True,
        "program_id": loaded.program_id,
        "instruction_count": len(loaded),
        "digest": loaded.digest(),
        "warnings": warnings,
    }

    if json_output:
        click.echo(json.dumps(output, indent=2))
    else:
        click.echo("✓ Program valid")
        click.echo(f"  Program: {output['program_id']}")
        click.echo(f"  Instructions: {output['instruction_count']}")
        click.echo(f"  Digest: {output['digest']}")
        for warning in warnings:
            click.echo(f"  Warning: {warning}")

"""Run command for glyphvm CLI."""

import json
import sys

import click

from glyphvm.errors import GlyphVMError, StepLimitExceeded
from glyphvm.loader import load_program
from glyphvm.runtime.environment import StreamIO
from glyphvm.runtime.executor import ExecutionConfig
from glyphvm.runtime.interpreter import Interpreter

EXIT_ABORTED = 2


@click.command()
@click.argument("program", type=click.Path(exists=True, dir_okay=False))
@click.option("--backend", "-b", type=click.Choice(["arbitrary", "bounded"]),
              default="arbitrary", show_default=True, help="Numeric backend")
@click.option("--bits", type=int, default=64, show_default=True,
              help="Integer width of the bounded backend")
@click.option("--input", "-i", "input_text", default=None,
              help="Program input as text instead of stdin")
@click.option("--max-steps", type=int, default=None, help="Stop after this many steps")
@click.option("--trace", is_flag=True, help="Record every dispatched instruction")
@click.option("--state", "include_state", is_flag=True, help="Include final machine state")
@click.option("--json", "-j", "json_output", is_flag=True, help="Output as JSON")
def run_command(program, backend, bits, input_text, max_steps, trace, include_state, json_output):
    """Run a decoded program (JSON instruction stream)."""
    try:
        loaded = load_program(program)
        config = ExecutionConfig(
            numeric_backend=backend,
            bounded_bits=bits,
            max_steps=max_steps,
            trace=trace,
            include_state=include_state,
        )
        interpreter = Interpreter(config)

        if json_output or input_text is not None:
            report = interpreter.run_buffered(loaded, input_text or "")
            result = report.result
            if json_output:
                click.echo(json.dumps(report.to_dict(), indent=2))
            else:
                click.echo(report.output, nl=False)
        else:
            io = StreamIO(click.get_binary_stream("stdin"), click.get_text_stream("stdout"))
            try:
                result = interpreter.interpret(loaded, io)
            finally:
                io.close()

        if trace and not json_output:
            for event in interpreter.trace_events:
                click.echo(
                    f"[{event.step_index}] ip={event.ip} {event.instruction} "
                    f"-> {event.update} curses={event.curses}",
                    err=True,
                )

    except StepLimitExceeded as e:
        click.echo(f"Error: {e} (at instruction {e.ip})", err=True)
        sys.exit(1)
    except GlyphVMError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not result.completed:
        if not json_output:
            click.echo(f"Aborted: {result.reason} at instruction {result.at_index}", err=True)
        sys.exit(EXIT_ABORTED)

"""Safe write commands."""

from pathlib import Path

import click

from pmrun.cli.ensure import Ensure
from pmrun.cli.output import machine_output, user_output
from pmrun.core.context import PmrunContext


@click.command("write")
@click.argument("destination", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--content",
    default=None,
    help="Text to write. Reads raw bytes from stdin when omitted.",
)
@click.pass_obj
def write_cmd(ctx: PmrunContext, destination: Path, content: str | None) -> None:
    """Atomically write DESTINATION through a scratch file."""
    if content is None:
        payload: str | bytes = click.get_binary_stream("stdin").read()
    else:
        payload = content

    Ensure.invariant(
        ctx.writer.write(destination, payload),
        f"Failed to write {destination} (run with --debug for details)",
    )
    user_output(click.style("✓", fg="green") + f" Wrote {destination}")


@click.command("scratch-dir")
@click.pass_obj
def scratch_dir_cmd(ctx: PmrunContext) -> None:
    """Print the scratch directory used for staging writes."""
    machine_output(str(ctx.writer.scratch_area.directory))

import click

from pmrun.cli.commands.probe import launch_prefix_cmd, which_cmd
from pmrun.cli.commands.write import scratch_dir_cmd, write_cmd
from pmrun.cli.debug import configure_debug_logging
from pmrun.cli.output import user_output
from pmrun.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="pmrun")
@click.option("--debug", is_flag=True, help="Show debug logging on stderr.")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Probe executables and write files safely."""
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        try:
            ctx.obj = create_context()
        except ValueError as e:
            user_output(click.style("Error: ", fg="red") + str(e))
            raise SystemExit(1) from None

    if debug or ctx.obj.config.debug:
        configure_debug_logging()


cli.add_command(which_cmd)
cli.add_command(launch_prefix_cmd)
cli.add_command(write_cmd)
cli.add_command(scratch_dir_cmd)


def main() -> None:
    """CLI entry point used by the `pmrun` console script."""
    cli()

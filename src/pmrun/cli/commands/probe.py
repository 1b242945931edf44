"""Executable probe commands."""

import logging

import click

from pmrun.cli.ensure import Ensure
from pmrun.cli.output import machine_output
from pmrun.core.context import PmrunContext
from pmrun.integrations.executables import version_manager_launch_prefix

logger = logging.getLogger(__name__)


@click.command("which")
@click.argument("command_name")
@click.pass_obj
def which_cmd(ctx: PmrunContext, command_name: str) -> None:
    """Print where COMMAND_NAME resolves on PATH."""
    Ensure.invariant(bool(command_name.strip()), "Command name must not be empty")
    try:
        resolved = ctx.executables.get_path(command_name)
    except (OSError, ValueError) as e:
        logger.debug("Lookup of %r failed: %s", command_name, e)
        resolved = None
    path = Ensure.not_none(resolved, f"'{command_name}' was not found on PATH")
    machine_output(path)


@click.command("launch-prefix")
@click.pass_obj
def launch_prefix_cmd(ctx: PmrunContext) -> None:
    """Print the version-manager launcher prefix (empty if none)."""
    machine_output(version_manager_launch_prefix(ctx.executables))

"""Output routing for CLI commands.

user_output: messages for humans, sent to stderr
machine_output: values meant to be captured by scripts, sent to stdout
"""

import click


def user_output(message: str = "", *, nl: bool = True) -> None:
    """Print a human-facing message to stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", *, nl: bool = True) -> None:
    """Print a machine-readable value to stdout."""
    click.echo(message, nl=nl)

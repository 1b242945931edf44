"""Convenience probes over the Executables interface.

These are the functions the command layer calls. Both accept an optional
Executables instance so callers and tests can inject a fake; by default they
look at the real PATH.
"""

from pmrun.integrations.executables.abc import Executables
from pmrun.integrations.executables.real import RealExecutables

# https://blog.volta.sh/2020/11/25/command-spotlight-volta-run/
VOLTA_COMMAND = "volta"
VOLTA_PREFIX = "volta run"


def command_exists(command_name: str, executables: Executables | None = None) -> bool:
    """Check whether command_name resolves to an executable on PATH.

    Never raises: lookup failures count as "not found".

    Args:
        command_name: Non-empty command name (e.g., "yarn")
        executables: Lookup implementation (defaults to RealExecutables)

    Returns:
        True if the command was found, False otherwise
    """
    if executables is None:
        executables = RealExecutables()
    return executables.exists(command_name)


def version_manager_launch_prefix(executables: Executables | None = None) -> str:
    """Get the launcher prefix needed to run tools through volta.

    Returns:
        "volta run" when volta is installed, otherwise an empty string
    """
    if command_exists(VOLTA_COMMAND, executables):
        return VOLTA_PREFIX
    return ""

"""Executable lookup subpackage.

Provides an abstraction over PATH lookups with a real implementation backed by
shutil.which, plus convenience functions used by the command layer.
"""

from pmrun.integrations.executables.abc import Executables
from pmrun.integrations.executables.probe import (
    VOLTA_COMMAND,
    VOLTA_PREFIX,
    command_exists,
    version_manager_launch_prefix,
)
from pmrun.integrations.executables.real import RealExecutables

__all__ = [
    "VOLTA_COMMAND",
    "VOLTA_PREFIX",
    "Executables",
    "RealExecutables",
    "command_exists",
    "version_manager_launch_prefix",
]

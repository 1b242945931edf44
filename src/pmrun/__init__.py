"""Helper core for a package-manager-agnostic command runner.

Provides crash-resistant file writing and PATH executable probing.
"""

from pmrun.core.list_utils import exclude, remove
from pmrun.core.safe_write import write_file_safe
from pmrun.integrations.executables import command_exists, version_manager_launch_prefix

__all__ = [
    "command_exists",
    "exclude",
    "remove",
    "version_manager_launch_prefix",
    "write_file_safe",
]

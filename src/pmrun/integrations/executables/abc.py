"""Executable lookup abstraction for testing.

This module provides an ABC for resolving command names on the search path so
that probes can be exercised without depending on what happens to be installed
on the machine running the tests.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Executables(ABC):
    """Abstract interface for PATH executable lookups.

    Implementations provide get_path(); exists() is derived from it and never
    raises.
    """

    @abstractmethod
    def get_path(self, command_name: str) -> str | None:
        """Resolve a command name to an executable path.

        Args:
            command_name: Command to look up (e.g., "pnpm")

        Returns:
            Absolute path to the executable, or None if not found

        Raises:
            OSError: If the lookup itself fails
            ValueError: If the command name cannot be looked up
        """
        ...

    def exists(self, command_name: str) -> bool:
        """Check whether a command resolves to an executable.

        Lookup failures are treated as "not found".

        Args:
            command_name: Command to look up

        Returns:
            True if an executable was found, False otherwise
        """
        try:
            path = self.get_path(command_name)
        except (OSError, ValueError) as e:
            logger.debug("Lookup of %r failed: %s", command_name, e)
            return False
        logger.debug("Lookup of %r: %s", command_name, path)
        return path is not None

"""Real executable lookup using shutil.which()."""

import shutil

from pmrun.integrations.executables.abc import Executables


class RealExecutables(Executables):
    """Production implementation that searches PATH via shutil.which()."""

    def get_path(self, command_name: str) -> str | None:
        """Resolve command_name against PATH (and PATHEXT on Windows)."""
        return shutil.which(command_name)

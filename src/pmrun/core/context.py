"""Application context with injected dependencies.

Built once at the CLI entry point and passed to commands via click's ctx.obj.
Tests construct it directly with fakes.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from pmrun.core.config import RuntimeConfig, load_runtime_config
from pmrun.core.safe_write import SafeFileWriter, ScratchArea
from pmrun.integrations.executables import Executables, RealExecutables


@dataclass(frozen=True)
class PmrunContext:
    """Immutable context holding all dependencies for pmrun commands."""

    config: RuntimeConfig
    executables: Executables
    writer: SafeFileWriter


def create_context(environ: Mapping[str, str] | None = None) -> PmrunContext:
    """Create production context with real implementations.

    Args:
        environ: Environment to read config from (defaults to os.environ)

    Raises:
        ValueError: If the PMRUN_* environment variables are malformed
    """
    if environ is None:
        environ = os.environ
    config = load_runtime_config(environ)
    scratch_area = ScratchArea(config.scratch_dir, max_attempts=config.max_scratch_attempts)
    return PmrunContext(
        config=config,
        executables=RealExecutables(),
        writer=SafeFileWriter(scratch_area),
    )

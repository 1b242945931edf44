"""Runtime configuration data structures and loading.

Provides immutable runtime config loaded once from environment variables at the
entry point.
"""

import tempfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

SCRATCH_NAMESPACE = "pmrun"
DEFAULT_MAX_SCRATCH_ATTEMPTS = 1000

SCRATCH_DIR_ENV = "PMRUN_SCRATCH_DIR"
MAX_SCRATCH_ATTEMPTS_ENV = "PMRUN_MAX_SCRATCH_ATTEMPTS"
DEBUG_ENV = "PMRUN_DEBUG"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"", "0", "false", "no", "off"})


@dataclass(frozen=True)
class RuntimeConfig:
    """Immutable runtime configuration.

    All fields are read-only after construction.
    """

    scratch_dir: Path
    max_scratch_attempts: int
    debug: bool


def default_scratch_dir() -> Path:
    """Get the scratch directory under the OS temp directory."""
    return Path(tempfile.gettempdir()) / SCRATCH_NAMESPACE


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"Invalid boolean for {name}: {raw!r}")


def _parse_positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value


def load_runtime_config(environ: Mapping[str, str]) -> RuntimeConfig:
    """Load runtime config from environment variables.

    Args:
        environ: Environment mapping (usually os.environ)

    Returns:
        RuntimeConfig with defaults applied for unset variables

    Raises:
        ValueError: If a variable is set to a malformed value
    """
    scratch_raw = environ.get(SCRATCH_DIR_ENV)
    if scratch_raw:
        scratch_dir = Path(scratch_raw).expanduser().resolve()
    else:
        scratch_dir = default_scratch_dir()

    attempts_raw = environ.get(MAX_SCRATCH_ATTEMPTS_ENV)
    if attempts_raw is None:
        max_attempts = DEFAULT_MAX_SCRATCH_ATTEMPTS
    else:
        max_attempts = _parse_positive_int(MAX_SCRATCH_ATTEMPTS_ENV, attempts_raw)

    return RuntimeConfig(
        scratch_dir=scratch_dir,
        max_scratch_attempts=max_attempts,
        debug=_parse_bool(DEBUG_ENV, environ.get(DEBUG_ENV, "")),
    )

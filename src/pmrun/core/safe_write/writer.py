"""Crash-resistant file writes via scratch file + atomic rename.

The destination either keeps its old content (or stays absent) or holds the
complete new content. It is never observed half-written, because content is
staged in a scratch file and published with os.replace(), which is atomic for
same-volume renames. There is no cross-volume copy fallback.

Every failure collapses to a False return value; callers never see filesystem
exceptions from write_file_safe().
"""

import logging
import os
import threading
from pathlib import Path
from typing import TypeAlias

from pmrun.core.config import load_runtime_config
from pmrun.core.safe_write.scratch import ScratchArea

logger = logging.getLogger(__name__)

Content: TypeAlias = str | bytes | bytearray | memoryview
PathLike: TypeAlias = str | os.PathLike[str]


def encode_content(content: Content) -> bytes:
    """Convert content to the bytes that will land on disk.

    Text is encoded as UTF-8; bytes-like values are written unchanged.

    Raises:
        TypeError: If content is neither text nor bytes-like
    """
    if isinstance(content, str):
        return content.encode("utf-8")
    if isinstance(content, bytes | bytearray | memoryview):
        return bytes(content)
    raise TypeError(f"Content must be str or bytes-like, got {type(content).__name__}")


class SafeFileWriter:
    """Writes files through a ScratchArea and publishes them atomically."""

    def __init__(self, scratch_area: ScratchArea) -> None:
        self._scratch_area = scratch_area

    @property
    def scratch_area(self) -> ScratchArea:
        return self._scratch_area

    def write(self, destination: PathLike, content: Content = "") -> bool:
        """Write content to destination without ever exposing a partial file.

        Steps: acquire scratch file, write payload, create the destination's
        parent directory if missing, rename scratch onto destination. The scratch
        file is cleaned up on every path out of this method.

        Args:
            destination: Target file path
            content: Text or bytes to write (defaults to empty text)

        Returns:
            True if the rename completed, False on any filesystem failure or
            text that cannot be encoded as UTF-8

        Raises:
            TypeError: If content is neither text nor bytes-like
        """
        destination_path = Path(destination)
        try:
            payload = encode_content(content)
        except UnicodeEncodeError as e:
            logger.warning("Cannot encode content for %s: %s", destination_path, e)
            return False

        scratch = self._scratch_area.acquire()
        if scratch is None:
            return False

        with scratch:
            try:
                scratch.write(payload)
                # Windows refuses to rename a file that is still open
                scratch.close()

                parent = destination_path.parent
                if not parent.exists():
                    parent.mkdir(parents=True, exist_ok=True)

                os.replace(scratch.path, destination_path)
            # ValueError covers paths the OS rejects outright, such as embedded NUL
            except (OSError, ValueError) as e:
                logger.warning("Safe write to %s failed: %s", destination_path, e)
                return False

        logger.debug(
            "Published %d bytes to %s via %s", len(payload), destination_path, scratch.path
        )
        return True


_default_writer: SafeFileWriter | None = None
_default_writer_lock = threading.Lock()


def get_default_writer() -> SafeFileWriter:
    """Get the process-wide writer, building it from the environment on first use.

    Raises:
        ValueError: If the PMRUN_* environment variables are malformed
    """
    global _default_writer
    with _default_writer_lock:
        if _default_writer is None:
            config = load_runtime_config(os.environ)
            _default_writer = SafeFileWriter(
                ScratchArea(config.scratch_dir, max_attempts=config.max_scratch_attempts)
            )
        return _default_writer


def write_file_safe(destination: PathLike, content: Content = "") -> bool:
    """Write content to destination atomically using the process-wide scratch area.

    See SafeFileWriter.write() for the protocol. Malformed PMRUN_* environment
    variables also yield False.

    Example:
        >>> write_file_safe("node_modules/.cache/pmrun/last.json", '{"agent": "pnpm"}')
        True
    """
    try:
        writer = get_default_writer()
    except ValueError as e:
        logger.warning("Cannot configure safe writes: %s", e)
        return False
    return writer.write(destination, content)

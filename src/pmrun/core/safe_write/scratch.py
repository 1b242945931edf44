"""Scratch files used to stage content before an atomic publish.

A scratch file lives in a process-wide scratch directory and is named
`.<pid>.<counter>`. Names are unique within a process because the counter only
ever increases, and across processes because the pid differs. Creation uses
exclusive mode so a leftover file from a crashed process with a recycled pid is
detected as a collision instead of being overwritten.

Architecture:
- ScratchNameCounter: thread-safe monotonic counter
- ScratchFile: exclusively owned handle with run-once cleanup (context manager)
- ScratchAttempt: tagged result of a single exclusive-create attempt
- ScratchArea: directory + naming + bounded retry on collisions
"""

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import BinaryIO, TypeAlias

from pmrun.core.config import DEFAULT_MAX_SCRATCH_ATTEMPTS

logger = logging.getLogger(__name__)


class ScratchNameCounter:
    """Monotonically increasing counter for scratch file names.

    Safe to share between threads; every call to next_value() returns a value
    no other call in this process has received.
    """

    def __init__(self, start: int = 0) -> None:
        self._next = start
        self._lock = threading.Lock()

    def next_value(self) -> int:
        """Hand out the current value and advance the counter."""
        with self._lock:
            value = self._next
            self._next += 1
            return value

    @property
    def peek(self) -> int:
        """The value the next call to next_value() will return."""
        with self._lock:
            return self._next


# One counter per process, shared by every ScratchArea that doesn't bring its own
PROCESS_COUNTER = ScratchNameCounter()


class ScratchFile:
    """A scratch file opened in exclusive-create mode.

    Owned by exactly one write operation. Use as a context manager: leaving the
    block closes the handle and deletes the file if it is still at its scratch
    path (i.e. it was not consumed by a rename). Cleanup runs at most once and
    never raises.
    """

    def __init__(self, path: Path, handle: BinaryIO) -> None:
        self._path = path
        self._handle = handle
        self._cleaned_up = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def write(self, payload: bytes) -> None:
        """Write the full payload and force it to disk.

        Raises:
            OSError: If writing, flushing or syncing fails
        """
        self._handle.write(payload)
        self._handle.flush()
        os.fsync(self._handle.fileno())

    def close(self) -> None:
        """Close the handle. Safe to call more than once.

        Raises:
            OSError: If the final flush fails
        """
        if not self._handle.closed:
            self._handle.close()

    def cleanup(self) -> None:
        """Close the handle and delete the scratch file if present (best effort)."""
        if self._cleaned_up:
            return
        self._cleaned_up = True

        try:
            self.close()
        except OSError as e:
            logger.debug("Closing scratch file %s failed: %s", self._path, e)

        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.debug("Removing scratch file %s failed: %s", self._path, e)

    def __enter__(self) -> "ScratchFile":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()


@dataclass(frozen=True)
class ScratchCreated:
    """The candidate path was free and is now owned by the caller."""

    scratch: ScratchFile


@dataclass(frozen=True)
class ScratchCollision:
    """The candidate path already exists; try another name."""

    path: Path


@dataclass(frozen=True)
class ScratchFailure:
    """Creating the candidate failed for a reason retrying won't fix."""

    path: Path
    error: OSError | ValueError


ScratchAttempt: TypeAlias = ScratchCreated | ScratchCollision | ScratchFailure


class ScratchArea:
    """Hands out uniquely named scratch files inside one directory.

    The directory is created on first use and never removed.
    """

    def __init__(
        self,
        directory: Path,
        *,
        counter: ScratchNameCounter | None = None,
        pid: int | None = None,
        max_attempts: int = DEFAULT_MAX_SCRATCH_ATTEMPTS,
    ) -> None:
        """Create a scratch area.

        Args:
            directory: Directory scratch files are created in
            counter: Name counter (defaults to the process-wide counter)
            pid: Process id used in names (defaults to os.getpid() at call time)
            max_attempts: Upper bound on collision retries per acquire()
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self._directory = directory
        self._counter = counter if counter is not None else PROCESS_COUNTER
        self._pid = pid
        self._max_attempts = max_attempts

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def counter(self) -> ScratchNameCounter:
        return self._counter

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def _current_pid(self) -> int:
        # Looked up per call so a forked child doesn't reuse its parent's names
        if self._pid is not None:
            return self._pid
        return os.getpid()

    def next_candidate(self) -> Path:
        """Build the next candidate path, consuming one counter value."""
        value = self._counter.next_value()
        return self._directory / f".{self._current_pid()}.{value}"

    def try_create(self, path: Path) -> ScratchAttempt:
        """Attempt to create path in exclusive mode."""
        try:
            handle = open(path, "xb")  # noqa: SIM115
        except FileExistsError:
            return ScratchCollision(path=path)
        except (OSError, ValueError) as e:
            return ScratchFailure(path=path, error=e)
        return ScratchCreated(scratch=ScratchFile(path, handle))

    def ensure_directory(self) -> None:
        """Create the scratch directory if it does not exist yet.

        Raises:
            OSError: If the directory cannot be created
            ValueError: If the directory path is not valid for the OS
        """
        if not self._directory.is_dir():
            self._directory.mkdir(parents=True, exist_ok=True)
            logger.debug("Created scratch directory %s", self._directory)

    def acquire(self) -> ScratchFile | None:
        """Create a fresh scratch file, retrying on name collisions.

        Returns:
            The created ScratchFile, or None if the directory could not be
            created, creation failed for a reason other than a collision, or
            every attempt up to max_attempts collided
        """
        try:
            self.ensure_directory()
        except (OSError, ValueError) as e:
            logger.warning("Cannot create scratch directory %s: %s", self._directory, e)
            return None

        for _ in range(self._max_attempts):
            attempt = self.try_create(self.next_candidate())
            if isinstance(attempt, ScratchCreated):
                logger.debug("Acquired scratch file %s", attempt.scratch.path)
                return attempt.scratch
            if isinstance(attempt, ScratchFailure):
                logger.warning("Cannot create scratch file %s: %s", attempt.path, attempt.error)
                return None
            logger.debug("Scratch file %s already exists, retrying", attempt.path)

        logger.warning(
            "Gave up creating a scratch file in %s after %d collisions",
            self._directory,
            self._max_attempts,
        )
        return None

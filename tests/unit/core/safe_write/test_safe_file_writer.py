"""Tests for SafeFileWriter and write_file_safe()."""

import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from pmrun.core.safe_write import (
    PROCESS_COUNTER,
    SafeFileWriter,
    ScratchArea,
    ScratchFile,
    ScratchNameCounter,
    encode_content,
    get_default_writer,
    write_file_safe,
)
from pmrun.core.safe_write import writer as writer_module


def _make_writer(
    scratch_dir: Path, *, pid: int = 4242
) -> tuple[SafeFileWriter, ScratchNameCounter]:
    counter = ScratchNameCounter()
    return SafeFileWriter(ScratchArea(scratch_dir, counter=counter, pid=pid)), counter


def _leftovers(scratch_dir: Path) -> list[Path]:
    if not scratch_dir.exists():
        return []
    return sorted(scratch_dir.iterdir())


class TestWrite:
    """Tests for the happy path."""

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ("v1", b"v1"),
            ("ünïcödé\n", "ünïcödé\n".encode()),
            (b"\x00\xffbinary", b"\x00\xffbinary"),
            (bytearray(b"mutable"), b"mutable"),
            ("", b""),
        ],
    )
    def test_round_trip(self, tmp_path: Path, content: str | bytes, expected: bytes) -> None:
        writer, _ = _make_writer(tmp_path / "scratch")
        destination = tmp_path / "out.bin"

        assert writer.write(destination, content) is True
        assert destination.read_bytes() == expected

    def test_default_content_is_empty(self, tmp_path: Path) -> None:
        writer, _ = _make_writer(tmp_path / "scratch")
        destination = tmp_path / "empty.txt"

        assert writer.write(destination) is True
        assert destination.exists()
        assert destination.read_bytes() == b""

    def test_creates_missing_parent_directories(self, tmp_path: Path) -> None:
        writer, _ = _make_writer(tmp_path / "scratch")
        project = tmp_path / "proj"
        destination = project / "pkg-lock.meta"

        assert writer.write(destination, "v1") is True
        assert project.is_dir()
        assert destination.read_text(encoding="utf-8") == "v1"

    def test_replaces_existing_content(self, tmp_path: Path) -> None:
        writer, _ = _make_writer(tmp_path / "scratch")
        destination = tmp_path / "config.json"
        destination.write_text('{"agent": "npm", "padding": "xxxxxxxxxxxx"}', encoding="utf-8")

        assert writer.write(destination, '{"agent": "pnpm"}') is True
        assert destination.read_text(encoding="utf-8") == '{"agent": "pnpm"}'

    def test_accepts_string_paths(self, tmp_path: Path) -> None:
        writer, _ = _make_writer(tmp_path / "scratch")
        destination = tmp_path / "as-string.txt"

        assert writer.write(str(destination), "ok") is True
        assert destination.read_text(encoding="utf-8") == "ok"

    def test_leaves_no_scratch_files(self, tmp_path: Path) -> None:
        scratch_dir = tmp_path / "scratch"
        writer, _ = _make_writer(scratch_dir)

        writer.write(tmp_path / "a.txt", "a")
        writer.write(tmp_path / "b.txt", "b")

        assert _leftovers(scratch_dir) == []

    def test_sequential_writes_use_fresh_names(self, tmp_path: Path) -> None:
        writer, counter = _make_writer(tmp_path / "scratch")
        used: list[Path] = []
        original_write = ScratchFile.write

        def record_write(self: ScratchFile, payload: bytes) -> None:
            used.append(self.path)
            original_write(self, payload)

        with patch.object(ScratchFile, "write", record_write):
            writer.write(tmp_path / "a.txt", "a")
            writer.write(tmp_path / "a.txt", "b")

        assert used == [tmp_path / "scratch" / ".4242.0", tmp_path / "scratch" / ".4242.1"]
        assert counter.peek == 2

    def test_retries_transparently_on_collision(self, tmp_path: Path) -> None:
        scratch_dir = tmp_path / "scratch"
        scratch_dir.mkdir()
        stale = scratch_dir / ".4242.0"
        stale.write_bytes(b"left behind by a crashed process")
        writer, counter = _make_writer(scratch_dir)
        destination = tmp_path / "out.txt"

        assert writer.write(destination, "fresh") is True
        assert destination.read_text(encoding="utf-8") == "fresh"
        assert counter.peek == 2
        # The colliding file belongs to someone else and is left alone
        assert _leftovers(scratch_dir) == [stale]

    def test_concurrent_writers_in_threads(self, tmp_path: Path) -> None:
        scratch_dir = tmp_path / "scratch"
        writer, counter = _make_writer(scratch_dir)
        results: list[bool] = []
        lock = threading.Lock()

        def write_one(index: int) -> None:
            ok = writer.write(tmp_path / "out" / f"{index}.txt", f"content-{index}")
            with lock:
                results.append(ok)

        threads = [threading.Thread(target=write_one, args=(i,)) for i in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [True] * 16
        for index in range(16):
            assert (tmp_path / "out" / f"{index}.txt").read_text(encoding="utf-8") == (
                f"content-{index}"
            )
        assert counter.peek == 16
        assert _leftovers(scratch_dir) == []


class TestFailures:
    """Every failure returns False, keeps the destination intact and cleans up."""

    def test_scratch_acquisition_failure(self, tmp_path: Path) -> None:
        blocker = tmp_path / "scratch"
        blocker.write_text("not a directory", encoding="utf-8")
        writer, _ = _make_writer(blocker)
        destination = tmp_path / "out.txt"

        with patch.object(ScratchFile, "write") as mock_write:
            assert writer.write(destination, "data") is False
            mock_write.assert_not_called()
        assert not destination.exists()

    def test_payload_write_failure(self, tmp_path: Path) -> None:
        scratch_dir = tmp_path / "scratch"
        writer, _ = _make_writer(scratch_dir)
        destination = tmp_path / "out.txt"
        destination.write_text("old", encoding="utf-8")

        with patch.object(ScratchFile, "write", side_effect=OSError(28, "No space left on device")):
            assert writer.write(destination, "new") is False

        assert destination.read_text(encoding="utf-8") == "old"
        assert _leftovers(scratch_dir) == []

    def test_rename_failure(self, tmp_path: Path) -> None:
        scratch_dir = tmp_path / "scratch"
        writer, _ = _make_writer(scratch_dir)
        destination = tmp_path / "out.txt"
        destination.write_text("old", encoding="utf-8")

        denied = PermissionError(13, "denied")
        with patch("pmrun.core.safe_write.writer.os.replace", side_effect=denied):
            assert writer.write(destination, "new") is False

        assert destination.read_text(encoding="utf-8") == "old"
        assert _leftovers(scratch_dir) == []

    def test_destination_is_directory(self, tmp_path: Path) -> None:
        scratch_dir = tmp_path / "scratch"
        writer, _ = _make_writer(scratch_dir)
        destination = tmp_path / "occupied"
        destination.mkdir()
        (destination / "keep.txt").write_text("keep", encoding="utf-8")

        assert writer.write(destination, "new") is False

        assert (destination / "keep.txt").read_text(encoding="utf-8") == "keep"
        assert _leftovers(scratch_dir) == []

    def test_parent_directory_cannot_be_created(self, tmp_path: Path) -> None:
        scratch_dir = tmp_path / "scratch"
        writer, _ = _make_writer(scratch_dir)
        blocker = tmp_path / "file-not-dir"
        blocker.write_text("x", encoding="utf-8")

        assert writer.write(blocker / "child" / "out.txt", "new") is False
        assert _leftovers(scratch_dir) == []

    def test_cleanup_failure_is_swallowed(self, tmp_path: Path) -> None:
        scratch_dir = tmp_path / "scratch"
        writer, _ = _make_writer(scratch_dir)
        destination = tmp_path / "out.txt"

        with patch.object(Path, "unlink", side_effect=PermissionError(13, "denied")):
            assert writer.write(destination, "data") is True

        assert destination.read_text(encoding="utf-8") == "data"

    def test_unencodable_text(self, tmp_path: Path) -> None:
        scratch_dir = tmp_path / "scratch"
        writer, counter = _make_writer(scratch_dir)
        destination = tmp_path / "out.txt"

        assert writer.write(destination, "bad\ud800") is False

        assert not destination.exists()
        assert counter.peek == 0
        assert _leftovers(scratch_dir) == []

    def test_destination_parent_with_nul_byte(self, tmp_path: Path) -> None:
        scratch_dir = tmp_path / "scratch"
        writer, _ = _make_writer(scratch_dir)

        assert writer.write(tmp_path / "a\0b" / "out.txt", "x") is False
        assert _leftovers(scratch_dir) == []

    def test_rejects_unsupported_content(self, tmp_path: Path) -> None:
        writer, counter = _make_writer(tmp_path / "scratch")

        with pytest.raises(TypeError, match="str or bytes-like"):
            writer.write(tmp_path / "out.txt", 42)  # type: ignore[arg-type]
        assert counter.peek == 0


def test_encode_content() -> None:
    assert encode_content("é") == b"\xc3\xa9"
    assert encode_content(memoryview(b"view")) == b"view"


class TestDefaultWriter:
    """Tests for the process-wide writer behind write_file_safe()."""

    def test_built_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(writer_module, "_default_writer", None)
        monkeypatch.setenv("PMRUN_SCRATCH_DIR", str(tmp_path / "scratch"))
        monkeypatch.setenv("PMRUN_MAX_SCRATCH_ATTEMPTS", "3")

        writer = get_default_writer()

        assert writer.scratch_area.directory == (tmp_path / "scratch").resolve()
        assert writer.scratch_area.max_attempts == 3
        assert get_default_writer() is writer

    def test_write_file_safe(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(writer_module, "_default_writer", None)
        monkeypatch.setenv("PMRUN_SCRATCH_DIR", str(tmp_path / "scratch"))
        destination = tmp_path / "proj" / "pkg-lock.meta"

        assert write_file_safe(destination, "v1") is True
        assert destination.read_text(encoding="utf-8") == "v1"
        assert _leftovers(tmp_path / "scratch") == []

    def test_malformed_environment_returns_false(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(writer_module, "_default_writer", None)
        monkeypatch.setenv("PMRUN_SCRATCH_DIR", str(tmp_path / "scratch"))
        monkeypatch.setenv("PMRUN_MAX_SCRATCH_ATTEMPTS", "abc")
        destination = tmp_path / "out.txt"

        assert write_file_safe(destination, "v1") is False
        assert write_file_safe(destination, "v1") is False
        assert not destination.exists()


def test_areas_share_process_counter_by_default(tmp_path: Path) -> None:
    first = ScratchArea(tmp_path / "one", pid=4242)
    second = ScratchArea(tmp_path / "two", pid=4242)

    assert first.counter is PROCESS_COUNTER
    assert second.counter is PROCESS_COUNTER

    names = [first.next_candidate().name, second.next_candidate().name]
    names += [second.next_candidate().name, first.next_candidate().name]

    assert len(set(names)) == 4

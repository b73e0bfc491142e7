"""Log sources: the systemd journal and plain log files."""

from __future__ import annotations

import io
import os
import subprocess
import sys
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator

_CHUNK_SIZE = 1024


def _is_linux() -> bool:
    return sys.platform.startswith("linux")


def _unit_names(network: str) -> list[str]:
    return [f"monod-{network}", f"monod@{network}", "monod"]


class LogSource(ABC):
    """A source of log lines."""

    @abstractmethod
    def lines(self) -> Iterator[str]:
        """Start reading and return an iterator over log lines."""

    @abstractmethod
    def close(self) -> None:
        """Stop reading and release resources."""

    def __enter__(self) -> "LogSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class JournalctlSource(LogSource):
    """Reads a systemd unit's log through journalctl."""

    unit_name: str
    follow: bool = False
    line_count: int = 0
    _process: subprocess.Popen | None = field(default=None, init=False, repr=False)

    def lines(self) -> Iterator[str]:
        if not _is_linux():
            raise OSError(f"journalctl not available on {sys.platform}")
        args = ["journalctl", "-u", self.unit_name, "--no-pager"]
        if self.line_count > 0:
            args += ["-n", str(self.line_count)]
        if self.follow:
            args.append("-f")
        try:
            process = subprocess.Popen(
                args, stdout=subprocess.PIPE, text=True, errors="replace"
            )
        except OSError as exc:
            raise OSError(f"failed to start journalctl: {exc}") from exc
        self._process = process
        return self._read(process)

    @staticmethod
    def _read(process: subprocess.Popen) -> Iterator[str]:
        stream = process.stdout
        if stream is None:
            return
        with stream:
            for line in stream:
                yield line.rstrip("\n")

    def close(self) -> None:
        process = self._process
        if process is not None and process.poll() is None:
            process.kill()
            process.wait()


@dataclass
class FileSource(LogSource):
    """Reads, and optionally follows, a log file."""

    file_path: str | os.PathLike
    follow: bool = False
    line_count: int = 0
    poll_interval: float = 0.1
    _file: BinaryIO | None = field(default=None, init=False, repr=False)

    def lines(self) -> Iterator[str]:
        handle = open(self.file_path, "rb")
        self._file = handle
        return self._read(handle)

    def _read(self, handle: BinaryIO) -> Iterator[str]:
        try:
            if self.line_count > 0:
                last = read_last_n_lines(handle, self.line_count)
                handle.seek(0, io.SEEK_END)
                yield from last
            if not self.follow:
                return
            pending = b""
            while not handle.closed:
                try:
                    chunk = handle.readline()
                except ValueError:
                    return
                if not chunk:
                    time.sleep(self.poll_interval)
                    continue
                pending += chunk
                if pending.endswith(b"\n"):
                    yield pending[:-1].decode("utf-8", "replace")
                    pending = b""
        finally:
            handle.close()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()


def read_last_n_lines(file: BinaryIO, n: int) -> list[str]:
    """Return the last *n* non-empty lines of a binary file.

    The file position is reset to the start afterwards.
    """
    if n <= 0:
        file.seek(0)
        return []
    file.seek(0, io.SEEK_END)
    pos = file.tell()
    found: list[bytes] = []
    leftover = b""
    while pos > 0 and len(found) < n:
        start = max(0, pos - _CHUNK_SIZE)
        file.seek(start)
        chunk = file.read(pos - start) + leftover
        pos = start
        parts = chunk.split(b"\n")
        leftover = parts.pop(0) if pos > 0 else b""
        found[:0] = [part for part in parts if part]
    file.seek(0)
    return [line.decode("utf-8", "replace") for line in found[-n:]]


def _unit_is_active(unit: str) -> bool:
    try:
        completed = subprocess.run(
            ["systemctl", "is-active", unit],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError:
        return False
    return completed.returncode == 0


def get_log_source(
    network: str, home: str | os.PathLike, follow: bool = False, lines: int = 0
) -> LogSource:
    """Pick the journal on Linux if a monod unit is active, else a log file."""
    if _is_linux():
        for unit in _unit_names(str(network)):
            if _unit_is_active(unit):
                return JournalctlSource(unit, follow, lines)

    home_path = Path(home)
    for candidate in (home_path / "logs" / "monod.log", home_path / "monod.log"):
        if candidate.exists():
            return FileSource(candidate, follow, lines)

    raise FileNotFoundError("no log source available (tried journalctl and file)")


def get_systemd_service_status(network: str) -> str:
    """The ``systemctl is-active`` state of the network's monod unit."""
    if not _is_linux():
        return "N/A (not Linux)"
    for unit in _unit_names(str(network)):
        try:
            completed = subprocess.run(
                ["systemctl", "is-active", unit],
                capture_output=True,
                text=True,
            )
        except OSError:
            continue
        if completed.returncode == 0:
            return completed.stdout.strip()
    return "not found"
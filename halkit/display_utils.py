"""Integer files, stored display mode ids and the display post-processing socket."""

from __future__ import annotations

import logging
import os
import re
import select
import socket
from pathlib import Path

log = logging.getLogger("LiveDisplay-Utils")

LOCAL_STORAGE_PATH = "/data/vendor/display"
SYSTEM_STORAGE_PATH = "/data/display"
LOCAL_MODE_ID = "livedisplay_mode"
LOCAL_INITIAL_MODE_ID = "livedisplay_initial_mode"

DPPS_SOCKET_PATH = "/dev/socket/pps"
DPPS_BUFFER_SIZE = 64
_POLL_SECONDS = 0.02

_INT_RE = re.compile(rb"\s*([+-]?\d+)")
_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1


def read_int(node: str | os.PathLike[str]) -> int:
    """Read the leading 32-bit integer of a file."""
    with open(node, "rb") as handle:
        content = handle.read()
    match = _INT_RE.match(content)
    if match is None:
        raise ValueError(f"no integer in {os.fspath(node)}")
    value = int(match.group(1))
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"integer out of range in {os.fspath(node)}: {value}")
    return value


def write_int(node: str | os.PathLike[str], value: int) -> None:
    """Write an integer followed by a newline to a file."""
    with open(node, "w", encoding="ascii") as handle:
        handle.write(f"{int(value)}\n")


def send_dpps_command(
    command: str | bytes,
    length: int = DPPS_BUFFER_SIZE,
    socket_path: str | os.PathLike[str] = DPPS_SOCKET_PATH,
) -> bytes:
    """Send a NUL-terminated command to the post-processing daemon.

    Returns at most ``length`` bytes of its reply, up to the first NUL.
    """
    if length <= 0:
        raise ValueError("length must be positive")
    raw = command.encode("utf-8") if isinstance(command, str) else bytes(command)
    raw = raw.partition(b"\0")[0] + b"\0"

    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
        sock.connect(os.fspath(socket_path))
        sock.sendall(raw)
        reply = bytearray()
        remaining = length
        while remaining > 0:
            chunk = sock.recv(remaining)
            if not chunk:
                break
            reply += chunk
            remaining -= len(chunk)
            if remaining == 0:
                break
            ready, _, _ = select.select([sock], [], [], _POLL_SECONDS)
            if not ready:
                break
    return bytes(reply).partition(b"\0")[0]


class ModeStorage:
    """Persistent storage of the user-chosen and initial display mode ids."""

    def __init__(
        self,
        directory: str | os.PathLike[str] | None = None,
        *,
        lives_in_system: bool = False,
    ) -> None:
        if directory is None:
            directory = SYSTEM_STORAGE_PATH if lives_in_system else LOCAL_STORAGE_PATH
        self.directory = Path(directory)

    @property
    def local_mode_path(self) -> Path:
        return self.directory / LOCAL_MODE_ID

    @property
    def initial_mode_path(self) -> Path:
        return self.directory / LOCAL_INITIAL_MODE_ID

    def read_local_mode_id(self) -> int:
        return read_int(self.local_mode_path)

    def write_local_mode_id(self, mode_id: int) -> None:
        write_int(self.local_mode_path, mode_id)

    def read_initial_mode_id(self) -> int:
        return read_int(self.initial_mode_path)

    def write_initial_mode_id(self, mode_id: int) -> None:
        write_int(self.initial_mode_path, mode_id)
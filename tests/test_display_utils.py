import socket
import threading

import pytest

from halkit.display_utils import (
    LOCAL_INITIAL_MODE_ID,
    LOCAL_MODE_ID,
    ModeStorage,
    read_int,
    send_dpps_command,
    write_int,
)


@pytest.mark.parametrize("value", [0, 7, -3, 2147483647, -2147483648])
def test_write_read_round_trip(tmp_path, value):
    node = tmp_path / "node"
    write_int(node, value)
    assert read_int(node) == value


def test_write_int_appends_newline(tmp_path):
    node = tmp_path / "node"
    write_int(node, 7)
    assert node.read_text() == "7\n"


def test_read_int_takes_leading_number(tmp_path):
    node = tmp_path / "node"
    node.write_text("  42abc\n")
    assert read_int(node) == 42


def test_read_int_rejects_text(tmp_path):
    node = tmp_path / "node"
    node.write_text("abc")
    with pytest.raises(ValueError):
        read_int(node)


def test_read_int_rejects_overflow(tmp_path):
    node = tmp_path / "node"
    node.write_text("2147483648")
    with pytest.raises(ValueError):
        read_int(node)


def test_read_int_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_int(tmp_path / "absent")


def test_mode_storage_round_trip(tmp_path):
    storage = ModeStorage(tmp_path)
    storage.write_local_mode_id(3)
    storage.write_initial_mode_id(5)
    assert storage.read_local_mode_id() == 3
    assert storage.read_initial_mode_id() == 5


def test_mode_storage_file_names(tmp_path):
    storage = ModeStorage(tmp_path)
    storage.write_local_mode_id(1)
    storage.write_initial_mode_id(2)
    assert read_int(tmp_path / LOCAL_MODE_ID) == 1
    assert read_int(tmp_path / LOCAL_INITIAL_MODE_ID) == 2


def test_mode_storage_missing(tmp_path):
    with pytest.raises(OSError):
        ModeStorage(tmp_path).read_local_mode_id()


def _serve(path, reply):
    received = []
    server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    server.bind(str(path))
    server.listen(1)

    def run():
        conn, _ = server.accept()
        with conn:
            data = b""
            while not data.endswith(b"\0"):
                chunk = conn.recv(64)
                if not chunk:
                    break
                data += chunk
            received.append(data)
            conn.sendall(reply)
        server.close()

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread, received


def test_send_dpps_command(tmp_path):
    path = tmp_path / "s"
    thread, received = _serve(path, b"Success\0")
    reply = send_dpps_command("foss:on", 64, path)
    thread.join(timeout=5)
    assert reply == b"Success"
    assert received == [b"foss:on\0"]


def test_send_dpps_command_limits_reply(tmp_path):
    path = tmp_path / "s"
    thread, _ = _serve(path, b"Successful")
    reply = send_dpps_command(b"foss:off", 7, path)
    thread.join(timeout=5)
    assert reply == b"Success"


def test_send_dpps_command_without_daemon(tmp_path):
    with pytest.raises(OSError):
        send_dpps_command("foss:on", 64, tmp_path / "absent")


def test_send_dpps_command_rejects_bad_length(tmp_path):
    with pytest.raises(ValueError):
        send_dpps_command("foss:on", 0, tmp_path / "absent")
import base64
import socket
import threading
import time

import pytest

from ubxgnss.ntrip import (
    DESIRED_COUNT,
    NtripClient,
    NtripConfig,
    NtripError,
    RtcmMessage,
    main,
)

password = "password"


def _serve(parts):
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(1)
    port = srv.getsockname()[1]
    received = {}

    def handler():
        try:
            conn, _ = srv.accept()
            with conn:
                data = b""
                while b"\r\n\r\n" not in data:
                    piece = conn.recv(4096)
                    if not piece:
                        break
                    data += piece
                received["request"] = data
                for part in parts:
                    try:
                        conn.sendall(part)
                    except OSError:
                        break
        finally:
            srv.close()

    thread = threading.Thread(target=handler, daemon=True)
    thread.start()
    return port, received, thread


def _config(port):
    return NtripConfig(use_https=False, host="127.0.0.1", port=port, mountpoint="MOUNT",
                       username="user", password=password)


def _chunk(data):
    return f"{len(data):x}\r\n".encode() + data + b"\r\n"


def test_connection_url_https_and_http():
    cfg = NtripConfig(host="caster.example.com", port=2101, mountpoint="MP")
    assert cfg.connection_url() == "https://caster.example.com:2101/MP"
    cfg.use_https = False
    assert cfg.connection_url() == "http://caster.example.com:2101/MP"


def test_default_url():
    assert NtripConfig().connection_url() == "https://ntrip.data.gnss.ga.gov.au:443/MBCH00AUS0"


def test_handle_chunk_publishes_and_counts():
    published = []
    client = NtripClient(NtripConfig(mountpoint="MP"), published.append)
    results = [client.handle_chunk(bytes([i])) for i in range(DESIRED_COUNT)]
    assert results == [True] * (DESIRED_COUNT - 1) + [False]
    assert client.desired_count_reached is True
    assert [m.message for m in published] == [bytes([i]) for i in range(DESIRED_COUNT)]
    assert all(isinstance(m, RtcmMessage) and m.frame_id == "MP" for m in published)
    # the counter starts again after the desired count
    assert client.handle_chunk(b"x") is True


def test_stream_once_icy_response():
    port, received, thread = _serve([b"ICY 200 OK\r\n\r\n", b"\xd3\x00\x13rtcm"])
    published = []
    client = NtripClient(_config(port), published.append)
    assert client.stream_once() is False
    thread.join(5)
    assert b"".join(m.message for m in published) == b"\xd3\x00\x13rtcm"
    assert client.response_code == 200
    request = received["request"]
    assert request.startswith(b"GET /MOUNT HTTP/1.1\r\n")
    expected_auth = base64.b64encode(b"user:" + password.encode())
    assert b"Authorization: Basic " + expected_auth + b"\r\n" in request
    assert b"User-Agent: NTRIP ros2/ublox_dgnss\r\n" in request


def test_stream_once_stops_at_desired_count():
    body = b"".join(_chunk(bytes([i]) * 3) for i in range(DESIRED_COUNT + 2)) + b"0\r\n\r\n"
    head = b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n"
    port, _, thread = _serve([head, body])
    published = []
    client = NtripClient(_config(port), published.append)
    assert client.stream_once() is True
    thread.join(5)
    assert client.desired_count_reached is True
    assert [m.message for m in published] == [bytes([i]) * 3 for i in range(DESIRED_COUNT)]


def test_stream_once_without_status_line():
    port, _, thread = _serve([b"\xd3\x00\x05abcde"])
    published = []
    client = NtripClient(_config(port), published.append)
    assert client.stream_once() is False
    thread.join(5)
    assert b"".join(m.message for m in published) == b"\xd3\x00\x05abcde"


def test_stream_once_http_error_raises():
    port, _, thread = _serve([b"HTTP/1.1 401 Unauthorized\r\nContent-Length: 0\r\n\r\n"])
    client = NtripClient(_config(port), lambda message: None)
    with pytest.raises(NtripError) as exc:
        client.stream_once()
    thread.join(5)
    assert exc.value.response_code == 401
    assert client.response_code == 401


def test_run_retries_on_error_and_stops():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    client = NtripClient(_config(port), lambda message: None)
    runner = threading.Thread(target=client.run, daemon=True)
    runner.start()
    deadline = time.monotonic() + 5
    while client.error_count == 0 and time.monotonic() < deadline:
        time.sleep(0.01)
    client.stop()
    runner.join(5)
    assert not runner.is_alive()
    assert client.error_count >= 1
    assert isinstance(client.last_error, OSError)


def test_main_help_exits_cleanly():
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0


def test_main_rejects_bad_port():
    with pytest.raises(SystemExit) as exc:
        main(["--port", "notanumber"])
    assert exc.value.code == 2
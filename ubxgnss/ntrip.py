"""NTRIP client that streams RTCM corrections from a caster."""

import argparse
import base64
import logging
import socket
import ssl
import sys
import threading
import time
from dataclasses import dataclass

logger = logging.getLogger(__name__)

PASSWORD = "password"
USER_AGENT = "NTRIP ros2/ublox_dgnss"
DESIRED_COUNT = 10

_READ_SIZE = 16384
_SOCKET_TIMEOUT = 10.0
_COUNT_PAUSE = 0.1
_ERROR_PAUSE = 1.0


class NtripError(Exception):
    """A streaming request to the caster failed."""

    def __init__(self, message, response_code=0):
        super().__init__(message)
        self.response_code = response_code


@dataclass
class NtripConfig:
    """Caster connection settings."""

    use_https: bool = True
    host: str = "ntrip.data.gnss.ga.gov.au"
    port: int = 443
    mountpoint: str = "MBCH00AUS0"
    username: str = "noname"
    password: str = PASSWORD
    log_level: str = "INFO"
    maxage_conn: int = 30

    def connection_url(self):
        scheme = "https" if self.use_https else "http"
        return f"{scheme}://{self.host}:{self.port}/{self.mountpoint}"


@dataclass(frozen=True)
class RtcmMessage:
    """A block of RTCM data received from the caster."""

    stamp: float
    frame_id: str
    message: bytes


class NtripClient:
    """Reads a caster stream and publishes each received block as an RtcmMessage."""

    desired_count = DESIRED_COUNT

    def __init__(self, config, publish):
        self.config = config
        self.publish = publish
        self.desired_count_reached = False
        self.response_code = 0
        self.error_count = 0
        self.last_error = None
        self._record_count = 0
        self._stop = threading.Event()
        self._sock = None
        self._lock = threading.Lock()

    def handle_chunk(self, data):
        """Publish one block; return False once the desired record count is reached."""
        data = bytes(data)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Received size: %d data: %s", len(data), data.hex())
        self.publish(RtcmMessage(time.time(), self.config.mountpoint, data))
        self._record_count += 1
        if self._record_count >= self.desired_count:
            self._record_count = 0
            self.desired_count_reached = True
            return False
        return True

    def _request(self):
        cfg = self.config
        credentials = f"{cfg.username}:{cfg.password}".encode()
        auth = base64.b64encode(credentials).decode("ascii")
        lines = [
            f"GET /{cfg.mountpoint} HTTP/1.1",
            f"Host: {cfg.host}:{cfg.port}",
            f"Authorization: Basic {auth}",
            f"User-Agent: {USER_AGENT}",
            "Accept: */*",
            "",
            "",
        ]
        return "\r\n".join(lines).encode("latin-1")

    def _connect(self):
        cfg = self.config
        sock = socket.create_connection((cfg.host, cfg.port), timeout=_SOCKET_TIMEOUT)
        if cfg.use_https:
            try:
                sock = ssl.create_default_context().wrap_socket(
                    sock, server_hostname=cfg.host)
            except BaseException:
                sock.close()
                raise
        return sock

    def _read_response(self, reader):
        """Consume the status line and headers; return the body as a generator."""
        first = reader.readline()
        if not (first.startswith(b"ICY ") or first.startswith(b"HTTP/")):
            # No status line: the whole response is body.
            return self._plain_body(reader, first, None)
        parts = first.split()
        try:
            self.response_code = int(parts[1])
        except (IndexError, ValueError):
            raise NtripError(f"malformed status line: {first!r}") from None
        headers = {}
        while True:
            line = reader.readline()
            if line in (b"\r\n", b"\n", b""):
                break
            name, _, value = line.decode("latin-1").partition(":")
            headers[name.strip().lower()] = value.strip()
        if self.response_code >= 400:
            raise NtripError(
                f"The requested URL returned error: {self.response_code}",
                self.response_code,
            )
        if headers.get("transfer-encoding", "").lower() == "chunked":
            return self._chunked_body(reader)
        length = headers.get("content-length")
        return self._plain_body(reader, b"", int(length) if length else None)

    @staticmethod
    def _plain_body(reader, first, remaining):
        if first:
            yield first
        while remaining is None or remaining > 0:
            size = _READ_SIZE if remaining is None else min(_READ_SIZE, remaining)
            data = reader.read1(size)
            if not data:
                return
            if remaining is not None:
                remaining -= len(data)
            yield data

    @staticmethod
    def _chunked_body(reader):
        while True:
            line = reader.readline()
            if not line:
                return
            try:
                size = int(line.split(b";", 1)[0].strip(), 16)
            except ValueError:
                raise NtripError(f"malformed chunk size: {line!r}") from None
            if size == 0:
                while reader.readline() not in (b"\r\n", b"\n", b""):
                    pass
                return
            data = reader.read(size)
            reader.readline()
            if data:
                yield data
            if len(data) < size:
                return

    def stream_once(self):
        """Run one request; True if it stopped at the desired count, False if it ended."""
        self.desired_count_reached = False
        self.response_code = 0
        sock = self._connect()
        with self._lock:
            self._sock = sock
        try:
            sock.sendall(self._request())
            with sock.makefile("rb") as reader:
                for chunk in self._read_response(reader):
                    if self._stop.is_set():
                        return False
                    if not self.handle_chunk(chunk):
                        return True
        finally:
            with self._lock:
                self._sock = None
            sock.close()
        return False

    def run(self):
        """Stream repeatedly until stop() is called."""
        self._stop.clear()
        while not self._stop.is_set():
            try:
                reached = self.stream_once()
            except (NtripError, OSError) as exc:
                if self._stop.is_set():
                    break
                self.error_count += 1
                self.last_error = exc
                logger.error("Failed to perform streaming request for URL: %s",
                             self.config.connection_url())
                logger.error("Response code: %d", self.response_code)
                logger.error("Failed to perform streaming request: %s", exc)
                self._stop.wait(_ERROR_PAUSE)
                continue
            if reached:
                logger.debug("Processed desired count... ")
                self._stop.wait(_COUNT_PAUSE)

    def stop(self):
        """Ask run() to finish and interrupt any blocked read."""
        self._stop.set()
        with self._lock:
            sock = self._sock
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass


def _write_message(message):
    sys.stdout.buffer.write(message.message)
    sys.stdout.buffer.flush()


def main(argv=None):
    """Stream RTCM from a caster to standard output."""
    defaults = NtripConfig()
    parser = argparse.ArgumentParser(description="Stream RTCM corrections from an NTRIP caster.")
    parser.add_argument("--use-https", action=argparse.BooleanOptionalAction,
                        default=defaults.use_https)
    parser.add_argument("--host", default=defaults.host)
    parser.add_argument("--port", type=int, default=defaults.port)
    parser.add_argument("--mountpoint", default=defaults.mountpoint)
    parser.add_argument("--username", default=defaults.username)
    parser.add_argument("--password", default=defaults.password)
    parser.add_argument("--log-level", default=defaults.log_level)
    parser.add_argument("--maxage-conn", type=int, default=defaults.maxage_conn)
    args = parser.parse_args(argv)

    config = NtripConfig(
        use_https=args.use_https,
        host=args.host,
        port=args.port,
        mountpoint=args.mountpoint,
        username=args.username,
        password=args.password,
        log_level=args.log_level,
        maxage_conn=args.maxage_conn,
    )
    level = logging.INFO if config.log_level.upper() == "INFO" else logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr)
    logger.info("ntrip connection url: '%s'", config.connection_url())

    client = NtripClient(config, _write_message)
    try:
        client.run()
    except KeyboardInterrupt:
        client.stop()
    logger.info("finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())
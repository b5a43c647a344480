import logging
import socket
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Tuple

from .exceptions import *
from .models import *

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024

Connector = Callable[..., socket.socket]


class Connection:
    """One TCP connection to one host, used for exactly one request."""

    def __init__(self, sock: socket.socket, host: str, port: int):
        self.sock = sock
        self.host = host
        self.port = port
        self.closed = False

    @property
    def address(self) -> Tuple[str, int]:
        return self.host, self.port

    def close(self):
        if self.closed:
            return
        self.closed = True
        self.sock.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


# Transport
class Transport:
    """Blocking connect / send / drain-to-close over plain TCP."""

    def __init__(self, chunk_size: int = CHUNK_SIZE, timeout: Optional[float] = None,
                 connector: Connector = socket.create_connection):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self.timeout = timeout
        self._connector = connector

    def connect(self, host: str, port: int) -> Connection:
        """Open a TCP connection; any resolution or connect failure is fatal."""
        try:
            sock = self._connector((host, port), timeout=self.timeout)
        except socket.gaierror as e:
            raise ConnectError(f"Could not resolve {host}: {e}") from e
        except socket.timeout as e:
            raise ConnectError(f"Connection to {host}:{port} timed out") from e
        except OSError as e:
            raise ConnectError(f"Connection to {host}:{port} failed: {e}") from e
        return Connection(sock, host, port)

    @contextmanager
    def open(self, host: str, port: int) -> Iterator[Connection]:
        """Connect and guarantee the connection is closed on the way out."""
        connection = self.connect(host, port)
        try:
            yield connection
        finally:
            connection.close()

    def send(self, connection: Connection, request: RequestMessage) -> None:
        try:
            connection.sock.sendall(request.data)
        except socket.timeout as e:
            raise SendError(f"Sending to {connection.host}:{connection.port} timed out") from e
        except OSError as e:
            raise SendError(f"Sending to {connection.host}:{connection.port} failed: {e}") from e

    def receive_all(self, connection: Connection, url: str = "") -> ResponseMessage:
        """Read until the peer closes the connection.

        The response is all or nothing: if a read fails, whatever was
        accumulated so far is dropped and ReceiveError is raised.
        """
        buffer = bytearray()
        while True:
            try:
                chunk = connection.sock.recv(self.chunk_size)
            except socket.timeout as e:
                raise ReceiveError(
                    f"Reading from {connection.host}:{connection.port} timed out "
                    f"after {len(buffer)} bytes", url=url) from e
            except OSError as e:
                raise ReceiveError(
                    f"Reading from {connection.host}:{connection.port} failed "
                    f"after {len(buffer)} bytes: {e}", url=url) from e
            if not chunk:
                break
            buffer += chunk

        logger.debug(f"Received response ({len(buffer)} bytes)")
        return ResponseMessage(raw=bytes(buffer), url=url)

    def exchange(self, parts: UrlParts, request: RequestMessage) -> ResponseMessage:
        """Run one fetch cycle on a fresh connection."""
        url = parts.url
        try:
            with self.open(parts.host, parts.port) as connection:
                self.send(connection, request)
                return self.receive_all(connection, url=url)
        except TransportError as e:
            if e.url is None:
                e.url = url
            raise

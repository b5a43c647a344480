import socket
from typing import Dict, List, Tuple

import pytest


class FakeSocket:
    """Serves a scripted byte stream; exceptions in the script are raised on recv."""

    def __init__(self, script=(), send_error=None):
        self.script = list(script)
        self.send_error = send_error
        self.sent = b""
        self.closed = False
        self.recv_sizes = []

    def sendall(self, data):
        if self.send_error is not None:
            raise self.send_error
        self.sent += data

    def recv(self, size):
        self.recv_sizes.append(size)
        while self.script:
            item = self.script[0]
            if isinstance(item, Exception):
                self.script.pop(0)
                raise item
            if not item:
                self.script.pop(0)
                continue
            chunk, rest = item[:size], item[size:]
            if rest:
                self.script[0] = rest
            else:
                self.script.pop(0)
            return chunk
        return b""

    def close(self):
        self.closed = True


class FakeNetwork:
    """Connector that hands out FakeSockets per (host, port), in order."""

    def __init__(self):
        self.routes: Dict[Tuple[str, int], List] = {}
        self.sockets: List[FakeSocket] = []
        self.connects: List[Tuple[str, int]] = []
        self.timeouts = []

    def add(self, host, port, *items):
        """Queue responses (bytes, FakeSocket or exception) for host:port."""
        self.routes.setdefault((host, port), []).extend(items)
        return self

    def __call__(self, address, timeout=None):
        self.connects.append(address)
        self.timeouts.append(timeout)
        queue = self.routes.get(address)
        if not queue:
            raise ConnectionRefusedError(111, "Connection refused")
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        sock = item if isinstance(item, FakeSocket) else FakeSocket([item])
        self.sockets.append(sock)
        return sock


@pytest.fixture
def network():
    return FakeNetwork()


def response(status="200 OK", headers=(), body=b""):
    head = f"HTTP/1.1 {status}\r\n" + "".join(f"{h}\r\n" for h in headers) + "\r\n"
    return head.encode('ascii') + body


def redirect(location, status="301 Moved Permanently"):
    return response(status, headers=[f"Location: {location}"])


@pytest.fixture
def gaierror():
    return socket.gaierror(-2, "Name or service not known")

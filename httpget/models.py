from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_PORT = 80
REDIRECT_PREFIX = b"HTTP/1.1 3"
HEADER_END = b"\r\n\r\n"
LINE_END = b"\r\n"

# Request/Response Models
@dataclass(frozen=True)
class UrlParts:
    """Host, port and path of an http:// URL."""
    host: str
    port: int = DEFAULT_PORT
    path: str = "/"

    @property
    def netloc(self) -> str:
        if self.port == DEFAULT_PORT:
            return self.host
        return f"{self.host}:{self.port}"

    @property
    def url(self) -> str:
        return f"http://{self.netloc}{self.path}"

@dataclass(frozen=True)
class RequestMessage:
    """Raw bytes of a GET request, ready to be written to a socket."""
    data: bytes

    def __len__(self) -> int:
        return len(self.data)

    def __str__(self) -> str:
        return self.data.decode('utf-8', errors='replace')

@dataclass(frozen=True)
class ResponseMessage:
    """Everything the server sent before closing the connection."""
    raw: bytes
    url: str = ""

    @property
    def length(self) -> int:
        return len(self.raw)

    @property
    def status_line(self) -> str:
        line, _, _ = self.raw.partition(LINE_END)
        return line.decode('iso-8859-1')

    @property
    def is_redirect(self) -> bool:
        return self.raw.startswith(REDIRECT_PREFIX)

    @property
    def head(self) -> bytes:
        head, _, _ = self.raw.partition(HEADER_END)
        return head

    @property
    def body(self) -> bytes:
        _, sep, body = self.raw.partition(HEADER_END)
        return body if sep else b""

    @property
    def location(self) -> Optional[str]:
        """Value of the Location header, or None when absent or empty.

        Only header lines terminated by CRLF are considered; a trailing
        fragment cut off by the end of the stream is ignored.
        """
        head, sep, _ = self.raw.partition(HEADER_END)
        lines = head.split(LINE_END)
        if not sep:
            lines = lines[:-1]
        for line in lines[1:]:
            name, colon, value = line.partition(b":")
            if colon and name.strip().lower() == b"location":
                value = value.strip().decode('iso-8859-1')
                return value or None
        return None

class RedirectKind(Enum):
    """How a Location value relates to the URL that produced it."""
    ABSOLUTE = "absolute"
    ABSOLUTE_PATH = "absolute_path"
    RELATIVE_PATH = "relative_path"

@dataclass(frozen=True)
class RedirectTarget:
    """A classified Location value."""
    kind: RedirectKind
    value: str

    @classmethod
    def classify(cls, value: str) -> "RedirectTarget":
        if value.startswith(("http://", "https://")):
            return cls(RedirectKind.ABSOLUTE, value)
        if value.startswith("/"):
            return cls(RedirectKind.ABSOLUTE_PATH, value)
        return cls(RedirectKind.RELATIVE_PATH, value)

    def resolve(self, current: UrlParts) -> str:
        """Turn the target into an absolute URL using the current host."""
        if self.kind is RedirectKind.ABSOLUTE:
            return self.value
        if self.kind is RedirectKind.ABSOLUTE_PATH:
            return f"http://{current.host}{self.value}"
        return f"http://{current.host}/{self.value}"

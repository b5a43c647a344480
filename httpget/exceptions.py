from typing import Optional

# Exceptions
class FetchError(Exception):
    """Base exception for everything that can fail during a fetch."""
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url

class MalformedUrl(FetchError):
    """Raised when a URL is not a usable http://host[:port][/path] string."""
    pass

class TransportError(FetchError):
    """Base class for I/O failures on the connection."""
    pass

class ConnectError(TransportError):
    """Raised when the host cannot be resolved or the TCP connect fails."""
    pass

class SendError(TransportError):
    """Raised when the request cannot be written in full."""
    pass

class ReceiveError(TransportError):
    """Raised when reading the response fails before the peer closes."""
    pass

class TooManyRedirects(FetchError):
    """Raised when a redirect chain runs past the configured maximum."""
    def __init__(self, message: str, url: Optional[str] = None, max_redirects: int = 0):
        super().__init__(message, url=url)
        self.max_redirects = max_redirects

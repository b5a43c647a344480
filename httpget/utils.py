from typing import Iterable, List, Optional

from .exceptions import MalformedUrl
from .models import DEFAULT_PORT, RequestMessage, UrlParts

SCHEME = "http://"
MAX_PORT = 65535


def parse_url(url: str) -> UrlParts:
    """Split an http://host[:port][/path] URL into its parts."""
    if not url.startswith(SCHEME):
        raise MalformedUrl(f"URL must start with {SCHEME}: {url!r}", url=url)

    start = url[len(SCHEME):]
    colon = start.find(':')
    slash = start.find('/')

    if colon != -1 and (slash == -1 or colon < slash):
        host = start[:colon]
        port_text = start[colon + 1:] if slash == -1 else start[colon + 1:slash]
        port = _parse_port(port_text, url)
    else:
        port = DEFAULT_PORT
        host = start if slash == -1 else start[:slash]

    if not host:
        raise MalformedUrl(f"URL has no host: {url!r}", url=url)

    path = start[slash:] if slash != -1 else "/"
    return UrlParts(host=host, port=port, path=path)


def _parse_port(text: str, url: str) -> int:
    if not (text.isascii() and text.isdigit()):
        raise MalformedUrl(f"Invalid port {text!r} in {url!r}", url=url)
    port = int(text)
    if not 0 < port <= MAX_PORT:
        raise MalformedUrl(f"Port {port} out of range in {url!r}", url=url)
    return port


def build_request(parts: UrlParts, parameters: Optional[str] = None) -> RequestMessage:
    """Build the GET request for `parts`, with `parameters` as the query string."""
    target = parts.path
    if parameters:
        target = f"{target}?{parameters}"
    text = (
        f"GET {target} HTTP/1.1\r\n"
        f"Host: {parts.host}\r\n"
        f"Connection: close\r\n"
        f"\r\n"
    )
    return RequestMessage(text.encode('utf-8'))


def validate_parameter_pairs(pairs: Iterable[str]) -> List[str]:
    # Validate the name=value list handed over by the command line
    pairs = list(pairs)
    for i, pair in enumerate(pairs):
        if not isinstance(pair, str):
            raise ValueError(f"Parameter at index {i} must be a string")
        if '=' not in pair:
            raise ValueError(f"Parameter at index {i} ({pair!r}) must look like name=value")
    return pairs


def join_parameters(pairs: Iterable[str]) -> Optional[str]:
    """Join name=value pairs with '&'; None when there are none."""
    pairs = validate_parameter_pairs(pairs)
    return "&".join(pairs) or None

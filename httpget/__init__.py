"""httpget - A minimal HTTP/1.1 GET client over plain sockets."""

import logging

# Import key classes for easier access
from .top import Fetcher, fetch
from .base import Transport, Connection
from .config import FetchConfig, load_config
from .models import UrlParts, RequestMessage, ResponseMessage, RedirectKind, RedirectTarget
from .utils import parse_url, build_request, join_parameters
from .middlewares import BaseMiddleware, LoggingMiddleware
from .exceptions import (
    FetchError,
    MalformedUrl,
    TransportError,
    ConnectError,
    SendError,
    ReceiveError,
    TooManyRedirects
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

import logging
from typing import Optional

from .models import *

# Middleware System
class BaseMiddleware:
    """Base class for fetch middleware."""

    def process_request(self, parts: UrlParts, request: RequestMessage) -> RequestMessage:
        """Process the request before it's sent."""
        return request

    def process_response(self, response: ResponseMessage) -> ResponseMessage:
        """Process the response after it's fully received."""
        return response

    def process_redirect(self, response: ResponseMessage, target: str) -> None:
        """Called once per redirect that is about to be followed."""

    def process_error(self, error: Exception, url: str) -> Exception:
        """Process an error that ended the fetch."""
        return error

class LoggingMiddleware(BaseMiddleware):
    """Middleware for logging requests, responses and redirects."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def process_request(self, parts: UrlParts, request: RequestMessage) -> RequestMessage:
        self.logger.debug(f"Connecting to {parts.host}:{parts.port}")
        self.logger.debug(f"HTTP request ({len(request)} bytes):\n{request}")
        return request

    def process_response(self, response: ResponseMessage) -> ResponseMessage:
        self.logger.debug(f"Response: {response.status_line!r} ({response.length} bytes) from {response.url}")
        return response

    def process_redirect(self, response: ResponseMessage, target: str) -> None:
        self.logger.debug(f"Redirecting to: {target}")

    def process_error(self, error: Exception, url: str) -> Exception:
        self.logger.error(f"Fetch failed: GET {url} - {error}")
        return error

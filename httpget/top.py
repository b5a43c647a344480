"""
Fetch loop: one GET per cycle, following redirects in-process until a final
response arrives or the redirect bound is hit.
"""

import logging
from typing import List, Optional

from .base import Transport
from .config import FetchConfig
from .exceptions import FetchError, TooManyRedirects
from .middlewares import BaseMiddleware
from .models import RedirectTarget, ResponseMessage, UrlParts
from .utils import build_request, parse_url

logger = logging.getLogger(__name__)


class Fetcher:
    """
    Drives fetch cycles over a Transport.

    Each cycle parses the URL, builds the request, runs one exchange on a
    fresh connection and inspects the status line. A 3xx response with a
    Location header sends the loop round again with the resolved URL and no
    query parameters; anything else is the final response.
    """

    def __init__(self, config: Optional[FetchConfig] = None,
                 transport: Optional[Transport] = None,
                 middleware: Optional[List[BaseMiddleware]] = None):
        self.config = config or FetchConfig()
        self.transport = transport or Transport(
            chunk_size=self.config.chunk_size,
            timeout=self.config.timeout,
        )
        self.middleware = middleware or []

    def fetch(self, url: str, parameters: Optional[str] = None) -> ResponseMessage:
        """Fetch `url`, following redirects, and return the final response."""
        try:
            return self._fetch(url, parameters)
        except FetchError as error:
            for middleware in self.middleware:
                error = middleware.process_error(error, error.url or url)
            raise error

    def _fetch(self, url: str, parameters: Optional[str]) -> ResponseMessage:
        redirects = 0
        while True:
            parts = parse_url(url)
            response = self._cycle(parts, parameters)

            target = self.redirect_target(response, parts)
            if target is None:
                return response

            if redirects >= self.config.max_redirects:
                raise TooManyRedirects(
                    f"Stopped after {redirects} redirects; {url} redirects again to {target}",
                    url=url,
                    max_redirects=self.config.max_redirects,
                )
            redirects += 1

            for middleware in self.middleware:
                middleware.process_redirect(response, target)
            url, parameters = target, None

    def _cycle(self, parts: UrlParts, parameters: Optional[str]) -> ResponseMessage:
        request = build_request(parts, parameters)
        for middleware in self.middleware:
            request = middleware.process_request(parts, request)

        response = self.transport.exchange(parts, request)

        for middleware in reversed(self.middleware):
            response = middleware.process_response(response)
        return response

    @staticmethod
    def redirect_target(response: ResponseMessage, current: UrlParts) -> Optional[str]:
        """Absolute URL to follow next, or None when `response` is final."""
        if not response.is_redirect:
            return None
        location = response.location
        if location is None:
            logger.debug("Redirect status without a Location header, treating as final")
            return None
        return RedirectTarget.classify(location).resolve(current)


def fetch(url: str, parameters: Optional[str] = None,
          config: Optional[FetchConfig] = None,
          middleware: Optional[List[BaseMiddleware]] = None) -> ResponseMessage:
    """Fetch `url` with a one-off Fetcher."""
    return Fetcher(config=config, middleware=middleware).fetch(url, parameters)

import argparse
import logging
import sys
from typing import BinaryIO, List, Optional, Sequence, Tuple

from .config import FetchConfig, load_config
from .exceptions import FetchError
from .middlewares import BaseMiddleware, LoggingMiddleware
from .models import RequestMessage, ResponseMessage, UrlParts
from .top import fetch
from .utils import SCHEME, join_parameters, validate_parameter_pairs

USAGE = "%(prog)s [-r N name=value ...] [options] URL"


class ResponseEchoMiddleware(BaseMiddleware):
    """Writes every request and response of the redirect chain to a binary stream."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def process_request(self, parts: UrlParts, request: RequestMessage) -> RequestMessage:
        self.stream.write(b"HTTP request =\n" + request.data)
        self.stream.write(f"\nLEN = {len(request)}\n".encode('ascii'))
        self.stream.flush()
        return request

    def process_response(self, response: ResponseMessage) -> ResponseMessage:
        self.stream.write(response.raw)
        self.stream.write(f"\n  Total received response bytes: {response.length}\n".encode('ascii'))
        self.stream.flush()
        return response


def split_parameter_args(argv: Sequence[str]) -> Tuple[Optional[List[str]], List[str]]:
    """Pull `-r N name=value ...` out of argv; return (pairs, remaining args).

    Scanning stops at `--`; it and everything after it are left for argparse.
    """
    pairs = None
    rest = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--":
            rest.extend(argv[i:])
            break
        if arg != "-r":
            rest.append(arg)
            i += 1
            continue
        if pairs is not None:
            raise ValueError("-r may only be given once")
        if i + 1 >= len(argv) or not argv[i + 1].isdigit():
            raise ValueError("-r must be followed by the number of parameters")
        count = int(argv[i + 1])
        pairs = list(argv[i + 2:i + 2 + count])
        if len(pairs) < count:
            raise ValueError(f"-r {count} expects {count} name=value parameters, got {len(pairs)}")
        validate_parameter_pairs(pairs)
        i += 2 + count
    return pairs, rest


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httpget",
        usage=USAGE,
        description="Fetch a URL with a single HTTP/1.1 GET, following redirects.",
        epilog="-r N name=value ...  send N query parameters, joined with '&'",
    )
    parser.add_argument("url", metavar="URL", help="http:// URL to fetch")
    parser.add_argument("--max-redirects", type=int, default=None,
                        help="maximum number of redirects to follow (default 10)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="socket timeout in seconds (default: none)")
    parser.add_argument("--config", metavar="FILE", default=None,
                        help="JSON file with max_redirects / chunk_size / timeout")
    parser.add_argument("--debug", action="store_true",
                        help="log each step of the fetch to stderr")
    return parser


def resolve_config(args: argparse.Namespace) -> FetchConfig:
    """Defaults, then config file, then environment, then flags."""
    config = FetchConfig()
    if args.config:
        config = load_config(args.config, base=config)
    config = FetchConfig.from_env(base=config)
    return config.merge(max_redirects=args.max_redirects, timeout=args.timeout)


def main(argv: Optional[Sequence[str]] = None, stdout: Optional[BinaryIO] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()

    try:
        pairs, rest = split_parameter_args(argv)
    except ValueError as e:
        parser.error(str(e))
    args = parser.parse_args(rest)

    if not args.url.startswith(SCHEME):
        parser.error(f"URL must start with {SCHEME}")

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="[%(levelname)s] %(message)s",
        stream=sys.stderr,
    )

    try:
        config = resolve_config(args)
    except (ValueError, FileNotFoundError) as e:
        parser.error(str(e))

    parameters = join_parameters(pairs) if pairs else None

    middleware: List[BaseMiddleware] = []
    if args.debug:
        middleware.append(LoggingMiddleware())
    middleware.append(ResponseEchoMiddleware(sys.stdout.buffer if stdout is None else stdout))

    try:
        fetch(args.url, parameters, config=config, middleware=middleware)
    except FetchError as e:
        sys.stderr.write(f"{parser.prog}: error: {e}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

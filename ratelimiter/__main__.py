"""Command line entry point.

Usage:
    python -m ratelimiter --limiter-algo tokenbucket
    python -m ratelimiter --limiter-algo swcounter --limit 100 --window-seconds 60
"""

from __future__ import annotations

import argparse
from typing import Sequence

import uvicorn

from ratelimiter.adapters.rate_limit.factory import SUPPORTED_STRATEGIES, create_rate_limiter
from ratelimiter.core.app_factory import create_app
from ratelimiter.core.config import settings
from ratelimiter.core.errors import ValidationAppError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ratelimiter",
        description="Serve /limited and /unlimited behind a per-client rate limiter.",
    )
    parser.add_argument(
        "--limiter-algo",
        default=settings.rate_limit.strategy,
        help=f"Rate limiting algorithm ({', '.join(SUPPORTED_STRATEGIES)})",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=settings.rate_limit.limit,
        help="Requests per window, or token bucket capacity",
    )
    parser.add_argument(
        "--window-seconds",
        type=float,
        default=settings.rate_limit.window_seconds,
        help="Window size, or token bucket refill period, in seconds",
    )
    parser.add_argument("--host", default=settings.server.host)
    parser.add_argument("--port", type=int, default=settings.server.port)
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        limiter = create_rate_limiter(
            args.limiter_algo,
            limit=args.limit,
            window_seconds=args.window_seconds,
        )
    except ValidationAppError as exc:
        parser.error(exc.message)

    app = create_app(limiter)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()

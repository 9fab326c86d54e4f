"""HTTP middleware and exception handlers."""

from fastapi import FastAPI

from matcha.config import Settings
from matcha.middleware.cors import setup_cors
from matcha.middleware.error_handler import setup_error_handlers
from matcha.middleware.logging import setup_logging
from matcha.middleware.rate_limit import RateLimitMiddleware
from matcha.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install logging, error handlers and the middleware stack.

    Outermost first, requests pass CORS, then request id, then the rate
    limiter. Starlette wraps in reverse-add order, hence the add order below.
    A ``rate_limit_requests`` of 0 leaves the limiter out.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    if settings.rate_limit_requests > 0:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_window=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)

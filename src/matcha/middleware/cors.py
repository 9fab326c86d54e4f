"""CORS for the Matcha web client."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from matcha.config import Settings

# Verbs used by the admin, announcement, notification and session routers
ALLOWED_METHODS = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Let the web client call the API with its bearer token and read our headers."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=ALLOWED_METHODS,
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit", "Retry-After"],
        max_age=600,
    )

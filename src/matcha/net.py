"""Client address resolution behind the Fly.io edge proxy."""

from starlette.requests import Request


def client_ip(request: Request) -> str | None:
    """Client address, honouring the first X-Forwarded-For hop behind a proxy."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None

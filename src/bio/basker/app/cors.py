from typing import Dict, Iterable, Optional
from urllib.parse import urlparse

from bio.basker.app.config import USER_DID_HEADER

ALLOWED_DEBUG_HOSTS = {
    "localhost",
    "127.0.0.1",
}


def get_cors_headers(
    origin_value: Optional[str],
    path: str,
    allowed_origins: Iterable[str],
    debug: bool,
) -> Dict[str, str]:
    """Return appropriate CORS headers based on origin and path."""
    headers = {
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": (
            "Content-Type, Authorization, X-Requested-With, "
            f"X-Atproto-Proxy, {USER_DID_HEADER}"
        ),
        "Vary": "Origin",
    }

    # Public profile lookups are embedded on third party pages.
    if path.startswith("/api/public-profile/"):
        headers["Access-Control-Allow-Origin"] = "*"
        return headers

    if not origin_value:
        return headers

    parsed = urlparse(origin_value)
    base = (
        f"{parsed.scheme}://{parsed.hostname}"
        if parsed.scheme and parsed.hostname
        else origin_value
    )

    if base in set(allowed_origins):
        headers["Access-Control-Allow-Origin"] = origin_value
        headers["Access-Control-Allow-Credentials"] = "true"
    elif debug and parsed.hostname in ALLOWED_DEBUG_HOSTS:
        headers["Access-Control-Allow-Origin"] = origin_value
        headers["Access-Control-Allow-Credentials"] = "true"

    return headers

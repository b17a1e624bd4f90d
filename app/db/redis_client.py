from urllib.parse import urlparse, urlunparse, parse_qs, urlencode

import redis

from app.core.config import settings

_client: redis.Redis | None = None


def redis_url_with_tls(url: str) -> str:
    """Celery and redis-py require ssl_cert_reqs for rediss:// (e.g. Upstash TLS)."""
    if not url or not url.strip().lower().startswith("rediss://"):
        return url
    parsed = urlparse(url)
    qs = parse_qs(parsed.query)
    if "ssl_cert_reqs" not in qs:
        qs["ssl_cert_reqs"] = ["CERT_NONE"]
        new_query = urlencode(qs, doseq=True)
        return urlunparse(parsed._replace(query=new_query))
    return url


def get_redis() -> redis.Redis | None:
    """Process-wide client, created on first use. None when Redis is switched off."""
    global _client
    if not settings.STORE_USE_REDIS or not settings.REDIS_URL:
        return None
    if _client is None:
        _client = redis.Redis.from_url(
            redis_url_with_tls(settings.REDIS_URL),
            decode_responses=True,
            socket_connect_timeout=3,
            socket_timeout=3,
        )
    return _client


def set_redis(client: redis.Redis | None) -> None:
    """Swap the shared client (used by tests and by the worker after fork)."""
    global _client
    _client = client

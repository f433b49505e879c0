"""Redis connection and RQ queue helpers."""

from redis import Redis
from rq import Queue

from leadintel.config import settings

_redis: Redis | None = None


def get_redis() -> Redis:
    global _redis
    if _redis is None:
        # RQ stores pickled job payloads, so responses must stay as bytes
        _redis = Redis.from_url(settings.redis_url)
    return _redis


def get_queue(name: str = "default") -> Queue:
    return Queue(name, connection=get_redis())

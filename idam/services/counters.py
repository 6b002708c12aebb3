"""
Throttle counter backends.

Counts live either in the identity database (``database``) or in redis
(``redis``), selected by ``THROTTLE_BACKEND``. Both compare and increment
atomically at the store, so concurrent callers never lose updates and never
take a count past its limit.
"""

from typing import Any, Iterable, Mapping, Optional
import logging

import redis
from flask import Flask, current_app

from ..domain import ThrottleRecord
from ..exceptions import ConfigurationError, Unavailable
from . import datastore

logger = logging.getLogger(__name__)

EXTENSION = 'idam.counters'


class DatabaseCounters(object):
    """Throttle counts kept in the identity database."""

    def get_counts(self, username: str,
                   categories: Iterable[str] = ()) -> ThrottleRecord:
        """Get counts for ``username``, materializing ``categories``."""
        return datastore.get_or_create_throttles(username, categories)

    def increment(self, username: str, category: str) -> int:
        """Add one to the count for ``username`` in ``category``."""
        return datastore.increment_throttle(username, category)

    def consume(self, username: str, category: str, limit: int) -> bool:
        """Add one to the count, only if it is below ``limit``."""
        return datastore.consume_throttle(username, category, limit)

    def clear(self, username: Optional[str] = None) -> None:
        """Reset counts for ``username``, or for everyone."""
        datastore.clear_throttles(username)


class RedisCounters(object):
    """
    Throttle counts kept in redis.

    Each user has one hash, keyed by category, and increments use
    ``HINCRBY``. The StrictRedis instance is thread safe and connections are
    attached at the time a command is executed.
    """

    PREFIX = 'idam:throttle:'

    def __init__(self, connection: redis.StrictRedis) -> None:
        self.r = connection

    def _key(self, username: str) -> str:
        return f'{self.PREFIX}{username}'

    def get_counts(self, username: str,
                   categories: Iterable[str] = ()) -> ThrottleRecord:
        try:
            raw = self.r.hgetall(self._key(username))
        except redis.exceptions.ConnectionError as e:
            raise Unavailable(f'Connection failed: {e}') from e
        counts = {_text(k): int(v) for k, v in raw.items()}
        return ThrottleRecord(username, counts)

    def increment(self, username: str, category: str) -> int:
        try:
            return int(self.r.hincrby(self._key(username), category, 1))
        except redis.exceptions.ConnectionError as e:
            raise Unavailable(f'Connection failed: {e}') from e

    def consume(self, username: str, category: str, limit: int) -> bool:
        """
        Add one to the count, only if it is below ``limit``.

        The hash is watched while the count is compared, and the increment is
        discarded and retried if anyone else changed it in the meantime.
        """
        key = self._key(username)
        try:
            with self.r.pipeline() as pipe:
                while True:
                    try:
                        pipe.watch(key)
                        count = int(pipe.hget(key, category) or 0)
                        if count >= limit:
                            pipe.unwatch()
                            return False
                        pipe.multi()
                        pipe.hincrby(key, category, 1)
                        pipe.execute()
                        return True
                    except redis.exceptions.WatchError:
                        logger.debug('Throttle %s for %s changed; retrying',
                                     category, username)
        except redis.exceptions.ConnectionError as e:
            raise Unavailable(f'Connection failed: {e}') from e

    def clear(self, username: Optional[str] = None) -> None:
        try:
            if username is not None:
                self.r.delete(self._key(username))
                return
            for key in self.r.scan_iter(match=f'{self.PREFIX}*'):
                self.r.delete(key)
        except redis.exceptions.ConnectionError as e:
            raise Unavailable(f'Connection failed: {e}') from e


def _text(value: Any) -> str:
    return value.decode('utf-8') if isinstance(value, bytes) else str(value)


def get_redis(config: Mapping[str, Any]) -> redis.StrictRedis:
    """Get a new connection to Redis."""
    if config.get('REDIS_FAKE'):
        import fakeredis
        logger.warning('Using FakeRedis for throttle counts')
        return fakeredis.FakeStrictRedis()
    try:
        host = config['REDIS_HOST']
        port = int(config['REDIS_PORT'])
        db = int(config['REDIS_DATABASE'])
    except KeyError as e:
        raise ConfigurationError('Missing required config parameter') from e
    logger.debug('New Redis connection at %s, port %s', host, port)
    return redis.StrictRedis(host=host, port=port, db=db)


def get_counters(config: Mapping[str, Any]) -> Any:
    """Create the throttle counter backend selected in ``config``."""
    backend = config.get('THROTTLE_BACKEND', 'database')
    if backend == 'database':
        return DatabaseCounters()
    if backend == 'redis':
        return RedisCounters(get_redis(config))
    raise ConfigurationError(f'Unknown THROTTLE_BACKEND: {backend}')


def init_app(app: Flask) -> None:
    """Attach the configured throttle counter backend to ``app``."""
    app.extensions[EXTENSION] = get_counters(app.config)


def current_counters() -> Any:
    """Get the throttle counter backend for the current application."""
    return current_app.extensions[EXTENSION]

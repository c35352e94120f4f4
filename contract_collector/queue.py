"""
Redis Work Queue

List-backed queue shared with the rest of the liquidation pipeline.
Producers RPUSH JSON work items, consumers BLPOP them.
"""

import logging
from typing import List, Optional, Tuple, Union
from urllib.parse import urlparse

import redis

DEFAULT_POP_TIMEOUT = 5  # seconds
DEFAULT_PORT = 6379

URL_SCHEMES = ("redis", "rediss", "unix")

QueueItem = Union[bytes, str]


def parse_endpoint(endpoint: str) -> Tuple[str, int]:
    """
    Split a 'host[:port]' endpoint.

    Raises ValueError for a blank host or a port that is not 1-65535.
    """
    host, _, port = endpoint.strip().partition(':')
    if not host:
        raise ValueError(f"Redis endpoint {endpoint!r} has no host")
    if not port:
        return host, DEFAULT_PORT
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"Redis endpoint {endpoint!r} has an invalid port {port!r}")
    return host, int(port)


def validate_endpoint(endpoint: str) -> None:
    """Raise ValueError unless endpoint is 'host[:port]' or a redis URL."""
    if '://' in endpoint:
        scheme = urlparse(endpoint).scheme.lower()
        if scheme not in URL_SCHEMES:
            raise ValueError(f"Redis endpoint {endpoint!r} has unsupported scheme {scheme!r}")
        return
    parse_endpoint(endpoint)


class RedisQueue:
    """
    Blocking FIFO queue on Redis lists.

    fetch() blocks for at most pop_timeout seconds and returns None when no
    item arrived, so a polling loop never spins on an empty queue.
    """

    def __init__(
        self,
        client: redis.Redis,
        pop_timeout: int = DEFAULT_POP_TIMEOUT,
        logger: logging.Logger = None,
    ):
        self._client = client
        self._pop_timeout = pop_timeout
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_endpoint(
        cls,
        endpoint: str,
        database: int = 0,
        pop_timeout: int = DEFAULT_POP_TIMEOUT,
        logger: logging.Logger = None,
    ) -> 'RedisQueue':
        """Create from 'host:port' or a redis:// URL."""
        if '://' in endpoint:
            client = redis.Redis.from_url(endpoint, db=database)
        else:
            host, port = parse_endpoint(endpoint)
            client = redis.Redis(host=host, port=port, db=database)
        return cls(client, pop_timeout=pop_timeout, logger=logger)

    @property
    def client(self) -> redis.Redis:
        return self._client

    def connect(self) -> None:
        """Verify the connection. Raises redis.ConnectionError when unreachable."""
        self._client.ping()
        self._logger.info("Connected to Redis")

    def disconnect(self) -> None:
        self._client.close()

    def fetch(self, queue_name: str) -> Optional[bytes]:
        """Pop the next item, waiting up to pop_timeout seconds."""
        item = self._client.blpop([queue_name], timeout=self._pop_timeout)
        if item is None:
            return None
        _, value = item
        return value

    def push(self, queue_name: str, item: QueueItem) -> None:
        self._client.rpush(queue_name, item)

    def push_many(self, queue_name: str, items: List[QueueItem]) -> None:
        if not items:
            return
        self._client.rpush(queue_name, *items)

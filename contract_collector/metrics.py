"""
Collector Metrics

- RedisMetricsCache: shared counters read by the pipeline's monitoring
- CollectorStats: in-process totals for status reporting
"""

from dataclasses import dataclass
from typing import Any, Dict

import redis

# Metric keys shared with the other pipeline services
ITEMS_SCANNED_METRIC = 'collector.contract_items.scanned'
ACCOUNTS_TOTAL_METRIC = 'health_checker.accounts.total'


class RedisMetricsCache:
    """Integer counters stored as Redis keys."""

    def __init__(self, client: redis.Redis):
        self._client = client

    def increment_by(self, key: str, amount: int) -> int:
        """Add amount to the counter and return the new total."""
        return self._client.incrby(key, amount)

    def get(self, key: str) -> int:
        value = self._client.get(key)
        return int(value) if value is not None else 0


@dataclass
class CollectorStats:
    """Running totals across work cycles."""
    work_items: int = 0
    items_scanned: int = 0
    records_pushed: int = 0
    last_cycle_ms: float = 0.0
    started_at: float = 0.0

    def record_cycle(self, items_scanned: int, records_pushed: int, elapsed_ms: float):
        self.work_items += 1
        self.items_scanned += items_scanned
        self.records_pushed += records_pushed
        self.last_cycle_ms = elapsed_ms

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'work_items': self.work_items,
            'items_scanned': self.items_scanned,
            'records_pushed': self.records_pushed,
            'last_cycle_ms': self.last_cycle_ms,
            'started_at': self.started_at,
        }

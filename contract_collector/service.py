"""
Collector Service

Queue-driven worker. For every work item taken from the collector queue it
scans one page of contract state and pushes the resulting account records to
the health check queue.

Work cycle:
1. BLPOP a work item (returns None after the pop timeout, loop continues)
2. Parse it into a ScanRequest (invalid items are fatal)
3. Scan the page (query failures are fatal)
4. Update metrics and push records

Stopping is cooperative: stop() sets an event that is checked between work
cycles. A scan already in progress runs to completion or to its timeout.
"""

import logging
import threading
import time
from enum import Enum, auto
from typing import Any, Dict, Optional

from .errors import InvalidWorkItemError
from .metrics import ACCOUNTS_TOTAL_METRIC, ITEMS_SCANNED_METRIC, CollectorStats, RedisMetricsCache
from .queue import RedisQueue
from .scanner import ScanOrchestrator
from .types import ScanRequest


class CollectorState(Enum):
    """Collector service state."""
    STOPPED = auto()
    RUNNING = auto()
    ERROR = auto()


class CollectorService:
    """
    Contract state collector.

    Usage:
        service = CollectorService(queue, metrics, "collector", "health_check")
        signal.signal(signal.SIGTERM, lambda *_: service.stop())
        service.run()
    """

    def __init__(
        self,
        queue: RedisQueue,
        metrics_cache: RedisMetricsCache,
        collector_queue_name: str,
        health_check_queue_name: str,
        orchestrator: Optional[ScanOrchestrator] = None,
        logger: logging.Logger = None,
    ):
        if queue is None:
            raise ValueError("queue must be set")
        if metrics_cache is None:
            raise ValueError("metrics_cache must be set")
        if not collector_queue_name or not health_check_queue_name:
            raise ValueError("collector_queue_name and health_check_queue_name must not be blank")

        self._queue = queue
        self._metrics_cache = metrics_cache
        self._collector_queue_name = collector_queue_name
        self._health_check_queue_name = health_check_queue_name
        self._logger = logger or logging.getLogger(__name__)
        self._orchestrator = orchestrator or ScanOrchestrator(logger=self._logger)

        self._state = CollectorState.STOPPED
        self._stats = CollectorStats()
        self._stop_event = threading.Event()

    @property
    def state(self) -> CollectorState:
        return self._state

    @property
    def stats(self) -> CollectorStats:
        return self._stats

    def run(self) -> None:
        """
        Process work items until stop() is called.

        Queue, query and work item errors end the loop and are re-raised.
        """
        self._queue.connect()
        self._stop_event.clear()
        self._state = CollectorState.RUNNING
        self._stats.started_at = time.time()

        try:
            while not self._stop_event.is_set():
                item = self._queue.fetch(self._collector_queue_name)
                if item is None:
                    # fetch already blocked for the pop timeout
                    continue
                self.process_item(item)
        except Exception:
            self._state = CollectorState.ERROR
            raise
        finally:
            self._queue.disconnect()

        self._state = CollectorState.STOPPED
        self._logger.info("Collector stopped")

    def process_item(self, item: bytes) -> int:
        """
        Run one work cycle for a raw work item.

        Returns:
            Number of records pushed to the health check queue
        """
        start = time.time()

        try:
            request = ScanRequest.from_work_item(item)
        except InvalidWorkItemError as e:
            self._logger.error(f"Rejected work item {item!r}: {e}")
            raise

        result = self._orchestrator.scan(request)
        records = [record.to_json() for record in result.records]

        self._metrics_cache.increment_by(ITEMS_SCANNED_METRIC, result.stats.items_scanned)
        self._metrics_cache.increment_by(ACCOUNTS_TOTAL_METRIC, len(records))

        self._queue.push_many(self._health_check_queue_name, records)

        elapsed_ms = (time.time() - start) * 1000
        self._stats.record_cycle(result.stats.items_scanned, len(records), elapsed_ms)
        self._logger.info(
            f"Pushed addresses to Redis: total={len(records)} "
            f"scanned={result.stats.items_scanned} elapsed_ms={elapsed_ms:.0f}"
        )
        return len(records)

    def stop(self) -> None:
        """Ask the loop to exit after the current work cycle."""
        self._stop_event.set()

    def get_status(self) -> Dict[str, Any]:
        return {
            'state': self._state.name,
            'collector_queue': self._collector_queue_name,
            'health_check_queue': self._health_check_queue_name,
            'stats': self._stats.to_dict(),
        }

"""
Collector Runner.

Entry point for the `contract-collector` console script.

Usage:
    contract-collector                  # config from environment / .env
    contract-collector --env-file prod.env
    contract-collector --verbose        # force debug logging
"""

import argparse
import json
import logging
import signal
import sys
from typing import List, Optional

from .config import CollectorConfig
from .errors import ConfigError
from .metrics import RedisMetricsCache
from .queue import RedisQueue
from .scanner import ScanOrchestrator
from .service import CollectorService

TEXT_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class JsonLogFormatter(logging.Formatter):
    """One JSON object per log line."""

    def __init__(self, service_name: str, chain_id: str):
        super().__init__(datefmt=DATE_FORMAT)
        self._service_name = service_name
        self._chain_id = chain_id

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'time': self.formatTime(record, self.datefmt),
            'level': record.levelname.lower(),
            'logger': record.name,
            'message': record.getMessage(),
            'service': self._service_name,
            'chain_id': self._chain_id,
        }
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(
    level: str = 'info',
    log_format: str = 'json',
    service_name: str = 'collector',
    chain_id: str = '',
) -> logging.Logger:
    """Configure root logging on stdout and return the service logger."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ConfigError(f"Unable to parse log level: {level!r}")

    handler = logging.StreamHandler(sys.stdout)
    if log_format == 'text':
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(JsonLogFormatter(service_name.lower(), chain_id.lower()))

    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)
    return logging.getLogger(service_name.lower())


def build_service(config: CollectorConfig, logger: logging.Logger) -> CollectorService:
    """Wire Redis queue, metrics cache and scanner from config."""
    queue = RedisQueue.from_endpoint(
        config.redis_endpoint,
        database=config.redis_database,
        pop_timeout=config.queue_pop_timeout,
        logger=logger,
    )
    return CollectorService(
        queue=queue,
        metrics_cache=RedisMetricsCache(queue.client),
        collector_queue_name=config.collector_queue_name,
        health_check_queue_name=config.health_check_queue_name,
        orchestrator=ScanOrchestrator(rpc_timeout=config.rpc_timeout, logger=logger),
        logger=logger,
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Contract state collector - scans contract storage for debt positions'
    )
    parser.add_argument(
        '--env-file',
        type=str,
        default=None,
        help='Path to .env file (default: search from working directory)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging regardless of LOG_LEVEL'
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = CollectorConfig.from_env(env_file=args.env_file)
        logger = setup_logging(
            'debug' if args.verbose else config.log_level,
            config.log_format,
            config.service_name,
            config.chain_id,
        )
    except ConfigError as e:
        print(e, file=sys.stderr)
        return 1

    logger.info("Setting up dependencies")
    try:
        service = build_service(config, logger)
    except ValueError as e:
        logger.error(f"Unable to set up dependencies: {e}")
        return 1

    def signal_handler(signum, frame):
        logger.info(f"Received OS signal {signal.Signals(signum).name}")
        service.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("Start service")
    try:
        service.run()
    except Exception as e:
        logger.exception(f"Collector failed: {e}")
        return 1

    logger.info("Shutdown")
    return 0


if __name__ == '__main__':
    sys.exit(main())

"""
Collector Configuration

Settings come from the environment. A .env file in the working directory
(or the path passed to from_env) is loaded first; values already set in the
environment take precedence.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError
from .queue import validate_endpoint

LOG_FORMATS = ('json', 'text')


@dataclass
class CollectorConfig:
    """Configuration for the collector service."""

    # ========== Service ==========
    chain_id: str
    service_name: str = "collector"
    log_level: str = "info"
    log_format: str = "json"

    # ========== Redis ==========
    # host:port or redis:// URL
    redis_endpoint: str = "localhost:6379"
    redis_database: int = 0

    # Inbound work items
    collector_queue_name: str = ""
    # Outbound account records
    health_check_queue_name: str = ""

    # BLPOP timeout (seconds)
    queue_pop_timeout: int = 5

    # ========== Node Queries ==========
    # Blocks are ~6s apart, a page query must finish well within one
    rpc_timeout: float = 5.0

    @classmethod
    def from_env(
        cls,
        env_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> 'CollectorConfig':
        """
        Load configuration from environment variables.

        Args:
            env_file: Optional .env path (default: search from cwd)
            environ: Mapping to read instead of os.environ (skips .env loading)

        Raises:
            ConfigError listing every missing or invalid variable
        """
        if environ is None:
            load_dotenv(env_file)
            environ = os.environ

        errors: List[str] = []

        def required(name: str) -> str:
            value = environ.get(name, '').strip()
            if not value:
                errors.append(f"{name} is required")
            return value

        def number(name: str, default, cast, is_required: bool = False):
            raw = environ.get(name, '').strip()
            if not raw:
                if is_required:
                    errors.append(f"{name} is required")
                return default
            try:
                return cast(raw)
            except ValueError:
                errors.append(f"{name} must be {cast.__name__}, got {raw!r}")
                return default

        values: Dict[str, object] = {
            'chain_id': required('CHAIN_ID'),
            'service_name': environ.get('SERVICE_NAME', '').strip() or cls.service_name,
            'log_level': environ.get('LOG_LEVEL', '').strip().lower() or cls.log_level,
            'log_format': environ.get('LOG_FORMAT', '').strip().lower() or cls.log_format,
            'redis_endpoint': required('REDIS_ENDPOINT'),
            'redis_database': number('REDIS_DATABASE', cls.redis_database, int, is_required=True),
            'collector_queue_name': required('COLLECTOR_QUEUE_NAME'),
            'health_check_queue_name': required('HEALTH_CHECK_QUEUE_NAME'),
            'queue_pop_timeout': number('QUEUE_POP_TIMEOUT_SECONDS', cls.queue_pop_timeout, int),
            'rpc_timeout': number('RPC_TIMEOUT_SECONDS', cls.rpc_timeout, float),
        }

        if values['log_format'] not in LOG_FORMATS:
            errors.append(f"LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}, got {values['log_format']!r}")

        if values['redis_endpoint']:
            try:
                validate_endpoint(values['redis_endpoint'])
            except ValueError as e:
                errors.append(f"REDIS_ENDPOINT: {e}")

        if errors:
            raise ConfigError("Unable to process config: " + "; ".join(errors))

        return cls(**values)

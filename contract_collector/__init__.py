"""
Contract State Collector.

Scans CosmWasm contract storage for debt map entries and feeds borrower
accounts to the liquidation pipeline's health checker.

Components:
- types: Work item, raw entry and output record schemas
- wasm: Raw state query, key and value decoding
- scanner: Single page scan (ScanOrchestrator)
- queue / metrics: Redis work queue and counters
- service: Queue-driven worker loop
- config / runner: Environment configuration and entry point
"""

from .errors import CollectorError, InvalidWorkItemError, QueryError, ConfigError
from .types import (
    ScanRequest,
    RawStateEntry,
    DecodedKey,
    DecodedValue,
    Asset,
    Endpoints,
    OutputRecord,
    ScanStats,
)
from .scanner import ScanOrchestrator, ScanResult, ScanState
from .service import CollectorService, CollectorState
from .config import CollectorConfig

__all__ = [
    # Errors
    'CollectorError',
    'InvalidWorkItemError',
    'QueryError',
    'ConfigError',
    # Types
    'ScanRequest',
    'RawStateEntry',
    'DecodedKey',
    'DecodedValue',
    'Asset',
    'Endpoints',
    'OutputRecord',
    'ScanStats',
    # Scanning
    'ScanOrchestrator',
    'ScanResult',
    'ScanState',
    # Service
    'CollectorService',
    'CollectorState',
    'CollectorConfig',
]

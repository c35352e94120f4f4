"""
Collector Data Types

Canonical shapes flowing through one scan:

    work item JSON -> ScanRequest -> RawStateEntry -> DecodedKey/DecodedValue
                   -> OutputRecord JSON

Amounts stay decimal strings end to end; they are never converted to floats.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .errors import InvalidWorkItemError

UINT64_MAX = 2 ** 64 - 1

# Work item field name -> ScanRequest attribute
WORK_ITEM_FIELDS = {
    'rpc_endpoint': 'rpc_endpoint',
    'contract_address': 'contract_address',
    'contract_item_prefix': 'item_prefix',
    'contract_page_offset': 'page_offset',
    'contract_page_limit': 'page_limit',
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class ScanRequest:
    """
    Parameters for scanning one page of contract state.

    Fields:
        contract_address: Contract whose raw storage is scanned
        rpc_endpoint: Node endpoint used for the query
        item_prefix: Map name prefix to keep (exact, case-sensitive)
        page_offset: Number of storage entries to skip
        page_limit: Maximum number of storage entries to return
    """
    contract_address: str
    rpc_endpoint: str
    item_prefix: str
    page_offset: int
    page_limit: int

    def __post_init__(self):
        if not isinstance(self.contract_address, str) or not self.contract_address:
            raise InvalidWorkItemError("contract_address must be a non-empty string")
        if not isinstance(self.rpc_endpoint, str) or not self.rpc_endpoint:
            raise InvalidWorkItemError("rpc_endpoint must be a non-empty string")
        if not isinstance(self.item_prefix, str):
            raise InvalidWorkItemError("item_prefix must be a string")
        if not _is_int(self.page_offset) or not 0 <= self.page_offset <= UINT64_MAX:
            raise InvalidWorkItemError(
                f"page_offset must be an unsigned 64-bit integer, got {self.page_offset!r}"
            )
        if not _is_int(self.page_limit) or not 0 < self.page_limit <= UINT64_MAX:
            raise InvalidWorkItemError(
                f"page_limit must be a positive 64-bit integer, got {self.page_limit!r}"
            )

    @classmethod
    def from_work_item(cls, payload: Union[bytes, str]) -> 'ScanRequest':
        """
        Parse a JSON work item taken from the collector queue.

        All fields are required. Raises InvalidWorkItemError otherwise.
        """
        try:
            data = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise InvalidWorkItemError(f"Work item is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise InvalidWorkItemError("Work item must be a JSON object")

        missing = [name for name in WORK_ITEM_FIELDS if name not in data]
        if missing:
            raise InvalidWorkItemError(f"Work item missing fields: {', '.join(missing)}")

        return cls(**{attr: data[name] for name, attr in WORK_ITEM_FIELDS.items()})

    def to_work_item(self) -> str:
        """Serialize back to the queue's work item format."""
        return json.dumps(
            {name: getattr(self, attr) for name, attr in WORK_ITEM_FIELDS.items()},
            separators=(',', ':'),
        )


@dataclass(frozen=True)
class RawStateEntry:
    """One raw storage slot as returned by the node."""
    key: bytes
    value: bytes


@dataclass(frozen=True)
class DecodedKey:
    """Logical map entry recovered from a raw storage key."""
    map_name: str
    address: str
    denom: str


@dataclass(frozen=True)
class DecodedValue:
    """Stored debt value. amount_scaled is a decimal string."""
    amount_scaled: str


@dataclass(frozen=True)
class Asset:
    """Amount of a single token."""
    token: str
    amount: str

    def to_dict(self) -> Dict[str, str]:
        return {'token': self.token, 'amount': self.amount}


@dataclass(frozen=True)
class Endpoints:
    """Endpoints the health checker may use for this account."""
    rpc: str
    hive: Optional[str] = None
    lcd: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        result = {}
        if self.hive is not None:
            result['hive'] = self.hive
        if self.lcd is not None:
            result['lcd'] = self.lcd
        result['rpc'] = self.rpc
        return result


@dataclass(frozen=True)
class OutputRecord:
    """
    Account record pushed to the health check queue.

    One record per matching storage entry; debts for the same address
    are not merged.
    """
    address: str
    debts: List[Asset]
    collateral: List[Asset]
    endpoints: Endpoints

    def to_dict(self) -> Dict[str, Any]:
        return {
            'address': self.address,
            'debts': [d.to_dict() for d in self.debts],
            'collateral': [c.to_dict() for c in self.collateral],
            'endpoints': self.endpoints.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'))


@dataclass
class ScanStats:
    """Statistics for a single page scan."""
    items_scanned: int = 0
    records_produced: int = 0
    entries_received: int = 0
    elapsed_ms: float = 0.0
    skipped: Dict[str, int] = field(default_factory=dict)

    def record_skip(self, reason: str):
        self.skipped[reason] = self.skipped.get(reason, 0) + 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'items_scanned': self.items_scanned,
            'records_produced': self.records_produced,
            'entries_received': self.entries_received,
            'elapsed_ms': self.elapsed_ms,
            'skipped': dict(self.skipped),
        }

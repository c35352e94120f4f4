"""
Contract State Scanner

Scans one page of a contract's raw storage and turns matching map entries
into health check records.

Flow per page:
    QUERYING  -> fetch the page (any failure -> FAILED, error propagates)
    DECODING  -> decode each entry, skip malformed or irrelevant ones
    DONE      -> records + statistics returned

Per-entry problems never abort the page. Counting:
- items_scanned: entries whose key decoded successfully
- records_produced: entries that also had a valid value
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional

from .types import Asset, Endpoints, OutputRecord, RawStateEntry, ScanRequest, ScanStats
from .wasm.key_decoder import StorageKeyDecoder
from .wasm.page_query import PageQueryBuilder
from .wasm.transport import DEFAULT_TIMEOUT, StateQueryTransport, create_transport
from .wasm.value_decoder import decode_debt_value


class ScanState(Enum):
    """Page scan state."""
    QUERYING = auto()
    DECODING = auto()
    DONE = auto()
    FAILED = auto()


@dataclass
class ScanResult:
    """Output of one page scan."""
    records: List[OutputRecord] = field(default_factory=list)
    stats: ScanStats = field(default_factory=ScanStats)


TransportFactory = Callable[[str], StateQueryTransport]


class ScanOrchestrator:
    """
    Runs a single page scan for a ScanRequest.

    Only the state of the current (or last) scan is kept; the caller owns
    offset/limit and accumulates statistics across pages.
    """

    def __init__(
        self,
        transport_factory: Optional[TransportFactory] = None,
        rpc_timeout: float = DEFAULT_TIMEOUT,
        logger: logging.Logger = None,
    ):
        self._transport_factory = transport_factory or (
            lambda endpoint: create_transport(endpoint, timeout=rpc_timeout)
        )
        self._logger = logger or logging.getLogger(__name__)
        self._state: Optional[ScanState] = None

    @property
    def state(self) -> Optional[ScanState]:
        """State of the current or last scan, None before the first one."""
        return self._state

    def scan(self, request: ScanRequest) -> ScanResult:
        start = time.time()
        self._state = ScanState.QUERYING

        try:
            with self._transport_factory(request.rpc_endpoint) as transport:
                entries = PageQueryBuilder(transport, logger=self._logger).fetch_page(
                    request.contract_address,
                    request.page_offset,
                    request.page_limit,
                )
        except Exception as e:
            self._state = ScanState.FAILED
            self._logger.error(
                f"Scan {self._state.name}: state query for {request.contract_address} "
                f"at {request.rpc_endpoint} (offset={request.page_offset}, "
                f"limit={request.page_limit}) raised: {e}"
            )
            raise

        self._state = ScanState.DECODING
        result = self._decode_entries(request, entries)
        result.stats.elapsed_ms = (time.time() - start) * 1000
        self._state = ScanState.DONE

        self._logger.debug(
            f"Fetched contract items: total={len(result.records)} "
            f"scanned={result.stats.items_scanned} "
            f"received={result.stats.entries_received} "
            f"elapsed_ms={result.stats.elapsed_ms:.0f}"
        )
        return result

    def _decode_entries(self, request: ScanRequest, entries: List[RawStateEntry]) -> ScanResult:
        decoder = StorageKeyDecoder(request.item_prefix)
        endpoints = Endpoints(rpc=request.rpc_endpoint)
        result = ScanResult()
        stats = result.stats
        stats.entries_received = len(entries)

        for entry in entries:
            decoded = decoder.decode(entry.key)
            if not decoded.ok:
                stats.record_skip(decoded.skip_reason.value)
                if decoded.skip_reason.is_error:
                    self._logger.warning(
                        f"Unable to decode contract state key ({decoded.skip_reason.value}): "
                        f"key={entry.key.hex()} map={decoded.map_name}"
                    )
                continue

            stats.items_scanned += 1

            value = decode_debt_value(entry.value)
            if not value.ok:
                stats.record_skip('bad_value')
                self._logger.warning(
                    f"Unable to decode contract state value ({value.error}): "
                    f"key={entry.key.hex()} map={decoded.map_name} value={entry.value!r}"
                )
                continue

            key = decoded.key
            result.records.append(OutputRecord(
                address=key.address,
                debts=[Asset(token=key.denom, amount=value.value.amount_scaled)],
                collateral=[],
                endpoints=endpoints,
            ))
            stats.records_produced += 1

        return result

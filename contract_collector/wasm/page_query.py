"""
Paginated Raw Contract State Query

Builds `QueryAllContractStateRequest` messages, sends them through a state
query transport and turns the response into RawStateEntry values.

The node returns entries in storage order; that order is preserved and
nothing is deduplicated. Any transport, serialization or protocol error is
fatal for the page and is not retried here.
"""

import logging
import time
from typing import List

from ..errors import InvalidWorkItemError
from ..types import RawStateEntry
from . import protos
from .transport import StateQueryTransport

ALL_CONTRACT_STATE_PATH = '/cosmwasm.wasm.v1.Query/AllContractState'


class PageQueryBuilder:
    """
    Raw state page query for one contract.

    Usage:
        with create_transport(rpc_endpoint) as transport:
            builder = PageQueryBuilder(transport)
            entries = builder.fetch_page(contract_address, offset=0, limit=100)
    """

    def __init__(self, transport: StateQueryTransport, logger: logging.Logger = None):
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)

    @staticmethod
    def build_request(contract_address: str, offset: int, limit: int) -> bytes:
        """Encode the protobuf request for one page."""
        if not contract_address:
            raise InvalidWorkItemError("contract_address must not be empty")
        if offset < 0:
            raise InvalidWorkItemError(f"offset must be >= 0, got {offset}")
        if limit <= 0:
            raise InvalidWorkItemError(f"limit must be > 0, got {limit}")

        request = protos.QueryAllContractStateRequest(
            address=contract_address,
            pagination=protos.PageRequest(offset=offset, limit=limit),
        )
        return request.SerializeToString()

    @staticmethod
    def parse_response(payload: bytes) -> List[RawStateEntry]:
        """Decode a protobuf response. Raises DecodeError on malformed input."""
        response = protos.QueryAllContractStateResponse.FromString(payload)
        return [RawStateEntry(key=bytes(m.key), value=bytes(m.value)) for m in response.models]

    def fetch_page(self, contract_address: str, offset: int, limit: int) -> List[RawStateEntry]:
        start = time.time()
        request = self.build_request(contract_address, offset, limit)
        payload = self._transport.query(ALL_CONTRACT_STATE_PATH, request)
        entries = self.parse_response(payload)

        self._logger.debug(
            f"Fetched {len(entries)} state entries from {contract_address} "
            f"(offset={offset}, limit={limit}) in {(time.time() - start) * 1000:.0f}ms"
        )
        return entries

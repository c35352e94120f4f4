"""
Shared fixtures for collector tests.

Raw keys are built with encode_map_key; node responses are real protobuf
payloads so the same bytes a node would return flow through the decoder.
"""

import pytest

from contract_collector.types import ScanRequest
from contract_collector.wasm import protos
from contract_collector.wasm.transport import StateQueryTransport

# Key from a live red bank "debts" map: debts[("osmo1cyy...kaks", "uion")]
LIVE_DEBT_KEY_HEX = (
    "00056465627473002B6F736D6F316379797A7078706C78647A6B656561376B7773"
    "79646164673837333537716E6168616B616B7375696F6E"
)
LIVE_DEBT_ADDRESS = "osmo1cyyzpxplxdzkeea7kwsydadg87357qnahakaks"

RPC_ENDPOINT = "https://rpc.example.com:443"


class FakeTransport(StateQueryTransport):
    """Transport returning a canned payload and recording calls."""

    def __init__(self, response: bytes = b'', error: Exception = None, endpoint: str = RPC_ENDPOINT):
        self.endpoint = endpoint
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def query(self, path: str, data: bytes) -> bytes:
        self.calls.append((path, data))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self) -> None:
        self.closed = True


def build_state_response(entries) -> bytes:
    """Encode [(key, value), ...] as a QueryAllContractStateResponse."""
    response = protos.QueryAllContractStateResponse(
        models=[protos.Model(key=key, value=value) for key, value in entries]
    )
    return response.SerializeToString()


@pytest.fixture
def live_debt_key():
    return bytes.fromhex(LIVE_DEBT_KEY_HEX)


@pytest.fixture
def state_response():
    return build_state_response


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def scan_request():
    return ScanRequest(
        contract_address="mars1xyz",
        rpc_endpoint=RPC_ENDPOINT,
        item_prefix="debts",
        page_offset=0,
        page_limit=10,
    )

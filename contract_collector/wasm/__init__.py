"""
CosmWasm Contract State Access.

Components:
- protos: Protobuf messages for the raw state query
- transport: Tendermint RPC and gRPC query transports
- page_query: Paginated raw state query (PageQueryBuilder)
- key_decoder: Map entry key decoding (StorageKeyDecoder)
- value_decoder: Debt value decoding
"""

from .key_decoder import (
    StorageKeyDecoder,
    KeyDecodeResult,
    SkipReason,
    encode_map_key,
    MIN_MAP_KEY_LENGTH,
)
from .value_decoder import decode_debt_value, ValueDecodeResult
from .page_query import PageQueryBuilder, ALL_CONTRACT_STATE_PATH
from .transport import (
    StateQueryTransport,
    TendermintRpcTransport,
    GrpcTransport,
    create_transport,
)

__all__ = [
    'StorageKeyDecoder',
    'KeyDecodeResult',
    'SkipReason',
    'encode_map_key',
    'MIN_MAP_KEY_LENGTH',
    'decode_debt_value',
    'ValueDecodeResult',
    'PageQueryBuilder',
    'ALL_CONTRACT_STATE_PATH',
    'StateQueryTransport',
    'TendermintRpcTransport',
    'GrpcTransport',
    'create_transport',
]

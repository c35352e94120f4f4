"""
Storage Key Decoder

Decodes map entry keys written by the contract storage layer. A Map keyed by
(address, denom) stores each entry under a flat key:

    [len(map name): u16 BE][map name][len(address): u16 BE][address][denom]

Example (hex):
    0005 6465627473 002B 6f736d6f31...7175 696f6e
    ^L1  'debts'    ^L2  43-byte address   'uion'

The last sub-key carries no length prefix and consumes the rest of the key.
Its bytes are taken verbatim: bytes that are not UTF-8 are kept as surrogate
escapes, and encode_map_key turns them back into the same bytes.
Lengths are self-describing, so decoding is a single forward cursor pass.

Limitation: only the two-level (address, denom) shape is supported. A key
with more nested sub-keys decodes with the extra sub-keys folded into denom.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from ..types import DecodedKey

# Keys shorter than this cannot hold a map name, address and denom
MIN_MAP_KEY_LENGTH = 50

LENGTH_PREFIX_SIZE = 2
MAX_SEGMENT_LENGTH = 0xFFFF

# Codec error handler that maps undecodable bytes to lone surrogates and back
DENOM_ERRORS = 'surrogateescape'


class SkipReason(Enum):
    """Why a raw key produced no DecodedKey."""
    TOO_SHORT = "too_short"
    BAD_MAP_NAME_LENGTH = "bad_map_name_length"
    PREFIX_MISMATCH = "prefix_mismatch"
    BAD_ADDRESS_LENGTH = "bad_address_length"
    INVALID_UTF8 = "invalid_utf8"

    @property
    def is_error(self) -> bool:
        """True for malformed keys, False for expected filtering."""
        return self not in (SkipReason.TOO_SHORT, SkipReason.PREFIX_MISMATCH)


@dataclass(frozen=True)
class KeyDecodeResult:
    """Either a decoded key or the reason the key was skipped."""
    key: Optional[DecodedKey] = None
    skip_reason: Optional[SkipReason] = None
    map_name: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.key is not None


def _read_length(raw: bytes, cursor: int) -> Optional[int]:
    """Read a 2-byte big-endian length at cursor, None if truncated."""
    end = cursor + LENGTH_PREFIX_SIZE
    if end > len(raw):
        return None
    return int.from_bytes(raw[cursor:end], 'big')


def _read_segment(raw: bytes, cursor: int) -> Tuple[Optional[bytes], int]:
    """Read a length-prefixed segment. Returns (segment or None, new cursor)."""
    length = _read_length(raw, cursor)
    if length is None:
        return None, cursor
    start = cursor + LENGTH_PREFIX_SIZE
    end = start + length
    if end > len(raw):
        return None, cursor
    return raw[start:end], end


class StorageKeyDecoder:
    """
    Decodes raw storage keys for maps whose name starts with a prefix.

    Decoding never raises for malformed keys; every outcome is a
    KeyDecodeResult so callers can count and log skips.

    Usage:
        decoder = StorageKeyDecoder("debts")
        result = decoder.decode(entry.key)
        if result.ok:
            process(result.key)
    """

    def __init__(self, prefix: str):
        self._prefix = prefix
        self._prefix_bytes = prefix.encode('utf-8')

    @property
    def prefix(self) -> str:
        return self._prefix

    def decode(self, raw_key: bytes) -> KeyDecodeResult:
        if len(raw_key) < MIN_MAP_KEY_LENGTH:
            return KeyDecodeResult(skip_reason=SkipReason.TOO_SHORT)

        map_name_bytes, cursor = _read_segment(raw_key, 0)
        if map_name_bytes is None:
            return KeyDecodeResult(skip_reason=SkipReason.BAD_MAP_NAME_LENGTH)

        # Irrelevant maps are dropped before touching the rest of the key
        if not map_name_bytes.startswith(self._prefix_bytes):
            return KeyDecodeResult(skip_reason=SkipReason.PREFIX_MISMATCH)

        try:
            map_name = map_name_bytes.decode('utf-8')
        except UnicodeDecodeError:
            return KeyDecodeResult(skip_reason=SkipReason.INVALID_UTF8)

        address_bytes, cursor = _read_segment(raw_key, cursor)
        if address_bytes is None:
            return KeyDecodeResult(skip_reason=SkipReason.BAD_ADDRESS_LENGTH, map_name=map_name)

        try:
            address = address_bytes.decode('utf-8')
        except UnicodeDecodeError:
            return KeyDecodeResult(skip_reason=SkipReason.INVALID_UTF8, map_name=map_name)

        # Denom bytes are kept verbatim; non-UTF-8 bytes survive as surrogate escapes
        denom = raw_key[cursor:].decode('utf-8', errors=DENOM_ERRORS)

        return KeyDecodeResult(
            key=DecodedKey(map_name=map_name, address=address, denom=denom),
            map_name=map_name,
        )


def _as_bytes(value: Union[str, bytes]) -> bytes:
    return value.encode('utf-8', errors=DENOM_ERRORS) if isinstance(value, str) else bytes(value)


def encode_map_key(
    map_name: Union[str, bytes],
    address: Union[str, bytes],
    denom: Union[str, bytes],
) -> bytes:
    """
    Build the raw storage key for map_name[(address, denom)].

    Raises ValueError if map name or address exceed a 16-bit length.
    """
    name = _as_bytes(map_name)
    addr = _as_bytes(address)
    for label, segment in (('map name', name), ('address', addr)):
        if len(segment) > MAX_SEGMENT_LENGTH:
            raise ValueError(f"{label} is {len(segment)} bytes, limit is {MAX_SEGMENT_LENGTH}")

    return (
        len(name).to_bytes(LENGTH_PREFIX_SIZE, 'big') + name
        + len(addr).to_bytes(LENGTH_PREFIX_SIZE, 'big') + addr
        + _as_bytes(denom)
    )

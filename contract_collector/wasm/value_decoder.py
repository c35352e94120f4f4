"""
Debt Value Decoder

Map values are stored as JSON documents, e.g.

    {"amount_scaled": "100000", "uncollateralized": false}

Only amount_scaled is used. It is a Uint128 serialized as a decimal string
and is kept as a string to preserve precision.
"""

import json
import re
from dataclasses import dataclass
from typing import Optional

from ..types import DecodedValue

AMOUNT_FIELD = 'amount_scaled'
_DECIMAL_PATTERN = re.compile(r'[0-9]+')


@dataclass(frozen=True)
class ValueDecodeResult:
    """Either a decoded value or a description of the failure."""
    value: Optional[DecodedValue] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def decode_debt_value(raw_value: bytes) -> ValueDecodeResult:
    try:
        document = json.loads(raw_value)
    except (TypeError, ValueError) as e:
        return ValueDecodeResult(error=f"invalid JSON: {e}")

    if not isinstance(document, dict):
        return ValueDecodeResult(error=f"expected object, got {type(document).__name__}")

    if AMOUNT_FIELD not in document:
        return ValueDecodeResult(error=f"missing field '{AMOUNT_FIELD}'")

    amount = document[AMOUNT_FIELD]
    if not isinstance(amount, str) or not _DECIMAL_PATTERN.fullmatch(amount):
        return ValueDecodeResult(error=f"'{AMOUNT_FIELD}' is not a decimal string: {amount!r}")

    return ValueDecodeResult(value=DecodedValue(amount_scaled=amount))

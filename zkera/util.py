"""Hex encoding helpers and builders for JSON-RPC call arguments."""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Any, Optional, Sequence

ADDRESS_LENGTH = 20
HASH_LENGTH = 32

ZERO_ADDRESS = "0x" + "00" * ADDRESS_LENGTH
ZERO_HASH = "0x" + "00" * HASH_LENGTH

_HEX_DIGITS = frozenset(string.hexdigits)

# Negative block numbers that the node understands as named tags.
_NAMED_BLOCKS = {
    -1: "latest",
    -2: "pending",
    -3: "finalized",
    -4: "safe",
}


@dataclass
class FilterQuery:
    """Parameters of an ``eth_getLogs`` style log filter."""

    block_hash: Optional[str] = None
    from_block: Optional[int] = None
    to_block: Optional[int] = None
    addresses: Optional[Sequence[str]] = None
    topics: Optional[Sequence[Optional[Sequence[str]]]] = None


def _has_hex_prefix(value: str) -> bool:
    return len(value) >= 2 and value[0] == "0" and value[1] in "xX"


def _check_hex_digits(digits: str) -> None:
    if not all(ch in _HEX_DIGITS for ch in digits):
        raise ValueError("invalid hex string")


def encode_big(value: int) -> str:
    """Encode an integer as a 0x-prefixed hex quantity."""
    if value < 0:
        return f"-0x{-value:x}"
    return f"0x{value:x}"


def decode_big(value: str) -> int:
    """Decode a 0x-prefixed hex quantity of at most 256 bits."""
    if not value:
        raise ValueError("empty hex string")
    if not _has_hex_prefix(value):
        raise ValueError("hex string without 0x prefix")
    digits = value[2:]
    if not digits:
        raise ValueError('hex string "0x"')
    if len(digits) > 1 and digits[0] == "0":
        raise ValueError("hex number with leading zero digits")
    if len(digits) > 64:
        raise ValueError("hex number > 256 bits")
    _check_hex_digits(digits)
    return int(digits, 16)


def encode_bytes(data: bytes) -> str:
    """Encode bytes as a 0x-prefixed hex string."""
    return "0x" + bytes(data).hex()


def decode_bytes(value: str) -> bytes:
    """Decode a 0x-prefixed hex string into bytes."""
    if not _has_hex_prefix(value):
        raise ValueError("hex string without 0x prefix")
    digits = value[2:]
    if len(digits) % 2:
        raise ValueError("hex string of odd length")
    _check_hex_digits(digits)
    return bytes.fromhex(digits)


def _to_fixed_hex(value: str, size: int) -> str:
    digits = value[2:] if _has_hex_prefix(value) else value
    if len(digits) % 2:
        digits = "0" + digits
    _check_hex_digits(digits)
    raw = bytes.fromhex(digits)[-size:]
    return "0x" + raw.rjust(size, b"\x00").hex()


def hex_to_address(value: str) -> str:
    """Normalise hex text to a lower-case 20-byte address.

    Longer input keeps its last 20 bytes; shorter input is left-padded with zeros.
    """
    return _to_fixed_hex(value, ADDRESS_LENGTH)


def hex_to_hash(value: str) -> str:
    """Normalise hex text to a lower-case 32-byte hash."""
    return _to_fixed_hex(value, HASH_LENGTH)


def to_block_num_arg(number: Optional[int]) -> str:
    """Render a block number the way the node expects it in call arguments."""
    if number is None:
        return "latest"
    if number >= 0:
        return encode_big(number)
    return _NAMED_BLOCKS.get(number, f"<invalid {number}>")


def to_filter_arg(query: FilterQuery) -> dict[str, Any]:
    """Build the argument object of an ``eth_getLogs`` request."""
    arg: dict[str, Any] = {
        "address": None if query.addresses is None else list(query.addresses),
        "topics": None
        if query.topics is None
        else [None if topic is None else list(topic) for topic in query.topics],
    }
    if query.block_hash is not None:
        if query.from_block is not None or query.to_block is not None:
            raise ValueError("cannot specify both BlockHash and FromBlock/ToBlock")
        arg["blockHash"] = query.block_hash
    else:
        arg["fromBlock"] = (
            "0x0" if query.from_block is None else to_block_num_arg(query.from_block)
        )
        arg["toBlock"] = to_block_num_arg(query.to_block)
    return arg
"""Data types exchanged with the node: call messages, headers, blocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from .util import (
    ZERO_ADDRESS,
    ZERO_HASH,
    decode_big,
    decode_bytes,
    encode_big,
    encode_bytes,
    hex_to_address,
    hex_to_hash,
)

EMPTY_UNCLE_HASH = "0x1dcc4de8dec75d7aab85b567b6ccd41ad312451b948a7413f0a142fd40d49347"
EMPTY_TXS_HASH = "0x56e81f171bcc55a6ff8345e692c0f86e5b48e01b996cadc001622fb5e363b421"

BLOOM_LENGTH = 256
NONCE_LENGTH = 8


def _jsonable(value: Any) -> Any:
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return value
    if isinstance(value, int):
        return encode_big(value)
    if isinstance(value, (bytes, bytearray)):
        return encode_bytes(bytes(value))
    if isinstance(value, Mapping):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


@dataclass
class CallMsg:
    """A message call, optionally carrying EIP-712 metadata."""

    from_: str = ZERO_ADDRESS
    to: Optional[str] = None
    gas: int = 0
    gas_price: Optional[int] = None
    gas_fee_cap: Optional[int] = None
    gas_tip_cap: Optional[int] = None
    value: Optional[int] = None
    data: bytes = b""
    meta: Optional[Mapping[str, Any]] = None

    def to_json(self) -> dict[str, Any]:
        """Render the message as a JSON-RPC call object."""
        arg: dict[str, Any] = {"from": self.from_, "to": self.to}
        if self.data:
            arg["data"] = encode_bytes(self.data)
        if self.value is not None:
            arg["value"] = encode_big(self.value)
        if self.gas:
            arg["gas"] = encode_big(self.gas)
        if self.gas_price is not None:
            arg["gasPrice"] = encode_big(self.gas_price)
        if self.gas_fee_cap is not None:
            arg["maxFeePerGas"] = encode_big(self.gas_fee_cap)
        if self.gas_tip_cap is not None:
            arg["maxPriorityFeePerGas"] = encode_big(self.gas_tip_cap)
        if self.meta is not None:
            arg["eip712Meta"] = _jsonable(self.meta)
        return arg


@dataclass
class BlockRange:
    """The first and last L2 block of an L1 batch."""

    beginning: Optional[int]
    end: Optional[int]

    @classmethod
    def from_json(cls, data: Sequence[Optional[str]]) -> "BlockRange":
        if not isinstance(data, (list, tuple)) or len(data) != 2:
            raise ValueError("block range must be a list of two hex numbers")
        first, last = (None if item is None else decode_big(item) for item in data)
        return cls(beginning=first, end=last)


def _hash(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return ZERO_HASH if value is None else hex_to_hash(value)


def _big(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    return None if value is None else decode_big(value)


def _uint64(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    number = decode_big(value)
    if number >= 1 << 64:
        raise ValueError(f"{key}: hex number > 64 bits")
    return number


def _fixed_bytes(data: Mapping[str, Any], key: str, size: int) -> bytes:
    value = data.get(key)
    if value is None:
        return bytes(size)
    raw = decode_bytes(value)
    if len(raw) != size:
        raise ValueError(f"{key}: expected {size} bytes, got {len(raw)}")
    return raw


@dataclass
class Header:
    """A block header."""

    parent_hash: str = ZERO_HASH
    uncle_hash: str = ZERO_HASH
    coinbase: str = ZERO_ADDRESS
    root: str = ZERO_HASH
    tx_hash: str = ZERO_HASH
    receipt_hash: str = ZERO_HASH
    bloom: bytes = bytes(BLOOM_LENGTH)
    difficulty: Optional[int] = None
    number: Optional[int] = None
    gas_limit: int = 0
    gas_used: int = 0
    time: int = 0
    extra: bytes = b""
    mix_digest: str = ZERO_HASH
    nonce: bytes = bytes(NONCE_LENGTH)
    base_fee: Optional[int] = None
    excess_data_gas: Optional[int] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Header":
        miner = data.get("miner")
        extra = data.get("extraData")
        return cls(
            parent_hash=_hash(data, "parentHash"),
            uncle_hash=_hash(data, "sha3Uncles"),
            coinbase=ZERO_ADDRESS if miner is None else hex_to_address(miner),
            root=_hash(data, "stateRoot"),
            tx_hash=_hash(data, "transactionsRoot"),
            receipt_hash=_hash(data, "receiptsRoot"),
            bloom=_fixed_bytes(data, "logsBloom", BLOOM_LENGTH),
            difficulty=_big(data, "difficulty"),
            number=_big(data, "number"),
            gas_limit=_uint64(data, "gasLimit"),
            gas_used=_uint64(data, "gasUsed"),
            time=_uint64(data, "timestamp"),
            extra=b"" if extra is None else decode_bytes(extra),
            mix_digest=_hash(data, "mixHash"),
            nonce=_fixed_bytes(data, "nonce", NONCE_LENGTH),
            base_fee=_big(data, "baseFeePerGas"),
            excess_data_gas=_big(data, "excessDataGas"),
        )


def check_block_lists(data: Mapping[str, Any]) -> None:
    """Check that the uncle and transaction lists agree with the header roots."""
    uncles = data.get("uncles") or []
    transactions = data.get("transactions") or []
    uncle_hash = _hash(data, "sha3Uncles")
    tx_hash = _hash(data, "transactionsRoot")
    if uncle_hash == EMPTY_UNCLE_HASH and uncles:
        raise ValueError(
            "server returned non-empty uncle list but block header indicates no uncles"
        )
    if uncle_hash != EMPTY_UNCLE_HASH and not uncles:
        raise ValueError("server returned empty uncle list but block header indicates uncles")
    if tx_hash == EMPTY_TXS_HASH and transactions:
        raise ValueError(
            "server returned non-empty transaction list but block header indicates no transactions"
        )


@dataclass
class Block:
    """A full L2 block with its batch information."""

    header: Header
    hash: str
    uncles: list[Header] = field(default_factory=list)
    transactions: list[dict] = field(default_factory=list)
    size: Optional[int] = None
    total_difficulty: Optional[int] = None
    seal_fields: list = field(default_factory=list)
    l1_batch_number: Optional[int] = None
    l1_batch_timestamp: Optional[int] = None

    @property
    def number(self) -> Optional[int]:
        return self.header.number

    @classmethod
    def from_json(
        cls, data: Mapping[str, Any], uncles: Sequence[Header] = ()
    ) -> "Block":
        block_hash = data.get("hash")
        if block_hash is None:
            raise ValueError("block response has no hash")
        return cls(
            header=Header.from_json(data),
            hash=hex_to_hash(block_hash),
            uncles=list(uncles),
            transactions=list(data.get("transactions") or []),
            size=_big(data, "size"),
            total_difficulty=_big(data, "totalDifficulty"),
            seal_fields=list(data.get("sealFields") or []),
            l1_batch_number=_big(data, "l1BatchNumber"),
            l1_batch_timestamp=_big(data, "l1BatchTimestamp"),
        )
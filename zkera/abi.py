"""Contract ABI encoding: selectors, topics and argument (de)serialisation."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from Crypto.Hash import keccak

from .util import decode_bytes

WORD = 32

_INT_RE = re.compile(r"(u?int)(\d*)")
_FIXED_BYTES_RE = re.compile(r"bytes(\d+)")


class AbiError(ValueError):
    """A value or a byte string does not fit the ABI type it is used with."""


def keccak256(data: bytes) -> bytes:
    """Return the Keccak-256 digest of ``data``."""
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


def function_selector(signature: str) -> bytes:
    """Return the 4-byte selector of a function signature such as ``f(uint256)``."""
    return keccak256(signature.encode("ascii"))[:4]


def event_topic(signature: str) -> str:
    """Return the topic hash of an event signature as 0x-prefixed hex."""
    return "0x" + keccak256(signature.encode("ascii")).hex()


@dataclass(frozen=True)
class _AbiType:
    kind: str
    size: int = 0
    elem: Optional["_AbiType"] = None
    length: Optional[int] = None
    components: tuple = ()

    @property
    def dynamic(self) -> bool:
        if self.kind in ("bytes", "string"):
            return True
        if self.kind == "array":
            return self.length is None or self.elem.dynamic
        if self.kind == "tuple":
            return any(component.dynamic for component in self.components)
        return False

    @property
    def head_size(self) -> int:
        """Size of the in-place encoding of a static type."""
        if self.kind == "array" and not self.dynamic:
            return self.length * self.elem.head_size
        if self.kind == "tuple" and not self.dynamic:
            return sum(component.head_size for component in self.components)
        return WORD


def _split_components(inner: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in inner:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise AbiError(f"abi: unbalanced parentheses in {inner!r}")
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    if depth:
        raise AbiError(f"abi: unbalanced parentheses in {inner!r}")
    parts.append("".join(current))
    return parts


@functools.lru_cache(maxsize=256)
def _parse(text: str) -> _AbiType:
    text = text.strip()
    if not text:
        raise AbiError("abi: empty type")
    if text.endswith("]"):
        start = text.rfind("[")
        if start <= 0:
            raise AbiError(f"abi: invalid type {text!r}")
        inner = text[start + 1 : -1]
        if inner and not inner.isdigit():
            raise AbiError(f"abi: invalid array length in {text!r}")
        length = int(inner) if inner else None
        return _AbiType("array", elem=_parse(text[:start]), length=length)
    if text.startswith("(") and text.endswith(")"):
        inner = text[1:-1]
        if not inner.strip():
            return _AbiType("tuple", components=())
        return _AbiType(
            "tuple", components=tuple(_parse(part) for part in _split_components(inner))
        )
    if text in ("address", "bool", "bytes", "string"):
        return _AbiType(text)
    match = _INT_RE.fullmatch(text)
    if match:
        size = int(match.group(2)) if match.group(2) else 256
        if size == 0 or size > 256 or size % 8:
            raise AbiError(f"abi: unsupported arg type: {text}")
        return _AbiType(match.group(1), size=size)
    match = _FIXED_BYTES_RE.fullmatch(text)
    if match:
        size = int(match.group(1))
        if not 1 <= size <= 32:
            raise AbiError(f"abi: unsupported arg type: {text}")
        return _AbiType("fixed_bytes", size=size)
    raise AbiError(f"abi: unsupported arg type: {text}")


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return decode_bytes(value)
        except ValueError as exc:
            raise AbiError(f"abi: invalid hex value {value!r}") from exc
    raise AbiError(f"abi: cannot use {type(value).__name__} as bytes")


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise AbiError(f"abi: cannot use {type(value).__name__} as integer")
    return value


def _pad_right(data: bytes) -> bytes:
    remainder = len(data) % WORD
    return data + bytes(WORD - remainder) if remainder else data


def _encode(abi_type: _AbiType, value: Any) -> bytes:
    kind = abi_type.kind
    if kind == "uint":
        number = _as_int(value)
        if not 0 <= number < 1 << abi_type.size:
            raise AbiError(f"abi: value {number} out of range for uint{abi_type.size}")
        return number.to_bytes(WORD, "big")
    if kind == "int":
        number = _as_int(value)
        bound = 1 << (abi_type.size - 1)
        if not -bound <= number < bound:
            raise AbiError(f"abi: value {number} out of range for int{abi_type.size}")
        return (number % (1 << 256)).to_bytes(WORD, "big")
    if kind == "address":
        raw = _as_bytes(value)
        if len(raw) != 20:
            raise AbiError(f"abi: address must be 20 bytes, got {len(raw)}")
        return raw.rjust(WORD, b"\x00")
    if kind == "bool":
        if not isinstance(value, bool):
            raise AbiError(f"abi: cannot use {type(value).__name__} as bool")
        return int(value).to_bytes(WORD, "big")
    if kind == "fixed_bytes":
        raw = _as_bytes(value)
        if len(raw) != abi_type.size:
            raise AbiError(
                f"abi: bytes{abi_type.size} value must be {abi_type.size} bytes, got {len(raw)}"
            )
        return raw.ljust(WORD, b"\x00")
    if kind in ("bytes", "string"):
        if kind == "string":
            if not isinstance(value, str):
                raise AbiError(f"abi: cannot use {type(value).__name__} as string")
            raw = value.encode("utf-8")
        else:
            raw = _as_bytes(value)
        return len(raw).to_bytes(WORD, "big") + _pad_right(raw)
    if kind == "array":
        items = list(value)
        if abi_type.length is not None and len(items) != abi_type.length:
            raise AbiError(
                f"abi: expected array of length {abi_type.length}, got {len(items)}"
            )
        body = _encode_sequence([abi_type.elem] * len(items), items)
        if abi_type.length is None:
            return len(items).to_bytes(WORD, "big") + body
        return body
    return _encode_sequence(list(abi_type.components), list(value))


def _encode_sequence(types: Sequence[_AbiType], values: Sequence[Any]) -> bytes:
    if len(types) != len(values):
        raise AbiError(f"abi: expected {len(types)} values, got {len(values)}")
    offset = sum(WORD if t.dynamic else t.head_size for t in types)
    heads: list[bytes] = []
    tails: list[bytes] = []
    for abi_type, value in zip(types, values):
        encoded = _encode(abi_type, value)
        if abi_type.dynamic:
            heads.append(offset.to_bytes(WORD, "big"))
            tails.append(encoded)
            offset += len(encoded)
        else:
            heads.append(encoded)
    return b"".join(heads + tails)


def encode_abi(types: Sequence[str], values: Sequence[Any]) -> bytes:
    """Encode ``values`` as the ABI argument tuple described by ``types``."""
    return _encode_sequence([_parse(t) for t in types], list(values))


def _word(data: bytes, pos: int) -> bytes:
    if pos < 0 or pos + WORD > len(data):
        raise AbiError(
            f"abi: cannot marshal in to go type: length insufficient {len(data)} "
            f"require {pos + WORD}"
        )
    return data[pos : pos + WORD]


def _read_uint(data: bytes, pos: int) -> int:
    return int.from_bytes(_word(data, pos), "big")


def _decode(abi_type: _AbiType, data: bytes, pos: int) -> Any:
    kind = abi_type.kind
    if kind == "uint":
        number = _read_uint(data, pos)
        if number >= 1 << abi_type.size:
            raise AbiError(f"abi: value out of range for uint{abi_type.size}")
        return number
    if kind == "int":
        number = int.from_bytes(_word(data, pos), "big", signed=True)
        bound = 1 << (abi_type.size - 1)
        if not -bound <= number < bound:
            raise AbiError(f"abi: value out of range for int{abi_type.size}")
        return number
    if kind == "address":
        return "0x" + _word(data, pos)[12:].hex()
    if kind == "bool":
        word = _word(data, pos)
        if any(word[:-1]) or word[-1] > 1:
            raise AbiError("abi: improperly encoded boolean value")
        return word[-1] == 1
    if kind == "fixed_bytes":
        return _word(data, pos)[: abi_type.size]
    if kind in ("bytes", "string"):
        length = _read_uint(data, pos)
        start = pos + WORD
        if start + length > len(data):
            raise AbiError(
                f"abi: cannot marshal in to go type: length insufficient {len(data)} "
                f"require {start + length}"
            )
        raw = data[start : start + length]
        if kind == "string":
            try:
                return raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise AbiError("abi: string is not valid UTF-8") from exc
        return raw
    if kind == "array":
        if abi_type.length is None:
            count = _read_uint(data, pos)
            start = pos + WORD
        else:
            count = abi_type.length
            start = pos
        per_item = WORD if abi_type.elem.dynamic else abi_type.elem.head_size
        if start + count * per_item > len(data):
            raise AbiError(
                f"abi: cannot marshal in to go array: length insufficient {len(data)} "
                f"require {start + count * per_item}"
            )
        return _decode_sequence([abi_type.elem] * count, data, start)
    return tuple(_decode_sequence(list(abi_type.components), data, pos))


def _decode_sequence(types: Sequence[_AbiType], data: bytes, base: int) -> list:
    values = []
    pos = base
    for abi_type in types:
        if abi_type.dynamic:
            offset = _read_uint(data, pos)
            if offset > len(data):
                raise AbiError(f"abi: offset {offset} beyond data of length {len(data)}")
            values.append(_decode(abi_type, data, base + offset))
            pos += WORD
        else:
            values.append(_decode(abi_type, data, pos))
            pos += abi_type.head_size
    return values


def decode_abi(types: Sequence[str], data: bytes) -> tuple:
    """Decode ABI-encoded ``data`` into a tuple of values of ``types``."""
    parsed = [_parse(t) for t in types]
    data = bytes(data)
    if parsed and not data:
        raise AbiError("abi: attempting to unmarshal an empty string while arguments are expected")
    return tuple(_decode_sequence(parsed, data, 0))
"""Call data for the paymaster flow interface: ``approvalBased`` and ``general``."""

from __future__ import annotations

from typing import Union

from .abi import AbiError, decode_abi, encode_abi, function_selector

APPROVAL_BASED_SIGNATURE = "approvalBased(address,uint256,bytes)"
GENERAL_SIGNATURE = "general(bytes)"

APPROVAL_BASED_SELECTOR = function_selector(APPROVAL_BASED_SIGNATURE)
GENERAL_SELECTOR = function_selector(GENERAL_SIGNATURE)

_APPROVAL_BASED_TYPES = ("address", "uint256", "bytes")
_GENERAL_TYPES = ("bytes",)

BytesLike = Union[bytes, bytearray, str]


def _strip_selector(data: bytes, selector: bytes, name: str) -> bytes:
    data = bytes(data)
    if len(data) < 4:
        raise AbiError("abi: call data too short to hold a method selector")
    if data[:4] != selector:
        raise AbiError(f"abi: call data is not a call of {name}")
    return data[4:]


def encode_approval_based(
    token: BytesLike, min_allowance: int, inner_input: BytesLike
) -> bytes:
    """Build the paymaster input of ``approvalBased(token, minAllowance, innerInput)``."""
    return APPROVAL_BASED_SELECTOR + encode_abi(
        _APPROVAL_BASED_TYPES, [token, min_allowance, inner_input]
    )


def encode_general(input: BytesLike) -> bytes:
    """Build the paymaster input of ``general(input)``."""
    return GENERAL_SELECTOR + encode_abi(_GENERAL_TYPES, [input])


def decode_approval_based(data: bytes) -> tuple[str, int, bytes]:
    """Split ``approvalBased`` call data into token address, allowance and inner input."""
    body = _strip_selector(data, APPROVAL_BASED_SELECTOR, "approvalBased")
    token, min_allowance, inner_input = decode_abi(_APPROVAL_BASED_TYPES, body)
    return token, min_allowance, inner_input


def decode_general(data: bytes) -> bytes:
    """Return the input carried by ``general`` call data."""
    body = _strip_selector(data, GENERAL_SELECTOR, "general")
    (value,) = decode_abi(_GENERAL_TYPES, body)
    return value
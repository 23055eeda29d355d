import pytest

from zkera.abi import AbiError
from zkera.paymaster_flow import (
    APPROVAL_BASED_SELECTOR,
    GENERAL_SELECTOR,
    decode_approval_based,
    decode_general,
    encode_approval_based,
    encode_general,
)

TOKEN = "0x" + "ab" * 20


def test_selectors_match_contract_methods():
    assert APPROVAL_BASED_SELECTOR.hex() == "949431dc"
    assert GENERAL_SELECTOR.hex() == "8c5a3445"


def test_encode_approval_based_starts_with_selector():
    data = encode_approval_based(TOKEN, 1, b"")
    assert data[:4] == bytes.fromhex("949431dc")


def test_encode_general_starts_with_selector():
    data = encode_general(b"\x01\x02")
    assert data[:4] == bytes.fromhex("8c5a3445")


def test_encode_general_is_word_aligned_after_selector():
    data = encode_general(b"x" * 33)
    assert (len(data) - 4) % 32 == 0


@pytest.mark.parametrize("payload", [b"", b"\x00", b"hello", bytes(range(100))])
def test_general_round_trip(payload):
    assert decode_general(encode_general(payload)) == payload


def test_general_accepts_hex_input():
    assert decode_general(encode_general("0xdeadbeef")) == bytes.fromhex("deadbeef")


@pytest.mark.parametrize(
    "allowance, inner",
    [(0, b""), (1, b"\x01"), ((1 << 256) - 1, b"inner data that spans more than one word")],
)
def test_approval_based_round_trip(allowance, inner):
    data = encode_approval_based(TOKEN, allowance, inner)
    token, min_allowance, inner_input = decode_approval_based(data)
    assert token == TOKEN
    assert min_allowance == allowance
    assert inner_input == inner


def test_approval_based_token_is_lowercased_on_decode():
    mixed = "0x" + "AB" * 20
    token, _, _ = decode_approval_based(encode_approval_based(mixed, 5, b""))
    assert token == TOKEN


def test_approval_based_rejects_negative_allowance():
    with pytest.raises(AbiError):
        encode_approval_based(TOKEN, -1, b"")


def test_approval_based_rejects_short_address():
    with pytest.raises(AbiError):
        encode_approval_based("0x1234", 1, b"")


def test_decode_general_rejects_other_selector():
    data = encode_approval_based(TOKEN, 1, b"")
    with pytest.raises(AbiError):
        decode_general(data)


def test_decode_approval_based_rejects_other_selector():
    with pytest.raises(AbiError):
        decode_approval_based(encode_general(b"abc"))


def test_decode_rejects_too_short_data():
    with pytest.raises(AbiError):
        decode_general(b"\x8c\x5a")


def test_decode_rejects_truncated_body():
    data = encode_general(b"hello world")
    with pytest.raises(AbiError):
        decode_general(data[:40])
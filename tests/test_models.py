import pytest

from zkera.models import (
    BLOOM_LENGTH,
    EMPTY_TXS_HASH,
    EMPTY_UNCLE_HASH,
    Block,
    BlockRange,
    CallMsg,
    Header,
    check_block_lists,
)
from zkera.util import ZERO_ADDRESS, ZERO_HASH, decode_big, decode_bytes, hex_to_address

MINER = "0x" + "11" * 20
BLOCK_HASH = "0x" + "22" * 32
PARENT_HASH = "0x" + "33" * 32


def _sample_block(**overrides):
    data = {
        "parentHash": PARENT_HASH,
        "sha3Uncles": EMPTY_UNCLE_HASH,
        "miner": MINER,
        "stateRoot": ZERO_HASH,
        "transactionsRoot": EMPTY_TXS_HASH,
        "receiptsRoot": ZERO_HASH,
        "logsBloom": "0x" + "00" * BLOOM_LENGTH,
        "difficulty": "0x0",
        "number": "0x2a",
        "gasLimit": "0x3b9aca00",
        "gasUsed": "0x5208",
        "timestamp": "0x64",
        "extraData": "0x",
        "mixHash": ZERO_HASH,
        "nonce": "0x0000000000000000",
        "baseFeePerGas": "0xee6b280",
        "uncles": [],
        "hash": BLOCK_HASH,
        "l1BatchNumber": "0x7",
        "l1BatchTimestamp": "0x65",
        "totalDifficulty": "0x0",
        "size": "0x0",
        "sealFields": [],
        "transactions": [],
    }
    data.update(overrides)
    return data


def test_call_msg_minimal():
    assert CallMsg().to_json() == {"from": ZERO_ADDRESS, "to": None}


def test_call_msg_full():
    msg = CallMsg(
        from_=MINER,
        to=ZERO_ADDRESS,
        gas=21000,
        gas_price=5,
        gas_fee_cap=6,
        gas_tip_cap=1,
        value=10,
        data=b"\xab",
        meta={"gasPerPubdata": 800, "factoryDeps": [b"\x01"]},
    )
    arg = msg.to_json()
    assert arg["from"] == MINER
    assert arg["data"] == "0xab"
    assert decode_big(arg["gas"]) == 21000
    assert decode_big(arg["gasPrice"]) == 5
    assert decode_big(arg["maxFeePerGas"]) == 6
    assert decode_big(arg["maxPriorityFeePerGas"]) == 1
    assert decode_big(arg["value"]) == 10
    assert decode_big(arg["eip712Meta"]["gasPerPubdata"]) == 800
    assert arg["eip712Meta"]["factoryDeps"] == ["0x01"]


def test_call_msg_omits_zero_gas_and_empty_data():
    arg = CallMsg(value=0).to_json()
    assert "gas" not in arg
    assert "data" not in arg
    assert arg["value"] == "0x0"


def test_block_range_from_json():
    result = BlockRange.from_json(["0x1", "0x5"])
    assert (result.beginning, result.end) == (1, 5)


@pytest.mark.parametrize("data", [["0x1"], "0x1", ["0x1", "0x2", "0x3"]])
def test_block_range_bad_shape(data):
    with pytest.raises(ValueError):
        BlockRange.from_json(data)


def test_header_from_json():
    data = _sample_block()
    header = Header.from_json(data)
    assert header.parent_hash == PARENT_HASH
    assert header.coinbase == hex_to_address(MINER)
    assert header.number == decode_big(data["number"])
    assert header.gas_limit == decode_big(data["gasLimit"])
    assert header.time == decode_big(data["timestamp"])
    assert header.base_fee == decode_big(data["baseFeePerGas"])
    assert header.bloom == decode_bytes(data["logsBloom"])
    assert header.extra == b""
    assert header.excess_data_gas is None


def test_header_defaults_for_missing_fields():
    header = Header.from_json({})
    assert header.parent_hash == ZERO_HASH
    assert header.number is None
    assert header.gas_used == 0
    assert len(header.bloom) == BLOOM_LENGTH


def test_header_rejects_short_bloom():
    with pytest.raises(ValueError):
        Header.from_json({"logsBloom": "0x00"})


def test_header_rejects_oversized_uint64():
    with pytest.raises(ValueError):
        Header.from_json({"gasLimit": "0x1" + "0" * 16})


def test_block_from_json():
    data = _sample_block(transactions=[{"hash": BLOCK_HASH}])
    uncle = Header.from_json({"number": "0x1"})
    block = Block.from_json(data, [uncle])
    assert block.hash == BLOCK_HASH
    assert block.number == decode_big(data["number"])
    assert block.l1_batch_number == decode_big(data["l1BatchNumber"])
    assert block.l1_batch_timestamp == decode_big(data["l1BatchTimestamp"])
    assert block.uncles == [uncle]
    assert block.transactions == [{"hash": BLOCK_HASH}]


def test_block_requires_hash():
    with pytest.raises(ValueError, match="no hash"):
        Block.from_json(_sample_block(hash=None))


def test_check_lists_consistent_block_passes_through_from_json():
    data = _sample_block()
    check_block_lists(data)
    assert Block.from_json(data).uncles == []


def test_check_lists_unexpected_uncles():
    with pytest.raises(ValueError, match="non-empty uncle list"):
        check_block_lists(_sample_block(uncles=[BLOCK_HASH]))


def test_check_lists_missing_uncles():
    with pytest.raises(ValueError, match="empty uncle list but block header indicates uncles"):
        check_block_lists(_sample_block(sha3Uncles=ZERO_HASH))


def test_check_lists_unexpected_transactions():
    with pytest.raises(ValueError, match="non-empty transaction list"):
        check_block_lists(_sample_block(transactions=[{"hash": BLOCK_HASH}]))
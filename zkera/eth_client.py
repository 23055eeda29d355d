"""Client for the ``eth_`` JSON-RPC methods of a zkSync Era node."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from .models import Block, CallMsg, Header, check_block_lists
from .rpc import BatchElem, NotFoundError, RpcClient, RpcError
from .util import (
    FilterQuery,
    decode_big,
    decode_bytes,
    encode_big,
    encode_bytes,
    hex_to_address,
    hex_to_hash,
    to_block_num_arg,
    to_filter_arg,
)

MAX_PRIORITY_FEE_PER_GAS = 100_000_000
DEFAULT_POLL_INTERVAL = 1.0
BLOCK_NUMBER_FINALIZED = "finalized"


@contextmanager
def _failing_as(action: str) -> Iterator[None]:
    """Prefix RPC errors raised inside the block with the failed action."""
    try:
        yield
    except RpcError as exc:
        raise RpcError(f"{action}: {exc.message}", exc.code, exc.data) from exc


def _deadline(timeout: Optional[float]) -> Optional[float]:
    return None if timeout is None else time.monotonic() + timeout


def _remaining(deadline: Optional[float]) -> Optional[float]:
    return None if deadline is None else max(0.0, deadline - time.monotonic())


def _expired(deadline: Optional[float]) -> bool:
    return deadline is not None and time.monotonic() >= deadline


class EthClient:
    """Ethereum-style RPC methods of a node, adjusted to the L2 response formats."""

    def __init__(
        self,
        rpc: RpcClient,
        *,
        max_priority_fee_per_gas: int = MAX_PRIORITY_FEE_PER_GAS,
    ):
        self.rpc = rpc
        self.max_priority_fee_per_gas = max_priority_fee_per_gas

    def __enter__(self) -> "EthClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying RPC connection."""
        self.rpc.close()

    def chain_id(self) -> int:
        """Return the chain ID used for transaction replay protection."""
        return decode_big(self.rpc.call("eth_chainId"))

    def block_by_hash(self, hash: str) -> Block:
        """Return the full block with the given hash."""
        return self._get_block("eth_getBlockByHash", hash, True)

    def block_by_number(self, number: Optional[int]) -> Block:
        """Return a full block by number; ``None`` means the latest block."""
        return self._get_block("eth_getBlockByNumber", to_block_num_arg(number), True)

    def block_number(self) -> int:
        """Return the most recent block number."""
        return decode_big(self.rpc.call("eth_blockNumber"))

    def peer_count(self) -> int:
        """Return the number of p2p peers reported by the node."""
        return decode_big(self.rpc.call("net_peerCount"))

    def header_by_hash(self, hash: str) -> Header:
        """Return the header of the block with the given hash."""
        return self._get_header("eth_getBlockByHash", hash)

    def header_by_number(self, number: Optional[int]) -> Header:
        """Return a block header by number; ``None`` means the latest block."""
        return self._get_header("eth_getBlockByNumber", to_block_num_arg(number))

    def transaction_by_hash(self, hash: str) -> tuple[dict, bool]:
        """Return the transaction and whether it is still pending."""
        with _failing_as("failed to query eth_getTransactionByHash"):
            tx = self.rpc.call("eth_getTransactionByHash", hash)
        if tx is None:
            raise NotFoundError()
        return tx, tx.get("blockHash") is None

    def transaction_sender(self, tx: Mapping[str, Any], block: str, index: int) -> str:
        """Return the sender of ``tx``, included in ``block`` at ``index``."""
        meta = self.rpc.call(
            "eth_getTransactionByBlockHashAndIndex", block, encode_big(index)
        )
        meta_hash = None if meta is None else meta.get("hash")
        tx_hash = tx.get("hash")
        if meta_hash is None or tx_hash is None or hex_to_hash(meta_hash) != hex_to_hash(tx_hash):
            raise ValueError("wrong inclusion block/index")
        sender = meta.get("from")
        return hex_to_address(sender) if sender is not None else hex_to_address("0x")

    def transaction_count(self, block_hash: str) -> int:
        """Return the number of transactions in the given block."""
        return decode_big(self.rpc.call("eth_getBlockTransactionCountByHash", block_hash))

    def transaction_in_block(self, block_hash: str, index: int) -> dict:
        """Return the transaction at ``index`` in the given block."""
        tx = self.rpc.call(
            "eth_getTransactionByBlockHashAndIndex", block_hash, encode_big(index)
        )
        if tx is None:
            raise NotFoundError()
        return tx

    def transaction_receipt(self, tx_hash: str) -> dict:
        """Return the receipt of a transaction; pending ones have none."""
        with _failing_as("failed to query eth_getTransactionReceipt"):
            receipt = self.rpc.call("eth_getTransactionReceipt", tx_hash)
        if receipt is None:
            raise NotFoundError()
        return receipt

    def network_id(self) -> int:
        """Return the network ID."""
        version = self.rpc.call("net_version")
        try:
            return int(str(version), 10)
        except ValueError as exc:
            raise ValueError(f"invalid net_version result {version!r}") from exc

    def balance_at(self, account: str, block_number: Optional[int] = None) -> int:
        """Return the wei balance of ``account`` at a block (latest if ``None``)."""
        return decode_big(
            self.rpc.call("eth_getBalance", account, to_block_num_arg(block_number))
        )

    def storage_at(self, account: str, key: str, block_number: Optional[int] = None) -> bytes:
        """Return the storage value under ``key`` of ``account``."""
        return decode_bytes(
            self.rpc.call("eth_getStorageAt", account, key, to_block_num_arg(block_number))
        )

    def code_at(self, account: str, block_number: Optional[int] = None) -> bytes:
        """Return the contract code of ``account``."""
        return decode_bytes(
            self.rpc.call("eth_getCode", account, to_block_num_arg(block_number))
        )

    def nonce_at(self, account: str, block_number: Optional[int] = None) -> int:
        """Return the nonce of ``account``."""
        return decode_big(
            self.rpc.call("eth_getTransactionCount", account, to_block_num_arg(block_number))
        )

    def filter_logs(self, query: FilterQuery) -> list[dict]:
        """Run a log filter and return every matching log."""
        return list(self.rpc.call("eth_getLogs", to_filter_arg(query)) or [])

    def pending_balance_at(self, account: str) -> int:
        """Return the wei balance of ``account`` in the pending state."""
        return decode_big(self.rpc.call("eth_getBalance", account, "pending"))

    def pending_nonce_at(self, account: str) -> int:
        """Return the nonce to use for the next transaction of ``account``."""
        return decode_big(self.rpc.call("eth_getTransactionCount", account, "pending"))

    def call_contract(self, msg: CallMsg, block_number: Optional[int] = None) -> bytes:
        """Execute a message call at a block without mining it."""
        return decode_bytes(
            self.rpc.call("eth_call", msg.to_json(), to_block_num_arg(block_number))
        )

    def call_contract_at_hash(self, msg: CallMsg, block_hash: str) -> bytes:
        """Execute a message call at the block with the given hash."""
        return decode_bytes(
            self.rpc.call("eth_call", msg.to_json(), {"blockHash": block_hash})
        )

    def pending_call_contract(self, msg: CallMsg) -> bytes:
        """Execute a message call against the pending state."""
        return decode_bytes(self.rpc.call("eth_call", msg.to_json(), "pending"))

    def suggest_gas_price(self) -> int:
        """Return the currently suggested gas price."""
        return decode_big(self.rpc.call("eth_gasPrice"))

    def suggest_gas_tip_cap(self) -> int:
        """Return the priority fee per gas to offer."""
        return self.max_priority_fee_per_gas

    def estimate_gas(self, msg: CallMsg) -> int:
        """Estimate the gas needed to execute ``msg``."""
        with _failing_as("failed to query eth_estimateGas"):
            result = self.rpc.call("eth_estimateGas", msg.to_json())
        return decode_big(result)

    def send_raw_transaction(self, tx: bytes) -> str:
        """Submit a signed raw transaction and return its hash."""
        with _failing_as("failed to call eth_sendRawTransaction"):
            result = self.rpc.call("eth_sendRawTransaction", encode_bytes(tx))
        return hex_to_hash(result)

    def wait_mined(
        self,
        tx_hash: str,
        timeout: Optional[float] = None,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> dict:
        """Poll until the transaction is included in a block and return its receipt."""
        deadline = _deadline(timeout)
        while True:
            try:
                receipt = self.transaction_receipt(tx_hash)
            except (RpcError, NotFoundError, ValueError):
                receipt = None
            if receipt is not None and receipt.get("blockNumber") is not None:
                return receipt
            if _expired(deadline):
                raise TimeoutError(f"transaction {tx_hash} was not mined in time")
            time.sleep(interval)

    def wait_finalized(
        self,
        tx_hash: str,
        timeout: Optional[float] = None,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> dict:
        """Poll until the block holding the transaction is finalized."""
        deadline = _deadline(timeout)
        receipt = self.wait_mined(tx_hash, _remaining(deadline), interval)
        if receipt.get("blockNumber") is None:
            raise ValueError("empty tx block number")
        mined_at = decode_big(receipt["blockNumber"])
        while True:
            with _failing_as("failed to get finalized block"):
                head = self.rpc.call("eth_getBlockByNumber", BLOCK_NUMBER_FINALIZED, False)
            if head is None:
                raise NotFoundError("failed to get finalized block: not found")
            number = Header.from_json(head).number
            if number is not None and number >= mined_at:
                return receipt
            if _expired(deadline):
                raise TimeoutError(f"transaction {tx_hash} was not finalized in time")
            time.sleep(interval)

    def _get_header(self, method: str, block_arg: Any) -> Header:
        raw = self.rpc.call(method, block_arg, False)
        if raw is None:
            raise NotFoundError()
        return Header.from_json(raw)

    def _get_block(self, method: str, *args: Any) -> Block:
        raw = self.rpc.call(method, *args)
        if raw is None:
            raise NotFoundError()
        check_block_lists(raw)
        uncle_hashes = raw.get("uncles") or []
        uncles: list[Header] = []
        if uncle_hashes:
            block_hash = raw.get("hash")
            elems = [
                BatchElem("eth_getUncleByBlockHashAndIndex", [block_hash, encode_big(i)])
                for i in range(len(uncle_hashes))
            ]
            self.rpc.batch_call(elems)
            for i, elem in enumerate(elems):
                if elem.error is not None:
                    raise elem.error
                if elem.result is None:
                    shown = (block_hash or "")[2:]
                    raise RpcError(f"got null header for uncle {i} of block {shown}")
                uncles.append(Header.from_json(elem.result))
        return Block.from_json(raw, uncles)
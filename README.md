# zkera

A small Python library for talking to zkSync Era nodes over JSON-RPC. It also
encodes and decodes contract call data and describes the EIP-712 signing
domain.

## Installation

```
pip install zkera
```

To run the tests as well:

```
pip install "zkera[test]"
pytest
```

## Modules

- `zkera.rpc`: a plain JSON-RPC 2.0 client over HTTP.
  - `dial(url)` accepts `http` and `https` URLs only.
  - `RpcClient` provides `call(method, *args)`, `batch_call(elems)` and `close()`,
    and works as a context manager.
  - Each `BatchElem` of a batch gets its own `result` or `error`.
  - Errors reported by the node, and transport errors, raise `RpcError`.
- `zkera.eth_client`: `EthClient` wraps an `RpcClient` and covers the `eth_` and
  `net_` methods:
  - chain ID and network ID
  - blocks and headers by hash or by number
  - transactions and receipts
  - balances, storage, code and nonces
  - `filter_logs`
  - `call_contract` and its pending and at-hash forms
  - `suggest_gas_price`, `suggest_gas_tip_cap` and `estimate_gas`
  - `send_raw_transaction`
  - `wait_mined` and `wait_finalized`

  A missing block, transaction or receipt raises `NotFoundError`. The two wait
  methods poll the node at `interval` seconds and raise `TimeoutError` once the
  optional `timeout` has passed.
- `zkera.models`: `CallMsg` (with `to_json()`), `Header`, `Block`, `BlockRange`
  and `check_block_lists`. The last one rejects uncle and transaction lists that
  do not agree with the header roots.
- `zkera.util`: helpers for hex quantities and bytes (`encode_big`,
  `decode_big`, `encode_bytes`, `decode_bytes`, `hex_to_address`,
  `hex_to_hash`). It also builds call arguments (`to_block_num_arg`,
  `FilterQuery`, `to_filter_arg`).
- `zkera.abi`: `keccak256`, `function_selector`, `event_topic`, `encode_abi`
  and `decode_abi`. These cover integers, addresses, booleans, fixed and dynamic
  bytes, strings, arrays and tuples. Values that do not fit raise `AbiError`.
- `zkera.paymaster_flow`: builds and parses paymaster input for
  `approvalBased(address,uint256,bytes)` and `general(bytes)`.
- `zkera.eip712`: the `Domain` dataclass and `zksync_era_eip712_domain(chain_id)`.

## Examples

Querying a node:

```python
from zkera.rpc import dial
from zkera.eth_client import EthClient

with EthClient(dial("http://localhost:3050")) as client:
    print(client.chain_id())
    block = client.block_by_number(None)
    print(block.number, block.l1_batch_number)
```

Encoding paymaster input needs no node:

```python
from zkera.paymaster_flow import encode_general, decode_general

data = encode_general(b"")
assert decode_general(data) == b""
```

The signing domain for a chain:

```python
from zkera.eip712 import zksync_era_eip712_domain

domain = zksync_era_eip712_domain(324)
print(domain.eip712_domain())
```

## What it does not do

- It has no client for the zkSync-specific `zks_` methods, such as main
  contract address, bridge contracts, batch details, proofs, fee estimation and
  token balances.
- It does not estimate gas for transfers or withdrawals.
- It does not sign or build transactions. `send_raw_transaction` only submits
  bytes that are already signed.
- It has no subscriptions and no WebSocket transport. Only HTTP is supported.
"""JSON-RPC client, ABI encoding, paymaster call data and EIP-712 domain for zkSync Era."""

__version__ = "0.1.0"

__all__ = [
    "abi",
    "eip712",
    "eth_client",
    "models",
    "paymaster_flow",
    "rpc",
    "util",
]
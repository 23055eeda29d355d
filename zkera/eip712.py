"""EIP-712 signing domain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from Crypto.Hash import keccak

from .util import hex_to_address

DOMAIN_DEFAULT_NAME = "zkSync"
DOMAIN_DEFAULT_VERSION = "2"


def _checksum_address(address: str) -> str:
    """Return the mixed-case checksum form of an address."""
    lower = hex_to_address(address)[2:]
    digest = keccak.new(digest_bits=256, data=lower.encode("ascii")).hexdigest()
    return "0x" + "".join(
        ch.upper() if ch.isalpha() and int(nibble, 16) >= 8 else ch
        for ch, nibble in zip(lower, digest)
    )


@dataclass
class Domain:
    """The domain parameters used for EIP-712 signing."""

    name: str
    version: str
    chain_id: int
    verifying_contract: Optional[str] = None

    def eip712_type(self) -> str:
        return "EIP712Domain"

    def eip712_types(self) -> list[dict[str, str]]:
        types = [
            {"name": "name", "type": "string"},
            {"name": "version", "type": "string"},
            {"name": "chainId", "type": "uint256"},
        ]
        if self.verifying_contract is not None:
            types.append({"name": "verifyingContract", "type": "address"})
        return types

    def eip712_domain(self) -> dict[str, Any]:
        domain: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "chainId": int(self.chain_id),
        }
        if self.verifying_contract is not None:
            domain["verifyingContract"] = _checksum_address(self.verifying_contract)
        return domain


def zksync_era_eip712_domain(chain_id: int) -> Domain:
    """The default zkSync Era domain for the given chain."""
    return Domain(
        name=DOMAIN_DEFAULT_NAME,
        version=DOMAIN_DEFAULT_VERSION,
        chain_id=chain_id,
        verifying_contract=None,
    )
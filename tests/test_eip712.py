import pytest

from zkera.eip712 import (
    DOMAIN_DEFAULT_NAME,
    DOMAIN_DEFAULT_VERSION,
    Domain,
    zksync_era_eip712_domain,
)


def test_domain_type_name():
    assert zksync_era_eip712_domain(1).eip712_type() == "EIP712Domain"


def test_default_domain_values():
    domain = zksync_era_eip712_domain(270)
    assert domain.name == "zkSync"
    assert domain.version == "2"
    assert domain.chain_id == 270
    assert domain.verifying_contract is None


def test_types_without_contract():
    types = zksync_era_eip712_domain(270).eip712_types()
    assert [t["name"] for t in types] == ["name", "version", "chainId"]
    assert types[2]["type"] == "uint256"


def test_types_with_contract():
    domain = Domain("app", "1", 5, verifying_contract="0x" + "00" * 20)
    types = domain.eip712_types()
    assert types[-1] == {"name": "verifyingContract", "type": "address"}
    assert len(types) == 4


def test_domain_map_without_contract():
    assert zksync_era_eip712_domain(324).eip712_domain() == {
        "name": DOMAIN_DEFAULT_NAME,
        "version": DOMAIN_DEFAULT_VERSION,
        "chainId": 324,
    }


@pytest.mark.parametrize(
    "checksummed",
    [
        "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
        "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359",
    ],
)
def test_domain_map_checksums_contract(checksummed):
    domain = Domain("app", "1", 5, verifying_contract=checksummed.lower())
    assert domain.eip712_domain()["verifyingContract"] == checksummed


def test_checksum_is_stable_under_case():
    upper = Domain("app", "1", 5, verifying_contract="0x" + "AB" * 20).eip712_domain()
    lower = Domain("app", "1", 5, verifying_contract="0x" + "ab" * 20).eip712_domain()
    assert upper["verifyingContract"] == lower["verifyingContract"]
    assert upper["verifyingContract"].lower() == "0x" + "ab" * 20
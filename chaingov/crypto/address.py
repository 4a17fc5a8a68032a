"""
ChainGov Crypto Address Module

Account addresses are Ethereum-style 20-byte identifiers with an EIP-55
checksum. Every address that enters the governor is normalized here so
that mapping keys (receipts, latest proposals, balances) never differ by
letter case alone.
"""

from typing import Union

from eth_utils import is_address, to_checksum_address as _eth_to_checksum

from ..exceptions import InvalidAddressError
from .hashing import keccak256


def public_key_to_address(public_key) -> str:
    """
    Derive address from public key: last 20 bytes of keccak256(pubkey).

    Args:
        public_key: PublicKey instance or 64/65 raw bytes
    """
    if hasattr(public_key, 'to_bytes'):
        pub_bytes = public_key.to_bytes()
    else:
        pub_bytes = public_key

    if len(pub_bytes) == 65 and pub_bytes[0] == 0x04:
        pub_bytes = pub_bytes[1:]

    if len(pub_bytes) != 64:
        raise ValueError(f"secp256k1 public key must be 64 bytes, got {len(pub_bytes)}")
    return _eth_to_checksum(keccak256(pub_bytes)[-20:])


def is_valid_address(address: str) -> bool:
    """True for a 0x-prefixed 20-byte hex address (checksum enforced if mixed case)."""
    if not isinstance(address, str) or not address.startswith('0x'):
        return False
    return is_address(address)


def normalize_address(address: Union[str, bytes]) -> str:
    """
    Return the EIP-55 checksum form of *address*.

    Raises:
        InvalidAddressError: If *address* is not a valid address
    """
    if isinstance(address, bytes):
        if len(address) != 20:
            raise InvalidAddressError(f"Address must be 20 bytes, got {len(address)}")
        return _eth_to_checksum(address)
    if not is_valid_address(address):
        raise InvalidAddressError(f"Invalid address: {address!r}")
    return _eth_to_checksum(address)

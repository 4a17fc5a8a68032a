"""
ChainGov Crypto Hashing Module

Provides the hash functions used by governance:
- keccak256: Timelock transaction hashes, EIP-712 ballot digests, addresses
"""

from typing import Union

from eth_utils import keccak


def _to_bytes(data: Union[bytes, str]) -> bytes:
    if isinstance(data, str):
        if data.startswith('0x') or data.startswith('0X'):
            return bytes.fromhex(data[2:])
        return bytes.fromhex(data)
    return bytes(data)


def keccak256(data: Union[bytes, str]) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum standard).

    Args:
        data: Input bytes or hex string

    Returns:
        32-byte hash
    """
    return keccak(_to_bytes(data))


def keccak256_text(text: str) -> bytes:
    """Keccak-256 of a UTF-8 string (type strings, names)."""
    return keccak(text=text)


def keccak256_hex(data: Union[bytes, str]) -> str:
    """
    Compute Keccak-256 hash and return as hex string.

    Args:
        data: Input bytes or hex string

    Returns:
        Hex string with 0x prefix
    """
    return '0x' + keccak256(data).hex()

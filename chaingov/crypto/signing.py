"""
ChainGov Crypto Signing Module

Typed-data (EIP-712) signing and signer recovery using secp256k1.
"""

from .address import normalize_address
from .hashing import keccak256
from .keys import PrivateKey, PublicKey, Signature


def typed_data_hash(domain_separator: bytes, struct_hash: bytes) -> bytes:
    """EIP-712 digest: keccak256(0x19 0x01 ‖ domainSeparator ‖ structHash)."""
    return keccak256(b'\x19\x01' + domain_separator + struct_hash)


def sign_typed_data(private_key: PrivateKey, domain_separator: bytes, struct_hash: bytes) -> Signature:
    """
    Sign typed data (EIP-712 style).

    Args:
        private_key: PrivateKey to sign with
        domain_separator: EIP-712 domain separator
        struct_hash: Hash of the struct to sign

    Returns:
        Signature
    """
    return private_key.sign_msg_hash(typed_data_hash(domain_separator, struct_hash))


def recover_public_key(msg_hash: bytes, signature: Signature) -> PublicKey:
    """Recover public key from signature."""
    return PublicKey.recover_from_msg_hash(msg_hash, signature)


def verify_signature(public_key: PublicKey, msg_hash: bytes, signature: Signature) -> bool:
    return public_key.verify_msg_hash(msg_hash, signature)


def ecrecover(msg_hash: bytes, v: int, r: int, s: int) -> str:
    """
    Recover signer address from signature components.

    Mirrors Solidity's ecrecover(), except that an unrecoverable signature
    raises InvalidSignatureError instead of yielding the zero address.

    Args:
        msg_hash: 32-byte message hash
        v: Recovery parameter (27 or 28)
        r: R component
        s: S component

    Returns:
        Checksummed signer address
    """
    signature = Signature.from_vrs(v, r, s)
    return normalize_address(recover_public_key(msg_hash, signature).to_address())

"""
ChainGov Crypto Module

Cryptographic primitives used by governance:
- secp256k1 keys and signatures (off-chain ballots)
- keccak256 hashing (Timelock keys, EIP-712 digests)
- Address normalization
- ABI encoding of proposal actions
"""

from .keys import PrivateKey, PublicKey, Signature, generate_keypair
from .signing import (
    ecrecover,
    recover_public_key,
    sign_typed_data,
    typed_data_hash,
    verify_signature,
)
from .hashing import keccak256, keccak256_hex, keccak256_text
from .address import is_valid_address, normalize_address, public_key_to_address
from .abi import (
    compute_function_selector,
    decode_args,
    encode_args,
    encode_call_data,
    encode_function_args,
    encode_function_call,
    signature_arg_types,
)

__all__ = [
    # Keys
    "PrivateKey",
    "PublicKey",
    "Signature",
    "generate_keypair",
    # Signing
    "ecrecover",
    "recover_public_key",
    "sign_typed_data",
    "typed_data_hash",
    "verify_signature",
    # Hashing
    "keccak256",
    "keccak256_hex",
    "keccak256_text",
    # Address
    "is_valid_address",
    "normalize_address",
    "public_key_to_address",
    # ABI
    "compute_function_selector",
    "decode_args",
    "encode_args",
    "encode_call_data",
    "encode_function_args",
    "encode_function_call",
    "signature_arg_types",
]

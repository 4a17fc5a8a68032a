"""
ABI helpers for proposal actions.

A proposal action carries a human-readable function signature such as
``"setDelay(uint256)"`` plus ABI-encoded arguments. These helpers build the
call data the Timelock dispatches and the encodings hashed into Timelock keys.
"""

from typing import Any, List, Sequence, Tuple

from eth_abi import decode, encode

from .hashing import keccak256_text


def compute_function_selector(function_signature: str) -> bytes:
    """
    Compute the function selector (first 4 bytes of keccak256(sig)).

    Args:
        function_signature: Function signature like "transfer(address,uint256)"

    Returns:
        4-byte function selector
    """
    return keccak256_text(function_signature)[:4]


def signature_arg_types(function_signature: str) -> List[str]:
    """
    Parse argument types from a signature.

    E.g., "transfer(address,uint256)" -> ['address', 'uint256']
    """
    try:
        args_start = function_signature.index('(') + 1
        args_end = function_signature.rindex(')')
    except ValueError:
        raise ValueError(f"Malformed function signature: {function_signature!r}")
    arg_types_str = function_signature[args_start:args_end]
    if not arg_types_str:
        return []
    return [t.strip() for t in arg_types_str.split(',')]


def encode_args(arg_types: Sequence[str], args: Sequence[Any]) -> bytes:
    return encode(list(arg_types), list(args))


def decode_args(arg_types: Sequence[str], data: bytes) -> Tuple[Any, ...]:
    return decode(list(arg_types), data)


def encode_function_args(function_signature: str, *args) -> bytes:
    """ABI-encode *args* for *function_signature* (no selector)."""
    arg_types = signature_arg_types(function_signature)
    if not arg_types:
        return b''
    return encode_args(arg_types, args)


def encode_call_data(function_signature: str, data: bytes) -> bytes:
    """
    Call data for a Timelock action.

    An empty signature means *data* is already complete call data.
    """
    if not function_signature:
        return bytes(data)
    return compute_function_selector(function_signature) + bytes(data)


def encode_function_call(function_signature: str, *args) -> bytes:
    """Selector followed by the ABI-encoded arguments."""
    return encode_call_data(function_signature, encode_function_args(function_signature, *args))

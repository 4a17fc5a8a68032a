"""
Cryptography helpers: secp256k1 keys, keccak256, address handling and ABI
encoding of proposal actions.

Run with:
    pytest tests/test_crypto.py -v
"""

import pytest

from chaingov.crypto import (
    PrivateKey,
    Signature,
    compute_function_selector,
    decode_args,
    ecrecover,
    encode_args,
    encode_call_data,
    encode_function_call,
    generate_keypair,
    is_valid_address,
    keccak256,
    keccak256_hex,
    keccak256_text,
    normalize_address,
    recover_public_key,
    signature_arg_types,
    verify_signature,
)
from chaingov.exceptions import InvalidAddressError, InvalidKeyError, InvalidSignatureError


# ============================================================================
# Keys and signatures
# ============================================================================


class TestKeys:

    def test_generate_keypair(self):
        priv, pub = generate_keypair()
        assert priv.public_key == pub
        assert is_valid_address(priv.address)

    def test_known_address(self):
        # Private key 1 is the generator point; its address is well known.
        key = PrivateKey.from_int(1)
        assert key.address == "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"

    def test_hex_round_trip(self):
        key = PrivateKey.from_int(12345)
        assert PrivateKey.from_hex(key.to_hex()) == key

    def test_wrong_length(self):
        with pytest.raises(InvalidKeyError, match="32 bytes"):
            PrivateKey(b"\x01" * 31)

    def test_not_hex(self):
        with pytest.raises(InvalidKeyError):
            PrivateKey.from_hex("0xnothex")


class TestSignatures:

    def test_sign_and_recover(self):
        key = PrivateKey.from_int(42)
        msg_hash = keccak256_text("ballot")
        sig = key.sign_msg_hash(msg_hash)
        assert recover_public_key(msg_hash, sig) == key.public_key
        assert verify_signature(key.public_key, msg_hash, sig)

    def test_ecrecover_uses_27_28(self):
        key = PrivateKey.from_int(42)
        msg_hash = keccak256_text("ballot")
        v, r, s = key.sign_msg_hash(msg_hash).vrs
        assert v in (27, 28)
        assert ecrecover(msg_hash, v, r, s) == key.address

    def test_bytes_round_trip(self):
        sig = PrivateKey.from_int(7).sign_msg_hash(keccak256(b"x"))
        assert Signature.from_bytes(sig.to_bytes()).vrs == sig.vrs

    def test_wrong_length_signature(self):
        with pytest.raises(InvalidSignatureError, match="65 bytes"):
            Signature.from_bytes(b"\x00" * 64)

    def test_bad_recovery_id(self):
        with pytest.raises(InvalidSignatureError):
            Signature.from_vrs(31, 1, 1)


# ============================================================================
# Hashing and addresses
# ============================================================================


class TestHashing:

    def test_keccak_empty(self):
        assert keccak256_hex(b"") == (
            "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_hex_input(self):
        assert keccak256("0x01") == keccak256(b"\x01")


class TestAddresses:

    def test_normalize_checksums(self):
        lower = "0x7e5f4552091a69125d5dfcb7b8c2659029395bdf"
        assert normalize_address(lower) == "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"

    def test_normalize_bytes(self):
        assert normalize_address(b"\x00" * 20) == "0x" + "00" * 20

    @pytest.mark.parametrize("bad", ["", "0x1234", "7e5f4552091a69125d5dfcb7b8c2659029395bdf", b"\x00"])
    def test_invalid(self, bad):
        with pytest.raises(InvalidAddressError):
            normalize_address(bad)


# ============================================================================
# ABI
# ============================================================================


class TestAbi:

    def test_transfer_selector(self):
        assert compute_function_selector("transfer(address,uint256)").hex() == "a9059cbb"

    def test_arg_types(self):
        assert signature_arg_types("setPendingAdmin(address)") == ["address"]
        assert signature_arg_types("acceptAdmin()") == []

    def test_malformed_signature(self):
        with pytest.raises(ValueError, match="Malformed"):
            signature_arg_types("acceptAdmin")

    def test_call_data_prefixes_selector(self):
        data = encode_args(["uint256"], [5])
        assert encode_call_data("setDelay(uint256)", data) == (
            compute_function_selector("setDelay(uint256)") + data
        )

    def test_empty_signature_passes_raw_data(self):
        raw = encode_function_call("acceptAdmin()")
        assert encode_call_data("", raw) == raw

    def test_decode(self):
        data = encode_args(["address", "uint256"], ["0x" + "11" * 20, 9])
        assert decode_args(["address", "uint256"], data) == ("0x" + "11" * 20, 9)

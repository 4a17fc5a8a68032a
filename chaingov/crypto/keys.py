"""
ChainGov Crypto Keys Module

secp256k1 key management for signing ballots off chain.
"""

import secrets
from typing import Tuple, Union

from eth_keys.datatypes import PrivateKey as EthPrivateKey, PublicKey as EthPublicKey
from eth_keys.datatypes import Signature as EthSignature
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import decode_hex

from ..exceptions import InvalidKeyError, InvalidSignatureError


class PrivateKey:
    """
    secp256k1 private key.

    Wraps eth-keys PrivateKey.
    """

    def __init__(self, key_bytes: bytes):
        """
        Initialize from raw 32-byte private key.

        Raises:
            InvalidKeyError: If key bytes are invalid
        """
        if len(key_bytes) != 32:
            raise InvalidKeyError(f"Private key must be 32 bytes, got {len(key_bytes)}")

        try:
            self._key = EthPrivateKey(key_bytes)
        except ValidationError as e:
            raise InvalidKeyError(f"Invalid private key: {e}") from e

    @classmethod
    def from_hex(cls, hex_str: str) -> "PrivateKey":
        """Create from hex string (with or without 0x prefix)."""
        try:
            key_bytes = decode_hex(hex_str)
        except ValueError as e:
            raise InvalidKeyError(f"Private key is not valid hex: {e}") from e
        return cls(key_bytes)

    @classmethod
    def from_int(cls, key_int: int) -> "PrivateKey":
        return cls(key_int.to_bytes(32, byteorder='big'))

    @classmethod
    def generate(cls) -> "PrivateKey":
        """Generate a new random private key."""
        return cls(secrets.token_bytes(32))

    @property
    def public_key(self) -> "PublicKey":
        return PublicKey(self._key.public_key)

    @property
    def address(self) -> str:
        """Checksummed account address of this key."""
        return self.public_key.to_address()

    def to_bytes(self) -> bytes:
        return self._key.to_bytes()

    def to_hex(self, with_prefix: bool = True) -> str:
        hex_str = self._key.to_bytes().hex()
        return f"0x{hex_str}" if with_prefix else hex_str

    def sign_msg_hash(self, msg_hash: bytes) -> "Signature":
        """
        Sign a 32-byte message hash.

        Args:
            msg_hash: 32-byte hash to sign

        Returns:
            Signature instance
        """
        if len(msg_hash) != 32:
            raise ValueError(f"Message hash must be 32 bytes, got {len(msg_hash)}")
        return Signature(self._key.sign_msg_hash(msg_hash))

    def __repr__(self) -> str:
        return f"PrivateKey({self.to_hex()[:10]}...)"

    def __eq__(self, other) -> bool:
        if not isinstance(other, PrivateKey):
            return False
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key.to_bytes())


class PublicKey:
    """
    secp256k1 public key.
    """

    def __init__(self, key: Union[EthPublicKey, bytes]):
        if isinstance(key, EthPublicKey):
            self._key = key
        elif isinstance(key, bytes):
            if len(key) == 64:
                self._key = EthPublicKey(key)
            elif len(key) == 65 and key[0] == 0x04:
                self._key = EthPublicKey(key[1:])
            else:
                raise InvalidKeyError(f"Invalid public key length: {len(key)}")
        else:
            raise InvalidKeyError(f"Invalid public key type: {type(key)}")

    @classmethod
    def recover_from_msg_hash(cls, msg_hash: bytes, signature: "Signature") -> "PublicKey":
        """
        Recover public key from signature.

        Raises:
            InvalidSignatureError: If no key can be recovered
        """
        try:
            recovered = signature._signature.recover_public_key_from_msg_hash(msg_hash)
        except (BadSignature, ValidationError) as e:
            raise InvalidSignatureError(f"invalid signature: {e}") from e
        return cls(recovered)

    def to_bytes(self) -> bytes:
        return self._key.to_bytes()

    def to_hex(self, with_prefix: bool = True) -> str:
        hex_str = self.to_bytes().hex()
        return f"0x{hex_str}" if with_prefix else hex_str

    def to_address(self) -> str:
        """Checksummed address (last 20 bytes of keccak256 of the key)."""
        from .address import public_key_to_address
        return public_key_to_address(self)

    def verify_msg_hash(self, msg_hash: bytes, signature: "Signature") -> bool:
        try:
            return PublicKey.recover_from_msg_hash(msg_hash, signature) == self
        except InvalidSignatureError:
            return False

    def __repr__(self) -> str:
        return f"PublicKey({self.to_hex()[:18]}...)"

    def __eq__(self, other) -> bool:
        if not isinstance(other, PublicKey):
            return False
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key.to_bytes())


class Signature:
    """
    ECDSA signature (v, r, s format).
    """

    def __init__(self, signature: EthSignature):
        self._signature = signature

    @classmethod
    def from_vrs(cls, v: int, r: int, s: int) -> "Signature":
        """
        Create from v, r, s components.

        Args:
            v: Recovery parameter (27 or 28, or 0/1)

        Raises:
            InvalidSignatureError: If the components are out of range
        """
        if v >= 27:
            v -= 27
        try:
            return cls(EthSignature(vrs=(v, r, s)))
        except (BadSignature, ValidationError) as e:
            raise InvalidSignatureError(f"invalid signature: {e}") from e

    @classmethod
    def from_bytes(cls, sig_bytes: bytes) -> "Signature":
        """Create from 65-byte signature (r[32] + s[32] + v[1])."""
        if len(sig_bytes) != 65:
            raise InvalidSignatureError(f"Signature must be 65 bytes, got {len(sig_bytes)}")
        r = int.from_bytes(sig_bytes[0:32], byteorder='big')
        s = int.from_bytes(sig_bytes[32:64], byteorder='big')
        return cls.from_vrs(sig_bytes[64], r, s)

    @classmethod
    def from_hex(cls, hex_str: str) -> "Signature":
        return cls.from_bytes(decode_hex(hex_str))

    @property
    def v(self) -> int:
        """Recovery parameter (0 or 1)."""
        return self._signature.v

    @property
    def r(self) -> int:
        return self._signature.r

    @property
    def s(self) -> int:
        return self._signature.s

    @property
    def vrs(self) -> Tuple[int, int, int]:
        """(v, r, s) with v in Ethereum's 27/28 convention."""
        return (self.v + 27, self.r, self.s)

    def to_bytes(self) -> bytes:
        r_bytes = self.r.to_bytes(32, byteorder='big')
        s_bytes = self.s.to_bytes(32, byteorder='big')
        return r_bytes + s_bytes + bytes([self.v])

    def to_hex(self, with_prefix: bool = True) -> str:
        hex_str = self.to_bytes().hex()
        return f"0x{hex_str}" if with_prefix else hex_str

    def __repr__(self) -> str:
        return f"Signature(v={self.v}, r={hex(self.r)[:10]}..., s={hex(self.s)[:10]}...)"


def generate_keypair() -> Tuple[PrivateKey, PublicKey]:
    """
    Generate a new keypair.

    Returns:
        Tuple of (PrivateKey, PublicKey)
    """
    private_key = PrivateKey.generate()
    return private_key, private_key.public_key

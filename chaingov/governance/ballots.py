"""
Off-chain signed ballots (EIP-712).

A voter signs ``Ballot(uint256 proposalId,bool support)`` under a domain
bound to the governor's name, the chain id and the governor's address.
Anyone may relay the signature; the governor recovers the signer and counts
the vote exactly as if the signer had voted directly.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ..constants import BALLOT_TYPE, EIP712_DOMAIN_TYPE
from ..crypto.abi import encode_args
from ..crypto.address import normalize_address
from ..crypto.hashing import keccak256, keccak256_text
from ..crypto.keys import PrivateKey
from ..crypto.signing import ecrecover, sign_typed_data, typed_data_hash

DOMAIN_TYPEHASH = keccak256_text(EIP712_DOMAIN_TYPE)
BALLOT_TYPEHASH = keccak256_text(BALLOT_TYPE)


def domain_separator(name: str, chain_id: int, verifying_contract: str) -> bytes:
    return keccak256(encode_args(
        ["bytes32", "bytes32", "uint256", "address"],
        [DOMAIN_TYPEHASH, keccak256_text(name), chain_id, normalize_address(verifying_contract)],
    ))


def ballot_struct_hash(proposal_id: int, support: bool) -> bytes:
    return keccak256(encode_args(
        ["bytes32", "uint256", "bool"],
        [BALLOT_TYPEHASH, proposal_id, bool(support)],
    ))


def ballot_digest(
    name: str,
    chain_id: int,
    verifying_contract: str,
    proposal_id: int,
    support: bool,
) -> bytes:
    """The 32-byte hash a voter signs."""
    return typed_data_hash(
        domain_separator(name, chain_id, verifying_contract),
        ballot_struct_hash(proposal_id, support),
    )


@dataclass(frozen=True)
class Ballot:
    """A signed vote ready to be relayed."""
    proposal_id: int
    support: bool
    v: int
    r: int
    s: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proposalId": self.proposal_id,
            "support": self.support,
            "v": self.v,
            "r": hex(self.r),
            "s": hex(self.s),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ballot":
        def _int(x):
            return int(x, 0) if isinstance(x, str) else int(x)
        return cls(
            proposal_id=_int(data["proposalId"]),
            support=bool(data["support"]),
            v=_int(data["v"]),
            r=_int(data["r"]),
            s=_int(data["s"]),
        )


def sign_ballot(
    private_key: PrivateKey,
    name: str,
    chain_id: int,
    verifying_contract: str,
    proposal_id: int,
    support: bool,
) -> Ballot:
    signature = sign_typed_data(
        private_key,
        domain_separator(name, chain_id, verifying_contract),
        ballot_struct_hash(proposal_id, support),
    )
    v, r, s = signature.vrs
    return Ballot(proposal_id=proposal_id, support=bool(support), v=v, r=r, s=s)


def recover_ballot_signer(
    name: str,
    chain_id: int,
    verifying_contract: str,
    proposal_id: int,
    support: bool,
    v: int,
    r: int,
    s: int,
) -> str:
    """
    Raises:
        InvalidSignatureError: If no signer can be recovered
    """
    digest = ballot_digest(name, chain_id, verifying_contract, proposal_id, support)
    return ecrecover(digest, v, r, s)

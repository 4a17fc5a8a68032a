"""
EIP-712 ballot hashing, signing and signer recovery.
"""

import pytest
from eth_abi import encode
from eth_utils import keccak

from chaingov.exceptions import InvalidSignatureError
from chaingov.governance.ballots import (
    BALLOT_TYPEHASH,
    DOMAIN_TYPEHASH,
    Ballot,
    ballot_digest,
    ballot_struct_hash,
    domain_separator,
    recover_ballot_signer,
    sign_ballot,
)

from helpers import ALICE, ALICE_KEY, GOVERNOR_ADDRESS

NAME = "ChainGov Governor Alpha"


class TestTypeHashes:

    def test_domain_typehash(self):
        assert DOMAIN_TYPEHASH == keccak(
            text="EIP712Domain(string name,uint256 chainId,address verifyingContract)"
        )

    def test_ballot_typehash(self):
        assert BALLOT_TYPEHASH == keccak(text="Ballot(uint256 proposalId,bool support)")

    def test_domain_separator_layout(self):
        expected = keccak(encode(
            ["bytes32", "bytes32", "uint256", "address"],
            [DOMAIN_TYPEHASH, keccak(text=NAME), 1, GOVERNOR_ADDRESS],
        ))
        assert domain_separator(NAME, 1, GOVERNOR_ADDRESS) == expected

    def test_digest_layout(self):
        expected = keccak(
            b"\x19\x01"
            + domain_separator(NAME, 1, GOVERNOR_ADDRESS)
            + ballot_struct_hash(3, True)
        )
        assert ballot_digest(NAME, 1, GOVERNOR_ADDRESS, 3, True) == expected


class TestDigestBinding:

    @pytest.mark.parametrize("change", [
        {"name": "Other Governor"},
        {"chain_id": 5},
        {"verifying_contract": "0x" + "99" * 20},
        {"proposal_id": 4},
        {"support": False},
    ])
    def test_every_field_changes_digest(self, change):
        base = dict(name=NAME, chain_id=1, verifying_contract=GOVERNOR_ADDRESS,
                    proposal_id=3, support=True)
        assert ballot_digest(**base) != ballot_digest(**{**base, **change})


class TestSignAndRecover:

    def test_recover_signer(self):
        ballot = sign_ballot(ALICE_KEY, NAME, 1, GOVERNOR_ADDRESS, 7, True)
        assert ballot.v in (27, 28)
        signer = recover_ballot_signer(
            NAME, 1, GOVERNOR_ADDRESS, 7, True, ballot.v, ballot.r, ballot.s
        )
        assert signer == ALICE

    def test_recover_accepts_zero_based_v(self):
        ballot = sign_ballot(ALICE_KEY, NAME, 1, GOVERNOR_ADDRESS, 7, False)
        signer = recover_ballot_signer(
            NAME, 1, GOVERNOR_ADDRESS, 7, False, ballot.v - 27, ballot.r, ballot.s
        )
        assert signer == ALICE

    def test_bad_v_rejected(self):
        with pytest.raises(InvalidSignatureError):
            recover_ballot_signer(NAME, 1, GOVERNOR_ADDRESS, 7, True, 30, 1, 1)

    def test_zero_r_rejected(self):
        with pytest.raises(InvalidSignatureError):
            recover_ballot_signer(NAME, 1, GOVERNOR_ADDRESS, 7, True, 27, 0, 1)


class TestBallotRecord:

    def test_dict_round_trip_with_hex_strings(self):
        ballot = sign_ballot(ALICE_KEY, NAME, 1, GOVERNOR_ADDRESS, 2, True)
        data = ballot.to_dict()
        assert data["r"].startswith("0x")
        assert Ballot.from_dict(data) == ballot

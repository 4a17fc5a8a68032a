"""
Shared accounts, addresses and a call-recording target contract for the
governance test suite.
"""

from typing import Any, Dict

from chaingov.constants import ONE_TOKEN
from chaingov.crypto import PrivateKey, encode_args, normalize_address
from chaingov.exceptions import CallRevertedError
from chaingov.host import Contract, external

# ── Accounts ──────────────────────────────────────────────────────────

ALICE_KEY = PrivateKey.from_int(0xA11CE)
BOB_KEY = PrivateKey.from_int(0xB0B)
CAROL_KEY = PrivateKey.from_int(0xCA401)
DAVE_KEY = PrivateKey.from_int(0xDA7E)
GUARDIAN_KEY = PrivateKey.from_int(0x6A4D)

ALICE = ALICE_KEY.address
BOB = BOB_KEY.address
CAROL = CAROL_KEY.address
DAVE = DAVE_KEY.address
GUARDIAN = GUARDIAN_KEY.address

# ── Contracts ─────────────────────────────────────────────────────────

GOVERNOR_ADDRESS = normalize_address("0x" + "60" * 20)
TIMELOCK_ADDRESS = normalize_address("0x" + "71" * 20)
LEDGER_ADDRESS = normalize_address("0x" + "1e" * 20)
RECORDER_ADDRESS = normalize_address("0x" + "5e" * 20)

# ── Voting power ──────────────────────────────────────────────────────

ALICE_VOTES = 200_000 * ONE_TOKEN    # above the 100k threshold
BOB_VOTES = 500_000 * ONE_TOKEN      # above the 400k quorum on its own
CAROL_VOTES = 50_000 * ONE_TOKEN     # below threshold

TWO_DAYS = 2 * 86400


class Recorder(Contract):
    """Target contract that records what governance makes it do."""

    def __init__(self, host, address: str = RECORDER_ADDRESS):
        super().__init__(host, address)
        self.value = 0
        self.calls = []

    @external("setValue(uint256)")
    def set_value(self, sender: str, value: int):
        self.value = value
        self.calls.append((sender, value))

    @external("deposit()")
    def deposit(self, sender: str):
        self.calls.append((sender, "deposit"))

    @external("fail()")
    def fail(self, sender: str):
        raise CallRevertedError("Recorder: forced failure")

    def take_snapshot(self) -> Dict[str, Any]:
        snapshot = super().take_snapshot()
        snapshot["value"] = self.value
        snapshot["calls"] = list(self.calls)
        return snapshot

    def _restore_snapshot(self, snapshot: Dict[str, Any]) -> None:
        super()._restore_snapshot(snapshot)
        self.value = snapshot["value"]
        self.calls = snapshot["calls"]


def set_value_action(recorder: Recorder, value: int = 42, eth: int = 0):
    """(targets, values, signatures, calldatas) calling setValue(value)."""
    return (
        [recorder.address],
        [eth],
        ["setValue(uint256)"],
        [encode_args(["uint256"], [value])],
    )


def open_voting(host, governor, proposal_id: int):
    """Mine until the proposal is Active."""
    host.mine_to(governor.get_proposal(proposal_id).start_block + 1)


def close_voting(host, governor, proposal_id: int):
    """Mine past the end of the voting window."""
    host.mine_to(governor.get_proposal(proposal_id).end_block + 1)


def pass_proposal(host, governor, proposal_id: int, voter: str = BOB):
    """Drive a proposal to Succeeded with *voter*'s weight."""
    open_voting(host, governor, proposal_id)
    governor.cast_vote(voter, proposal_id, True)
    close_voting(host, governor, proposal_id)

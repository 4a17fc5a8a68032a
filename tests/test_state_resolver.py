"""
Proposal state resolution.

The state is a pure function of the proposal fields, block height,
timestamp, quorum and grace period; rule order decides ties.
"""

import pytest

from chaingov.constants import ONE_TOKEN, TIMELOCK_GRACE_PERIOD, UINT256_MAX
from chaingov.exceptions import ArithmeticOverflowError
from chaingov.governance.proposals import Proposal, ProposalState
from chaingov.governance.state import resolve_state

from helpers import ALICE, RECORDER_ADDRESS

QUORUM = 400_000 * ONE_TOKEN
GRACE = TIMELOCK_GRACE_PERIOD
NOW = 1_700_000_000


def make_proposal(start=101, end=17381, **kwargs) -> Proposal:
    """Helper to build a bare proposal record."""
    return Proposal(
        id=1,
        proposer=ALICE,
        targets=[RECORDER_ADDRESS],
        values=[0],
        signatures=["setValue(uint256)"],
        calldatas=[b""],
        start_block=start,
        end_block=end,
        **kwargs,
    )


def state_at(proposal, block, timestamp=NOW):
    return resolve_state(proposal, block, timestamp, QUORUM, GRACE)


class TestVotingWindow:

    def test_pending_up_to_and_including_start_block(self):
        p = make_proposal()
        assert state_at(p, 100) == ProposalState.PENDING
        assert state_at(p, 101) == ProposalState.PENDING

    def test_active_from_start_plus_one_through_end(self):
        p = make_proposal()
        assert state_at(p, 102) == ProposalState.ACTIVE
        assert state_at(p, 17381) == ProposalState.ACTIVE

    def test_defeated_without_votes_after_end(self):
        p = make_proposal()
        assert state_at(p, 17382) == ProposalState.DEFEATED


class TestOutcome:

    def test_tie_is_defeated(self):
        p = make_proposal(for_votes=QUORUM, against_votes=QUORUM)
        assert state_at(p, 20_000) == ProposalState.DEFEATED

    def test_majority_below_quorum_is_defeated(self):
        p = make_proposal(for_votes=QUORUM - 1, against_votes=0)
        assert state_at(p, 20_000) == ProposalState.DEFEATED

    def test_exact_quorum_with_majority_succeeds(self):
        p = make_proposal(for_votes=QUORUM, against_votes=QUORUM - 1)
        assert state_at(p, 20_000) == ProposalState.SUCCEEDED

    def test_queued_until_grace_ends(self):
        p = make_proposal(for_votes=QUORUM, eta=NOW)
        assert state_at(p, 20_000, NOW - 10) == ProposalState.QUEUED
        assert state_at(p, 20_000, NOW + GRACE - 1) == ProposalState.QUEUED

    def test_expired_at_eta_plus_grace(self):
        p = make_proposal(for_votes=QUORUM, eta=NOW)
        assert state_at(p, 20_000, NOW + GRACE) == ProposalState.EXPIRED

    def test_executed(self):
        p = make_proposal(for_votes=QUORUM, eta=NOW, executed=True)
        assert state_at(p, 20_000, NOW + 2 * GRACE) == ProposalState.EXECUTED


class TestRuleOrder:

    def test_canceled_wins_over_everything(self):
        p = make_proposal(for_votes=QUORUM, eta=NOW, canceled=True)
        for block in (50, 102, 20_000):
            assert state_at(p, block) == ProposalState.CANCELED

    def test_defeat_is_checked_before_executed(self):
        # Only reachable by a hand-built record, but the order must hold.
        p = make_proposal(for_votes=0, against_votes=1, eta=NOW, executed=True)
        assert state_at(p, 20_000) == ProposalState.DEFEATED

    def test_executed_is_checked_before_expiry(self):
        p = make_proposal(for_votes=QUORUM, eta=NOW, executed=True)
        assert state_at(p, 20_000, NOW + GRACE + 1) == ProposalState.EXECUTED

    def test_eta_overflow_raises(self):
        p = make_proposal(for_votes=QUORUM, eta=UINT256_MAX)
        with pytest.raises(ArithmeticOverflowError, match="overflow"):
            state_at(p, 20_000)


class TestPurity:

    def test_same_inputs_same_state_and_no_mutation(self):
        p = make_proposal(for_votes=QUORUM, eta=NOW)
        before = p.to_dict()
        first = state_at(p, 20_000, NOW + 5)
        second = state_at(p, 20_000, NOW + 5)
        assert first == second == ProposalState.QUEUED
        assert p.to_dict() == before

"""
Proposal creation: threshold, action batch shape and the one-live-proposal
rule. A rejected proposal leaves no trace.
"""

import pytest

from chaingov.constants import ONE_TOKEN
from chaingov.exceptions import ArithmeticOverflowError
from chaingov.governance import (
    Governor,
    InsufficientVotingPowerError,
    InvalidProposalError,
    LiveProposalError,
    ProposalCreated,
    ProposalState,
    Timelock,
)
from chaingov.host import ChainHost
from chaingov.tokens import VotingPowerLedger
from chaingov.tokens.votes import VotingPowerError

from helpers import (
    ALICE,
    BOB,
    CAROL,
    DAVE,
    GOVERNOR_ADDRESS,
    LEDGER_ADDRESS,
    RECORDER_ADDRESS,
    TIMELOCK_ADDRESS,
    close_voting,
    open_voting,
    set_value_action,
)


class TestThreshold:

    def test_proposer_above_threshold(self, governor, recorder):
        pid = governor.propose(ALICE, *set_value_action(recorder), "raise value")
        assert pid == 1
        assert governor.proposal_count == 1
        assert governor.latest_proposal_ids[ALICE] == 1

    def test_below_threshold_rejected(self, governor, recorder):
        with pytest.raises(InsufficientVotingPowerError, match="below proposal threshold"):
            governor.propose(CAROL, *set_value_action(recorder), "")
        assert governor.proposal_count == 0

    def test_exactly_threshold_rejected(self, host, ledger, governor, recorder):
        ledger.set_votes(DAVE, governor.proposal_threshold)
        host.mine()
        with pytest.raises(InsufficientVotingPowerError):
            governor.propose(DAVE, *set_value_action(recorder), "")

    def test_weight_gained_in_current_block_does_not_count(self, ledger, governor, recorder):
        ledger.set_votes(DAVE, 1_000_000 * ONE_TOKEN)
        with pytest.raises(InsufficientVotingPowerError):
            governor.propose(DAVE, *set_value_action(recorder), "")

    def test_threshold_checked_before_shape(self, governor):
        with pytest.raises(InsufficientVotingPowerError):
            governor.propose(CAROL, [], [], [], [], "")

    def test_genesis_block_proposal_has_no_prior_block(self):
        fresh = ChainHost(block_number=0)
        ledger = VotingPowerLedger(fresh, LEDGER_ADDRESS)
        timelock = Timelock(fresh, TIMELOCK_ADDRESS, admin=GOVERNOR_ADDRESS)
        gov = Governor(fresh, GOVERNOR_ADDRESS, timelock, ledger, ALICE)
        with pytest.raises(ArithmeticOverflowError, match="subtraction underflow"):
            gov.propose(ALICE, [RECORDER_ADDRESS], [0], [""], [b""], "")
        assert gov.proposal_count == 0


class TestActionShape:

    def test_arity_mismatch(self, governor, recorder):
        targets, values, signatures, calldatas = set_value_action(recorder)
        with pytest.raises(InvalidProposalError, match="arity mismatch"):
            governor.propose(ALICE, targets, values + [0], signatures, calldatas, "")
        assert governor.proposal_count == 0
        assert governor.latest_proposal_ids == {}

    def test_empty_batch(self, governor):
        with pytest.raises(InvalidProposalError, match="must provide actions"):
            governor.propose(ALICE, [], [], [], [], "")

    def test_too_many_actions(self, governor, recorder):
        n = governor.proposal_max_operations + 1
        with pytest.raises(InvalidProposalError, match="too many actions"):
            governor.propose(
                ALICE, [recorder.address] * n, [0] * n, ["deposit()"] * n, [b""] * n, ""
            )

    def test_max_actions_allowed(self, governor, recorder):
        n = governor.proposal_max_operations
        pid = governor.propose(
            ALICE, [recorder.address] * n, [0] * n, ["deposit()"] * n, [b""] * n, ""
        )
        assert len(governor.get_actions(pid)[0]) == n

    def test_invalid_target(self, governor):
        with pytest.raises(InvalidProposalError, match="invalid target"):
            governor.propose(ALICE, ["not-an-address"], [0], [""], [b""], "")

    def test_negative_value(self, governor, recorder):
        with pytest.raises(InvalidProposalError, match="invalid value"):
            governor.propose(ALICE, [recorder.address], [-1], [""], [b""], "")

    def test_hex_calldata_accepted(self, governor, recorder):
        pid = governor.propose(ALICE, [recorder.address], [0], ["deposit()"], ["0x"], "")
        assert governor.get_actions(pid)[3] == [b""]


class TestLiveProposal:

    def test_second_proposal_while_pending(self, governor, recorder):
        governor.propose(ALICE, *set_value_action(recorder), "first")
        with pytest.raises(LiveProposalError, match="already pending"):
            governor.propose(ALICE, *set_value_action(recorder, 7), "second")
        assert governor.proposal_count == 1

    def test_second_proposal_while_active(self, host, governor, recorder):
        pid = governor.propose(ALICE, *set_value_action(recorder), "first")
        open_voting(host, governor, pid)
        assert governor.state(pid) == ProposalState.ACTIVE
        with pytest.raises(LiveProposalError, match="already active"):
            governor.propose(ALICE, *set_value_action(recorder, 7), "second")

    def test_new_proposal_after_previous_finished(self, host, governor, recorder):
        pid = governor.propose(ALICE, *set_value_action(recorder), "first")
        close_voting(host, governor, pid)
        assert governor.state(pid) == ProposalState.DEFEATED
        second = governor.propose(ALICE, *set_value_action(recorder, 7), "second")
        assert second == 2
        assert governor.latest_proposal_ids[ALICE] == 2

    def test_other_proposers_unaffected(self, governor, recorder):
        governor.propose(ALICE, *set_value_action(recorder), "alice")
        assert governor.propose(BOB, *set_value_action(recorder), "bob") == 2


class TestProposalRecord:

    def test_voting_window(self, host, governor, recorder):
        host.mine_to(100)
        pid = governor.propose(ALICE, *set_value_action(recorder), "")
        proposal = governor.get_proposal(pid)
        assert proposal.start_block == 100 + governor.voting_delay
        assert proposal.end_block == proposal.start_block + governor.voting_period
        assert proposal.for_votes == proposal.against_votes == proposal.eta == 0
        assert not proposal.canceled and not proposal.executed

    def test_created_event(self, governor, recorder, events):
        pid = governor.propose(ALICE, *set_value_action(recorder), "raise value")
        created = [e for _, e in events if isinstance(e, ProposalCreated)]
        assert len(created) == 1
        assert created[0].id == pid
        assert created[0].proposer == ALICE
        assert created[0].signatures == ("setValue(uint256)",)
        assert created[0].description == "raise value"

    def test_failed_propose_emits_nothing(self, governor, recorder, events):
        with pytest.raises(InsufficientVotingPowerError):
            governor.propose(CAROL, *set_value_action(recorder), "")
        assert events == []

    def test_ids_are_sequential(self, governor, recorder):
        ids = [
            governor.propose(proposer, *set_value_action(recorder), "")
            for proposer in (ALICE, BOB)
        ]
        assert ids == [1, 2]
        assert [p.id for p in governor.proposals] == [1, 2]

    def test_unmined_block_query_rejected(self, ledger, host):
        with pytest.raises(VotingPowerError, match="not yet determined"):
            ledger.get_prior_votes(ALICE, host.block_number)

"""
Snapshot-Weighted Voting Engine

Implements:
  - For / Against ballots weighted by the voter's power at the proposal's
    start block (a snapshot, immune to later transfers)
  - One ballot per voter per proposal, recorded as an immutable Receipt
  - Votes only while the proposal is Active
"""

from typing import Callable

from ..crypto.address import normalize_address
from ..logger import get_logger
from ..tokens.votes import VotingPowerSource
from .proposals import (
    GovernanceError,
    ProposalState,
    ProposalStateError,
    ProposalStore,
    Receipt,
)

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class VotingError(GovernanceError):
    """Base voting error."""


class AlreadyVotedError(VotingError):
    """Voter already cast a vote on this proposal."""


class VotingClosedError(VotingError, ProposalStateError):
    """Proposal is not Active."""


# ══════════════════════════════════════════════════════════════════════
#  VOTING ENGINE
# ══════════════════════════════════════════════════════════════════════

class VotingEngine:
    """
    Records weighted ballots against proposals.

    Args:
        votes:     Voting-weight source (``get_prior_votes``)
        store:     Proposal registry owning tallies and receipts
        get_state: Callable(proposal_id) → ProposalState
    """

    def __init__(
        self,
        votes: VotingPowerSource,
        store: ProposalStore,
        get_state: Callable[[int], ProposalState],
    ):
        self.votes = votes
        self.store = store
        self._get_state = get_state

    def cast_vote(self, voter: str, proposal_id: int, support: bool) -> Receipt:
        """
        Cast *voter*'s full snapshot weight for or against a proposal.

        Raises:
            UnknownProposalError: Invalid proposal id
            VotingClosedError: Proposal is not Active
            AlreadyVotedError: Voter already has a receipt
        """
        voter = normalize_address(voter)
        proposal = self.store.get(proposal_id)

        state = self._get_state(proposal_id)
        if state != ProposalState.ACTIVE:
            raise VotingClosedError(
                f"voting is closed (proposal #{proposal_id} is {state.name})"
            )
        if proposal.has_voted(voter):
            raise AlreadyVotedError(
                f"voter already voted ({voter} on proposal #{proposal_id})"
            )

        weight = self.votes.get_prior_votes(voter, proposal.start_block)
        proposal = self.store.edit(proposal_id)
        receipt = proposal.record_vote(voter, bool(support), weight)

        logger.info(
            f"Vote: {voter} → {'FOR' if support else 'AGAINST'} on proposal "
            f"#{proposal_id} (votes={weight})"
        )
        return receipt

    def tally(self, proposal_id: int) -> dict:
        proposal = self.store.get(proposal_id)
        return {
            "proposalId": proposal_id,
            "forVotes": str(proposal.for_votes),
            "againstVotes": str(proposal.against_votes),
            "voterCount": len(proposal.receipts),
        }

    def __repr__(self) -> str:
        return f"<VotingEngine proposals={self.store.proposal_count}>"

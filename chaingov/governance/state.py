"""
Proposal State Resolver

A proposal's lifecycle state is never stored. It is recomputed from the
proposal's fields, the current block height and timestamp, the quorum and
the Timelock grace period every time someone asks. The rules form a strict
decision chain; the first one that matches wins, and their order is part
of the contract (do not reorder).
"""

from ..safemath import add256
from .proposals import Proposal, ProposalState


def resolve_state(
    proposal: Proposal,
    block_number: int,
    timestamp: int,
    quorum_votes: int,
    grace_period: int,
) -> ProposalState:
    """
    Map a proposal plus chain time to its ProposalState.

    Pure: no argument is mutated and equal inputs give equal outputs.
    """
    if proposal.canceled:
        return ProposalState.CANCELED
    if block_number <= proposal.start_block:
        return ProposalState.PENDING
    if block_number <= proposal.end_block:
        return ProposalState.ACTIVE
    if proposal.for_votes <= proposal.against_votes or proposal.for_votes < quorum_votes:
        return ProposalState.DEFEATED
    if proposal.eta == 0:
        return ProposalState.SUCCEEDED
    if proposal.executed:
        return ProposalState.EXECUTED
    if timestamp >= add256(proposal.eta, grace_period):
        return ProposalState.EXPIRED
    return ProposalState.QUEUED

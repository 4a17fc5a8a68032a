"""
ChainGov On-Chain Governance

Provides:
  - ProposalState / Proposal / Receipt / ProposalStore   (proposals.py)
  - resolve_state                                         (state.py)
  - ProposerGuard                                         (guard.py)
  - VotingEngine                                          (voting.py)
  - Ballot / sign_ballot / recover_ballot_signer          (ballots.py)
  - Timelock                                              (timelock.py)
  - ExecutionBridge                                       (execution.py)
  - Governor                                              (governor.py)
"""

from .proposals import (
    GovernanceError,
    InvalidProposalError,
    Proposal,
    ProposalAction,
    ProposalState,
    ProposalStateError,
    ProposalStore,
    Receipt,
    UnknownProposalError,
)
from .params import GovernanceParameters
from .state import resolve_state
from .guard import (
    InsufficientVotingPowerError,
    LiveProposalError,
    ProposerGuard,
    UnauthorizedError,
)
from .voting import (
    AlreadyVotedError,
    VotingClosedError,
    VotingEngine,
    VotingError,
)
from .ballots import (
    Ballot,
    ballot_digest,
    domain_separator,
    recover_ballot_signer,
    sign_ballot,
)
from .timelock import (
    StaleTransactionError,
    Timelock,
    TimelockDelayError,
    TimelockError,
    TimelockNotReadyError,
    TimelockUnauthorizedError,
    TransactionNotQueuedError,
    TransactionRevertedError,
    transaction_hash,
)
from .execution import ActionAlreadyQueuedError, ExecutionBridge
from .events import (
    ProposalCanceled,
    ProposalCreated,
    ProposalExecuted,
    ProposalQueued,
    VoteCast,
)
from .governor import Governor

__all__ = [
    # Proposals
    "GovernanceError",
    "InvalidProposalError",
    "Proposal",
    "ProposalAction",
    "ProposalState",
    "ProposalStateError",
    "ProposalStore",
    "Receipt",
    "UnknownProposalError",
    "GovernanceParameters",
    "resolve_state",
    # Proposing
    "InsufficientVotingPowerError",
    "LiveProposalError",
    "ProposerGuard",
    "UnauthorizedError",
    # Voting
    "AlreadyVotedError",
    "VotingClosedError",
    "VotingEngine",
    "VotingError",
    "Ballot",
    "ballot_digest",
    "domain_separator",
    "recover_ballot_signer",
    "sign_ballot",
    # Timelock / execution
    "StaleTransactionError",
    "Timelock",
    "TimelockDelayError",
    "TimelockError",
    "TimelockNotReadyError",
    "TimelockUnauthorizedError",
    "TransactionNotQueuedError",
    "TransactionRevertedError",
    "transaction_hash",
    "ActionAlreadyQueuedError",
    "ExecutionBridge",
    # Events
    "ProposalCanceled",
    "ProposalCreated",
    "ProposalExecuted",
    "ProposalQueued",
    "VoteCast",
    "Governor",
]

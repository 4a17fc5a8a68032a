"""
Governance Proposals

Defines the lifecycle states, the Proposal record with its per-voter
receipts, and the ProposalStore that owns every proposal ever created.
Proposals are permanent history: the store only appends.
"""

import copy
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterator, List, NamedTuple, Optional

from ..exceptions import ChainGovException
from ..logger import get_logger
from ..safemath import add256

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class GovernanceError(ChainGovException):
    """Base governance exception."""


class InvalidProposalError(GovernanceError):
    """Raised when proposal actions are malformed (arity, count, types)."""


class UnknownProposalError(GovernanceError):
    """Raised for a proposal id outside [1, proposal_count]."""


class ProposalStateError(GovernanceError):
    """Raised when an operation needs a different lifecycle state."""


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class ProposalState(IntEnum):
    """Lifecycle state, always derived, never stored."""
    PENDING = 0     # Created, voting not open yet
    ACTIVE = 1      # Voting window open
    CANCELED = 2    # Canceled by guardian or because proposer lost weight
    DEFEATED = 3    # Voting closed without majority or quorum
    SUCCEEDED = 4   # Passed, not queued yet
    QUEUED = 5      # In the Timelock awaiting eta
    EXPIRED = 6     # Grace period elapsed before execution
    EXECUTED = 7    # Actions executed


# ══════════════════════════════════════════════════════════════════════
#  RECORDS
# ══════════════════════════════════════════════════════════════════════

class ProposalAction(NamedTuple):
    """One call a proposal makes through the Timelock."""
    target: str
    value: int
    signature: str
    data: bytes


@dataclass(frozen=True)
class Receipt:
    """One account's ballot on one proposal."""
    has_voted: bool = False
    support: bool = False
    votes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasVoted": self.has_voted,
            "support": self.support,
            "votes": str(self.votes),
        }


@dataclass
class Proposal:
    """
    A governance proposal.

    Fields:
        id:             1-based monotonic identifier
        proposer:       Account that created it
        targets/values/signatures/calldatas:
                        Parallel action sequences
        start_block:    Voting opens after this block
        end_block:      Voting closes after this block
        for_votes:      Weight in favour
        against_votes:  Weight against
        eta:            Timelock execution timestamp (0 = not queued)
        canceled:       Canceled flag (write-once)
        executed:       Executed flag (write-once)
        description:    Free-text rationale
    """
    id: int
    proposer: str
    targets: List[str]
    values: List[int]
    signatures: List[str]
    calldatas: List[bytes]
    start_block: int
    end_block: int
    description: str = ""
    for_votes: int = 0
    against_votes: int = 0
    eta: int = 0
    canceled: bool = False
    executed: bool = False
    receipts: Dict[str, Receipt] = field(default_factory=dict, repr=False)

    # ── Properties ────────────────────────────────────────────────────

    @property
    def actions(self) -> List[ProposalAction]:
        return [
            ProposalAction(t, v, s, d)
            for t, v, s, d in zip(self.targets, self.values, self.signatures, self.calldatas)
        ]

    @property
    def total_votes(self) -> int:
        return self.for_votes + self.against_votes

    def get_receipt(self, voter: str) -> Receipt:
        return self.receipts.get(voter, Receipt())

    def has_voted(self, voter: str) -> bool:
        return self.get_receipt(voter).has_voted

    # ── Mutations ─────────────────────────────────────────────────────

    def _require_not_executed(self, what: str):
        if self.executed:
            raise ProposalStateError(
                f"Proposal #{self.id} is executed; cannot {what}"
            )

    def record_vote(self, voter: str, support: bool, votes: int) -> Receipt:
        """Add *votes* to one side and write the voter's receipt."""
        self._require_not_executed("record votes")
        if self.has_voted(voter):
            raise ProposalStateError(f"{voter} already has a receipt on #{self.id}")
        if support:
            self.for_votes = add256(self.for_votes, votes)
        else:
            self.against_votes = add256(self.against_votes, votes)
        receipt = Receipt(has_voted=True, support=support, votes=votes)
        self.receipts[voter] = receipt
        return receipt

    def set_eta(self, eta: int):
        self._require_not_executed("set eta")
        self.eta = eta

    def mark_executed(self):
        self._require_not_executed("execute again")
        if self.canceled:
            raise ProposalStateError(f"Proposal #{self.id} is canceled")
        self.executed = True

    def mark_canceled(self):
        self._require_not_executed("cancel")
        if self.canceled:
            raise ProposalStateError(f"Proposal #{self.id} is already canceled")
        self.canceled = True

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "proposer": self.proposer,
            "targets": list(self.targets),
            "values": [str(v) for v in self.values],
            "signatures": list(self.signatures),
            "calldatas": ["0x" + bytes(d).hex() for d in self.calldatas],
            "startBlock": self.start_block,
            "endBlock": self.end_block,
            "description": self.description,
            "forVotes": str(self.for_votes),
            "againstVotes": str(self.against_votes),
            "eta": self.eta,
            "canceled": self.canceled,
            "executed": self.executed,
            "voterCount": len(self.receipts),
        }

    def __repr__(self) -> str:
        return (
            f"<Proposal #{self.id} proposer={self.proposer} "
            f"actions={len(self.targets)} for={self.for_votes} against={self.against_votes}>"
        )


# ══════════════════════════════════════════════════════════════════════
#  STORE
# ══════════════════════════════════════════════════════════════════════

class ProposalStore:
    """
    Append-only registry of proposals.

    Ids start at 1; 0 means "no proposal". The store also remembers each
    proposer's most recent proposal id.
    """

    def __init__(self):
        self._proposals: Dict[int, Proposal] = {}
        self._proposal_count = 0
        self._latest_proposal_ids: Dict[str, int] = {}
        # Originals of proposals edited since the last snapshot
        self._journal: Optional[Dict[int, Proposal]] = None
        self._journal_base = 0

    @property
    def proposal_count(self) -> int:
        return self._proposal_count

    @property
    def latest_proposal_ids(self) -> Dict[str, int]:
        return dict(self._latest_proposal_ids)

    def latest_proposal_id(self, proposer: str) -> int:
        return self._latest_proposal_ids.get(proposer, 0)

    def create(
        self,
        proposer: str,
        targets: List[str],
        values: List[int],
        signatures: List[str],
        calldatas: List[bytes],
        start_block: int,
        end_block: int,
        description: str = "",
    ) -> Proposal:
        """Allocate the next id and persist a fresh proposal."""
        proposal_id = add256(self._proposal_count, 1)
        proposal = Proposal(
            id=proposal_id,
            proposer=proposer,
            targets=list(targets),
            values=list(values),
            signatures=list(signatures),
            calldatas=list(calldatas),
            start_block=start_block,
            end_block=end_block,
            description=description,
        )
        self._proposals[proposal_id] = proposal
        self._proposal_count = proposal_id
        self._latest_proposal_ids[proposer] = proposal_id
        logger.debug(f"Stored proposal #{proposal_id} for {proposer}")
        return proposal

    def get(self, proposal_id: int) -> Proposal:
        """
        Raises:
            UnknownProposalError: If the id was never allocated
        """
        if not isinstance(proposal_id, int) or not 0 < proposal_id <= self._proposal_count:
            raise UnknownProposalError(f"invalid proposal id: {proposal_id}")
        return self._proposals[proposal_id]

    def edit(self, proposal_id: int) -> Proposal:
        """
        Fetch a proposal that is about to be changed.

        The first edit of a proposal after a snapshot keeps a copy of it so
        the snapshot can be restored. Proposals created after the snapshot
        are not copied.
        """
        proposal = self.get(proposal_id)
        journal = self._journal
        if journal is not None and proposal_id <= self._journal_base and proposal_id not in journal:
            journal[proposal_id] = copy.deepcopy(proposal)
        return proposal

    def __iter__(self) -> Iterator[Proposal]:
        return iter(self._proposals[i] for i in range(1, self._proposal_count + 1))

    def __len__(self) -> int:
        return self._proposal_count

    # ── Snapshot / restore ────────────────────────────────────────────

    def take_snapshot(self) -> Dict[str, Any]:
        self._journal = {}
        self._journal_base = self._proposal_count
        return {
            "journal": self._journal,
            "proposal_count": self._proposal_count,
            "latest_proposal_ids": dict(self._latest_proposal_ids),
        }

    def _restore_snapshot(self, snapshot: Dict[str, Any]) -> None:
        count = snapshot["proposal_count"]
        for proposal_id in range(count + 1, self._proposal_count + 1):
            del self._proposals[proposal_id]
        self._proposals.update(snapshot["journal"])
        self._proposal_count = count
        self._latest_proposal_ids = snapshot["latest_proposal_ids"]
        self._journal = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proposalCount": self._proposal_count,
            "latestProposalIds": dict(self._latest_proposal_ids),
            "proposals": {pid: p.to_dict() for pid, p in self._proposals.items()},
        }

    def __repr__(self) -> str:
        return f"<ProposalStore count={self._proposal_count}>"

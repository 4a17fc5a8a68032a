"""
Governor events.

Emitted for off-chain observers; the governor never reads them back.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class ProposalCreated:
    """Emitted when a proposal is stored."""
    id: int
    proposer: str
    targets: Tuple[str, ...]
    values: Tuple[int, ...]
    signatures: Tuple[str, ...]
    calldatas: Tuple[bytes, ...]
    start_block: int
    end_block: int
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ProposalCreated",
            "id": self.id,
            "proposer": self.proposer,
            "targets": list(self.targets),
            "values": [str(v) for v in self.values],
            "signatures": list(self.signatures),
            "calldatas": ["0x" + d.hex() for d in self.calldatas],
            "startBlock": self.start_block,
            "endBlock": self.end_block,
            "description": self.description,
        }


@dataclass(frozen=True)
class VoteCast:
    """Emitted for every accepted ballot."""
    voter: str
    proposal_id: int
    support: bool
    votes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "VoteCast",
            "voter": self.voter,
            "proposalId": self.proposal_id,
            "support": self.support,
            "votes": str(self.votes),
        }


@dataclass(frozen=True)
class ProposalCanceled:
    id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "ProposalCanceled", "id": self.id}


@dataclass(frozen=True)
class ProposalQueued:
    id: int
    eta: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "ProposalQueued", "id": self.id, "eta": self.eta}


@dataclass(frozen=True)
class ProposalExecuted:
    id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "ProposalExecuted", "id": self.id}

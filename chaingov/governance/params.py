"""
Governor policy parameters.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict

from ..constants import (
    GOVERNANCE_PROPOSAL_MAX_OPERATIONS,
    GOVERNANCE_PROPOSAL_THRESHOLD,
    GOVERNANCE_QUORUM_VOTES,
    GOVERNANCE_VOTING_DELAY,
    GOVERNANCE_VOTING_PERIOD,
)
from ..exceptions import ArithmeticOverflowError, ConfigurationError
from ..safemath import require_uint256


@dataclass(frozen=True)
class GovernanceParameters:
    """
    Fixed policy of a governor.

    Attributes:
        quorum_votes:            Minimum "for" weight for success
        proposal_threshold:      Weight a proposer must exceed
        proposal_max_operations: Maximum actions per proposal
        voting_delay:            Blocks between proposing and voting
        voting_period:           Blocks voting stays open
    """
    quorum_votes: int = GOVERNANCE_QUORUM_VOTES
    proposal_threshold: int = GOVERNANCE_PROPOSAL_THRESHOLD
    proposal_max_operations: int = GOVERNANCE_PROPOSAL_MAX_OPERATIONS
    voting_delay: int = GOVERNANCE_VOTING_DELAY
    voting_period: int = GOVERNANCE_VOTING_PERIOD

    def __post_init__(self):
        for name, value in asdict(self).items():
            try:
                require_uint256(value, name)
            except (TypeError, ArithmeticOverflowError) as e:
                raise ConfigurationError(str(e)) from e
        if self.proposal_max_operations < 1:
            raise ConfigurationError("proposal_max_operations must be at least 1")
        if self.voting_period < 1:
            raise ConfigurationError("voting_period must be at least 1 block")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceParameters":
        defaults = asdict(cls())
        try:
            values = {name: int(data.get(name, default)) for name, default in defaults.items()}
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid governor parameter: {e}") from e
        return cls(**values)

    @classmethod
    def from_config(cls, config) -> "GovernanceParameters":
        """Build the policy set from a loaded ``ChainGovConfig``."""
        section = config.governor
        return cls.from_dict({
            "quorum_votes": section.quorum_votes,
            "proposal_threshold": section.proposal_threshold,
            "proposal_max_operations": section.proposal_max_operations,
            "voting_delay": section.voting_delay,
            "voting_period": section.voting_period,
        })

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quorumVotes": str(self.quorum_votes),
            "proposalThreshold": str(self.proposal_threshold),
            "proposalMaxOperations": self.proposal_max_operations,
            "votingDelay": self.voting_delay,
            "votingPeriod": self.voting_period,
        }

"""
ChainGov: token-weighted on-chain governance with a delayed-execution Timelock.
"""

__version__ = "1.0.0"

from .host import ChainHost, Contract, external
from .tokens import VotingPowerLedger
from .governance import (
    GovernanceParameters,
    Governor,
    ProposalState,
    Timelock,
)

__all__ = [
    "ChainHost",
    "Contract",
    "external",
    "VotingPowerLedger",
    "GovernanceParameters",
    "Governor",
    "ProposalState",
    "Timelock",
]

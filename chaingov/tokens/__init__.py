"""
Voting-weight sources consumed by the governor.
"""

from .votes import Checkpoint, VotingPowerError, VotingPowerLedger, VotingPowerSource

__all__ = [
    "Checkpoint",
    "VotingPowerError",
    "VotingPowerLedger",
    "VotingPowerSource",
]

"""
Checkpointed Voting Weight

The governor never reads live balances. It asks a voting-weight source for
an account's power *as of a past block*, so weight moved after a snapshot
cannot change a proposal's outcome.

``VotingPowerLedger`` is an in-memory source: every change of an account's
weight appends a checkpoint tagged with the current block, and historical
lookups binary-search those checkpoints.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

from ..crypto.address import normalize_address
from ..exceptions import ChainGovException
from ..host import ChainHost, Contract
from ..logger import get_logger
from ..safemath import add256, require_uint256, sub256

logger = get_logger(__name__)


class VotingPowerError(ChainGovException):
    """Invalid voting-weight query or update."""


class VotingPowerSource(Protocol):
    """What the governor needs from a voting-weight token."""

    def get_prior_votes(self, account: str, block_number: int) -> int:
        ...


@dataclass(frozen=True)
class Checkpoint:
    """Voting weight of an account from ``from_block`` onwards."""
    from_block: int
    votes: int

    def to_dict(self) -> Dict[str, Any]:
        return {"fromBlock": self.from_block, "votes": str(self.votes)}


class VotingPowerLedger(Contract):
    """
    Per-account voting weight with block-height checkpoints.
    """

    def __init__(self, host: ChainHost, address: str):
        super().__init__(host, address)
        self._checkpoints: Dict[str, List[Checkpoint]] = {}

    # ── Updates ───────────────────────────────────────────────────────

    def set_votes(self, account: str, votes: int) -> Checkpoint:
        """Record *votes* as the account's weight from the current block on."""
        account = normalize_address(account)
        require_uint256(votes, "votes")
        block = self.host.block_number
        history = self._checkpoints.setdefault(account, [])
        checkpoint = Checkpoint(from_block=block, votes=votes)
        if history and history[-1].from_block == block:
            history[-1] = checkpoint
        else:
            history.append(checkpoint)
        logger.debug(f"Checkpoint {account} @ block {block}: {votes}")
        return checkpoint

    def add_votes(self, account: str, amount: int) -> Checkpoint:
        return self.set_votes(account, add256(self.get_current_votes(account), amount))

    def remove_votes(self, account: str, amount: int) -> Checkpoint:
        return self.set_votes(account, sub256(self.get_current_votes(account), amount))

    def move_votes(self, source: str, destination: str, amount: int) -> None:
        """Shift weight between accounts in the current block."""
        with self.host.transaction():
            self.remove_votes(source, amount)
            self.add_votes(destination, amount)

    # ── Queries ───────────────────────────────────────────────────────

    def checkpoints(self, account: str) -> List[Checkpoint]:
        return list(self._checkpoints.get(normalize_address(account), []))

    def get_current_votes(self, account: str) -> int:
        history = self._checkpoints.get(normalize_address(account))
        return history[-1].votes if history else 0

    def get_prior_votes(self, account: str, block_number: int) -> int:
        """
        Weight of *account* at the end of *block_number*.

        Raises:
            VotingPowerError: If *block_number* is not yet mined
        """
        if block_number >= self.host.block_number:
            raise VotingPowerError("not yet determined")

        history = self._checkpoints.get(normalize_address(account))
        if not history:
            return 0
        if history[-1].from_block <= block_number:
            return history[-1].votes
        if history[0].from_block > block_number:
            return 0

        lower, upper = 0, len(history) - 1
        while upper > lower:
            center = upper - (upper - lower) // 2
            cp = history[center]
            if cp.from_block == block_number:
                return cp.votes
            if cp.from_block < block_number:
                lower = center
            else:
                upper = center - 1
        return history[lower].votes

    # ── Snapshot / restore ────────────────────────────────────────────

    def take_snapshot(self) -> Dict[str, Any]:
        snapshot = super().take_snapshot()
        snapshot["checkpoints"] = {
            account: list(history) for account, history in self._checkpoints.items()
        }
        return snapshot

    def _restore_snapshot(self, snapshot: Dict[str, Any]) -> None:
        super()._restore_snapshot(snapshot)
        self._checkpoints = snapshot["checkpoints"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "accounts": {
                account: [cp.to_dict() for cp in history]
                for account, history in self._checkpoints.items()
            },
        }

    def __repr__(self) -> str:
        return f"<VotingPowerLedger accounts={len(self._checkpoints)}>"

"""
Execution Bridge

Hands a passed proposal to the Timelock and later triggers it:
  - queue:   every action is enqueued at eta = now + timelock.delay
  - execute: the proposal is marked executed, then each action runs
             through the Timelock with its declared value
  - cancel:  the proposal is marked canceled and its queued actions dropped

The bridge acts as the Timelock admin on behalf of the governor; all three
operations are all-or-nothing under the caller's host transaction.
"""

from typing import Callable, List

from ..logger import get_logger
from ..safemath import add256
from .proposals import (
    GovernanceError,
    Proposal,
    ProposalState,
    ProposalStateError,
    ProposalStore,
)
from .timelock import Timelock, transaction_hash

logger = get_logger(__name__)


class ActionAlreadyQueuedError(GovernanceError):
    """An identical action is already queued in the Timelock at the same eta."""


class ExecutionBridge:
    """
    Args:
        store:            Proposal registry
        timelock:         Delayed-execution queue the governor administers
        get_state:        Callable(proposal_id) → ProposalState
        governor_address: Address the Timelock sees as caller
    """

    def __init__(
        self,
        store: ProposalStore,
        timelock: Timelock,
        get_state: Callable[[int], ProposalState],
        governor_address: str,
    ):
        self.store = store
        self.timelock = timelock
        self._get_state = get_state
        self.governor_address = governor_address

    def _require_state(self, proposal_id: int, expected: ProposalState, what: str):
        state = self._get_state(proposal_id)
        if state != expected:
            raise ProposalStateError(
                f"proposal can only be {what} if it is {expected.name.lower()} "
                f"(#{proposal_id} is {state.name})"
            )

    def queue(self, proposal_id: int) -> int:
        """
        Enqueue every action of a Succeeded proposal. Returns the eta.

        Raises:
            ProposalStateError: Proposal is not Succeeded
            ActionAlreadyQueuedError: An identical action is already queued at eta
        """
        proposal = self.store.get(proposal_id)
        self._require_state(proposal_id, ProposalState.SUCCEEDED, "queued")

        eta = add256(self.timelock.host.timestamp, self.timelock.delay)

        seen: List[bytes] = []
        for action in proposal.actions:
            tx_hash = transaction_hash(action.target, action.value, action.signature, action.data, eta)
            if self.timelock.queued_transactions(tx_hash) or tx_hash in seen:
                raise ActionAlreadyQueuedError(
                    f"proposal action already queued at eta ({action.target} "
                    f"{action.signature or '<raw call>'} eta={eta})"
                )
            seen.append(tx_hash)

        proposal = self.store.edit(proposal_id)
        for action in proposal.actions:
            self.timelock.queue_transaction(
                self.governor_address,
                action.target,
                action.value,
                action.signature,
                action.data,
                eta,
            )
        proposal.set_eta(eta)

        logger.info(f"Proposal #{proposal_id} queued: eta={eta}, {len(seen)} action(s)")
        return eta

    def execute(self, proposal_id: int, msg_value: int = 0) -> Proposal:
        """
        Run every action of a Queued proposal through the Timelock.

        *msg_value* arrives at the governor with the call; each action
        forwards its own declared value.

        Raises:
            ProposalStateError: Proposal is not Queued
            TimelockError: An action is not ready, stale or reverted
        """
        proposal = self.store.get(proposal_id)
        self._require_state(proposal_id, ProposalState.QUEUED, "executed")

        proposal = self.store.edit(proposal_id)
        proposal.mark_executed()
        for index, action in enumerate(proposal.actions):
            self.timelock.execute_transaction(
                self.governor_address,
                action.target,
                action.value,
                action.signature,
                action.data,
                proposal.eta,
                msg_value=action.value,
            )
            logger.debug(f"Proposal #{proposal_id} action {index} executed on {action.target}")

        logger.info(f"Proposal #{proposal_id} executed (msg.value={msg_value})")
        return proposal

    def cancel(self, proposal: Proposal):
        """Mark *proposal* canceled and drop its actions from the Timelock."""
        proposal = self.store.edit(proposal.id)
        proposal.mark_canceled()
        for action in proposal.actions:
            self.timelock.cancel_transaction(
                self.governor_address,
                action.target,
                action.value,
                action.signature,
                action.data,
                proposal.eta,
            )
        logger.info(f"Proposal #{proposal.id} canceled")

    def __repr__(self) -> str:
        return f"<ExecutionBridge timelock={self.timelock.address}>"

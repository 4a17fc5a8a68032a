"""
Governor — proposal lifecycle facade

Wires the proposal store, proposer guard, voting engine, state resolver and
execution bridge to one address on a ChainHost. Every public mutation runs
inside ``host.transaction()`` and either completes or leaves no trace.

Lifecycle:
  propose → Pending → Active → (Defeated | Succeeded) → queue → Queued
          → execute → Executed, or Expired after the Timelock grace period.
  Canceled is reachable from any state but Executed.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..constants import CHAINGOV_GOVERNOR_NAME, ZERO_ADDRESS
from ..crypto.abi import encode_args
from ..crypto.address import normalize_address
from ..host import ChainHost, Contract
from ..logger import get_logger
from ..safemath import sub256
from ..tokens.votes import VotingPowerSource
from .ballots import domain_separator, recover_ballot_signer
from .events import (
    ProposalCanceled,
    ProposalCreated,
    ProposalExecuted,
    ProposalQueued,
    VoteCast,
)
from .execution import ExecutionBridge
from .guard import ProposerGuard, UnauthorizedError
from .params import GovernanceParameters
from .proposals import (
    Proposal,
    ProposalState,
    ProposalStateError,
    ProposalStore,
    Receipt,
)
from .state import resolve_state
from .timelock import Timelock
from .voting import VotingEngine

logger = get_logger(__name__)


class Governor(Contract):
    """
    Token-weighted governor administering a Timelock.

    Args:
        host:     Chain the governor lives on
        address:  Governor address
        timelock: Delayed-execution queue (the governor must become its admin)
        votes:    Voting-weight source
        guardian: Account allowed to cancel proposals and manage Timelock admin
        params:   Policy set (defaults to the protocol constants)
        name:     EIP-712 domain name for signed ballots
    """

    def __init__(
        self,
        host: ChainHost,
        address: str,
        timelock: Timelock,
        votes: VotingPowerSource,
        guardian: str,
        params: Optional[GovernanceParameters] = None,
        name: str = str(CHAINGOV_GOVERNOR_NAME),
    ):
        guardian = normalize_address(guardian)
        super().__init__(host, address)
        self.timelock = timelock
        self.votes = votes
        self.params = params or GovernanceParameters()
        self._name = name
        self._guardian = guardian

        self.store = ProposalStore()
        self.guard = ProposerGuard(self.params, votes, self.store, self.state)
        self.voting = VotingEngine(votes, self.store, self.state)
        self.bridge = ExecutionBridge(self.store, timelock, self.state, self.address)

        logger.info(
            f"Governor '{name}' at {self.address}: timelock={timelock.address}, "
            f"guardian={self._guardian}"
        )

    # ── Policy and registry ───────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @property
    def guardian(self) -> str:
        return self._guardian

    @property
    def quorum_votes(self) -> int:
        return self.params.quorum_votes

    @property
    def proposal_threshold(self) -> int:
        return self.params.proposal_threshold

    @property
    def proposal_max_operations(self) -> int:
        return self.params.proposal_max_operations

    @property
    def voting_delay(self) -> int:
        return self.params.voting_delay

    @property
    def voting_period(self) -> int:
        return self.params.voting_period

    @property
    def proposal_count(self) -> int:
        return self.store.proposal_count

    @property
    def latest_proposal_ids(self) -> Dict[str, int]:
        return self.store.latest_proposal_ids

    @property
    def proposals(self) -> List[Proposal]:
        return list(self.store)

    @property
    def domain_separator(self) -> bytes:
        return domain_separator(self._name, self.host.chain_id, self.address)

    # ── Reads ─────────────────────────────────────────────────────────

    def state(self, proposal_id: int) -> ProposalState:
        """
        Current lifecycle state of a proposal.

        Raises:
            UnknownProposalError: If the id is outside [1, proposal_count]
        """
        proposal = self.store.get(proposal_id)
        return resolve_state(
            proposal,
            self.host.block_number,
            self.host.timestamp,
            self.params.quorum_votes,
            self.timelock.GRACE_PERIOD,
        )

    def get_proposal(self, proposal_id: int) -> Proposal:
        return self.store.get(proposal_id)

    def get_actions(
        self, proposal_id: int
    ) -> Tuple[List[str], List[int], List[str], List[bytes]]:
        proposal = self.store.get(proposal_id)
        return (
            list(proposal.targets),
            list(proposal.values),
            list(proposal.signatures),
            list(proposal.calldatas),
        )

    def get_receipt(self, proposal_id: int, voter: str) -> Receipt:
        return self.store.get(proposal_id).get_receipt(normalize_address(voter))

    # ── Proposing and voting ──────────────────────────────────────────

    def propose(
        self,
        proposer: str,
        targets: Sequence[str],
        values: Sequence[int],
        signatures: Sequence[str],
        calldatas: Sequence[Union[bytes, str]],
        description: str = "",
    ) -> int:
        """
        Create a proposal and return its id.

        Raises:
            InsufficientVotingPowerError: Proposer not above threshold
            InvalidProposalError: Malformed action batch
            LiveProposalError: Proposer already has a Pending or Active proposal
        """
        with self.host.transaction():
            proposal = self.guard.propose(
                proposer,
                targets,
                values,
                signatures,
                calldatas,
                description,
                block_number=self.host.block_number,
            )
            self.emit(ProposalCreated(
                id=proposal.id,
                proposer=proposal.proposer,
                targets=tuple(proposal.targets),
                values=tuple(proposal.values),
                signatures=tuple(proposal.signatures),
                calldatas=tuple(proposal.calldatas),
                start_block=proposal.start_block,
                end_block=proposal.end_block,
                description=proposal.description,
            ))
            return proposal.id

    def cast_vote(self, voter: str, proposal_id: int, support: bool) -> Receipt:
        """
        Raises:
            VotingClosedError: Proposal is not Active
            AlreadyVotedError: Voter already voted
        """
        with self.host.transaction():
            voter = normalize_address(voter)
            receipt = self.voting.cast_vote(voter, proposal_id, support)
            self.emit(VoteCast(voter, proposal_id, receipt.support, receipt.votes))
            return receipt

    def cast_vote_by_sig(
        self,
        proposal_id: int,
        support: bool,
        v: int,
        r: int,
        s: int,
    ) -> Receipt:
        """
        Count a relayed EIP-712 ballot for whoever signed it.

        Raises:
            InvalidSignatureError: If no signer can be recovered
        """
        with self.host.transaction():
            signer = recover_ballot_signer(
                self._name, self.host.chain_id, self.address, proposal_id, support, v, r, s
            )
            logger.debug(f"Ballot for proposal #{proposal_id} signed by {signer}")
            return self.cast_vote(signer, proposal_id, support)

    # ── Queue / execute / cancel ──────────────────────────────────────

    def queue(self, sender: str, proposal_id: int) -> int:
        """
        Queue a Succeeded proposal in the Timelock. Returns its eta.

        Raises:
            ProposalStateError: Proposal is not Succeeded
            ActionAlreadyQueuedError: Identical action already queued at eta
        """
        with self.host.transaction():
            eta = self.bridge.queue(proposal_id)
            self.emit(ProposalQueued(proposal_id, eta))
            logger.debug(f"Queue of proposal #{proposal_id} requested by {sender}")
            return eta

    def execute(self, sender: str, proposal_id: int, value: int = 0) -> Proposal:
        """
        Execute a Queued proposal. *value* is sent from *sender* to the governor.

        Raises:
            ProposalStateError: Proposal is not Queued
            TimelockError: Any action is not ready, stale or reverted
        """
        with self.host.transaction():
            self.host.transfer(sender, self.address, value)
            proposal = self.bridge.execute(proposal_id, msg_value=value)
            self.emit(ProposalExecuted(proposal_id))
            return proposal

    def cancel(self, sender: str, proposal_id: int) -> Proposal:
        """
        Cancel a proposal that has not been executed.

        Allowed for the guardian, or for anyone once the proposer's weight one
        block back has fallen below the proposal threshold.

        Raises:
            ProposalStateError: Proposal is Executed
            UnauthorizedError: Sender is not the guardian and proposer is above threshold
        """
        with self.host.transaction():
            sender = normalize_address(sender)
            if self.state(proposal_id) == ProposalState.EXECUTED:
                raise ProposalStateError(
                    f"cannot cancel executed proposal (#{proposal_id})"
                )
            proposal = self.store.get(proposal_id)
            if not self._is_guardian(sender):
                power = self.votes.get_prior_votes(
                    proposal.proposer, sub256(self.host.block_number, 1)
                )
                if power >= self.params.proposal_threshold:
                    logger.warning(
                        f"Cancel of proposal #{proposal_id} by {sender} rejected: "
                        f"proposer above threshold"
                    )
                    raise UnauthorizedError(
                        f"proposer above threshold ({power} >= {self.params.proposal_threshold})"
                    )
            self.bridge.cancel(proposal)
            self.emit(ProposalCanceled(proposal_id))
            return proposal

    # ── Guardian ──────────────────────────────────────────────────────

    def _is_guardian(self, sender: str) -> bool:
        return self._guardian != ZERO_ADDRESS and normalize_address(sender) == self._guardian

    def _require_guardian(self, sender: str, what: str):
        if not self._is_guardian(sender):
            logger.warning(f"Guardian operation {what} rejected for {sender}")
            raise UnauthorizedError(f"{what}: sender must be gov guardian")

    def accept_admin(self, sender: str):
        """Make the governor accept a pending Timelock admin handoff."""
        with self.host.transaction():
            self._require_guardian(sender, "acceptAdmin")
            self.timelock.accept_admin(self.address)

    def abdicate(self, sender: str):
        """Give up the guardian role for good."""
        with self.host.transaction():
            self._require_guardian(sender, "abdicate")
            self._guardian = ZERO_ADDRESS
            logger.info(f"Guardian of governor {self.address} abdicated")

    def _set_pending_admin_call(self, new_pending_admin: str) -> bytes:
        return encode_args(["address"], [normalize_address(new_pending_admin)])

    def queue_set_timelock_pending_admin(
        self, sender: str, new_pending_admin: str, eta: int
    ) -> bytes:
        """Queue ``setPendingAdmin(new_pending_admin)`` on the Timelock itself."""
        with self.host.transaction():
            self._require_guardian(sender, "queueSetTimelockPendingAdmin")
            return self.timelock.queue_transaction(
                self.address,
                self.timelock.address,
                0,
                "setPendingAdmin(address)",
                self._set_pending_admin_call(new_pending_admin),
                eta,
            )

    def execute_set_timelock_pending_admin(
        self, sender: str, new_pending_admin: str, eta: int
    ):
        with self.host.transaction():
            self._require_guardian(sender, "executeSetTimelockPendingAdmin")
            return self.timelock.execute_transaction(
                self.address,
                self.timelock.address,
                0,
                "setPendingAdmin(address)",
                self._set_pending_admin_call(new_pending_admin),
                eta,
            )

    # ── Snapshot / restore ────────────────────────────────────────────

    def take_snapshot(self) -> Dict[str, Any]:
        snapshot = super().take_snapshot()
        snapshot["store"] = self.store.take_snapshot()
        snapshot["guardian"] = self._guardian
        return snapshot

    def _restore_snapshot(self, snapshot: Dict[str, Any]) -> None:
        super()._restore_snapshot(snapshot)
        self.store._restore_snapshot(snapshot["store"])
        self._guardian = snapshot["guardian"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "name": self._name,
            "guardian": self._guardian,
            "timelock": self.timelock.address,
            "params": self.params.to_dict(),
            "proposalCount": self.store.proposal_count,
            "proposals": [p.to_dict() for p in self.store],
        }

    def __repr__(self) -> str:
        return (
            f"<Governor '{self._name}' at {self.address} "
            f"proposals={self.store.proposal_count}>"
        )

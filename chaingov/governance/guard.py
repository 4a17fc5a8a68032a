"""
Proposer Guard

Decides who may create a proposal and validates the action batch before
anything is written:
  - the proposer's weight one block back must exceed the threshold
  - targets/values/signatures/calldatas must line up, be non-empty and
    stay within the operation limit
  - a proposer may have only one Pending or Active proposal at a time
"""

from typing import Callable, List, Sequence, Tuple, Union

from ..crypto.address import normalize_address
from ..exceptions import ChainGovException
from ..logger import get_logger
from ..safemath import add256, require_uint256, sub256
from ..tokens.votes import VotingPowerSource
from .params import GovernanceParameters
from .proposals import (
    GovernanceError,
    InvalidProposalError,
    Proposal,
    ProposalState,
    ProposalStore,
)

logger = get_logger(__name__)


class InsufficientVotingPowerError(GovernanceError):
    """Proposer's weight does not exceed the proposal threshold."""


class LiveProposalError(GovernanceError):
    """Proposer already has a Pending or Active proposal."""


class UnauthorizedError(GovernanceError):
    """Caller lacks the authority for a privileged operation."""


def normalize_calldata(data: Union[bytes, bytearray, str]) -> bytes:
    """Accept raw bytes or a 0x-prefixed hex string."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str):
        hex_str = data[2:] if data.startswith(("0x", "0X")) else data
        try:
            return bytes.fromhex(hex_str)
        except ValueError:
            raise InvalidProposalError(f"calldata is not valid hex: {data!r}")
    raise InvalidProposalError(f"calldata must be bytes or hex, got {type(data).__name__}")


class ProposerGuard:
    """
    Validates and persists new proposals.

    Args:
        params:    Governor policy
        votes:     Voting-weight source
        store:     Proposal registry
        get_state: Callable(proposal_id) → ProposalState
    """

    def __init__(
        self,
        params: GovernanceParameters,
        votes: VotingPowerSource,
        store: ProposalStore,
        get_state: Callable[[int], ProposalState],
    ):
        self.params = params
        self.votes = votes
        self.store = store
        self._get_state = get_state

    def check_actions(
        self,
        targets: Sequence[str],
        values: Sequence[int],
        signatures: Sequence[str],
        calldatas: Sequence[Union[bytes, str]],
    ) -> Tuple[List[str], List[int], List[str], List[bytes]]:
        """
        Validate the shape of an action batch and normalize its items.

        Raises:
            InvalidProposalError: On arity mismatch, empty or oversized batch,
                or a malformed item
        """
        if not (len(targets) == len(values) == len(signatures) == len(calldatas)):
            raise InvalidProposalError(
                "proposal function information arity mismatch "
                f"(targets={len(targets)}, values={len(values)}, "
                f"signatures={len(signatures)}, calldatas={len(calldatas)})"
            )
        if len(targets) == 0:
            raise InvalidProposalError("must provide actions")
        if len(targets) > self.params.proposal_max_operations:
            raise InvalidProposalError(
                f"too many actions ({len(targets)} > {self.params.proposal_max_operations})"
            )

        try:
            norm_targets = [normalize_address(t) for t in targets]
        except ChainGovException as e:
            raise InvalidProposalError(f"invalid target: {e}") from e
        try:
            norm_values = [require_uint256(v, "value") for v in values]
        except (TypeError, ChainGovException) as e:
            raise InvalidProposalError(f"invalid value: {e}") from e
        for sig in signatures:
            if not isinstance(sig, str):
                raise InvalidProposalError(f"signature must be a string, got {type(sig).__name__}")
        norm_calldatas = [normalize_calldata(d) for d in calldatas]
        return norm_targets, norm_values, list(signatures), norm_calldatas

    def check_threshold(self, proposer: str, block_number: int):
        """
        Raises:
            InsufficientVotingPowerError: Weight at block_number - 1 is not above threshold
        """
        power = self.votes.get_prior_votes(proposer, sub256(block_number, 1))
        if power <= self.params.proposal_threshold:
            raise InsufficientVotingPowerError(
                f"proposer votes below proposal threshold "
                f"({power} <= {self.params.proposal_threshold})"
            )

    def check_live_proposal(self, proposer: str):
        """
        Raises:
            LiveProposalError: Proposer's latest proposal is Pending or Active
        """
        latest_id = self.store.latest_proposal_id(proposer)
        if latest_id != 0:
            latest_state = self._get_state(latest_id)
            if latest_state == ProposalState.ACTIVE:
                raise LiveProposalError(
                    "one live proposal per proposer, found an already active "
                    f"proposal (#{latest_id})"
                )
            if latest_state == ProposalState.PENDING:
                raise LiveProposalError(
                    "one live proposal per proposer, found an already pending "
                    f"proposal (#{latest_id})"
                )

    def propose(
        self,
        proposer: str,
        targets: Sequence[str],
        values: Sequence[int],
        signatures: Sequence[str],
        calldatas: Sequence[Union[bytes, str]],
        description: str,
        block_number: int,
    ) -> Proposal:
        """Validate everything, then create the proposal."""
        proposer = normalize_address(proposer)
        self.check_threshold(proposer, block_number)
        targets, values, signatures, calldatas = self.check_actions(
            targets, values, signatures, calldatas
        )
        self.check_live_proposal(proposer)

        start_block = add256(block_number, self.params.voting_delay)
        end_block = add256(start_block, self.params.voting_period)

        proposal = self.store.create(
            proposer=proposer,
            targets=targets,
            values=values,
            signatures=signatures,
            calldatas=calldatas,
            start_block=start_block,
            end_block=end_block,
            description=description,
        )
        logger.info(
            f"Proposal #{proposal.id} created by {proposer}: "
            f"{len(targets)} action(s), voting blocks {start_block}..{end_block}"
        )
        return proposal

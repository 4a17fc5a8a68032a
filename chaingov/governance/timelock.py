"""
Timelock — delayed execution queue

Holds admin-approved calls for a mandatory waiting period before they may
run, and lets them go stale after a grace period:
  - queue:   admin registers (target, value, signature, data, eta) with
             eta ≥ now + delay; the call is keyed by its content hash
  - cancel:  admin drops a queued call
  - execute: admin runs a queued call once eta ≤ now ≤ eta + GRACE_PERIOD
  - admin handoff and delay changes go through the Timelock's own queue
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, Optional, Set

from ..constants import (
    TIMELOCK_DEFAULT_DELAY,
    TIMELOCK_GRACE_PERIOD,
    TIMELOCK_MAXIMUM_DELAY,
    TIMELOCK_MINIMUM_DELAY,
    ZERO_ADDRESS,
)
from ..crypto.abi import encode_args, encode_call_data
from ..crypto.address import normalize_address
from ..crypto.hashing import keccak256
from ..exceptions import CallRevertedError, ChainGovException
from ..host import ChainHost, Contract, external
from ..logger import get_logger
from ..safemath import add256
from .proposals import GovernanceError

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class TimelockError(GovernanceError):
    """Timelock-specific errors."""


class TimelockUnauthorizedError(TimelockError):
    """Caller is not allowed to perform this Timelock operation."""


class TimelockDelayError(TimelockError):
    """Delay outside [MINIMUM_DELAY, MAXIMUM_DELAY] or eta too early."""


class TransactionNotQueuedError(TimelockError):
    """Execution attempted for a call that was never queued."""


class TimelockNotReadyError(TimelockError):
    """Execution attempted before eta."""


class StaleTransactionError(TimelockError):
    """Execution attempted after eta + GRACE_PERIOD."""


class TransactionRevertedError(TimelockError, CallRevertedError):
    """The queued call itself failed."""


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class NewAdmin:
    new_admin: str

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "NewAdmin", "newAdmin": self.new_admin}


@dataclass(frozen=True)
class NewPendingAdmin:
    new_pending_admin: str

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "NewPendingAdmin", "newPendingAdmin": self.new_pending_admin}


@dataclass(frozen=True)
class NewDelay:
    new_delay: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "NewDelay", "newDelay": self.new_delay}


@dataclass(frozen=True)
class TimelockTransaction:
    """Base for queue / cancel / execute events."""
    tx_hash: bytes
    target: str
    value: int
    signature: str
    data: bytes
    eta: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": type(self).__name__,
            "txHash": "0x" + self.tx_hash.hex(),
            "target": self.target,
            "value": str(self.value),
            "signature": self.signature,
            "data": "0x" + self.data.hex(),
            "eta": self.eta,
        }


class QueueTransaction(TimelockTransaction):
    pass


class CancelTransaction(TimelockTransaction):
    pass


class ExecuteTransaction(TimelockTransaction):
    pass


# ══════════════════════════════════════════════════════════════════════
#  TIMELOCK
# ══════════════════════════════════════════════════════════════════════

def transaction_hash(target: str, value: int, signature: str, data: bytes, eta: int) -> bytes:
    """Content key of a queued call: keccak256(abi.encode(target, value, signature, data, eta))."""
    return keccak256(encode_args(
        ["address", "uint256", "string", "bytes", "uint256"],
        [normalize_address(target), value, signature, bytes(data), eta],
    ))


class Timelock(Contract):
    """
    Delayed execution queue owned by a single admin (normally the governor).
    """

    GRACE_PERIOD = TIMELOCK_GRACE_PERIOD
    MINIMUM_DELAY = TIMELOCK_MINIMUM_DELAY
    MAXIMUM_DELAY = TIMELOCK_MAXIMUM_DELAY

    def __init__(
        self,
        host: ChainHost,
        address: str,
        admin: str,
        delay: int = TIMELOCK_DEFAULT_DELAY,
    ):
        self._check_delay(delay)
        admin = normalize_address(admin)
        super().__init__(host, address)
        self.admin = admin
        self.pending_admin = ZERO_ADDRESS
        self.delay = delay
        self._queued: Set[bytes] = set()

    # ── Guards ────────────────────────────────────────────────────────

    def _check_delay(self, delay: int):
        if delay < self.MINIMUM_DELAY:
            raise TimelockDelayError(
                f"Delay must exceed minimum delay ({delay} < {self.MINIMUM_DELAY})"
            )
        if delay > self.MAXIMUM_DELAY:
            raise TimelockDelayError(
                f"Delay must not exceed maximum delay ({delay} > {self.MAXIMUM_DELAY})"
            )

    def _require_self(self, sender: str, what: str):
        if normalize_address(sender) != self.address:
            raise TimelockUnauthorizedError(f"{what}: Call must come from Timelock.")

    def _require_admin(self, sender: str, what: str):
        if normalize_address(sender) != self.admin:
            logger.warning(f"Timelock {what} rejected: {sender} is not admin")
            raise TimelockUnauthorizedError(f"{what}: Call must come from admin.")

    # ── Administration ────────────────────────────────────────────────

    @external("setDelay(uint256)")
    def set_delay(self, sender: str, delay: int):
        self._require_self(sender, "setDelay")
        self._check_delay(delay)
        self.delay = delay
        self.emit(NewDelay(delay))
        logger.info(f"Timelock delay set to {delay}s")

    @external("acceptAdmin()")
    def accept_admin(self, sender: str):
        sender = normalize_address(sender)
        if sender != self.pending_admin:
            raise TimelockUnauthorizedError("acceptAdmin: Call must come from pendingAdmin.")
        self.admin = sender
        self.pending_admin = ZERO_ADDRESS
        self.emit(NewAdmin(sender))
        logger.info(f"Timelock admin is now {sender}")

    @external("setPendingAdmin(address)")
    def set_pending_admin(self, sender: str, pending_admin: str):
        self._require_self(sender, "setPendingAdmin")
        self.pending_admin = normalize_address(pending_admin)
        self.emit(NewPendingAdmin(self.pending_admin))
        logger.info(f"Timelock pending admin set to {self.pending_admin}")

    # ── Queue ─────────────────────────────────────────────────────────

    def queued_transactions(self, tx_hash: bytes) -> bool:
        return tx_hash in self._queued

    def is_queued(self, target: str, value: int, signature: str, data: bytes, eta: int) -> bool:
        return transaction_hash(target, value, signature, data, eta) in self._queued

    def queue_transaction(
        self,
        sender: str,
        target: str,
        value: int,
        signature: str,
        data: bytes,
        eta: int,
    ) -> bytes:
        self._require_admin(sender, "queueTransaction")
        earliest = add256(self.host.timestamp, self.delay)
        if eta < earliest:
            raise TimelockDelayError(
                f"queueTransaction: Estimated execution block must satisfy delay "
                f"(eta={eta} < {earliest})"
            )
        tx_hash = transaction_hash(target, value, signature, data, eta)
        self._queued.add(tx_hash)
        self.emit(QueueTransaction(tx_hash, normalize_address(target), value, signature, bytes(data), eta))
        logger.debug(f"Timelock queued 0x{tx_hash.hex()[:16]} → {target} {signature} eta={eta}")
        return tx_hash

    def cancel_transaction(
        self,
        sender: str,
        target: str,
        value: int,
        signature: str,
        data: bytes,
        eta: int,
    ) -> bytes:
        self._require_admin(sender, "cancelTransaction")
        tx_hash = transaction_hash(target, value, signature, data, eta)
        self._queued.discard(tx_hash)
        self.emit(CancelTransaction(tx_hash, normalize_address(target), value, signature, bytes(data), eta))
        logger.debug(f"Timelock canceled 0x{tx_hash.hex()[:16]}")
        return tx_hash

    def execute_transaction(
        self,
        sender: str,
        target: str,
        value: int,
        signature: str,
        data: bytes,
        eta: int,
        msg_value: int = 0,
    ) -> Optional[Any]:
        """
        Run a queued call, forwarding *value* from the Timelock's balance.

        *msg_value* is first moved from *sender* to the Timelock.
        """
        with self.host.transaction():
            self._require_admin(sender, "executeTransaction")
            self.host.transfer(sender, self.address, msg_value)

            tx_hash = transaction_hash(target, value, signature, data, eta)
            if tx_hash not in self._queued:
                raise TransactionNotQueuedError(
                    "executeTransaction: Transaction hasn't been queued."
                )
            now = self.host.timestamp
            if now < eta:
                raise TimelockNotReadyError(
                    f"executeTransaction: Transaction hasn't surpassed time lock. "
                    f"(remaining={eta - now}s)"
                )
            if now > add256(eta, self.GRACE_PERIOD):
                raise StaleTransactionError("executeTransaction: Transaction is stale.")

            self._queued.discard(tx_hash)

            call_data = encode_call_data(signature, data)
            try:
                result = self.host.call(self.address, target, value, call_data)
            except ChainGovException as e:
                raise TransactionRevertedError(
                    f"executeTransaction: Transaction execution reverted. ({e})"
                ) from e

            self.emit(ExecuteTransaction(tx_hash, normalize_address(target), value, signature, bytes(data), eta))
            logger.info(f"Timelock executed {signature or '<raw call>'} on {target} (value={value})")
            return result

    # ── Snapshot / restore ────────────────────────────────────────────

    def take_snapshot(self) -> Dict[str, Any]:
        snapshot = super().take_snapshot()
        snapshot.update({
            "admin": self.admin,
            "pending_admin": self.pending_admin,
            "delay": self.delay,
            "queued": copy.copy(self._queued),
        })
        return snapshot

    def _restore_snapshot(self, snapshot: Dict[str, Any]) -> None:
        super()._restore_snapshot(snapshot)
        self.admin = snapshot["admin"]
        self.pending_admin = snapshot["pending_admin"]
        self.delay = snapshot["delay"]
        self._queued = snapshot["queued"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "admin": self.admin,
            "pendingAdmin": self.pending_admin,
            "delay": self.delay,
            "gracePeriod": self.GRACE_PERIOD,
            "minimumDelay": self.MINIMUM_DELAY,
            "maximumDelay": self.MAXIMUM_DELAY,
            "queuedCount": len(self._queued),
        }

    def __repr__(self) -> str:
        return f"<Timelock admin={self.admin} delay={self.delay} queued={len(self._queued)}>"

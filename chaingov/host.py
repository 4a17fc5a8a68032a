"""
Deterministic Chain Host

The execution environment the governor runs in:
  - block height and timestamp (advanced explicitly, never by wall clock)
  - native value balances with checked transfers
  - contracts registered at addresses, dispatched by function selector
  - transactions: every public operation runs inside ``host.transaction()``;
    if it raises, all registered contracts, balances and pending events are
    restored to the snapshot taken when the outermost transaction began

Operations never interleave: the host assumes a total order over calls.
"""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .constants import BLOCK_TIME, GENESIS_TIMESTAMP
from .crypto.abi import compute_function_selector, decode_args, signature_arg_types
from .crypto.address import normalize_address
from .exceptions import CallRevertedError, ChainGovException, InsufficientFundsError
from .logger import get_logger
from .safemath import add256, require_uint256, sub256

logger = get_logger(__name__)


def external(signature: str) -> Callable:
    """
    Mark a contract method as callable through ``ChainHost.call``.

    The method receives the caller's address first, followed by the
    arguments decoded from call data according to *signature*.
    """
    def decorator(fn: Callable) -> Callable:
        fn._abi_signature = signature
        return fn
    return decorator


class Contract:
    """
    Base class for objects living at an address on a ChainHost.

    Subclasses extend ``take_snapshot`` / ``_restore_snapshot`` with their
    own mutable state so failed transactions can be rolled back. A snapshot
    must not share mutable objects with the live contract.
    """

    def __init__(self, host: "ChainHost", address: str):
        self.host = host
        self.address = normalize_address(address)
        self._events: List[Any] = []
        host.deploy(self)

    # ── ABI dispatch ──────────────────────────────────────────────────

    @classmethod
    def _abi_table(cls) -> Dict[bytes, Tuple[str, str]]:
        table = cls.__dict__.get("_abi_cache")
        if table is None:
            table = {}
            for klass in reversed(cls.__mro__):
                for name, attr in vars(klass).items():
                    signature = getattr(attr, "_abi_signature", None)
                    if signature:
                        table[compute_function_selector(signature)] = (signature, name)
            cls._abi_cache = table
        return table

    def handle_call(self, sender: str, value: int, call_data: bytes) -> Any:
        """Dispatch raw call data to the matching ``@external`` method."""
        if not call_data:
            # Plain value transfer
            return None
        selector = bytes(call_data[:4])
        entry = self._abi_table().get(selector)
        if entry is None:
            raise CallRevertedError(
                f"{type(self).__name__} at {self.address} has no function "
                f"for selector 0x{selector.hex()}"
            )
        signature, name = entry
        arg_types = signature_arg_types(signature)
        try:
            args = decode_args(arg_types, bytes(call_data[4:])) if arg_types else ()
        except Exception as e:  # eth_abi raises several decoding error types
            raise CallRevertedError(f"Cannot decode arguments for {signature}: {e}") from e
        return getattr(self, name)(sender, *args)

    # ── Events ────────────────────────────────────────────────────────

    def emit(self, event: Any) -> None:
        self._events.append(event)
        self.host._record_event(self, event)

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    # ── Snapshot / restore ────────────────────────────────────────────

    def take_snapshot(self) -> Dict[str, Any]:
        """Capture current state for potential revert."""
        return {"events": len(self._events)}

    def _restore_snapshot(self, snapshot: Dict[str, Any]) -> None:
        """Restore state from snapshot."""
        del self._events[snapshot["events"]:]


class ChainHost:
    """
    In-process chain: clock, balances, contract registry and transactions.
    """

    def __init__(
        self,
        chain_id: int = 1,
        block_number: int = 1,
        timestamp: int = GENESIS_TIMESTAMP,
        block_time: int = BLOCK_TIME,
    ):
        self.chain_id = chain_id
        self._block_number = require_uint256(block_number, "block_number")
        self._timestamp = require_uint256(timestamp, "timestamp")
        self.block_time = block_time

        self._contracts: Dict[str, Contract] = {}
        self._balances: Dict[str, int] = {}

        self._tx_depth = 0
        self._pending_events: List[Tuple[Contract, Any]] = []
        self._listeners: List[Callable[[Contract, Any], None]] = []

    # ── Clock ─────────────────────────────────────────────────────────

    @property
    def block_number(self) -> int:
        return self._block_number

    @property
    def timestamp(self) -> int:
        return self._timestamp

    def mine(self, blocks: int = 1, seconds: Optional[int] = None) -> int:
        """
        Advance the chain by *blocks*.

        The timestamp moves by *seconds* if given, else by
        ``blocks * block_time``. Returns the new block number.
        """
        if blocks < 0:
            raise ValueError("Cannot mine a negative number of blocks")
        elapsed = seconds if seconds is not None else blocks * self.block_time
        if elapsed < 0:
            raise ValueError("Time cannot move backwards")
        self._block_number = add256(self._block_number, blocks)
        self._timestamp = add256(self._timestamp, elapsed)
        return self._block_number

    def mine_to(self, block_number: int) -> int:
        """Mine until the chain is at *block_number*."""
        if block_number < self._block_number:
            raise ValueError(
                f"Block {block_number} is in the past (current={self._block_number})"
            )
        return self.mine(block_number - self._block_number)

    def advance_time(self, seconds: int) -> int:
        """Move the timestamp forward without producing blocks."""
        if seconds < 0:
            raise ValueError("Time cannot move backwards")
        self._timestamp = add256(self._timestamp, seconds)
        return self._timestamp

    def set_timestamp(self, timestamp: int) -> int:
        if timestamp < self._timestamp:
            raise ValueError(
                f"Timestamp {timestamp} is in the past (current={self._timestamp})"
            )
        self._timestamp = require_uint256(timestamp, "timestamp")
        return self._timestamp

    # ── Contracts ─────────────────────────────────────────────────────

    def deploy(self, contract: Contract) -> Contract:
        if contract.address in self._contracts:
            raise ChainGovException(f"Address {contract.address} already has a contract")
        self._contracts[contract.address] = contract
        logger.debug(f"Deployed {type(contract).__name__} at {contract.address}")
        return contract

    def contract_at(self, address: str) -> Optional[Contract]:
        return self._contracts.get(normalize_address(address))

    # ── Native value ──────────────────────────────────────────────────

    def balance_of(self, address: str) -> int:
        return self._balances.get(normalize_address(address), 0)

    def set_balance(self, address: str, amount: int) -> None:
        """Credit an account directly (genesis allocation / test funding)."""
        self._balances[normalize_address(address)] = require_uint256(amount, "amount")

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        require_uint256(amount, "amount")
        if amount == 0:
            return
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise InsufficientFundsError(
                f"{sender} balance {balance} < transfer amount {amount}"
            )
        self._balances[sender] = sub256(balance, amount)
        self._balances[recipient] = add256(self._balances.get(recipient, 0), amount)

    # ── Calls ─────────────────────────────────────────────────────────

    def call(self, sender: str, target: str, value: int, call_data: bytes) -> Any:
        """
        Send *value* and *call_data* from *sender* to *target*.

        Accounts without a contract accept any call. Failures raise
        CallRevertedError (or a subclass) and, inside a transaction,
        roll back everything done so far.
        """
        with self.transaction():
            self.transfer(sender, target, value)
            contract = self._contracts.get(normalize_address(target))
            if contract is None:
                return None
            return contract.handle_call(normalize_address(sender), value, call_data)

    # ── Events ────────────────────────────────────────────────────────

    def subscribe(self, listener: Callable[[Contract, Any], None]) -> None:
        """Receive ``(contract, event)`` for every committed event."""
        self._listeners.append(listener)

    def _record_event(self, contract: Contract, event: Any) -> None:
        self._pending_events.append((contract, event))
        if self._tx_depth == 0:
            self._flush_events()

    def _flush_events(self) -> None:
        pending, self._pending_events = self._pending_events, []
        for contract, event in pending:
            for listener in self._listeners:
                listener(contract, event)

    # ── Transactions ──────────────────────────────────────────────────

    def take_snapshot(self) -> Dict[str, Any]:
        """Capture balances and every contract's state."""
        return {
            "balances": dict(self._balances),
            "contracts": {
                address: contract.take_snapshot()
                for address, contract in self._contracts.items()
            },
        }

    def _restore_snapshot(self, snapshot: Dict[str, Any]) -> None:
        self._balances = snapshot["balances"]
        for address, contract_snapshot in snapshot["contracts"].items():
            self._contracts[address]._restore_snapshot(contract_snapshot)
        self._pending_events = []

    @contextmanager
    def transaction(self) -> Iterator["ChainHost"]:
        """
        All-or-nothing scope. Nested scopes join the outermost one.
        """
        if self._tx_depth > 0:
            self._tx_depth += 1
            try:
                yield self
            finally:
                self._tx_depth -= 1
            return

        snapshot = self.take_snapshot()
        self._tx_depth = 1
        try:
            yield self
        except Exception as e:
            self._restore_snapshot(snapshot)
            logger.debug(f"Transaction reverted at block {self._block_number}: {e}")
            raise
        finally:
            self._tx_depth = 0
        self._flush_events()

    def __repr__(self) -> str:
        return (
            f"<ChainHost chain_id={self.chain_id} block={self._block_number} "
            f"timestamp={self._timestamp} contracts={len(self._contracts)}>"
        )

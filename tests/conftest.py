"""
Shared fixtures: a fresh chain with a voting ledger, a Timelock administered
by the governor, a governor and a recording target contract.
"""

import pytest

from chaingov.governance import GovernanceParameters, Governor, Timelock
from chaingov.host import ChainHost
from chaingov.tokens import VotingPowerLedger

from helpers import (
    ALICE,
    ALICE_VOTES,
    BOB,
    BOB_VOTES,
    CAROL,
    CAROL_VOTES,
    GOVERNOR_ADDRESS,
    GUARDIAN,
    LEDGER_ADDRESS,
    TIMELOCK_ADDRESS,
    TWO_DAYS,
    Recorder,
)


@pytest.fixture
def host():
    return ChainHost(chain_id=1, block_number=1)


@pytest.fixture
def ledger(host):
    ledger = VotingPowerLedger(host, LEDGER_ADDRESS)
    ledger.set_votes(ALICE, ALICE_VOTES)
    ledger.set_votes(BOB, BOB_VOTES)
    ledger.set_votes(CAROL, CAROL_VOTES)
    host.mine()
    return ledger


@pytest.fixture
def timelock(host):
    return Timelock(host, TIMELOCK_ADDRESS, admin=GOVERNOR_ADDRESS, delay=TWO_DAYS)


@pytest.fixture
def params():
    return GovernanceParameters()


@pytest.fixture
def governor(host, ledger, timelock, params):
    return Governor(host, GOVERNOR_ADDRESS, timelock, ledger, GUARDIAN, params=params)


@pytest.fixture
def recorder(host):
    return Recorder(host)


@pytest.fixture
def events(host):
    """Every committed event, as (contract, event) pairs."""
    seen = []
    host.subscribe(lambda contract, event: seen.append((contract, event)))
    return seen

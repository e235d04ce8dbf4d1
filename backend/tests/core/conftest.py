"""Core test fixtures — ledgers wired the way a paired portfolio is.

Invariants:
    - Pure fixtures: no IO, no DB, deterministic FixedClock
    - vault and shares are bound to each other and to portfolio 1
    - INVESTOR and OTHER start with 1_000_000 value units each
"""

import pytest

from mosaic.core.custody_ledger import CustodyLedger
from mosaic.core.domain_types import Principal
from mosaic.core.event_log import FixedClock
from mosaic.core.registry import Registry
from mosaic.core.share_ledger import ShareLedger
from mosaic.core.value_ledger import ValueLedger
from principals import (
    ADMIN, INVESTOR, MANAGER, OTHER, REGISTRY, STARTING_UNITS, TOKEN, VAULT,
)


@pytest.fixture
def clock():
    return FixedClock(height=42, unix_time=1_700_000_000)


@pytest.fixture
def registry(clock):
    return Registry(REGISTRY, ADMIN, clock)


@pytest.fixture
def approved_registry(registry):
    """Registry where MANAGER may create up to 3 portfolios."""
    registry.approve_manager(ADMIN, MANAGER, True, 3)
    return registry


@pytest.fixture
def value():
    ledger = ValueLedger(Principal("native-value"))
    ledger.credit(INVESTOR, STARTING_UNITS)
    ledger.credit(OTHER, STARTING_UNITS)
    return ledger


@pytest.fixture
def shares(clock):
    ledger = ShareLedger(TOKEN, MANAGER, name="Fund A", symbol="FNDA", clock=clock)
    ledger.initialize(MANAGER, VAULT)
    return ledger


@pytest.fixture
def vault(value, shares, clock):
    ledger = CustodyLedger(VAULT, MANAGER, value, clock)
    ledger.initialize(MANAGER, 1, shares)
    return ledger

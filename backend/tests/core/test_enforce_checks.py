"""Enforce Functions — pure precondition checks return the first violation.

Tests cover:
    - validate_* return None when the call may commit
    - First failure wins when several preconditions are violated
    - No check mutates state
"""

from mosaic.core.custody_state import CustodyState
from mosaic.core.enforce_custody import validate_add_asset, validate_deposit, validate_initialize
from mosaic.core.enforce_registry import (
    validate_approve_manager, validate_create_portfolio, validate_set_portfolio_active,
)
from mosaic.core.enforce_shares import validate_mint, validate_transfer_from
from mosaic.core.errors import Rejection
from mosaic.core.registry_state import ManagerPermission, RegistryState
from mosaic.core.share_ledger_state import ShareLedgerState
from principals import ADMIN, ASSET, INVESTOR, MANAGER, OTHER, TOKEN, VAULT


def registry_state() -> RegistryState:
    state = RegistryState(admin=ADMIN)
    state.manager_permissions[MANAGER] = ManagerPermission(True, 2, 0)
    return state


def test_create_portfolio_passes():
    assert validate_create_portfolio(
        registry_state(), MANAGER, "Fund", VAULT, TOKEN, 10, 10, None,
    ) is None


def test_create_portfolio_everything_wrong_reports_disabled():
    state = registry_state()
    state.contract_enabled = False
    assert validate_create_portfolio(
        state, OTHER, "", None, None, 99_999, 99_999, 5,
    ) is Rejection.CONTRACT_DISABLED


def test_create_portfolio_quota_exhausted():
    state = registry_state()
    state.manager_permissions[MANAGER].portfolios_created = 2
    assert validate_create_portfolio(
        state, MANAGER, "Fund", VAULT, TOKEN, 10, 10, None,
    ) is Rejection.NOT_AUTHORIZED


def test_approve_manager_admin_first():
    assert validate_approve_manager(registry_state(), MANAGER, None, 0) is Rejection.NOT_AUTHORIZED
    assert validate_approve_manager(registry_state(), ADMIN, None, 0) is Rejection.ZERO_ADDRESS


def test_set_portfolio_active_authorizes_before_lookup():
    state = registry_state()
    assert validate_set_portfolio_active(state, OTHER, 1) is Rejection.NOT_AUTHORIZED
    assert validate_set_portfolio_active(state, MANAGER, 1) is Rejection.NOT_AUTHORIZED
    assert validate_set_portfolio_active(state, ADMIN, 1) is Rejection.INVALID_PORTFOLIO


def test_initialize_unresolved_share_ledger_checked_after_manager():
    state = CustodyState(principal=VAULT, manager=MANAGER)
    assert validate_initialize(state, OTHER, 1, TOKEN, False) is Rejection.NOT_AUTHORIZED
    state.contract_enabled = False
    assert validate_initialize(state, MANAGER, 1, TOKEN, False) is Rejection.CONTRACT_DISABLED
    state.contract_enabled = True
    assert validate_initialize(state, MANAGER, 1, TOKEN, False) is Rejection.INVALID_TOKEN_CONTRACT
    assert validate_initialize(state, MANAGER, 1, TOKEN) is None


def test_mint_checks_do_not_mutate():
    state = ShareLedgerState(principal=TOKEN, manager=MANAGER, vault_ref=VAULT, max_supply=5)
    assert validate_mint(state, VAULT, INVESTOR, 6) is Rejection.MAX_SUPPLY_REACHED
    assert validate_mint(state, VAULT, INVESTOR, 5) is None
    assert state.total_supply == 0


def test_transfer_from_without_allowance():
    state = ShareLedgerState(principal=TOKEN, manager=MANAGER, balances={INVESTOR: 10})
    assert validate_transfer_from(
        state, OTHER, INVESTOR, OTHER, 1,
    ) is Rejection.INSUFFICIENT_ALLOWANCE


def test_deposit_into_unbound_vault():
    state = CustodyState(principal=VAULT, manager=MANAGER)
    assert validate_deposit(state, 10) is Rejection.INVALID_TOKEN_CONTRACT


def test_add_asset_order_contract_before_id():
    state = CustodyState(principal=VAULT, manager=MANAGER)
    assert validate_add_asset(state, MANAGER, -1, None, 1) is Rejection.ZERO_ADDRESS
    assert validate_add_asset(state, MANAGER, -1, ASSET, 1) is Rejection.INVALID_ASSET

"""Registry Enforcement — precondition checks for every registry entry point.

Invariants:
    - All functions are PURE: no IO, no side effects, no state mutation
    - Return the first violated Rejection, or None when the call may commit
    - Check order inside each validate_* function is the wire contract:
      first failure wins
"""

from mosaic.core.domain_types import (
    BASIS_POINTS_MAX, MAX_DESCRIPTION_LENGTH, MAX_NAME_LENGTH, Principal, is_uint,
)
from mosaic.core.errors import Rejection
from mosaic.core.registry_state import RegistryState


def check_admin(state: RegistryState, caller: Principal) -> Rejection | None:
    if caller != state.admin:
        return Rejection.NOT_AUTHORIZED
    return None


def check_enabled(state: RegistryState) -> Rejection | None:
    if not state.contract_enabled:
        return Rejection.CONTRACT_DISABLED
    return None


def check_fee_ceiling(fee_bp: int) -> Rejection | None:
    if not is_uint(fee_bp) or fee_bp > BASIS_POINTS_MAX:
        return Rejection.INVALID_FEE
    return None


def check_name(name: str) -> Rejection | None:
    if not isinstance(name, str) or not 1 <= len(name) <= MAX_NAME_LENGTH:
        return Rejection.INVALID_NAME
    return None


def check_description(description: str) -> Rejection | None:
    if not isinstance(description, str) or not 1 <= len(description) <= MAX_DESCRIPTION_LENGTH:
        return Rejection.INVALID_DESCRIPTION
    return None


def validate_approve_manager(
    state: RegistryState, caller: Principal,
    manager: Principal | None, max_portfolios: int,
) -> Rejection | None:
    if error := check_admin(state, caller):
        return error
    if manager is None:
        return Rejection.ZERO_ADDRESS
    if not is_uint(max_portfolios) or max_portfolios == 0:
        return Rejection.INVALID_MAX_PORTFOLIOS
    return None


def validate_create_portfolio(
    state: RegistryState,
    caller: Principal,
    name: str,
    vault_ref: Principal | None,
    token_ref: Principal | None,
    management_fee_bp: int,
    performance_fee_bp: int,
    strategy_id: int | None,
) -> Rejection | None:
    """Enabled → quota → name → refs → fees → strategy."""
    if error := check_enabled(state):
        return error
    if not state.permission_for(caller).has_quota:
        return Rejection.NOT_AUTHORIZED
    if error := check_name(name):
        return error
    if vault_ref is None or token_ref is None:
        return Rejection.ZERO_ADDRESS
    for fee in (management_fee_bp, performance_fee_bp):
        if not is_uint(fee) or fee > state.max_portfolio_fee:
            return Rejection.INVALID_FEE
    if strategy_id is not None and not state.strategy_exists(strategy_id):
        return Rejection.INVALID_STRATEGY
    return None


def validate_register_strategy(
    state: RegistryState, description: str, strategy_id: int,
) -> Rejection | None:
    if error := check_enabled(state):
        return error
    if error := check_description(description):
        return error
    if not is_uint(strategy_id) or strategy_id == 0:
        return Rejection.INVALID_STRATEGY
    if state.strategy_exists(strategy_id):
        return Rejection.INVALID_STRATEGY
    return None


def validate_approve_strategy(
    state: RegistryState, caller: Principal, strategy_id: int,
) -> Rejection | None:
    if error := check_admin(state, caller):
        return error
    if not is_uint(strategy_id) or strategy_id == 0:
        return Rejection.INVALID_STRATEGY
    if not state.strategy_exists(strategy_id):
        return Rejection.INVALID_STRATEGY
    return None


def validate_set_portfolio_active(
    state: RegistryState, caller: Principal, portfolio_id: int,
) -> Rejection | None:
    """Admin or the portfolio's manager → portfolio exists."""
    portfolio = state.portfolios.get(portfolio_id)
    manager = portfolio.manager if portfolio is not None else None
    if caller != state.admin and (manager is None or caller != manager):
        return Rejection.NOT_AUTHORIZED
    if portfolio is None:
        return Rejection.INVALID_PORTFOLIO
    return None

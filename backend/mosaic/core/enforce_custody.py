"""Custody Enforcement — precondition checks for vault entry points.

Invariants:
    - All functions are PURE: return the first violated Rejection or None
    - These checks cover only the vault's own tables; the nested value transfer
      and mint/burn enforce their own preconditions inside the same transaction
"""

from mosaic.core.custody_state import CustodyState
from mosaic.core.domain_types import UINT128_MAX, Principal, is_uint
from mosaic.core.errors import Rejection


def check_manager(state: CustodyState, caller: Principal) -> Rejection | None:
    if caller != state.manager:
        return Rejection.NOT_AUTHORIZED
    return None


def check_enabled(state: CustodyState) -> Rejection | None:
    if not state.contract_enabled:
        return Rejection.CONTRACT_DISABLED
    return None


def check_positive_amount(amount: int) -> Rejection | None:
    if not is_uint(amount) or amount == 0:
        return Rejection.INVALID_AMOUNT
    return None


def validate_initialize(
    state: CustodyState, caller: Principal,
    portfolio_id: int, share_ledger_ref: Principal | None, issuer_resolved: bool = True,
) -> Rejection | None:
    """Manager → enabled → share ledger named → share ledger real → portfolio id."""
    if error := check_manager(state, caller):
        return error
    if error := check_enabled(state):
        return error
    if share_ledger_ref is None:
        return Rejection.ZERO_ADDRESS
    if not issuer_resolved:
        return Rejection.INVALID_TOKEN_CONTRACT
    if not is_uint(portfolio_id) or portfolio_id == 0:
        return Rejection.INVALID_PORTFOLIO
    return None


def validate_deposit(state: CustodyState, amount: int) -> Rejection | None:
    if error := check_enabled(state):
        return error
    if error := check_positive_amount(amount):
        return error
    if not state.is_bound:
        return Rejection.INVALID_TOKEN_CONTRACT
    if state.total_value_locked + amount > UINT128_MAX:
        return Rejection.INVALID_AMOUNT
    return None


def validate_withdraw(
    state: CustodyState, caller: Principal, amount: int,
) -> Rejection | None:
    if error := check_enabled(state):
        return error
    if error := check_positive_amount(amount):
        return error
    if state.balance_of(caller) < amount:
        return Rejection.INSUFFICIENT_BALANCE
    if not state.is_bound:
        return Rejection.INVALID_TOKEN_CONTRACT
    return None


def validate_add_asset(
    state: CustodyState, caller: Principal, asset_id: int,
    asset_contract: Principal | None, amount: int,
) -> Rejection | None:
    if error := check_manager(state, caller):
        return error
    if error := check_enabled(state):
        return error
    if error := check_positive_amount(amount):
        return error
    if asset_contract is None:
        return Rejection.ZERO_ADDRESS
    if not is_uint(asset_id):
        return Rejection.INVALID_ASSET
    if asset_id in state.assets:
        return Rejection.ASSET_EXISTS
    return None


def validate_remove_asset(
    state: CustodyState, caller: Principal, asset_id: int,
) -> Rejection | None:
    if error := check_manager(state, caller):
        return error
    if error := check_enabled(state):
        return error
    if not is_uint(asset_id):
        return Rejection.INVALID_ASSET
    if asset_id not in state.assets:
        return Rejection.UNKNOWN_ASSET
    return None

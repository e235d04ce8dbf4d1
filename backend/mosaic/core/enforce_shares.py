"""Share Ledger Enforcement — precondition checks for mint, burn and transfers.

Invariants:
    - All functions are PURE: return the first violated Rejection or None
    - Supply and balance arithmetic is checked here, so commits never underflow
      or exceed max_supply
"""

from mosaic.core.domain_types import Principal, is_uint
from mosaic.core.errors import Rejection
from mosaic.core.share_ledger_state import ShareLedgerState


def check_enabled(state: ShareLedgerState) -> Rejection | None:
    if not state.contract_enabled:
        return Rejection.CONTRACT_DISABLED
    return None


def check_positive_amount(amount: int) -> Rejection | None:
    if not is_uint(amount) or amount == 0:
        return Rejection.INVALID_AMOUNT
    return None


def validate_initialize(
    state: ShareLedgerState, caller: Principal, vault_ref: Principal | None,
) -> Rejection | None:
    if caller != state.manager:
        return Rejection.NOT_AUTHORIZED
    if error := check_enabled(state):
        return error
    if vault_ref is None:
        return Rejection.ZERO_ADDRESS
    return None


def validate_mint(
    state: ShareLedgerState, caller: Principal,
    recipient: Principal | None, amount: int,
) -> Rejection | None:
    if error := check_enabled(state):
        return error
    if state.vault_ref is None or caller != state.vault_ref:
        return Rejection.NOT_AUTHORIZED
    if error := check_positive_amount(amount):
        return error
    if recipient is None:
        return Rejection.ZERO_ADDRESS
    if amount > state.supply_headroom:
        return Rejection.MAX_SUPPLY_REACHED
    return None


def validate_burn(
    state: ShareLedgerState, caller: Principal, amount: int,
) -> Rejection | None:
    """Burn always debits the caller, which must be the bound vault."""
    if error := check_enabled(state):
        return error
    if state.vault_ref is None or caller != state.vault_ref:
        return Rejection.NOT_AUTHORIZED
    if error := check_positive_amount(amount):
        return error
    if state.balance_of(caller) < amount:
        return Rejection.INSUFFICIENT_BALANCE
    return None


def validate_transfer(
    state: ShareLedgerState, caller: Principal,
    recipient: Principal | None, amount: int,
) -> Rejection | None:
    if error := check_enabled(state):
        return error
    if error := check_positive_amount(amount):
        return error
    if recipient is None:
        return Rejection.ZERO_ADDRESS
    if state.balance_of(caller) < amount:
        return Rejection.INSUFFICIENT_BALANCE
    return None


def validate_approve(
    state: ShareLedgerState, spender: Principal | None, amount: int,
) -> Rejection | None:
    if error := check_enabled(state):
        return error
    if spender is None:
        return Rejection.ZERO_ADDRESS
    if not is_uint(amount):
        return Rejection.INVALID_AMOUNT
    return None


def validate_transfer_from(
    state: ShareLedgerState, caller: Principal,
    owner: Principal | None, recipient: Principal | None, amount: int,
) -> Rejection | None:
    if error := check_enabled(state):
        return error
    if error := check_positive_amount(amount):
        return error
    if owner is None or recipient is None:
        return Rejection.ZERO_ADDRESS
    if state.allowance_of(owner, caller) < amount:
        return Rejection.INSUFFICIENT_ALLOWANCE
    if state.balance_of(owner) < amount:
        return Rejection.INSUFFICIENT_BALANCE
    return None

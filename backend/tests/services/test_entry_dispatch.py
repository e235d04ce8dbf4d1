"""Entry Dispatch — explicit entry tables, argument coercion and envelopes.

Tests cover:
    - Unknown ledger / entry / accessor envelopes
    - Missing or mistyped arguments return INVALID_ARGUMENTS without touching state
    - Rejections carry the numeric code of the ledger that rejected (nested included)
    - The legacy null identity is normalised to null at the boundary
    - Read accessors coerce query-string arguments
"""

import pytest

from mosaic.core.domain_types import EventType, LedgerKind
from mosaic.services.entry_dispatch import (
    INVALID_ARGUMENTS, UNKNOWN_ENTRY, UNKNOWN_LEDGER, EntryDispatch, to_wire,
)
from mosaic.services.portfolio_engine import VALUE_LEDGER_PRINCIPAL, PortfolioEngine
from principals import (
    ADMIN, INVESTOR, LEGACY_NULL, MANAGER, OTHER, REGISTRY, STARTING_UNITS, TOKEN, VAULT,
)


@pytest.fixture
def dispatch(engine):
    engine.open_portfolio(MANAGER, "Fund A", 500, 300)
    return EntryDispatch(engine)


# ─── Routing ────────────────────────────────────────────────────

def test_unknown_ledger(dispatch):
    envelope = dispatch.execute("ST000.nowhere", "mint", VAULT, {})
    assert envelope["error"] == UNKNOWN_LEDGER


def test_unknown_entry(dispatch):
    envelope = dispatch.execute(VALUE_LEDGER_PRINCIPAL, "mint", INVESTOR, {})
    assert envelope["error"] == UNKNOWN_ENTRY


def test_unknown_accessor(dispatch):
    assert dispatch.read(TOKEN, "get-vault-balance", {})["error"] == UNKNOWN_ENTRY
    assert dispatch.read("ST000.nowhere", "get-balance", {})["error"] == UNKNOWN_LEDGER


def test_entry_tables_are_explicit(dispatch):
    assert dispatch.entries(LedgerKind.VALUE) == ["transfer"]
    assert dispatch.entries(LedgerKind.CUSTODY) == [
        "add-asset", "deposit", "initialize", "remove-asset", "set-enabled", "withdraw",
    ]
    assert "transfer-from" in dispatch.entries(LedgerKind.SHARES)
    assert "get-total-value-locked" in dispatch.reads(LedgerKind.CUSTODY)


# ─── Arguments ──────────────────────────────────────────────────

def test_missing_argument(dispatch, engine):
    envelope = dispatch.execute(VAULT, "deposit", INVESTOR, {})
    assert envelope["error"] == INVALID_ARGUMENTS
    assert "amount" in envelope["message"]
    assert engine.resolve(VAULT).get_total_value_locked() == 0


@pytest.mark.parametrize("amount", ["10", True, 1.5, None])
def test_mistyped_amount(dispatch, amount):
    envelope = dispatch.execute(VAULT, "deposit", INVESTOR, {"amount": amount})
    assert envelope["error"] == INVALID_ARGUMENTS


def test_value_transfer_rejects_null_parties(dispatch):
    envelope = dispatch.execute(
        VALUE_LEDGER_PRINCIPAL, "transfer", INVESTOR,
        {"sender": INVESTOR, "recipient": None, "amount": 5},
    )
    assert envelope["error"] == INVALID_ARGUMENTS


def test_negative_amount_reaches_the_ledger(dispatch):
    envelope = dispatch.execute(VAULT, "deposit", INVESTOR, {"amount": -1})
    assert envelope == {"error": 101, "reason": "INVALID_AMOUNT", "component": "custody"}


# ─── Envelopes ──────────────────────────────────────────────────

def test_accepted_entry_returns_value(dispatch, engine):
    envelope = dispatch.execute(VAULT, "deposit", INVESTOR, {"amount": 1000})

    assert envelope == {"value": True}
    assert engine.resolve(TOKEN).get_balance(INVESTOR) == 1000


def test_registry_entry_returns_new_id(dispatch):
    envelope = dispatch.execute(
        REGISTRY, "register-strategy", MANAGER,
        {"description": "Momentum", "strategy_id": 7},
    )
    assert envelope == {"value": 7}


def test_not_authorized_envelope(dispatch):
    envelope = dispatch.execute(TOKEN, "mint", OTHER, {"recipient": OTHER, "amount": 5})
    assert envelope == {"error": 100, "reason": "NOT_AUTHORIZED", "component": "shares"}


def test_nested_value_rejection_keeps_value_code(dispatch, engine):
    envelope = dispatch.execute(VAULT, "deposit", INVESTOR, {"amount": STARTING_UNITS + 1})

    assert envelope["error"] == 1
    assert envelope["component"] == "value"
    assert engine.value.get_balance(INVESTOR) == STARTING_UNITS


def test_nested_share_rejection_keeps_share_code(clock):
    engine = PortfolioEngine.create(
        ADMIN, clock, share_max_supply=1500, genesis_balances={INVESTOR: STARTING_UNITS},
    )
    engine.registry.approve_manager(ADMIN, MANAGER, True, 1)
    engine.open_portfolio(MANAGER, "Fund A", 0, 0)
    dispatch = EntryDispatch(engine)
    dispatch.execute(VAULT, "deposit", INVESTOR, {"amount": 1000})

    envelope = dispatch.execute(VAULT, "deposit", INVESTOR, {"amount": 501})

    assert envelope == {"error": 106, "reason": "MAX_SUPPLY_REACHED", "component": "shares"}
    assert engine.value.get_balance(VAULT) == 1000
    assert engine.resolve(VAULT).get_investor_balance(INVESTOR) == 1000


def test_value_transfer_for_someone_else(dispatch):
    envelope = dispatch.execute(
        VALUE_LEDGER_PRINCIPAL, "transfer", OTHER,
        {"sender": INVESTOR, "recipient": OTHER, "amount": 5},
    )
    assert envelope["error"] == 4


def test_legacy_null_identity_is_null(dispatch):
    envelope = dispatch.execute(
        REGISTRY, "approve-manager", ADMIN,
        {"manager": LEGACY_NULL, "can_create": True, "max_portfolios": 1},
    )
    assert envelope["error"] == 104

    envelope = dispatch.execute(TOKEN, "approve", INVESTOR, {"spender": LEGACY_NULL, "amount": 1})
    assert envelope["error"] == 103


def test_custody_initialize_with_non_share_ledger(dispatch):
    envelope = dispatch.execute(
        VAULT, "initialize", MANAGER, {"portfolio_id": 1, "share_ledger": REGISTRY},
    )
    assert envelope == {"error": 105, "reason": "INVALID_TOKEN_CONTRACT", "component": "custody"}


def test_custody_initialize_with_null_share_ledger(dispatch):
    envelope = dispatch.execute(
        VAULT, "initialize", MANAGER, {"portfolio_id": 1, "share_ledger": None},
    )
    assert envelope["error"] == 103


def test_custody_initialize_by_stranger_is_unauthorized_before_ledger_lookup(dispatch):
    envelope = dispatch.execute(
        VAULT, "initialize", OTHER, {"portfolio_id": 1, "share_ledger": "not-a-ledger"},
    )
    assert envelope == {"error": 100, "reason": "NOT_AUTHORIZED", "component": "custody"}


def test_custody_initialize_disabled_vault_before_ledger_lookup(dispatch):
    dispatch.execute(VAULT, "set-enabled", MANAGER, {"enabled": False})

    envelope = dispatch.execute(
        VAULT, "initialize", MANAGER, {"portfolio_id": 1, "share_ledger": "not-a-ledger"},
    )

    assert envelope["error"] == 102


# ─── Reads ──────────────────────────────────────────────────────

def test_reads_coerce_query_strings(dispatch):
    dispatch.execute(VAULT, "deposit", INVESTOR, {"amount": 250})

    assert dispatch.read(TOKEN, "get-balance", {"owner": INVESTOR}) == {"value": 250}
    assert dispatch.read(VAULT, "get-total-value-locked", {}) == {"value": 250}
    assert dispatch.read(REGISTRY, "get-portfolio-count", {}) == {"value": 1}
    assert dispatch.read(REGISTRY, "get-portfolio", {"portfolio_id": "1"})["value"]["vault_ref"] == VAULT


def test_read_event_renders_enum(dispatch):
    event = dispatch.read(VAULT, "get-event", {"event_id": "1"})["value"]
    assert event["event_id"] == 1
    assert event["event_type"] == EventType.VAULT_INITIALIZED.value


def test_read_absent_values(dispatch):
    assert dispatch.read(TOKEN, "get-event", {"event_id": "99"}) == {"value": None}
    assert dispatch.read(VALUE_LEDGER_PRINCIPAL, "get-balance", {"owner": OTHER}) == {
        "value": STARTING_UNITS,
    }


def test_read_bad_integer(dispatch):
    envelope = dispatch.read(REGISTRY, "get-portfolio", {"portfolio_id": "abc"})
    assert envelope["error"] == INVALID_ARGUMENTS


def test_touched_by_vault_includes_collaborators(dispatch, engine):
    touched = dispatch.touched_by(VAULT)
    assert [ledger.principal for ledger in touched] == [VAULT, TOKEN, VALUE_LEDGER_PRINCIPAL]
    assert dispatch.touched_by("ST000.nowhere") == []


def test_to_wire_nested():
    assert to_wire({"kind": LedgerKind.VALUE, "ids": (1, 2)}) == {"kind": "value", "ids": [1, 2]}

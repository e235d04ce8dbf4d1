"""Value Ledger — genesis credits and sender-initiated transfers.

Tests cover:
    - transfer check order: caller == sender → amount → self-transfer → balance
    - credit keeps total_issued equal to the sum of balances
    - snapshot / restore
"""

import pytest

from mosaic.core.domain_types import UINT128_MAX, Principal
from mosaic.core.errors import LedgerError
from mosaic.core.value_ledger import ValueLedger
from principals import INVESTOR, OTHER, STARTING_UNITS


def code(excinfo) -> int:
    return excinfo.value.numeric_code


def test_transfer_moves_units(value):
    assert value.transfer(INVESTOR, INVESTOR, OTHER, 250) is True
    assert value.get_balance(INVESTOR) == STARTING_UNITS - 250
    assert value.get_balance(OTHER) == STARTING_UNITS + 250
    assert sum(value.state.balances.values()) == value.get_total_issued()


def test_transfer_on_behalf_of_someone_else(value):
    with pytest.raises(LedgerError) as exc:
        value.transfer(OTHER, INVESTOR, OTHER, 1)
    assert code(exc) == 4


def test_transfer_zero(value):
    with pytest.raises(LedgerError) as exc:
        value.transfer(INVESTOR, INVESTOR, OTHER, 0)
    assert code(exc) == 3


def test_transfer_to_self(value):
    with pytest.raises(LedgerError) as exc:
        value.transfer(INVESTOR, INVESTOR, INVESTOR, 1)
    assert code(exc) == 2


def test_transfer_more_than_balance(value):
    with pytest.raises(LedgerError) as exc:
        value.transfer(INVESTOR, INVESTOR, OTHER, STARTING_UNITS + 1)
    assert code(exc) == 1
    assert value.get_balance(OTHER) == STARTING_UNITS


def test_caller_checked_before_amount(value):
    with pytest.raises(LedgerError) as exc:
        value.transfer(OTHER, INVESTOR, INVESTOR, 0)
    assert code(exc) == 4


def test_credit_tracks_total_issued():
    ledger = ValueLedger(Principal("native-value"))
    ledger.credit(INVESTOR, 10)
    ledger.credit(INVESTOR, 5)
    assert ledger.get_balance(INVESTOR) == 15
    assert ledger.get_total_issued() == 15


@pytest.mark.parametrize("amount", [0, -1])
def test_credit_rejects_non_positive(amount):
    ledger = ValueLedger(Principal("native-value"))
    with pytest.raises(LedgerError):
        ledger.credit(INVESTOR, amount)


def test_credit_rejects_overflow():
    ledger = ValueLedger(Principal("native-value"))
    ledger.credit(INVESTOR, UINT128_MAX)
    with pytest.raises(LedgerError) as exc:
        ledger.credit(OTHER, 1)
    assert code(exc) == 3
    assert ledger.get_balance(OTHER) == 0


def test_snapshot_restore(value):
    snapshot = value.snapshot()
    value.transfer(INVESTOR, INVESTOR, OTHER, 99)
    value.restore(snapshot)
    assert value.get_balance(INVESTOR) == STARTING_UNITS
    assert value.get_balance(OTHER) == STARTING_UNITS
    assert value.get_total_issued() == 2 * STARTING_UNITS


def test_absent_owner_reads_zero(value):
    assert value.get_balance(Principal("nobody")) == 0
    assert value.get_balance(None) == 0

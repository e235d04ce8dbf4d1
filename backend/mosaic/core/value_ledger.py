"""Value Ledger — the native value units investors deposit into custody.

This is the external settlement collaborator: it only moves already
denominated units between principals. Pricing and valuation are not its
concern.

Invariants:
    - sum(balances) == total_issued; units are created only by credit() at boot
    - transfer is initiated by the sender itself (caller == sender)
    - A rejected transfer leaves every balance untouched
"""

from dataclasses import dataclass, field

from mosaic.core.domain_types import UINT128_MAX, LedgerKind, Principal, is_uint
from mosaic.core.errors import LedgerError, Rejection


@dataclass
class ValueLedgerState:
    balances: dict[Principal, int] = field(default_factory=dict)
    total_issued: int = 0


class ValueLedger:
    kind = LedgerKind.VALUE

    def __init__(self, principal: Principal):
        self.principal = principal
        self.state = ValueLedgerState()

    def credit(self, recipient: Principal, amount: int) -> None:
        """Genesis allocation. Not an entry point."""
        if not is_uint(amount) or amount == 0 or self.state.total_issued + amount > UINT128_MAX:
            raise LedgerError(self.kind, Rejection.INVALID_AMOUNT)
        self.state.balances[recipient] = self.get_balance(recipient) + amount
        self.state.total_issued += amount

    def transfer(
        self, caller: Principal, sender: Principal, recipient: Principal, amount: int,
    ) -> bool:
        if caller != sender:
            raise LedgerError(self.kind, Rejection.NOT_AUTHORIZED)
        if not is_uint(amount) or amount == 0:
            raise LedgerError(self.kind, Rejection.INVALID_AMOUNT)
        if sender == recipient:
            raise LedgerError(self.kind, Rejection.SELF_TRANSFER)
        if self.get_balance(sender) < amount:
            raise LedgerError(self.kind, Rejection.INSUFFICIENT_BALANCE)
        self.state.balances[sender] -= amount
        self.state.balances[recipient] = self.get_balance(recipient) + amount
        return True

    def get_balance(self, owner: Principal | None) -> int:
        if owner is None:
            return 0
        return self.state.balances.get(owner, 0)

    def get_total_issued(self) -> int:
        return self.state.total_issued

    def checkpoint(self) -> ValueLedgerState:
        return ValueLedgerState(dict(self.state.balances), self.state.total_issued)

    def rollback(self, checkpoint: ValueLedgerState) -> None:
        self.state = checkpoint

    def state_snapshot(self) -> dict:
        return self.snapshot()

    def snapshot(self) -> dict:
        return {
            "principal": self.principal,
            "balances": [[owner, amount] for owner, amount in sorted(self.state.balances.items())],
            "total_issued": self.state.total_issued,
        }

    def restore(self, snapshot: dict) -> None:
        self.state = ValueLedgerState(
            balances={Principal(o): a for o, a in snapshot.get("balances", [])},
            total_issued=snapshot.get("total_issued", 0),
        )

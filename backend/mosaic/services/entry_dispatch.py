"""Entry Dispatch — explicit routing from (ledger kind, entry name) to a ledger method.

Invariants:
    - Every entry->method mapping is visible — no getattr magic, no auto-discovery
    - execute() and read() never raise for caller mistakes: they return one envelope,
      {"value": ...} on success or {"error": ...} on rejection
    - Numeric error codes come from the rejecting ledger (nested calls included)
    - Unknown ledgers return UNKNOWN_LEDGER, unknown entries UNKNOWN_ENTRY
    - Every entry call is logged with ledger, entry, caller and outcome

Design Decisions:
    - Explicit dicts over getattr: adding an entry point requires editing a table
      (ADR: ExMA no convention-over-config)
    - Arguments arrive as a JSON object (entries) or query strings (reads);
      EntryArguments converts both to core types and normalises null identities
"""

import logging
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Callable

from mosaic.core.domain_types import LedgerKind, Principal, as_principal
from mosaic.core.errors import InvalidArgumentsError, LedgerError
from mosaic.core.share_ledger import ShareLedger
from mosaic.services.portfolio_engine import PortfolioEngine

logger = logging.getLogger(__name__)

UNKNOWN_LEDGER = "UNKNOWN_LEDGER"
UNKNOWN_ENTRY = "UNKNOWN_ENTRY"
INVALID_ARGUMENTS = "INVALID_ARGUMENTS"


class EntryArguments:
    """Typed access to raw call arguments.

    With coerce=True (query strings) integers and flags are parsed from text.
    """

    def __init__(self, raw: dict | None, coerce: bool = False):
        self._raw = dict(raw or {})
        self._coerce = coerce

    def _require(self, name: str) -> Any:
        if name not in self._raw:
            raise InvalidArgumentsError(f"missing argument '{name}'")
        return self._raw[name]

    def principal(self, name: str) -> Principal | None:
        value = self._require(name)
        if value is not None and not isinstance(value, str):
            raise InvalidArgumentsError(f"argument '{name}' must be a principal")
        return as_principal(value)

    def identity(self, name: str) -> Principal:
        """A principal that may not be null."""
        if (value := self.principal(name)) is None:
            raise InvalidArgumentsError(f"argument '{name}' may not be null")
        return value

    def uint(self, name: str) -> int:
        return self._to_int(name, self._require(name))

    def optional_uint(self, name: str) -> int | None:
        value = self._raw.get(name)
        return None if value is None else self._to_int(name, value)

    def flag(self, name: str) -> bool:
        value = self._require(name)
        if self._coerce and isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        if not isinstance(value, bool):
            raise InvalidArgumentsError(f"argument '{name}' must be a boolean")
        return value

    def text(self, name: str) -> str:
        value = self._require(name)
        if not isinstance(value, str):
            raise InvalidArgumentsError(f"argument '{name}' must be a string")
        return value

    def _to_int(self, name: str, value: Any) -> int:
        if self._coerce and isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                raise InvalidArgumentsError(f"argument '{name}' must be an integer")
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgumentsError(f"argument '{name}' must be an integer")
        return value


Handler = Callable[[Any, Principal, EntryArguments], Any]
Reader = Callable[[Any, EntryArguments], Any]


def to_wire(value: Any) -> Any:
    """Render a ledger return value as JSON-safe data."""
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {key: to_wire(item) for key, item in asdict(value).items()}
    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    if isinstance(value, dict):
        return {key: to_wire(item) for key, item in value.items()}
    return value


class EntryDispatch:
    """Routes (ledger, entry) -> ledger method. Explicit registration, no auto-discovery."""

    def __init__(self, engine: PortfolioEngine):
        self._engine = engine

        # ADR: every mapping explicit; adding an entry point means editing these dicts
        self._entries: dict[LedgerKind, dict[str, Handler]] = {
            LedgerKind.REGISTRY: {
                "set-enabled": lambda r, c, a: r.set_enabled(c, a.flag("enabled")),
                "set-max-portfolio-fee": lambda r, c, a: r.set_max_portfolio_fee(
                    c, a.uint("fee_bp"),
                ),
                "approve-manager": lambda r, c, a: r.approve_manager(
                    c, a.principal("manager"), a.flag("can_create"), a.uint("max_portfolios"),
                ),
                "create-portfolio": lambda r, c, a: r.create_portfolio(
                    c, a.text("name"), a.principal("vault_ref"), a.principal("token_ref"),
                    a.uint("management_fee_bp"), a.uint("performance_fee_bp"),
                    a.optional_uint("strategy_id"),
                ),
                "register-strategy": lambda r, c, a: r.register_strategy(
                    c, a.text("description"), a.uint("strategy_id"),
                ),
                "approve-strategy": lambda r, c, a: r.approve_strategy(c, a.uint("strategy_id")),
                "set-portfolio-active": lambda r, c, a: r.set_portfolio_active(
                    c, a.uint("portfolio_id"), a.flag("active"),
                ),
            },
            LedgerKind.SHARES: {
                "initialize": lambda s, c, a: s.initialize(c, a.principal("vault_ref")),
                "set-enabled": lambda s, c, a: s.set_enabled(c, a.flag("enabled")),
                "mint": lambda s, c, a: s.mint(c, a.principal("recipient"), a.uint("amount")),
                "burn": lambda s, c, a: s.burn(c, a.uint("amount")),
                "transfer": lambda s, c, a: s.transfer(
                    c, a.principal("recipient"), a.uint("amount"),
                ),
                "approve": lambda s, c, a: s.approve(c, a.principal("spender"), a.uint("amount")),
                "transfer-from": lambda s, c, a: s.transfer_from(
                    c, a.principal("owner"), a.principal("recipient"), a.uint("amount"),
                ),
            },
            LedgerKind.CUSTODY: {
                "initialize": lambda v, c, a: v.initialize(
                    c, a.uint("portfolio_id"), *self._share_issuer(a.principal("share_ledger")),
                ),
                "set-enabled": lambda v, c, a: v.set_enabled(c, a.flag("enabled")),
                "deposit": lambda v, c, a: v.deposit(c, a.uint("amount")),
                "withdraw": lambda v, c, a: v.withdraw(c, a.uint("amount")),
                "add-asset": lambda v, c, a: v.add_asset(
                    c, a.uint("asset_id"), a.principal("asset_contract"), a.uint("amount"),
                ),
                "remove-asset": lambda v, c, a: v.remove_asset(c, a.uint("asset_id")),
            },
            LedgerKind.VALUE: {
                "transfer": lambda x, c, a: x.transfer(
                    c, a.identity("sender"), a.identity("recipient"), a.uint("amount"),
                ),
            },
        }

        self._reads: dict[LedgerKind, dict[str, Reader]] = {
            LedgerKind.REGISTRY: {
                "get-portfolio": lambda r, a: r.get_portfolio(a.uint("portfolio_id")),
                "get-manager-permissions": lambda r, a: r.get_manager_permissions(
                    a.principal("manager"),
                ),
                "get-strategy": lambda r, a: r.get_strategy(a.uint("strategy_id")),
                "get-portfolio-count": lambda r, a: r.get_portfolio_count(),
                "get-next-portfolio-id": lambda r, a: r.get_next_portfolio_id(),
                "get-max-portfolio-fee": lambda r, a: r.get_max_portfolio_fee(),
                "is-enabled": lambda r, a: r.is_enabled(),
                "get-event": lambda r, a: r.get_event(a.uint("event_id")),
            },
            LedgerKind.SHARES: {
                "get-balance": lambda s, a: s.get_balance(a.principal("owner")),
                "get-total-supply": lambda s, a: s.get_total_supply(),
                "get-allowance": lambda s, a: s.get_allowance(
                    a.principal("owner"), a.principal("spender"),
                ),
                "get-name": lambda s, a: s.get_name(),
                "get-symbol": lambda s, a: s.get_symbol(),
                "get-decimals": lambda s, a: s.get_decimals(),
                "get-vault": lambda s, a: s.get_vault(),
                "is-enabled": lambda s, a: s.is_enabled(),
                "get-event": lambda s, a: s.get_event(a.uint("event_id")),
            },
            LedgerKind.CUSTODY: {
                "get-investor-balance": lambda v, a: v.get_investor_balance(
                    a.principal("investor"),
                ),
                "get-total-value-locked": lambda v, a: v.get_total_value_locked(),
                "get-asset": lambda v, a: v.get_asset(a.uint("asset_id")),
                "get-portfolio-id": lambda v, a: v.get_portfolio_id(),
                "get-share-ledger": lambda v, a: v.get_share_ledger(),
                "is-enabled": lambda v, a: v.is_enabled(),
                "get-event": lambda v, a: v.get_event(a.uint("event_id")),
            },
            LedgerKind.VALUE: {
                "get-balance": lambda x, a: x.get_balance(a.principal("owner")),
                "get-total-issued": lambda x, a: x.get_total_issued(),
            },
        }

    def _share_issuer(
        self, principal: Principal | None,
    ) -> tuple[ShareLedger | None, Principal | None]:
        """Resolve a share-ledger argument to the capability the vault will hold.

        An unresolved name is passed on as a bare ref; the vault rejects it
        only after its own authorization checks.
        """
        ledger = self._engine.resolve(principal)
        if isinstance(ledger, ShareLedger):
            return ledger, principal
        return None, principal

    def entries(self, kind: LedgerKind) -> list[str]:
        return sorted(self._entries[kind])

    def reads(self, kind: LedgerKind) -> list[str]:
        return sorted(self._reads[kind])

    def execute(
        self, principal: str, entry: str, caller: Principal, args: dict | None,
    ) -> dict:
        """Invoke a state-changing entry point. Returns one envelope, never raises on rejection."""
        ledger = self._engine.resolve(as_principal(principal))
        if ledger is None:
            return _unknown(UNKNOWN_LEDGER, f"Ledger '{principal}' does not exist.")
        handler = self._entries[ledger.kind].get(entry)
        if handler is None:
            return _unknown(
                UNKNOWN_ENTRY, f"Entry '{entry}' does not exist on {ledger.kind.value}.",
            )
        extra = {"ledger": ledger.principal, "entry": entry, "caller": caller}
        try:
            result = handler(ledger, caller, EntryArguments(args))
        except InvalidArgumentsError as e:
            logger.warning(f"Invalid arguments: {e.message}", extra=extra)
            return {"error": INVALID_ARGUMENTS, "message": e.message}
        except LedgerError as e:
            logger.warning(
                f"Entry rejected: {e.reason.value}",
                extra={**extra, "error_code": e.numeric_code},
            )
            return e.to_envelope()
        events = getattr(ledger, "events", None)
        logger.info(
            "Entry accepted",
            extra={**extra, "event_id": events.last_event_id if events is not None else None},
        )
        return {"value": to_wire(result)}

    def read(self, principal: str, accessor: str, params: dict | None) -> dict:
        """Invoke a read accessor with query-string arguments."""
        ledger = self._engine.resolve(as_principal(principal))
        if ledger is None:
            return _unknown(UNKNOWN_LEDGER, f"Ledger '{principal}' does not exist.")
        reader = self._reads[ledger.kind].get(accessor)
        if reader is None:
            return _unknown(
                UNKNOWN_ENTRY, f"Accessor '{accessor}' does not exist on {ledger.kind.value}.",
            )
        try:
            result = reader(ledger, EntryArguments(params, coerce=True))
        except InvalidArgumentsError as e:
            return {"error": INVALID_ARGUMENTS, "message": e.message}
        return {"value": to_wire(result)}

    def touched_by(self, principal: str) -> list:
        """Ledgers an entry on principal may write to (for snapshot and persistence)."""
        ledger = self._engine.resolve(as_principal(principal))
        if ledger is None:
            return []
        return self._engine.collaborators(ledger)


def _unknown(code: str, message: str) -> dict:
    return {"error": code, "message": message}

"""Registry — portfolio, manager and strategy bookkeeping behind admin gating.

Invariants:
    - Every entry point validates first (enforce_registry), then commits; a
      rejection raises LedgerError and leaves state and event log untouched
    - Each accepted entry point appends exactly one event
    - Failed create_portfolio attempts never consume a portfolio id
    - register_strategy takes a caller-chosen id; portfolio ids are allocated
    - Read accessors return copies; records change only through entry points
"""

import copy
from dataclasses import replace

from mosaic.core.domain_types import (
    DEFAULT_MAX_PORTFOLIO_FEE, EventType, LedgerKind, PortfolioId, Principal, StrategyId,
)
from mosaic.core.enforce_registry import (
    check_admin,
    check_fee_ceiling,
    validate_approve_manager,
    validate_approve_strategy,
    validate_create_portfolio,
    validate_register_strategy,
    validate_set_portfolio_active,
)
from mosaic.core.errors import LedgerError, Rejection
from mosaic.core.event_log import Event, EventLog
from mosaic.core.ledger_snapshot import registry_from_snapshot, registry_to_snapshot
from mosaic.core.registry_state import (
    ManagerPermission, Portfolio, RegistryState, Strategy,
)
from mosaic.core.repository_protocols import Clock


class Registry:
    """Admin-gated registry of portfolios, manager quotas and strategies."""

    kind = LedgerKind.REGISTRY

    def __init__(
        self, principal: Principal, admin: Principal,
        clock: Clock | None = None,
        max_portfolio_fee: int = DEFAULT_MAX_PORTFOLIO_FEE,
    ):
        self.principal = principal
        self.state = RegistryState(admin=admin, max_portfolio_fee=max_portfolio_fee)
        self.events = EventLog(clock)

    def _guard(self, error: Rejection | None) -> None:
        if error:
            raise LedgerError(self.kind, error)

    # --- Admin entry points ------------------------------------------------

    def set_enabled(self, caller: Principal, enabled: bool) -> bool:
        self._guard(check_admin(self.state, caller))
        self.state.contract_enabled = bool(enabled)
        self.events.append(
            EventType.CONTRACT_ENABLED if enabled else EventType.CONTRACT_DISABLED,
            caller,
        )
        return self.state.contract_enabled

    def set_max_portfolio_fee(self, caller: Principal, fee_bp: int) -> bool:
        self._guard(check_admin(self.state, caller) or check_fee_ceiling(fee_bp))
        self.state.max_portfolio_fee = fee_bp
        self.events.append(EventType.MAX_FEE_UPDATED, caller, amount=fee_bp)
        return True

    def approve_manager(
        self, caller: Principal, manager: Principal | None,
        can_create: bool, max_portfolios: int,
    ) -> bool:
        """Overwrite the manager's permission record; resets portfolios_created."""
        self._guard(validate_approve_manager(self.state, caller, manager, max_portfolios))
        self.state.manager_permissions[manager] = ManagerPermission(
            can_create=bool(can_create), max_portfolios=max_portfolios,
        )
        self.events.append(EventType.MANAGER_APPROVED, caller, account=manager)
        return True

    def approve_strategy(self, caller: Principal, strategy_id: int) -> bool:
        self._guard(validate_approve_strategy(self.state, caller, strategy_id))
        self.state.strategies[strategy_id].is_approved = True
        self.events.append(EventType.STRATEGY_APPROVED, caller)
        return True

    # --- Manager entry points ----------------------------------------------

    def create_portfolio(
        self,
        caller: Principal,
        name: str,
        vault_ref: Principal | None,
        token_ref: Principal | None,
        management_fee_bp: int,
        performance_fee_bp: int,
        strategy_id: int | None = None,
    ) -> PortfolioId:
        self._guard(validate_create_portfolio(
            self.state, caller, name, vault_ref, token_ref,
            management_fee_bp, performance_fee_bp, strategy_id,
        ))
        portfolio_id = self.state.next_portfolio_id
        self.state.portfolio_count = portfolio_id
        self.state.portfolios[portfolio_id] = Portfolio(
            name=name,
            manager=caller,
            vault_ref=vault_ref,
            token_ref=token_ref,
            created_at=self.events.clock.block_height(),
            management_fee_bp=management_fee_bp,
            performance_fee_bp=performance_fee_bp,
            strategy_id=StrategyId(strategy_id) if strategy_id is not None else None,
            is_active=True,
        )
        self.state.manager_permissions[caller].portfolios_created += 1
        self.events.append(EventType.PORTFOLIO_CREATED, caller, portfolio_id=portfolio_id)
        return portfolio_id

    def set_portfolio_active(
        self, caller: Principal, portfolio_id: int, active: bool,
    ) -> bool:
        self._guard(validate_set_portfolio_active(self.state, caller, portfolio_id))
        self.state.portfolios[portfolio_id].is_active = bool(active)
        self.events.append(
            EventType.PORTFOLIO_ACTIVATED if active else EventType.PORTFOLIO_DEACTIVATED,
            caller, portfolio_id=portfolio_id,
        )
        return bool(active)

    def register_strategy(
        self, caller: Principal, description: str, strategy_id: int,
    ) -> StrategyId:
        self._guard(validate_register_strategy(self.state, description, strategy_id))
        self.state.strategies[StrategyId(strategy_id)] = Strategy(
            description=description, creator=caller,
        )
        self.events.append(EventType.STRATEGY_REGISTERED, caller)
        return StrategyId(strategy_id)

    # --- Read accessors ----------------------------------------------------

    def get_portfolio(self, portfolio_id: int) -> Portfolio:
        return replace(self.state.portfolios.get(portfolio_id, Portfolio()))

    def get_manager_permissions(self, manager: Principal | None) -> ManagerPermission:
        return replace(self.state.permission_for(manager))

    def get_strategy(self, strategy_id: int) -> Strategy:
        return replace(self.state.strategies.get(strategy_id, Strategy()))

    def get_portfolio_count(self) -> int:
        return self.state.portfolio_count

    def get_next_portfolio_id(self) -> PortfolioId:
        return self.state.next_portfolio_id

    def get_max_portfolio_fee(self) -> int:
        return self.state.max_portfolio_fee

    def is_enabled(self) -> bool:
        return self.state.contract_enabled

    def get_event(self, event_id: int) -> Event | None:
        return self.events.get(event_id)

    # --- Transactional -----------------------------------------------------

    def checkpoint(self) -> tuple:
        return copy.deepcopy(self.state), self.events.last_event_id

    def rollback(self, checkpoint: tuple) -> None:
        state, last_event_id = checkpoint
        self.state = state
        self.events.truncate(last_event_id)

    # --- Snapshot ----------------------------------------------------------

    def state_snapshot(self) -> dict:
        """State tables only, JSON-safe."""
        return registry_to_snapshot(self.state)

    def snapshot(self) -> dict:
        return {**self.state_snapshot(), "events": self.events.to_snapshot()}

    def restore(self, snapshot: dict) -> None:
        self.state = registry_from_snapshot(snapshot)
        self.events.load_snapshot(snapshot.get("events", []))

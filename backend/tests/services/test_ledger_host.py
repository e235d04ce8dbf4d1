"""Ledger Host — serialization, persistence and rollback around dispatch.

Tests cover:
    - Accepted entries persist the ledgers they touched; rejections persist nothing
    - A persistence failure rolls every touched ledger back and propagates
    - open_portfolio is all-or-nothing across registry, vault and share ledger
    - boot creates and persists a fresh engine, or restores a persisted one
    - Concurrent calls are serialized: every deposit lands, event ids stay dense
    - Reads wait behind an in-flight entry and never see state it rolls back
    - Each save carries only the events the call appended
"""

import asyncio

import pytest

from mosaic.config import Settings
from mosaic.core.errors import DatabaseError, LedgerError
from mosaic.services.ledger_host import LedgerHost
from mosaic.services.portfolio_engine import VALUE_LEDGER_PRINCIPAL
from principals import ADMIN, INVESTOR, MANAGER, OTHER, REGISTRY, STARTING_UNITS, TOKEN, VAULT


class RecordingStore:
    """In-memory LedgerSnapshotRepository that yields to the loop on every write.

    rows keeps the last row saved per ledger as written; events accumulate
    the way the ledger_events table does.
    """

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self.events: dict[str, list[dict]] = {}
        self.writes: list[list[str]] = []

    async def save_many(self, rows):
        await asyncio.sleep(0)
        self.writes.append([row["principal"] for row in rows])
        for row in rows:
            self.rows[row["principal"]] = row
            self.events.setdefault(row["principal"], []).extend(row["events"])

    async def load_all(self):
        return [
            {**self.rows[key], "events": list(self.events[key])}
            for key in sorted(self.rows)
        ]


class GatedFailingStore(RecordingStore):
    """Holds the first write open until released, then fails it."""

    def __init__(self):
        super().__init__()
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def save_many(self, rows):
        self.entered.set()
        await self.release.wait()
        raise DatabaseError("Connection or operational error", "execute")


class FailingStore(RecordingStore):
    async def save_many(self, rows):
        raise DatabaseError("Connection or operational error", "execute")


def settings(**overrides) -> Settings:
    values = {
        "admin_principal": ADMIN,
        "genesis_balances": {INVESTOR: STARTING_UNITS, OTHER: STARTING_UNITS},
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
async def opened(engine):
    """Host over a recording store with portfolio 1 open."""
    store = RecordingStore()
    host = LedgerHost(engine, store)
    await host.open_portfolio(MANAGER, "Fund A", 500, 300)
    store.writes.clear()
    return host, store


# ─── execute ────────────────────────────────────────────────────

async def test_accepted_entry_persists_touched_ledgers(opened):
    host, store = opened

    envelope = await host.execute(VAULT, "deposit", INVESTOR, {"amount": 1000})

    assert envelope == {"value": True}
    assert store.writes == [[VAULT, TOKEN, VALUE_LEDGER_PRINCIPAL]]
    assert store.rows[VAULT]["last_event_id"] == 2
    assert store.rows[TOKEN]["last_event_id"] == 2


async def test_rejected_entry_persists_nothing(opened):
    host, store = opened

    envelope = await host.execute(TOKEN, "mint", OTHER, {"recipient": OTHER, "amount": 1})

    assert envelope["error"] == 100
    assert store.writes == []


async def test_persistence_failure_rolls_back(engine):
    pair = engine.open_portfolio(MANAGER, "Fund A", 0, 0)
    host = LedgerHost(engine, FailingStore())

    with pytest.raises(DatabaseError):
        await host.execute(VAULT, "deposit", INVESTOR, {"amount": 1000})

    assert pair.custody.get_total_value_locked() == 0
    assert pair.shares.get_total_supply() == 0
    assert engine.value.get_balance(INVESTOR) == STARTING_UNITS
    assert len(pair.custody.events) == 1


async def test_persistence_failure_names_the_call(engine):
    engine.open_portfolio(MANAGER, "Fund A", 0, 0)
    host = LedgerHost(engine, FailingStore())

    with pytest.raises(DatabaseError) as exc:
        await host.execute(VAULT, "deposit", INVESTOR, {"amount": 1000})

    context = exc.value.context
    assert (context.ledger, context.entry, context.caller) == (VAULT, "deposit", INVESTOR)


async def test_save_carries_only_new_events(opened):
    host, store = opened

    await host.execute(VAULT, "deposit", INVESTOR, {"amount": 1000})

    assert [e["event_id"] for e in store.rows[VAULT]["events"]] == [2]
    assert [e["event_id"] for e in store.rows[TOKEN]["events"]] == [2]
    assert [e["event_id"] for e in store.events[VAULT]] == [1, 2]


async def test_host_without_store_still_executes(engine):
    engine.open_portfolio(MANAGER, "Fund A", 0, 0)
    host = LedgerHost(engine)
    assert await host.execute(VAULT, "deposit", INVESTOR, {"amount": 5}) == {"value": True}


async def test_read_returns_the_accessor_envelope(engine):
    host = LedgerHost(engine)
    assert await host.read(REGISTRY, "get-max-portfolio-fee", {}) == {"value": 1000}


# ─── open_portfolio ─────────────────────────────────────────────

async def test_open_portfolio_persists_triplet(engine):
    store = RecordingStore()
    host = LedgerHost(engine, store)

    pair = await host.open_portfolio(MANAGER, "Fund A", 500, 300)

    assert pair.portfolio_id == 1
    assert store.writes == [[REGISTRY, VAULT, TOKEN]]


async def test_open_portfolio_rejection_raises(engine):
    store = RecordingStore()
    host = LedgerHost(engine, store)

    with pytest.raises(LedgerError) as exc:
        await host.open_portfolio(OTHER, "Fund A", 0, 0)

    assert exc.value.numeric_code == 100
    assert store.writes == []


async def test_open_portfolio_persistence_failure_leaves_nothing(engine):
    host = LedgerHost(engine, FailingStore())

    with pytest.raises(DatabaseError):
        await host.open_portfolio(MANAGER, "Fund A", 0, 0)

    assert engine.registry.get_portfolio_count() == 0
    assert engine.registry.get_manager_permissions(MANAGER).portfolios_created == 0
    assert engine.resolve(VAULT) is None
    assert engine.pair(1) is None


async def test_open_portfolio_persistence_failure_names_the_call(engine):
    host = LedgerHost(engine, FailingStore())

    with pytest.raises(DatabaseError) as exc:
        await host.open_portfolio(MANAGER, "Fund A", 0, 0)

    context = exc.value.context
    assert (context.ledger, context.entry, context.caller) == (
        REGISTRY, "open-portfolio", MANAGER,
    )


# ─── boot ───────────────────────────────────────────────────────

async def test_boot_fresh_persists_registry_and_value():
    store = RecordingStore()

    host = await LedgerHost.boot(settings(), store)

    assert sorted(store.rows) == sorted([REGISTRY, VALUE_LEDGER_PRINCIPAL])
    assert host.engine.value.get_balance(INVESTOR) == STARTING_UNITS


async def test_boot_restores_persisted_state():
    store = RecordingStore()
    first = await LedgerHost.boot(settings(), store)
    await first.execute(
        REGISTRY, "approve-manager", ADMIN,
        {"manager": MANAGER, "can_create": True, "max_portfolios": 2},
    )
    await first.open_portfolio(MANAGER, "Fund A", 0, 0)
    await first.execute(VAULT, "deposit", INVESTOR, {"amount": 400})

    second = await LedgerHost.boot(settings(genesis_balances={}), store)

    assert await second.read(VAULT, "get-investor-balance", {"investor": INVESTOR}) == {"value": 400}
    assert await second.read(TOKEN, "get-balance", {"owner": INVESTOR}) == {"value": 400}
    assert second.engine.value.get_total_issued() == 2 * STARTING_UNITS
    assert (await second.execute(VAULT, "deposit", OTHER, {"amount": 1}))["value"] is True


async def test_boot_without_store():
    host = await LedgerHost.boot(settings(genesis_balances={}))
    assert host.engine.value.get_total_issued() == 0


# ─── Concurrency ────────────────────────────────────────────────

async def test_concurrent_deposits_are_serialized(opened):
    host, store = opened

    envelopes = await asyncio.gather(*[
        host.execute(VAULT, "deposit", INVESTOR, {"amount": 10}) for _ in range(20)
    ])

    assert all(envelope == {"value": True} for envelope in envelopes)
    custody = host.engine.resolve(VAULT)
    assert custody.get_total_value_locked() == 200
    assert host.engine.value.get_balance(VAULT) == 200
    assert [e.event_id for e in custody.events.events()] == list(range(1, 22))
    assert store.rows[VAULT]["last_event_id"] == 21


async def test_read_waits_for_an_entry_that_is_rolled_back(engine):
    engine.open_portfolio(MANAGER, "Fund A", 0, 0)
    store = GatedFailingStore()
    host = LedgerHost(engine, store)

    deposit = asyncio.create_task(
        host.execute(VAULT, "deposit", INVESTOR, {"amount": 1000}),
    )
    await store.entered.wait()
    read = asyncio.create_task(host.read(VAULT, "get-total-value-locked", {}))
    await asyncio.sleep(0)

    assert not read.done()

    store.release.set()
    with pytest.raises(DatabaseError):
        await deposit
    assert await read == {"value": 0}

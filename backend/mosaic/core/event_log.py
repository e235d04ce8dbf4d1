"""Event Log — append-only, monotonically numbered audit trail per ledger.

Invariants:
    - Event ids start at 1 and are contiguous; a committed id is never reused
    - Only accepted entry points append; a rejected call never allocates an id
    - Lookups by unknown id return None, never raise
"""

from dataclasses import asdict, dataclass

from mosaic.core.domain_types import EventId, EventType, Principal
from mosaic.core.repository_protocols import Clock


@dataclass(frozen=True)
class Event:
    """One accepted state transition."""
    event_id: EventId
    event_type: EventType
    caller: Principal
    block_height: int
    timestamp: int
    portfolio_id: int | None = None
    account: Principal | None = None
    spender: Principal | None = None
    investor: Principal | None = None
    asset_id: int | None = None
    amount: int | None = None


@dataclass
class FixedClock:
    """Deterministic clock — the same height and timestamp for every event."""
    height: int = 0
    unix_time: int = 0

    def block_height(self) -> int:
        return self.height

    def timestamp(self) -> int:
        return self.unix_time


class EventLog:
    """Ordered list of events; position N-1 holds event id N."""

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or FixedClock()
        self._events: list[Event] = []

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def last_event_id(self) -> int:
        return len(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def append(self, event_type: EventType, caller: Principal, **subjects) -> Event:
        """Record an accepted transition and return it with its new id."""
        event = Event(
            event_id=EventId(len(self._events) + 1),
            event_type=event_type,
            caller=caller,
            block_height=self._clock.block_height(),
            timestamp=self._clock.timestamp(),
            **subjects,
        )
        self._events.append(event)
        return event

    def get(self, event_id: int) -> Event | None:
        if event_id < 1 or event_id > len(self._events):
            return None
        return self._events[event_id - 1]

    def events(self) -> list[Event]:
        return list(self._events)

    # --- Snapshot ----------------------------------------------------------

    def truncate(self, last_event_id: int) -> None:
        """Drop events appended after last_event_id (undo of a rolled-back call)."""
        del self._events[last_event_id:]

    def to_snapshot(self, since: int = 0) -> list[dict]:
        """Events with id > since, JSON-safe."""
        return [
            {**asdict(e), "event_type": e.event_type.value}
            for e in self._events[since:]
        ]

    def load_snapshot(self, data: list[dict]) -> None:
        events = []
        for raw in data or []:
            record = dict(raw)
            record["event_type"] = EventType(record["event_type"])
            events.append(Event(**record))
        self._events = events

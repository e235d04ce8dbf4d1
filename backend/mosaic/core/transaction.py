"""Atomic Transactions — all-or-nothing execution across several ledgers.

Invariants:
    - Every participant is checkpointed before the block runs
    - If the block raises, every participant is rolled back, then the error re-raises
    - Nothing is swallowed; a successful block leaves the mutations in place

Design Decisions:
    - Checkpoints copy the state tables only; event logs are append-only, so
      rollback truncates them to the checkpointed last_event_id. The cost of a
      call does not grow with the ledger's history
"""

from collections.abc import Iterator
from contextlib import contextmanager

from mosaic.core.repository_protocols import Transactional


@contextmanager
def atomic(*participants: Transactional) -> Iterator[None]:
    """Run the block as one unit across participants. Duplicates are checkpointed once."""
    unique: list[Transactional] = []
    for participant in participants:
        if participant is not None and all(participant is not p for p in unique):
            unique.append(participant)
    checkpoints = [p.checkpoint() for p in unique]
    try:
        yield
    except Exception:
        for participant, checkpoint in zip(unique, checkpoints):
            participant.rollback(checkpoint)
        raise

"""Services Layer — portfolio pairing, entry dispatch, serialized hosting and persistence.

Invariants:
    - Services orchestrate core ledgers; they never bypass a ledger entry point
    - Every state-changing call runs under LedgerHost's lock

Design Decisions:
    - Thin orchestration over pure core (ADR: ExMA impureim sandwich)
"""

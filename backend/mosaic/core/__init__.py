"""Core Layer — the ledgers, their tables and their invariants. No IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, db/ or models/
    - enforce_* functions are pure; ledger classes validate first, then commit
    - Cross-ledger calls are synchronous and wrapped in atomic()

Design Decisions:
    - Functional core separated from imperative shell (ADR: ExMA impureim sandwich)
"""

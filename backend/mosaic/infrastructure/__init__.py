"""Infrastructure Layer — database sessions, structured logging and the wall clock.

Invariants:
    - Infrastructure never holds ledger rules
    - All database failures are mapped to DatabaseError

Design Decisions:
    - Resilient wrappers over raw clients (ADR: ExMA single responsibility)
"""

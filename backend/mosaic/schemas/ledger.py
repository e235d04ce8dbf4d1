"""Ledger Call Schemas — envelopes returned by entry and read routes."""

from typing import Any

from pydantic import BaseModel


class EntryResult(BaseModel):
    """Success envelope: the entry point's return value."""
    value: Any = None


class EntryRejection(BaseModel):
    """Rejection envelope: numeric code from the rejecting ledger."""
    error: int
    reason: str
    component: str

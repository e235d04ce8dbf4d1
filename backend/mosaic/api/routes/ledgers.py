"""Ledger Routes — invoke entry points and read accessors by ledger principal.

Invariants:
    - Every entry call goes through LedgerHost.execute (serialized, persisted)
    - Envelopes are returned as-is; only the HTTP status is derived from them:
      200 value, 403 NOT_AUTHORIZED, 409 other rejections, 404 unknown
      ledger/entry, 400 invalid arguments
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from mosaic.api.dependencies import get_caller, get_host
from mosaic.core.domain_types import Principal
from mosaic.core.errors import Rejection
from mosaic.schemas.ledger import EntryRejection, EntryResult
from mosaic.services.entry_dispatch import INVALID_ARGUMENTS, UNKNOWN_ENTRY, UNKNOWN_LEDGER
from mosaic.services.ledger_host import LedgerHost

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ledgers", tags=["ledgers"])


def status_for(envelope: dict) -> int:
    """HTTP status for a dispatch envelope."""
    if "value" in envelope:
        return status.HTTP_200_OK
    error = envelope.get("error")
    if error in (UNKNOWN_LEDGER, UNKNOWN_ENTRY):
        return status.HTTP_404_NOT_FOUND
    if error == INVALID_ARGUMENTS:
        return status.HTTP_400_BAD_REQUEST
    if envelope.get("reason") == Rejection.NOT_AUTHORIZED.value:
        return status.HTTP_403_FORBIDDEN
    return status.HTTP_409_CONFLICT


ENVELOPES = {
    200: {"model": EntryResult},
    403: {"model": EntryRejection},
    409: {"model": EntryRejection},
}


@router.post("/{principal}/entries/{entry}", responses=ENVELOPES)
async def call_entry(
    principal: str,
    entry: str,
    args: dict[str, Any] | None = Body(None),
    caller: Principal = Depends(get_caller),
    host: LedgerHost = Depends(get_host),
):
    """Invoke a state-changing entry point as the caller."""
    envelope = await host.execute(principal, entry, caller, args or {})
    return JSONResponse(status_code=status_for(envelope), content=envelope)


@router.get(
    "/{principal}/reads/{accessor}", responses={200: {"model": EntryResult}},
)
async def call_read(
    principal: str,
    accessor: str,
    request: Request,
    host: LedgerHost = Depends(get_host),
):
    """Invoke a read accessor; query parameters are its arguments."""
    envelope = await host.read(principal, accessor, dict(request.query_params))
    return JSONResponse(status_code=status_for(envelope), content=envelope)

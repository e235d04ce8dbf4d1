"""Route Dependencies — caller identity and the running LedgerHost.

Invariants:
    - The caller is the X-Caller header, supplied by the deployment's gateway
    - A missing or null caller is rejected with 401 before any ledger is touched
"""

from fastapi import Header, HTTPException, Request, status

from mosaic.core.domain_types import Principal, as_principal
from mosaic.services.ledger_host import LedgerHost


def get_host(request: Request) -> LedgerHost:
    host = getattr(request.app.state, "host", None)
    if host is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Ledger host not started",
        )
    return host


def get_caller(x_caller: str | None = Header(None)) -> Principal:
    caller = as_principal(x_caller)
    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Caller header is required",
        )
    return caller

"""Portfolio Routes — open paired portfolios and read them back.

Invariants:
    - POST /portfolios opens a registry record AND its vault + share ledger, or nothing
    - Registry rejections surface as the rejection envelope (via LedgerError handler)
    - Unknown portfolio ids return 404; a registry record with no paired
      ledgers in this engine counts as unknown
"""

import logging

from fastapi import APIRouter, Depends, status

from mosaic.api.dependencies import get_caller, get_host
from mosaic.core.domain_types import Principal
from mosaic.core.errors import ErrorContext, ResourceNotFoundError
from mosaic.schemas.portfolio import PortfolioOpen, PortfolioResponse
from mosaic.services.ledger_host import LedgerHost
from mosaic.services.portfolio_engine import PortfolioPair

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/portfolios", tags=["portfolios"])


def _to_response(host: LedgerHost, pair: PortfolioPair) -> PortfolioResponse:
    record = host.engine.registry.get_portfolio(pair.portfolio_id)
    return PortfolioResponse(
        portfolio_id=pair.portfolio_id,
        name=record.name,
        manager=record.manager,
        vault=pair.custody.principal,
        token=pair.shares.principal,
        created_at=record.created_at,
        management_fee_bp=record.management_fee_bp,
        performance_fee_bp=record.performance_fee_bp,
        strategy_id=record.strategy_id,
        is_active=record.is_active,
        symbol=pair.shares.get_symbol(),
    )


@router.post(
    "", response_model=PortfolioResponse, status_code=status.HTTP_201_CREATED,
)
async def open_portfolio(
    body: PortfolioOpen,
    caller: Principal = Depends(get_caller),
    host: LedgerHost = Depends(get_host),
):
    """Open a portfolio managed by the caller."""
    pair = await host.open_portfolio(
        caller, body.name, body.management_fee_bp, body.performance_fee_bp,
        body.strategy_id, body.symbol,
    )
    return _to_response(host, pair)


@router.get("/{portfolio_id}", response_model=PortfolioResponse)
async def get_portfolio(portfolio_id: int, host: LedgerHost = Depends(get_host)):
    pair = host.engine.pair(portfolio_id)
    if pair is None:
        raise ResourceNotFoundError(
            "Portfolio", str(portfolio_id),
            ErrorContext(ledger=host.engine.registry.principal, entry="get-portfolio"),
        )
    return _to_response(host, pair)

"""Portfolio Schemas — request and response bodies for the portfolio routes.

Invariants:
    - PortfolioOpen carries only shape constraints; fee ceilings and name
      length are enforced by the registry so rejections keep their codes
"""

from pydantic import BaseModel, Field


class PortfolioOpen(BaseModel):
    """Open a paired portfolio. The caller (X-Caller) becomes its manager."""
    name: str
    management_fee_bp: int
    performance_fee_bp: int
    strategy_id: int | None = None
    symbol: str | None = Field(None, min_length=1, max_length=16)


class PortfolioResponse(BaseModel):
    """Registry record plus the principals of the paired ledgers."""
    portfolio_id: int
    name: str
    manager: str | None
    vault: str | None
    token: str | None
    created_at: int
    management_fee_bp: int
    performance_fee_bp: int
    strategy_id: int | None
    is_active: bool
    symbol: str

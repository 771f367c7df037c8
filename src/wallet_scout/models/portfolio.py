"""Portfolio and statistics data models."""

from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class WalletMetrics:
    """Values read from a trader's wallet detail modal (dollars)."""

    revenue: float
    spent: float
    pnl: float
    portfolio_id: str


class PortfolioRecord(BaseModel):
    """A wallet that cleared every filter gate.

    Stored in portfolios.json keyed by ``id``. The dashboard reads
    ``roi``, ``pnl``, ``link`` and ``createdAt`` from each entry.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Portfolio ID from the wallet's /portfolio/ link")
    roi: str = Field(..., description="ROI rendered as a percentage, e.g. '300.00%'")
    pnl: str = Field(..., description="Realized PnL in dollars as a plain number string")
    link: str = Field(..., description="Portfolio URL")
    discovered_at: datetime = Field(default_factory=_utc_now, alias="createdAt")

    def to_document(self) -> dict[str, Any]:
        """Serialize for portfolios.json (the id is the document key)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})

    @classmethod
    def from_document(cls, portfolio_id: str, data: dict[str, Any]) -> "PortfolioRecord":
        """Rebuild a record from its portfolios.json entry."""
        return cls.model_validate({**data, "id": portfolio_id})


class ScraperStats(BaseModel):
    """Running counters shared with the dashboard through scraper_stats.json."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    evaluated_count: int = Field(default=0, ge=0, alias="portfoliosChecked")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

"""Wallet modal extraction."""

import logging

from ..models.portfolio import WalletMetrics
from .page import BrowserPage, MissingElementError
from .parsing import extract_portfolio_id, parse_amount
from .selectors import BullxSelectors, ScraperDelays, ScraperTimeouts

logger = logging.getLogger(__name__)


class DetailExtractor:
    """Reads metrics out of an open wallet modal."""

    def __init__(self, page: BrowserPage, field_timeout_ms: int = ScraperTimeouts.FIELD_MS):
        self.page = page
        self.field_timeout_ms = field_timeout_ms

    async def read_amount(self, label: str) -> float:
        """Wait for the value next to ``label`` to finish loading and parse it.

        Raises:
            FieldTimeoutError: If the value is still loading after the timeout.
        """
        text = await self.page.wait_for_value(
            BullxSelectors.value_after_label(label), self.field_timeout_ms
        )
        return parse_amount(text)

    async def read_portfolio_id(self) -> str:
        """Read the portfolio ID from the modal's portfolio link.

        Raises:
            MissingElementError: If there is no portfolio link.
        """
        href = await self.page.get_attribute(BullxSelectors.PORTFOLIO_LINK, "href")
        portfolio_id = extract_portfolio_id(href)
        if not portfolio_id:
            raise MissingElementError(f"No portfolio link in wallet modal (href={href!r})")
        return portfolio_id

    async def extract(self) -> WalletMetrics:
        revenue = await self.read_amount(BullxSelectors.TOTAL_REVENUE)
        pnl = await self.read_amount(BullxSelectors.REALIZED_PNL)
        spent = await self.read_amount(BullxSelectors.TOTAL_SPENT)
        portfolio_id = await self.read_portfolio_id()
        logger.debug(
            f"Wallet {portfolio_id}: revenue={revenue:,.0f} spent={spent:,.0f} pnl={pnl:,.0f}"
        )
        return WalletMetrics(revenue=revenue, spent=spent, pnl=pnl, portfolio_id=portfolio_id)

    async def close(self) -> None:
        """Close the wallet modal."""
        await self.page.click(BullxSelectors.CLOSE_BUTTON)
        await self.page.pause(ScraperDelays.AFTER_CLOSE)

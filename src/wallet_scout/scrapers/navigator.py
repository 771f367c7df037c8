"""Token table and trader list navigation."""

from __future__ import annotations

import logging
from collections.abc import Set
from dataclasses import dataclass

from .page import BrowserPage, FieldTimeoutError
from .selectors import BullxSelectors, ScraperDelays, ScraperLimits, ScraperTimeouts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenRow:
    """A token row on the explore page."""

    index: int  # Position among the currently rendered rows
    name: str


class TableNavigator:
    """Finds unprocessed tokens and materializes trader rows in the virtual list."""

    def __init__(
        self,
        page: BrowserPage,
        max_scroll_attempts: int = ScraperLimits.MAX_SCROLL_ATTEMPTS,
    ):
        self.page = page
        self.max_scroll_attempts = max_scroll_attempts

    # -------------------------------------------------------------------------
    # Token listing
    # -------------------------------------------------------------------------

    async def load_listing(self, url: str, timeout_ms: int = ScraperTimeouts.PAGE_LOAD_MS) -> None:
        """Navigate to the explore page and wait for the token table.

        Raises:
            FieldTimeoutError: If the table never appears.
        """
        logger.info(f"Navigating to {url}")
        await self.page.goto(url, timeout_ms=timeout_ms)
        if not await self.page.wait_for(BullxSelectors.TABLE_BODY, ScraperTimeouts.TABLE_WAIT_MS):
            raise FieldTimeoutError(f"Token table did not appear on {url}")
        await self.page.pause(ScraperDelays.LISTING_SETTLE)

    async def find_next_token(self, processed: Set[str]) -> TokenRow | None:
        """Return the first rendered token whose name is not in ``processed``.

        Returns None when every visible token has been processed.
        """
        names = await self.page.row_texts(BullxSelectors.TABLE_ROW, BullxSelectors.TOKEN_NAME)
        logger.debug(f"Found {len(names)} token rows in the table")

        for index, name in enumerate(names):
            if name and name not in processed:
                logger.info(f"Found new token to process: {name}")
                return TokenRow(index=index, name=name)
        return None

    async def open_token(self, token: TokenRow) -> None:
        await self.page.click_nth(BullxSelectors.TABLE_ROW, token.index)
        await self.page.pause(ScraperDelays.AFTER_TOKEN_CLICK)

    async def open_top_traders(self) -> bool:
        """Switch to the Top Traders tab and wait for trader rows.

        Returns:
            False if no trader row with a Solscan link showed up in time.
        """
        await self.page.click(BullxSelectors.TOP_TRADERS_TAB)
        await self.page.pause(ScraperDelays.AFTER_TAB_CLICK)
        return await self.page.wait_for(BullxSelectors.TRADER_WITH_LINK, ScraperTimeouts.TOP_TRADERS_MS)

    # -------------------------------------------------------------------------
    # Trader rows (virtualized list)
    # -------------------------------------------------------------------------

    async def find_trader_row(self, position: int, max_scroll_attempts: int | None = None) -> bool:
        """Scroll the trader list until the row numbered ``position`` is rendered.

        Gives up after ``max_scroll_attempts`` scroll steps. Running out of
        attempts means "row not found", not an error.
        """
        limit = self.max_scroll_attempts if max_scroll_attempts is None else max_scroll_attempts
        selector = BullxSelectors.trader_row(position)

        for attempt in range(limit + 1):
            if await self.page.wait_for(selector, ScraperTimeouts.ROW_CHECK_MS):
                return True
            if attempt == limit:
                break
            await self.page.scroll_by(BullxSelectors.SCROLL_CONTAINER, ScraperLimits.SCROLL_STEP_PX)
            await self.page.pause(ScraperDelays.AFTER_SCROLL)
            logger.debug(f"Scrolling attempt {attempt + 1} to find row {position}...")

        logger.info(f"Could not find row {position} after {limit} scroll attempts")
        return False

    async def ensure_row_visible(self, position: int) -> bool:
        """Bring a rendered trader row into the viewport."""
        selector = BullxSelectors.trader_row(position)
        await self.page.scroll_into_view(selector)
        if await self.page.is_visible(selector):
            return True

        logger.info(f"Row {position} is not visible, scrolling its container directly")
        await self.page.center_row(BullxSelectors.ROW_NUMBER_CELL, BullxSelectors.TABLE_ROW, str(position))
        await self.page.pause(ScraperDelays.AFTER_CENTER)
        return await self.page.is_visible(selector)

    async def has_wallet_link(self, position: int) -> bool:
        """Check the row has a Solscan link and the wallet cell next to it."""
        link_selector = f"{BullxSelectors.trader_row(position)} {BullxSelectors.EXPLORER_LINK}"
        if await self.page.count(link_selector) == 0:
            logger.info(f"Row {position} doesn't have a Solscan link, skipping")
            return False
        if await self.page.count(BullxSelectors.wallet_cell(position)) == 0:
            logger.info(f"Could not find wallet cell for row {position}, skipping")
            return False
        return True

    async def open_trader(self, position: int) -> None:
        """Open the wallet modal for a trader row."""
        await self.page.click(BullxSelectors.wallet_cell(position))
        await self.page.pause(ScraperDelays.AFTER_TRADER_CLICK)

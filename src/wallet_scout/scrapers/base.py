"""Base scraper class."""

import logging
import traceback
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, UTC

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from pydantic import BaseModel, Field

from ..models.portfolio import PortfolioRecord
from .page import BrowserPage, PlaywrightPage

logger = logging.getLogger(__name__)


class BrowserConnectError(RuntimeError):
    """The remote browser could not be reached over CDP."""


@dataclass
class ScrapeError:
    """Record of a scraping error."""

    location: str  # e.g. "TOKEN_A row 7"
    error_type: str
    error_message: str
    traceback: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_exception(cls, location: str, exc: Exception) -> "ScrapeError":
        """Create a ScrapeError from an exception."""
        return cls(
            location=location,
            error_type=type(exc).__name__,
            error_message=str(exc),
            traceback=traceback.format_exc(),
        )


@dataclass
class ScrapeResult:
    """Result of a scrape run: accepted wallets, rejections and failures."""

    tokens_processed: list[str] = field(default_factory=list)
    rows_evaluated: int = 0
    accepted: list[PortfolioRecord] = field(default_factory=list)
    rejections: Counter = field(default_factory=Counter)  # gate name -> count
    errors: list[ScrapeError] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.accepted)

    @property
    def rejected_count(self) -> int:
        return sum(self.rejections.values())

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def __repr__(self) -> str:
        return (
            f"ScrapeResult({len(self.tokens_processed)} tokens, {self.rows_evaluated} wallets evaluated, "
            f"{self.success_count} accepted, {self.error_count} failed)"
        )


class ScraperConfig(BaseModel):
    """Configuration for a scraper."""

    source_id: str = Field(..., description="Unique identifier for this source")
    base_url: str = Field(..., description="Base URL for the source")
    cdp_url: str = Field(..., description="Chrome DevTools endpoint, e.g. http://localhost:9222")
    viewport_width: int = Field(default=1280, description="Viewport width for a new context")
    viewport_height: int = Field(default=720, description="Viewport height for a new context")
    timeout_ms: int = Field(default=30000, description="Default timeout in ms")


class BaseScraper(ABC):
    """Base class for scrapers that attach to an already running Chrome.

    A ``page`` can be passed in to run against something other than a live
    browser. The scraper then neither connects nor closes anything.
    """

    def __init__(self, scraper_config: ScraperConfig, page: BrowserPage | None = None):
        self.config = scraper_config
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: BrowserPage | None = page
        self._owns_page = page is None

    async def setup(self) -> None:
        """Attach to the remote browser and open a fresh tab.

        Raises:
            BrowserConnectError: If the CDP endpoint can't be reached.
        """
        if self._page is not None:
            return

        logger.info(f"Connecting to Chrome at {self.config.cdp_url}")
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.connect_over_cdp(self.config.cdp_url)

            contexts = self._browser.contexts
            if contexts:
                self._context = contexts[0]
            else:
                self._context = await self._browser.new_context(
                    viewport={"width": self.config.viewport_width, "height": self.config.viewport_height}
                )
            raw_page = await self._context.new_page()
        except PlaywrightError as e:
            await self.teardown()
            raise BrowserConnectError(f"Could not connect to Chrome at {self.config.cdp_url}: {e}") from e

        raw_page.set_default_timeout(self.config.timeout_ms)
        self._page = PlaywrightPage(raw_page)
        logger.info("Connected to browser")

    async def teardown(self) -> None:
        """Close our tab and disconnect, leaving the user's browser running."""
        if not self._owns_page:
            return
        if isinstance(self._page, PlaywrightPage):
            await self._page.raw.close()
        self._page = None
        # On a CDP connection this only disconnects
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    @property
    def page(self) -> BrowserPage:
        """Get the current page, raising if not initialized."""
        if self._page is None:
            raise RuntimeError("Scraper not initialized. Call setup() first.")
        return self._page

    @abstractmethod
    async def scrape(self) -> ScrapeResult:
        """Walk the source and evaluate everything found.

        Override in subclass to implement source-specific logic.
        """
        raise NotImplementedError

    async def run(self) -> ScrapeResult:
        """Connect, scrape, and always disconnect."""
        await self.setup()
        try:
            return await self.scrape()
        finally:
            await self.teardown()

    async def __aenter__(self):
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.teardown()

"""Scrapers module.

``BullxScraper`` lives in ``wallet_scout.scrapers.bullx`` and is not
re-exported here: it depends on ``wallet_scout.filters``, which itself
imports the page port and parsers from this package.
"""

from .base import BaseScraper, BrowserConnectError, ScraperConfig, ScrapeError, ScrapeResult
from .page import BrowserPage, FieldTimeoutError, MissingElementError, PlaywrightPage

__all__ = [
    "BaseScraper",
    "BrowserConnectError",
    "ScraperConfig",
    "ScrapeError",
    "ScrapeResult",
    "BrowserPage",
    "FieldTimeoutError",
    "MissingElementError",
    "PlaywrightPage",
]

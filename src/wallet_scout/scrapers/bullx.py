"""BullX (neo.bullx.io) top-trader scraper.

Walks the explore table one unprocessed token at a time, opens each
token's Top Traders tab and evaluates trader wallets by row number:

1. Pick the first token not in processed_tokens.json and record it there
   straight away, so a crash never re-processes it.
2. Open the token, switch to Top Traders.
3. For rows ``start_row..max_traders``: scroll the virtual list until the
   row renders, open the wallet modal, extract metrics, run the filter
   gates and save accepted wallets to portfolios.json.
4. Go back to the explore page for the next token.
"""

import logging

from ..config import Config, config
from ..filters.pipeline import Candidate, FilterPipeline, build_pipeline
from ..models.portfolio import PortfolioRecord, WalletMetrics
from ..state.store import StateStore
from .base import BaseScraper, ScrapeError, ScrapeResult, ScraperConfig
from .extractor import DetailExtractor
from .navigator import TableNavigator, TokenRow
from .page import BrowserPage
from .parsing import format_pnl, format_roi
from .selectors import BullxSelectors

logger = logging.getLogger(__name__)


class BullxScraper(BaseScraper):
    """Finds high-ROI trader wallets on BullX.

    Args:
        app_config: Run configuration. Defaults to the global config.
        store: State documents. Defaults to the config's data directory.
        page: Page to drive instead of attaching to Chrome over CDP.
    """

    def __init__(
        self,
        app_config: Config | None = None,
        store: StateStore | None = None,
        page: BrowserPage | None = None,
    ):
        self.app_config = app_config or config
        scraper_config = ScraperConfig(
            source_id="bullx",
            base_url=self.app_config.base_url,
            cdp_url=self.app_config.cdp_url,
            timeout_ms=self.app_config.field_timeout_ms,
        )
        super().__init__(scraper_config, page=page)
        self.store = store or StateStore.from_config(self.app_config)

    @property
    def explore_url(self) -> str:
        return f"{self.config.base_url}{BullxSelectors.EXPLORE_PATH}"

    def portfolio_url(self, portfolio_id: str) -> str:
        return f"{self.config.base_url}{BullxSelectors.PORTFOLIO_PATH}{portfolio_id}"

    async def scrape(self) -> ScrapeResult:
        cfg = self.app_config
        result = ScrapeResult()
        navigator = TableNavigator(self.page, max_scroll_attempts=cfg.max_scroll_attempts)
        extractor = DetailExtractor(self.page, field_timeout_ms=cfg.field_timeout_ms)
        pipeline = build_pipeline(self.page, cfg.filters, close_surface=extractor.close)

        processed = set(self.store.load_processed_tokens())
        logger.info(f"Loaded {len(processed)} previously processed tokens")

        for token_number in range(cfg.max_tokens):
            try:
                await navigator.load_listing(self.explore_url, timeout_ms=cfg.page_load_timeout_ms)
            except Exception as e:
                logger.error(f"Could not load the explore page: {e}")
                result.errors.append(ScrapeError.from_exception(self.explore_url, e))
                break

            try:
                token = await navigator.find_next_token(processed)
            except Exception as e:
                logger.error(f"Could not read the token table: {e}")
                result.errors.append(ScrapeError.from_exception(self.explore_url, e))
                continue
            if token is None:
                logger.info("No new tokens to process")
                break

            processed.add(token.name)
            self.store.append_processed_token(token.name)
            result.tokens_processed.append(token.name)
            logger.info(f"Processing token {token_number + 1}/{cfg.max_tokens}: {token.name}")

            try:
                opened = await self._open_token(navigator, token)
            except Exception as e:
                logger.error(f"Error opening token {token.name}: {e}")
                result.errors.append(ScrapeError.from_exception(token.name, e))
                continue
            if not opened:
                continue

            await self._process_traders(token, navigator, extractor, pipeline, result)
            logger.info(f"Finished processing token: {token.name}")

        logger.info(f"Run complete: {result!r}")
        return result

    async def _open_token(self, navigator: TableNavigator, token: TokenRow) -> bool:
        """Open a token and its Top Traders tab. False means skip the token."""
        await navigator.open_token(token)
        if not await navigator.open_top_traders():
            logger.warning(f"No trader rows for {token.name}, skipping to next token")
            await self.page.go_back()
            return False
        return True

    async def _process_traders(
        self,
        token: TokenRow,
        navigator: TableNavigator,
        extractor: DetailExtractor,
        pipeline: FilterPipeline,
        result: ScrapeResult,
    ) -> None:
        cfg = self.app_config
        for position in range(cfg.start_row, cfg.max_traders + 1):
            logger.info(f"Processing trader row {position}")
            try:
                if not await navigator.find_trader_row(position):
                    logger.info(f"Row {position} not found, moving to next token")
                    break
                if not await navigator.ensure_row_visible(position):
                    logger.warning(f"Row {position} is still off-screen, skipping")
                    continue
                if not await navigator.has_wallet_link(position):
                    continue
                await navigator.open_trader(position)
                await self._evaluate_wallet(extractor, pipeline, result)
            except Exception as e:
                logger.error(f"Error processing row {position} of {token.name}: {e}")
                result.errors.append(ScrapeError.from_exception(f"{token.name} row {position}", e))

    async def _evaluate_wallet(
        self,
        extractor: DetailExtractor,
        pipeline: FilterPipeline,
        result: ScrapeResult,
    ) -> None:
        """Evaluate the wallet whose modal is open. Counts once per opened modal."""
        try:
            try:
                metrics = await extractor.extract()
            except Exception:
                await extractor.close()
                raise

            decision = await pipeline.evaluate(Candidate(metrics))
            if decision.accepted:
                self._save_wallet(metrics, decision.roi, result)
            else:
                result.rejections[decision.gate] += 1
        finally:
            result.rows_evaluated += 1
            self.store.increment_evaluated()

    def _save_wallet(self, metrics: WalletMetrics, roi: float, result: ScrapeResult) -> None:
        record = PortfolioRecord(
            id=metrics.portfolio_id,
            roi=format_roi(roi),
            pnl=format_pnl(metrics.pnl),
            link=self.portfolio_url(metrics.portfolio_id),
        )
        is_new = self.store.upsert_portfolio(record)
        result.accepted.append(record)
        status = "new" if is_new else "updated"
        logger.info(f"Found interesting wallet ({status}): {record.link} ROI {record.roi} PnL {record.pnl}")

"""Tests for wallet modal extraction."""

import pytest

from wallet_scout.models.portfolio import WalletMetrics
from wallet_scout.scrapers.extractor import DetailExtractor
from wallet_scout.scrapers.page import FieldTimeoutError, MissingElementError

from fakes import FakePage, FakeTrader


def modal_page(**trader_fields) -> FakePage:
    page = FakePage()
    page.view = "modal"
    page.modal = FakeTrader(**trader_fields)
    return page


class TestDetailExtractor:
    """Tests for DetailExtractor."""

    @pytest.mark.asyncio
    async def test_extract(self):
        extractor = DetailExtractor(modal_page())
        result = await extractor.extract()
        assert result == WalletMetrics(revenue=2_000_000, spent=500_000, pnl=1_600_000, portfolio_id="abc")

    @pytest.mark.asyncio
    async def test_value_never_loads(self):
        extractor = DetailExtractor(modal_page(spent=None), field_timeout_ms=10)
        with pytest.raises(FieldTimeoutError):
            await extractor.extract()

    @pytest.mark.asyncio
    async def test_missing_portfolio_link(self):
        extractor = DetailExtractor(modal_page(portfolio_id=""))
        with pytest.raises(MissingElementError):
            await extractor.read_portfolio_id()

    @pytest.mark.asyncio
    async def test_close(self):
        page = modal_page()
        await DetailExtractor(page).close()
        assert page.view == "traders"
        assert page.closed_modals == 1

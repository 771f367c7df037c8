"""Tests for token table and trader list navigation."""

import pytest

from wallet_scout.scrapers.navigator import TableNavigator, TokenRow
from wallet_scout.scrapers.page import FieldTimeoutError
from wallet_scout.scrapers.selectors import BullxSelectors

from fakes import FakePage, FakeToken, FakeTrader


def traders(count: int, **fields) -> dict[int, FakeTrader]:
    return {position: FakeTrader(portfolio_id=f"w{position}", **fields) for position in range(1, count + 1)}


async def open_traders(page: FakePage, navigator: TableNavigator) -> None:
    await navigator.load_listing("https://neo.bullx.io/explore")
    token = await navigator.find_next_token(set())
    await navigator.open_token(token)
    assert await navigator.open_top_traders() is True


class TestTokenListing:
    """Tests for picking tokens off the explore page."""

    @pytest.mark.asyncio
    async def test_first_unprocessed_token(self):
        page = FakePage({"TOKEN_A": FakeToken(), "TOKEN_B": FakeToken(), "TOKEN_C": FakeToken()})
        navigator = TableNavigator(page)
        await navigator.load_listing("https://neo.bullx.io/explore")

        token = await navigator.find_next_token({"TOKEN_A"})

        assert token == TokenRow(index=1, name="TOKEN_B")

    @pytest.mark.asyncio
    async def test_all_processed(self):
        page = FakePage({"TOKEN_A": FakeToken()})
        navigator = TableNavigator(page)
        await navigator.load_listing("https://neo.bullx.io/explore")

        assert await navigator.find_next_token({"TOKEN_A"}) is None

    @pytest.mark.asyncio
    async def test_table_missing(self):
        page = FakePage()
        navigator = TableNavigator(page)
        with pytest.raises(FieldTimeoutError):
            await navigator.load_listing("https://neo.bullx.io/somewhere-else")

    @pytest.mark.asyncio
    async def test_no_traders_with_links(self):
        page = FakePage({"TOKEN_A": FakeToken(traders=traders(5, has_link=False))})
        navigator = TableNavigator(page)
        await navigator.load_listing("https://neo.bullx.io/explore")
        await navigator.open_token(await navigator.find_next_token(set()))

        assert await navigator.open_top_traders() is False


class TestTraderRows:
    """Tests for finding rows in the virtualized trader list."""

    @pytest.mark.asyncio
    async def test_rendered_row_found_without_scrolling(self):
        page = FakePage({"TOKEN_A": FakeToken(traders=traders(50))})
        navigator = TableNavigator(page)
        await open_traders(page, navigator)

        assert await navigator.find_trader_row(3) is True
        assert page.scroll_calls == 0

    @pytest.mark.asyncio
    async def test_row_found_after_scrolling(self):
        page = FakePage({"TOKEN_A": FakeToken(traders=traders(50), window=20, rows_per_scroll=5)})
        navigator = TableNavigator(page)
        await open_traders(page, navigator)

        assert await navigator.find_trader_row(30) is True
        assert page.scroll_calls == 2

    @pytest.mark.asyncio
    async def test_far_row_stops_at_attempt_cap(self):
        """Position 500 in a 50-row list gives up after the last scroll attempt."""
        page = FakePage({"TOKEN_A": FakeToken(traders=traders(50))})
        navigator = TableNavigator(page, max_scroll_attempts=5)
        await open_traders(page, navigator)

        assert await navigator.find_trader_row(500) is False
        assert page.scroll_calls == 5
        assert page.waits.count(BullxSelectors.trader_row(500)) == 6

    @pytest.mark.asyncio
    async def test_attempts_override(self):
        page = FakePage({"TOKEN_A": FakeToken(traders=traders(10))})
        navigator = TableNavigator(page, max_scroll_attempts=5)
        await open_traders(page, navigator)

        assert await navigator.find_trader_row(500, max_scroll_attempts=2) is False
        assert page.scroll_calls == 2

    @pytest.mark.asyncio
    async def test_wallet_link_required(self):
        token = FakeToken(traders={3: FakeTrader(has_link=False), 4: FakeTrader()})
        page = FakePage({"TOKEN_A": token})
        navigator = TableNavigator(page)
        await open_traders(page, navigator)

        assert await navigator.has_wallet_link(3) is False
        assert await navigator.has_wallet_link(4) is True

    @pytest.mark.asyncio
    async def test_open_trader(self):
        page = FakePage({"TOKEN_A": FakeToken(traders=traders(5))})
        navigator = TableNavigator(page)
        await open_traders(page, navigator)

        assert await navigator.ensure_row_visible(4) is True
        await navigator.open_trader(4)

        assert page.view == "modal"
        assert page.modal.portfolio_id == "w4"

    @pytest.mark.asyncio
    async def test_off_screen_row_is_centered(self):
        token = FakeToken(traders={4: FakeTrader(visible=False)})
        page = FakePage({"TOKEN_A": token})
        navigator = TableNavigator(page)
        await open_traders(page, navigator)

        assert await navigator.ensure_row_visible(4) is True
        assert page.centered == ["4"]

    @pytest.mark.asyncio
    async def test_row_stays_off_screen(self):
        token = FakeToken(traders={4: FakeTrader(visible=False, centers=False)})
        page = FakePage({"TOKEN_A": token})
        navigator = TableNavigator(page)
        await open_traders(page, navigator)

        assert await navigator.ensure_row_visible(4) is False
        assert page.centered == ["4"]

    @pytest.mark.asyncio
    async def test_visible_row_not_centered(self):
        page = FakePage({"TOKEN_A": FakeToken(traders=traders(5))})
        navigator = TableNavigator(page)
        await open_traders(page, navigator)

        assert await navigator.ensure_row_visible(2) is True
        assert page.centered == []

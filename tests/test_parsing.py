"""Tests for BullX value parsing helpers."""

import pytest

from wallet_scout.scrapers.parsing import (
    compute_roi,
    extract_portfolio_id,
    format_pnl,
    format_roi,
    parse_amount,
    parse_cell_number,
)


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("$1.2M", 1_200_000),
            ("430K", 430_000),
            ("$2M", 2_000_000),
            ("$500K", 500_000),
            ("1,234", 1_234),
            ("$0", 0),
            ("12.5k", 12_500),
        ],
    )
    def test_amounts(self, text, expected):
        assert parse_amount(text) == pytest.approx(expected)

    def test_million_pnl_is_exact(self):
        """$1.6M must come out as a whole number of dollars."""
        assert parse_amount("$1.6M") == 1_600_000

    @pytest.mark.parametrize("text", ["garbage", "...", "", None, "$"])
    def test_unparseable_is_zero(self, text):
        assert parse_amount(text) == 0

    def test_only_leading_number_counts(self):
        assert parse_amount("1.2.3") == pytest.approx(1.2)

    def test_sign_is_dropped(self):
        assert parse_amount("-$3.5K") == pytest.approx(3_500)


class TestParseCellNumber:
    """Tests for parse_cell_number."""

    def test_zero_cell(self):
        assert parse_cell_number("$0") == 0

    def test_dollar_cell(self):
        assert parse_cell_number("$ 42.5") == pytest.approx(42.5)

    def test_empty_cell(self):
        assert parse_cell_number("") is None
        assert parse_cell_number(None) is None
        assert parse_cell_number("n/a") is None


class TestPortfolioId:
    """Tests for extract_portfolio_id."""

    def test_relative_link(self):
        assert extract_portfolio_id("/portfolio/AbC123") == "AbC123"

    def test_absolute_link_with_query(self):
        assert extract_portfolio_id("https://neo.bullx.io/portfolio/xyz?chain=sol") == "xyz"

    def test_missing(self):
        assert extract_portfolio_id(None) is None
        assert extract_portfolio_id("/terminal/abc") is None
        assert extract_portfolio_id("/portfolio/") is None


class TestRoi:
    """Tests for ROI math and formatting."""

    def test_roi(self):
        roi = compute_roi(revenue=150, spent=100)
        assert roi == pytest.approx(50)
        assert format_roi(roi) == "50.00%"

    def test_nothing_spent(self):
        assert compute_roi(revenue=150, spent=0) is None

    def test_format_pnl(self):
        assert format_pnl(1_600_000.0) == "1600000"
        assert format_pnl(1234.5) == "1234.5"

"""Tests for the JSON state documents and the run lock."""

import json
import logging

import pytest

from wallet_scout.models.portfolio import PortfolioRecord
from wallet_scout.state import RunLockError, StateStore, exclusive_run_lock


def make_store(data_dir):
    return StateStore(
        processed_tokens_path=data_dir / "processed_tokens.json",
        portfolios_path=data_dir / "portfolios.json",
        stats_path=data_dir / "scraper_stats.json",
    )


@pytest.fixture
def store(tmp_path):
    """Create a store in a temporary data directory."""
    return make_store(tmp_path)


def record(portfolio_id="abc", roi="300.00%", pnl="1600000"):
    return PortfolioRecord(
        id=portfolio_id,
        roi=roi,
        pnl=pnl,
        link=f"https://neo.bullx.io/portfolio/{portfolio_id}",
    )


class TestProcessedTokens:
    """Tests for the processed token list."""

    def test_empty_when_missing(self, store):
        assert store.load_processed_tokens() == frozenset()

    def test_append_persists_immediately(self, store):
        store.append_processed_token("TOKEN_A")
        data = json.loads(store.processed_tokens_path.read_text())
        assert data == ["TOKEN_A"]

    def test_idempotent_across_stores(self, tmp_path):
        """A second store on the same directory sees and keeps the set."""
        first = make_store(tmp_path)
        first.append_processed_token("TOKEN_A")

        second = make_store(tmp_path)
        assert "TOKEN_A" in second.load_processed_tokens()
        second.append_processed_token("TOKEN_A")
        second.append_processed_token("TOKEN_B")

        data = json.loads(second.processed_tokens_path.read_text())
        assert data == ["TOKEN_A", "TOKEN_B"]

    def test_clear(self, store):
        store.append_processed_token("TOKEN_A")
        store.append_processed_token("TOKEN_B")
        assert store.clear_processed_tokens() == 2
        assert store.load_processed_tokens() == frozenset()

    def test_corrupt_file_loads_empty(self, store):
        store.processed_tokens_path.write_text("{not json")
        assert store.load_processed_tokens() == frozenset()

    def test_wrong_shape_loads_empty(self, store):
        store.processed_tokens_path.write_text('{"TOKEN_A": true}')
        assert store.load_processed_tokens() == frozenset()


class TestPortfolios:
    """Tests for saved portfolios."""

    def test_upsert_and_load(self, store):
        assert store.upsert_portfolio(record()) is True

        portfolios = store.load_portfolios()
        assert list(portfolios) == ["abc"]
        assert portfolios["abc"].roi == "300.00%"
        assert portfolios["abc"].pnl == "1600000"

    def test_document_shape(self, store):
        """The dashboard reads roi/pnl/link/createdAt keyed by id."""
        store.upsert_portfolio(record())
        data = json.loads(store.portfolios_path.read_text())
        assert set(data) == {"abc"}
        assert set(data["abc"]) == {"roi", "pnl", "link", "createdAt"}

    def test_last_write_wins(self, store):
        store.upsert_portfolio(record(pnl="100"))
        assert store.upsert_portfolio(record(pnl="200")) is False
        assert store.load_portfolios()["abc"].pnl == "200"

    def test_keeps_other_entries(self, store):
        store.upsert_portfolio(record("abc"))
        store.upsert_portfolio(record("def"))
        assert set(store.load_portfolios()) == {"abc", "def"}

    def test_skips_invalid_entries(self, store):
        store.portfolios_path.write_text(json.dumps({"bad": "oops", "worse": {"roi": 1}}))
        assert store.load_portfolios() == {}

    def test_clear(self, store):
        store.upsert_portfolio(record("abc"))
        store.upsert_portfolio(record("def"))
        assert store.clear_portfolios() == 2
        assert store.load_portfolios() == {}


class TestStats:
    """Tests for the evaluated-wallets counter."""

    def test_starts_at_zero(self, store):
        assert store.load_stats().evaluated_count == 0

    def test_increment(self, store):
        store.increment_evaluated()
        stats = store.increment_evaluated()
        assert stats.evaluated_count == 2
        assert json.loads(store.stats_path.read_text()) == {"portfoliosChecked": 2}

    def test_negative_count_resets(self, store):
        store.stats_path.write_text('{"portfoliosChecked": -4}')
        assert store.load_stats().evaluated_count == 0


class TestWriteFailures:
    """Tests for documents that can't be written."""

    def test_portfolio_write_failure_is_logged(self, store, caplog):
        # A directory in the document's place makes the final rename fail
        store.portfolios_path.mkdir()

        with caplog.at_level(logging.ERROR, logger="wallet_scout.state.store"):
            is_new = store.upsert_portfolio(record())

        assert is_new is True
        assert "Failed to write portfolios.json" in caplog.text
        assert not (store.portfolios_path.parent / ".portfolios.json.tmp").exists()

    def test_stats_write_failure_is_logged(self, store, caplog):
        store.stats_path.mkdir()

        with caplog.at_level(logging.ERROR, logger="wallet_scout.state.store"):
            stats = store.increment_evaluated()

        assert stats.evaluated_count == 1
        assert "Failed to write scraper_stats.json" in caplog.text
        assert not (store.stats_path.parent / ".scraper_stats.json.tmp").exists()


class TestInitDocuments:
    """Tests for creating the documents on first run."""

    def test_creates_missing(self, store):
        store.init_documents()
        assert json.loads(store.processed_tokens_path.read_text()) == []
        assert json.loads(store.portfolios_path.read_text()) == {}
        assert json.loads(store.stats_path.read_text()) == {"portfoliosChecked": 0}

    def test_keeps_existing(self, store):
        store.append_processed_token("TOKEN_A")
        store.init_documents()
        assert store.load_processed_tokens() == frozenset({"TOKEN_A"})


class TestRunLock:
    """Tests for the single-run lock."""

    def test_second_run_fails_fast(self, tmp_path):
        lock_path = tmp_path / "scraper.lock"
        with exclusive_run_lock(lock_path):
            with pytest.raises(RunLockError):
                with exclusive_run_lock(lock_path):
                    pass

    def test_released_after_run(self, tmp_path):
        lock_path = tmp_path / "scraper.lock"
        with exclusive_run_lock(lock_path):
            pass
        with exclusive_run_lock(lock_path):
            assert lock_path.exists()

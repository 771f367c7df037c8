"""JSON document store for scraper state.

Three documents live in the data directory and are shared with the
control service / dashboard, so their on-disk shapes are fixed:

- processed_tokens.json: ["TOKEN_A", "TOKEN_B", ...]
- portfolios.json: {"<portfolio id>": {"roi": ..., "pnl": ..., "link": ..., "createdAt": ...}}
- scraper_stats.json: {"portfoliosChecked": 123}

Every mutation re-reads the document, applies the change and rewrites the
whole file. Only one scraper run writes at a time (see lock.py).
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from ..config import Config, config
from ..models.portfolio import PortfolioRecord, ScraperStats

logger = logging.getLogger(__name__)


class StateStore:
    """Load/save access to the scraper's JSON documents."""

    def __init__(
        self,
        processed_tokens_path: Path,
        portfolios_path: Path,
        stats_path: Path,
    ):
        self.processed_tokens_path = processed_tokens_path
        self.portfolios_path = portfolios_path
        self.stats_path = stats_path

    @classmethod
    def from_config(cls, app_config: Config | None = None) -> "StateStore":
        """Create a store using the document paths from config."""
        cfg = app_config or config
        return cls(
            processed_tokens_path=cfg.processed_tokens_path,
            portfolios_path=cfg.portfolios_path,
            stats_path=cfg.stats_path,
        )

    # -------------------------------------------------------------------------
    # Document I/O
    # -------------------------------------------------------------------------

    @staticmethod
    def _read_document(path: Path, expected: type, default: Callable[[], Any]) -> Any:
        """Read a JSON document, treating missing or corrupt files as empty."""
        if not path.exists():
            return default()
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {path.name}, treating it as empty: {e}")
            return default()

        if not isinstance(data, expected):
            logger.warning(
                f"Unexpected {type(data).__name__} in {path.name} "
                f"(expected {expected.__name__}), treating it as empty"
            )
            return default()
        return data

    @staticmethod
    def _write_document(path: Path, data: Any) -> bool:
        """Overwrite a JSON document. Returns False if the write failed."""
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, path)
            return True
        except OSError as e:
            logger.error(f"Failed to write {path.name}: {e}")
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                logger.warning(f"Could not remove leftover {tmp_path.name}")
            return False

    def init_documents(self) -> None:
        """Create any missing document with its empty value."""
        if not self.processed_tokens_path.exists():
            self._write_document(self.processed_tokens_path, [])
        if not self.portfolios_path.exists():
            self._write_document(self.portfolios_path, {})
        if not self.stats_path.exists():
            self._write_document(self.stats_path, ScraperStats().to_document())

    # -------------------------------------------------------------------------
    # Processed tokens
    # -------------------------------------------------------------------------

    def _read_token_list(self) -> list[str]:
        raw = self._read_document(self.processed_tokens_path, list, list)
        return [name for name in raw if isinstance(name, str)]

    def load_processed_tokens(self) -> frozenset[str]:
        """Get the names of every token processed so far."""
        return frozenset(self._read_token_list())

    def append_processed_token(self, name: str) -> None:
        """Mark a token as processed and persist immediately."""
        names = self._read_token_list()
        if name in names:
            return
        names.append(name)
        self._write_document(self.processed_tokens_path, names)

    def clear_processed_tokens(self) -> int:
        """Forget all processed tokens. Returns how many were cleared."""
        count = len(self._read_token_list())
        self._write_document(self.processed_tokens_path, [])
        return count

    # -------------------------------------------------------------------------
    # Portfolios
    # -------------------------------------------------------------------------

    def load_portfolios(self) -> dict[str, PortfolioRecord]:
        """Get all accepted portfolios keyed by portfolio ID."""
        raw = self._read_document(self.portfolios_path, dict, dict)
        portfolios: dict[str, PortfolioRecord] = {}
        for portfolio_id, data in raw.items():
            if not isinstance(data, dict):
                logger.warning(f"Skipping malformed portfolio entry {portfolio_id!r}")
                continue
            try:
                portfolios[portfolio_id] = PortfolioRecord.from_document(portfolio_id, data)
            except ValidationError as e:
                logger.warning(f"Skipping invalid portfolio entry {portfolio_id!r}: {e}")
        return portfolios

    def upsert_portfolio(self, record: PortfolioRecord) -> bool:
        """Save or overwrite a portfolio.

        Returns:
            True if this portfolio ID was not in the document before.
        """
        raw = self._read_document(self.portfolios_path, dict, dict)
        is_new = record.id not in raw
        raw[record.id] = record.to_document()
        self._write_document(self.portfolios_path, raw)
        return is_new

    def clear_portfolios(self) -> int:
        """Remove every stored portfolio. Returns how many were cleared."""
        count = len(self._read_document(self.portfolios_path, dict, dict))
        self._write_document(self.portfolios_path, {})
        return count

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def load_stats(self) -> ScraperStats:
        raw = self._read_document(self.stats_path, dict, dict)
        try:
            return ScraperStats.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Invalid stats document, starting from zero: {e}")
            return ScraperStats()

    def increment_evaluated(self) -> ScraperStats:
        """Add one to the evaluated-wallets counter and persist it."""
        current = self.load_stats()
        updated = ScraperStats(evaluated_count=current.evaluated_count + 1)
        self._write_document(self.stats_path, updated.to_document())
        logger.debug(f"Portfolios checked: {updated.evaluated_count}")
        return updated

"""Wallet filter pipeline.

Gates run in order and the first rejection stops the chain. Gates may
open extra UI (the Most Profitable tab); every entered gate's cleanup runs
once, followed by the pipeline's surface cleanup (closing the wallet
modal), whether the wallet was accepted, rejected, or a gate raised.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from ..config import FilterConfig
from ..models.portfolio import WalletMetrics
from ..scrapers.page import BrowserPage
from ..scrapers.parsing import compute_roi, format_roi, parse_cell_number
from ..scrapers.selectors import BullxSelectors, ScraperDelays
from .timing import TimeHistogram, TimingVerdict, classify_trade_ages

logger = logging.getLogger(__name__)

Cleanup = Callable[[], Awaitable[None]]


@dataclass
class Candidate:
    """State for the wallet being evaluated, filled in as gates run."""

    metrics: WalletMetrics
    roi: float | None = None
    timing: TimingVerdict | None = None


# A check returns a rejection reason, or None to let the wallet through
Check = Callable[[Candidate], Awaitable[str | None]]


@dataclass(frozen=True)
class Gate:
    name: str
    check: Check
    cleanup: Cleanup | None = None


@dataclass(frozen=True)
class FilterDecision:
    """Outcome of running a wallet through the pipeline."""

    accepted: bool
    gate: str | None = None  # Gate that rejected the wallet
    reason: str | None = None
    roi: float | None = None
    histogram: TimeHistogram | None = None


class FilterPipeline:
    """Runs gates in order, stopping at the first rejection."""

    def __init__(self, gates: Sequence[Gate], close_surface: Cleanup | None = None):
        self.gates = list(gates)
        self.close_surface = close_surface

    async def evaluate(self, candidate: Candidate) -> FilterDecision:
        entered: list[Gate] = []
        try:
            for gate in self.gates:
                entered.append(gate)
                reason = await gate.check(candidate)
                if reason is not None:
                    logger.info(f"Not interested in wallet {candidate.metrics.portfolio_id} - {reason}")
                    return self._decision(candidate, accepted=False, gate=gate.name, reason=reason)
            return self._decision(candidate, accepted=True)
        finally:
            await self._run_cleanups(entered)

    async def _run_cleanups(self, entered: list[Gate]) -> None:
        for gate in reversed(entered):
            if gate.cleanup is not None:
                await gate.cleanup()
        if self.close_surface is not None:
            await self.close_surface()

    @staticmethod
    def _decision(
        candidate: Candidate,
        accepted: bool,
        gate: str | None = None,
        reason: str | None = None,
    ) -> FilterDecision:
        return FilterDecision(
            accepted=accepted,
            gate=gate,
            reason=reason,
            roi=candidate.roi,
            histogram=candidate.timing.histogram if candidate.timing else None,
        )


# =============================================================================
# Gates
# =============================================================================

def pnl_gate(filters: FilterConfig) -> Gate:
    async def check(candidate: Candidate) -> str | None:
        pnl = candidate.metrics.pnl
        if pnl < filters.min_pnl:
            return f"PnL is too low ({pnl:,.0f} < {filters.min_pnl:,.0f})"
        return None

    return Gate("pnl", check)


def roi_gate(filters: FilterConfig) -> Gate:
    async def check(candidate: Candidate) -> str | None:
        metrics = candidate.metrics
        roi = compute_roi(metrics.revenue, metrics.spent)
        candidate.roi = roi
        if roi is None:
            return f"nothing spent ({metrics.spent:,.0f}), ROI undefined"
        if roi < filters.min_roi:
            return f"ROI is too low ({format_roi(roi)} < {filters.min_roi:g}%)"
        return None

    return Gate("roi", check)


def timing_gate(page: BrowserPage) -> Gate:
    async def check(candidate: Candidate) -> str | None:
        ages = await page.row_texts(BullxSelectors.TRADE_ROWS, BullxSelectors.TRADE_AGE_CELL)
        verdict = classify_trade_ages(ages)
        candidate.timing = verdict
        logger.debug(f"Trade ages for {candidate.metrics.portfolio_id}: {verdict.histogram}")
        if verdict.dominant_seconds:
            counts = verdict.histogram.counts()
            seconds = counts.pop("seconds")
            return f"most trades are in seconds ({seconds} vs {max(counts.values())} in other groups)"
        return None

    return Gate("timing", check)


def profitability_gate(page: BrowserPage, filters: FilterConfig) -> Gate:
    async def check(candidate: Candidate) -> str | None:
        if await page.count(BullxSelectors.MOST_PROFITABLE_TAB) == 0:
            return "Most Profitable tab not found"
        await page.click(BullxSelectors.MOST_PROFITABLE_TAB)
        await page.pause(ScraperDelays.AFTER_TAB_CLICK)

        cells = await page.row_texts(BullxSelectors.PROFITABLE_ROWS, BullxSelectors.PROFIT_CELL)
        if len(cells) < filters.min_profitable_trades:
            return f"not enough most profitable rows ({len(cells)} rows)"

        values = [value for value in map(parse_cell_number, cells) if value is not None]
        zero_count = sum(1 for value in values if value == 0)
        if zero_count > filters.max_zero_profit_trades:
            return f"too many $0 trades ({zero_count} out of {len(values)})"
        return None

    return Gate("profitability", check)


def build_pipeline(page: BrowserPage, filters: FilterConfig, close_surface: Cleanup | None = None) -> FilterPipeline:
    """The standard four-gate wallet filter."""
    return FilterPipeline(
        [
            pnl_gate(filters),
            roi_gate(filters),
            timing_gate(page),
            profitability_gate(page, filters),
        ],
        close_surface=close_surface,
    )

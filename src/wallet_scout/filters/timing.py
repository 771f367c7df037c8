"""Trade-age bucketing.

Wallets whose recent trades are mostly seconds apart are bots. Each age
label from the wallet modal ("12s", "5m", "3h", "2d", "1w") goes into one
of seven buckets; the wallet looks automated when the seconds bucket is
larger than every other bucket.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

BUCKETS = ("seconds", "under_30m", "over_30m", "under_2h", "over_2h", "days", "weeks")

_LEADING_INT = re.compile(r"^\s*(\d+)")


@dataclass
class TimeHistogram:
    """Trade ages grouped by bucket. Diagnostic only, never persisted."""

    seconds: list[str] = field(default_factory=list)
    under_30m: list[str] = field(default_factory=list)
    over_30m: list[str] = field(default_factory=list)
    under_2h: list[str] = field(default_factory=list)
    over_2h: list[str] = field(default_factory=list)
    days: list[str] = field(default_factory=list)
    weeks: list[str] = field(default_factory=list)
    unclassified: list[str] = field(default_factory=list)

    def add(self, bucket: str, text: str) -> None:
        getattr(self, bucket).append(text)

    def counts(self) -> dict[str, int]:
        return {bucket: len(getattr(self, bucket)) for bucket in BUCKETS}

    def __str__(self) -> str:
        return ", ".join(f"{bucket}={count}" for bucket, count in self.counts().items())


@dataclass(frozen=True)
class TimingVerdict:
    dominant_seconds: bool
    histogram: TimeHistogram


def _leading_int(text: str) -> int | None:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def classify_age(text: str) -> str | None:
    """Return the bucket for an age label, or None if it can't be classified."""
    if "s" in text:
        return "seconds"
    if "m" in text:
        value = _leading_int(text)
        if value is None:
            return None
        return "under_30m" if value < 30 else "over_30m"
    if "h" in text:
        value = _leading_int(text)
        if value is None:
            return None
        return "under_2h" if value < 2 else "over_2h"
    if "d" in text:
        return "days"
    if "w" in text:
        return "weeks"
    return None


def classify_trade_ages(ages: Iterable[str | None]) -> TimingVerdict:
    """Bucket trade ages and decide whether seconds dominate."""
    histogram = TimeHistogram()
    for index, raw in enumerate(ages, start=1):
        text = (raw or "").strip()
        bucket = classify_age(text)
        if bucket is None:
            logger.warning(f"Trade {index} - Unrecognized time format: {text!r}")
            histogram.unclassified.append(text)
            continue
        histogram.add(bucket, text)

    counts = histogram.counts()
    seconds = counts.pop("seconds")
    highest_other = max(counts.values())
    return TimingVerdict(dominant_seconds=seconds > highest_other, histogram=histogram)

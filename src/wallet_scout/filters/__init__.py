"""Filters module."""

from .pipeline import (
    Candidate,
    FilterDecision,
    FilterPipeline,
    Gate,
    build_pipeline,
)
from .timing import TimeHistogram, TimingVerdict, classify_trade_ages

__all__ = [
    "Candidate",
    "FilterDecision",
    "FilterPipeline",
    "Gate",
    "build_pipeline",
    "TimeHistogram",
    "TimingVerdict",
    "classify_trade_ages",
]

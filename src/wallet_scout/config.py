"""Configuration management."""

import math
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field


class FilterConfig(BaseModel):
    """Acceptance thresholds for trader wallets."""

    # Realized PnL in dollars
    min_pnl: float = Field(
        default=25_000,
        description="Minimum realized PnL in dollars (e.g., 25000 = $25k)"
    )

    # ROI in percent, computed as (revenue - spent) / spent * 100
    min_roi: float = Field(
        default=2_000,
        description="Minimum ROI in percent (e.g., 2000 = 20x)"
    )

    # Most-profitable-trades sample
    min_profitable_trades: int = Field(
        default=10,
        description="Minimum rows required in the Most Profitable tab"
    )
    max_zero_profit_trades: int = Field(
        default=3,
        description="Maximum most-profitable rows allowed to show exactly $0"
    )

    def with_overrides(
        self,
        min_pnl: float | None = None,
        min_roi: float | None = None,
        min_profitable_trades: int | None = None,
        max_zero_profit_trades: int | None = None,
    ) -> "FilterConfig":
        """Create a new FilterConfig with optional overrides.

        Only non-None values override the current values.
        """
        return FilterConfig(
            min_pnl=min_pnl if min_pnl is not None else self.min_pnl,
            min_roi=min_roi if min_roi is not None else self.min_roi,
            min_profitable_trades=(
                min_profitable_trades if min_profitable_trades is not None else self.min_profitable_trades
            ),
            max_zero_profit_trades=(
                max_zero_profit_trades if max_zero_profit_trades is not None else self.max_zero_profit_trades
            ),
        )


def _env_number(environ: Mapping[str, str], key: str, default: float) -> float:
    """Read a numeric environment variable, falling back on missing or bad values.

    "inf" and "nan" parse as floats but count as bad values.
    """
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if math.isfinite(value) else default


class Config(BaseModel):
    """Application configuration."""

    # Project paths - config.py is at src/wallet_scout/config.py, so 3 parents up
    project_root: Path = Path(__file__).parent.parent.parent
    data_dir: Path = project_root / "data"

    # Remote browser (Chrome started with --remote-debugging-port)
    host_ip: str = "localhost"
    debug_port: int = 9222
    base_url: str = "https://neo.bullx.io"

    # Run limits
    max_tokens: int = Field(default=10, description="Maximum tokens to process per run")
    max_traders: int = Field(default=20, description="Last trader row position to inspect per token")
    start_row: int = Field(default=3, description="First trader row position to inspect")
    max_scroll_attempts: int = Field(default=5, description="Scroll steps before a trader row counts as missing")

    # Waits
    field_timeout_ms: int = 30_000  # Detail values render behind a loader
    page_load_timeout_ms: int = 60_000

    filters: FilterConfig = Field(default_factory=FilterConfig)

    @property
    def processed_tokens_path(self) -> Path:
        return self.data_dir / "processed_tokens.json"

    @property
    def portfolios_path(self) -> Path:
        return self.data_dir / "portfolios.json"

    @property
    def stats_path(self) -> Path:
        return self.data_dir / "scraper_stats.json"

    @property
    def lock_path(self) -> Path:
        return self.data_dir / "scraper.lock"

    @property
    def cdp_url(self) -> str:
        return f"http://{self.host_ip}:{self.debug_port}"

    def ensure_dirs(self) -> None:
        """Ensure required directories exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def with_overrides(self, **overrides) -> "Config":
        """Create a new Config with the non-None keyword arguments applied."""
        updates = {key: value for key, value in overrides.items() if value is not None}
        return self.model_copy(update=updates)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Build configuration from environment variables.

        Uses the variable names the control service writes to .env.
        Missing or non-numeric values keep their defaults.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        filters = FilterConfig(
            min_pnl=_env_number(env, "MIN_PNL", defaults.filters.min_pnl),
            min_roi=_env_number(env, "MIN_ROI", defaults.filters.min_roi),
        )
        data_dir = env.get("WALLET_SCOUT_DATA_DIR")
        return cls(
            data_dir=Path(data_dir) if data_dir else defaults.data_dir,
            host_ip=env.get("HOST_IP") or defaults.host_ip,
            debug_port=int(_env_number(env, "CHROME_DEBUG_PORT", defaults.debug_port)),
            base_url=(env.get("BASE_URL") or defaults.base_url).rstrip("/"),
            max_tokens=int(_env_number(env, "MAX_TOKENS_TO_PROCESS", defaults.max_tokens)),
            max_traders=int(_env_number(env, "MAX_TRADERS_PER_TOKEN", defaults.max_traders)),
            start_row=int(_env_number(env, "START_FROM_ROW", defaults.start_row)),
            filters=filters,
        )


# Global config instance
config = Config.from_env()

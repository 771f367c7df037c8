"""BullX (neo.bullx.io) selectors, timeouts and delays.

Page structure:
- Explore page: /explore, token table in `.b-table-body`, one `.b-table-row` per token
- Token name: small grey span inside the row
- Token page: "Top Traders" tab; trader rows carry a Solscan link and a
  numbered first cell. The trader list is virtualized: only ~20 rows exist
  in the DOM at a time and the inner `.no-scrollbar` div scrolls them in.
- Wallet modal (`.ant-modal-content`), opened by the div next to the
  Solscan link:
  - "Total Revenue", "Total Spent", "Realized PnL" labels with the value in
    the following sibling span (shows "..." while loading)
  - Portfolio link: a[href*="/portfolio/<id>"]
  - Recent trades table: first cell holds the trade age ("12s", "3h", "2d")
  - "Most Profitable" tab: second cell holds the trade profit
"""


class BullxSelectors:
    """CSS/XPath selectors used by the crawler."""

    EXPLORE_PATH = "/explore"
    PORTFOLIO_PATH = "/portfolio/"

    # Token listing
    TABLE_BODY = ".b-table-body"
    TABLE_ROW = ".b-table-row"
    TOKEN_NAME = "span.font-normal.text-grey-50.block.text-xs"

    # Top traders
    TOP_TRADERS_TAB = 'span:text("Top Traders")'
    TRADER_WITH_LINK = '.b-table-row a[href*="solscan"]'
    EXPLORER_LINK = 'a[href*="solscan"]'
    ROW_NUMBER_CELL = ".b-table-cell span"
    SCROLL_CONTAINER = ".b-table .no-scrollbar .no-scrollbar"

    # Wallet modal
    MODAL = ".ant-modal-content"
    CLOSE_BUTTON = "button.w-5.h-5.bg-transparent.outline-none"
    PORTFOLIO_LINK = '.ant-modal-content a[href*="/portfolio/"]'
    TRADE_ROWS = ".ant-modal-content .b-table-row"
    TRADE_AGE_CELL = ".b-table-cell >> nth=0 >> a span"
    MOST_PROFITABLE_TAB = 'div[data-node-key="MOST_PROFITABLE"]'
    PROFITABLE_ROWS = ".ant-modal-content .ant-tabs-tabpane-active .b-table-row"
    PROFIT_CELL = ".b-table-cell:nth-of-type(2) div"

    # Value labels in the wallet modal
    TOTAL_REVENUE = "Total Revenue"
    TOTAL_SPENT = "Total Spent"
    REALIZED_PNL = "Realized PnL"

    @staticmethod
    def trader_row(position: int) -> str:
        """Row whose first cell shows exactly this position number."""
        return f'.b-table-row:has(.b-table-cell span:text-is("{position}"))'

    @classmethod
    def wallet_cell(cls, position: int) -> str:
        """Clickable div right after the Solscan link in a trader row."""
        return f"{cls.trader_row(position)} {cls.EXPLORER_LINK} + div"

    @staticmethod
    def value_after_label(label: str) -> str:
        """XPath of the value span following a label span."""
        return f'//span[text()="{label}"]/following-sibling::span[1]'


class ScraperTimeouts:
    """Timeout configuration in milliseconds."""
    PAGE_LOAD_MS = 60_000  # Explore page waits for network idle
    TABLE_WAIT_MS = 60_000
    TOP_TRADERS_MS = 10_000  # Trader rows with Solscan links
    ROW_CHECK_MS = 1_000  # Per check while scrolling for a trader row
    FIELD_MS = 30_000  # Wallet modal values render behind a loader


class ScraperDelays:
    """Fixed waits in milliseconds for the UI to settle."""
    LISTING_SETTLE = 2_000
    AFTER_TOKEN_CLICK = 1_200
    AFTER_TAB_CLICK = 1_000
    AFTER_SCROLL = 500
    AFTER_CENTER = 800
    AFTER_TRADER_CLICK = 2_000
    AFTER_CLOSE = 500


class ScraperLimits:
    """Safety limits to prevent runaway scrolling."""
    MAX_SCROLL_ATTEMPTS = 5
    SCROLL_STEP_PX = 300

"""Browser page port.

The navigator, extractor and filter gates only talk to the page through
the small set of operations below, so they can run against an in-memory
fake in tests. ``PlaywrightPage`` is the real implementation; it is the
only place in the crawler that touches Playwright's Page/Locator API.
"""

from __future__ import annotations

import logging
from typing import Protocol

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeout

logger = logging.getLogger(__name__)


class FieldTimeoutError(TimeoutError):
    """A value or element did not appear within its wait bound."""


class MissingElementError(LookupError):
    """A required element is not on the page."""


class BrowserPage(Protocol):
    """Operations the crawler needs from a browser tab."""

    async def goto(self, url: str, timeout_ms: int) -> None: ...

    async def go_back(self) -> None: ...

    async def wait_for(self, selector: str, timeout_ms: int) -> bool: ...

    async def wait_for_value(self, xpath: str, timeout_ms: int) -> str: ...

    async def count(self, selector: str) -> int: ...

    async def row_texts(self, row_selector: str, cell_selector: str) -> list[str | None]: ...

    async def get_attribute(self, selector: str, name: str) -> str | None: ...

    async def click(self, selector: str) -> None: ...

    async def click_nth(self, selector: str, index: int) -> None: ...

    async def is_visible(self, selector: str) -> bool: ...

    async def scroll_into_view(self, selector: str) -> None: ...

    async def scroll_by(self, container_selector: str, pixels: int) -> int: ...

    async def center_row(self, cell_selector: str, row_selector: str, text: str) -> bool: ...

    async def pause(self, ms: int) -> None: ...


# Resolves once the element at the XPath shows a number instead of the "..." loader
_VALUE_READY_JS = """
(xpath) => {
    const element = document.evaluate(
        xpath, document, null, XPathResult.FIRST_ORDERED_NODE_TYPE, null
    ).singleNodeValue;
    return Boolean(
        element &&
        element.textContent &&
        !element.textContent.includes('...') &&
        /[\\d.]+[MK]?/.test(element.textContent)
    );
}
"""

_SCROLL_BY_JS = """
([selector, pixels]) => {
    const container = document.querySelector(selector);
    if (!container) return 0;
    container.scrollTop += pixels;
    return container.scrollTop;
}
"""

# Rows outside the rendered window do not respond to scrollIntoView reliably,
# so also move the innermost scrollable container to the row's offset.
_CENTER_ROW_JS = """
([cellSelector, rowSelector, text]) => {
    const cell = Array.from(document.querySelectorAll(cellSelector)).find(
        (span) => span.textContent && span.textContent.trim() === text
    );
    if (!cell) return false;
    const row = cell.closest(rowSelector);
    if (!row) return false;
    row.scrollIntoView({ behavior: 'smooth', block: 'center' });

    const scrollables = Array.from(
        document.querySelectorAll('.b-table-body, .no-scrollbar, [style*="overflow"]')
    ).filter((el) => {
        const style = window.getComputedStyle(el);
        return ['auto', 'scroll'].includes(style.overflow) || ['auto', 'scroll'].includes(style.overflowY);
    });
    if (scrollables.length > 0) {
        const container = scrollables[scrollables.length - 1];
        container.scrollTop = row.offsetTop - container.clientHeight / 2;
    }
    return true;
}
"""


class PlaywrightPage:
    """BrowserPage backed by a Playwright Page."""

    def __init__(self, page: Page):
        self._page = page

    @property
    def raw(self) -> Page:
        return self._page

    async def goto(self, url: str, timeout_ms: int) -> None:
        await self._page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        await self._page.wait_for_load_state("domcontentloaded", timeout=timeout_ms)

    async def go_back(self) -> None:
        await self._page.go_back()

    async def wait_for(self, selector: str, timeout_ms: int) -> bool:
        try:
            await self._page.wait_for_selector(selector, timeout=timeout_ms)
            return True
        except PlaywrightTimeout:
            logger.debug(f"Selector '{selector}' not found within {timeout_ms}ms")
            return False

    async def wait_for_value(self, xpath: str, timeout_ms: int) -> str:
        try:
            await self._page.wait_for_function(_VALUE_READY_JS, arg=xpath, timeout=timeout_ms)
        except PlaywrightTimeout as e:
            raise FieldTimeoutError(f"Value at {xpath} did not load within {timeout_ms}ms") from e
        text = await self._page.locator(f"xpath={xpath}").first.text_content()
        return text or ""

    async def count(self, selector: str) -> int:
        return await self._page.locator(selector).count()

    async def row_texts(self, row_selector: str, cell_selector: str) -> list[str | None]:
        texts: list[str | None] = []
        for row in await self._page.locator(row_selector).all():
            cell = row.locator(cell_selector).first
            if await cell.count() == 0:
                texts.append(None)
                continue
            texts.append(await cell.text_content())
        return texts

    async def get_attribute(self, selector: str, name: str) -> str | None:
        locator = self._page.locator(selector)
        if await locator.count() == 0:
            return None
        return await locator.first.get_attribute(name)

    async def click(self, selector: str) -> None:
        await self._page.locator(selector).first.click()

    async def click_nth(self, selector: str, index: int) -> None:
        await self._page.locator(selector).nth(index).click()

    async def is_visible(self, selector: str) -> bool:
        return await self._page.locator(selector).first.is_visible()

    async def scroll_into_view(self, selector: str) -> None:
        await self._page.locator(selector).first.scroll_into_view_if_needed()

    async def scroll_by(self, container_selector: str, pixels: int) -> int:
        return await self._page.evaluate(_SCROLL_BY_JS, [container_selector, pixels])

    async def center_row(self, cell_selector: str, row_selector: str, text: str) -> bool:
        return await self._page.evaluate(_CENTER_ROW_JS, [cell_selector, row_selector, text])

    async def pause(self, ms: int) -> None:
        await self._page.wait_for_timeout(ms)

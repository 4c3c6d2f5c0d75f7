"""Raw table extraction from the rendered event page.

The page is loaded with Playwright and its rendered HTML is handed to
BeautifulSoup. Of all tables on the page, the one with the most body rows
is taken to be the event list; its cells are returned as trimmed text.
"""

import asyncio
from pathlib import Path

from bs4 import BeautifulSoup, Tag

from config.settings import GlobalConfig, get_config
from quakepulse.browser import BrowserManager
from quakepulse.logger import get_logger
from quakepulse.models import RawTable

log = get_logger(__name__)

HTML_PARSER = "html.parser"


def _cell_text(cell: Tag) -> str:
    return cell.get_text().strip()


def _body_rows(table: Tag) -> list[Tag]:
    rows = table.select("tbody tr")
    if rows:
        return rows
    # html.parser never adds a missing <tbody> the way a browser DOM does
    return [tr for tr in table.find_all("tr") if tr.find("td") is not None]


def extract_largest_table(html: str) -> RawTable:
    """Pick the table with the most body rows and return its text.

    The first table wins ties. A page without tables gives an empty
    RawTable, which the schema detector later reports as NoTableFoundError.
    """
    soup = BeautifulSoup(html, HTML_PARSER)
    tables = soup.find_all("table")

    if not tables:
        log.warning("No tables found in page")
        return RawTable()

    # max() keeps the first of equally large tables
    best = max(tables, key=lambda table: len(_body_rows(table)))

    headers = [_cell_text(th) for th in best.select("thead th")]
    rows = [[_cell_text(td) for td in tr.find_all("td")] for tr in _body_rows(best)]

    log.info(
        "Table extracted",
        tables_on_page=len(tables),
        header_count=len(headers),
        row_count=len(rows),
    )
    return RawTable(headers=headers, rows=rows)


def load_html_table(path: Path) -> RawTable:
    """Extract the event table from a saved HTML page."""
    html = Path(path).read_text(encoding="utf-8")
    return extract_largest_table(html)


class PageTableSource:
    """Fetch the rendered event page and return its largest table.

    Attributes:
        browser: Initialized BrowserManager.
        config: GlobalConfig with source URL and settle delay.

    Example:
        async with BrowserManager.create(config) as browser:
            table = await PageTableSource(browser, config).fetch()
    """

    def __init__(self, browser: BrowserManager, config: GlobalConfig | None = None) -> None:
        self.browser = browser
        self.config = config or get_config()

    @property
    def url(self) -> str:
        return self.config.source_url

    async def fetch(self) -> RawTable:
        """Load the source page and extract its event table.

        Raises:
            NavigationError: If the page cannot be loaded.
        """
        log.info("Fetching event table", url=self.url)

        page = await self.browser.new_page()
        try:
            await self.browser.navigate(page, self.url)

            # Late scripts keep filling the table after network idle
            if self.config.settle_delay_ms > 0:
                await asyncio.sleep(self.config.settle_delay_ms / 1000)

            html = await page.content()
        finally:
            await page.close()

        return extract_largest_table(html)

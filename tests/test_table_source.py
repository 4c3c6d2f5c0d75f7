"""Tests for HTML table extraction and page fetching.

HTML fixtures stand in for the rendered event page, so BeautifulSoup runs
for real while Playwright is mocked.
"""

from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest_mock import MockerFixture

from config.settings import GlobalConfig
from quakepulse.exceptions import NavigationError
from quakepulse.table_source import PageTableSource, extract_largest_table, load_html_table
from tests.conftest import DEFAULT_HEADERS


class TestExtractLargestTable:
    """Test suite for extract_largest_table."""

    def test_event_table_beats_decoy(
        self,
        quake_html_factory: Callable[..., str],
        quake_row_factory: Callable[..., list[str]],
    ) -> None:
        rows = [quake_row_factory(magnitude=m) for m in ("4.1", "2.3")]

        table = extract_largest_table(quake_html_factory(rows))

        assert table.headers == DEFAULT_HEADERS
        assert table.rows == rows

    def test_cell_text_trimmed(self, quake_html_factory: Callable[..., str]) -> None:
        table = extract_largest_table(quake_html_factory([["  a ", "b"]], headers=["X", "Y"]))

        assert table.headers == ["X", "Y"]
        assert table.rows == [["a", "b"]]

    def test_first_table_wins_ties(self) -> None:
        html = """
        <table><tbody><tr><td>first</td></tr></tbody></table>
        <table><tbody><tr><td>second</td></tr></tbody></table>
        """

        assert extract_largest_table(html).rows == [["first"]]

    def test_rows_without_tbody(self, quake_html_factory: Callable[..., str]) -> None:
        html = quake_html_factory([["1", "2"], ["3", "4"]], headers=[], with_tbody=False)

        table = extract_largest_table(html)

        assert table.rows == [["1", "2"], ["3", "4"]]

    def test_larger_table_without_tbody_beats_small_tbody_table(self) -> None:
        """Selection counts the same rows that extraction returns."""
        html = """
        <table><tbody><tr><td>Legend</td></tr></tbody></table>
        <table>
            <tr><th>Mag</th></tr>
            <tr><td>4.0</td></tr>
            <tr><td>2.0</td></tr>
            <tr><td>1.5</td></tr>
        </table>
        """

        assert extract_largest_table(html).rows == [["4.0"], ["2.0"], ["1.5"]]

    def test_header_only_table_has_no_body_rows(self) -> None:
        html = """
        <table><tr><th>Legend</th></tr><tr><th>Key</th></tr></table>
        <table><tbody><tr><td>only</td></tr></tbody></table>
        """

        assert extract_largest_table(html).rows == [["only"]]

    def test_table_without_tbody_when_alone(self) -> None:
        html = "<table><tr><th>Mag</th></tr><tr><td>4.0</td></tr><tr><td>2.0</td></tr></table>"

        table = extract_largest_table(html)

        assert table.headers == []
        assert table.rows == [["4.0"], ["2.0"]]

    def test_no_headers_gives_empty_header_list(
        self, quake_html_factory: Callable[..., str]
    ) -> None:
        table = extract_largest_table(quake_html_factory([["a"], ["b"]], headers=[]))

        assert table.headers == []
        assert table.rows == [["a"], ["b"]]

    def test_page_without_tables(self) -> None:
        table = extract_largest_table("<html><body><p>Maintenance</p></body></html>")

        assert table.headers == []
        assert table.rows == []

    def test_load_html_table_from_file(
        self,
        tmp_path: Path,
        quake_html_factory: Callable[..., str],
        quake_row_factory: Callable[..., list[str]],
    ) -> None:
        path = tmp_path / "page.html"
        rows = [quake_row_factory(place="Sámal")]
        path.write_text(quake_html_factory(rows), encoding="utf-8")

        assert load_html_table(path).rows == rows


class TestPageTableSource:
    """Test suite for PageTableSource.fetch."""

    @pytest.fixture
    def browser(self, mock_page: MagicMock) -> MagicMock:
        browser = MagicMock()
        browser.new_page = AsyncMock(return_value=mock_page)
        browser.navigate = AsyncMock()
        return browser

    @pytest.mark.asyncio
    async def test_fetch_extracts_rendered_table(
        self,
        mock_config: GlobalConfig,
        browser: MagicMock,
        mock_page: MagicMock,
        quake_html_factory: Callable[..., str],
        quake_row_factory: Callable[..., list[str]],
    ) -> None:
        rows = [quake_row_factory()]
        mock_page.content = AsyncMock(return_value=quake_html_factory(rows))

        table = await PageTableSource(browser, mock_config).fetch()

        browser.navigate.assert_awaited_once_with(mock_page, mock_config.source_url)
        assert table.rows == rows
        mock_page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_page_closed_when_navigation_fails(
        self,
        mock_config: GlobalConfig,
        browser: MagicMock,
        mock_page: MagicMock,
    ) -> None:
        browser.navigate = AsyncMock(
            side_effect=NavigationError(url=mock_config.source_url, reason="HTTP 500")
        )

        with pytest.raises(NavigationError):
            await PageTableSource(browser, mock_config).fetch()

        mock_page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_settle_delay_applied(
        self,
        mock_config: GlobalConfig,
        browser: MagicMock,
        mocker: MockerFixture,
    ) -> None:
        config = mock_config.model_copy(update={"settle_delay_ms": 1500})
        sleep = mocker.patch("quakepulse.table_source.asyncio.sleep", new=AsyncMock())

        await PageTableSource(browser, config).fetch()

        sleep.assert_awaited_once_with(1.5)

    @pytest.mark.asyncio
    async def test_no_delay_when_disabled(
        self,
        mock_config: GlobalConfig,
        browser: MagicMock,
        mocker: MockerFixture,
    ) -> None:
        sleep = mocker.patch("quakepulse.table_source.asyncio.sleep", new=AsyncMock())

        table = await PageTableSource(browser, mock_config).fetch()

        sleep.assert_not_awaited()
        assert table.rows == []

    def test_url_follows_config(self, mock_config: GlobalConfig, browser: MagicMock) -> None:
        assert PageTableSource(browser, mock_config).url == "https://test.example.com/"

"""Pytest configuration and shared fixtures for the QuakePulse test suite.

Guarantees:
- No network access (Playwright is always mocked)
- Isolated configuration (singleton cache cleared around each use)
- All files written under tmp_path
"""

from pathlib import Path
from typing import Any, Callable, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest_mock import MockerFixture

from config.settings import GlobalConfig
from quakepulse.models import RawTable

DEFAULT_HEADERS = ["Date - Time", "Latitude", "Magnitude", "Depth", "Longitude", "Location"]


@pytest.fixture
def mock_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[GlobalConfig]:
    """Provide isolated GlobalConfig with safe test defaults.

    Example:
        def test_something(mock_config: GlobalConfig) -> None:
            assert mock_config.settle_delay_ms == 0
    """
    from config.settings import get_config

    get_config.cache_clear()

    log_dir = tmp_path / "logs"
    output_dir = tmp_path / "output"
    log_dir.mkdir()
    output_dir.mkdir()

    test_env = {
        "APP_NAME": "QuakePulse-Test",
        "ENVIRONMENT": "development",
        "DEBUG": "false",
        "HEADLESS": "true",
        "LOG_LEVEL": "DEBUG",
        "LOG_DIR": str(log_dir),
        "LOG_ROTATION": "1 day",
        "LOG_RETENTION": "1 day",
        "SOURCE_URL": "https://test.example.com/",
        "REQUEST_TIMEOUT_MS": "5000",
        "SETTLE_DELAY_MS": "0",
        "SNAPSHOT_PATH": str(tmp_path / "last_quakes.json"),
        "COLOR_OUTPUT": "false",
        "EXPORT_REPORTS": "false",
        "OUTPUT_DIR": str(output_dir),
    }

    for key, value in test_env.items():
        monkeypatch.setenv(key, value)

    config = get_config()

    yield config

    get_config.cache_clear()


@pytest.fixture
def quake_row_factory() -> Callable[..., list[str]]:
    """Factory for one row in the default six-column layout.

    Columns: date, latitude, magnitude, depth, longitude, location text.
    """

    def _row(
        when: str = "2024-01-01 10:00",
        magnitude: str = "4.5",
        depth: str = "10",
        place: str = "Town",
        latitude: str = "10.00",
        longitude: str = "125.00",
    ) -> list[str]:
        return [when, latitude, magnitude, depth, longitude, f"012 km N 45° W of {place}"]

    return _row


@pytest.fixture
def raw_table_factory(
    quake_row_factory: Callable[..., list[str]],
) -> Callable[..., RawTable]:
    """Factory for RawTable instances with generated or explicit rows.

    Example:
        table = raw_table_factory(count=3, overrides={0: {"magnitude": "n/a"}})
    """

    def _table(
        count: int = 5,
        overrides: dict[int, dict[str, Any]] | None = None,
        headers: list[str] | None = None,
        rows: list[list[str]] | None = None,
    ) -> RawTable:
        if rows is None:
            overrides = overrides or {}
            rows = []
            for i in range(count):
                fields: dict[str, Any] = {
                    "when": f"2024-01-01 {10 + i % 10:02d}:{i % 60:02d}",
                    "magnitude": f"{1.5 + i:.1f}",
                    "depth": str(5 + i),
                    "place": f"Town {i}",
                }
                fields.update(overrides.get(i, {}))
                rows.append(quake_row_factory(**fields))
        return RawTable(
            headers=list(DEFAULT_HEADERS) if headers is None else headers,
            rows=rows,
        )

    return _table


@pytest.fixture
def quake_html_factory() -> Callable[..., str]:
    """Factory for an HTML page holding a decoy table and the event table.

    Args (of the returned function):
        rows: Body rows of the event table.
        headers: Header cells; an empty list omits <thead>.
        with_tbody: Wrap body rows in <tbody>.
    """

    def _page(
        rows: list[list[str]],
        headers: list[str] | None = None,
        with_tbody: bool = True,
    ) -> str:
        headers = DEFAULT_HEADERS if headers is None else headers
        head_html = (
            "<thead><tr>" + "".join(f"<th> {h} </th>" for h in headers) + "</tr></thead>"
            if headers
            else ""
        )
        body_rows = "".join(
            "<tr>" + "".join(f"<td>\n  {cell}  \n</td>" for cell in row) + "</tr>"
            for row in rows
        )
        body_html = f"<tbody>{body_rows}</tbody>" if with_tbody else body_rows

        return f"""
        <!DOCTYPE html>
        <html>
        <head><title>Latest Earthquake Information</title></head>
        <body>
            <table class="legend"><tr><th>Legend</th></tr></table>
            <table class="events">{head_html}{body_html}</table>
        </body>
        </html>
        """

    return _page


@pytest.fixture
def playwright_mocks() -> tuple[MagicMock, MagicMock, MagicMock, MagicMock]:
    """Mock chain for the ``async_playwright().start()`` pattern.

    Returns:
        Tuple of (async_playwright_instance, playwright_mock, browser_mock, context_mock)
    """
    context_mock = MagicMock()
    context_mock.new_page = AsyncMock()
    context_mock.close = AsyncMock()

    browser_mock = MagicMock()
    browser_mock.new_context = AsyncMock(return_value=context_mock)
    browser_mock.close = AsyncMock()

    playwright_mock = MagicMock()
    playwright_mock.chromium.launch = AsyncMock(return_value=browser_mock)
    playwright_mock.stop = AsyncMock()

    async_playwright_instance = MagicMock()
    async_playwright_instance.start = AsyncMock(return_value=playwright_mock)

    return async_playwright_instance, playwright_mock, browser_mock, context_mock


@pytest.fixture
def mock_page(mocker: MockerFixture) -> MagicMock:
    """Provide a mocked Playwright Page that loads with HTTP 200."""
    page = mocker.MagicMock()
    page.url = "https://test.example.com/"
    page.goto = mocker.AsyncMock(return_value=mocker.MagicMock(status=200))
    page.content = mocker.AsyncMock(return_value="<html></html>")
    page.close = mocker.AsyncMock()
    return page


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests requiring full stack",
    )

"""QuakePulse core source package.

Components of the seismic table pipeline:
- browser / table_source: Playwright page loading and BeautifulSoup table extraction
- schema: column detection for tables with unknown layout
- parser: noisy text to typed QuakeRecord conversion
- aggregator: magnitude buckets and new-since-last-run counts
- selector: bounded strong-quake list
- snapshot: previous-run signature persistence
- reporter: terminal rendering and Excel/Plotly exports
- logger / exceptions: loguru setup and error hierarchy
"""

__version__ = "1.0.0"

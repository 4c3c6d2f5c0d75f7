"""Column detection for tables with an unknown or drifting layout.

Header text is matched first. When no header mentions a magnitude, the
first data row is sampled for a value inside the plausible magnitude range
[0, 10]. Location and date fall back to column 0 so that parsing can
proceed on a best-effort basis.
"""

import math
import re

from quakepulse.exceptions import MagnitudeColumnNotFoundError, NoTableFoundError
from quakepulse.logger import get_logger
from quakepulse.models import RawTable, Schema

log = get_logger(__name__)

MAGNITUDE_KEYWORDS = ("mag",)
LOCATION_KEYWORDS = ("location", "epicenter")
LOCATION_FALLBACK_KEYWORDS = ("area", "province")
DATE_KEYWORDS = ("date", "time")

MIN_SAMPLE_MAGNITUDE = 0.0
MAX_SAMPLE_MAGNITUDE = 10.0

_NON_DECIMAL = re.compile(r"[^0-9.]")
_LEADING_FLOAT = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def _find_column(headers: list[str], keywords: tuple[str, ...]) -> int | None:
    for index, header in enumerate(headers):
        if any(keyword in header for keyword in keywords):
            return index
    return None


def _looks_numeric(cell: str) -> bool:
    try:
        return not math.isnan(float(cell))
    except ValueError:
        return False


def _sample_value(cell: str) -> float | None:
    """Digits and dots only, then the longest leading float."""
    match = _LEADING_FLOAT.match(_NON_DECIMAL.sub("", cell))
    return float(match.group(0)) if match else None


class SchemaDetector:
    """Infer magnitude, location and date columns for a RawTable.

    Example:
        detector = SchemaDetector()
        table = detector.promote_header(raw_table)
        schema = detector.detect(table)
    """

    def promote_header(self, table: RawTable) -> RawTable:
        """Use the first body row as headers when the table has none.

        Promotion only happens when every cell of that row is non-empty
        and non-numeric. Returns a new RawTable; the input is not touched.
        """
        if table.headers or not table.rows:
            return table

        first_row = table.rows[0]
        if first_row and all(cell and not _looks_numeric(cell) for cell in first_row):
            log.debug("Promoting first body row to header", headers=first_row)
            return RawTable(headers=list(first_row), rows=table.rows[1:])

        return table

    def detect_magnitude_column(self, headers: list[str], sample_row: list[str]) -> int | None:
        column = _find_column(headers, MAGNITUDE_KEYWORDS)
        if column is not None:
            return column

        for index, cell in enumerate(sample_row):
            value = _sample_value(cell)
            if value is not None and MIN_SAMPLE_MAGNITUDE <= value <= MAX_SAMPLE_MAGNITUDE:
                log.debug(
                    "Magnitude column inferred from sample row",
                    column=index,
                    cell=cell,
                )
                return index

        return None

    def detect(self, table: RawTable, source: str | None = None) -> Schema:
        """Resolve the column layout of ``table``.

        ``source`` names where the table came from; it is only used as
        error context.

        Raises:
            NoTableFoundError: If the table has no data rows.
            MagnitudeColumnNotFoundError: If no magnitude column is found.
        """
        if not table.rows:
            raise NoTableFoundError(source=source)

        headers = [header.lower() for header in table.headers]
        sample_row = table.rows[0]

        magnitude_column = self.detect_magnitude_column(headers, sample_row)
        if magnitude_column is None:
            raise MagnitudeColumnNotFoundError(headers=table.headers, sample_row=sample_row)

        location_column = _find_column(headers, LOCATION_KEYWORDS)
        if location_column is None:
            location_column = _find_column(headers, LOCATION_FALLBACK_KEYWORDS)
        if location_column is None:
            location_column = 0

        date_column = _find_column(headers, DATE_KEYWORDS)
        if date_column is None:
            date_column = 0

        schema = Schema(
            magnitude_column=magnitude_column,
            location_column=location_column,
            date_column=date_column,
        )
        log.info(
            "Schema detected",
            magnitude_column=schema.magnitude_column,
            location_column=schema.location_column,
            date_column=schema.date_column,
            header_count=len(table.headers),
        )
        return schema

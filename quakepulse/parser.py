"""Row-to-record conversion for noisy seismic table text.

Cells arrive as whatever text the page rendered ("M 5.2", "  5.2 Mg",
"017 km N 45° W of Town (Province)"), so every numeric read goes through
``parse_number``, which returns None instead of raising or defaulting to 0.
"""

import math
import re
from datetime import datetime

from config.settings import GlobalConfig, get_config
from quakepulse.logger import get_logger
from quakepulse.models import QuakeRecord, Schema

log = get_logger(__name__)

SIGNATURE_DELIMITER = "|"
LOCATION_DELIMITER = " of "
UNKNOWN_LOCATION = "Unknown"
DEPTH_WIDTH = 3

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_FIRST_FLOAT = re.compile(r"\d+(?:\.\d+)?")

DATETIME_FORMATS = [
    "%d %B %Y - %I:%M %p",  # 17 October 2026 - 10:15 AM
    "%d %b %Y - %I:%M %p",  # 17 Oct 2026 - 10:15 AM
    "%d %B %Y - %H:%M",
    "%d %B %Y %I:%M:%S %p",
    "%d %B %Y %I:%M %p",
    "%d %b %Y %I:%M:%S %p",
    "%d %b %Y %I:%M %p",
    "%d %B %Y %H:%M:%S",
    "%d %B %Y %H:%M",
    "%B %d, %Y %I:%M %p",
    "%b %d, %Y %I:%M %p",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y",
    "%d %B %Y",
    "%B %d, %Y",
]


def parse_number(text: str | None) -> float | None:
    """Parse a number out of noisy cell text.

    Everything except digits, "." and "-" is stripped before parsing.
    Nothing left, or a malformed remainder such as "5.2.1", gives None.

    Examples:
        >>> parse_number("M 5.2")
        5.2
        >>> parse_number("  5.2 Mg")
        5.2
        >>> parse_number("n/a") is None
        True
    """
    if not text:
        return None

    cleaned = _NON_NUMERIC.sub("", text).strip()
    if not cleaned:
        return None

    try:
        value = float(cleaned)
    except ValueError:
        return None

    return None if math.isnan(value) else value


def extract_first_float(text: str | None) -> float | None:
    """Return the first float-looking substring of ``text``, if any."""
    if not text:
        return None
    match = _FIRST_FLOAT.search(text)
    return float(match.group(0)) if match else None


def parse_datetime(text: str | None) -> datetime | None:
    """Parse a date/time cell for ordering purposes only.

    Tries ISO-8601 first, then the layouts in DATETIME_FORMATS. Timezone
    information is dropped so that every result is comparable.

    Returns:
        A naive datetime, or None when the text matches no known layout.
    """
    if not text:
        return None

    candidate = " ".join(text.split())
    if not candidate:
        return None

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        parsed = None

    if parsed is None:
        for fmt in DATETIME_FORMATS:
            try:
                parsed = datetime.strptime(candidate, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    return parsed.replace(tzinfo=None)


def format_depth(text: str | None) -> str:
    """Render a depth cell as a number right-aligned to width 3.

    Whole numbers drop their fractional part ("10.0" -> " 10"); unreadable
    depths become "NaN".
    """
    value = parse_number(text)
    if value is None:
        rendered = "NaN"
    elif value.is_integer():
        rendered = str(int(value))
    else:
        rendered = repr(value)
    return rendered.rjust(DEPTH_WIDTH)


def derive_location(text: str | None) -> str:
    """Take the place name from an "N km X of Place" description.

    The segment between the first and second " of " is returned trimmed;
    text without the delimiter yields "Unknown".
    """
    segments = (text or "").split(LOCATION_DELIMITER)
    if len(segments) > 1:
        return segments[1].strip()
    return UNKNOWN_LOCATION


def _cell(row: list[str], index: int) -> str:
    return row[index] if 0 <= index < len(row) else ""


class RecordParser:
    """Convert raw rows into QuakeRecord instances.

    Magnitude and date are read through the detected Schema. Location and
    depth are read from fixed cell positions (``location_cell_index`` and
    ``depth_cell_index``), which on the source page hold the epicenter
    description and the depth in km.

    Attributes:
        config: GlobalConfig supplying the fixed cell positions.
        schema: Detected column layout.
    """

    def __init__(self, schema: Schema, config: GlobalConfig | None = None) -> None:
        self.config = config or get_config()
        self.schema = schema

    def parse_magnitude(self, text: str) -> float | None:
        """Primary numeric parse with a first-float regex fallback."""
        magnitude = parse_number(text)
        if magnitude is None:
            magnitude = extract_first_float(text)
        return magnitude

    def parse_row(self, row: list[str]) -> QuakeRecord:
        """Parse one row; an unreadable magnitude is kept as None."""
        magnitude_text = _cell(row, self.schema.magnitude_column)
        magnitude = self.parse_magnitude(magnitude_text)

        if magnitude is None:
            log.debug("Unparseable magnitude", cell=magnitude_text, row=row)

        return QuakeRecord(
            magnitude=magnitude,
            datetime_text=_cell(row, self.schema.date_column),
            location=derive_location(_cell(row, self.config.location_cell_index)),
            depth=format_depth(_cell(row, self.config.depth_cell_index)),
            signature=SIGNATURE_DELIMITER.join(row),
        )

    def parse_rows(self, rows: list[list[str]]) -> list[QuakeRecord]:
        """Parse every row, preserving source order."""
        records = [self.parse_row(row) for row in rows]
        unparseable = sum(1 for record in records if not record.has_magnitude)
        log.info(
            "Rows parsed",
            total_rows=len(records),
            unparseable_magnitudes=unparseable,
        )
        return records

"""Selection of the strong-quake list shown in the report.

The list holds the most recent strong quakes plus every major quake that
fell outside that recent window, re-sorted newest first and capped. Rows
whose date text cannot be parsed compare as equal to everything, so the
stable sort leaves them where the source put them.
"""

from datetime import datetime
from functools import cmp_to_key

from config.settings import GlobalConfig, get_config
from quakepulse.logger import get_logger
from quakepulse.models import QuakeRecord
from quakepulse.parser import parse_datetime

log = get_logger(__name__)

_Dated = tuple[QuakeRecord, datetime | None]


def _compare_newest_first(left: _Dated, right: _Dated) -> int:
    left_time, right_time = left[1], right[1]
    if left_time is None or right_time is None:
        return 0
    if left_time > right_time:
        return -1
    if left_time < right_time:
        return 1
    return 0


def sort_newest_first(records: list[QuakeRecord]) -> list[QuakeRecord]:
    """Stable sort by parsed datetime, most recent first.

    A record with an unparseable datetime is order-neutral against every
    other record.
    """
    dated = [(record, parse_datetime(record.datetime_text)) for record in records]
    dated.sort(key=cmp_to_key(_compare_newest_first))
    return [record for record, _ in dated]


class StrongQuakeSelector:
    """Build the bounded, recency-and-severity-biased report list.

    Attributes:
        config: GlobalConfig with magnitude thresholds and list limits.

    Example:
        selector = StrongQuakeSelector(config)
        strong = selector.select(records)
    """

    def __init__(self, config: GlobalConfig | None = None) -> None:
        self.config = config or get_config()

    def is_strong(self, record: QuakeRecord) -> bool:
        return record.has_magnitude and record.magnitude >= self.config.strong_magnitude

    def is_major(self, record: QuakeRecord) -> bool:
        return record.has_magnitude and record.magnitude >= self.config.major_magnitude

    def select(self, records: list[QuakeRecord]) -> list[QuakeRecord]:
        """Return at most ``report_limit`` strong quakes, newest first.

        Steps:
            1. Keep strong quakes and sort them newest first.
            2. Take the first ``recent_limit`` as the recent window.
            3. Add every major quake whose signature is not in that window.
            4. Re-sort the combination and cut it to ``report_limit``.
        """
        strong = sort_newest_first([r for r in records if self.is_strong(r)])
        recent = strong[: self.config.recent_limit]

        recent_signatures = {record.signature for record in recent}
        additional_majors = [
            record
            for record in strong
            if self.is_major(record) and record.signature not in recent_signatures
        ]

        selected = sort_newest_first(recent + additional_majors)[: self.config.report_limit]

        log.info(
            "Strong quakes selected",
            strong=len(strong),
            recent=len(recent),
            additional_majors=len(additional_majors),
            selected=len(selected),
        )
        return selected

"""Magnitude bucket classification and new-since-last-run counting."""

from collections.abc import Iterable

from quakepulse.logger import get_logger
from quakepulse.models import BucketCounts, QuakeRecord, bucket_for, empty_counts

log = get_logger(__name__)


class BucketAggregator:
    """Count records per magnitude bucket against a previous snapshot.

    Records without a magnitude, or with a magnitude below every bucket,
    are left out of all counts.

    Attributes:
        previous_signatures: Signatures seen in the previous run.
    """

    def __init__(self, previous_signatures: Iterable[str] = ()) -> None:
        self.previous_signatures = frozenset(previous_signatures)

    def is_new(self, record: QuakeRecord) -> bool:
        return record.signature not in self.previous_signatures

    def aggregate(self, records: list[QuakeRecord]) -> dict[str, BucketCounts]:
        """Build fresh per-bucket counts for ``records``.

        Returns:
            Mapping of bucket name to BucketCounts, in bucket order.
        """
        counts = empty_counts()
        unclassified = 0

        for record in records:
            if not record.has_magnitude:
                continue

            bucket = bucket_for(record.magnitude)
            if bucket is None:
                unclassified += 1
                continue

            tally = counts[bucket.name]
            tally.total += 1
            if self.is_new(record):
                tally.new_since_last += 1

        log.info(
            "Buckets aggregated",
            totals={name: c.total for name, c in counts.items()},
            new={name: c.new_since_last for name, c in counts.items()},
            unclassified=unclassified,
        )
        return counts

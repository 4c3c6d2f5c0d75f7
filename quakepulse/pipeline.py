"""Core pipeline: raw table in, counts and strong-quake list out.

``QuakePipeline.run`` performs no I/O. Fetching the table, loading and
saving the snapshot, and printing the report happen around it in main.py.
"""

from collections.abc import Iterable

from config.settings import GlobalConfig, get_config
from quakepulse.aggregator import BucketAggregator
from quakepulse.logger import get_logger
from quakepulse.models import PipelineResult, RawTable
from quakepulse.parser import RecordParser
from quakepulse.schema import SchemaDetector
from quakepulse.selector import StrongQuakeSelector

log = get_logger(__name__)


class QuakePipeline:
    """Wire SchemaDetector, RecordParser, BucketAggregator and StrongQuakeSelector.

    Attributes:
        config: GlobalConfig passed to parser and selector.
        detector: SchemaDetector used for header promotion and detection.
    """

    def __init__(self, config: GlobalConfig | None = None) -> None:
        self.config = config or get_config()
        self.detector = SchemaDetector()

    def run(self, table: RawTable, previous_signatures: Iterable[str] = ()) -> PipelineResult:
        """Process one table against the previous run's signatures.

        Args:
            table: Headers and rows as scraped.
            previous_signatures: Signatures loaded from the snapshot.

        Returns:
            PipelineResult with per-bucket counts, the strong-quake list and
            the full signature list to persist.

        Raises:
            NoTableFoundError: If the table has no data rows.
            MagnitudeColumnNotFoundError: If no magnitude column is found.
        """
        table = self.detector.promote_header(table)
        schema = self.detector.detect(table, source=self.config.source_url)

        records = RecordParser(schema, self.config).parse_rows(table.rows)
        counts = BucketAggregator(previous_signatures).aggregate(records)
        strong_quakes = StrongQuakeSelector(self.config).select(records)

        result = PipelineResult(
            table_schema=schema,
            records=records,
            counts=counts,
            strong_quakes=strong_quakes,
            signatures=[record.signature for record in records],
        )

        log.info(
            "Pipeline pass complete",
            records=len(records),
            new_records=result.total_new,
            strong_quakes=len(strong_quakes),
        )
        return result

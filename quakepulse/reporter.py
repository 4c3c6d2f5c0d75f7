"""Report rendering for terminal output and file exports.

ReportRenderer produces the colored, column-aligned text printed after
each run. ReportGenerator optionally exports the same run as an Excel
workbook and a standalone Plotly HTML dashboard.
"""

import math
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from config.settings import GlobalConfig, get_config
from quakepulse.exceptions import ReportGenerationError
from quakepulse.logger import get_logger
from quakepulse.models import BUCKETS, BucketCounts, PipelineResult, QuakeRecord, bucket_for
from quakepulse.parser import parse_datetime

log = get_logger(__name__)

ANSI_RESET = "\x1b[0m"
ANSI_COLORS = {
    "white": "\x1b[37m",
    "cyan": "\x1b[36m",
    "yellow": "\x1b[33m",
    "red": "\x1b[31m",
    "magenta": "\x1b[35m",
}

STRONG_HEADING = "Recent strong quakes (Mg ≥4, always showing Mg ≥5):"
DATETIME_WIDTH = 20

PLOT_COLORS = {
    "white": "#95a5a6",
    "cyan": "#1abc9c",
    "yellow": "#f1c40f",
    "red": "#e74c3c",
    "magenta": "#9b59b6",
}


class ReportRenderer:
    """Format bucket counts and the strong-quake list as text lines.

    Attributes:
        color: Whether lines are wrapped in ANSI color codes.
    """

    def __init__(self, config: GlobalConfig | None = None, color: bool | None = None) -> None:
        config = config or get_config()
        self.color = config.color_output if color is None else color

    def _paint(self, line: str, color: str | None) -> str:
        if not self.color or color is None:
            return line
        return f"{ANSI_COLORS[color]}{line}{ANSI_RESET}"

    def bucket_lines(self, counts: dict[str, BucketCounts]) -> list[str]:
        """One line per bucket: ``label:   total quakes ↑new``.

        The label column is as wide as the longest bucket label; the count
        column is the widest total plus two.
        """
        label_width = max(len(bucket.name) for bucket in BUCKETS)
        count_width = max(len(str(counts[bucket.name].total)) for bucket in BUCKETS) + 2

        lines = []
        for bucket in BUCKETS:
            tally = counts[bucket.name]
            arrow = f" ↑{tally.new_since_last}" if tally.new_since_last > 0 else ""
            line = f"{bucket.name:<{label_width}}:{tally.total:>{count_width}} quakes{arrow}"
            lines.append(self._paint(line, bucket.color))
        return lines

    def strong_quake_line(self, record: QuakeRecord) -> str:
        bucket = bucket_for(record.magnitude)
        line = (
            f"{record.datetime_text:<{DATETIME_WIDTH}}  "
            f"[ Mg {record.magnitude:.1f} | Depth {record.depth}km ]  -  {record.location}"
        )
        return self._paint(line, bucket.color if bucket else None)

    def strong_quake_lines(self, strong_quakes: list[QuakeRecord]) -> list[str]:
        if not strong_quakes:
            return []
        return [STRONG_HEADING, ""] + [self.strong_quake_line(q) for q in strong_quakes]

    def render(self, result: PipelineResult) -> str:
        """Render the full report as a single string."""
        sections = ["\n".join(self.bucket_lines(result.counts))]
        strong = self.strong_quake_lines(result.strong_quakes)
        if strong:
            sections.append("\n".join(strong))
        return "\n\n" + "\n\n\n".join(sections) + "\n\n"


class ReportGenerator:
    """Export a pipeline result to Excel and an HTML dashboard.

    Attributes:
        config: GlobalConfig instance for output paths.
        _timestamp: Report generation timestamp for file naming.

    Example:
        reporter = ReportGenerator()
        paths = reporter.generate_all(result)
    """

    def __init__(self, config: GlobalConfig | None = None) -> None:
        self.config = config or get_config()
        self._timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")

    def _ensure_output_dir(self) -> Path:
        """Create the output directory if needed.

        Raises:
            ReportGenerationError: If directory cannot be created.
        """
        try:
            self.config.output_dir.mkdir(parents=True, exist_ok=True)
            return self.config.output_dir
        except OSError as exc:
            raise ReportGenerationError(
                report_type="output_directory",
                reason=f"Cannot create output directory: {exc}",
                output_path=str(self.config.output_dir),
            ) from exc

    @staticmethod
    def records_frame(records: list[QuakeRecord]) -> pd.DataFrame:
        rows = []
        for record in records:
            bucket = bucket_for(record.magnitude)
            rows.append(
                {
                    "datetime": record.datetime_text,
                    "magnitude": record.magnitude,
                    "bucket": bucket.name if bucket else None,
                    "depth_km": record.depth.strip(),
                    "location": record.location,
                    "signature": record.signature,
                }
            )
        return pd.DataFrame(
            rows,
            columns=["datetime", "magnitude", "bucket", "depth_km", "location", "signature"],
        )

    @staticmethod
    def bucket_frame(counts: dict[str, BucketCounts]) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "bucket": bucket.name,
                    "min_magnitude": bucket.min_magnitude,
                    "max_magnitude": (
                        bucket.max_magnitude if math.isfinite(bucket.max_magnitude) else None
                    ),
                    "total": counts[bucket.name].total,
                    "new_since_last": counts[bucket.name].new_since_last,
                }
                for bucket in BUCKETS
            ]
        )

    def generate_excel(self, result: PipelineResult, filename: str | None = None) -> Path:
        """Write Records, Bucket Summary and Strong Quakes sheets.

        Raises:
            ReportGenerationError: If Excel generation fails.
        """
        output_dir = self._ensure_output_dir()
        filename = filename or f"quakepulse_export_{self._timestamp}"
        output_path = output_dir / f"{filename}.xlsx"

        log.info("Generating Excel report", output_path=str(output_path))

        try:
            with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
                self.records_frame(result.records).to_excel(
                    writer, sheet_name="Records", index=False
                )
                self.bucket_frame(result.counts).to_excel(
                    writer, sheet_name="Bucket Summary", index=False
                )
                self.records_frame(result.strong_quakes).to_excel(
                    writer, sheet_name="Strong Quakes", index=False
                )
        except Exception as exc:
            raise ReportGenerationError(
                report_type="Excel",
                reason=str(exc),
                output_path=str(output_path),
            ) from exc

        log.info("Excel report generated", output_path=str(output_path))
        return output_path

    def generate_dashboard(self, result: PipelineResult, filename: str | None = None) -> Path:
        """Write a standalone HTML dashboard.

        Left panel: bucket totals with new-since-last overlaid. Right panel:
        strong-quake magnitudes over time (rows with unparseable dates are
        left out of the time axis).

        Raises:
            ReportGenerationError: If dashboard generation fails.
        """
        output_dir = self._ensure_output_dir()
        filename = filename or f"quakepulse_dashboard_{self._timestamp}"
        output_path = output_dir / f"{filename}.html"

        log.info("Generating HTML dashboard", output_path=str(output_path))

        try:
            buckets = self.bucket_frame(result.counts)
            strong = self.records_frame(result.strong_quakes)
            strong["occurred"] = pd.to_datetime(
                [parse_datetime(text) for text in strong["datetime"]], errors="coerce"
            )
            strong = strong.dropna(subset=["occurred"])

            fig = make_subplots(
                rows=1,
                cols=2,
                subplot_titles=("Quakes per Magnitude Bucket", "Strong Quakes"),
                horizontal_spacing=0.1,
            )

            fig.add_trace(
                go.Bar(
                    x=buckets["bucket"],
                    y=buckets["total"],
                    name="Total",
                    marker_color=[PLOT_COLORS[b.color] for b in BUCKETS],
                    text=buckets["total"],
                    textposition="auto",
                ),
                row=1,
                col=1,
            )
            fig.add_trace(
                go.Bar(
                    x=buckets["bucket"],
                    y=buckets["new_since_last"],
                    name="New since last run",
                    marker_color="#34495e",
                ),
                row=1,
                col=1,
            )

            fig.add_trace(
                go.Scatter(
                    x=strong["occurred"],
                    y=strong["magnitude"],
                    mode="markers",
                    name="Strong quake",
                    text=strong["location"],
                    marker={"size": 10, "color": "#e74c3c"},
                    hovertemplate="%{text}<br>Mg %{y:.1f}<br>%{x}<extra></extra>",
                ),
                row=1,
                col=2,
            )

            fig.update_layout(
                title={
                    "text": (
                        f"<b>QuakePulse Dashboard</b><br>"
                        f"<sup>Source: {self.config.source_url} | "
                        f"Records: {len(result.records)} | "
                        f"New: {result.total_new} | "
                        f"Generated: {datetime.now(UTC).strftime('%Y-%m-%d %H:%M UTC')}</sup>"
                    ),
                    "x": 0.5,
                    "xanchor": "center",
                },
                barmode="overlay",
                height=600,
                template="plotly_white",
            )
            fig.update_yaxes(title_text="Count", row=1, col=1)
            fig.update_yaxes(title_text="Magnitude", row=1, col=2)

            fig.write_html(str(output_path), include_plotlyjs=True, full_html=True)

        except Exception as exc:
            raise ReportGenerationError(
                report_type="Dashboard",
                reason=str(exc),
                output_path=str(output_path),
            ) from exc

        log.info("HTML dashboard generated", output_path=str(output_path))
        return output_path

    def generate_all(self, result: PipelineResult) -> dict[str, Path]:
        """Generate both exports and return their paths by type."""
        return {
            "excel": self.generate_excel(result),
            "dashboard": self.generate_dashboard(result),
        }

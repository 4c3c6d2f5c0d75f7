"""Custom exception hierarchy for QuakePulse.

Only two conditions stop a run inside the core: the source yielded no
table rows, or no magnitude column could be found. Everything else raised
here belongs to the I/O boundary (browser, snapshot file, exports, logging).
Per-record problems such as an unreadable magnitude are not exceptions at
all; they are recovered where they occur.
"""

from datetime import UTC, datetime
from typing import Any


class QuakePulseError(Exception):
    """Base exception for all QuakePulse errors.

    Attributes:
        message: Human-readable error description.
        context: Optional dictionary with additional debugging information.
        timestamp: UTC timestamp when the exception was raised.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        self.message = message
        self.context = context or {}
        self.timestamp = datetime.now(UTC)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format exception message with context for logging."""
        base = f"[{self.timestamp.isoformat()}] {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base} | Context: {context_str}"
        return base


class SchemaNotFoundError(QuakePulseError):
    """Raised when the event table cannot be interpreted at all.

    Halts the pipeline before any aggregation or snapshot write.
    """


class NoTableFoundError(SchemaNotFoundError):
    """Raised when the source produced zero data rows."""

    def __init__(self, source: str | None = None) -> None:
        super().__init__(
            message="No table rows found on the page. The site may have changed.",
            context={"source": source} if source else None,
        )


class MagnitudeColumnNotFoundError(SchemaNotFoundError):
    """Raised when neither headers nor sample values reveal a magnitude column."""

    def __init__(self, headers: list[str], sample_row: list[str]) -> None:
        super().__init__(
            message="Could not detect magnitude column.",
            context={"headers": headers, "sample_row": sample_row},
        )
        self.headers = headers
        self.sample_row = sample_row


class BrowserInitializationError(QuakePulseError):
    """Raised when the browser instance fails to start.

    Common causes are missing Playwright browsers or resource limits.
    """

    def __init__(self, reason: str, browser_type: str = "chromium") -> None:
        super().__init__(
            message=f"Failed to initialize {browser_type} browser: {reason}",
            context={"browser_type": browser_type, "reason": reason},
        )


class NavigationError(QuakePulseError):
    """Raised when page navigation fails or returns an error status."""

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        super().__init__(
            message=f"Navigation to '{url}' failed: {reason}",
            context={"url": url, "reason": reason, "status_code": status_code},
        )
        self.status_code = status_code


class SnapshotWriteError(QuakePulseError):
    """Raised when the signature snapshot cannot be written."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            message=f"Failed to write snapshot to '{path}': {reason}",
            context={"path": path, "reason": reason},
        )


class ReportGenerationError(QuakePulseError):
    """Raised when an Excel or HTML export fails."""

    def __init__(self, report_type: str, reason: str, output_path: str | None = None) -> None:
        super().__init__(
            message=f"Failed to generate {report_type} report: {reason}",
            context={"report_type": report_type, "reason": reason, "output_path": output_path},
        )


class LoggingInitializationError(QuakePulseError):
    """Raised when the logging system fails to initialize.

    Startup-blocking: the application does not run without logs.
    """

    def __init__(self, log_dir: str, reason: str) -> None:
        super().__init__(
            message=f"Failed to initialize logging at '{log_dir}': {reason}",
            context={"log_dir": log_dir, "reason": reason},
        )

"""QuakePulse entry point.

Bootstrap and orchestration only; the pipeline logic lives in /quakepulse.

Responsibilities:
    1. Load and validate configuration
    2. Initialize logging infrastructure (fail-fast on error)
    3. Fetch the event table, run the pipeline, print the report
    4. Replace the snapshot, only after a successful run

Usage:
    python main.py
    # or, once installed
    quakepulse
"""

import asyncio
import sys
from typing import NoReturn

from loguru import logger

from config.settings import GlobalConfig, get_config
from quakepulse.browser import BrowserManager
from quakepulse.exceptions import (
    LoggingInitializationError,
    QuakePulseError,
    SchemaNotFoundError,
)
from quakepulse.logger import configure_logging
from quakepulse.pipeline import QuakePipeline
from quakepulse.reporter import ReportGenerator, ReportRenderer
from quakepulse.snapshot import SnapshotStore
from quakepulse.table_source import PageTableSource


def _validate_startup_requirements(config: GlobalConfig) -> None:
    """Pre-flight checks before touching the network.

    Raises:
        SystemExit: If the output directory cannot be created.
    """
    if config.export_reports:
        try:
            config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.critical(
                "Failed to create output directory",
                output_dir=str(config.output_dir),
                error=str(exc),
            )
            sys.exit(1)

    logger.debug(
        "Startup validation complete",
        source_url=config.source_url,
        snapshot_path=str(config.snapshot_path),
    )


async def _run_pipeline(config: GlobalConfig) -> int:
    """Fetch, process, report and persist one snapshot generation.

    Returns:
        Exit code (0 for success).

    Raises:
        SchemaNotFoundError: If the table is empty or has no magnitude column.
            Nothing is written in that case.
    """
    logger.info(
        "Pipeline execution started",
        app_name=config.app_name,
        environment=config.environment,
        source_url=config.source_url,
    )

    async with BrowserManager.create(config) as browser:
        table = await PageTableSource(browser, config).fetch()

    store = SnapshotStore.from_config(config)
    previous_signatures = store.load()

    result = QuakePipeline(config).run(table, previous_signatures)

    sys.stdout.write(ReportRenderer(config).render(result))
    sys.stdout.flush()

    if config.export_reports:
        reports = ReportGenerator(config).generate_all(result)
        logger.info(
            "Reports generated successfully",
            excel_path=str(reports["excel"]),
            dashboard_path=str(reports["dashboard"]),
        )

    store.save(result.signatures)

    logger.info(
        "Pipeline execution completed successfully",
        records=len(result.records),
        new_records=result.total_new,
    )
    return 0


def _handle_fatal_error(exc: Exception) -> NoReturn:
    """Log a fatal error and exit non-zero."""
    if isinstance(exc, SchemaNotFoundError):
        logger.critical(
            exc.message,
            error_type=type(exc).__name__,
            context=exc.context,
        )
        sys.exit(1)

    if isinstance(exc, QuakePulseError):
        logger.critical(
            "Fatal application error",
            error_type=type(exc).__name__,
            message=exc.message,
            context=exc.context,
        )
        sys.exit(1)

    logger.exception("Unexpected fatal error", error=str(exc))
    sys.exit(1)


def main() -> int:
    """Application entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    try:
        config = get_config()
    except Exception as exc:
        # Cannot log yet
        print(f"FATAL: Configuration loading failed: {exc}", file=sys.stderr)
        return 1

    try:
        configure_logging(config)
    except LoggingInitializationError as exc:
        print(f"FATAL: {exc}", file=sys.stderr)
        return 1

    try:
        _validate_startup_requirements(config)
    except SystemExit:
        raise
    except Exception as exc:
        logger.exception("Startup validation failed", error=str(exc))
        return 1

    try:
        return asyncio.run(_run_pipeline(config))
    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user (Ctrl+C)")
        return 130
    except Exception as exc:
        _handle_fatal_error(exc)


if __name__ == "__main__":
    sys.exit(main())

"""Loguru setup for QuakePulse.

stdout carries the report, so every log line goes elsewhere: a colorized
stderr sink for humans and a daily JSON-lines file for machines.
"""

import json
import sys
from datetime import UTC
from pathlib import Path
from typing import Any

from loguru import logger

from config.settings import GlobalConfig
from quakepulse.exceptions import LoggingInitializationError

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> | "
    "<level>{message}</level>"
)
JSON_FILE_NAME = "quakepulse_{time:YYYY-MM-DD}.json"
_JSON_KEY = "json_line"


def _to_json_line(record: dict[str, Any]) -> str:
    """One JSON object per record; bound extras land under "context"."""
    extra = {k: v for k, v in record["extra"].items() if k != _JSON_KEY}
    entry: dict[str, Any] = {
        "timestamp": record["time"].astimezone(UTC).isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": extra.pop("module", record["name"]),
        "function": record["function"],
        "line": record["line"],
    }
    if extra:
        entry["context"] = extra

    error = record["exception"]
    if error is not None and error.type is not None:
        entry["exception"] = {"type": error.type.__name__, "value": str(error.value)}

    return json.dumps(entry, default=str, ensure_ascii=False)


def _attach_json_line(record: dict[str, Any]) -> bool:
    record["extra"][_JSON_KEY] = _to_json_line(record)
    return True


def _require_writable(log_dir: Path) -> None:
    """Create ``log_dir`` and prove a file can be written in it.

    Raises:
        LoggingInitializationError: On any filesystem error.
    """
    probe = log_dir / ".write_probe"
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        probe.touch()
        probe.unlink()
    except OSError as exc:
        raise LoggingInitializationError(log_dir=str(log_dir), reason=str(exc)) from exc


def configure_logging(config: GlobalConfig) -> None:
    """Replace loguru's default handler with the stderr and JSON file sinks.

    Raises:
        LoggingInitializationError: If the log directory is not writable.
    """
    logger.remove()
    _require_writable(config.log_dir)

    logger.configure(extra={"module": "quakepulse"})
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=config.log_level,
        colorize=True,
        backtrace=config.debug,
        diagnose=config.debug,
    )
    logger.add(
        str(config.log_dir / JSON_FILE_NAME),
        format=lambda _: "{extra[%s]}\n" % _JSON_KEY,
        level=config.log_level,
        rotation=config.log_rotation,
        retention=config.log_retention,
        compression="gz",
        filter=_attach_json_line,
    )

    logger.bind(module=__name__).debug(
        "Logging configured",
        log_level=config.log_level,
        log_dir=str(config.log_dir),
    )


def get_logger(name: str):
    """Loguru logger bound with the calling module's name."""
    return logger.bind(module=name)

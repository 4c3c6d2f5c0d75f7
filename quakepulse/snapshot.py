"""Persistence of the previous run's row signatures.

The snapshot file is a pretty-printed JSON array of strings. It holds one
generation only: ``save`` replaces it wholesale at the end of every run.
"""

import json
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from config.settings import GlobalConfig, get_config
from quakepulse.exceptions import SnapshotWriteError
from quakepulse.logger import get_logger

log = get_logger(__name__)

_SIGNATURE_LIST = TypeAdapter(list[str])


class SnapshotStore:
    """Read and replace the signature snapshot.

    Attributes:
        path: Location of the JSON snapshot file.

    Example:
        store = SnapshotStore.from_config(config)
        previous = store.load()
        ...
        store.save(result.signatures)
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @classmethod
    def from_config(cls, config: GlobalConfig | None = None) -> "SnapshotStore":
        config = config or get_config()
        return cls(config.snapshot_path)

    def load(self) -> set[str]:
        """Return the previously seen signatures.

        A missing, unreadable, malformed or wrongly shaped file counts as
        "no previous run" and yields an empty set. Bytes go straight to the
        validator so that invalid UTF-8 is reported like any other bad JSON.
        """
        if not self.path.exists():
            log.debug("No existing snapshot found", path=str(self.path))
            return set()

        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            log.warning(
                "Failed to read snapshot, treating every record as new",
                path=str(self.path),
                error=str(exc),
            )
            return set()

        try:
            signatures = _SIGNATURE_LIST.validate_json(raw)
        except ValidationError as exc:
            log.warning(
                "Corrupted snapshot file, treating every record as new",
                path=str(self.path),
                errors=exc.error_count(),
            )
            return set()

        log.info("Snapshot loaded", path=str(self.path), signatures=len(signatures))
        return set(signatures)

    def save(self, signatures: list[str]) -> Path:
        """Overwrite the snapshot with the current run's signatures.

        Raises:
            SnapshotWriteError: If the file cannot be written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(list(signatures), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as exc:
            raise SnapshotWriteError(path=str(self.path), reason=str(exc)) from exc

        log.info("Snapshot saved", path=str(self.path), signatures=len(signatures))
        return self.path

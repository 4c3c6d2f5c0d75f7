"""Pydantic models for the quake table pipeline.

The bucket definitions are an immutable ordered tuple; per-run counts live
in a fresh ``dict[str, BucketCounts]`` so no state carries across runs.
"""

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

BucketColor = Literal["white", "cyan", "yellow", "red", "magenta"]


class RawTable(BaseModel):
    """An unstructured table as scraped: header strings and ragged rows."""

    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)


class Schema(BaseModel):
    """Zero-based column positions inferred for a RawTable.

    ``magnitude_column`` is always resolved once a Schema exists; location
    and date fall back to column 0 when nothing matched.
    """

    model_config = ConfigDict(frozen=True)

    magnitude_column: int = Field(..., ge=0)
    location_column: int = Field(default=0, ge=0)
    date_column: int = Field(default=0, ge=0)


class MagnitudeBucket(BaseModel):
    """A half-open magnitude range ``[min_magnitude, max_magnitude)``."""

    model_config = ConfigDict(frozen=True)

    name: str
    min_magnitude: float
    max_magnitude: float
    color: BucketColor

    @model_validator(mode="after")
    def validate_range(self) -> "MagnitudeBucket":
        if self.max_magnitude <= self.min_magnitude:
            raise ValueError(f"Empty magnitude range for bucket {self.name!r}")
        return self

    def contains(self, magnitude: float) -> bool:
        return self.min_magnitude <= magnitude < self.max_magnitude


BUCKETS: tuple[MagnitudeBucket, ...] = (
    MagnitudeBucket(name="Mg 1+", min_magnitude=1, max_magnitude=2, color="white"),
    MagnitudeBucket(name="Mg 2+", min_magnitude=2, max_magnitude=3, color="white"),
    MagnitudeBucket(name="Mg 3+", min_magnitude=3, max_magnitude=4, color="cyan"),
    MagnitudeBucket(name="Mg 4+", min_magnitude=4, max_magnitude=5, color="yellow"),
    MagnitudeBucket(name="Mg 5+", min_magnitude=5, max_magnitude=6, color="red"),
    MagnitudeBucket(name="Mg 6+", min_magnitude=6, max_magnitude=math.inf, color="magenta"),
)


def bucket_for(magnitude: float | None) -> MagnitudeBucket | None:
    """Return the first bucket whose range holds ``magnitude``.

    Missing, NaN and sub-1 magnitudes match nothing.
    """
    if magnitude is None or math.isnan(magnitude):
        return None
    for bucket in BUCKETS:
        if bucket.contains(magnitude):
            return bucket
    return None


class QuakeRecord(BaseModel):
    """One parsed table row.

    Attributes:
        magnitude: Parsed magnitude, or None when the cell is unreadable.
        datetime_text: Raw date/time cell, not calendar-validated.
        location: Place name after " of ", or "Unknown".
        depth: Depth number padded to width 3, or "NaN".
        signature: All raw cells joined with "|", the cross-run identity key.
    """

    model_config = ConfigDict(frozen=True)

    magnitude: float | None
    datetime_text: str
    location: str = "Unknown"
    depth: str = "NaN"
    signature: str

    @property
    def has_magnitude(self) -> bool:
        return self.magnitude is not None


class BucketCounts(BaseModel):
    """Per-bucket tallies for a single run."""

    total: int = 0
    new_since_last: int = 0


def empty_counts() -> dict[str, BucketCounts]:
    """Fresh zeroed counts for every bucket, in bucket order."""
    return {bucket.name: BucketCounts() for bucket in BUCKETS}


class PipelineResult(BaseModel):
    """Everything one pipeline pass produces.

    ``signatures`` preserves row order and duplicates; it is what the
    snapshot store persists for the next run.
    """

    table_schema: Schema
    records: list[QuakeRecord]
    counts: dict[str, BucketCounts]
    strong_quakes: list[QuakeRecord]
    signatures: list[str]

    @property
    def total_new(self) -> int:
        return sum(c.new_since_last for c in self.counts.values())

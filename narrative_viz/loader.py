"""Load the per-year concussion dataset from CSV."""

import csv
import logging
from pathlib import Path

from pydantic import ValidationError

from narrative_viz.models import ConcussionRecord

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    field.alias for field in ConcussionRecord.model_fields.values() if field.alias
]


class DataLoadError(ValueError):
    """The dataset is missing, empty, or does not match the expected schema."""


def load_records(path: Path) -> list[ConcussionRecord]:
    """Read and validate every row, sorted by year.

    A "N/A" game count becomes 0. Any other non-numeric or negative value,
    a missing column, a duplicate year, or an empty file raises DataLoadError.
    """
    path = Path(path)
    if not path.exists():
        raise DataLoadError(f"Dataset not found: {path}")

    try:
        records = _read_rows(path)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise DataLoadError(f"{path.name}: unreadable dataset ({e.__class__.__name__})") from e
    return validate_records(records, source=path.name)


def _read_rows(path: Path) -> list[ConcussionRecord]:
    with path.open(newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        header = [h.strip() for h in (reader.fieldnames or [])]
        missing = [c for c in REQUIRED_COLUMNS if c not in header]
        if missing:
            raise DataLoadError(f"{path.name}: missing columns {', '.join(missing)}")

        records: list[ConcussionRecord] = []
        for line_no, row in enumerate(reader, start=2):
            cleaned = {
                k.strip(): (v or "").strip()
                for k, v in row.items()
                if k is not None  # overflow cells
            }
            if not any(cleaned.values()):
                continue  # blank line
            try:
                records.append(ConcussionRecord.model_validate(cleaned))
            except ValidationError as e:
                raise DataLoadError(f"{path.name}:{line_no}: invalid row ({e.error_count()} errors)") from e
    return records


def validate_records(
    records: list[ConcussionRecord], source: str = "dataset",
) -> list[ConcussionRecord]:
    """Check a record set is usable and return it sorted by year."""
    if not records:
        raise DataLoadError(f"{source}: no data rows")

    seen: set[int] = set()
    for r in records:
        if r.year in seen:
            raise DataLoadError(f"{source}: duplicate year {r.year}")
        seen.add(r.year)

    ordered = sorted(records, key=lambda r: r.year)
    logger.info(
        "Loaded %d years from %s (%d-%d)",
        len(ordered), source, ordered[0].year, ordered[-1].year,
    )
    return ordered

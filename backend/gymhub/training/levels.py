"""
Training level derivation from a user's training-module records.
"""
import math
from typing import Any, Iterable

from ..events.schema import TrainingLevel, TrainingLevelName

COMPLETED_STATUS = "completed"

# Inclusive lower bounds, checked highest first
LEVEL_THRESHOLDS = [
    (80.0, TrainingLevelName.EXPERT),
    (50.0, TrainingLevelName.INTERMEDIATE),
]


def _record_status(record: Any) -> str:
    if isinstance(record, dict):
        if "status" not in record:
            raise ValueError(f"Training record has no status: {record!r}")
        return record["status"]
    try:
        return record.status
    except AttributeError:
        raise ValueError(f"Training record has no status: {record!r}") from None


def level_for_progress(progress: float) -> TrainingLevelName:
    for threshold, level in LEVEL_THRESHOLDS:
        if progress >= threshold:
            return level
    return TrainingLevelName.BEGINNER


def compute_training_level(records: Iterable[Any]) -> TrainingLevel:
    """
    Summarize completion records as a level label and a 0-100 progress value.

    No records means Beginner at 0. Progress is rounded half up.
    """
    statuses = [_record_status(r) for r in records]
    progress = 0.0
    if statuses:
        completed = sum(1 for s in statuses if s == COMPLETED_STATUS)
        progress = completed / len(statuses) * 100

    return TrainingLevel(
        level=level_for_progress(progress),
        progress=int(math.floor(progress + 0.5)),
    )

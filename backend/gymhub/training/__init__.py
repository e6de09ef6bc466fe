"""Training level computation and record sources."""
from .levels import compute_training_level, level_for_progress
from .records import (
    InMemoryTrainingRecordSource,
    SqlTrainingRecordSource,
    TrainingRecordSource,
)

__all__ = [
    "compute_training_level",
    "level_for_progress",
    "InMemoryTrainingRecordSource",
    "SqlTrainingRecordSource",
    "TrainingRecordSource",
]

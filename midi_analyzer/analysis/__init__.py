"""Analysis layer - Difficulty scoring over decoded event streams.

Components:
- TempoGrid: tick -> seconds and bar/beat conversion
- DifficultyScorer: single pass producing a chord timeline and subscores
"""

from .tempo import TempoGrid, first_tempo
from .difficulty import (
    DifficultyScorer,
    ScorerConfig,
    AnalysisResult,
    TimelineEntry,
    chord_weight,
)

__all__ = [
    "TempoGrid",
    "first_tempo",
    "DifficultyScorer",
    "ScorerConfig",
    "AnalysisResult",
    "TimelineEntry",
    "chord_weight",
]

"""MIDI Analyzer - Chord identification and performance difficulty scoring.

Architecture Layers:
    1. core/      - Event types and musical constants
    2. inference/ - Chord identification (root orders, templates, detector)
    3. analysis/  - Tempo grid and difficulty scoring
    4. input/     - MIDI decoding and live performance capture
    5. output/    - MIDI export and analysis reports
"""

import logging

__version__ = "0.2.0"

# Core types
from .core import EventKind, EventStream, NoteEvent, TempoEvent

# Inference layer
from .inference import (
    ChordDetector,
    ChordResult,
    ResolutionPolicy,
    RootPriorityTable,
    ChordTemplateCatalog,
    UnknownKeyError,
    note_name,
)

# Analysis layer
from .analysis import DifficultyScorer, ScorerConfig, AnalysisResult, TimelineEntry

# Input layer
from .input import MidiLoader, MidiDecodeError, PerformanceRecorder, analyze_file

# Output layer
from .output import MIDIExporter

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core
    "EventKind",
    "EventStream",
    "NoteEvent",
    "TempoEvent",
    # Inference
    "ChordDetector",
    "ChordResult",
    "ResolutionPolicy",
    "RootPriorityTable",
    "ChordTemplateCatalog",
    "UnknownKeyError",
    "note_name",
    # Analysis
    "DifficultyScorer",
    "ScorerConfig",
    "AnalysisResult",
    "TimelineEntry",
    # Input
    "MidiLoader",
    "MidiDecodeError",
    "PerformanceRecorder",
    "analyze_file",
    # Output
    "MIDIExporter",
]

"""Output layer - Export recordings and analysis reports.

This layer handles:
- MIDI files (recorded performances)
- JSON/text reports of difficulty analysis
"""

from .midi import MIDIExporter
from .report import result_to_dict, timeline_lines, bulk_report

__all__ = [
    "MIDIExporter",
    "result_to_dict",
    "timeline_lines",
    "bulk_report",
]

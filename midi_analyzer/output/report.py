"""Analysis reports - JSON-ready and text views of an AnalysisResult."""

from typing import Any, Dict, List, Mapping

from ..analysis.difficulty import AnalysisResult


def result_to_dict(result: AnalysisResult, timeline_text: bool = True) -> Dict[str, Any]:
    """
    Convert an analysis result into a JSON-serializable dictionary.

    Args:
        result: Analysis to convert
        timeline_text: Render timeline entries as text lines instead of
                       structured objects

    Returns:
        Dictionary with subscores and chord timeline
    """
    data = result.to_dict()
    if timeline_text:
        data["timeline"] = timeline_lines(result)
    return data


def timeline_lines(result: AnalysisResult) -> List[str]:
    """Timeline as lines like 't=0.00s, Bar 1, Beat 1.00: Cmaj'."""
    return [entry.describe() for entry in result.timeline]


def bulk_report(
    results: Mapping[str, AnalysisResult], timeline_text: bool = True
) -> Dict[str, Dict[str, Any]]:
    """Per-file report keyed by file name."""
    return {
        name: result_to_dict(result, timeline_text=timeline_text)
        for name, result in results.items()
    }

"""
Search Insight Engine - Report Model

Builds the read-only ReportModel handed to the rendering layer, with
confidence tracking so degraded sections stay visible.
"""

from .confidence import ReportConfidence, SectionStatus
from .model import KeywordRow, ReportModel, assemble_report

__all__ = [
    "ReportConfidence",
    "SectionStatus",
    "KeywordRow",
    "ReportModel",
    "assemble_report",
]

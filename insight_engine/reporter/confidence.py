"""
Report Confidence Tracking

Tracks which report sections are backed by real data and which are
degraded, so the renderer can surface them instead of hiding gaps.
"""

from dataclasses import dataclass, field
from typing import Any, List
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionStatus:
    """Presence of one report section."""
    name: str
    present: bool
    detail: str = ""


@dataclass
class ReportConfidence:
    """
    Tracks confidence level of a report.

    Each tracked section is either present or degraded; the score is the
    share of present sections.
    """
    sections: List[SectionStatus] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def track(self, name: str, present: bool, detail: str = "") -> None:
        """Record whether a section has usable data."""
        self.sections.append(SectionStatus(name=name, present=present, detail=detail))
        if not present:
            message = f"MISSING: {name}" + (f" ({detail})" if detail else "")
            self.warnings.append(message)
            logger.warning(f"Report section degraded: {name}")

    def track_value(self, name: str, value: Any, detail: str = "") -> None:
        """Record a section as present if the value is meaningful."""
        self.track(name, self._has_value(value), detail)

    def _has_value(self, value: Any) -> bool:
        """Check if value is present and meaningful."""
        if value is None:
            return False
        if isinstance(value, str) and not value.strip():
            return False
        if isinstance(value, (list, dict)) and len(value) == 0:
            return False
        return True

    @property
    def degraded_sections(self) -> List[str]:
        return [s.name for s in self.sections if not s.present]

    @property
    def confidence_score(self) -> float:
        """
        Calculate confidence score 0-100.

        Higher = more real data, lower = more degraded sections.
        """
        if not self.sections:
            return 0.0
        present_count = sum(1 for s in self.sections if s.present)
        return round(present_count / len(self.sections) * 100, 1)

    @property
    def confidence_level(self) -> str:
        """Human-readable confidence level."""
        score = self.confidence_score
        if score >= 80:
            return "HIGH"
        elif score >= 50:
            return "MEDIUM"
        elif score >= 20:
            return "LOW"
        else:
            return "VERY LOW"

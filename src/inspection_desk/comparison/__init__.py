"""Version comparison for the manager dashboard."""

from inspection_desk.comparison.orchestrator import (
    ORIGINAL,
    ComparisonOrchestrator,
    ComparisonReport,
    ResolvedSnapshot,
)

__all__ = ["ORIGINAL", "ComparisonOrchestrator", "ComparisonReport", "ResolvedSnapshot"]

"""
Analysis Service

Indicator snapshots -> cache lookup -> concurrent narrative generation.
"""

from ada_ta.services.analysis.orchestrator import (
    AnalysisOrchestrator,
    get_analysis_orchestrator,
)

__all__ = [
    "AnalysisOrchestrator",
    "get_analysis_orchestrator",
]

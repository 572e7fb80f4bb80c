"""
Analysis Pipeline

Job orchestration for competitor teardown and topic expansion.
"""

from .orchestrator import (
    AnalysisOrchestrator,
    AnalysisOptions,
    PipelineMode,
    PipelineError,
    PipelineStats,
    MODE_PROFILES,
    CRITICAL_ERROR_MESSAGE,
    SEED_GENERATION_FAILED,
    run_job_safely,
)

__all__ = [
    "AnalysisOrchestrator",
    "AnalysisOptions",
    "PipelineMode",
    "PipelineError",
    "PipelineStats",
    "MODE_PROFILES",
    "CRITICAL_ERROR_MESSAGE",
    "SEED_GENERATION_FAILED",
    "run_job_safely",
]

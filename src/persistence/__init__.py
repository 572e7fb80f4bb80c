"""
Persistence Layer

Provides in-memory job tracking for analysis runs.
"""

from .jobs import JobStore, Job, JobStatus, InvalidTransitionError

__all__ = [
    "JobStore",
    "Job",
    "JobStatus",
    "InvalidTransitionError",
]

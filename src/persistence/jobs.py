"""
Job Tracking

Track analysis jobs from submission to completion.

Jobs live in process memory only and are lost on restart. The store is an
explicitly owned service object: the API holds one instance and hands it to
each background run.

Single writer per job: only the background task running a job mutates that
job's record; the status endpoint only reads. Everything runs on one asyncio
event loop and no method awaits, so no locking is needed. Moving the store to
threads would require a lock around every mutating method.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class JobStatus(Enum):
    """Job status states."""
    PENDING = "pending"         # Accepted, not started
    PROCESSING = "processing"   # Pipeline running
    COMPLETE = "complete"       # Finished with results
    ERROR = "error"             # Failed with error


TERMINAL_STATUSES = (JobStatus.COMPLETE, JobStatus.ERROR)

ALLOWED_TRANSITIONS = {
    JobStatus.PENDING: (JobStatus.PROCESSING, JobStatus.ERROR),
    JobStatus.PROCESSING: (JobStatus.COMPLETE, JobStatus.ERROR),
    JobStatus.COMPLETE: (),
    JobStatus.ERROR: (),
}


class InvalidTransitionError(Exception):
    """Raised when a job would move backwards or leave a terminal state."""
    def __init__(self, job_id: str, current: JobStatus, target: JobStatus):
        super().__init__(f"Job {job_id}: cannot move from {current.value} to {target.value}")
        self.job_id = job_id
        self.current = current
        self.target = target


@dataclass
class Job:
    """Analysis job data model."""
    job_id: str
    status: JobStatus
    created_at: datetime
    updated_at: datetime

    progress: str = "Job received..."
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    intermediate_data: Optional[Dict[str, Any]] = None

    # Request options, kept for diagnosis
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape returned by the status endpoint."""
        result: Dict[str, Any] = {
            "id": self.job_id,
            "status": self.status.value,
            "progress": self.progress,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        if self.intermediate_data is not None:
            result["intermediateData"] = self.intermediate_data
        return result


class JobStore:
    """
    In-memory job registry.

    Provides job creation, lifecycle transitions and lookups.
    """

    def __init__(self):
        self._jobs: Dict[str, Job] = {}

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._jobs

    def create(self, options: Optional[Dict[str, Any]] = None) -> Job:
        """Create a pending job with a fresh id."""
        now = datetime.now()
        job = Job(
            job_id=str(uuid.uuid4()),
            status=JobStatus.PENDING,
            created_at=now,
            updated_at=now,
            options=dict(options or {}),
        )
        self._jobs[job.job_id] = job
        logger.info(f"Created job {job.job_id}")
        return job

    def get(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def _require(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise KeyError(f"Unknown job {job_id}")
        return job

    def _transition(self, job_id: str, target: JobStatus) -> Job:
        job = self._require(job_id)
        if target not in ALLOWED_TRANSITIONS[job.status]:
            raise InvalidTransitionError(job_id, job.status, target)
        job.status = target
        job.updated_at = datetime.now()
        return job

    def start(self, job_id: str, progress: str = "Initializing...") -> Job:
        job = self._transition(job_id, JobStatus.PROCESSING)
        job.progress = progress
        return job

    def set_progress(self, job_id: str, progress: str) -> None:
        """Overwrite the advisory progress text of a running job."""
        job = self._require(job_id)
        if job.is_terminal:
            return
        job.progress = progress
        job.updated_at = datetime.now()

    def set_intermediate(self, job_id: str, data: Dict[str, Any]) -> None:
        """Merge a partial snapshot that survives a later failure."""
        job = self._require(job_id)
        job.intermediate_data = {**(job.intermediate_data or {}), **data}
        job.updated_at = datetime.now()

    def complete(self, job_id: str, data: Dict[str, Any]) -> Job:
        job = self._transition(job_id, JobStatus.COMPLETE)
        job.data = data
        job.progress = "Complete"
        return job

    def fail(self, job_id: str, error: str) -> Job:
        job = self._transition(job_id, JobStatus.ERROR)
        job.error = error
        job.progress = "Failed"
        return job

    def count_by_status(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in JobStatus}
        for job in self._jobs.values():
            counts[job.status.value] += 1
        return counts

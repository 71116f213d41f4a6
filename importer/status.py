"""
Read-only view of import jobs for callers polling their progress
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from importer.models import ImportJob


@dataclass(frozen=True)
class JobStatus:
    job_id: str
    state: str
    progress: int
    payload: dict
    result: Optional[dict[str, Any]]
    created_at: datetime
    processed_at: Optional[datetime]
    finished_at: Optional[datetime]
    failed_reason: Optional[str]

    @classmethod
    def from_job(cls, job: ImportJob) -> "JobStatus":
        return cls(
            job_id=job.pk,
            state=str(job.state),
            progress=job.progress,
            payload=job.payload,
            # Only terminal jobs have a result
            result=job.result if job.is_finished else None,
            created_at=job.created,
            processed_at=job.processed_at,
            finished_at=job.finished_at,
            failed_reason=job.failed_reason or None,
        )

    def as_dict(self):
        def isoformat(value):
            return value.isoformat() if value else None

        return {
            "job_id": self.job_id,
            "state": self.state,
            "progress": self.progress,
            "payload": self.payload,
            "result": self.result,
            "created_at": isoformat(self.created_at),
            "processed_at": isoformat(self.processed_at),
            "finished_at": isoformat(self.finished_at),
            "failed_reason": self.failed_reason,
        }


def get_job_status(job_id) -> Optional[JobStatus]:
    """
    Return the status of a job, or None when the job is unknown or has been
    pruned by the retention policy
    """
    job = ImportJob.objects.filter(pk=job_id).first()
    if job is None:
        return None
    return JobStatus.from_job(job)

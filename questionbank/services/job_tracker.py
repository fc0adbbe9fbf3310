"""
Processing-job records polled by clients.

Lifecycle: pending -> processing -> completed | error. The first progress
update moves a job to processing; terminal jobs ignore further updates and
progress never goes backwards.
"""
import logging
import uuid
from typing import Any

from sqlalchemy.orm import Session

from questionbank.models.processing_job import ProcessingJob
from questionbank.services.storage import utc_now

logger = logging.getLogger(__name__)

JOB_TYPES = {"syllabus_analysis", "question_extraction", "pdf_generation"}
ACTIVE_STATUSES = ("pending", "processing")
TERMINAL_STATUSES = ("completed", "error")


def create_job(db: Session, job_type: str, document_ids: list[str], status_message: str) -> ProcessingJob:
    if job_type not in JOB_TYPES:
        raise ValueError(f"Unknown job type: {job_type}")
    now = utc_now()
    job = ProcessingJob(
        id=str(uuid.uuid4()),
        type=job_type,
        status="pending",
        progress=0,
        status_message=status_message,
        document_ids=list(document_ids),
        created_at=now,
        updated_at=now,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def get_job(db: Session, job_id: str) -> ProcessingJob | None:
    return db.query(ProcessingJob).filter(ProcessingJob.id == job_id).first()


def get_active_jobs(db: Session) -> list[ProcessingJob]:
    return (
        db.query(ProcessingJob)
        .filter(ProcessingJob.status.in_(ACTIVE_STATUSES))
        .order_by(ProcessingJob.created_at.desc())
        .all()
    )


def _load_open_job(db: Session, job_id: str) -> ProcessingJob | None:
    job = get_job(db, job_id)
    if job is None:
        logger.warning("Processing job %s not found", job_id)
        return None
    if job.status in TERMINAL_STATUSES:
        logger.warning("Ignoring update to %s job %s", job.status, job_id)
        return None
    return job


def advance(db: Session, job_id: str, progress: int, status_message: str):
    job = _load_open_job(db, job_id)
    if job is None:
        return
    job.status = "processing"
    job.progress = max(job.progress or 0, min(progress, 100))
    job.status_message = status_message
    job.updated_at = utc_now()
    db.commit()


def complete(db: Session, job_id: str, status_message: str, result: Any):
    job = _load_open_job(db, job_id)
    if job is None:
        return
    job.status = "completed"
    job.progress = 100
    job.status_message = status_message
    job.result = result
    job.updated_at = utc_now()
    db.commit()


def fail(db: Session, job_id: str, status_message: str, error: str):
    """Terminal error; progress stays at the last checkpoint reached."""
    job = _load_open_job(db, job_id)
    if job is None:
        return
    job.status = "error"
    job.status_message = status_message
    job.error = error
    job.updated_at = utc_now()
    db.commit()

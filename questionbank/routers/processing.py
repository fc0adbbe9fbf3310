from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session, sessionmaker

from questionbank.database import get_db, get_session_factory
from questionbank.models.processing_job import ProcessingJob
from questionbank.schemas.processing_job import (
    JobStartedResponse,
    ProcessingJobEnvelope,
    ProcessingJobListResponse,
    ProcessingJobResponse,
    SubjectRequest,
)
from questionbank.services import job_tracker, storage
from questionbank.services.pipeline import analyze_syllabus, categorize_past_papers

router = APIRouter(tags=["processing"])


def _job_to_response(job: ProcessingJob) -> ProcessingJobResponse:
    return ProcessingJobResponse(
        id=job.id,
        type=job.type,
        status=job.status,
        progress=job.progress,
        status_message=job.status_message,
        document_ids=job.document_ids or [],
        result=job.result,
        error=job.error,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


@router.post("/process-syllabus", response_model=JobStartedResponse)
async def process_syllabus(
    req: SubjectRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    if not req.subject:
        raise HTTPException(status_code=400, detail="Subject is required")

    documents = storage.get_documents_for_subject(db, "syllabus", req.subject)
    if not documents:
        raise HTTPException(status_code=404, detail="No syllabus documents found for this subject")

    document_ids = [d.id for d in documents]
    job = job_tracker.create_job(
        db, "syllabus_analysis", document_ids, "Extracting topics from syllabus..."
    )
    background_tasks.add_task(analyze_syllabus, session_factory, job.id, document_ids, req.subject)
    return JobStartedResponse(job_id=job.id, message="Syllabus processing started")


@router.post("/process-pastpapers", response_model=JobStartedResponse)
async def process_pastpapers(
    req: SubjectRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    if not req.subject:
        raise HTTPException(status_code=400, detail="Subject is required")

    documents = storage.get_documents_for_subject(db, "pastpaper", req.subject)
    if not documents:
        raise HTTPException(status_code=404, detail="No past paper documents found for this subject")

    if not storage.get_topics_by_subject(db, req.subject):
        raise HTTPException(
            status_code=400,
            detail="No topics found. Please process syllabus first to extract topics.",
        )

    document_ids = [d.id for d in documents]
    job = job_tracker.create_job(
        db, "question_extraction", document_ids, "Categorizing questions from past papers..."
    )
    background_tasks.add_task(categorize_past_papers, session_factory, job.id, document_ids, req.subject)
    return JobStartedResponse(job_id=job.id, message="Past paper processing started")


@router.get("/processing-job/{job_id}", response_model=ProcessingJobEnvelope)
async def get_processing_job(job_id: str, db: Session = Depends(get_db)):
    job = job_tracker.get_job(db, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return ProcessingJobEnvelope(job=_job_to_response(job))


@router.get("/processing-jobs", response_model=ProcessingJobListResponse)
async def list_active_jobs(db: Session = Depends(get_db)):
    jobs = job_tracker.get_active_jobs(db)
    return ProcessingJobListResponse(jobs=[_job_to_response(j) for j in jobs])

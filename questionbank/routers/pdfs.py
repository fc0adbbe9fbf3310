from pathlib import Path

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session, sessionmaker

from questionbank.config import settings
from questionbank.database import get_db, get_session_factory
from questionbank.models.generated_pdf import GeneratedPdf
from questionbank.schemas.generated_pdf import (
    GeneratedPdfListResponse,
    GeneratedPdfResponse,
    GeneratePdfRequest,
)
from questionbank.schemas.processing_job import JobStartedResponse
from questionbank.services import job_tracker, storage
from questionbank.services.pipeline import assemble_output

router = APIRouter(tags=["pdfs"])


def _pdf_to_response(pdf: GeneratedPdf) -> GeneratedPdfResponse:
    return GeneratedPdfResponse(
        id=pdf.id,
        filename=pdf.filename,
        topic_id=pdf.topic_id,
        subject=pdf.subject,
        main_topic=pdf.main_topic,
        subtopic=pdf.subtopic,
        question_count=pdf.question_count,
        diagram_count=pdf.diagram_count,
        file_size=pdf.file_size,
        file_path=pdf.file_path,
        configuration=pdf.configuration,
        created_at=pdf.created_at,
    )


@router.post("/generate-pdf", response_model=JobStartedResponse)
async def generate_pdf(
    req: GeneratePdfRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    if not req.topic_id:
        raise HTTPException(status_code=400, detail="Topic ID is required")

    topic = storage.get_topic(db, req.topic_id)
    if not topic:
        raise HTTPException(status_code=404, detail="Topic not found")

    if not storage.get_questions_by_topic(db, req.topic_id):
        raise HTTPException(status_code=400, detail="No questions found for this topic")

    job = job_tracker.create_job(db, "pdf_generation", [req.topic_id], "Starting PDF generation...")
    background_tasks.add_task(assemble_output, session_factory, job.id, req.topic_id, req.config)
    return JobStartedResponse(job_id=job.id, message="PDF generation started")


@router.get("/generated-pdfs", response_model=GeneratedPdfListResponse)
async def list_generated_pdfs(db: Session = Depends(get_db)):
    pdfs = storage.get_recent_generated_pdfs(db, settings.recent_pdf_limit)
    return GeneratedPdfListResponse(pdfs=[_pdf_to_response(p) for p in pdfs])


@router.get("/download-pdf/{pdf_id}")
async def download_pdf(pdf_id: str, db: Session = Depends(get_db)):
    generated = storage.get_generated_pdf(db, pdf_id)
    if not generated:
        raise HTTPException(status_code=404, detail="PDF not found")

    path = Path(generated.file_path)
    if not path.exists():
        raise HTTPException(status_code=404, detail="PDF file missing from storage")

    return FileResponse(
        path=str(path),
        filename=generated.filename,
        media_type="application/pdf",
        content_disposition_type="attachment",
    )

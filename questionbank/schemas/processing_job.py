from typing import Any

from questionbank.schemas.base import CamelModel


class SubjectRequest(CamelModel):
    subject: str | None = None


class JobStartedResponse(CamelModel):
    job_id: str
    message: str


class ProcessingJobResponse(CamelModel):
    id: str
    type: str
    status: str
    progress: int
    status_message: str | None
    document_ids: list[str]
    result: Any = None
    error: str | None
    created_at: str
    updated_at: str


class ProcessingJobEnvelope(CamelModel):
    job: ProcessingJobResponse


class ProcessingJobListResponse(CamelModel):
    jobs: list[ProcessingJobResponse]

from typing import Any, Literal

from questionbank.schemas.base import CamelModel


class PdfGenerationConfig(CamelModel):
    include_question_text: bool = True
    include_vector_diagrams: bool = True
    include_answer_schemes: bool = True
    include_source_info: bool = True
    # Unknown sort keys are accepted and leave the question order unchanged.
    sort_by: str = "difficulty"
    layout: Literal["standard", "compact"] = "standard"


class GeneratePdfRequest(CamelModel):
    topic_id: str | None = None
    config: PdfGenerationConfig = PdfGenerationConfig()


class GeneratedPdfResponse(CamelModel):
    id: str
    filename: str
    topic_id: str | None
    subject: str
    main_topic: str
    subtopic: str | None
    question_count: int
    diagram_count: int
    file_size: str
    file_path: str
    configuration: dict[str, Any] | None
    created_at: str


class GeneratedPdfListResponse(CamelModel):
    pdfs: list[GeneratedPdfResponse]

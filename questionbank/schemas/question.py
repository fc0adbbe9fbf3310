from typing import Any

from questionbank.schemas.base import CamelModel


class QuestionResponse(CamelModel):
    id: str
    document_id: str | None
    topic_id: str | None
    question_text: str
    question_number: str | None
    paper_year: str | None
    paper_session: str | None
    has_vector_diagram: bool
    diagram_data: Any = None
    difficulty: str | None
    marks: int | None
    created_at: str


class QuestionListResponse(CamelModel):
    questions: list[QuestionResponse]

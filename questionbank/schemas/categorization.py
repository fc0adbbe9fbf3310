from pydantic import ConfigDict, Field, field_validator

from questionbank.schemas.base import CamelModel


class ExtractedTopic(CamelModel):
    main_topic: str
    subtopics: list[str] = Field(default_factory=list)
    description: str = ""

    @field_validator("subtopics", mode="before")
    @classmethod
    def _null_subtopics(cls, v):
        return [] if v is None else v

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, v):
        return "" if v is None else v


class ExtractedQuestion(CamelModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    question_text: str
    question_number: str | None = None
    topic_match: str
    subtopic_match: str | None = None
    difficulty: str = "medium"
    marks: int | None = None
    has_vector_diagram: bool = False

    # the model sends null for fields it could not judge
    @field_validator("difficulty", mode="before")
    @classmethod
    def _null_difficulty(cls, v):
        return "medium" if v is None else v

    @field_validator("has_vector_diagram", mode="before")
    @classmethod
    def _null_diagram_flag(cls, v):
        return False if v is None else v

from questionbank.schemas.base import CamelModel


class TopicResponse(CamelModel):
    id: str
    document_id: str | None
    subject: str
    main_topic: str
    subtopic: str | None
    description: str | None
    created_at: str


class TopicListResponse(CamelModel):
    topics: list[TopicResponse]

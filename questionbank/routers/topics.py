from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from questionbank.database import get_db
from questionbank.models.question import Question
from questionbank.models.topic import Topic
from questionbank.schemas.question import QuestionListResponse, QuestionResponse
from questionbank.schemas.topic import TopicListResponse, TopicResponse
from questionbank.services import storage

router = APIRouter(tags=["topics"])


def _topic_to_response(topic: Topic) -> TopicResponse:
    return TopicResponse(
        id=topic.id,
        document_id=topic.document_id,
        subject=topic.subject,
        main_topic=topic.main_topic,
        subtopic=topic.subtopic,
        description=topic.description,
        created_at=topic.created_at,
    )


def _question_to_response(q: Question) -> QuestionResponse:
    return QuestionResponse(
        id=q.id,
        document_id=q.document_id,
        topic_id=q.topic_id,
        question_text=q.question_text,
        question_number=q.question_number,
        paper_year=q.paper_year,
        paper_session=q.paper_session,
        has_vector_diagram=bool(q.has_vector_diagram),
        diagram_data=q.diagram_data,
        difficulty=q.difficulty,
        marks=q.marks,
        created_at=q.created_at,
    )


@router.get("/topics/{subject}", response_model=TopicListResponse)
async def list_topics(subject: str, db: Session = Depends(get_db)):
    topics = storage.get_topics_by_subject(db, subject)
    return TopicListResponse(topics=[_topic_to_response(t) for t in topics])


@router.get("/questions/topic/{topic_id}", response_model=QuestionListResponse)
async def list_questions_for_topic(topic_id: str, db: Session = Depends(get_db)):
    questions = storage.get_questions_by_topic(db, topic_id)
    return QuestionListResponse(questions=[_question_to_response(q) for q in questions])

"""Persistence helpers shared by the routers and the background procedures."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import literal_column, or_
from sqlalchemy.orm import Session

from questionbank.models.document import Document
from questionbank.models.generated_pdf import GeneratedPdf
from questionbank.models.question import Question
from questionbank.models.topic import Topic
from questionbank.schemas.categorization import ExtractedTopic


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# --- Documents ---

def create_document(
    db: Session,
    filename: str,
    doc_type: str,
    subject: str | None,
    metadata: dict,
) -> Document:
    doc = Document(
        id=str(uuid.uuid4()),
        filename=filename,
        type=doc_type,
        subject=subject,
        doc_metadata=metadata,
        processing_status="pending",
        created_at=utc_now(),
    )
    db.add(doc)
    db.commit()
    db.refresh(doc)
    return doc


def get_document(db: Session, document_id: str) -> Document | None:
    return db.query(Document).filter(Document.id == document_id).first()


def get_documents_by_type(db: Session, doc_type: str) -> list[Document]:
    return (
        db.query(Document)
        .filter(Document.type == doc_type)
        .order_by(Document.created_at, literal_column("documents.rowid"))
        .all()
    )


def get_documents_for_subject(db: Session, doc_type: str, subject: str) -> list[Document]:
    """Documents of a type for a subject, including those uploaded without one."""
    return (
        db.query(Document)
        .filter(Document.type == doc_type)
        .filter(or_(Document.subject == subject, Document.subject.is_(None)))
        .order_by(Document.created_at, literal_column("documents.rowid"))
        .all()
    )


def update_document_status(db: Session, document_id: str, status: str):
    doc = get_document(db, document_id)
    if doc:
        doc.processing_status = status
        db.commit()


def update_document_content(db: Session, document_id: str, content: str):
    doc = get_document(db, document_id)
    if doc:
        doc.content = content
        db.commit()


# --- Topics ---

def create_topic(
    db: Session,
    document_id: str | None,
    subject: str,
    main_topic: str,
    subtopic: str | None,
    description: str | None,
) -> Topic:
    topic = Topic(
        id=str(uuid.uuid4()),
        document_id=document_id,
        subject=subject,
        main_topic=main_topic,
        subtopic=subtopic,
        description=description,
        created_at=utc_now(),
    )
    db.add(topic)
    db.commit()
    return topic


def get_topic(db: Session, topic_id: str) -> Topic | None:
    return db.query(Topic).filter(Topic.id == topic_id).first()


def get_topics_by_subject(db: Session, subject: str) -> list[Topic]:
    # rowid keeps insertion order when several rows share a timestamp
    return (
        db.query(Topic)
        .filter(Topic.subject == subject)
        .order_by(Topic.created_at, literal_column("topics.rowid"))
        .all()
    )


def flatten_taxonomy(topics: list[Topic]) -> list[ExtractedTopic]:
    """One entry per main-topic row, carrying the subtopics that share its name."""
    flattened = []
    for topic in topics:
        if topic.subtopic is not None:
            continue
        subtopics = [
            t.subtopic for t in topics
            if t.main_topic == topic.main_topic and t.subtopic
        ]
        flattened.append(ExtractedTopic(
            main_topic=topic.main_topic,
            subtopics=subtopics,
            description=topic.description or "",
        ))
    return flattened


def match_topic(topics: list[Topic], topic_match: str, subtopic_match: str | None) -> Topic | None:
    """Exact-string match; without a subtopic only the main-topic row qualifies."""
    for topic in topics:
        if topic.main_topic == topic_match and topic.subtopic == (subtopic_match or None):
            return topic
    return None


# --- Questions ---

def create_question(db: Session, **fields) -> Question:
    question = Question(id=str(uuid.uuid4()), created_at=utc_now(), **fields)
    db.add(question)
    db.commit()
    return question


def get_questions_by_topic(db: Session, topic_id: str) -> list[Question]:
    return (
        db.query(Question)
        .filter(Question.topic_id == topic_id)
        .order_by(Question.created_at, literal_column("questions.rowid"))
        .all()
    )


# --- Generated PDFs ---

def create_generated_pdf(db: Session, **fields) -> GeneratedPdf:
    pdf = GeneratedPdf(id=str(uuid.uuid4()), created_at=utc_now(), **fields)
    db.add(pdf)
    db.commit()
    db.refresh(pdf)
    return pdf


def get_generated_pdf(db: Session, pdf_id: str) -> GeneratedPdf | None:
    return db.query(GeneratedPdf).filter(GeneratedPdf.id == pdf_id).first()


def get_recent_generated_pdfs(db: Session, limit: int = 10) -> list[GeneratedPdf]:
    return db.query(GeneratedPdf).order_by(GeneratedPdf.created_at.desc()).limit(limit).all()

"""
Background procedures behind the upload and processing endpoints.

Each procedure opens its own session from the factory it is given, runs to
completion or failure, and reports only through the document or job record.
There are no retries and nothing inserted before a failure is rolled back.
"""
import logging
from pathlib import Path

from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from questionbank.config import settings
from questionbank.models.document import Document
from questionbank.models.topic import Topic
from questionbank.schemas.categorization import ExtractedQuestion, ExtractedTopic
from questionbank.schemas.generated_pdf import PdfGenerationConfig
from questionbank.services import job_tracker, storage
from questionbank.services.categorization_service import categorization_service
from questionbank.services.content_extractor import extract_content, is_extraction_placeholder
from questionbank.services.document_service import remove_upload
from questionbank.services.pdf_service import generate_topic_pdf, organize_questions
from questionbank.utils.paper_metadata import session_from_filename, year_from_filename

logger = logging.getLogger(__name__)


def _save_topics(
    db: Session,
    document_id: str | None,
    subject: str,
    extracted: list[ExtractedTopic],
    subtopic_description: str,
) -> tuple[int, int]:
    topic_count = 0
    subtopic_count = 0
    for topic in extracted:
        storage.create_topic(
            db,
            document_id=document_id,
            subject=subject,
            main_topic=topic.main_topic,
            subtopic=None,
            description=topic.description,
        )
        topic_count += 1
        for subtopic in topic.subtopics:
            storage.create_topic(
                db,
                document_id=document_id,
                subject=subject,
                main_topic=topic.main_topic,
                subtopic=subtopic,
                description=subtopic_description.format(subtopic),
            )
            subtopic_count += 1
    return topic_count, subtopic_count


def _save_questions(
    db: Session,
    document: Document,
    available_topics: list[Topic],
    extracted: list[ExtractedQuestion],
) -> int:
    paper_year = year_from_filename(document.filename)
    paper_session = session_from_filename(document.filename)
    saved = 0
    for question in extracted:
        topic = storage.match_topic(available_topics, question.topic_match, question.subtopic_match)
        if topic is None:
            logger.debug(
                "No topic matches %r / %r; dropping question %s",
                question.topic_match, question.subtopic_match, question.question_number,
            )
            continue
        storage.create_question(
            db,
            document_id=document.id,
            topic_id=topic.id,
            question_text=question.question_text,
            question_number=question.question_number,
            paper_year=paper_year,
            paper_session=paper_session,
            has_vector_diagram=question.has_vector_diagram,
            difficulty=question.difficulty,
            marks=question.marks or 1,
        )
        saved += 1
    return saved


def _load_documents(db: Session, document_ids: list[str]) -> list[Document]:
    documents = []
    for document_id in document_ids:
        doc = storage.get_document(db, document_id)
        if doc is not None:
            documents.append(doc)
    return documents


async def ingest_document(session_factory: sessionmaker, document_id: str, file_path: str):
    """Extract an uploaded document and derive topics or questions from it."""
    db = session_factory()
    try:
        storage.update_document_status(db, document_id, "processing")
        document = storage.get_document(db, document_id)
        if document is None:
            logger.warning("Document %s vanished before ingestion", document_id)
            return

        extracted = await run_in_threadpool(extract_content, file_path)
        storage.update_document_content(db, document_id, extracted.text)
        subject = document.subject or "general"

        if is_extraction_placeholder(extracted.text):
            logger.info("No usable text in %s; skipping AI analysis", document.filename)
        elif document.type == "syllabus":
            logger.info("AI analyzing syllabus %s for %s topics", document.filename, subject)
            topics = await categorization_service.extract_topics(extracted.text, subject)
            topic_count, subtopic_count = _save_topics(
                db, document_id, subject, topics, "Subtopic covering {}"
            )
            logger.info("Stored %d main topics with %d subtopics", topic_count, subtopic_count)
        elif document.type == "pastpaper":
            available_topics = storage.get_topics_by_subject(db, subject)
            questions = await categorization_service.categorize_questions(
                extracted.text, storage.flatten_taxonomy(available_topics), subject
            )
            saved = _save_questions(db, document, available_topics, questions)
            logger.info("Stored %d of %d questions from %s", saved, len(questions), document.filename)

        storage.update_document_status(db, document_id, "completed")
        remove_upload(file_path)
    except Exception:
        logger.exception("Document processing error for %s", document_id)
        db.rollback()
        storage.update_document_status(db, document_id, "error")
    finally:
        db.close()


async def analyze_syllabus(
    session_factory: sessionmaker,
    job_id: str,
    document_ids: list[str],
    subject: str,
):
    db = session_factory()
    try:
        job_tracker.advance(db, job_id, 10, "Reading syllabus documents...")

        documents = _load_documents(db, document_ids)
        parts = []
        for doc in documents:
            if doc.content:
                parts.append(doc.content)
                continue
            original_path = (doc.doc_metadata or {}).get("originalPath") or ""
            extracted = await run_in_threadpool(extract_content, original_path)
            storage.update_document_content(db, doc.id, extracted.text)
            parts.append(extracted.text)
        combined_content = "\n\n".join(parts)

        job_tracker.advance(db, job_id, 30, "Analyzing syllabus content with AI...")
        extracted_topics = await categorization_service.extract_topics(combined_content, subject)

        job_tracker.advance(db, job_id, 60, "Saving topics and subtopics...")
        # every topic row is attributed to the first syllabus document
        source_id = documents[0].id if documents else None
        topic_count, subtopic_count = _save_topics(
            db, source_id, subject, extracted_topics, "Subtopic: {}"
        )

        job_tracker.complete(
            db,
            job_id,
            f"Successfully extracted {topic_count} topics and {subtopic_count} subtopics",
            {
                "topicCount": topic_count,
                "subtopicCount": subtopic_count,
                "topics": [t.model_dump(by_alias=True) for t in extracted_topics],
            },
        )
        logger.info("Syllabus analysis %s finished: %d topics", job_id, topic_count)
    except Exception as exc:
        logger.exception("Syllabus analysis %s failed", job_id)
        db.rollback()
        job_tracker.fail(db, job_id, "Failed to process syllabus", str(exc))
    finally:
        db.close()


async def categorize_past_papers(
    session_factory: sessionmaker,
    job_id: str,
    document_ids: list[str],
    subject: str,
):
    db = session_factory()
    try:
        job_tracker.advance(db, job_id, 10, "Loading available topics...")
        available_topics = storage.get_topics_by_subject(db, subject)
        taxonomy = storage.flatten_taxonomy(available_topics)

        documents = _load_documents(db, document_ids)
        total = len(documents)
        job_tracker.advance(db, job_id, 20, f"Processing {total} past paper documents...")

        processed = 0
        total_questions = 0
        for doc in documents:
            try:
                job_tracker.advance(
                    db, job_id, 20 + (60 * processed) // total, f"Analyzing {doc.filename}..."
                )
                if not doc.content or is_extraction_placeholder(doc.content):
                    logger.info("Skipping %s - no extracted text", doc.filename)
                    processed += 1
                    continue

                questions = await categorization_service.categorize_questions(
                    doc.content, taxonomy, subject
                )
                total_questions += _save_questions(db, doc, available_topics, questions)
                processed += 1
            except Exception:
                logger.exception("Error processing %s", doc.filename)
                db.rollback()

        job_tracker.complete(
            db,
            job_id,
            f"Successfully categorized {total_questions} questions from {processed} documents",
            {"documentsProcessed": processed, "questionsExtracted": total_questions},
        )
    except Exception as exc:
        logger.exception("Past paper processing %s failed", job_id)
        db.rollback()
        job_tracker.fail(db, job_id, "Failed to process past papers", str(exc))
    finally:
        db.close()


async def assemble_output(
    session_factory: sessionmaker,
    job_id: str,
    topic_id: str,
    config: PdfGenerationConfig,
    output_dir: Path | None = None,
):
    db = session_factory()
    try:
        job_tracker.advance(db, job_id, 25, "Organizing questions...")
        topic = storage.get_topic(db, topic_id)
        if topic is None:
            raise LookupError(f"Topic {topic_id} not found")
        questions = organize_questions(storage.get_questions_by_topic(db, topic_id), config)

        job_tracker.advance(db, job_id, 50, "Extracting diagrams...")
        result = generate_topic_pdf(topic, questions, config, output_dir or settings.generated_dir)

        job_tracker.advance(db, job_id, 75, "Finalizing PDF...")
        generated = storage.create_generated_pdf(
            db,
            filename=result["filename"],
            topic_id=topic.id,
            subject=topic.subject,
            main_topic=topic.main_topic,
            subtopic=topic.subtopic,
            question_count=result["questionCount"],
            diagram_count=result["diagramCount"],
            file_size=result["fileSize"],
            file_path=result["filePath"],
            configuration=config.model_dump(by_alias=True),
        )

        job_tracker.complete(
            db, job_id, "PDF generated successfully", {"pdfId": generated.id, **result}
        )
    except Exception as exc:
        logger.exception("PDF generation %s failed", job_id)
        db.rollback()
        job_tracker.fail(db, job_id, "PDF generation failed", str(exc))
    finally:
        db.close()

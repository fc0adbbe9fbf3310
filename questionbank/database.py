import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from questionbank.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker:
    """Session factory for background procedures, which outlive the request session."""
    return SessionLocal


SCHEMA_SQL = """\
-- ============================================================
-- DOCUMENTS
-- ============================================================
CREATE TABLE IF NOT EXISTS documents (
    id                TEXT PRIMARY KEY,
    filename          TEXT NOT NULL,
    type              TEXT NOT NULL
                      CHECK(type IN ('syllabus','pastpaper','markingscheme')),
    subject           TEXT,
    content           TEXT,
    metadata          TEXT,
    processing_status TEXT NOT NULL DEFAULT 'pending'
                      CHECK(processing_status IN ('pending','processing','completed','error')),
    created_at        TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_documents_type ON documents(type);
CREATE INDEX IF NOT EXISTS idx_documents_subject ON documents(subject);

-- ============================================================
-- TOPICS
-- (subject, main_topic, subtopic) is not unique; re-analysis appends rows
-- ============================================================
CREATE TABLE IF NOT EXISTS topics (
    id          TEXT PRIMARY KEY,
    document_id TEXT REFERENCES documents(id),
    subject     TEXT NOT NULL,
    main_topic  TEXT NOT NULL,
    subtopic    TEXT,
    description TEXT,
    created_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_topics_subject ON topics(subject);
CREATE INDEX IF NOT EXISTS idx_topics_document ON topics(document_id);

-- ============================================================
-- QUESTIONS
-- ============================================================
CREATE TABLE IF NOT EXISTS questions (
    id                 TEXT PRIMARY KEY,
    document_id        TEXT REFERENCES documents(id),
    topic_id           TEXT REFERENCES topics(id),
    question_text      TEXT NOT NULL,
    question_number    TEXT,
    paper_year         TEXT,
    paper_session      TEXT,
    has_vector_diagram INTEGER NOT NULL DEFAULT 0,
    diagram_data       TEXT,
    difficulty         TEXT,
    marks              INTEGER,
    created_at         TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_questions_topic ON questions(topic_id);
CREATE INDEX IF NOT EXISTS idx_questions_document ON questions(document_id);

-- ============================================================
-- GENERATED PDFS
-- ============================================================
CREATE TABLE IF NOT EXISTS generated_pdfs (
    id             TEXT PRIMARY KEY,
    filename       TEXT NOT NULL,
    topic_id       TEXT REFERENCES topics(id),
    subject        TEXT NOT NULL,
    main_topic     TEXT NOT NULL,
    subtopic       TEXT,
    question_count INTEGER NOT NULL,
    diagram_count  INTEGER NOT NULL,
    file_size      TEXT NOT NULL,
    file_path      TEXT NOT NULL,
    configuration  TEXT,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_generated_pdfs_created ON generated_pdfs(created_at);

-- ============================================================
-- PROCESSING JOBS
-- ============================================================
CREATE TABLE IF NOT EXISTS processing_jobs (
    id             TEXT PRIMARY KEY,
    type           TEXT NOT NULL
                   CHECK(type IN ('syllabus_analysis','question_extraction','pdf_generation')),
    status         TEXT NOT NULL DEFAULT 'pending'
                   CHECK(status IN ('pending','processing','completed','error')),
    progress       INTEGER NOT NULL DEFAULT 0,
    status_message TEXT,
    document_ids   TEXT,
    result         TEXT,
    error          TEXT,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_processing_jobs_status ON processing_jobs(status);
"""


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.close()

import pytest
from fastapi.testclient import TestClient
from fpdf import FPDF
from fpdf.enums import XPos, YPos
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from questionbank.config import settings
from questionbank.database import get_db, get_session_factory, init_db
from questionbank.main import app
from questionbank.schemas.categorization import ExtractedQuestion, ExtractedTopic
from questionbank.services.categorization_service import CategorizationError, categorization_service


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class FakeCategorizer:
    """Stands in for the LLM; returns whatever the test configures."""

    def __init__(self):
        self.topics: list[dict] = []
        self.questions: list[dict] = []
        self.topics_error: Exception | None = None
        self.fail_marker: str | None = None
        self.before_question_call = None
        self.topic_calls: list[tuple[str, str]] = []
        self.question_calls: list[tuple[str, list[ExtractedTopic], str]] = []

    async def extract_topics(self, syllabus_content, subject):
        self.topic_calls.append((syllabus_content, subject))
        if self.topics_error:
            raise self.topics_error
        return [ExtractedTopic.model_validate(t) for t in self.topics]

    async def categorize_questions(self, question_content, available_topics, subject):
        if self.before_question_call:
            self.before_question_call()
        self.question_calls.append((question_content, available_topics, subject))
        if self.fail_marker and self.fail_marker in question_content:
            raise CategorizationError("model unavailable")
        return [ExtractedQuestion.model_validate(q) for q in self.questions]


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "QuestionBankData"
    data_path.mkdir()
    (data_path / "uploads").mkdir()
    (data_path / "generated_pdfs").mkdir()
    return data_path


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestSession
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def fake_ai(monkeypatch):
    fake = FakeCategorizer()
    monkeypatch.setattr(categorization_service, "extract_topics", fake.extract_topics)
    monkeypatch.setattr(categorization_service, "categorize_questions", fake.categorize_questions)
    return fake


@pytest.fixture
def client(tmp_data, test_db, fake_ai):
    original_data_path = settings.data_path
    settings.data_path = tmp_data
    c = TestClient(app)
    yield c
    settings.data_path = original_data_path


@pytest.fixture
def make_pdf():
    """Build a small text PDF; each argument becomes a paragraph."""
    def _make(*paragraphs: str) -> bytes:
        pdf = FPDF()
        pdf.add_page()
        pdf.set_font("Helvetica", "", 11)
        for paragraph in paragraphs:
            pdf.multi_cell(0, 6, paragraph, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        return bytes(pdf.output())
    return _make

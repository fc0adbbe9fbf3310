from questionbank.config import settings
from questionbank.services.categorization_service import CategorizationError
from questionbank.services.content_extractor import ERROR_PLACEHOLDER_PREFIX

SYLLABUS_TEXT = (
    "Section 1 Kinematics. Candidates should be able to state what is meant by speed "
    "and velocity and calculate average speed using distance travelled divided by time taken."
)
PAPER_TEXT = (
    "1 A car accelerates uniformly from rest to 20 m/s in 5 seconds. "
    "Calculate the acceleration of the car and the distance travelled. [4]"
)

KINEMATICS = {
    "mainTopic": "Kinematics",
    "subtopics": ["Speed", "Acceleration"],
    "description": "Describing motion",
}


class TestUploadValidation:
    def test_no_files(self, client):
        r = client.post("/api/upload", data={"type": "syllabus"})
        assert r.status_code == 400
        assert r.json()["message"] == "No files uploaded"

    def test_invalid_type(self, client, make_pdf):
        r = client.post(
            "/api/upload",
            files=[("files", ("a.pdf", make_pdf(SYLLABUS_TEXT), "application/pdf"))],
            data={"type": "notes"},
        )
        assert r.status_code == 400
        assert r.json()["message"] == "Invalid document type"

    def test_invalid_subject(self, client, make_pdf):
        r = client.post(
            "/api/upload",
            files=[("files", ("a.pdf", make_pdf(SYLLABUS_TEXT), "application/pdf"))],
            data={"type": "syllabus", "subject": "history"},
        )
        assert r.status_code == 400

    def test_pastpaper_requires_subject(self, client, make_pdf):
        r = client.post(
            "/api/upload",
            files=[("files", ("p.pdf", make_pdf(PAPER_TEXT), "application/pdf"))],
            data={"type": "pastpaper"},
        )
        assert r.status_code == 400
        assert "Subject is required" in r.json()["message"]

    def test_non_pdf_rejected(self, client):
        r = client.post(
            "/api/upload",
            files=[("files", ("notes.txt", b"plain text", "text/plain"))],
            data={"type": "syllabus"},
        )
        assert r.status_code == 400
        assert r.json()["message"] == "Only PDF files are allowed"

    def test_empty_file_rejected(self, client):
        r = client.post(
            "/api/upload",
            files=[("files", ("empty.pdf", b"", "application/pdf"))],
            data={"type": "syllabus"},
        )
        assert r.status_code == 400

    def test_oversized_file_rejected(self, client, make_pdf, monkeypatch, tmp_data):
        monkeypatch.setattr(settings, "max_upload_bytes", 16)
        r = client.post(
            "/api/upload",
            files=[("files", ("big.pdf", make_pdf(SYLLABUS_TEXT), "application/pdf"))],
            data={"type": "syllabus"},
        )
        assert r.status_code == 413
        assert list((tmp_data / "uploads").iterdir()) == []

    def test_too_many_files(self, client, make_pdf, monkeypatch):
        monkeypatch.setattr(settings, "max_files_per_upload", 1)
        content = make_pdf(SYLLABUS_TEXT)
        r = client.post(
            "/api/upload",
            files=[
                ("files", ("a.pdf", content, "application/pdf")),
                ("files", ("b.pdf", content, "application/pdf")),
            ],
            data={"type": "syllabus"},
        )
        assert r.status_code == 400

    def test_rejected_batch_stores_nothing(self, client, make_pdf):
        r = client.post(
            "/api/upload",
            files=[
                ("files", ("good.pdf", make_pdf(SYLLABUS_TEXT), "application/pdf")),
                ("files", ("empty.pdf", b"", "application/pdf")),
            ],
            data={"type": "syllabus"},
        )
        assert r.status_code == 400
        assert client.get("/api/documents/syllabus").json()["documents"] == []


class TestSyllabusIngestion:
    def test_upload_creates_document_and_topics(self, client, make_pdf, fake_ai, tmp_data):
        fake_ai.topics = [KINEMATICS]
        content = make_pdf(SYLLABUS_TEXT)

        r = client.post(
            "/api/upload",
            files=[("files", ("physics_syllabus.pdf", content, "application/pdf"))],
            data={"type": "syllabus", "subject": "physics"},
        )
        assert r.status_code == 200
        uploaded = r.json()["documents"]
        assert len(uploaded) == 1
        assert uploaded[0]["filename"] == "physics_syllabus.pdf"
        assert uploaded[0]["processingStatus"] == "pending"
        metadata = uploaded[0]["metadata"]
        assert metadata["fileSize"] == len(content)
        assert len(metadata["fileHash"]) == 64

        docs = client.get("/api/documents/syllabus").json()["documents"]
        assert docs[0]["processingStatus"] == "completed"
        assert "Kinematics" in docs[0]["content"]

        topics = client.get("/api/topics/physics").json()["topics"]
        assert len(topics) == 3
        assert topics[0]["mainTopic"] == "Kinematics"
        assert topics[0]["subtopic"] is None
        assert topics[0]["description"] == "Describing motion"
        assert [t["subtopic"] for t in topics[1:]] == ["Speed", "Acceleration"]
        assert topics[1]["description"] == "Subtopic covering Speed"
        assert all(t["documentId"] == docs[0]["id"] for t in topics)

        # the stored upload is removed once ingestion succeeds
        assert list((tmp_data / "uploads").iterdir()) == []
        assert fake_ai.topic_calls[0][1] == "physics"

    def test_unreadable_pdf_skips_analysis(self, client, fake_ai):
        fake_ai.topics = [KINEMATICS]
        r = client.post(
            "/api/upload",
            files=[("files", ("broken.pdf", b"definitely not a pdf", "application/pdf"))],
            data={"type": "syllabus", "subject": "physics"},
        )
        assert r.status_code == 200

        doc = client.get("/api/documents/syllabus").json()["documents"][0]
        assert doc["processingStatus"] == "completed"
        assert doc["content"].startswith(ERROR_PLACEHOLDER_PREFIX)
        assert fake_ai.topic_calls == []
        assert client.get("/api/topics/physics").json()["topics"] == []

    def test_analysis_failure_marks_document_error(self, client, make_pdf, fake_ai, tmp_data):
        fake_ai.topics_error = CategorizationError("Failed to extract topics from syllabus: timeout")
        client.post(
            "/api/upload",
            files=[("files", ("syllabus.pdf", make_pdf(SYLLABUS_TEXT), "application/pdf"))],
            data={"type": "syllabus", "subject": "physics"},
        )

        doc = client.get("/api/documents/syllabus").json()["documents"][0]
        assert doc["processingStatus"] == "error"
        # the upload is kept for a later retry
        assert len(list((tmp_data / "uploads").iterdir())) == 1

    def test_syllabus_without_subject(self, client, make_pdf, fake_ai):
        fake_ai.topics = [{"mainTopic": "Measurement"}]
        r = client.post(
            "/api/upload",
            files=[("files", ("syllabus.pdf", make_pdf(SYLLABUS_TEXT), "application/pdf"))],
            data={"type": "syllabus"},
        )
        assert r.status_code == 200
        assert r.json()["documents"][0]["subject"] is None
        assert fake_ai.topic_calls[0][1] == "general"
        assert len(client.get("/api/topics/general").json()["topics"]) == 1


class TestPastPaperIngestion:
    def _upload_syllabus(self, client, make_pdf, fake_ai):
        fake_ai.topics = [KINEMATICS]
        client.post(
            "/api/upload",
            files=[("files", ("syllabus.pdf", make_pdf(SYLLABUS_TEXT), "application/pdf"))],
            data={"type": "syllabus", "subject": "physics"},
        )
        return client.get("/api/topics/physics").json()["topics"]

    def test_questions_attached_to_matching_topic(self, client, make_pdf, fake_ai):
        topics = self._upload_syllabus(client, make_pdf, fake_ai)
        speed = next(t for t in topics if t["subtopic"] == "Speed")
        fake_ai.questions = [
            {
                "questionText": "A car accelerates uniformly from rest.",
                "questionNumber": 1,
                "topicMatch": "Kinematics",
                "subtopicMatch": "Speed",
                "difficulty": "easy",
                "marks": 4,
                "hasVectorDiagram": True,
            },
            {"questionText": "Describe total internal reflection.", "topicMatch": "Optics"},
        ]

        r = client.post(
            "/api/upload",
            files=[("files", ("physics_2019_s_p1.pdf", make_pdf(PAPER_TEXT), "application/pdf"))],
            data={"type": "pastpaper", "subject": "physics"},
        )
        assert r.status_code == 200

        questions = client.get(f"/api/questions/topic/{speed['id']}").json()["questions"]
        assert len(questions) == 1
        q = questions[0]
        assert q["questionNumber"] == "1"
        assert q["paperYear"] == "2019"
        assert q["paperSession"] == "summer"
        assert q["marks"] == 4
        assert q["difficulty"] == "easy"
        assert q["hasVectorDiagram"] is True

        # categorization saw the flattened taxonomy
        _, taxonomy, subject = fake_ai.question_calls[0]
        assert subject == "physics"
        assert [t.main_topic for t in taxonomy] == ["Kinematics"]
        assert taxonomy[0].subtopics == ["Speed", "Acceleration"]

    def test_missing_marks_default_to_one(self, client, make_pdf, fake_ai):
        topics = self._upload_syllabus(client, make_pdf, fake_ai)
        main = next(t for t in topics if t["subtopic"] is None)
        fake_ai.questions = [{"questionText": "Define velocity.", "topicMatch": "Kinematics"}]

        client.post(
            "/api/upload",
            files=[("files", ("paper.pdf", make_pdf(PAPER_TEXT), "application/pdf"))],
            data={"type": "pastpaper", "subject": "physics"},
        )

        questions = client.get(f"/api/questions/topic/{main['id']}").json()["questions"]
        assert len(questions) == 1
        assert questions[0]["marks"] == 1
        assert questions[0]["paperYear"] is None
        assert questions[0]["paperSession"] is None

    def test_marking_scheme_is_only_extracted(self, client, make_pdf, fake_ai):
        r = client.post(
            "/api/upload",
            files=[("files", ("ms_2019.pdf", make_pdf(PAPER_TEXT), "application/pdf"))],
            data={"type": "markingscheme", "subject": "physics"},
        )
        assert r.status_code == 200

        doc = client.get("/api/documents/markingscheme").json()["documents"][0]
        assert doc["processingStatus"] == "completed"
        assert doc["content"]
        assert fake_ai.topic_calls == []
        assert fake_ai.question_calls == []


class TestListDocuments:
    def test_invalid_type(self, client):
        r = client.get("/api/documents/notes")
        assert r.status_code == 400

    def test_filters_by_type(self, client, make_pdf):
        client.post(
            "/api/upload",
            files=[("files", ("s.pdf", make_pdf(SYLLABUS_TEXT), "application/pdf"))],
            data={"type": "syllabus", "subject": "physics"},
        )
        client.post(
            "/api/upload",
            files=[("files", ("p.pdf", make_pdf(PAPER_TEXT), "application/pdf"))],
            data={"type": "pastpaper", "subject": "physics"},
        )

        syllabi = client.get("/api/documents/syllabus").json()["documents"]
        papers = client.get("/api/documents/pastpaper").json()["documents"]
        assert [d["filename"] for d in syllabi] == ["s.pdf"]
        assert [d["filename"] for d in papers] == ["p.pdf"]
        assert client.get("/api/documents/markingscheme").json()["documents"] == []

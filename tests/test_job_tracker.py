import pytest

from questionbank.services import job_tracker


@pytest.fixture
def db(test_db):
    session = test_db()
    yield session
    session.close()


class TestJobLifecycle:
    def test_create_job_starts_pending(self, db):
        job = job_tracker.create_job(db, "syllabus_analysis", ["d1", "d2"], "Extracting topics...")
        assert job.status == "pending"
        assert job.progress == 0
        assert job.document_ids == ["d1", "d2"]
        assert job.result is None
        assert job.error is None

    def test_unknown_type_rejected(self, db):
        with pytest.raises(ValueError):
            job_tracker.create_job(db, "reindex", [], "Starting...")

    def test_advance_moves_to_processing(self, db):
        job = job_tracker.create_job(db, "pdf_generation", ["t1"], "Starting PDF generation...")
        job_tracker.advance(db, job.id, 25, "Organizing questions...")

        job = job_tracker.get_job(db, job.id)
        assert job.status == "processing"
        assert job.progress == 25
        assert job.status_message == "Organizing questions..."

    def test_progress_never_decreases(self, db):
        job = job_tracker.create_job(db, "question_extraction", [], "Categorizing...")
        job_tracker.advance(db, job.id, 50, "Halfway")
        job_tracker.advance(db, job.id, 20, "Late update")
        assert job_tracker.get_job(db, job.id).progress == 50

        job_tracker.advance(db, job.id, 250, "Overshoot")
        assert job_tracker.get_job(db, job.id).progress == 100

    def test_complete(self, db):
        job = job_tracker.create_job(db, "question_extraction", [], "Categorizing...")
        job_tracker.advance(db, job.id, 40, "Analyzing...")
        job_tracker.complete(db, job.id, "Done", {"documentsProcessed": 1, "questionsExtracted": 4})

        job = job_tracker.get_job(db, job.id)
        assert job.status == "completed"
        assert job.progress == 100
        assert job.result == {"documentsProcessed": 1, "questionsExtracted": 4}

    def test_fail_keeps_progress(self, db):
        job = job_tracker.create_job(db, "syllabus_analysis", [], "Extracting...")
        job_tracker.advance(db, job.id, 60, "Saving topics...")
        job_tracker.fail(db, job.id, "Failed to process syllabus", "disk full")

        job = job_tracker.get_job(db, job.id)
        assert job.status == "error"
        assert job.progress == 60
        assert job.error == "disk full"

    def test_terminal_jobs_ignore_updates(self, db):
        job = job_tracker.create_job(db, "syllabus_analysis", [], "Extracting...")
        job_tracker.fail(db, job.id, "Failed to process syllabus", "boom")
        job_tracker.advance(db, job.id, 90, "Should not apply")
        job_tracker.complete(db, job.id, "Should not apply", {"topicCount": 1})

        job = job_tracker.get_job(db, job.id)
        assert job.status == "error"
        assert job.status_message == "Failed to process syllabus"
        assert job.result is None

    def test_updates_to_missing_job_are_ignored(self, db):
        job_tracker.advance(db, "missing", 10, "Nothing")
        job_tracker.fail(db, "missing", "Nothing", "nothing")
        assert job_tracker.get_job(db, "missing") is None


class TestActiveJobs:
    def test_only_pending_and_processing(self, db):
        pending = job_tracker.create_job(db, "pdf_generation", [], "Starting...")
        running = job_tracker.create_job(db, "pdf_generation", [], "Starting...")
        done = job_tracker.create_job(db, "pdf_generation", [], "Starting...")
        failed = job_tracker.create_job(db, "pdf_generation", [], "Starting...")
        job_tracker.advance(db, running.id, 50, "Extracting diagrams...")
        job_tracker.complete(db, done.id, "PDF generated successfully", {})
        job_tracker.fail(db, failed.id, "PDF generation failed", "boom")

        active = {j.id: j.status for j in job_tracker.get_active_jobs(db)}
        assert active == {pending.id: "pending", running.id: "processing"}

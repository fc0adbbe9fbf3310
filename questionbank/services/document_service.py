import uuid
from pathlib import Path

from questionbank.config import settings
from questionbank.utils.filesystem import ensure_data_dirs, sanitize_filename
from questionbank.utils.hashing import sha256_bytes


def store_upload(filename: str, content: bytes) -> tuple[Path, str]:
    """Write an uploaded file for later ingestion. Returns (path, file_hash)."""
    ensure_data_dirs()
    stored_name = f"{uuid.uuid4().hex}_{sanitize_filename(filename)}"
    upload_path = settings.upload_dir / stored_name
    upload_path.write_bytes(content)
    return upload_path, sha256_bytes(content)


def is_pdf_upload(filename: str | None, content_type: str | None) -> bool:
    if content_type in ("application/pdf", "application/x-pdf"):
        return True
    return bool(filename) and filename.lower().endswith(".pdf")


def remove_upload(path: Path | str):
    Path(path).unlink(missing_ok=True)

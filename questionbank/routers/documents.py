from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session, sessionmaker

from questionbank.config import settings
from questionbank.database import get_db, get_session_factory
from questionbank.models.document import Document
from questionbank.schemas.document import DocumentListResponse, DocumentResponse
from questionbank.services import storage
from questionbank.services.document_service import is_pdf_upload, store_upload
from questionbank.services.pipeline import ingest_document

router = APIRouter(tags=["documents"])

VALID_DOC_TYPES = {"syllabus", "pastpaper", "markingscheme"}
VALID_SUBJECTS = {"physics", "chemistry", "biology"}


def _doc_to_response(doc: Document) -> DocumentResponse:
    return DocumentResponse(
        id=doc.id,
        filename=doc.filename,
        type=doc.type,
        subject=doc.subject,
        content=doc.content,
        processing_status=doc.processing_status,
        metadata=doc.doc_metadata,
        created_at=doc.created_at,
    )


async def _read_limited(file: UploadFile) -> bytes:
    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"{file.filename} is too large (max {max_bytes} bytes)",
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/upload", response_model=DocumentListResponse)
async def upload_documents(
    background_tasks: BackgroundTasks,
    files: list[UploadFile] | None = File(None),
    doc_type: str | None = Form(None, alias="type"),
    subject: str | None = Form(None),
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")
    if len(files) > settings.max_files_per_upload:
        raise HTTPException(
            status_code=400,
            detail=f"Too many files (max {settings.max_files_per_upload} per upload)",
        )
    if doc_type not in VALID_DOC_TYPES:
        raise HTTPException(status_code=400, detail="Invalid document type")

    subject = subject or None
    if subject is not None and subject not in VALID_SUBJECTS:
        raise HTTPException(status_code=400, detail=f"Invalid subject. Must be one of: {sorted(VALID_SUBJECTS)}")
    if doc_type in ("pastpaper", "markingscheme") and subject is None:
        raise HTTPException(status_code=400, detail="Subject is required for past papers and marking schemes")

    for file in files:
        if not is_pdf_upload(file.filename, file.content_type):
            raise HTTPException(status_code=400, detail="Only PDF files are allowed")

    # Read everything first so a rejected file leaves no partial upload behind.
    contents = []
    for file in files:
        content = await _read_limited(file)
        if not content:
            raise HTTPException(status_code=400, detail=f"{file.filename} is empty")
        contents.append((file.filename, content))

    uploaded = []
    for filename, content in contents:
        upload_path, file_hash = store_upload(filename, content)
        doc = storage.create_document(
            db,
            filename=filename,
            doc_type=doc_type,
            subject=subject,
            metadata={
                "fileSize": len(content),
                "uploadDate": storage.utc_now(),
                "originalPath": str(upload_path),
                "fileHash": file_hash,
            },
        )
        uploaded.append(_doc_to_response(doc))
        background_tasks.add_task(ingest_document, session_factory, doc.id, str(upload_path))

    return DocumentListResponse(documents=uploaded)


@router.get("/documents/{doc_type}", response_model=DocumentListResponse)
async def list_documents(doc_type: str, db: Session = Depends(get_db)):
    if doc_type not in VALID_DOC_TYPES:
        raise HTTPException(status_code=400, detail="Invalid document type")
    docs = storage.get_documents_by_type(db, doc_type)
    return DocumentListResponse(documents=[_doc_to_response(d) for d in docs])

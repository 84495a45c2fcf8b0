# doc_checker/ingest.py
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import BinaryIO, Optional

from doc_checker import config
from doc_checker.errors import DocumentReadError, UnsupportedFileTypeError, UploadLimitError
from doc_checker.models import DocumentRecord
from doc_checker.storage import SessionState, add_document

logger = logging.getLogger(__name__)


def check_extension(filename: str):
    """Accept by extension only; the content is never inspected."""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in config.ALLOWED_EXTENSIONS:
        allowed = ", ".join(config.ALLOWED_EXTENSIONS)
        raise UnsupportedFileTypeError(f"Unsupported file type '{ext or filename}'. Allowed: {allowed}")


def read_text(data: bytes) -> str:
    """Very simplified reader: assumes UTF-8 text; PDF/DOC bytes come through as-is."""
    return data.decode("utf-8", errors="ignore")


def read_document(filename: str, stream: BinaryIO, content_type: Optional[str] = None) -> DocumentRecord:
    """Read one uploaded file into a DocumentRecord."""
    check_extension(filename)
    try:
        data = stream.read()
    except OSError as e:
        raise DocumentReadError(f"Error reading file {filename}: {e}") from e
    content = read_text(data)
    return DocumentRecord(
        id=f"doc-{uuid.uuid4().hex[:12]}",
        name=filename,
        content=content,
        size=len(data),
        uploaded_at=datetime.now(timezone.utc),
        type=content_type or "",
    )


def admit_document(document: DocumentRecord, max_files: Optional[int] = None):
    """Transition adding `document` unless the session already holds `max_files`."""
    limit = config.MAX_FILES if max_files is None else max_files

    def _admit(state: SessionState) -> SessionState:
        if len(state.documents) >= limit:
            logger.info("Upload of %s rejected: limit of %d reached", document.name, limit)
            raise UploadLimitError(f"Maximum {limit} files allowed")
        return add_document(state, document)

    return _admit

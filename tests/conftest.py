import io
import uuid
from datetime import datetime, timezone

import pytest

from doc_checker.models import DocumentRecord


@pytest.fixture
def make_doc():
    """Factory for DocumentRecord instances built from plain text"""
    def _make(name, content):
        return DocumentRecord(
            id=f"doc-{uuid.uuid4().hex[:12]}",
            name=name,
            content=content,
            size=len(content.encode("utf-8")),
            uploaded_at=datetime.now(timezone.utc),
            type="text/plain",
        )
    return _make


@pytest.fixture
def stream():
    return lambda text: io.BytesIO(text.encode("utf-8"))

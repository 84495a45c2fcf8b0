import io

import pytest

from doc_checker.errors import DocumentReadError, UnsupportedFileTypeError, UploadLimitError
from doc_checker.ingest import admit_document, check_extension, read_document
from doc_checker.storage import SessionState


class BrokenStream:
    def read(self):
        raise OSError("disk went away")


def test_reads_text_and_metadata(stream):
    doc = read_document("rules.md", stream("Attendance is required."), "text/markdown")

    assert doc.name == "rules.md"
    assert doc.content == "Attendance is required."
    assert doc.size == len(b"Attendance is required.")
    assert doc.type == "text/markdown"
    assert doc.id.startswith("doc-")


def test_invalid_utf8_bytes_are_dropped():
    doc = read_document("scan.pdf", io.BytesIO(b"%PDF \xff\xfe 9:00 AM"))

    assert "9:00 AM" in doc.content
    assert doc.size == 15
    assert doc.type == ""


def test_ids_are_unique(stream):
    assert read_document("a.txt", stream("x")).id != read_document("a.txt", stream("x")).id


@pytest.mark.parametrize("name", ["a.txt", "b.PDF", "c.doc", "d.docx", "e.md"])
def test_accepted_extensions(name):
    check_extension(name)


@pytest.mark.parametrize("name", ["malware.exe", "notes", "sheet.xlsx"])
def test_rejected_extensions(name, stream):
    with pytest.raises(UnsupportedFileTypeError):
        read_document(name, stream("x"))


def test_read_failure_is_reported():
    with pytest.raises(DocumentReadError):
        read_document("a.txt", BrokenStream())


def test_admit_respects_limit(make_doc):
    state = SessionState()
    for i in range(3):
        state = admit_document(make_doc(f"{i}.txt", ""), max_files=3)(state)

    with pytest.raises(UploadLimitError, match="Maximum 3 files allowed"):
        admit_document(make_doc("extra.txt", ""), max_files=3)(state)
    assert len(state.documents) == 3

# doc_checker/reports.py
"""
Report export.

The JSON layout is the downloadable artifact; the PDF is a plain listing of
the same findings.
"""
import io
import json
from datetime import datetime, timezone
from typing import Any, Dict

from reportlab.pdfgen import canvas

from doc_checker.models import AnalysisReport

PAGE_TOP = 800
PAGE_BOTTOM = 40
LINE_HEIGHT = 14
WRAP_AT = 95


def _iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_export_dict(report: AnalysisReport) -> Dict[str, Any]:
    return {
        "id": report.id,
        "generatedAt": _iso(report.generated_at),
        "documents": list(report.documents),
        "summary": {
            "totalIssues": report.total_issues,
            "severityBreakdown": {
                "high": report.severity_breakdown.high,
                "medium": report.severity_breakdown.medium,
                "low": report.severity_breakdown.low,
            },
        },
        "contradictions": [
            {
                "type": c.type.value,
                "severity": c.severity.value,
                "documents": list(c.documents),
                "explanation": c.explanation,
                "suggestion": c.suggestion,
                "conflictingStatements": [
                    {"document": s.document, "statement": s.statement, "location": s.location}
                    for s in c.conflicting_statements
                ],
            }
            for c in report.contradictions
        ],
    }


def export_json(report: AnalysisReport) -> str:
    return json.dumps(to_export_dict(report), indent=2, ensure_ascii=False)


def export_filename(report: AnalysisReport) -> str:
    return f"contradiction-report-{report.id}.json"


def load_export(text: str) -> Dict[str, Any]:
    return json.loads(text)


class _PdfWriter:
    """Line-oriented writer that wraps long lines and breaks pages."""

    def __init__(self, c: canvas.Canvas):
        self.c = c
        self.y = PAGE_TOP

    def line(self, text: str):
        for seg in [text[i:i + WRAP_AT] for i in range(0, len(text), WRAP_AT)] or [""]:
            self.c.drawString(30, self.y, seg)
            self.y -= LINE_HEIGHT
            if self.y < PAGE_BOTTOM:
                self.c.showPage()
                self.y = PAGE_TOP


def render_pdf(report: AnalysisReport) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    c.setTitle("Smart Doc Checker - Contradictions Report")
    out = _PdfWriter(c)

    out.line("Smart Doc Checker - Contradictions Report")
    out.line(f"Report {report.id} | generated {_iso(report.generated_at)}")
    out.line(f"Documents: {', '.join(report.documents)}")
    b = report.severity_breakdown
    out.line(f"Issues: {report.total_issues} (high {b.high}, medium {b.medium}, low {b.low})")
    out.line("")

    if not report.contradictions:
        out.line("No contradictions found.")
    for k, cf in enumerate(report.contradictions, start=1):
        out.line(f"{k}. [{cf.severity.value.upper()}] {cf.type.value}: {cf.explanation}")
        for s in cf.conflicting_statements:
            out.line(f"    [{s.document}] {s.statement} ({s.location})")
        out.line(f"    -> {cf.suggestion}")

    c.save()
    return buf.getvalue()

# doc_checker/app.py
import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from doc_checker import config, openmeter
from doc_checker.analyzer import AnalysisOrchestrator
from doc_checker.billing import analysis_cost
from doc_checker.errors import (
    DocumentReadError,
    MonitorBusyError,
    SourceFetchError,
    UnknownSessionError,
    UnknownSourceError,
    UnsupportedFileTypeError,
    UploadLimitError,
)
from doc_checker.ingest import admit_document, read_document
from doc_checker.models import (
    AnalysisReport,
    AnalyzeResponse,
    DocumentsResponse,
    ExternalSource,
    InitResponse,
    ReportSummary,
    UploadResponse,
    UsageResponse,
)
from doc_checker.monitor import SourceMonitor, http_fetcher, start_auto_monitor
from doc_checker.pacing import sleep_delay
from doc_checker.reports import export_filename, export_json, render_pdf
from doc_checker.storage import SessionStore, clear_documents, remove_document

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

RECENT_REPORTS = 5

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------
store = SessionStore()
orchestrator = AnalysisOrchestrator(delay=sleep_delay(config.ANALYSIS_DELAY_SECONDS))
monitor = SourceMonitor(
    delay=sleep_delay(config.MONITOR_CHECK_DELAY_SECONDS),
    pause=sleep_delay(config.MONITOR_PAUSE_SECONDS),
    fetcher=http_fetcher if config.MONITOR_MODE == "http" else None,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    stop = None
    if config.MONITOR_AUTO_INTERVAL > 0:
        stop = start_auto_monitor(monitor, config.MONITOR_AUTO_INTERVAL)
        logger.info("Auto monitor running every %ss", config.MONITOR_AUTO_INTERVAL)
    yield
    if stop is not None:
        stop.set()


# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------
app = FastAPI(title="Smart Doc Checker", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.SITE_URL, "http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(UnknownSessionError)
async def unknown_session(request: Request, exc: UnknownSessionError):
    return JSONResponse({"detail": f"Unknown session: {exc.args[0]}"}, status_code=404)


@app.exception_handler(UnknownSourceError)
async def unknown_source(request: Request, exc: UnknownSourceError):
    return JSONResponse({"detail": f"Unknown source: {exc.args[0]}"}, status_code=404)


@app.exception_handler(MonitorBusyError)
async def monitor_busy(request: Request, exc: MonitorBusyError):
    return JSONResponse({"detail": str(exc)}, status_code=409)


@app.exception_handler(SourceFetchError)
async def source_fetch_failed(request: Request, exc: SourceFetchError):
    return JSONResponse({"detail": str(exc)}, status_code=502)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _report_or_404(user_id: str, report_id: str) -> AnalysisReport:
    report = store.get_state(user_id).find_report(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/init", response_model=InitResponse)
def init(user_id: str = Form(...)):
    """Initialize a user session (idempotent)."""
    state = store.init_user(user_id)
    return InitResponse(
        user_id=user_id,
        usage=state.usage,
        max_files=config.MAX_FILES,
        allowed_extensions=list(config.ALLOWED_EXTENSIONS),
    )


@app.post("/upload", response_model=UploadResponse)
def upload(file: UploadFile, user_id: str = Form(...)):
    """
    Add a document to the session.
    Rejections (limit reached, unsupported type, unreadable file) come back as
    a notice with ok=false; the session is left untouched.
    """
    state = store.get_state(user_id)
    try:
        if len(state.documents) >= config.MAX_FILES:
            raise UploadLimitError(f"Maximum {config.MAX_FILES} files allowed")
        doc = read_document(file.filename, file.file, file.content_type)
        store.update(user_id, admit_document(doc))
    except (UploadLimitError, UnsupportedFileTypeError, DocumentReadError) as e:
        logger.info("Upload rejected for %s: %s", user_id, e)
        return UploadResponse(ok=False, error=str(e))
    logger.info("Uploaded %s (%d bytes) for %s", doc.name, doc.size, user_id)
    return UploadResponse(ok=True, document=doc)


@app.get("/documents", response_model=DocumentsResponse)
def list_documents(user_id: str):
    state = store.get_state(user_id)
    return DocumentsResponse(documents=list(state.documents), max_files=config.MAX_FILES)


@app.delete("/documents/{doc_id}", response_model=DocumentsResponse)
def delete_document(doc_id: str, user_id: str):
    if not any(d.id == doc_id for d in store.get_state(user_id).documents):
        raise HTTPException(status_code=404, detail="Document not found")
    state = store.update(user_id, lambda s: remove_document(s, doc_id))
    return DocumentsResponse(documents=list(state.documents), max_files=config.MAX_FILES)


@app.delete("/documents", response_model=DocumentsResponse)
def clear_all(user_id: str):
    state = store.update(user_id, clear_documents)
    return DocumentsResponse(documents=list(state.documents), max_files=config.MAX_FILES)


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze(user_id: str = Form(...)):
    """
    Run contradiction detection over the session's documents.
    With fewer than two documents nothing happens and `report` is null.
    """
    state, report = await orchestrator.analyze_session(store, user_id)
    if report is not None:
        await openmeter.meter_analysis(user_id, report.id, len(report.documents))
    return AnalyzeResponse(report=report, usage=state.usage)


@app.get("/reports", response_model=List[AnalysisReport])
def list_reports(user_id: str):
    return list(store.get_state(user_id).reports)


@app.get("/reports/{report_id}", response_model=AnalysisReport)
def get_report(report_id: str, user_id: str):
    return _report_or_404(user_id, report_id)


@app.get("/reports/{report_id}/download")
def download_report(report_id: str, user_id: str):
    """Download the report as pretty-printed JSON."""
    report = _report_or_404(user_id, report_id)
    return Response(
        content=export_json(report).encode("utf-8"),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(report)}"'},
    )


@app.get("/reports/{report_id}/pdf")
def download_pdf(report_id: str, user_id: str):
    report = _report_or_404(user_id, report_id)
    return Response(
        content=render_pdf(report),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="report_{report.id}.pdf"'},
    )


@app.get("/usage", response_model=UsageResponse)
def usage(user_id: str):
    state = store.get_state(user_id)
    recent = [
        ReportSummary(
            id=r.id,
            generated_at=r.generated_at,
            document_count=len(r.documents),
            total_issues=r.total_issues,
            cost=analysis_cost(len(r.documents)),
        )
        for r in state.reports[:RECENT_REPORTS]
    ]
    return UsageResponse(
        usage=state.usage,
        document_cost=config.DOCUMENT_COST,
        report_cost=config.REPORT_COST,
        recent_reports=recent,
    )


@app.get("/monitor/sources", response_model=List[ExternalSource])
def list_sources():
    return monitor.list_sources()


@app.post("/monitor/sources/{source_id}/check", response_model=ExternalSource)
async def check_source(source_id: str):
    return await monitor.check_source(source_id)


@app.post("/monitor/check-all", response_model=List[ExternalSource])
async def check_all():
    return await monitor.check_all()

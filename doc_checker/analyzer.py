# doc_checker/analyzer.py
import logging
import time
import uuid
from datetime import datetime, timezone
from functools import partial
from typing import Optional, Sequence, Tuple

from doc_checker.detector import detect_contradictions
from doc_checker.pacing import Delay, no_delay
from doc_checker.models import (
    AnalysisReport,
    Contradiction,
    DocumentRecord,
    Severity,
    SeverityBreakdown,
)
from doc_checker.storage import SessionState, SessionStore, record_analysis

logger = logging.getLogger(__name__)

MIN_DOCUMENTS = 2


def build_report(documents: Sequence[DocumentRecord],
                 contradictions: Sequence[Contradiction]) -> AnalysisReport:
    breakdown = SeverityBreakdown(
        high=sum(1 for c in contradictions if c.severity == Severity.HIGH),
        medium=sum(1 for c in contradictions if c.severity == Severity.MEDIUM),
        low=sum(1 for c in contradictions if c.severity == Severity.LOW),
    )
    return AnalysisReport(
        id=f"report-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}",
        generated_at=datetime.now(timezone.utc),
        documents=[d.name for d in documents],
        contradictions=contradictions,
        total_issues=len(contradictions),
        severity_breakdown=breakdown,
    )


class AnalysisOrchestrator:
    """Wraps the detector with the minimum-document guard, pacing and report assembly."""

    def __init__(self, delay: Delay = no_delay):
        self.delay = delay

    async def run(self, documents: Sequence[DocumentRecord]) -> Optional[AnalysisReport]:
        """Detect contradictions in `documents`; None when there are too few to compare."""
        if len(documents) < MIN_DOCUMENTS:
            logger.info("Analysis refused: %d document(s), need %d", len(documents), MIN_DOCUMENTS)
            return None
        logger.info("Analyzing %d documents", len(documents))
        await self.delay()
        contradictions = detect_contradictions(documents)
        report = build_report(documents, contradictions)
        logger.info("Report %s: %d issues", report.id, report.total_issues)
        return report

    async def analyze(self, state: SessionState) -> Tuple[SessionState, Optional[AnalysisReport]]:
        report = await self.run(state.documents)
        if report is None:
            return state, None
        return record_analysis(state, report), report

    async def analyze_session(self, store: SessionStore,
                              user_id: str) -> Tuple[SessionState, Optional[AnalysisReport]]:
        """
        Analyze the documents `user_id` holds right now and commit the report.

        The commit is applied to whatever the session looks like once the
        delay is over, so concurrent uploads or analyses are not overwritten.
        """
        snapshot = store.get_state(user_id)
        report = await self.run(snapshot.documents)
        if report is None:
            return snapshot, None
        state = store.update(user_id, partial(record_analysis, report=report))
        return state, report

# doc_checker/storage.py
"""
In-memory session store.

Each user owns one immutable SessionState. Mutations are pure transitions
(old state -> new state) applied under a lock, so an analysis that finishes
after another one started still sees the latest documents and usage.
"""
import threading
from typing import Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from doc_checker.billing import charge_analysis
from doc_checker.errors import UnknownSessionError
from doc_checker.models import AnalysisReport, DocumentRecord, UsageStats


class SessionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    documents: Tuple[DocumentRecord, ...] = ()
    reports: Tuple[AnalysisReport, ...] = ()  # most recent first
    usage: UsageStats = UsageStats()

    def find_report(self, report_id: str) -> Optional[AnalysisReport]:
        for report in self.reports:
            if report.id == report_id:
                return report
        return None


Transition = Callable[[SessionState], SessionState]


# -----------------------------------------------------------------------------
# Transitions
# -----------------------------------------------------------------------------
def add_document(state: SessionState, document: DocumentRecord) -> SessionState:
    return state.model_copy(update={"documents": state.documents + (document,)})


def remove_document(state: SessionState, document_id: str) -> SessionState:
    kept = tuple(d for d in state.documents if d.id != document_id)
    return state.model_copy(update={"documents": kept})


def clear_documents(state: SessionState) -> SessionState:
    return state.model_copy(update={"documents": ()})


def record_analysis(state: SessionState, report: AnalysisReport) -> SessionState:
    """Prepend `report` to the history and bill for it."""
    usage = charge_analysis(state.usage, len(report.documents), at=report.generated_at)
    return state.model_copy(update={
        "reports": (report,) + state.reports,
        "usage": usage,
    })


# -----------------------------------------------------------------------------
# Store
# -----------------------------------------------------------------------------
class SessionStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, SessionState] = {}

    def init_user(self, user_id: str) -> SessionState:
        with self._lock:
            return self._sessions.setdefault(user_id, SessionState())

    def get_state(self, user_id: str) -> SessionState:
        with self._lock:
            try:
                return self._sessions[user_id]
            except KeyError:
                raise UnknownSessionError(user_id) from None

    def update(self, user_id: str, transition: Transition) -> SessionState:
        """Apply `transition` to the current state of `user_id` and store the result."""
        with self._lock:
            if user_id not in self._sessions:
                raise UnknownSessionError(user_id)
            new_state = transition(self._sessions[user_id])
            self._sessions[user_id] = new_state
            return new_state

    def reset(self):
        with self._lock:
            self._sessions.clear()

# doc_checker/models.py
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ContradictionType(str, Enum):
    """
    Kinds of finding.

    REQUIREMENT_CONFLICT is part of the report vocabulary but no detector
    pass emits it.
    """
    TIME_CONFLICT = "time_conflict"
    NUMERICAL_CONFLICT = "numerical_conflict"
    POLICY_CONFLICT = "policy_conflict"
    REQUIREMENT_CONFLICT = "requirement_conflict"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class DocumentRecord(_Frozen):
    id: str
    name: str
    content: str
    size: int
    uploaded_at: datetime
    type: str = ""


class ConflictingStatement(_Frozen):
    document: str
    statement: str
    location: str


class Contradiction(_Frozen):
    id: str
    type: ContradictionType
    severity: Severity
    documents: Tuple[str, ...]
    conflicting_statements: Tuple[ConflictingStatement, ...]
    explanation: str
    suggestion: str


class SeverityBreakdown(_Frozen):
    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.high + self.medium + self.low


class AnalysisReport(_Frozen):
    id: str
    generated_at: datetime
    documents: Tuple[str, ...]
    contradictions: Tuple[Contradiction, ...]
    total_issues: int
    severity_breakdown: SeverityBreakdown


class UsageStats(_Frozen):
    documents_analyzed: int = 0
    reports_generated: int = 0
    total_billed: float = 0.0
    last_analysis: Optional[datetime] = None


class ExternalSource(_Frozen):
    id: str
    name: str
    url: str
    last_checked: datetime
    has_updates: bool = False
    content: str = ""


# -----------------------------------------------------------------------------
# Response DTOs
# -----------------------------------------------------------------------------
class InitResponse(BaseModel):
    user_id: str
    usage: UsageStats
    max_files: int
    allowed_extensions: List[str]


class UploadResponse(BaseModel):
    ok: bool
    document: Optional[DocumentRecord] = None
    error: Optional[str] = None


class DocumentsResponse(BaseModel):
    documents: List[DocumentRecord]
    max_files: int


class AnalyzeResponse(BaseModel):
    report: Optional[AnalysisReport] = None
    usage: UsageStats


class ReportSummary(BaseModel):
    id: str
    generated_at: datetime
    document_count: int
    total_issues: int
    cost: float


class UsageResponse(BaseModel):
    usage: UsageStats
    document_cost: float
    report_cost: float
    recent_reports: List[ReportSummary] = Field(default_factory=list)

# doc_checker/billing.py
from datetime import datetime, timezone
from typing import Optional

from doc_checker import config
from doc_checker.models import UsageStats


def analysis_cost(document_count: int, document_cost: Optional[float] = None,
                  report_cost: Optional[float] = None) -> float:
    """Price of one analysis: a per-document rate plus a flat report fee."""
    if document_cost is None:
        document_cost = config.DOCUMENT_COST
    if report_cost is None:
        report_cost = config.REPORT_COST
    return round(document_count * document_cost + report_cost, 2)


def charge_analysis(usage: UsageStats, document_count: int,
                    at: Optional[datetime] = None) -> UsageStats:
    """Return `usage` advanced by one completed analysis of `document_count` documents."""
    return UsageStats(
        documents_analyzed=usage.documents_analyzed + document_count,
        reports_generated=usage.reports_generated + 1,
        total_billed=round(usage.total_billed + analysis_cost(document_count), 2),
        last_analysis=at or datetime.now(timezone.utc),
    )

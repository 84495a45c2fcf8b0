"""
Tests for the analysis orchestrator and usage billing
=====================================================
"""

import asyncio

import pytest

from doc_checker import config
from doc_checker.analyzer import AnalysisOrchestrator, build_report
from doc_checker.billing import analysis_cost, charge_analysis
from doc_checker.models import UsageStats
from doc_checker.pacing import no_delay
from doc_checker.storage import SessionState, SessionStore, add_document


@pytest.fixture
def orchestrator():
    return AnalysisOrchestrator(delay=no_delay)


@pytest.fixture
def conflicting_docs(make_doc):
    return (
        make_doc("rules.txt", "Due at 5 PM. Attendance is required. Pass mark 40%"),
        make_doc("handbook.txt", "Due at noon. Attendance is optional. Pass mark 50%"),
    )


def test_fewer_than_two_documents_is_refused(orchestrator, make_doc):
    state = SessionState(documents=(make_doc("a.txt", "Class at 9:00 AM"),))
    new_state, report = asyncio.run(orchestrator.analyze(state))

    assert report is None
    assert new_state is state
    assert new_state.usage == UsageStats()


def test_report_totals_match_findings(orchestrator, conflicting_docs):
    state, report = asyncio.run(orchestrator.analyze(SessionState(documents=conflicting_docs)))

    assert report.total_issues == len(report.contradictions) == 3
    b = report.severity_breakdown
    assert (b.high, b.medium, b.low) == (2, 1, 0)
    assert b.total == report.total_issues
    assert report.documents == ("rules.txt", "handbook.txt")
    assert state.reports[0] is report


def test_analysis_bills_documents_and_report(orchestrator, conflicting_docs):
    state, _ = asyncio.run(orchestrator.analyze(SessionState(documents=conflicting_docs)))

    assert state.usage.documents_analyzed == 2
    assert state.usage.reports_generated == 1
    assert state.usage.total_billed == pytest.approx(2 * config.DOCUMENT_COST + config.REPORT_COST)
    assert state.usage.last_analysis == state.reports[0].generated_at


def test_history_is_most_recent_first(orchestrator, conflicting_docs):
    state = SessionState(documents=conflicting_docs)
    state, first = asyncio.run(orchestrator.analyze(state))
    state, second = asyncio.run(orchestrator.analyze(state))

    assert [r.id for r in state.reports] == [second.id, first.id]
    assert state.usage.reports_generated == 2
    assert state.usage.total_billed == pytest.approx(2 * analysis_cost(2))


def test_delay_is_awaited_once(conflicting_docs):
    calls = []

    async def counting_delay():
        calls.append(1)

    asyncio.run(AnalysisOrchestrator(delay=counting_delay).run(conflicting_docs))
    assert calls == [1]


def test_session_commit_sees_concurrent_upload(conflicting_docs, make_doc):
    store = SessionStore()
    store.init_user("u1")
    for doc in conflicting_docs:
        store.update("u1", lambda s, d=doc: add_document(s, d))
    late = make_doc("late.txt", "Added while analysis was running")

    async def upload_during_delay():
        store.update("u1", lambda s: add_document(s, late))

    orchestrator = AnalysisOrchestrator(delay=upload_during_delay)
    state, report = asyncio.run(orchestrator.analyze_session(store, "u1"))

    assert report.documents == ("rules.txt", "handbook.txt")
    assert [d.name for d in state.documents] == ["rules.txt", "handbook.txt", "late.txt"]
    assert state.usage.documents_analyzed == 2


def test_build_report_without_findings(make_doc):
    report = build_report([make_doc("a.txt", ""), make_doc("b.txt", "")], [])

    assert report.total_issues == 0
    assert report.severity_breakdown.total == 0
    assert report.id.startswith("report-")


# =============================================================================
# Billing
# =============================================================================

def test_analysis_cost():
    assert analysis_cost(3, document_cost=2.99, report_cost=4.99) == pytest.approx(13.96)


def test_charge_analysis_accumulates():
    usage = charge_analysis(UsageStats(), 2)
    usage = charge_analysis(usage, 3)

    assert usage.documents_analyzed == 5
    assert usage.reports_generated == 2
    assert usage.total_billed == pytest.approx(5 * config.DOCUMENT_COST + 2 * config.REPORT_COST)
    assert usage.last_analysis is not None


def test_report_collections_are_immutable(orchestrator, conflicting_docs):
    _, report = asyncio.run(orchestrator.analyze(SessionState(documents=conflicting_docs)))

    assert isinstance(report.contradictions, tuple)
    assert isinstance(report.documents, tuple)
    assert isinstance(report.contradictions[0].conflicting_statements, tuple)
    with pytest.raises(AttributeError):
        report.contradictions.append(report.contradictions[0])
    assert report.total_issues == len(report.contradictions)

import pytest

from doc_checker.analyzer import build_report
from doc_checker.errors import UnknownSessionError
from doc_checker.models import UsageStats
from doc_checker.storage import (
    SessionState,
    SessionStore,
    add_document,
    clear_documents,
    record_analysis,
    remove_document,
)


def test_add_keeps_order_and_returns_new_state(make_doc):
    a, b = make_doc("a.txt", "x"), make_doc("b.txt", "y")
    empty = SessionState()
    state = add_document(add_document(empty, a), b)

    assert [d.name for d in state.documents] == ["a.txt", "b.txt"]
    assert empty.documents == ()


def test_remove_only_touches_documents(make_doc):
    a, b = make_doc("a.txt", "x"), make_doc("b.txt", "y")
    state = record_analysis(SessionState(documents=(a, b)), build_report([a, b], []))
    after = remove_document(state, a.id)

    assert [d.id for d in after.documents] == [b.id]
    assert after.reports == state.reports
    assert after.usage == state.usage


def test_remove_unknown_id_is_a_noop(make_doc):
    state = SessionState(documents=(make_doc("a.txt", "x"),))
    assert remove_document(state, "doc-missing").documents == state.documents


def test_clear_keeps_history(make_doc):
    a, b = make_doc("a.txt", "x"), make_doc("b.txt", "y")
    state = record_analysis(SessionState(documents=(a, b)), build_report([a, b], []))
    cleared = clear_documents(state)

    assert cleared.documents == ()
    assert len(cleared.reports) == 1
    assert cleared.usage.reports_generated == 1


def test_find_report(make_doc):
    a, b = make_doc("a.txt", "x"), make_doc("b.txt", "y")
    report = build_report([a, b], [])
    state = record_analysis(SessionState(), report)

    assert state.find_report(report.id) is report
    assert state.find_report("report-missing") is None


def test_store_requires_init():
    store = SessionStore()
    with pytest.raises(UnknownSessionError):
        store.get_state("nobody")
    with pytest.raises(UnknownSessionError):
        store.update("nobody", clear_documents)


def test_store_init_is_idempotent(make_doc):
    store = SessionStore()
    store.init_user("u1")
    store.update("u1", lambda s: add_document(s, make_doc("a.txt", "x")))

    assert len(store.init_user("u1").documents) == 1
    assert store.get_state("u1").usage == UsageStats()


def test_failed_transition_leaves_state(make_doc):
    store = SessionStore()
    before = store.init_user("u1")

    def boom(state):
        raise ValueError("nope")

    with pytest.raises(ValueError):
        store.update("u1", boom)
    assert store.get_state("u1") is before

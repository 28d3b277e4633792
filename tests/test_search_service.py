"""Search strategy: procedure first, fallback on failure, listing without a query."""
import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from studyshare.core.subjects import get_catalog
from studyshare.services.results import FallbackOutcome, PrimaryOutcome, build_page
from studyshare.services.search import (
    SearchService,
    SearchUnavailableError,
    store_error_message,
)
from studyshare.services.search_store import DocumentSearchStore, SortBy

LITERATURE_SUFFIXES = ("_literary_texts", "_language_literature")


class FakeStore:
    """Procedure rows are canned; query_documents records its calls."""

    def __init__(self, rows=None, procedure_error=None, query_error=None):
        self.rows = rows or []
        self.procedure_error = procedure_error
        self.query_error = query_error
        self.procedure_calls = []
        self.query_calls = []

    async def call_procedure(self, *args):
        self.procedure_calls.append(args)
        if self.procedure_error:
            raise self.procedure_error
        return self.rows

    async def query_documents(self, **kwargs):
        self.query_calls.append(kwargs)
        if self.query_error:
            raise self.query_error
        return [], 0


def _row(id, subject, downloads=0, **extra):
    return {"id": id, "title": f"Title {id}", "subject": subject, "downloads": downloads, **extra}


def _service(store, **kwargs) -> SearchService:
    return SearchService(store, get_catalog(), **kwargs)


def _ids(outcome):
    return [item.id for item in outcome.items]


@pytest.mark.asyncio
async def test_procedure_result_is_authoritative():
    store = FakeStore(rows=[_row("a", "science", 1), _row("b", "science", 9)])
    outcome = await _service(store).search("science", limit=2)

    assert isinstance(outcome, PrimaryOutcome)
    assert _ids(outcome) == ["b", "a"]
    assert store.query_calls == []
    assert build_page(outcome, 2, 0).has_more is True


@pytest.mark.asyncio
async def test_procedure_empty_result_does_not_fall_back():
    store = FakeStore(rows=[])
    outcome = await _service(store).search("quantum chromodynamics")

    assert isinstance(outcome, PrimaryOutcome)
    assert outcome.items == []
    assert store.query_calls == []


@pytest.mark.asyncio
async def test_procedure_receives_filters_and_paging():
    store = FakeStore(rows=[])
    await _service(store).search(
        "notes", subject="science", medium="tamil", document_type="book", limit=5, offset=10
    )
    assert store.procedure_calls == [("notes", "science", "tamil", "book", 5, 10)]


@pytest.mark.asyncio
async def test_procedure_error_falls_back():
    store = FakeStore(procedure_error=RuntimeError("function search_documents does not exist"))
    outcome = await _service(store).search("science")

    assert isinstance(outcome, FallbackOutcome)
    assert len(store.query_calls) == 1
    assert store.query_calls[0]["sort_by"] == SortBy.DOWNLOADS


@pytest.mark.asyncio
async def test_procedure_disabled_goes_straight_to_fallback():
    store = FakeStore(rows=[_row("a", "science")])
    outcome = await _service(store, use_procedure=False).search("science")

    assert isinstance(outcome, FallbackOutcome)
    assert store.procedure_calls == []


@pytest.mark.asyncio
async def test_literature_procedure_rows_are_filtered():
    store = FakeStore(rows=[
        _row("lit", "english_literary_texts", 3),
        _row("hist", "history", 50),
        _row("lang", "tamil_language_literature", 7),
    ])
    outcome = await _service(store).search("literature", limit=3)

    assert _ids(outcome) == ["lang", "lit"]
    assert outcome.rows_returned == 3


@pytest.mark.asyncio
async def test_fallback_error_is_surfaced():
    store = FakeStore(
        procedure_error=RuntimeError("no procedure"),
        query_error=OperationalError("SELECT", {}, Exception("database is down")),
    )
    with pytest.raises(SearchUnavailableError, match="database is down"):
        await _service(store).search("science")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [ConnectionRefusedError(111, "Connect call failed"), asyncio.TimeoutError()],
)
async def test_unreachable_store_is_surfaced(error):
    store = FakeStore(procedure_error=error, query_error=error)
    with pytest.raises(SearchUnavailableError):
        await _service(store).browse()
    with pytest.raises(SearchUnavailableError):
        await _service(store).search("science")


def test_store_error_message_is_first_driver_line():
    error = OperationalError(
        "SELECT documents.id FROM documents", {}, Exception("connection lost\nretry later")
    )
    assert store_error_message(error) == "connection lost"
    assert store_error_message(asyncio.TimeoutError()) == "TimeoutError"


# ── Against a real database (SQLite: the procedure is unavailable) ─────


@pytest.mark.asyncio
async def test_subject_query_falls_back_to_title_or_subject(db, seeded):
    service = _service(DocumentSearchStore(db))
    outcome = await service.search("mathematics past papers")

    assert isinstance(outcome, FallbackOutcome)
    # approved only, downloads desc; math-2 matches on subject alone
    assert _ids(outcome) == ["math-2", "math-1"]
    assert outcome.total == 2


@pytest.mark.asyncio
async def test_literature_fallback_only_returns_literature_subjects(db, seeded):
    service = _service(DocumentSearchStore(db))
    outcome = await service.search("literature")

    assert _ids(outcome) == ["lit-en", "lit-si", "lang-ta"]
    assert all(item.subject.endswith(LITERATURE_SUFFIXES) for item in outcome.items)


@pytest.mark.asyncio
async def test_fallback_filters_and_paging(db, seeded):
    service = _service(DocumentSearchStore(db))

    first = await service.search("mathematics", limit=1, offset=0)
    assert _ids(first) == ["math-2"]
    assert build_page(first, 1, 0).has_more is True

    second = await service.search("mathematics", limit=1, offset=1)
    assert _ids(second) == ["math-1"]
    assert build_page(second, 1, 1).has_more is False

    sinhala = await service.search("mathematics", medium="sinhala")
    assert _ids(sinhala) == ["math-2"]


@pytest.mark.asyncio
async def test_fallback_title_sort(db, seeded):
    service = _service(DocumentSearchStore(db))
    outcome = await service.search("english", sort_by=SortBy.TITLE_DESC)
    assert _ids(outcome) == ["eng-2", "eng-1"]


@pytest.mark.asyncio
async def test_empty_query_lists_by_subject_newest_first(db, seeded):
    service = _service(DocumentSearchStore(db))
    outcome = await service.search("", subject="english", sort_by=SortBy.NEWEST)

    assert isinstance(outcome, FallbackOutcome)
    assert _ids(outcome) == ["eng-2", "eng-1"]
    assert outcome.items[1].uploader_name == "Curious Owl"
    assert outcome.items[0].uploader_name == "Anonymous"


@pytest.mark.asyncio
async def test_rank_puts_subject_matches_first(db, seeded):
    service = _service(DocumentSearchStore(db))
    outcome = await service.rank("english")

    assert _ids(outcome) == ["eng-2", "eng-1", "lit-en"]
    assert outcome.total == 3

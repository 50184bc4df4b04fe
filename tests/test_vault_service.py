"""
Tests for VaultService.

Runs the service end to end against the in-memory store, with a recording
subclass to count backend calls and a mocked analyzer.
"""

import asyncio
import json
from unittest.mock import AsyncMock, Mock

import pytest

from mind_vault.errors import (
    AnalysisFailure,
    BatchWriteError,
    ConflictStateError,
    FormatError,
    TransportError,
    UnsupportedFormatError,
)
from mind_vault.models import AnalysisResult, VaultItem
from mind_vault.reconciliation import ConflictAction
from mind_vault.storage import InMemoryVaultStore
from mind_vault.vault_service import VaultService, filter_items, heuristic_title


class RecordingStore(InMemoryVaultStore):
    """In-memory store that records write calls."""

    def __init__(self, items=None):
        super().__init__(items)
        self.put_calls = []
        self.put_batch_calls = []
        self.get_all_calls = 0

    async def get_all(self):
        self.get_all_calls += 1
        return await super().get_all()

    async def put(self, item):
        self.put_calls.append(item)
        await super().put(item)

    async def put_batch(self, items):
        self.put_batch_calls.append(list(items))
        await super().put_batch(items)


def export(*urls, group="Tools"):
    return json.dumps(
        {
            "groups": [{"id": 1, "name": group}],
            "sites": [
                {"id": i, "group_id": 1, "name": f"Site {i}", "url": url, "created_at": "2024-01-01"}
                for i, url in enumerate(urls)
            ],
        }
    )


def link(url, created_at=1000, **kwargs):
    return VaultItem(type="link", content=url, title="Existing", created_at=created_at, **kwargs)


ANALYSIS = AnalysisResult(
    title="Analysed title", summary="An analysed summary", tags=["AI"], type="note"
)


@pytest.fixture
def mock_analyzer():
    analyzer = Mock()
    analyzer.analyze = AsyncMock(return_value=ANALYSIS)
    return analyzer


async def make_service(items=None, analyzer=None):
    store = RecordingStore(items)
    service = VaultService(store, analyzer=analyzer)
    await service.load()
    return service, store


# --- Import ---


@pytest.mark.asyncio
async def test_import_into_empty_corpus():
    service, store = await make_service()

    session = await service.import_file("export.json", export("http://e.com"))

    assert not session.active
    assert len(service.items) == 1
    assert service.items[0].tags == ["Tools"]
    assert service.items[0].content == "http://e.com"
    assert len(store.put_batch_calls) == 1
    assert session.report.imported == 1
    assert session.completion_message == "Imported 1 items"
    assert service.conflict_session is None


@pytest.mark.asyncio
async def test_import_conflict_keep_adds_second_item():
    service, store = await make_service([link("http://e.com")])

    session = await service.import_file("export.json", export("http://e.com"))

    assert session.active
    assert session.report.conflicts == 1
    assert session.current.existing.content == "http://e.com"
    assert len(service.items) == 1

    await service.resolve_conflict("keep")

    assert len(service.items) == 2
    assert [i.content for i in service.items] == ["http://e.com", "http://e.com"]
    assert service.conflict_session is None
    assert session.completion_message == "Import complete"


@pytest.mark.asyncio
async def test_import_conflict_skip_leaves_corpus_unchanged():
    service, store = await make_service([link("http://e.com")])

    await service.import_file("export.json", export("http://e.com"))
    await service.resolve_conflict("skip")

    assert len(service.items) == 1
    assert store.put_calls == []


@pytest.mark.asyncio
async def test_mixed_import_writes_ready_items_before_conflicts():
    service, store = await make_service([link("http://e.com"), link("http://f.com")])

    session = await service.import_file(
        "export.json", export("http://new.com", "http://e.com", "http://f.com")
    )

    assert session.report.parsed == 3
    assert session.report.imported == 1
    assert session.report.conflicts == 2
    assert [i.content for i in store.put_batch_calls[0]] == ["http://new.com"]
    assert session.current.new_item.content == "http://e.com"

    reloads_before = store.get_all_calls
    await service.resolve_conflict("keep")
    assert store.get_all_calls == reloads_before

    await service.resolve_conflict("skip-all")

    assert store.get_all_calls == reloads_before + 1
    assert session.report.kept == 1
    assert session.report.skipped == 1
    assert len(service.items) == 4
    assert session.completion_message == "Skipped remaining duplicates and finished the import"


@pytest.mark.asyncio
async def test_resolve_conflict_accepts_enum_actions():
    service, store = await make_service([link("http://e.com"), link("http://f.com")])
    await service.import_file("export.json", export("http://e.com", "http://f.com"))

    transition = await service.resolve_conflict(ConflictAction.KEEP)
    assert transition.action is ConflictAction.KEEP

    transition = await service.resolve_conflict(ConflictAction.SKIP)

    assert transition.completed
    assert len(store.put_calls) == 1
    assert len(service.items) == 3


@pytest.mark.asyncio
async def test_resolve_without_pending_conflicts_raises():
    service, _ = await make_service()

    with pytest.raises(ConflictStateError):
        await service.resolve_conflict("keep")


@pytest.mark.asyncio
async def test_import_bookmarks_file():
    service, _ = await make_service()
    html = '<DL><p><DT><H3>Dev</H3><DL><p><DT><A HREF="https://python.org">Python</A></DL></DL>'

    await service.import_file("bookmarks.html", html)

    assert service.items[0].tags == ["Dev"]


@pytest.mark.asyncio
async def test_malformed_file_writes_nothing():
    service, store = await make_service()

    with pytest.raises(FormatError):
        await service.import_file("export.json", "{broken")
    with pytest.raises(UnsupportedFormatError):
        await service.import_file("notes.txt", "hello")

    assert store.put_batch_calls == []


@pytest.mark.asyncio
async def test_import_write_failure_reports_progress():
    service, store = await make_service()
    service.writer.chunk_size = 2
    store.put_batch = AsyncMock(side_effect=[None, TransportError("down")])
    urls = [f"http://site{i}.com" for i in range(5)]

    with pytest.raises(BatchWriteError) as exc_info:
        await service.import_file("export.json", export(*urls))

    assert exc_info.value.written == 2
    assert store.put_batch.await_count == 2


# --- Items ---


@pytest.mark.asyncio
async def test_add_content_manual_url():
    service, store = await make_service()

    item = await service.add_content("  https://www.python.org/downloads  ")

    assert item.type == "link"
    assert item.title == "www.python.org"
    assert item.summary == ""
    assert item.tags == ["Manually Added"]
    assert service.items == [item]


@pytest.mark.asyncio
async def test_add_content_manual_note():
    service, _ = await make_service()

    item = await service.add_content("A fairly long first line of text\nsecond line")

    assert item.type == "note"
    assert item.title == "A fairly long first ..."


@pytest.mark.asyncio
async def test_add_content_with_analysis(mock_analyzer):
    service, _ = await make_service(analyzer=mock_analyzer)

    item = await service.add_content("some text", analyze=True)

    assert item.title == "Analysed title"
    assert item.tags == ["AI"]
    mock_analyzer.analyze.assert_awaited_once_with("some text")


@pytest.mark.asyncio
async def test_add_content_analysis_failure_uses_fallback(mock_analyzer):
    mock_analyzer.analyze = AsyncMock(side_effect=AnalysisFailure("model down"))
    service, _ = await make_service(analyzer=mock_analyzer)

    item = await service.add_content("https://python.org", analyze=True)

    assert item.title == "Untitled"
    assert item.tags == ["Uncategorized"]
    assert item.type == "link"


@pytest.mark.asyncio
async def test_add_empty_content_rejected():
    service, _ = await make_service()

    with pytest.raises(ValueError):
        await service.add_content("   ")


@pytest.mark.asyncio
async def test_reanalyze_item(mock_analyzer):
    original = link("http://e.com", summary="short")
    service, _ = await make_service([original], analyzer=mock_analyzer)

    updated, changed = await service.reanalyze_item(original)

    assert changed
    assert updated.id == original.id
    assert updated.created_at == original.created_at
    assert service.items[0].title == "Analysed title"


@pytest.mark.asyncio
async def test_reanalyze_failure_keeps_item(mock_analyzer):
    mock_analyzer.analyze = AsyncMock(side_effect=AnalysisFailure("bad json"))
    original = link("http://e.com")
    service, store = await make_service([original], analyzer=mock_analyzer)

    item, changed = await service.reanalyze_item(original)

    assert not changed
    assert item == original
    assert store.put_calls == []


@pytest.mark.asyncio
async def test_reanalyze_without_analyzer_raises():
    service, _ = await make_service()

    with pytest.raises(AnalysisFailure):
        await service.reanalyze_item(link("http://e.com"))


@pytest.mark.asyncio
async def test_delete_items_filters_locally():
    a, b = link("http://a.com"), link("http://b.com")
    service, store = await make_service([a, b])
    loads = store.get_all_calls

    await service.delete_items([a.id])

    assert [i.id for i in service.items] == [b.id]
    assert store.get_all_calls == loads
    assert len(store) == 1


# --- Enrichment ---


@pytest.mark.asyncio
async def test_batch_analyze_whole_corpus(mock_analyzer):
    items = [link(f"http://{i}.com", created_at=i) for i in range(7)]
    service, store = await make_service(items, analyzer=mock_analyzer)
    progress = []

    report = await service.batch_analyze(on_progress=progress.append)

    assert report.total == 7
    assert report.analyzed == 7
    assert mock_analyzer.analyze.await_count == 7
    assert [p.completed for p in progress] == [5, 7]
    assert len(store.put_batch_calls) == 1
    assert all(i.title == "Analysed title" for i in service.items)


@pytest.mark.asyncio
async def test_batch_analyze_uses_active_filter(mock_analyzer):
    tagged = link("http://a.com", tags=["Python"])
    other = link("http://b.com", tags=["News"])
    service, _ = await make_service([tagged, other], analyzer=mock_analyzer)

    report = await service.batch_analyze(tag="Python")

    assert report.total == 1
    mock_analyzer.analyze.assert_awaited_once_with("http://a.com")


@pytest.mark.asyncio
async def test_batch_analyze_cancelled(mock_analyzer):
    service, store = await make_service([link("http://a.com")], analyzer=mock_analyzer)
    cancel = asyncio.Event()
    cancel.set()

    report = await service.batch_analyze(cancel_event=cancel)

    assert report.cancelled
    mock_analyzer.analyze.assert_not_awaited()
    assert store.put_batch_calls == []


@pytest.mark.asyncio
async def test_batch_analyze_without_analyzer_raises():
    service, _ = await make_service()

    with pytest.raises(AnalysisFailure):
        await service.batch_analyze()


# --- Tags and cleanup ---


@pytest.mark.asyncio
async def test_assign_tag():
    item = link("http://a.com", tags=["x"])
    service, _ = await make_service([item])

    assert await service.assign_tag(item.id, "y") is True
    assert service.items[0].tags == ["x", "y"]
    assert await service.assign_tag("missing", "y") is False


@pytest.mark.asyncio
async def test_rename_tag():
    items = [
        link("http://a.com", created_at=2, tags=["draft", "final"]),
        link("http://b.com", created_at=1, tags=["draft", "other"]),
    ]
    service, store = await make_service(items)

    await service.rename_tag("draft", "final")

    assert [i.tags for i in service.items] == [["final"], ["final", "other"]]
    assert len(store.put_batch_calls) == 1


@pytest.mark.asyncio
async def test_remove_duplicates_keeps_oldest():
    oldest = link("http://dup.com", created_at=1)
    newer = link("http://dup.com", created_at=5)
    unique = link("http://unique.com", created_at=3)
    service, _ = await make_service([oldest, newer, unique])

    deleted = await service.remove_duplicates()

    assert deleted == [newer.id]
    assert {i.id for i in service.items} == {oldest.id, unique.id}


# --- Helpers ---


def test_filter_items_by_search_and_tag():
    items = [
        VaultItem(type="note", content="1", title="Python tips", tags=["dev"]),
        VaultItem(type="note", content="2", title="Recipes", tags=["Cooking"], summary="pasta"),
        VaultItem(type="note", content="3", title="Other", tags=["dev"], summary="about PASTA"),
    ]

    assert [i.content for i in filter_items(items, search="python")] == ["1"]
    assert [i.content for i in filter_items(items, search="cook")] == ["2"]
    assert [i.content for i in filter_items(items, search="pasta")] == ["2", "3"]
    assert [i.content for i in filter_items(items, search="pasta", tag="dev")] == ["3"]
    assert filter_items(items) == items


@pytest.mark.parametrize(
    "content,expected",
    [
        ("https://example.com/path", "example.com"),
        ("HTTP://Example.com", "example.com"),
        ("short note", "short note"),
        ("line one\nline two", "line one..."),
    ],
)
def test_heuristic_title(content, expected):
    assert heuristic_title(content) == expected

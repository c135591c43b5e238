"""
Tests for full sync runs through SyncPipeline.

Each test uses a throwaway DuckDB file so incremental runs see the state
left behind by earlier runs.
"""

import pytest

from contentgraph.config import NormalizeSettings
from contentgraph.diagnostics import Diagnostics
from contentgraph.errors import UnknownContentTypeError
from contentgraph.models import (
    ContentTypeSchema,
    DeletedRecord,
    DeltaSync,
    FieldSchema,
    FieldType,
    Locale,
    RawEntry,
)
from contentgraph.normalize import UnknownContentTypePolicy, content_type_node_id
from contentgraph.pipeline import SyncPipeline
from contentgraph.sources import MockSource
from contentgraph.sources.mock import create_content_types, entry_link
from contentgraph.store import NodeStore


class BrokenSchemaSource(MockSource):
    """Mock space with an extra content type whose Array field has no items."""

    def get_content_types(self):
        broken = ContentTypeSchema(
            id="gallery",
            name="Gallery",
            fields=[FieldSchema(id="images", type=FieldType.ARRAY)],
        )
        return create_content_types() + [broken]


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "nodes.db")


def run(source, db_path, settings=None):
    with NodeStore(db_path) as store:
        pipeline = SyncPipeline(source, store, settings or NormalizeSettings(), Diagnostics())
        return pipeline.run(), pipeline.emitted


def test_initial_sync_stores_nodes_and_cursor(db_path):
    source = MockSource()

    result, emitted = run(source, db_path)

    assert result.succeeded
    assert result.created_nodes == 5
    assert source.requested_cursors == [None]
    with NodeStore(db_path) as store:
        assert store.existing_node_ids() == {
            "a1", "p1", "img1", content_type_node_id("author"), content_type_node_id("post")
        }
        assert store.get_sync_cursor(source.source_key) == "mock-cursor-1"
        assert store.get_node("p1").fields["author"] == "a1"
        assert store.get_node("a1").reverse_links == {"post___NODE": ["p1"]}
        assert store.get_node(content_type_node_id("post")).children == ["p1"]


def test_incremental_sync_links_to_untouched_nodes(db_path):
    run(MockSource(), db_path)
    delta = DeltaSync(
        entries=[RawEntry(id="p2", content_type_id="post", fields={
            "title": {"en-US": "Second"},
            "author": {"en-US": entry_link("a1")},
        })],
        next_sync_cursor="mock-cursor-2",
    )
    source = MockSource(delta=delta)

    result, emitted = run(source, db_path)

    assert source.requested_cursors == ["mock-cursor-1"]
    assert result.relinked_nodes == 1
    assert result.unresolved_references == 0
    with NodeStore(db_path) as store:
        assert store.get_node("p2").fields["author"] == "a1"
        assert store.get_node("a1").reverse_links == {"post___NODE": ["p1", "p2"]}
        assert store.get_node(content_type_node_id("post")).children == ["p1", "p2"]
        assert store.get_sync_cursor(source.source_key) == "mock-cursor-2"


def test_updated_target_keeps_back_references_from_untouched_sources(db_path):
    run(MockSource(), db_path)
    delta = DeltaSync(
        entries=[RawEntry(id="a1", content_type_id="author", fields={"name": {"en-US": "Jane Roe"}})],
        next_sync_cursor="mock-cursor-2",
    )

    result, emitted = run(MockSource(delta=delta), db_path)

    assert result.relinked_nodes == 0
    with NodeStore(db_path) as store:
        author = store.get_node("a1")
        assert author.fields["name"] == "Jane Roe"
        assert author.reverse_links == {"post___NODE": ["p1"]}


def test_deleted_entries_are_removed_before_resolution(db_path):
    run(MockSource(), db_path)
    delta = DeltaSync(
        entries=[RawEntry(id="p3", content_type_id="post", fields={
            "author": {"en-US": entry_link("p1")},
        })],
        deleted_entries=[DeletedRecord(id="p1")],
        next_sync_cursor="mock-cursor-2",
    )

    result, emitted = run(MockSource(delta=delta), db_path)

    assert result.deleted_nodes == 1
    assert result.unresolved_references == 1
    assert result.relinked_nodes == 1
    with NodeStore(db_path) as store:
        assert store.get_node("p1") is None
        assert store.get_node("p3").fields["author"]["id"] == "cBlankauthor"
        assert store.get_node("a1").reverse_links == {}
        assert store.get_node(content_type_node_id("post")).children == ["p3"]


def test_deleted_source_is_pruned_from_untouched_targets(db_path):
    locales = [
        Locale(code="en-US", is_default=True),
        Locale(code="de", fallback_code="en-US"),
    ]
    run(MockSource(locales=locales), db_path)
    second = DeltaSync(
        entries=[RawEntry(id="p2", content_type_id="post", fields={
            "title": {"en-US": "Second"},
            "author": {"en-US": entry_link("a1")},
        })],
        next_sync_cursor="mock-cursor-2",
    )
    run(MockSource(locales=locales, delta=second), db_path)
    third = DeltaSync(deleted_entries=[DeletedRecord(id="p1")], next_sync_cursor="mock-cursor-3")

    result, emitted = run(MockSource(locales=locales, delta=third), db_path)

    assert result.deleted_nodes == 2
    assert result.relinked_nodes == 2
    ids = {node.id for node in emitted}
    assert {"a1", "a1___de"} <= ids
    assert "p2" not in ids
    with NodeStore(db_path) as store:
        assert store.get_node("a1").reverse_links == {"post___NODE": ["p2"]}
        assert store.get_node("a1___de").reverse_links == {"post___NODE": ["p2___de"]}
        assert store.get_node("a1").fields["avatar"] == "img1"


def test_localized_sync(db_path):
    locales = [
        Locale(code="en-US", is_default=True),
        Locale(code="de", fallback_code="en-US"),
    ]

    result, emitted = run(MockSource(locales=locales), db_path)

    assert result.created_nodes == 8
    with NodeStore(db_path) as store:
        german = store.get_node("p1___de")
        assert german.fields["title"] == "Hallo Welt"
        assert german.fields["author"] == "a1___de"
        assert store.get_node("a1___de").reverse_links == {"post___NODE": ["p1___de"]}


def test_preview_host_does_not_store_cursor(db_path):
    source = MockSource()

    result, emitted = run(source, db_path, NormalizeSettings(host="preview.contentful.com"))

    assert result.next_sync_cursor == "mock-cursor-1"
    with NodeStore(db_path) as store:
        assert store.get_sync_cursor(source.source_key) is None


def test_malformed_content_type_is_skipped_and_reported(db_path):
    delta = MockSource().get_delta_sync()
    delta.entries.append(RawEntry(id="g1", content_type_id="gallery"))

    result, emitted = run(BrokenSchemaSource(delta=delta), db_path)

    assert not result.succeeded
    assert list(result.failed_content_types) == ["gallery"]
    assert "images" in result.failed_content_types["gallery"]
    ids = {node.id for node in emitted}
    assert "g1" not in ids
    assert {"a1", "p1", "img1"} <= ids


def test_unknown_content_type_policies(db_path):
    delta = MockSource().get_delta_sync()
    delta.entries.append(RawEntry(id="x1", content_type_id="retired"))

    result, emitted = run(MockSource(delta=delta), db_path)
    assert result.dropped_entries == ["x1"]

    strict = NormalizeSettings(unknown_content_types=UnknownContentTypePolicy.FAIL)
    with pytest.raises(UnknownContentTypeError):
        run(MockSource(delta=delta), db_path, strict)

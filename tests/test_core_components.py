"""
Unit tests for core contentgraph components.

Tests configuration management, data model parsing and the DuckDB node
store.
"""

import math
import os
import shutil
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from contentgraph.config import ConfigManager, NormalizeSettings
from contentgraph.models import (
    ContentTypeSchema,
    DeltaSync,
    FieldSchema,
    FieldType,
    LinkType,
    Locale,
    Node,
)
from contentgraph.normalize import UnknownContentTypePolicy
from contentgraph.store import NodeStore


class TestConfigManager(unittest.TestCase):
    """Test configuration management functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "test_config.yaml"

    def tearDown(self):
        """Clean up test fixtures."""
        if self.config_path.exists():
            self.config_path.unlink()
        os.rmdir(self.temp_dir)

    def test_config_creation_with_defaults(self):
        """Test config manager falls back to defaults when file missing."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.host, "cdn.contentful.com")
        self.assertEqual(config.database_filename, "contentgraph.db")
        self.assertEqual(config.get("normalize.conflict_prefix"), "contentful")
        self.assertIsNone(config.output_filename)

    def test_config_loading_from_file(self):
        """Test loading configuration from YAML file."""
        test_config = """
source:
  space_id: "space42"
  host: "preview.contentful.com"

store:
  filename: "test.db"

normalize:
  conflict_prefix: "cms"
  unknown_content_types: "fail"
"""
        with open(self.config_path, 'w') as f:
            f.write(test_config)

        config = ConfigManager(str(self.config_path))
        settings = config.normalize_settings()

        self.assertEqual(config.space_id, "space42")
        self.assertEqual(config.database_filename, "test.db")
        self.assertEqual(settings.conflict_prefix, "cms")
        self.assertEqual(settings.unknown_content_types, UnknownContentTypePolicy.FAIL)
        self.assertFalse(settings.stores_sync_cursor)

    def test_dot_notation_access(self):
        """Test accessing config values with dot notation."""
        config = ConfigManager(str(self.config_path))  # Uses defaults

        self.assertEqual(config.get("store.filename"), "contentgraph.db")
        self.assertEqual(config.get("logging.level"), "INFO")
        self.assertEqual(config.get("nonexistent.key", "default"), "default")
        self.assertIn("filename", config.get_section("store"))

    def test_config_reload(self):
        """Test configuration reloading."""
        with open(self.config_path, 'w') as f:
            f.write("normalize:\n  conflict_prefix: 'one'")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.normalize_settings().conflict_prefix, "one")

        with open(self.config_path, 'w') as f:
            f.write("normalize:\n  conflict_prefix: 'two'")

        config.reload()
        self.assertEqual(config.normalize_settings().conflict_prefix, "two")

    def test_invalid_unknown_content_type_policy(self):
        with open(self.config_path, 'w') as f:
            f.write("normalize:\n  unknown_content_types: 'explode'")

        config = ConfigManager(str(self.config_path))
        with self.assertRaises(ValueError):
            config.normalize_settings()

    def test_default_settings_store_cursor(self):
        self.assertTrue(NormalizeSettings().stores_sync_cursor)


class TestDataModels(unittest.TestCase):
    """Test data model validation and parsing of sync payloads."""

    def test_content_type_from_api(self):
        item = {
            "sys": {"id": "post", "space": {"sys": {"id": "space1"}}},
            "name": "Post",
            "displayField": "title",
            "fields": [
                {"id": "title", "type": "Symbol"},
                {"id": "author", "type": "Link", "linkType": "Entry",
                 "validations": [{"linkContentType": ["author"]}]},
                {"id": "tags", "type": "Array", "items": {"type": "Symbol", "validations": []}},
            ],
        }

        schema = ContentTypeSchema.from_api(item)

        self.assertEqual(schema.id, "post")
        self.assertEqual(schema.space_id, "space1")
        self.assertEqual(schema.display_field, "title")
        author = schema.get_field("author")
        self.assertEqual(author.link_type, LinkType.ENTRY)
        self.assertTrue(author.is_link)
        self.assertEqual(author.target_content_type(), "author")
        self.assertEqual(schema.get_field("tags").items.type, FieldType.SYMBOL)
        self.assertFalse(schema.get_field("tags").is_link)
        self.assertIsNone(schema.get_field("missing"))

    def test_unknown_field_type_is_rejected(self):
        with self.assertRaises(ValidationError):
            FieldSchema(id="x", type="RichText")

    def test_ambiguous_link_target(self):
        field = FieldSchema(
            id="related",
            type=FieldType.LINK,
            link_type=LinkType.ENTRY,
            validations=[{"size": {"max": 3}}, {"linkContentType": ["a", "b"]}],
        )
        self.assertEqual(field.linked_content_types(), ["a", "b"])
        self.assertIsNone(field.target_content_type())

    def test_delta_sync_from_api(self):
        payload = {
            "entries": [{
                "sys": {
                    "id": "e1",
                    "revision": 2,
                    "space": {"sys": {"id": "space1"}},
                    "contentType": {"sys": {"id": "post"}},
                    "createdAt": "2024-01-01T00:00:00Z",
                },
                "fields": {"title": {"en-US": "Hi"}},
            }],
            "assets": [{"sys": {"id": "as1"}, "fields": {"title": {"en-US": "Pic"}}}],
            "deletedEntries": [{"sys": {"id": "gone1"}}],
            "deletedAssets": [],
            "nextSyncToken": "token-2",
        }

        delta = DeltaSync.from_api(payload)

        self.assertEqual(delta.entries[0].content_type_id, "post")
        self.assertEqual(delta.entries[0].space_id, "space1")
        self.assertEqual(delta.entries[0].revision, 2)
        self.assertEqual(delta.assets[0].id, "as1")
        self.assertEqual(delta.deleted_entries[0].id, "gone1")
        self.assertEqual(delta.next_sync_cursor, "token-2")

    def test_locale_aliases(self):
        locale = Locale.model_validate({"code": "de", "default": False, "fallbackCode": "en-US"})
        self.assertFalse(locale.is_default)
        self.assertEqual(locale.fallback_code, "en-US")

    def test_node_record_flattening(self):
        node = Node(
            id="p1___de",
            raw_id="p1",
            content_type="post",
            locale="de",
            internal_type="ContentfulPost",
            parent="contentType__post",
            fields={"title": "Hallo"},
            reverse_links={"author___NODE": ["a1___de"]},
            content_digest="abc",
        )

        record = node.to_record()

        self.assertEqual(record["id"], "p1___de")
        self.assertEqual(record["contentful_id"], "p1")
        self.assertEqual(record["node_locale"], "de")
        self.assertEqual(record["title"], "Hallo")
        self.assertEqual(record["author___NODE"], ["a1___de"])
        self.assertEqual(record["internal"], {"type": "ContentfulPost", "contentDigest": "abc"})

    def test_node_metadata_wins_over_same_named_fields(self):
        node = Node(
            id="a1",
            raw_id="a1",
            locale="en-US",
            internal_type="ContentfulAuthor",
            space_id="space1",
            revision=2,
            created_at="2024-01-01",
            fields={
                "createdAt": "1999",
                "node_locale": "xx",
                "revision": 99,
                "spaceId": "other",
                "contentful_id": "legacy",
                "name": "Jane",
            },
        )

        record = node.to_record()

        self.assertEqual(record["createdAt"], "2024-01-01")
        self.assertEqual(record["node_locale"], "en-US")
        self.assertEqual(record["revision"], 2)
        self.assertEqual(record["spaceId"], "space1")
        self.assertEqual(record["contentful_id"], "a1")
        self.assertEqual(record["name"], "Jane")


class TestNodeStore(unittest.TestCase):
    """Test DuckDB node store operations."""

    def setUp(self):
        """Set up test database."""
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.temp_dir, "test.db")

    def tearDown(self):
        """Clean up test database."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _node(self, node_id, raw_id, locale="en-US", **fields):
        return Node(
            id=node_id,
            raw_id=raw_id,
            content_type="post",
            locale=locale,
            internal_type="ContentfulPost",
            fields=fields,
            content_digest="digest",
        )

    def test_create_and_get_node(self):
        with NodeStore(self.db_path) as store:
            store.create_node(self._node("p1", "p1", title="Hello", rating=math.nan))
            node = store.get_node("p1")

        self.assertEqual(node.fields["title"], "Hello")
        self.assertTrue(math.isnan(node.fields["rating"]))

    def test_create_node_replaces_existing(self):
        with NodeStore(self.db_path) as store:
            store.create_node(self._node("p1", "p1", title="Old"))
            store.create_node(self._node("p1", "p1", title="New"))

            self.assertEqual(store.count_nodes(), 1)
            self.assertEqual(store.get_node("p1").fields["title"], "New")

    def test_delete_nodes_for_record_removes_every_locale(self):
        with NodeStore(self.db_path) as store:
            store.create_node(self._node("p1", "p1"))
            store.create_node(self._node("p1___de", "p1", locale="de"))
            store.create_node(self._node("p2", "p2"))

            deleted = store.delete_nodes_for_record("p1")

            self.assertEqual([node.id for node in deleted], ["p1", "p1___de"])
            self.assertEqual(store.delete_nodes_for_record("p1"), [])
            self.assertEqual(store.existing_node_ids(), {"p2"})
            self.assertFalse(store.delete_node("p1"))
            self.assertTrue(store.delete_node("p2"))

    def test_sync_cursor_round_trip(self):
        with NodeStore(self.db_path) as store:
            self.assertIsNone(store.get_sync_cursor("space@host"))
            store.save_sync_cursor("space@host", "cursor-1")
            store.save_sync_cursor("space@host", "cursor-2")
            self.assertEqual(store.get_sync_cursor("space@host"), "cursor-2")

    def test_state_persists_across_connections(self):
        with NodeStore(self.db_path) as store:
            store.create_node(self._node("p1", "p1"))
            store.save_sync_cursor("k", "c")

        with NodeStore(self.db_path) as store:
            self.assertEqual(store.existing_node_ids(), {"p1"})
            self.assertEqual(store.get_sync_cursor("k"), "c")

    def test_operations_require_connection(self):
        store = NodeStore(self.db_path)
        with self.assertRaises(RuntimeError):
            store.existing_node_ids()


if __name__ == '__main__':
    unittest.main()

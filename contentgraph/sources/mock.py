"""
Mock sync source for testing contentgraph.

This module provides a small hardcoded space (authors and posts) for
exercising the pipeline without a real content source.
"""

from typing import List, Optional

from ..models import ContentTypeSchema, DeltaSync, FieldSchema, Locale, RawAsset, RawEntry
from .base import BaseSyncSource

SPACE_ID = "mockspace"


def entry_link(entry_id: str) -> dict:
    return {"sys": {"type": "Link", "linkType": "Entry", "id": entry_id}}


def asset_link(asset_id: str) -> dict:
    return {"sys": {"type": "Link", "linkType": "Asset", "id": asset_id}}


class MockSource(BaseSyncSource):
    """
    Mock source that returns hardcoded records.

    Args:
        locales: Locales to expose (defaults to ``en-US`` only)
        delta: DeltaSync to return instead of the built-in records
    """

    def __init__(self, locales: Optional[List[Locale]] = None, delta: Optional[DeltaSync] = None):
        self._locales = locales or [Locale(code="en-US", name="English", is_default=True)]
        self._delta = delta if delta is not None else self._create_delta()
        self.requested_cursors: List[Optional[str]] = []

    @property
    def source_key(self) -> str:
        return f"{SPACE_ID}@mock"

    def get_delta_sync(self, cursor: Optional[str] = None) -> DeltaSync:
        self.requested_cursors.append(cursor)
        return self._delta

    def get_content_types(self) -> List[ContentTypeSchema]:
        return create_content_types()

    def get_locales(self) -> List[Locale]:
        return self._locales

    def _create_delta(self) -> DeltaSync:
        return DeltaSync(
            entries=[
                RawEntry(
                    id="a1",
                    space_id=SPACE_ID,
                    content_type_id="author",
                    revision=1,
                    created_at="2024-05-22T10:00:00.000Z",
                    updated_at="2024-05-22T10:00:00.000Z",
                    fields={
                        "name": {"en-US": "Jane Doe"},
                        "avatar": {"en-US": asset_link("img1")},
                    },
                ),
                RawEntry(
                    id="p1",
                    space_id=SPACE_ID,
                    content_type_id="post",
                    revision=3,
                    created_at="2024-05-23T08:30:00.000Z",
                    updated_at="2024-05-24T09:15:00.000Z",
                    fields={
                        "title": {"en-US": "Hello world", "de": "Hallo Welt"},
                        "body": {"en-US": "First post."},
                        "author": {"en-US": entry_link("a1")},
                        "views": {"en-US": 42},
                        "published": {"en-US": True},
                    },
                ),
            ],
            assets=[
                RawAsset(
                    id="img1",
                    space_id=SPACE_ID,
                    revision=1,
                    fields={
                        "title": {"en-US": "Portrait"},
                        "file": {"en-US": {
                            "url": "//images.example.com/portrait.png",
                            "fileName": "portrait.png",
                            "contentType": "image/png",
                        }},
                    },
                ),
            ],
            next_sync_cursor="mock-cursor-1",
        )


def create_content_types() -> List[ContentTypeSchema]:
    """The mock space's schemas: an author, and a post linking to one."""
    return [
        ContentTypeSchema(
            id="author",
            name="Author",
            display_field="name",
            space_id=SPACE_ID,
            fields=[
                FieldSchema(id="name", type="Symbol"),
                FieldSchema(id="avatar", type="Link", link_type="Asset"),
            ],
        ),
        ContentTypeSchema(
            id="post",
            name="Post",
            display_field="title",
            space_id=SPACE_ID,
            fields=[
                FieldSchema(id="title", type="Symbol"),
                FieldSchema(id="body", type="Text"),
                FieldSchema(id="author", type="Link", link_type="Entry", content_type="author"),
                FieldSchema(id="views", type="Number"),
                FieldSchema(id="published", type="Boolean"),
            ],
        ),
    ]

"""
Blank entry synthesis.

A blank entry is a placeholder with the field shape of its content type.
It stands in for a link target that cannot be resolved, so every node of a
content type exposes the same fields with the same value types.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Set

from ..errors import MalformedSchemaError
from ..models import BlankEntry, ContentTypeSchema, FieldSchema, FieldType, LinkType

BLANK_ID_PREFIX = "cBlank"


class BlankEntryCache:
    """
    Memoized blank entries for one sync run, keyed by content type ID.

    Each content type is synthesized at most once. A link back into a
    content type that is still being synthesized (a cyclic schema) gets a
    stub placeholder instead of recursing.
    """

    def __init__(self, content_types: Iterable[ContentTypeSchema]):
        self.content_types: Dict[str, ContentTypeSchema] = {ct.id: ct for ct in content_types}
        self._cache: Dict[str, BlankEntry] = {}
        self._in_progress: Set[str] = set()

    def __contains__(self, content_type_id: str) -> bool:
        return content_type_id in self._cache

    def get(self, content_type_id: str) -> BlankEntry:
        """Return the blank entry for a content type, synthesizing it on first use."""
        cached = self._cache.get(content_type_id)
        if cached is not None:
            return cached
        content_type = self.content_types.get(content_type_id)
        if content_type is None:
            raise MalformedSchemaError(content_type_id, None, "unknown content type")
        return self.synthesize(content_type)

    def prepopulate(self) -> None:
        """Synthesize every content type up front, e.g. before parallel use."""
        for content_type_id in self.content_types:
            self.get(content_type_id)

    def synthesize(self, content_type: ContentTypeSchema) -> BlankEntry:
        cached = self._cache.get(content_type.id)
        if cached is not None:
            return cached

        self._in_progress.add(content_type.id)
        try:
            fields = {
                field.id: self.blank_field(field, content_type.id)
                for field in content_type.fields
            }
        finally:
            self._in_progress.discard(content_type.id)

        now = datetime.now(timezone.utc).isoformat()
        blank = BlankEntry(
            id=f"{BLANK_ID_PREFIX}{content_type.id}",
            content_type_id=content_type.id,
            space_id=content_type.space_id,
            created_at=now,
            updated_at=now,
            fields=fields,
        )
        self._cache[content_type.id] = blank
        return blank

    def blank_field(self, field: FieldSchema, owner_id: str) -> Any:
        """Default value for one field of content type ``owner_id``."""
        field_type = field.type

        if field_type in (FieldType.SYMBOL, FieldType.TEXT, FieldType.DATE):
            return ""
        if field_type in (FieldType.NUMBER, FieldType.INTEGER):
            return math.nan
        if field_type == FieldType.BOOLEAN:
            return False
        if field_type == FieldType.LINK:
            return self._blank_link(field, owner_id)
        if field_type in (FieldType.OBJECT, FieldType.LOCATION, FieldType.MEDIA, FieldType.REFERENCE):
            return {}
        if field_type == FieldType.ARRAY:
            return self._blank_array(field, owner_id)

        raise MalformedSchemaError(owner_id, field.id, f"unhandled field type {field_type!r}")

    def blank_link_target(self, field: FieldSchema, owner_id: str) -> Any:
        """
        Placeholder for one unresolved link of ``field`` (a Link or a Link item).

        Entry links become the blank entry of their target content type, or a
        minimal placeholder when the target type is unknown. Asset links have
        no blank counterpart and become an empty object.
        """
        if field.link_type == LinkType.ASSET:
            return {}
        content_type_id = field.target_content_type()
        if content_type_id is None:
            return _minimal_placeholder(field).to_value()
        return self._blank_for(content_type_id, field, owner_id).to_value()

    def _blank_link(self, field: FieldSchema, owner_id: str) -> Any:
        if field.link_type is None:
            raise MalformedSchemaError(owner_id, field.id, "Link field without linkType")
        if field.link_type == LinkType.ASSET:
            # No blank asset shape exists; left unresolved on purpose.
            return {}
        content_type_id = field.target_content_type()
        if content_type_id is None:
            return _minimal_placeholder(field)
        return self._blank_for(content_type_id, field, owner_id)

    def _blank_array(self, field: FieldSchema, owner_id: str) -> Any:
        items = field.items
        if items is None:
            raise MalformedSchemaError(owner_id, field.id, "Array field without item schema")
        allowed = items.linked_content_types()
        if items.type == FieldType.LINK and allowed:
            return [
                self._blank_link(
                    items.model_copy(update={"id": field.id, "content_type": content_type_id}),
                    owner_id,
                )
                for content_type_id in allowed
            ]
        return [self.blank_field(items.model_copy(update={"id": field.id}), owner_id)]

    def _blank_for(self, content_type_id: str, field: FieldSchema, owner_id: str) -> BlankEntry:
        if content_type_id not in self.content_types:
            raise MalformedSchemaError(
                owner_id, field.id, f"link to unknown content type '{content_type_id}'"
            )
        if content_type_id in self._in_progress:
            return BlankEntry(id=f"{BLANK_ID_PREFIX}{content_type_id}", content_type_id=content_type_id)
        return self.get(content_type_id)


def _minimal_placeholder(field: FieldSchema) -> BlankEntry:
    return BlankEntry(id=f"{BLANK_ID_PREFIX}{field.id}")

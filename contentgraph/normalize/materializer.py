"""
Node materialization.

Turns each raw entry and asset into one finalized node per locale: fields
are localized, links are resolved against the resolvable set (or replaced
by blank entries), reserved field names are renamed, and reverse links are
attached before the node is emitted.
"""

import hashlib
import json
from typing import AbstractSet, Any, Callable, Dict, List, Optional, Sequence

from ..diagnostics import Diagnostics
from ..models import ContentTypeSchema, FieldSchema, FieldType, Locale, Node, RawAsset, RawEntry
from .blanks import BlankEntryCache
from .ids import content_type_node_id, make_id, make_type_name
from .locales import resolve_localized_field
from .references import ForeignReferenceMap, attach_reverse_links, link_target_id

# Field names the host reserves on every node
RESTRICTED_NODE_FIELDS = ("id", "children", "parent", "fields", "internal")

ASSET_TYPE_NAME = "ContentfulAsset"
CONTENT_TYPE_TYPE_NAME = "ContentfulContentType"

NodeCallback = Callable[[Node], None]


def calculate_content_digest(node: Node) -> str:
    """SHA-256 of the node's canonical JSON, excluding the digest itself."""
    record = node.to_record()
    record.pop("internal", None)
    json_str = json.dumps(record, sort_keys=True, ensure_ascii=True, default=str)
    return hashlib.sha256(json_str.encode("utf-8")).hexdigest()


def finalize_node(node: Node) -> Node:
    return node.model_copy(update={"content_digest": calculate_content_digest(node)})


def rename_restricted_fields(
    fields: Dict[str, Any],
    restricted_field_names: Sequence[str],
    conflict_prefix: str,
) -> Dict[str, Any]:
    renamed: Dict[str, Any] = {}
    for name, value in fields.items():
        if name in restricted_field_names:
            name = f"{conflict_prefix}{name}"
        renamed[name] = value
    return renamed


def _resolve_link(
    value: Any,
    field: FieldSchema,
    owner: ContentTypeSchema,
    source_id: str,
    locale: Locale,
    default_locale_code: str,
    resolvable: AbstractSet[str],
    blank_cache: BlankEntryCache,
    diagnostics: Diagnostics,
) -> Any:
    raw_target = link_target_id(value)
    if raw_target is None:
        return value
    target_id = make_id(raw_target, default_locale_code, locale.code)
    if target_id in resolvable:
        return target_id
    diagnostics.unresolved_reference(source_id, field.id, target_id)
    return blank_cache.blank_link_target(field, owner.id)


def _resolve_link_field(value: Any, field: FieldSchema, owner: ContentTypeSchema, **context) -> Any:
    if field.type == FieldType.LINK:
        return _resolve_link(value, field, owner, **context)
    item_field = field.items.model_copy(update={"id": field.id})
    items = value if isinstance(value, list) else [value]
    return [_resolve_link(item, item_field, owner, **context) for item in items]


def create_content_type_nodes(
    content_type: ContentTypeSchema,
    entries: Sequence[RawEntry],
    blank_cache: BlankEntryCache,
    resolvable: AbstractSet[str],
    foreign_references: ForeignReferenceMap,
    default_locale_code: str,
    locales: Sequence[Locale],
    diagnostics: Diagnostics,
    create_node: Optional[NodeCallback] = None,
    restricted_field_names: Sequence[str] = RESTRICTED_NODE_FIELDS,
    conflict_prefix: str = "contentful",
) -> List[Node]:
    """
    Materialize one node per (entry, locale) for a content type.

    The content type's own blank entry is synthesized first, so a malformed
    schema aborts the whole content type before any node is emitted.

    Raises:
        MalformedSchemaError: if the content type (or a content type it links
            to) has no uniform blank shape
    """
    blank_cache.get(content_type.id)

    locales_by_code = {locale.code: locale for locale in locales}
    type_name = make_type_name(content_type.label)
    parent_id = content_type_node_id(content_type.id)
    nodes: List[Node] = []

    for entry in entries:
        for locale in locales:
            node_id = make_id(entry.id, default_locale_code, locale.code)
            fields: Dict[str, Any] = {}

            for field_id, localized in entry.fields.items():
                value = resolve_localized_field(localized, default_locale_code, locale, locales_by_code)
                if value is None:
                    continue
                field = content_type.get_field(field_id)
                if field is not None and field.is_link:
                    value = _resolve_link_field(
                        value,
                        field,
                        content_type,
                        source_id=node_id,
                        locale=locale,
                        default_locale_code=default_locale_code,
                        resolvable=resolvable,
                        blank_cache=blank_cache,
                        diagnostics=diagnostics,
                    )
                fields[field_id] = value

            node = finalize_node(Node(
                id=node_id,
                raw_id=entry.id,
                content_type=content_type.id,
                locale=locale.code,
                internal_type=type_name,
                parent=parent_id,
                space_id=entry.space_id,
                revision=entry.revision,
                created_at=entry.created_at,
                updated_at=entry.updated_at,
                fields=rename_restricted_fields(fields, restricted_field_names, conflict_prefix),
                reverse_links=attach_reverse_links({}, foreign_references.edges_for(node_id)),
            ))
            if create_node is not None:
                create_node(node)
            nodes.append(node)

    diagnostics.logger.info(f"Created {len(nodes)} nodes for content type {content_type.id}")
    return nodes


def create_content_type_node(
    content_type: ContentTypeSchema,
    entry_node_ids: Sequence[str],
    default_locale_code: str,
    create_node: Optional[NodeCallback] = None,
) -> Node:
    """Node describing a content type itself; parent of that type's entry nodes."""
    node = finalize_node(Node(
        id=content_type_node_id(content_type.id),
        raw_id=content_type.id,
        locale=default_locale_code,
        internal_type=CONTENT_TYPE_TYPE_NAME,
        space_id=content_type.space_id,
        children=list(entry_node_ids),
        fields={
            "name": content_type.label,
            "displayField": content_type.display_field,
            "description": content_type.description or "",
        },
    ))
    if create_node is not None:
        create_node(node)
    return node


def create_asset_nodes(
    asset: RawAsset,
    default_locale_code: str,
    locales: Sequence[Locale],
    create_node: Optional[NodeCallback] = None,
) -> List[Node]:
    """Materialize one node per locale for an asset. Assets carry no links."""
    locales_by_code = {locale.code: locale for locale in locales}
    nodes: List[Node] = []

    for locale in locales:
        fields = {}
        for field_id, localized in asset.fields.items():
            value = resolve_localized_field(localized, default_locale_code, locale, locales_by_code)
            if value is not None:
                fields[field_id] = value

        node = finalize_node(Node(
            id=make_id(asset.id, default_locale_code, locale.code),
            raw_id=asset.id,
            locale=locale.code,
            internal_type=ASSET_TYPE_NAME,
            space_id=asset.space_id,
            revision=asset.revision,
            created_at=asset.created_at,
            updated_at=asset.updated_at,
            fields=fields,
        ))
        if create_node is not None:
            create_node(node)
        nodes.append(node)

    return nodes

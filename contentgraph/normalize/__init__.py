"""Normalization and reference resolution engine."""

from .ids import content_type_node_id, fix_id, make_id, make_type_name
from .locales import LocaleSet, resolve_localized_field
from .grouping import UnknownContentTypePolicy, build_entry_list
from .resolvable import build_resolvable_set
from .blanks import BlankEntryCache
from .references import (
    ForeignReferenceMap,
    attach_reverse_links,
    build_foreign_reference_map,
    reverse_field_name,
)
from .materializer import (
    RESTRICTED_NODE_FIELDS,
    create_asset_nodes,
    create_content_type_node,
    create_content_type_nodes,
)

__all__ = [
    "content_type_node_id",
    "fix_id",
    "make_id",
    "make_type_name",
    "LocaleSet",
    "resolve_localized_field",
    "UnknownContentTypePolicy",
    "build_entry_list",
    "build_resolvable_set",
    "BlankEntryCache",
    "ForeignReferenceMap",
    "attach_reverse_links",
    "build_foreign_reference_map",
    "reverse_field_name",
    "RESTRICTED_NODE_FIELDS",
    "create_asset_nodes",
    "create_content_type_node",
    "create_content_type_nodes"
]

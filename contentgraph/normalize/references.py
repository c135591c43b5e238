"""
Reverse edge index.

Scans every link field of this run's entries and records, for each
resolvable target, which source nodes point at it and under which
back-reference field name.
"""

from collections import OrderedDict
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from ..diagnostics import Diagnostics
from ..models import ContentTypeSchema, Locale, RawEntry, ReverseEdge
from .ids import camel_case, make_id
from .locales import resolve_localized_field

REVERSE_FIELD_SUFFIX = "___NODE"


def reverse_field_name(content_type: ContentTypeSchema) -> str:
    """Back-reference field a target node gets for links from ``content_type``."""
    return f"{camel_case(content_type.label)}{REVERSE_FIELD_SUFFIX}"


def link_target_id(value: Any) -> Optional[str]:
    """Raw ID of a link value (``{"sys": {"type": "Link", "id": ...}}``), if it is one."""
    if not isinstance(value, Mapping):
        return None
    sys = value.get("sys")
    if not isinstance(sys, Mapping) or sys.get("type") != "Link":
        return None
    return sys.get("id")


def iter_link_ids(value: Any) -> Iterator[str]:
    """Raw target IDs referenced by a localized value of a link field."""
    values = value if isinstance(value, list) else [value]
    for item in values:
        target_id = link_target_id(item)
        if target_id:
            yield target_id


class ForeignReferenceMap:
    """
    Target node ID -> ordered, de-duplicated reverse edges.

    An edge is identified by (target, field name, source); adding the same
    edge again is a no-op.
    """

    def __init__(self):
        self._edges: Dict[str, "OrderedDict[tuple, ReverseEdge]"] = {}

    def add(self, edge: ReverseEdge) -> bool:
        edges = self._edges.setdefault(edge.target_id, OrderedDict())
        key = (edge.source_field_name, edge.source_id)
        if key in edges:
            return False
        edges[key] = edge
        return True

    def edges_for(self, target_id: str) -> List[ReverseEdge]:
        return list(self._edges.get(target_id, {}).values())

    def target_ids(self) -> List[str]:
        return list(self._edges)

    def __contains__(self, target_id: str) -> bool:
        return target_id in self._edges

    def __len__(self) -> int:
        return len(self._edges)

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {
            target: [{"name": e.source_field_name, "id": e.source_id} for e in edges.values()]
            for target, edges in self._edges.items()
        }


def attach_reverse_links(
    reverse_links: Mapping[str, List[str]],
    edges: Iterable[ReverseEdge],
) -> Dict[str, List[str]]:
    """
    Merge reverse edges into a node's back-reference lists.

    Returns a new mapping; lists are created on first use and keep each
    source ID once, in first-seen order.
    """
    merged: Dict[str, List[str]] = {name: list(ids) for name, ids in reverse_links.items()}
    for edge in edges:
        ids = merged.setdefault(edge.source_field_name, [])
        if edge.source_id not in ids:
            ids.append(edge.source_id)
    return merged


def build_foreign_reference_map(
    content_types: Sequence[ContentTypeSchema],
    grouped_entries: Sequence[Sequence[RawEntry]],
    resolvable: Iterable[str],
    default_locale_code: str,
    locales: Sequence[Locale],
    diagnostics: Diagnostics,
) -> ForeignReferenceMap:
    """
    Build the reverse edge index for every entry in every locale.

    Links whose target is not resolvable are left out; the materializer
    substitutes a blank entry for them instead.
    """
    resolvable_ids = resolvable if isinstance(resolvable, (set, frozenset)) else frozenset(resolvable)
    locales_by_code = {locale.code: locale for locale in locales}
    foreign_references = ForeignReferenceMap()

    for content_type, entries in zip(content_types, grouped_entries):
        field_name = reverse_field_name(content_type)
        link_fields = [field for field in content_type.fields if field.is_link]
        if not link_fields:
            continue

        for entry in entries:
            for locale in locales:
                source_id = make_id(entry.id, default_locale_code, locale.code)
                for field in link_fields:
                    localized = entry.fields.get(field.id)
                    if not localized:
                        continue
                    value = resolve_localized_field(
                        localized, default_locale_code, locale, locales_by_code
                    )
                    for raw_target in iter_link_ids(value):
                        target_id = make_id(raw_target, default_locale_code, locale.code)
                        if target_id not in resolvable_ids:
                            continue
                        foreign_references.add(ReverseEdge(
                            target_id=target_id,
                            source_field_name=field_name,
                            source_id=source_id,
                        ))

    diagnostics.logger.info(f"Built reverse edges for {len(foreign_references)} target nodes")
    return foreign_references

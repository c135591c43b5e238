"""
Node models for contentgraph.

A Node is the finalized output of normalization: one per (record, locale).
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ReverseEdge(BaseModel):
    """An implicit back-reference from a linking record to its target."""

    target_id: str
    source_field_name: str
    source_id: str


class Node(BaseModel):
    """
    A materialized, locale-specific record.

    ``fields`` holds localized content (with resolved link IDs or blank
    entries); ``reverse_links`` maps a back-reference field name to the IDs
    of nodes that link here.
    """

    id: str = Field(..., description="Locale-qualified, identifier-safe node ID")
    raw_id: str = Field(..., description="ID of the remote record this node was built from")
    content_type: Optional[str] = None
    locale: str
    internal_type: str
    parent: Optional[str] = None
    children: List[str] = Field(default_factory=list)
    space_id: Optional[str] = None
    revision: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    fields: Dict[str, Any] = Field(default_factory=dict)
    reverse_links: Dict[str, List[str]] = Field(default_factory=dict)
    content_digest: str = ""

    def to_record(self) -> Dict[str, Any]:
        """Flatten into the shape the host node store exposes."""
        record: Dict[str, Any] = dict(self.fields)
        for name, ids in self.reverse_links.items():
            record[name] = list(ids)
        # Node metadata takes precedence over same-named content fields
        record.update({
            "id": self.id,
            "parent": self.parent,
            "children": list(self.children),
            "contentful_id": self.raw_id,
            "node_locale": self.locale,
            "spaceId": self.space_id,
            "revision": self.revision,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        })
        record["internal"] = {
            "type": self.internal_type,
            "contentDigest": self.content_digest,
        }
        return record

"""Data models for contentgraph."""

from .schema import ContentTypeSchema, FieldSchema, FieldType, LinkType, Locale
from .records import BlankEntry, DeletedRecord, DeltaSync, RawAsset, RawEntry
from .nodes import Node, ReverseEdge

__all__ = [
    "ContentTypeSchema",
    "FieldSchema",
    "FieldType",
    "LinkType",
    "Locale",
    "BlankEntry",
    "DeletedRecord",
    "DeltaSync",
    "RawAsset",
    "RawEntry",
    "Node",
    "ReverseEdge"
]

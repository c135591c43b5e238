"""
contentgraph: normalizes delta-synced content into a cross-referenced node graph.

Groups synced entries by content type, resolves links between them (with
blank placeholders for missing targets), localizes fields along fallback
chains and emits one node per record and locale.
"""

__version__ = "0.1.0"
__author__ = "contentgraph Project"

# Import main components
from .diagnostics import Diagnostics
from .models import ContentTypeSchema, DeltaSync, FieldSchema, Locale, Node, RawAsset, RawEntry
from .pipeline import SyncPipeline, SyncResult
from .sources import BaseSyncSource, MockSource, SnapshotSource
from .store import NodeStore

__all__ = [
    "Diagnostics",
    "ContentTypeSchema",
    "DeltaSync",
    "FieldSchema",
    "Locale",
    "Node",
    "RawAsset",
    "RawEntry",
    "SyncPipeline",
    "SyncResult",
    "BaseSyncSource",
    "MockSource",
    "SnapshotSource",
    "NodeStore"
]

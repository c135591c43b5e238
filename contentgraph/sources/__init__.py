"""Sync sources that hand delta syncs to the engine."""

from .base import BaseSyncSource
from .mock import MockSource
from .snapshot import SnapshotSource

__all__ = ["BaseSyncSource", "MockSource", "SnapshotSource"]

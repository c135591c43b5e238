"""
Base sync source interface for contentgraph.

This module defines the abstract interface every content source must
implement. Fetching, paging and authentication live behind it.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import ContentTypeSchema, DeltaSync, Locale


class BaseSyncSource(ABC):
    """
    Abstract base class for all sync sources.

    A source hands over the records changed since a cursor, together with
    the content type schemas and locales of the space.
    """

    @property
    @abstractmethod
    def source_key(self) -> str:
        """Stable key the sync cursor of this source is stored under."""
        pass

    @abstractmethod
    def get_delta_sync(self, cursor: Optional[str] = None) -> DeltaSync:
        """
        Retrieve records created, updated or deleted since ``cursor``.

        Args:
            cursor: Opaque cursor returned by the previous run, or None for
                an initial sync

        Returns:
            DeltaSync with the changed records and the next cursor
        """
        pass

    @abstractmethod
    def get_content_types(self) -> List[ContentTypeSchema]:
        """Retrieve all content type schemas, in a stable order."""
        pass

    @abstractmethod
    def get_locales(self) -> List[Locale]:
        """Retrieve the configured locales; exactly one is the default."""
        pass

"""
Snapshot sync source for contentgraph.

Reads a JSON file holding a sync API response (``currentSyncData``,
``contentTypeItems``, ``locales``, ``defaultLocale``) and converts the wire
items into models.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models import ContentTypeSchema, DeltaSync, Locale
from .base import BaseSyncSource


class SnapshotSource(BaseSyncSource):
    """
    Sync source backed by a JSON snapshot file.

    A snapshot is a complete answer; the cursor passed in is ignored and the
    snapshot's own ``nextSyncToken`` is handed back.
    """

    def __init__(self, snapshot_path: str, space_id: Optional[str] = None, host: str = "cdn.contentful.com"):
        self.snapshot_path = Path(snapshot_path)
        self.space_id = space_id
        self.host = host
        self._payload: Optional[Dict[str, Any]] = None

        logging.info(f"Initialized snapshot source for: {self.snapshot_path}")

    @property
    def source_key(self) -> str:
        return f"{self.space_id or self.snapshot_path.stem}@{self.host}"

    def _load(self) -> Dict[str, Any]:
        if self._payload is None:
            if not self.snapshot_path.is_file():
                raise FileNotFoundError(f"Snapshot file not found: {self.snapshot_path}")
            with open(self.snapshot_path, "r", encoding="utf-8") as f:
                self._payload = json.load(f)
            logging.info(f"Loaded snapshot from {self.snapshot_path}")
        return self._payload

    def get_delta_sync(self, cursor: Optional[str] = None) -> DeltaSync:
        if cursor:
            logging.info(f"Snapshot source ignores stored cursor {cursor}")
        return DeltaSync.from_api(self._load().get("currentSyncData", {}))

    def get_content_types(self) -> List[ContentTypeSchema]:
        return [ContentTypeSchema.from_api(item) for item in self._load().get("contentTypeItems", [])]

    def get_locales(self) -> List[Locale]:
        payload = self._load()
        locales = [Locale.model_validate(item) for item in payload.get("locales", [])]
        default_code = payload.get("defaultLocale")
        if default_code and not any(locale.is_default for locale in locales):
            locales = [
                locale.model_copy(update={"is_default": locale.code == default_code})
                for locale in locales
            ]
        return locales

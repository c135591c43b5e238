"""
Raw record models for contentgraph.

These mirror the records a delta sync hands over: entries and assets whose
fields map a field ID to a per-locale value map.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _sys_link_id(sys: Dict[str, Any], key: str) -> Optional[str]:
    return sys.get(key, {}).get("sys", {}).get("id")


class RawEntry(BaseModel):
    """An entry as delivered by the sync API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Remote record ID")
    space_id: Optional[str] = Field(None, alias="spaceId")
    content_type_id: str = Field(..., alias="contentTypeId")
    revision: int = 0
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")
    fields: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Field ID -> locale code -> value"
    )

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "RawEntry":
        sys = item.get("sys", {})
        return cls(
            id=sys["id"],
            space_id=_sys_link_id(sys, "space"),
            content_type_id=_sys_link_id(sys, "contentType") or "",
            revision=sys.get("revision", 0),
            created_at=sys.get("createdAt"),
            updated_at=sys.get("updatedAt"),
            fields=item.get("fields", {}),
        )


class RawAsset(BaseModel):
    """An asset; its localized fields carry title, description and file metadata."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    space_id: Optional[str] = Field(None, alias="spaceId")
    revision: int = 0
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")
    fields: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "RawAsset":
        sys = item.get("sys", {})
        return cls(
            id=sys["id"],
            space_id=_sys_link_id(sys, "space"),
            revision=sys.get("revision", 0),
            created_at=sys.get("createdAt"),
            updated_at=sys.get("updatedAt"),
            fields=item.get("fields", {}),
        )


class DeletedRecord(BaseModel):
    id: str

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "DeletedRecord":
        return cls(id=item.get("sys", {}).get("id", item.get("id")))


class DeltaSync(BaseModel):
    """One incremental sync result: created/updated and deleted records."""

    model_config = ConfigDict(populate_by_name=True)

    entries: List[RawEntry] = Field(default_factory=list)
    assets: List[RawAsset] = Field(default_factory=list)
    deleted_entries: List[DeletedRecord] = Field(default_factory=list, alias="deletedEntries")
    deleted_assets: List[DeletedRecord] = Field(default_factory=list, alias="deletedAssets")
    next_sync_cursor: Optional[str] = Field(None, alias="nextSyncCursor")

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "DeltaSync":
        """Build from the sync API payload (``nextSyncToken`` is the cursor)."""
        return cls(
            entries=[RawEntry.from_api(e) for e in payload.get("entries", [])],
            assets=[RawAsset.from_api(a) for a in payload.get("assets", [])],
            deleted_entries=[DeletedRecord.from_api(d) for d in payload.get("deletedEntries", [])],
            deleted_assets=[DeletedRecord.from_api(d) for d in payload.get("deletedAssets", [])],
            next_sync_cursor=payload.get("nextSyncToken", payload.get("nextSyncCursor")),
        )


class BlankEntry(BaseModel):
    """
    Schema-shaped placeholder for a content type.

    Field values are plain defaults, other BlankEntry instances for nested
    Entry links, or lists of those. Unlike a RawEntry the fields are not
    keyed by locale.
    """

    id: str
    content_type_id: Optional[str] = None
    space_id: Optional[str] = None
    revision: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    fields: Dict[str, Any] = Field(default_factory=dict)

    def to_value(self) -> Dict[str, Any]:
        """Plain value substituted into a node field in place of a missing link."""
        value: Dict[str, Any] = {"id": self.id, "type": "Entry", "fields": {}}
        if self.content_type_id:
            value["contentType"] = self.content_type_id
        for key, field_value in self.fields.items():
            value["fields"][key] = _plain(field_value)
        return value


def _plain(value: Any) -> Any:
    if isinstance(value, BlankEntry):
        return value.to_value()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return dict(value)
    return value

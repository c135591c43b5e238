"""
Content type schema models for contentgraph.

These describe the shape every entry of a content type must expose. Field
types form a closed enum so that an unknown type string fails validation
when a schema is loaded instead of falling through silently later on.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldType(str, Enum):
    """Every field type a content type schema may declare."""

    SYMBOL = "Symbol"
    TEXT = "Text"
    DATE = "Date"
    NUMBER = "Number"
    INTEGER = "Integer"
    BOOLEAN = "Boolean"
    LINK = "Link"
    ARRAY = "Array"
    OBJECT = "Object"
    LOCATION = "Location"
    MEDIA = "Media"
    REFERENCE = "Reference"


class LinkType(str, Enum):
    """What a Link field points at."""

    ENTRY = "Entry"
    ASSET = "Asset"


class FieldSchema(BaseModel):
    """
    Schema of a single content type field.

    ``items`` describes the element schema of an Array field. Linked content
    types may be given directly (``contentType``) or, as the remote API does,
    through a ``linkContentType`` validation.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field("", description="Field identifier, unique within its content type; empty for Array items")
    name: Optional[str] = Field(None, description="Human readable field name")
    type: FieldType = Field(..., description="Declared field type")
    link_type: Optional[LinkType] = Field(None, alias="linkType")
    content_type: Optional[str] = Field(
        None,
        alias="contentType",
        description="Target content type ID of an Entry link, when known"
    )
    items: Optional["FieldSchema"] = Field(None, description="Element schema for Array fields")
    validations: List[Dict[str, Any]] = Field(default_factory=list)
    localized: bool = False
    required: bool = False

    @property
    def is_link(self) -> bool:
        """True for Link fields and for Arrays whose items are Links."""
        if self.type == FieldType.LINK:
            return True
        return (
            self.type == FieldType.ARRAY
            and self.items is not None
            and self.items.type == FieldType.LINK
        )

    def linked_content_types(self) -> List[str]:
        """Content type IDs allowed by the first ``linkContentType`` validation."""
        for validation in self.validations:
            allowed = validation.get("linkContentType")
            if allowed:
                return list(allowed)
        return []

    def target_content_type(self) -> Optional[str]:
        """The single content type an Entry link resolves to, if it is unambiguous."""
        if self.content_type:
            return self.content_type
        allowed = self.linked_content_types()
        if len(allowed) == 1:
            return allowed[0]
        return None


FieldSchema.model_rebuild()


class ContentTypeSchema(BaseModel):
    """Shape definition for every entry of one content type."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    display_field: Optional[str] = Field(None, alias="displayField")
    description: Optional[str] = None
    space_id: Optional[str] = Field(None, alias="spaceId")
    fields: List[FieldSchema] = Field(default_factory=list)

    @property
    def label(self) -> str:
        return self.name or self.id

    def get_field(self, field_id: str) -> Optional[FieldSchema]:
        for field in self.fields:
            if field.id == field_id:
                return field
        return None

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "ContentTypeSchema":
        """Build a schema from a remote content type item (``sys`` + fields)."""
        sys = item.get("sys", {})
        space = sys.get("space", {}).get("sys", {})
        return cls(
            id=sys.get("id", item.get("id")),
            name=item.get("name"),
            display_field=item.get("displayField"),
            description=item.get("description"),
            space_id=space.get("id"),
            fields=item.get("fields", []),
        )


class Locale(BaseModel):
    """A configured locale; fallback chains terminate at the default locale."""

    model_config = ConfigDict(populate_by_name=True)

    code: str
    name: Optional[str] = None
    is_default: bool = Field(False, alias="default")
    fallback_code: Optional[str] = Field(None, alias="fallbackCode")

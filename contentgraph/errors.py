"""
Exception types raised by contentgraph.

Failures that only affect one entry (an unresolvable link, an entry of an
unknown content type) are absorbed by the engine; the exceptions below are
the ones that reach the caller.
"""

from typing import Optional


class ContentGraphError(Exception):
    """Base class for all contentgraph errors."""


class MalformedSchemaError(ContentGraphError):
    """A content type schema cannot be given a uniform blank shape."""

    def __init__(self, content_type_id: str, field_id: Optional[str], reason: str):
        self.content_type_id = content_type_id
        self.field_id = field_id
        self.reason = reason
        location = content_type_id if field_id is None else f"{content_type_id}.{field_id}"
        super().__init__(f"Malformed schema at {location}: {reason}")


class UnknownContentTypeError(ContentGraphError):
    """An entry names a content type that is not part of the schema set."""

    def __init__(self, entry_id: str, content_type_id: str):
        self.entry_id = entry_id
        self.content_type_id = content_type_id
        super().__init__(f"Entry {entry_id} has unknown content type '{content_type_id}'")


class LocaleConfigurationError(ContentGraphError):
    """The configured locales do not form a valid fallback setup."""

"""Node identifier helpers."""

import re
import string

ID_PREFIX = "c"
LOCALE_SEPARATOR = "___"
CONTENT_TYPE_ID_PREFIX = "contentType__"


def fix_id(raw_id: str) -> str:
    """Prefix IDs that start with a digit; they are reused as type and key names."""
    if raw_id and raw_id[0] in string.digits:
        return f"{ID_PREFIX}{raw_id}"
    return raw_id


def make_id(id: str, default_locale_code: str, current_locale_code: str) -> str:
    """
    Build the node ID of a record in a given locale.

    The default locale keeps the fixed raw ID; every other locale gets the
    locale code appended. All locale-qualified IDs must be built here.
    """
    node_id = fix_id(id)
    if current_locale_code == default_locale_code:
        return node_id
    return f"{node_id}{LOCALE_SEPARATOR}{current_locale_code}"


def camel_case(value: str) -> str:
    words = [w for w in re.split(r"[^0-9A-Za-z]+|(?<=[a-z0-9])(?=[A-Z])", value) if w]
    if not words:
        return ""
    head, rest = words[0].lower(), words[1:]
    return head + "".join(w[:1].upper() + w[1:].lower() for w in rest)


def make_type_name(name: str) -> str:
    """``blog post`` -> ``ContentfulBlogPost``."""
    type_name = camel_case(name)
    return f"Contentful{type_name[:1].upper()}{type_name[1:]}"


def content_type_node_id(content_type_id: str) -> str:
    return f"{CONTENT_TYPE_ID_PREFIX}{fix_id(content_type_id)}"

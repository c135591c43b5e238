"""Partition the delta sync's entries by content type."""

from enum import Enum
from typing import Dict, List, Sequence

from ..diagnostics import Diagnostics
from ..errors import UnknownContentTypeError
from ..models import ContentTypeSchema, DeltaSync, RawEntry


class UnknownContentTypePolicy(str, Enum):
    """What to do with an entry whose content type is not in the schema set."""

    DROP = "drop"
    FAIL = "fail"


def build_entry_list(
    delta_sync: DeltaSync,
    content_types: Sequence[ContentTypeSchema],
    diagnostics: Diagnostics,
    unknown_policy: UnknownContentTypePolicy = UnknownContentTypePolicy.DROP,
) -> List[List[RawEntry]]:
    """
    Group entries into one bucket per content type, in ``content_types`` order.

    Raises:
        UnknownContentTypeError: under the FAIL policy, for the first entry
            whose content type is unknown
    """
    buckets: List[List[RawEntry]] = [[] for _ in content_types]
    index: Dict[str, int] = {ct.id: i for i, ct in enumerate(content_types)}

    for entry in delta_sync.entries:
        position = index.get(entry.content_type_id)
        if position is None:
            if unknown_policy == UnknownContentTypePolicy.FAIL:
                raise UnknownContentTypeError(entry.id, entry.content_type_id)
            diagnostics.dropped_entry(entry.id, entry.content_type_id)
            continue
        buckets[position].append(entry)

    return buckets

"""
Diagnostics sink passed explicitly into every normalization call.

Engine code logs through the sink it is given rather than a module-level
logger, so a caller can route or silence one run without touching others.
"""

import logging
from typing import List, Optional, Tuple


class Diagnostics:
    """
    Collects what happened during one sync run.

    Args:
        logger: Logger to write to (defaults to the ``contentgraph`` logger)
        log_unresolved: Also log every link that fell back to a blank entry
    """

    def __init__(self, logger: Optional[logging.Logger] = None, log_unresolved: bool = False):
        self.logger = logger or logging.getLogger("contentgraph")
        self.log_unresolved = log_unresolved
        self.dropped_entries: List[Tuple[str, str]] = []
        self.unresolved_references = 0
        self.schema_failures: List[str] = []

    def dropped_entry(self, entry_id: str, content_type_id: str) -> None:
        self.dropped_entries.append((entry_id, content_type_id))
        self.logger.warning(
            f"Dropping entry {entry_id}: unknown content type '{content_type_id}'"
        )

    def unresolved_reference(self, source_id: str, field_id: str, target_id: str) -> None:
        self.unresolved_references += 1
        if self.log_unresolved:
            self.logger.debug(
                f"Link {source_id}.{field_id} -> {target_id} is not resolvable, using blank entry"
            )

    def schema_failure(self, content_type_id: str, error: Exception) -> None:
        self.schema_failures.append(content_type_id)
        self.logger.error(f"Skipping nodes of content type {content_type_id}: {error}")

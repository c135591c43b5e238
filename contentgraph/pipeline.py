"""
Sync run orchestration.

One run fetches a delta sync, removes deleted records, normalizes the
changed ones into nodes and stores them together with the next cursor.
The engine steps run in a fixed order: grouping, resolvable set, reverse
edge index, then materialization.
"""

from typing import AbstractSet, Dict, List, Optional, Sequence, Set

from pydantic import BaseModel, Field

from .config import NormalizeSettings
from .diagnostics import Diagnostics
from .errors import MalformedSchemaError
from .models import ContentTypeSchema, DeltaSync, Locale, Node, RawEntry, ReverseEdge
from .normalize import (
    BlankEntryCache,
    ForeignReferenceMap,
    LocaleSet,
    attach_reverse_links,
    build_entry_list,
    build_foreign_reference_map,
    build_resolvable_set,
    create_asset_nodes,
    create_content_type_node,
    create_content_type_nodes,
    make_id,
)
from .normalize.ids import content_type_node_id
from .normalize.materializer import ASSET_TYPE_NAME, finalize_node
from .sources import BaseSyncSource
from .store import NodeStore


class SyncResult(BaseModel):
    """Summary of one sync run."""

    created_nodes: int = 0
    deleted_nodes: int = 0
    relinked_nodes: int = 0
    dropped_entries: List[str] = Field(default_factory=list)
    failed_content_types: Dict[str, str] = Field(default_factory=dict)
    unresolved_references: int = 0
    next_sync_cursor: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return not self.failed_content_types


class SyncPipeline:
    """
    Runs delta syncs from a source into a node store.

    Args:
        source: Where changed records come from
        store: Where nodes and the sync cursor are kept (must be connected)
        settings: Normalization settings
        diagnostics: Sink for this run's logging and counters
    """

    def __init__(
        self,
        source: BaseSyncSource,
        store: NodeStore,
        settings: Optional[NormalizeSettings] = None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self.source = source
        self.store = store
        self.settings = settings or NormalizeSettings()
        self.diagnostics = diagnostics or Diagnostics(
            log_unresolved=self.settings.log_unresolved_references
        )
        self.emitted: List[Node] = []

    def _create_node(self, node: Node) -> None:
        self.store.create_node(node)
        self.emitted.append(node)

    def run(self) -> SyncResult:
        """
        Execute one sync run.

        Raises:
            LocaleConfigurationError: if the source's locales are invalid
            UnknownContentTypeError: under the ``fail`` policy
        """
        logger = self.diagnostics.logger
        result = SyncResult()
        self.emitted = []

        cursor = self.store.get_sync_cursor(self.source.source_key)
        logger.info(f"Starting {'incremental' if cursor else 'initial'} sync for {self.source.source_key}")

        delta = self.source.get_delta_sync(cursor)
        content_types = self.source.get_content_types()
        locale_set = LocaleSet(self.source.get_locales())
        default_code = locale_set.default_code
        locales = locale_set.locales

        logger.info(f"Updated entries {len(delta.entries)}")
        logger.info(f"Deleted entries {len(delta.deleted_entries)}")
        logger.info(f"Updated assets {len(delta.assets)}")
        logger.info(f"Deleted assets {len(delta.deleted_assets)}")

        grouped = build_entry_list(
            delta, content_types, self.diagnostics, self.settings.unknown_content_types
        )

        # Deletions must be applied before the resolvable set is built
        deleted_nodes: List[Node] = []
        for deleted in delta.deleted_entries + delta.deleted_assets:
            deleted_nodes.extend(self.store.delete_nodes_for_record(deleted.id))
        result.deleted_nodes = len(deleted_nodes)

        existing_ids = self.store.existing_node_ids()
        stale_targets = _link_targets(deleted_nodes, existing_ids)
        resolvable = build_resolvable_set(
            existing_ids, grouped, delta.assets, default_code, locales
        )
        foreign_references = build_foreign_reference_map(
            content_types, grouped, resolvable, default_code, locales, self.diagnostics
        )
        self._carry_over_reverse_edges(delta, grouped, foreign_references, existing_ids, default_code, locales)

        blank_cache = BlankEntryCache(content_types)
        materialized: Set[str] = set()

        for content_type, entries in zip(content_types, grouped):
            try:
                nodes = create_content_type_nodes(
                    content_type,
                    entries,
                    blank_cache,
                    resolvable,
                    foreign_references,
                    default_code,
                    locales,
                    self.diagnostics,
                    create_node=self._create_node,
                    conflict_prefix=self.settings.conflict_prefix,
                )
            except MalformedSchemaError as e:
                self.diagnostics.schema_failure(content_type.id, e)
                result.failed_content_types[content_type.id] = str(e)
                continue
            materialized.update(node.id for node in nodes)
            self._update_content_type_node(content_type, nodes, default_code)

        result.relinked_nodes = self._relink_existing_nodes(
            foreign_references, existing_ids, materialized,
            deleted_ids={node.id for node in deleted_nodes},
            stale_targets=stale_targets,
        )

        for asset in delta.assets:
            create_asset_nodes(asset, default_code, locales, create_node=self._create_node)

        result.next_sync_cursor = delta.next_sync_cursor
        if delta.next_sync_cursor and self.settings.stores_sync_cursor:
            self.store.save_sync_cursor(self.source.source_key, delta.next_sync_cursor)
        elif not self.settings.stores_sync_cursor:
            logger.info(f"Not storing sync cursor for preview host {self.settings.host}")

        result.created_nodes = len(self.emitted)
        result.dropped_entries = [entry_id for entry_id, _ in self.diagnostics.dropped_entries]
        result.unresolved_references = self.diagnostics.unresolved_references
        logger.info(
            f"Sync finished: {result.created_nodes} nodes written, "
            f"{result.deleted_nodes} deleted, {result.relinked_nodes} relinked"
        )
        return result

    def _update_content_type_node(self, content_type: ContentTypeSchema, nodes: Sequence[Node], default_code: str) -> None:
        # Keep children from earlier runs; their entries are still stored
        node_id = content_type_node_id(content_type.id)
        previous = self.store.get_node(node_id)
        children = list(previous.children) if previous else []
        existing = self.store.existing_node_ids()
        children = [child for child in children if child in existing]
        for node in nodes:
            if node.id not in children:
                children.append(node.id)
        create_content_type_node(content_type, children, default_code, create_node=self._create_node)

    def _carry_over_reverse_edges(
        self,
        delta: DeltaSync,
        grouped: Sequence[Sequence[RawEntry]],
        foreign_references: ForeignReferenceMap,
        existing_ids: Set[str],
        default_code: str,
        locales: Sequence[Locale],
    ) -> None:
        """
        Keep back-references stored on nodes that are rebuilt in this run.

        Edges whose source is rebuilt or deleted in this run are recomputed
        from scratch, so only edges from untouched sources are carried over.
        """
        touched_sources: Set[str] = set()
        for raw_id in [e.id for entries in grouped for e in entries] + [d.id for d in delta.deleted_entries]:
            for locale in locales:
                touched_sources.add(make_id(raw_id, default_code, locale.code))

        for entries in grouped:
            for entry in entries:
                for locale in locales:
                    node_id = make_id(entry.id, default_code, locale.code)
                    if node_id not in existing_ids:
                        continue
                    previous = self.store.get_node(node_id)
                    if previous is None:
                        continue
                    for name, source_ids in previous.reverse_links.items():
                        for source_id in source_ids:
                            if source_id in touched_sources:
                                continue
                            foreign_references.add(ReverseEdge(
                                target_id=node_id,
                                source_field_name=name,
                                source_id=source_id,
                            ))

    def _relink_existing_nodes(
        self,
        foreign_references: ForeignReferenceMap,
        existing_ids: Set[str],
        materialized: Set[str],
        deleted_ids: AbstractSet[str] = frozenset(),
        stale_targets: Sequence[str] = (),
    ) -> int:
        """
        Re-emit stored nodes that were not rebuilt but whose back-references changed.

        A node changes when it gains edges in this run, or when it was linked
        from a node deleted in this run; deleted sources are pruned from its
        back-reference lists, and lists left empty are dropped.
        """
        relinked = 0
        target_ids = foreign_references.target_ids()
        target_ids += [target_id for target_id in stale_targets if target_id not in foreign_references]
        for target_id in target_ids:
            if target_id in materialized or target_id not in existing_ids:
                continue
            previous = self.store.get_node(target_id)
            if previous is None or previous.internal_type == ASSET_TYPE_NAME:
                continue
            kept = {}
            for name, source_ids in previous.reverse_links.items():
                remaining = [source_id for source_id in source_ids if source_id not in deleted_ids]
                if remaining:
                    kept[name] = remaining
            reverse_links = attach_reverse_links(kept, foreign_references.edges_for(target_id))
            if reverse_links == previous.reverse_links:
                continue
            self._create_node(finalize_node(previous.model_copy(update={"reverse_links": reverse_links})))
            relinked += 1
        return relinked


def _link_targets(nodes: Sequence[Node], existing_ids: Set[str]) -> List[str]:
    """Stored node IDs that ``nodes`` held as resolved link values, in first-seen order."""
    targets: List[str] = []
    for node in nodes:
        for value in node.fields.values():
            for item in value if isinstance(value, list) else [value]:
                if isinstance(item, str) and item in existing_ids and item not in targets:
                    targets.append(item)
    return targets

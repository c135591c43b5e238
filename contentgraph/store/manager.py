"""
Node store for contentgraph.

This module persists materialized nodes and sync cursors using DuckDB.
"""

import json
import logging
from datetime import datetime
from typing import List, Optional, Set

import duckdb

from ..models import Node


class NodeStore:
    """
    Manages the DuckDB database holding nodes and sync state between runs.
    """

    def __init__(self, db_path: str = "contentgraph.db"):
        """
        Initialize the node store.

        Args:
            db_path: Path to the DuckDB database file (``:memory:`` for a
                throwaway store)
        """
        self.db_path = db_path
        self.connection = None

    def connect(self):
        """Establish connection to the database."""
        self.connection = duckdb.connect(self.db_path)

    def disconnect(self):
        """Close the database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        self.initialize_database()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def _require_connection(self):
        if not self.connection:
            raise RuntimeError("Database connection not established")
        return self.connection

    def initialize_database(self):
        """
        Create all necessary tables if they don't exist.
        """
        connection = self._require_connection()

        connection.execute("""
            CREATE TABLE IF NOT EXISTS nodes (
                node_id VARCHAR PRIMARY KEY,
                raw_id VARCHAR NOT NULL,
                locale VARCHAR NOT NULL,
                content_type VARCHAR,
                internal_type VARCHAR NOT NULL,
                content_digest VARCHAR NOT NULL,
                body TEXT NOT NULL,
                stored_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        connection.execute("""
            CREATE TABLE IF NOT EXISTS sync_state (
                source_key VARCHAR PRIMARY KEY,
                sync_cursor VARCHAR,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def create_node(self, node: Node) -> None:
        """
        Insert a node, replacing any stored node with the same ID.

        Args:
            node: The node to store
        """
        connection = self._require_connection()
        connection.execute("""
            INSERT OR REPLACE INTO nodes
                (node_id, raw_id, locale, content_type, internal_type, content_digest, body, stored_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, [
            node.id,
            node.raw_id,
            node.locale,
            node.content_type,
            node.internal_type,
            node.content_digest,
            json.dumps(node.model_dump(), ensure_ascii=False, default=str),
            datetime.now(),
        ])

    def get_node(self, node_id: str) -> Optional[Node]:
        """
        Retrieve a stored node by ID.

        Returns:
            The node if found, None otherwise
        """
        connection = self._require_connection()
        result = connection.execute(
            "SELECT body FROM nodes WHERE node_id = ?", [node_id]
        ).fetchone()
        if result:
            return Node.model_validate(json.loads(result[0]))
        return None

    def delete_node(self, node_id: str) -> bool:
        """
        Delete one node.

        Returns:
            True if a node was deleted
        """
        connection = self._require_connection()
        existed = connection.execute(
            "SELECT COUNT(*) FROM nodes WHERE node_id = ?", [node_id]
        ).fetchone()[0]
        connection.execute("DELETE FROM nodes WHERE node_id = ?", [node_id])
        return existed > 0

    def delete_nodes_for_record(self, raw_id: str) -> List[Node]:
        """
        Delete the nodes of a remote record in every locale.

        Returns:
            The nodes that were deleted, as they were stored
        """
        connection = self._require_connection()
        rows = connection.execute(
            "SELECT body FROM nodes WHERE raw_id = ? ORDER BY node_id", [raw_id]
        ).fetchall()
        connection.execute("DELETE FROM nodes WHERE raw_id = ?", [raw_id])
        if rows:
            logging.info(f"Deleted {len(rows)} nodes of record {raw_id}")
        return [Node.model_validate(json.loads(row[0])) for row in rows]

    def existing_node_ids(self) -> Set[str]:
        """IDs of every node currently stored."""
        connection = self._require_connection()
        return {row[0] for row in connection.execute("SELECT node_id FROM nodes").fetchall()}

    def count_nodes(self, internal_type: Optional[str] = None) -> int:
        connection = self._require_connection()
        if internal_type:
            return connection.execute(
                "SELECT COUNT(*) FROM nodes WHERE internal_type = ?", [internal_type]
            ).fetchone()[0]
        return connection.execute("SELECT COUNT(*) FROM nodes").fetchone()[0]

    def get_sync_cursor(self, source_key: str) -> Optional[str]:
        """
        Get the cursor stored by the previous run of a source.

        Returns:
            The cursor, or None if the source never completed a sync
        """
        connection = self._require_connection()
        result = connection.execute(
            "SELECT sync_cursor FROM sync_state WHERE source_key = ?", [source_key]
        ).fetchone()
        return result[0] if result else None

    def save_sync_cursor(self, source_key: str, cursor: str) -> None:
        connection = self._require_connection()
        connection.execute("""
            INSERT OR REPLACE INTO sync_state (source_key, sync_cursor, updated_at)
            VALUES (?, ?, ?)
        """, [source_key, cursor, datetime.now()])

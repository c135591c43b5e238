#!/usr/bin/env python3
"""
contentgraph - Content Sync Normalizer

Main entry point. Runs one delta sync from a source into the node store and
optionally writes the emitted nodes to a JSON file.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from contentgraph.config import ConfigManager
from contentgraph.diagnostics import Diagnostics
from contentgraph.errors import ContentGraphError
from contentgraph.models import Node
from contentgraph.pipeline import SyncPipeline, SyncResult
from contentgraph.sources import BaseSyncSource, MockSource, SnapshotSource
from contentgraph.store import NodeStore


def setup_logging(config: ConfigManager, verbose: bool = False):
    """Configure logging for the application."""
    level_name = "DEBUG" if verbose else config.get("logging.level", "INFO")
    level = getattr(logging, level_name.upper())
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def create_source(source_name: str, config: ConfigManager, snapshot_path: str = None) -> BaseSyncSource:
    """
    Create the sync source selected on the command line.

    Args:
        source_name: "mock" or "snapshot"
        config: Loaded configuration
        snapshot_path: Overrides ``source.snapshot_path``
    """
    if source_name == "snapshot":
        return SnapshotSource(
            snapshot_path or config.snapshot_path,
            space_id=config.space_id,
            host=config.host,
        )
    return MockSource()


def save_nodes_to_json(nodes: List[Node], output_path: str):
    """
    Write emitted nodes, flattened to host records, to a JSON file.

    Args:
        nodes: Nodes emitted by the run
        output_path: Where to write the file
    """
    file_path = Path(output_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    records = [node.to_record() for node in nodes]
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(records, f, indent=2, ensure_ascii=False, default=str)
    logging.info(f"Wrote {len(records)} nodes to {file_path}")


def run_sync(args, config: ConfigManager) -> SyncResult:
    """Run one sync with the configured source and store."""
    settings = config.normalize_settings()
    diagnostics = Diagnostics(
        logger=logging.getLogger("contentgraph"),
        log_unresolved=settings.log_unresolved_references or args.verbose,
    )
    source = create_source(args.source, config, args.snapshot)

    with NodeStore(args.db or config.database_filename) as store:
        pipeline = SyncPipeline(source, store, settings, diagnostics)
        result = pipeline.run()

        output_path = args.output or config.output_filename
        if output_path:
            save_nodes_to_json(pipeline.emitted, output_path)

    return result


def parse_arguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="contentgraph - normalize a content delta sync into a node graph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                        # Sync the built-in mock space
  python main.py --source snapshot                      # Sync the snapshot from config.yaml
  python main.py --source snapshot --snapshot data.json --output nodes.json
        """
    )

    parser.add_argument(
        "--source",
        choices=["mock", "snapshot"],
        default="mock",
        help="Sync source to use (default: mock)"
    )

    parser.add_argument(
        "--snapshot",
        type=str,
        help="Path to a sync snapshot JSON file (snapshot source only)"
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to the configuration file"
    )

    parser.add_argument(
        "--db",
        type=str,
        help="Node store database file (overrides store.filename)"
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Write the nodes emitted by this run to a JSON file"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging, including every unresolved link"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="contentgraph 0.1.0"
    )

    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_arguments()
    config = ConfigManager(args.config)
    setup_logging(config, args.verbose)

    logging.info("contentgraph - Content Sync Normalizer")

    try:
        result = run_sync(args, config)
    except KeyboardInterrupt:
        logging.info("Sync interrupted by user")
        print("\nSync interrupted.")
        sys.exit(130)
    except (ContentGraphError, FileNotFoundError, ValueError) as e:
        logging.error(f"Sync failed: {e}")
        print(f"\nSync failed: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("SYNC COMPLETED" if result.succeeded else "SYNC COMPLETED WITH ERRORS")
    print("=" * 60)
    print(f"- Nodes written: {result.created_nodes}")
    print(f"- Nodes deleted: {result.deleted_nodes}")
    print(f"- Existing nodes relinked: {result.relinked_nodes}")
    print(f"- Unresolved links replaced by blank entries: {result.unresolved_references}")
    if result.dropped_entries:
        print(f"- Entries dropped (unknown content type): {', '.join(result.dropped_entries)}")
    for content_type_id, error in result.failed_content_types.items():
        print(f"- Content type {content_type_id} skipped: {error}")

    if not result.succeeded:
        sys.exit(1)


if __name__ == "__main__":
    main()

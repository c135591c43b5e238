"""Persistent node storage."""

from .manager import NodeStore

__all__ = ["NodeStore"]

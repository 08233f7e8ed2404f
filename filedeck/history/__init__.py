"""Application-private history blob storage."""

from __future__ import annotations

from .store import HistoryStore

__all__ = ["HistoryStore"]

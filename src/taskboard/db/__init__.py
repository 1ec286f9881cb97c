"""Persistence lifecycle helpers."""

from __future__ import annotations

from .connection import close_document_store, get_database, init_document_store, set_document_client

__all__ = [
    "close_document_store",
    "get_database",
    "init_document_store",
    "set_document_client",
]

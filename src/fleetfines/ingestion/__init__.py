"""Ingestion layer.

Parses untrusted records handed over by the document-extraction
collaborator and reconciles them into the store.
"""

__all__: list[str] = []

"""
Store backends - abstraction layer over hosted persistence.
"""

from .base import AnnotationStore, DocumentStore, MessageStore
from .memory import InMemoryAnnotationStore, InMemoryDocumentStore, InMemoryMessageStore
from .pymupdf import PdfSource

__all__ = [
    "AnnotationStore",
    "DocumentStore",
    "MessageStore",
    "InMemoryAnnotationStore",
    "InMemoryDocumentStore",
    "InMemoryMessageStore",
    "PdfSource",
]

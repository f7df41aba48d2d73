"""
Flet AI Tutor

Study PDFs with highlight/underline annotations and an AI tutor chat.

Usage:
    import flet as ft
    from flet_ai_tutor import InMemoryAnnotationStore, PdfSource, TutorViewer, DocumentContext

    async def main(page: ft.Page):
        pdf = PdfSource("/path/to/file.pdf")
        document = DocumentContext("doc-1", "/path/to/file.pdf", pdf.page_count)
        viewer = TutorViewer(InMemoryAnnotationStore(), document, pdf)
        page.add(viewer.control)
        await viewer.load()

    ft.app(main)
"""

from .annotations import AnnotationFlow
from .backends import (
    AnnotationStore,
    DocumentStore,
    InMemoryAnnotationStore,
    InMemoryDocumentStore,
    InMemoryMessageStore,
    MessageStore,
    PdfSource,
)
from .chat import ChatBackend, ChatSession, OpenAIChatBackend
from .config import Settings, configure_logging
from .errors import ChatError, ConfigError, DocumentError, StoreError, TutorError
from .interactions import SelectionEngine
from .session import DocumentSession
from .types import (
    Annotation,
    AnnotationDraft,
    AnnotationKind,
    ChatMessage,
    DocumentContext,
    Notification,
    NotificationLevel,
    Operation,
    OperationStatus,
    SelectionRect,
    SessionState,
)
from .viewer import TutorViewer

__version__ = "0.1.0"

__all__ = [
    "Annotation",
    "AnnotationDraft",
    "AnnotationFlow",
    "AnnotationKind",
    "AnnotationStore",
    "ChatBackend",
    "ChatError",
    "ChatMessage",
    "ChatSession",
    "ConfigError",
    "DocumentContext",
    "DocumentError",
    "DocumentSession",
    "DocumentStore",
    "InMemoryAnnotationStore",
    "InMemoryDocumentStore",
    "InMemoryMessageStore",
    "MessageStore",
    "Notification",
    "NotificationLevel",
    "OpenAIChatBackend",
    "Operation",
    "OperationStatus",
    "PdfSource",
    "SelectionEngine",
    "SelectionRect",
    "SessionState",
    "Settings",
    "StoreError",
    "TutorError",
    "TutorViewer",
    "configure_logging",
    "__version__",
]

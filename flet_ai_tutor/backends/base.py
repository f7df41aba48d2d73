"""
Abstract store protocols for hosted persistence.

Backends must implement these protocols to work with the viewer and chat.
All methods are coroutines and raise StoreError on any failure.
"""

from abc import ABC, abstractmethod
from typing import List

from ..types import Annotation, AnnotationDraft, ChatMessage, DocumentContext


class AnnotationStore(ABC):
    """Keyed annotation records addressable by (document id, page number)."""

    @abstractmethod
    async def list(self, document_id: str, page_number: int) -> List[Annotation]:
        """Get all annotations on one page of a document.

        Order is not significant.
        """
        ...

    @abstractmethod
    async def insert(self, draft: AnnotationDraft) -> Annotation:
        """Persist a draft and return the stored record with its id."""
        ...

    @abstractmethod
    async def delete(self, annotation_id: str) -> None:
        """Remove an annotation by id."""
        ...


class DocumentStore(ABC):
    """Uploaded PDF files and their extracted metadata."""

    @abstractmethod
    async def list_documents(self) -> List[DocumentContext]:
        """Get the user's documents, newest first."""
        ...

    @abstractmethod
    async def upload(self, name: str, data: bytes) -> DocumentContext:
        """Store a PDF and its extracted text and page count.

        Args:
            name: Display name (usually the file name)
            data: Raw PDF bytes
        """
        ...

    @abstractmethod
    async def fetch(self, document: DocumentContext) -> bytes:
        """Get the raw PDF bytes for a document."""
        ...


class MessageStore(ABC):
    """Chat history per document."""

    @abstractmethod
    async def list_messages(self, document_id: str) -> List[ChatMessage]:
        """Get the conversation for a document, oldest first."""
        ...

    @abstractmethod
    async def add_message(self, document_id: str, message: ChatMessage) -> None:
        """Append one message to the conversation."""
        ...

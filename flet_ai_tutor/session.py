"""
Document session - current document, page navigation and the visible annotation set.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from .backends.base import AnnotationStore
from .errors import StoreError
from .types import (
    Annotation,
    DocumentContext,
    Notification,
    NotificationLevel,
    Operation,
    SessionState,
)

logger = logging.getLogger(__name__)

Notifier = Callable[[Notification], None]


class DocumentSession:
    """
    Holds the active document, its current page and the annotations shown on it.

    Every read carries a generation number. Only the response to the latest
    read may change the visible set, so a slow response for a page the user
    already left is dropped.

    Args:
        store: Annotation persistence
        document: Initial document (optional, use set_document later)
        on_change: Called after every change to the visible state
        notify: Receives user-facing notifications
    """

    def __init__(
        self,
        store: AnnotationStore,
        document: Optional[DocumentContext] = None,
        on_change: Optional[Callable[["DocumentSession"], None]] = None,
        notify: Optional[Notifier] = None,
    ):
        self._store = store
        self._document = document
        self._current_page = 1
        self._visible: List[Annotation] = []
        self._state = SessionState.IDLE
        self._generation = 0
        self._on_change = on_change
        self._notify = notify

    # Properties

    @property
    def document(self) -> Optional[DocumentContext]:
        return self._document

    @property
    def document_id(self) -> Optional[str]:
        return self._document.document_id if self._document else None

    @property
    def page_count(self) -> int:
        """Total number of pages."""
        return self._document.page_count if self._document else 0

    @property
    def current_page(self) -> int:
        """Current page number (1-based)."""
        return self._current_page

    @property
    def visible(self) -> Tuple[Annotation, ...]:
        """Annotations on the current page of the current document."""
        return tuple(self._visible)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def generation(self) -> int:
        """Number of the latest issued read."""
        return self._generation

    def contains(self, annotation_id: str) -> bool:
        return any(a.id == annotation_id for a in self._visible)

    # Navigation

    async def set_document(self, document: Optional[DocumentContext]) -> Operation:
        """Switch to another document, starting at page 1."""
        self._document = document
        self._current_page = 1
        return await self.reload()

    def clamp(self, page_number: int) -> int:
        """Nearest valid page number."""
        return max(1, min(page_number, max(1, self.page_count)))

    async def go_to_page(self, page_number: int) -> Operation:
        """Go to a page, clamped into [1, page_count], and load its annotations."""
        self._current_page = self.clamp(page_number)
        logger.debug("Page changed to %d", self._current_page)
        return await self.reload()

    async def next_page(self) -> Operation:
        return await self.go_to_page(self._current_page + 1)

    async def previous_page(self) -> Operation:
        return await self.go_to_page(self._current_page - 1)

    async def reload(self) -> Operation:
        """Read the annotations for the current (document, page)."""
        self._generation += 1
        operation = Operation("load", generation=self._generation)
        self._visible = []

        if self._document is None:
            self._state = SessionState.IDLE
            self._changed()
            return operation.reject()

        document_id, page = self._document.document_id, self._current_page
        self._state = SessionState.LOADING
        self._changed()

        try:
            annotations = await self._store.list(document_id, page)
        except StoreError as exc:
            if not self._is_current(operation):
                return operation.reject(exc)
            logger.error("Loading annotations for page %d failed: %s", page, exc)
            self._visible = []
            self._state = SessionState.IDLE
            self._emit(NotificationLevel.ERROR, "Failed to load annotations")
            self._changed()
            return operation.reject(exc)

        if not self._is_current(operation):
            logger.debug(
                "Discarding annotations for page %d (generation %d, latest %d)",
                page,
                operation.generation,
                self._generation,
            )
            return operation.reject()

        self._visible = list(annotations)
        self._state = SessionState.IDLE
        self._changed()
        return operation.confirm(tuple(self._visible))

    # Confirmed mutations

    def apply_created(self, annotation: Annotation) -> bool:
        """Add a confirmed annotation if it belongs to the page being shown."""
        if (
            annotation.document_id != self.document_id
            or annotation.page_number != self._current_page
            or self.contains(annotation.id)
        ):
            return False
        self._visible.append(annotation)
        self._changed()
        return True

    def apply_deleted(self, annotation_id: str) -> bool:
        """Drop a confirmed deletion from the visible set."""
        remaining = [a for a in self._visible if a.id != annotation_id]
        if len(remaining) == len(self._visible):
            return False
        self._visible = remaining
        self._changed()
        return True

    # Private methods

    def _is_current(self, operation: Operation) -> bool:
        return operation.generation == self._generation

    def _emit(self, level: NotificationLevel, message: str) -> None:
        if self._notify:
            self._notify(Notification(level, message))

    def _changed(self) -> None:
        if self._on_change:
            self._on_change(self)

"""
Annotation creation flow - persists selections and reconciles the visible set.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from .backends.base import AnnotationStore
from .errors import StoreError
from .interactions.selection import SelectionEngine
from .session import DocumentSession, Notifier
from .types import (
    AnnotationDraft,
    AnnotationKind,
    Notification,
    NotificationLevel,
    Operation,
    SelectionRect,
)

logger = logging.getLogger(__name__)

HIGHLIGHT_COLOR = "#fde68a"
UNDERLINE_COLOR = "#60a5fa"

DEFAULT_COLORS = {
    AnnotationKind.HIGHLIGHT: HIGHLIGHT_COLOR,
    AnnotationKind.UNDERLINE: UNDERLINE_COLOR,
}


class AnnotationFlow:
    """Creates and deletes annotations for the session's current page.

    The visible set only changes after the store confirms an operation. A
    failed create keeps the selection so the user can retry without dragging
    again; a failed delete leaves the annotation in view.
    """

    def __init__(
        self,
        store: AnnotationStore,
        session: DocumentSession,
        selection: SelectionEngine,
        notify: Optional[Notifier] = None,
    ):
        self._store = store
        self._session = session
        self._selection = selection
        self._notify = notify
        # Selection whose insert has not settled yet
        self._pending: Optional[SelectionRect] = None

    @property
    def pending(self) -> bool:
        """Whether a create is waiting for the store."""
        return self._pending is not None

    async def create_annotation(
        self,
        kind: Union[AnnotationKind, str],
        color: Optional[str] = None,
        text_content: Optional[str] = None,
    ) -> Operation:
        """Persist the finalized selection as an annotation."""
        operation = Operation("create", generation=self._session.generation)
        kind = AnnotationKind(kind)
        rect = self._selection.rect

        if rect is None or rect.is_degenerate or self._selection.dragging:
            logger.warning("Ignoring create: no finalized selection")
            return operation.reject()
        if self._session.document_id is None:
            logger.warning("Ignoring create: no document open")
            return operation.reject()
        if self._pending is rect:
            logger.warning("Ignoring create: selection is already being saved")
            return operation.reject()

        draft = AnnotationDraft(
            document_id=self._session.document_id,
            page_number=self._session.current_page,
            kind=kind,
            color=color or DEFAULT_COLORS[kind],
            position=rect,
            text_content=text_content,
        )

        self._pending = rect
        try:
            annotation = await self._store.insert(draft)
        except StoreError as exc:
            logger.error("Creating %s annotation failed: %s", kind.value, exc)
            self._emit(NotificationLevel.ERROR, "Failed to create annotation")
            return operation.reject(exc)
        finally:
            if self._pending is rect:
                self._pending = None

        self._session.apply_created(annotation)
        # Keep a selection started while the insert was pending
        if self._selection.rect is rect and not self._selection.dragging:
            self._selection.clear()
        self._emit(NotificationLevel.SUCCESS, "Annotation added")
        return operation.confirm(annotation)

    async def delete_annotation(self, annotation_id: str) -> Operation:
        """Delete a confirmed annotation by id."""
        operation = Operation("delete", generation=self._session.generation)

        if not self._session.contains(annotation_id):
            logger.warning("Ignoring delete of unconfirmed annotation %s", annotation_id)
            return operation.reject()

        try:
            await self._store.delete(annotation_id)
        except StoreError as exc:
            logger.error("Deleting annotation %s failed: %s", annotation_id, exc)
            self._emit(NotificationLevel.ERROR, "Failed to delete annotation")
            return operation.reject(exc)

        self._session.apply_deleted(annotation_id)
        self._emit(NotificationLevel.SUCCESS, "Annotation deleted")
        return operation.confirm(annotation_id)

    def _emit(self, level: NotificationLevel, message: str) -> None:
        if self._notify:
            self._notify(Notification(level, message))

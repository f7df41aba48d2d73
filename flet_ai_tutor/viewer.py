"""
Tutor Viewer - PDF page with an annotation overlay.

Composes the document session, selection engine and annotation flow into a
single component.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import flet as ft

from .annotations import HIGHLIGHT_COLOR, UNDERLINE_COLOR, AnnotationFlow
from .backends.base import AnnotationStore
from .backends.pymupdf import PdfSource
from .interactions.selection import SelectionEngine
from .rendering.overlay import annotation_controls, creation_menu, selection_control
from .session import DocumentSession
from .types import (
    AnnotationKind,
    DocumentContext,
    Notification,
    NotificationLevel,
    Operation,
    SelectionState,
)

logger = logging.getLogger(__name__)

NOTIFICATION_COLORS = {
    NotificationLevel.SUCCESS: "#166534",
    NotificationLevel.INFO: "#27272a",
    NotificationLevel.ERROR: "#991b1b",
}


class TutorViewer:
    """
    PDF viewer with highlight/underline annotations.

    Usage:
        viewer = TutorViewer(store, document, PdfSource(data))
        page.add(viewer.control)
        await viewer.load()
    """

    def __init__(
        self,
        store: AnnotationStore,
        document: Optional[DocumentContext] = None,
        pdf: Optional[PdfSource] = None,
        scale: float = 1.0,
        bgcolor: str = "#ffffff",
        on_page_change: Optional[Callable[[int], None]] = None,
        on_notification: Optional[Callable[[Notification], None]] = None,
    ):
        self._pdf = pdf
        self._scale = scale
        self._bgcolor = bgcolor
        self._on_page_change = on_page_change
        self._on_notification = on_notification

        # Components
        self._session = DocumentSession(
            store, document, on_change=self._on_session_change, notify=self._notify
        )
        self._selection = SelectionEngine(on_change=self._on_selection_change)
        self._flow = AnnotationFlow(store, self._session, self._selection, notify=self._notify)

        # UI state
        self._wrapper: Optional[ft.Container] = None
        self._page_image: Optional[ft.Container] = None
        self._annotation_layer: Optional[ft.Stack] = None
        self._selection_layer: Optional[ft.Stack] = None
        self._menu: Optional[ft.Container] = None
        self._page_label: Optional[ft.Text] = None
        self._title: Optional[ft.Text] = None
        self._prev_btn: Optional[ft.IconButton] = None
        self._next_btn: Optional[ft.IconButton] = None
        self._mode_switch: Optional[ft.Switch] = None

        self._build()

    # Properties

    @property
    def control(self) -> ft.Control:
        """The Flet control to add to a page."""
        return self._wrapper

    @property
    def session(self) -> DocumentSession:
        return self._session

    @property
    def selection(self) -> SelectionEngine:
        return self._selection

    @property
    def flow(self) -> AnnotationFlow:
        return self._flow

    @property
    def current_page(self) -> int:
        """Current page number (1-based)."""
        return self._session.current_page

    @property
    def page_count(self) -> int:
        """Total number of pages."""
        return self._session.page_count

    @property
    def annotation_mode(self) -> bool:
        return self._selection.annotation_mode

    @annotation_mode.setter
    def annotation_mode(self, value: bool):
        self._selection.annotation_mode = value
        if self._mode_switch:
            self._mode_switch.value = value
            self._refresh(self._mode_switch)

    # Document and navigation

    async def load(self) -> Operation:
        """Load annotations for the current page."""
        return await self._session.reload()

    async def set_document(
        self, document: Optional[DocumentContext], pdf: Optional[PdfSource]
    ) -> Operation:
        """Show another document from its first page."""
        if self._pdf is not None and self._pdf is not pdf:
            self._pdf.close()
        self._pdf = pdf
        self._selection.clear()
        self._session_document_changed(document)
        return await self._session.set_document(document)

    async def go_to_page(self, page_number: int) -> Operation:
        """Go to a page (clamped into range)."""
        self._selection.clear()
        page_number = self._session.clamp(page_number)
        self._update_page(page_number)
        if self._on_page_change:
            self._on_page_change(page_number)
        return await self._session.go_to_page(page_number)

    async def next_page(self) -> Operation:
        return await self.go_to_page(self._session.current_page + 1)

    async def previous_page(self) -> Operation:
        return await self.go_to_page(self._session.current_page - 1)

    # Annotation actions

    async def highlight_selection(self, color: str = HIGHLIGHT_COLOR) -> Operation:
        """Add highlight annotation."""
        return await self._flow.create_annotation(AnnotationKind.HIGHLIGHT, color)

    async def underline_selection(self, color: str = UNDERLINE_COLOR) -> Operation:
        """Add underline annotation."""
        return await self._flow.create_annotation(AnnotationKind.UNDERLINE, color)

    async def delete_annotation(self, annotation_id: str) -> Operation:
        return await self._flow.delete_annotation(annotation_id)

    def clear_selection(self):
        """Clear the selection and close the menu."""
        self._selection.dismiss_menu()

    # Private methods

    def _build(self):
        """Build the viewer UI."""
        self._title = ft.Text("", size=13, weight=ft.FontWeight.W_500, no_wrap=True, expand=True)
        self._mode_switch = ft.Switch(value=False, on_change=self._on_mode_change)
        self._prev_btn = ft.IconButton(icon=ft.Icons.CHEVRON_LEFT, on_click=self._on_prev)
        self._next_btn = ft.IconButton(icon=ft.Icons.CHEVRON_RIGHT, on_click=self._on_next)
        self._page_label = ft.Text("", size=12, color="#a1a1a1")

        toolbar = ft.Container(
            content=ft.Row(
                controls=[
                    self._title,
                    ft.Text("Annotate", size=12, color="#a1a1a1"),
                    self._mode_switch,
                    self._prev_btn,
                    self._page_label,
                    self._next_btn,
                ],
                spacing=8,
                vertical_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            padding=ft.padding.symmetric(horizontal=8, vertical=4),
            border=ft.border.only(bottom=ft.BorderSide(1, "rgba(255,255,255,0.1)")),
        )

        self._page_image = ft.Container(bgcolor=self._bgcolor, border_radius=2)
        self._annotation_layer = ft.Stack(controls=[])
        self._selection_layer = ft.Stack(controls=[])
        self._menu = self._create_menu()

        viewport = ft.Stack(
            controls=[
                self._page_image,
                self._annotation_layer,
                self._selection_layer,
                self._menu,
            ],
        )

        gesture_detector = ft.GestureDetector(
            content=viewport,
            on_pan_start=self._on_pan_start,
            on_pan_update=self._on_pan_update,
            on_pan_end=self._on_pan_end,
            drag_interval=10,
        )

        self._wrapper = ft.Container(
            content=ft.Column(
                controls=[
                    toolbar,
                    ft.Container(
                        content=ft.Column(
                            controls=[gesture_detector],
                            scroll=ft.ScrollMode.AUTO,
                            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                        ),
                        expand=True,
                        padding=16,
                    ),
                ],
                spacing=0,
                expand=True,
            ),
            expand=True,
        )

        self._session_document_changed(self._session.document)

    def _create_menu(self) -> ft.Container:
        async def on_highlight(e):
            await self.highlight_selection()

        async def on_underline(e):
            await self.underline_selection()

        return creation_menu(
            self._selection.menu_anchor,
            on_highlight=on_highlight,
            on_underline=on_underline,
            on_cancel=lambda e: self.clear_selection(),
        )

    def _session_document_changed(self, document: Optional[DocumentContext]):
        if self._title:
            self._title.value = document.name if document else ""
        self._update_page(page_number=1)

    def _update_page(self, page_number: Optional[int] = None):
        """Re-render the page image and navigation state."""
        page_number = page_number or self._session.current_page
        page_count = self._pdf.page_count if self._pdf else self._session.page_count

        if self._page_image:
            if self._pdf and 1 <= page_number <= self._pdf.page_count:
                width, height = self._pdf.page_size(page_number)
                self._page_image.width = width * self._scale
                self._page_image.height = height * self._scale
                self._page_image.content = ft.Image(
                    src_base64=self._pdf.render_page(page_number, self._scale),
                    width=width * self._scale,
                    height=height * self._scale,
                    fit=ft.ImageFit.FILL,
                )
            else:
                self._page_image.content = None

        if self._page_label:
            self._page_label.value = f"Page {page_number} / {page_count}"
        if self._prev_btn:
            self._prev_btn.disabled = page_number <= 1
        if self._next_btn:
            self._next_btn.disabled = page_number >= page_count

        self._refresh(self._wrapper)

    def _refresh(self, control: Optional[ft.Control]):
        if control is not None and self._wrapper and self._wrapper.page:
            control.update()

    # Event handlers

    def _on_session_change(self, session: DocumentSession):
        if not self._annotation_layer:
            return

        def delete_handler(annotation_id: str):
            async def on_click(e):
                await self.delete_annotation(annotation_id)

            return on_click

        self._annotation_layer.controls = annotation_controls(session.visible, delete_handler)
        self._refresh(self._annotation_layer)

    def _on_selection_change(self, state: SelectionState):
        if self._selection_layer:
            rect_control = selection_control(state.rect)
            self._selection_layer.controls = [rect_control] if rect_control else []
            self._refresh(self._selection_layer)

        if self._menu:
            self._menu.visible = state.menu_open
            if state.menu_anchor is not None:
                self._menu.left, self._menu.top = state.menu_anchor
            self._refresh(self._menu)

    def _on_mode_change(self, e):
        self._selection.annotation_mode = bool(e.control.value)

    async def _on_prev(self, e):
        await self.previous_page()

    async def _on_next(self, e):
        await self.next_page()

    def _on_pan_start(self, e: ft.DragStartEvent):
        self._selection.begin_selection((e.local_x, e.local_y))

    def _on_pan_update(self, e: ft.DragUpdateEvent):
        self._selection.update_selection((e.local_x, e.local_y))

    def _on_pan_end(self, e: ft.DragEndEvent):
        self._selection.end_selection()

    # Notifications

    def _notify(self, notification: Notification):
        if self._on_notification:
            self._on_notification(notification)
        if self._wrapper and self._wrapper.page:
            show_notification(self._wrapper.page, notification)


def show_notification(page: ft.Page, notification: Notification):
    """Show a notification as a snack bar."""
    page.open(
        ft.SnackBar(
            content=ft.Text(notification.message, color="#ffffff"),
            bgcolor=NOTIFICATION_COLORS[notification.level],
        )
    )

"""
AI Tutor app - document list, annotated PDF viewer and tutor chat.

Run:
    python -m flet_ai_tutor.app
or, in a browser:
    AI_TUTOR_WEB=1 python -m flet_ai_tutor.app
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional

import flet as ft

from .backends.base import AnnotationStore, DocumentStore, MessageStore
from .backends.pymupdf import PdfSource
from .backends.supabase import (
    SupabaseAnnotationStore,
    SupabaseDocumentStore,
    SupabaseMessageStore,
    create_supabase_client,
)
from .chat import ChatBackend, ChatSession, OpenAIChatBackend
from .chat_view import ChatView
from .config import Settings, configure_logging
from .errors import ConfigError, DocumentError, StoreError
from .types import DocumentContext, Notification, NotificationLevel
from .viewer import TutorViewer, show_notification

logger = logging.getLogger(__name__)

COLORS = {
    "bg": "#0a0a0a",
    "surface": "#171717",
    "border": "#262626",
    "text_secondary": "#a1a1a1",
    "accent": "#2563eb",
}


class TutorApp:
    """
    Dashboard: documents sidebar, viewer and chat side by side.

    Args:
        documents: Uploaded PDFs
        annotations: Annotation persistence
        messages: Chat history persistence
        chat_backend: Completion provider (chat is disabled when None)
    """

    def __init__(
        self,
        documents: DocumentStore,
        annotations: AnnotationStore,
        messages: MessageStore,
        chat_backend: Optional[ChatBackend] = None,
    ):
        self._documents = documents
        self._messages = messages
        self._chat_backend = chat_backend
        self._page: Optional[ft.Page] = None

        self._files: List[DocumentContext] = []
        self._selected: Optional[DocumentContext] = None

        self.viewer = TutorViewer(annotations)
        self.chat = ChatView()
        self._sidebar = ft.ListView(expand=True, spacing=4, padding=12)
        self._picker = ft.FilePicker(on_result=self._on_file_picked)

    async def mount(self, page: ft.Page):
        """Build the layout on a page and show the newest document."""
        self._page = page
        page.title = "AI Tutor"
        page.padding = 0
        page.bgcolor = COLORS["bg"]
        page.theme_mode = ft.ThemeMode.DARK
        page.overlay.append(self._picker)

        header = ft.Container(
            content=ft.Row(
                controls=[
                    ft.Text("AI Tutor", size=18, weight=ft.FontWeight.BOLD),
                    ft.OutlinedButton(
                        "Upload PDF",
                        icon=ft.Icons.UPLOAD_FILE,
                        on_click=lambda e: self._picker.pick_files(
                            allowed_extensions=["pdf"], allow_multiple=False
                        ),
                    ),
                ],
                spacing=16,
            ),
            padding=ft.padding.symmetric(horizontal=24, vertical=12),
            border=ft.border.only(bottom=ft.BorderSide(1, COLORS["border"])),
        )

        sidebar = ft.Container(
            content=ft.Column(
                controls=[
                    ft.Container(
                        ft.Text("Your Documents", size=13, weight=ft.FontWeight.W_600),
                        padding=16,
                    ),
                    self._sidebar,
                ],
                spacing=0,
            ),
            width=260,
            bgcolor=COLORS["surface"],
            border=ft.border.only(right=ft.BorderSide(1, COLORS["border"])),
        )

        page.add(
            ft.Column(
                controls=[
                    header,
                    ft.Row(
                        controls=[sidebar, self.viewer.control, self.chat.control],
                        spacing=0,
                        expand=True,
                        vertical_alignment=ft.CrossAxisAlignment.STRETCH,
                    ),
                ],
                spacing=0,
                expand=True,
            )
        )

        try:
            self._files = await self._documents.list_documents()
        except StoreError as exc:
            logger.error("Listing documents failed: %s", exc)
            self._notify(Notification(NotificationLevel.ERROR, "Failed to load documents"))
            self._files = []

        self._render_sidebar()
        if self._files:
            await self.select_document(self._files[0])

    async def select_document(self, document: DocumentContext):
        """Open a document in the viewer and start its conversation."""
        try:
            data = await self._documents.fetch(document)
            pdf = PdfSource(data)
        except (StoreError, DocumentError) as exc:
            logger.error("Opening %s failed: %s", document.name, exc)
            self._notify(Notification(NotificationLevel.ERROR, f"Could not open {document.name}"))
            return

        self._selected = document
        self._render_sidebar()
        await self.viewer.set_document(document, pdf)

        chat_session = None
        if self._chat_backend is not None:
            chat_session = ChatSession(
                self._chat_backend,
                self._messages,
                document,
                notify=self._notify,
                on_change=self.chat.refresh,
            )
        await self.chat.set_session(chat_session)

    async def upload(self, name: str, data: bytes):
        """Upload a PDF, add it to the list and open it."""
        try:
            document = await self._documents.upload(name, data)
        except (StoreError, DocumentError) as exc:
            logger.error("Uploading %s failed: %s", name, exc)
            self._notify(Notification(NotificationLevel.ERROR, "Failed to upload PDF"))
            return None

        self._files.insert(0, document)
        self._notify(Notification(NotificationLevel.SUCCESS, "PDF uploaded successfully!"))
        await self.select_document(document)
        return document

    # Private methods

    def _render_sidebar(self):
        if not self._files:
            self._sidebar.controls = [
                ft.Container(
                    content=ft.Column(
                        controls=[
                            ft.Icon(ft.Icons.DESCRIPTION_OUTLINED, size=32, color=COLORS["text_secondary"]),
                            ft.Text("No documents yet", size=12, color=COLORS["text_secondary"]),
                            ft.Text("Upload a PDF to get started", size=11, color=COLORS["text_secondary"]),
                        ],
                        horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                    ),
                    padding=24,
                )
            ]
        else:
            self._sidebar.controls = [self._file_tile(f) for f in self._files]
        if self._sidebar.page:
            self._sidebar.update()

    def _file_tile(self, document: DocumentContext) -> ft.Control:
        selected = self._selected is not None and self._selected.document_id == document.document_id

        async def on_click(e):
            await self.select_document(document)

        return ft.Container(
            content=ft.Column(
                controls=[
                    ft.Row(
                        controls=[
                            ft.Icon(ft.Icons.DESCRIPTION_OUTLINED, size=16),
                            ft.Text(document.name, size=13, no_wrap=True, expand=True),
                        ],
                        spacing=8,
                    ),
                    ft.Text(f"{document.page_count} pages", size=11, color=COLORS["text_secondary"]),
                ],
                spacing=2,
            ),
            padding=ft.padding.symmetric(horizontal=12, vertical=8),
            border_radius=6,
            bgcolor=COLORS["accent"] if selected else None,
            on_click=on_click,
        )

    async def _on_file_picked(self, e: ft.FilePickerResultEvent):
        if not e.files:
            return
        picked = e.files[0]
        if not picked.path:
            self._notify(Notification(NotificationLevel.ERROR, "Could not read the selected file"))
            return
        data = await asyncio.to_thread(Path(picked.path).read_bytes)
        await self.upload(picked.name, data)

    def _notify(self, notification: Notification):
        if self._page:
            show_notification(self._page, notification)


async def main(page: ft.Page):
    """Flet entry point wired to Supabase and OpenAI."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    try:
        client = await create_supabase_client(settings)
    except ConfigError as exc:
        logger.error("%s", exc)
        page.add(ft.Text(f"Configuration error: {exc}", color="#ef4444"))
        return

    try:
        chat_backend: Optional[ChatBackend] = OpenAIChatBackend.from_settings(settings)
    except ConfigError as exc:
        logger.warning("Chat disabled: %s", exc)
        chat_backend = None

    app = TutorApp(
        documents=SupabaseDocumentStore(client, settings.storage_bucket, settings.user_id),
        annotations=SupabaseAnnotationStore(client),
        messages=SupabaseMessageStore(client, settings.user_id),
        chat_backend=chat_backend,
    )
    logger.info("Starting AI Tutor")
    await app.mount(page)


def run():
    view = ft.AppView.WEB_BROWSER if os.environ.get("AI_TUTOR_WEB") else ft.AppView.FLET_APP
    ft.app(target=main, view=view)


if __name__ == "__main__":
    run()

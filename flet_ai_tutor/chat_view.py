"""
Chat View - conversation panel next to the PDF viewer.
"""

from __future__ import annotations

from typing import Optional

import flet as ft

from .chat import ChatSession
from .types import ChatMessage

SUGGESTIONS = [
    "Summarize this document",
    "Explain the main concepts",
    "What are the key takeaways?",
]


class ChatView:
    """
    Chat panel bound to a ChatSession.

    Usage:
        view = ChatView()
        page.add(view.control)
        await view.set_session(
            ChatSession(backend, store, document, on_change=view.refresh)
        )
    """

    def __init__(self, width: float = 380):
        self._session: Optional[ChatSession] = None
        self._width = width

        self._wrapper: Optional[ft.Container] = None
        self._messages: Optional[ft.ListView] = None
        self._input: Optional[ft.TextField] = None
        self._send_btn: Optional[ft.IconButton] = None
        self._progress: Optional[ft.ProgressRing] = None

        self._build()

    @property
    def control(self) -> ft.Control:
        """The Flet control to add to a page."""
        return self._wrapper

    @property
    def session(self) -> Optional[ChatSession]:
        return self._session

    async def set_session(self, session: Optional[ChatSession]):
        """Bind to a conversation and load its history."""
        self._session = session
        if session is not None:
            await session.load()
        else:
            self._render()

    def refresh(self, session: Optional[ChatSession] = None):
        """Redraw after the bound session changed."""
        self._render()

    # Private methods

    def _build(self):
        self._messages = ft.ListView(expand=True, spacing=10, padding=16, auto_scroll=True)
        self._input = ft.TextField(
            hint_text="Ask about the document...",
            expand=True,
            dense=True,
            on_submit=self._on_submit,
        )
        self._send_btn = ft.IconButton(icon=ft.Icons.SEND_ROUNDED, on_click=self._on_submit)
        self._progress = ft.ProgressRing(width=16, height=16, stroke_width=2, visible=False)

        header = ft.Container(
            content=ft.Column(
                controls=[
                    ft.Text("AI Tutor Chat", size=14, weight=ft.FontWeight.W_600),
                    ft.Text("Ask questions about your document", size=11, color="#a1a1a1"),
                ],
                spacing=2,
            ),
            padding=16,
            border=ft.border.only(bottom=ft.BorderSide(1, "rgba(255,255,255,0.1)")),
        )

        footer = ft.Container(
            content=ft.Row(
                controls=[self._input, self._progress, self._send_btn],
                spacing=6,
                vertical_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            padding=12,
            border=ft.border.only(top=ft.BorderSide(1, "rgba(255,255,255,0.1)")),
        )

        self._wrapper = ft.Container(
            content=ft.Column(controls=[header, self._messages, footer], spacing=0, expand=True),
            width=self._width,
            border=ft.border.only(left=ft.BorderSide(1, "rgba(255,255,255,0.1)")),
        )
        self._render()

    def _render(self):
        session = self._session
        if session is None:
            self._messages.controls = [self._placeholder(["Chat is not available"])]
        elif not session.messages:
            self._messages.controls = [
                self._placeholder(
                    ["Start a conversation with your AI tutor", "Try asking:"]
                    + [f'"{s}"' for s in SUGGESTIONS]
                )
            ]
        else:
            self._messages.controls = [self._bubble(m) for m in session.messages]

        busy = session is None or session.busy
        self._input.disabled = busy
        self._send_btn.disabled = busy
        self._progress.visible = session is not None and session.busy

        if self._wrapper.page:
            self._wrapper.update()

    def _placeholder(self, lines) -> ft.Control:
        return ft.Container(
            content=ft.Column(
                controls=[ft.Text(line, size=12, color="#a1a1a1") for line in lines],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                spacing=4,
            ),
            alignment=ft.alignment.center,
            padding=24,
        )

    def _bubble(self, message: ChatMessage) -> ft.Control:
        is_user = message.role == "user"
        return ft.Row(
            controls=[
                ft.Container(
                    content=ft.Text(message.content, size=13, selectable=True),
                    bgcolor="#2563eb" if is_user else "#27272a",
                    border_radius=10,
                    padding=10,
                    width=self._width * 0.75,
                )
            ],
            alignment=ft.MainAxisAlignment.END if is_user else ft.MainAxisAlignment.START,
        )

    async def _on_submit(self, e):
        if self._session is None or not self._input.value:
            return
        text = self._input.value
        self._input.value = ""
        await self._session.send(text)

"""
Offline AI Tutor demo - in-memory stores, no Supabase project needed.

Usage:
    python example.py path/to/notes.pdf

Chat is enabled when OPENAI_API_KEY is set (or present in .env).
"""

import logging
import sys
from pathlib import Path

import flet as ft

from flet_ai_tutor import (
    ConfigError,
    InMemoryAnnotationStore,
    InMemoryDocumentStore,
    InMemoryMessageStore,
    OpenAIChatBackend,
    Settings,
    configure_logging,
)
from flet_ai_tutor.app import TutorApp

logger = logging.getLogger("example")


async def main(page: ft.Page):
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    try:
        chat_backend = OpenAIChatBackend.from_settings(settings)
    except ConfigError as exc:
        logger.warning("Chat disabled: %s", exc)
        chat_backend = None

    documents = InMemoryDocumentStore()
    for path in sys.argv[1:]:
        await documents.upload(Path(path).name, Path(path).read_bytes())

    app = TutorApp(
        documents=documents,
        annotations=InMemoryAnnotationStore(),
        messages=InMemoryMessageStore(),
        chat_backend=chat_backend,
    )
    await app.mount(page)


if __name__ == "__main__":
    ft.app(target=main)

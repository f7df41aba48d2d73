"""
Tutor chat - answers questions about the open document with an LLM.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from .backends.base import MessageStore
from .config import Settings
from .errors import ChatError, StoreError
from .session import Notifier
from .types import ChatMessage, DocumentContext, Notification, NotificationLevel

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an AI tutor helping a student understand their study materials.
Here is the content from their PDF document:
{pdf_content}
Based on this content, answer the student's questions clearly and helpfully.
If the question is not related to the document, politely guide them back to the material.
Provide explanations, examples, and break down complex concepts when needed."""


def build_system_prompt(pdf_content: str) -> str:
    """System prompt with the document text embedded."""
    return SYSTEM_PROMPT.format(pdf_content=pdf_content)


class ChatBackend(ABC):
    """Chat completion provider."""

    @abstractmethod
    async def complete(self, messages: List[Dict[str, str]]) -> str:
        """Return the assistant reply for a list of role/content messages."""
        ...


class OpenAIChatBackend(ChatBackend):
    """OpenAI chat completions."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ):
        self._client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIChatBackend":
        settings.require_openai()
        return cls(
            AsyncOpenAI(api_key=settings.openai_api_key),
            model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.RateLimitError as exc:
            raise ChatError("The AI tutor is busy right now, please try again shortly") from exc
        except openai.OpenAIError as exc:
            raise ChatError(f"Failed to get AI response: {exc}") from exc

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise ChatError("Failed to get AI response: empty reply")
        return content


class ChatSession:
    """
    Conversation about one document.

    Args:
        backend: Completion provider
        store: Chat history persistence
        document: The document being discussed
        notify: Receives user-facing notifications
        on_change: Called after the message list or busy flag changes
    """

    def __init__(
        self,
        backend: ChatBackend,
        store: MessageStore,
        document: DocumentContext,
        notify: Optional[Notifier] = None,
        on_change: Optional[Callable[["ChatSession"], None]] = None,
    ):
        self._backend = backend
        self._store = store
        self._document = document
        self._notify = notify
        self._on_change = on_change
        self._messages: List[ChatMessage] = []
        self._busy = False

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    @property
    def busy(self) -> bool:
        """Whether a reply is being generated."""
        return self._busy

    @property
    def document(self) -> DocumentContext:
        return self._document

    async def load(self) -> None:
        """Restore the stored conversation for the document."""
        try:
            self._messages = await self._store.list_messages(self._document.document_id)
        except StoreError as exc:
            logger.error("Loading chat history failed: %s", exc)
            self._messages = []
        self._changed()

    async def send(self, text: str) -> Optional[ChatMessage]:
        """Ask a question. Returns the assistant reply, or None on failure."""
        if not text.strip() or self._busy:
            return None

        question = ChatMessage(role="user", content=text)
        self._messages.append(question)
        self._busy = True
        self._changed()

        prompt = [{"role": "system", "content": build_system_prompt(self._document.text_content)}]
        prompt.extend(m.to_prompt() for m in self._messages)

        try:
            reply_text = await self._backend.complete(prompt)
        except ChatError as exc:
            logger.error("Chat request failed: %s", exc)
            self._emit(NotificationLevel.ERROR, str(exc))
            return None
        finally:
            self._busy = False
            self._changed()

        reply = ChatMessage(role="assistant", content=reply_text)
        self._messages.append(reply)
        self._changed()

        try:
            await self._store.add_message(self._document.document_id, question)
            await self._store.add_message(self._document.document_id, reply)
        except StoreError as exc:
            logger.error("Saving chat history failed: %s", exc)
            self._emit(NotificationLevel.ERROR, "Failed to save chat history")
        return reply

    def _emit(self, level: NotificationLevel, message: str) -> None:
        if self._notify:
            self._notify(Notification(level, message))

    def _changed(self) -> None:
        if self._on_change:
            self._on_change(self)

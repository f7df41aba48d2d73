import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai

from fakes import ScriptedChatBackend, make_document

from flet_ai_tutor.backends.memory import InMemoryMessageStore
from flet_ai_tutor.chat import ChatSession, OpenAIChatBackend, build_system_prompt
from flet_ai_tutor.errors import ChatError, StoreError
from flet_ai_tutor.types import ChatMessage, NotificationLevel


def completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


class OpenAIChatBackendTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = MagicMock()
        self.client.chat.completions.create = AsyncMock(return_value=completion("Mitochondria."))
        self.backend = OpenAIChatBackend(self.client, model="gpt-4o-mini", temperature=0.7, max_tokens=1000)

    async def test_passes_model_settings(self):
        reply = await self.backend.complete([{"role": "user", "content": "hi"}])
        self.assertEqual(reply, "Mitochondria.")
        kwargs = self.client.chat.completions.create.await_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-4o-mini")
        self.assertEqual(kwargs["temperature"], 0.7)
        self.assertEqual(kwargs["max_tokens"], 1000)
        self.assertEqual(kwargs["messages"], [{"role": "user", "content": "hi"}])

    async def test_api_errors_become_chat_errors(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        self.client.chat.completions.create.side_effect = openai.APIConnectionError(request=request)
        with self.assertRaises(ChatError):
            await self.backend.complete([])

    async def test_rate_limit_has_friendly_message(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        response = httpx.Response(429, request=request)
        self.client.chat.completions.create.side_effect = openai.RateLimitError(
            "rate limited", response=response, body=None
        )
        with self.assertRaisesRegex(ChatError, "busy"):
            await self.backend.complete([])

    async def test_empty_reply_is_an_error(self):
        self.client.chat.completions.create.return_value = completion(None)
        with self.assertRaises(ChatError):
            await self.backend.complete([])


class ChatSessionTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.notifications = []
        self.store = InMemoryMessageStore()
        self.document = make_document(text="Osmosis is the movement of water.")

    def session(self, backend):
        return ChatSession(backend, self.store, self.document, notify=self.notifications.append)

    async def test_send_builds_prompt_and_persists_both_turns(self):
        backend = ScriptedChatBackend(["Water moves across a membrane."])
        chat = self.session(backend)

        reply = await chat.send("What is osmosis?")

        self.assertEqual(reply.content, "Water moves across a membrane.")
        prompt = backend.prompts[0]
        self.assertEqual(prompt[0]["role"], "system")
        self.assertIn("Osmosis is the movement of water.", prompt[0]["content"])
        self.assertEqual(prompt[1:], [{"role": "user", "content": "What is osmosis?"}])
        stored = await self.store.list_messages("doc-1")
        self.assertEqual([(m.role, m.content) for m in stored], [
            ("user", "What is osmosis?"),
            ("assistant", "Water moves across a membrane."),
        ])
        self.assertFalse(chat.busy)

    async def test_history_is_sent_with_follow_ups(self):
        backend = ScriptedChatBackend(["First.", "Second."])
        chat = self.session(backend)
        await chat.send("one")
        await chat.send("two")
        self.assertEqual(
            [m["content"] for m in backend.prompts[1][1:]], ["one", "First.", "two"]
        )

    async def test_blank_input_is_ignored(self):
        backend = ScriptedChatBackend()
        chat = self.session(backend)
        self.assertIsNone(await chat.send("   "))
        self.assertEqual(backend.prompts, [])
        self.assertEqual(chat.messages, [])

    async def test_backend_failure_notifies_and_keeps_question(self):
        chat = self.session(ScriptedChatBackend(error=ChatError("Failed to get AI response: boom")))
        self.assertIsNone(await chat.send("Explain ATP"))
        self.assertEqual([m.role for m in chat.messages], ["user"])
        self.assertEqual(self.notifications[-1].level, NotificationLevel.ERROR)
        self.assertFalse(chat.busy)
        self.assertEqual(await self.store.list_messages("doc-1"), [])

    async def test_load_restores_history(self):
        await self.store.add_message("doc-1", ChatMessage("user", "earlier"))
        chat = self.session(ScriptedChatBackend())
        await chat.load()
        self.assertEqual([m.content for m in chat.messages], ["earlier"])

    async def test_history_save_failure_keeps_reply(self):
        store = MagicMock()
        store.add_message = AsyncMock(side_effect=StoreError("add_message"))
        chat = ChatSession(ScriptedChatBackend(["ok"]), store, self.document, notify=self.notifications.append)
        reply = await chat.send("hello")
        self.assertEqual(reply.content, "ok")
        self.assertEqual(len(chat.messages), 2)
        self.assertEqual(self.notifications[-1].message, "Failed to save chat history")

    def test_system_prompt_embeds_document(self):
        prompt = build_system_prompt("Chapter 1: Cells")
        self.assertIn("AI tutor", prompt)
        self.assertIn("Chapter 1: Cells", prompt)


if __name__ == "__main__":
    unittest.main()

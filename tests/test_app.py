import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace

from fakes import ScriptedChatBackend, make_pdf_bytes

from flet_ai_tutor.app import TutorApp
from flet_ai_tutor.backends.memory import (
    InMemoryAnnotationStore,
    InMemoryDocumentStore,
    InMemoryMessageStore,
)


class TutorAppTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.documents = InMemoryDocumentStore()
        self.app = TutorApp(
            documents=self.documents,
            annotations=InMemoryAnnotationStore(),
            messages=InMemoryMessageStore(),
            chat_backend=ScriptedChatBackend(["Chlorophyll absorbs light."]),
        )

    async def test_upload_opens_document_with_chat(self):
        document = await self.app.upload("leaf.pdf", make_pdf_bytes(["Chlorophyll", "Stomata"]))

        self.assertIsNotNone(document)
        self.assertEqual(self.app.viewer.page_count, 2)
        self.assertEqual(self.app.viewer.current_page, 1)
        self.assertIs(self.app.chat.session.document, document)
        reply = await self.app.chat.session.send("What absorbs light?")
        self.assertEqual(reply.content, "Chlorophyll absorbs light.")

    async def test_invalid_upload_is_refused(self):
        self.assertIsNone(await self.app.upload("broken.pdf", b"nope"))
        self.assertEqual(await self.documents.list_documents(), [])

    async def test_chat_disabled_without_backend(self):
        app = TutorApp(InMemoryDocumentStore(), InMemoryAnnotationStore(), InMemoryMessageStore())
        await app.upload("leaf.pdf", make_pdf_bytes())
        self.assertIsNone(app.chat.session)

    async def test_picked_file_is_read_and_uploaded(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "cells.pdf"
            path.write_bytes(make_pdf_bytes(["Mitosis", "Meiosis", "Interphase"]))
            event = SimpleNamespace(files=[SimpleNamespace(name="cells.pdf", path=str(path))])
            await self.app._on_file_picked(event)

        (document,) = await self.documents.list_documents()
        self.assertEqual(document.name, "cells.pdf")
        self.assertEqual(self.app.viewer.page_count, 3)

    async def test_picked_file_without_path_is_ignored(self):
        event = SimpleNamespace(files=[SimpleNamespace(name="web.pdf", path=None)])
        await self.app._on_file_picked(event)
        self.assertEqual(await self.documents.list_documents(), [])


if __name__ == "__main__":
    unittest.main()

import unittest

import httpx

from fakes import FakeBucket, FakeQuery, FakeSupabase, make_annotation, make_pdf_bytes

from flet_ai_tutor.backends.memory import (
    InMemoryAnnotationStore,
    InMemoryDocumentStore,
    InMemoryMessageStore,
)
from flet_ai_tutor.backends.supabase import (
    SupabaseAnnotationStore,
    SupabaseDocumentStore,
    SupabaseMessageStore,
)
from flet_ai_tutor.errors import StoreError
from flet_ai_tutor.types import (
    Annotation,
    AnnotationDraft,
    AnnotationKind,
    ChatMessage,
    DocumentContext,
    SelectionRect,
)

ROW = {
    "id": "a1",
    "pdf_id": "doc-1",
    "page_number": 3,
    "type": "highlight",
    "color": "#fde68a",
    "text_content": None,
    "position": {"x": 10, "y": 20, "width": 30, "height": 5},
    "created_at": "2024-05-01T10:00:00Z",
}

DRAFT = AnnotationDraft(
    document_id="doc-1",
    page_number=3,
    kind=AnnotationKind.HIGHLIGHT,
    color="#fde68a",
    position=SelectionRect(10, 20, 30, 5),
)


class AnnotationRecordTests(unittest.TestCase):
    def test_record_fields_round_trip(self):
        annotation = Annotation.from_record(ROW)
        self.assertEqual(annotation, Annotation.from_draft("a1", DRAFT))
        self.assertEqual(Annotation.from_record(annotation.to_record()), annotation)

    def test_draft_record_omits_missing_label(self):
        record = DRAFT.to_record()
        self.assertNotIn("text_content", record)
        self.assertEqual(record["pdf_id"], "doc-1")
        self.assertEqual(record["position"], {"x": 10, "y": 20, "width": 30, "height": 5})


class InMemoryStoreTests(unittest.IsolatedAsyncioTestCase):
    async def test_annotations_are_scoped_to_document_and_page(self):
        store = InMemoryAnnotationStore([make_annotation("x", page_number=2)])
        created = await store.insert(DRAFT)
        self.assertTrue(created.id)
        self.assertEqual(await store.list("doc-1", 3), [created])
        self.assertEqual(await store.list("doc-2", 3), [])
        await store.delete(created.id)
        self.assertEqual(await store.list("doc-1", 3), [])
        with self.assertRaises(StoreError):
            await store.delete(created.id)

    async def test_documents_upload_extracts_text(self):
        store = InMemoryDocumentStore()
        data = make_pdf_bytes(["Page one text", "Page two text"])
        document = await store.upload("bio.pdf", data)
        self.assertEqual(document.page_count, 2)
        self.assertIn("Page two text", document.text_content)
        self.assertEqual(await store.fetch(document), data)
        self.assertEqual(await store.list_documents(), [document])

    async def test_messages_get_ids(self):
        store = InMemoryMessageStore()
        await store.add_message("doc-1", ChatMessage("user", "hi"))
        (message,) = await store.list_messages("doc-1")
        self.assertIsNotNone(message.id)


class SupabaseAnnotationStoreTests(unittest.IsolatedAsyncioTestCase):
    async def test_list_filters_by_document_and_page(self):
        client = FakeSupabase(FakeQuery([ROW]))
        annotations = await SupabaseAnnotationStore(client).list("doc-1", 3)
        self.assertEqual([a.id for a in annotations], ["a1"])
        self.assertEqual(client.tables, ["annotations"])
        self.assertEqual(
            client.query.calls,
            [("select", ("*",), {}), ("eq", ("pdf_id", "doc-1"), {}), ("eq", ("page_number", 3), {})],
        )

    async def test_insert_returns_stored_record(self):
        client = FakeSupabase(FakeQuery([ROW]))
        annotation = await SupabaseAnnotationStore(client).insert(DRAFT)
        self.assertEqual(annotation.id, "a1")
        self.assertEqual(client.query.calls[0], ("insert", (DRAFT.to_record(),), {}))

    async def test_insert_without_returned_row_fails(self):
        client = FakeSupabase(FakeQuery([]))
        with self.assertRaises(StoreError):
            await SupabaseAnnotationStore(client).insert(DRAFT)

    async def test_client_errors_become_store_errors(self):
        client = FakeSupabase(FakeQuery(error=httpx.ConnectError("offline")))
        with self.assertRaises(StoreError) as ctx:
            await SupabaseAnnotationStore(client).delete("a1")
        self.assertEqual(ctx.exception.operation, "delete")
        self.assertIsInstance(ctx.exception.__cause__, httpx.ConnectError)

    async def test_delete_by_id(self):
        client = FakeSupabase()
        await SupabaseAnnotationStore(client).delete("a1")
        self.assertEqual(client.query.calls, [("delete", (), {}), ("eq", ("id", "a1"), {})])


class SupabaseDocumentStoreTests(unittest.IsolatedAsyncioTestCase):
    async def test_list_is_newest_first_for_user(self):
        row = {"id": "d1", "name": "bio.pdf", "url": "https://x/bio.pdf", "page_count": 4, "text_content": "t"}
        client = FakeSupabase(FakeQuery([row]))
        documents = await SupabaseDocumentStore(client, user_id="u1").list_documents()
        self.assertEqual(documents, [DocumentContext("d1", "https://x/bio.pdf", 4, "bio.pdf", "t")])
        self.assertIn(("eq", ("user_id", "u1"), {}), client.query.calls)
        self.assertEqual(client.query.calls[-1], ("order", ("created_at",), {"desc": True}))

    async def test_upload_stores_file_and_metadata(self):
        data = make_pdf_bytes(["Krebs cycle"])
        row = {"id": "d2", "name": "krebs.pdf", "url": "https://cdn.example/pdfs/file.pdf", "page_count": 1, "text_content": "Krebs cycle"}
        client = FakeSupabase(FakeQuery([row]))
        document = await SupabaseDocumentStore(client, bucket="pdfs", user_id="u1").upload("krebs.pdf", data)

        self.assertEqual(document.document_id, "d2")
        self.assertEqual(client.buckets, ["pdfs"])
        (path, uploaded, options), = client.bucket.uploads
        self.assertTrue(path.startswith("u1/"))
        self.assertTrue(path.endswith("-krebs.pdf"))
        self.assertEqual(uploaded, data)
        self.assertEqual(options, {"content-type": "application/pdf"})
        name, args, _ = client.query.calls[0]
        self.assertEqual(name, "insert")
        self.assertEqual(args[0]["page_count"], 1)
        self.assertIn("Krebs cycle", args[0]["text_content"])
        self.assertEqual(args[0]["user_id"], "u1")

    async def test_storage_failure_becomes_store_error(self):
        client = FakeSupabase(bucket=FakeBucket(error=RuntimeError("bucket not found")))
        with self.assertRaises(StoreError):
            await SupabaseDocumentStore(client).upload("a.pdf", make_pdf_bytes())
        self.assertEqual(client.query.calls, [])

    async def test_fetch_downloads_public_url(self):
        def handler(request):
            if request.url.path == "/missing.pdf":
                return httpx.Response(404)
            return httpx.Response(200, content=b"%PDF-1.7")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            store = SupabaseDocumentStore(FakeSupabase(), http=http)
            found = DocumentContext("d1", "https://cdn.example/ok.pdf", 1)
            self.assertEqual(await store.fetch(found), b"%PDF-1.7")
            with self.assertRaises(StoreError):
                await store.fetch(DocumentContext("d2", "https://cdn.example/missing.pdf", 1))


class SupabaseMessageStoreTests(unittest.IsolatedAsyncioTestCase):
    async def test_messages_are_scoped_to_user(self):
        rows = [{"id": 1, "role": "user", "content": "hi"}, {"id": 2, "role": "assistant", "content": "hello"}]
        client = FakeSupabase(FakeQuery(rows))
        store = SupabaseMessageStore(client, user_id="u1")
        messages = await store.list_messages("doc-1")
        self.assertEqual([(m.id, m.role) for m in messages], [("1", "user"), ("2", "assistant")])
        self.assertEqual(client.query.calls[-1], ("order", ("created_at",), {"desc": False}))

        await store.add_message("doc-1", ChatMessage("user", "next"))
        self.assertEqual(
            client.query.calls[-1],
            ("insert", ({"user_id": "u1", "pdf_id": "doc-1", "role": "user", "content": "next"},), {}),
        )

    async def test_without_user_nothing_is_persisted(self):
        client = FakeSupabase()
        store = SupabaseMessageStore(client)
        await store.add_message("doc-1", ChatMessage("user", "hi"))
        self.assertEqual(await store.list_messages("doc-1"), [])
        self.assertEqual(client.tables, [])


if __name__ == "__main__":
    unittest.main()

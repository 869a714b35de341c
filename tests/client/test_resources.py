"""Tests for the tenant scoped resource clients."""

import httpx
import pytest


@pytest.fixture
def logged_in(state):
    state.session.create("alice", "alice")
    return state


class TestClasses:

    @pytest.mark.asyncio
    async def test_query_sends_range(self, logged_in, backend):
        backend.route("GET", "/api/alice/classes", json=[{"id": "c1", "name": "greeting"}])

        assert await logged_in.classes.query({"fields": "id,name"}) == [{"id": "c1", "name": "greeting"}]
        request = backend.sent("GET", "/api/alice/classes")[0]
        assert request.headers["Range"] == "items=0-9999"
        assert request.url.params["fields"] == "id,name"

    @pytest.mark.asyncio
    async def test_mutations_match_any_revision(self, logged_in, backend):
        backend.route("POST", "/api/alice/classes", status_code=201, json={"id": "c1", "name": "greeting"})
        backend.route("PUT", "/api/alice/classes/c1", json={"id": "c1", "name": "hello"})
        backend.route("DELETE", "/api/alice/classes/c1", status_code=204)

        await logged_in.classes.post({"name": "greeting"})
        await logged_in.classes.update("c1", {"name": "hello"})
        assert await logged_in.classes.remove("c1") is None

        for request in backend.requests:
            assert request.headers["If-Match"] == "*"

    @pytest.mark.asyncio
    async def test_posted_class_is_queried_back(self, logged_in, backend):
        saved = []

        def create(request):
            saved.append(dict(backend.body(request), id=f"c{len(saved) + 1}"))
            return httpx.Response(201, json=saved[-1])

        backend.route("POST", "/api/alice/classes", create)
        backend.route("GET", "/api/alice/classes", lambda request: httpx.Response(200, json=saved))

        created = await logged_in.classes.post({"name": "greeting", "description": "Hellos"})
        classes = await logged_in.classes.query()

        assert created == {"name": "greeting", "description": "Hellos", "id": "c1"}
        assert classes == [created]

    @pytest.mark.asyncio
    async def test_remove_sends_one_delete(self, logged_in, backend):
        backend.route("DELETE", "/api/alice/classes/c1", status_code=204)

        await logged_in.classes.remove("c1")

        assert len(backend.sent("DELETE", "/api/alice/classes/c1")) == 1
        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_endpoint_follows_tenant(self, logged_in, backend):
        backend.route("GET", "/api/shared/classes/c1", json={"id": "c1"})
        logged_in.session.tenant = "shared"
        assert await logged_in.classes.get("c1") == {"id": "c1"}


class TestTexts:

    @pytest.mark.asyncio
    async def test_patch_operations(self, logged_in, backend):
        backend.route("PATCH", "/api/alice/texts/t1", status_code=204)

        await logged_in.texts.add_classes("t1", [{"id": "c1"}])
        await logged_in.texts.remove_classes("t1", [{"id": "c2"}])
        await logged_in.texts.update("t1", {"value": "hello there"})

        bodies = [backend.body(r) for r in backend.sent("PATCH", "/api/alice/texts/t1")]
        assert bodies == [
            [{"op": "add", "path": "/classes", "value": [{"id": "c1"}]}],
            [{"op": "remove", "path": "/classes", "value": [{"id": "c2"}]}],
            [{"op": "replace", "path": "/metadata", "value": {"value": "hello there"}}],
        ]

    @pytest.mark.asyncio
    async def test_remove_all_in_order(self, logged_in, backend):
        for text_id in ("t1", "t2", "t3"):
            backend.route("DELETE", f"/api/alice/texts/{text_id}", status_code=204)

        assert await logged_in.texts.remove_all(["t1", "t2", "t3"]) == [None, None, None]
        assert [r.url.path for r in backend.requests] == [
            "/api/alice/texts/t1", "/api/alice/texts/t2", "/api/alice/texts/t3",
        ]


class TestContent:

    @pytest.mark.asyncio
    async def test_upload_multipart(self, logged_in, backend):
        backend.route("POST", "/api/alice/content", status_code=202, json={"id": "job-1", "status": "running", "entries": 1})

        result = await logged_in.content.upload("training.csv", b"hello,greeting\n")

        assert result["id"] == "job-1"
        request = backend.sent("POST", "/api/alice/content")[0]
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'filename="training.csv"' in request.content
        assert b"hello,greeting" in request.content

    @pytest.mark.asyncio
    async def test_upload_empty(self, logged_in):
        with pytest.raises(ValueError):
            await logged_in.content.upload("training.csv", b"")

    @pytest.mark.asyncio
    async def test_download_and_status(self, logged_in, backend):
        backend.route("GET", "/api/alice/content", text="hello,greeting\n", headers={"Content-Type": "text/csv"})
        backend.route("GET", "/api/alice/content/import/job-1", json={"status": "complete", "success": 1, "error": 0})

        assert await logged_in.content.download("csv") == "hello,greeting\n"
        assert backend.requests[0].url.params["format"] == "csv"
        assert (await logged_in.content.import_status("job-1"))["status"] == "complete"

"""Shared fixtures: an in-memory Cloudant stand-in, the API app and a mocked client backend."""

import copy
import json
import uuid

import httpx
import pytest
from fastapi.testclient import TestClient

from groundtruth.api.auth import get_verifier
from groundtruth.api.credentials import ServiceCredentials, get_classifier_credentials
from groundtruth.api.database.session import get_store
from groundtruth.api.database.store import TrainingStore
from groundtruth.api.errors import CONFLICT, NOT_FOUND, StoreError
from groundtruth.api.services.content_service import ImportJobs, get_import_jobs
from groundtruth.client.config import ClientConfig, Endpoints
from groundtruth.client.state import ClientState


def _matches(doc: dict, selector: dict) -> bool:
    for name, condition in selector.items():
        value = doc.get(name)
        if isinstance(condition, dict):
            if "$in" in condition:
                if value not in condition["$in"]:
                    return False
            elif "$nin" in condition:
                if value in condition["$nin"]:
                    return False
            elif "$elemMatch" in condition:
                target = condition["$elemMatch"]["$eq"]
                if not isinstance(value, list) or target not in value:
                    return False
            else:
                raise NotImplementedError(condition)
        elif value != condition:
            return False
    return True


class FakeDatabase:
    """Implements the subset of CloudantDatabase the store uses."""

    def __init__(self, name: str = "nlcstore-test"):
        self.name = name
        self.docs = {}

    def _next_rev(self, current=None) -> str:
        generation = int(current.split("-")[0]) + 1 if current else 1
        return f"{generation}-{uuid.uuid4().hex[:8]}"

    def create(self):
        return True

    def ensure_design(self, design):
        self.docs[design["_id"]] = copy.deepcopy(design)

    def create_index(self, fields, name, design):
        return {"result": "created", "name": name}

    def get(self, doc_id):
        if doc_id not in self.docs:
            raise StoreError(NOT_FOUND, "missing")
        return copy.deepcopy(self.docs[doc_id])

    def save(self, doc):
        doc_id = doc.get("_id") or uuid.uuid4().hex
        existing = self.docs.get(doc_id)
        if existing is not None and doc.get("_rev") != existing["_rev"]:
            raise StoreError(CONFLICT, "Document update conflict.")
        rev = self._next_rev(existing["_rev"] if existing else None)
        stored = copy.deepcopy(doc)
        stored.update({"_id": doc_id, "_rev": rev})
        self.docs[doc_id] = stored
        return {"ok": True, "id": doc_id, "rev": rev}

    def delete(self, doc_id, rev):
        existing = self.docs.get(doc_id)
        if existing is None:
            raise StoreError(NOT_FOUND, "missing")
        if existing["_rev"] != rev:
            raise StoreError(CONFLICT, "Document update conflict.")
        del self.docs[doc_id]
        return {"ok": True, "id": doc_id}

    def bulk(self, docs):
        results = []
        for doc in docs:
            try:
                if doc.get("_deleted"):
                    self.delete(doc["_id"], doc.get("_rev"))
                    results.append({"id": doc["_id"], "rev": "deleted"})
                else:
                    saved = self.save(doc)
                    results.append({"id": saved["id"], "rev": saved["rev"]})
            except StoreError as e:
                results.append({"id": doc.get("_id"), "error": e.category, "reason": e.message})
        return results

    def find(self, selector, fields=None, skip=0, limit=None):
        matches = [d for d in self.docs.values() if _matches(d, selector)]
        end = skip + limit if limit is not None else None
        matches = matches[skip:end]
        if fields:
            matches = [{k: d[k] for k in fields if k in d} for d in matches]
        return copy.deepcopy(matches)

    def view(self, design, view, key=None, group=None):
        tenant, schema = key
        count = sum(1 for d in self.docs.values() if d.get("tenant") == tenant and d.get("schema") == schema)
        return {"rows": [{"key": key, "value": count}] if count else []}


class FakeVerifier:
    """Accepts any username whose password is 'secret'."""

    def __init__(self):
        self.calls = []

    def verify(self, username, password):
        self.calls.append((username, password))
        return password == "secret"


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def store(fake_db):
    return TrainingStore(fake_db)


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def jobs():
    return ImportJobs()


@pytest.fixture
def nlc_credentials():
    return ServiceCredentials(
        id="ibmwatson-nlc-classifier",
        url="https://gateway.example.com/natural-language-classifier/api",
        username="service-user",
        password="service-pass",
        version="v1",
    )


@pytest.fixture
def app(store, verifier, jobs, nlc_credentials):
    """The API app with the store, verifier and credentials replaced."""
    from groundtruth.api.main import app

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_verifier] = lambda: verifier
    app.dependency_overrides[get_import_jobs] = lambda: jobs
    app.dependency_overrides[get_classifier_credentials] = lambda: nlc_credentials
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def api(app):
    return TestClient(app)


@pytest.fixture
def alice(api):
    """A TestClient logged in as alice."""
    response = api.post("/api/authenticate", json={"username": "alice", "password": "secret"})
    assert response.status_code == 200
    return api


class FakeBackend:
    """httpx MockTransport handler with per-route responses and a request log."""

    def __init__(self):
        self.requests = []
        self.routes = {}

    def route(self, method, path, handler=None, **response_kwargs):
        if handler is None:
            response_kwargs.setdefault("status_code", 200)

            def handler(request):
                return httpx.Response(**response_kwargs)
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": "Not found"})
        return handler(request)

    def sent(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def body(request: httpx.Request):
        return json.loads(request.content)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client_config():
    return ClientConfig(
        api_base_url="http://testserver",
        poll_interval_sec=0.01,
        endpoints=Endpoints(versions="https://versions.example.com/api/v1/versions"),
    )


@pytest.fixture
def state(backend, client_config):
    return ClientState(client_config, transport=httpx.MockTransport(backend))

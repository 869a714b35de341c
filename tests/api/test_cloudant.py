"""Tests for the Cloudant HTTP client and the classifier proxy service."""

import json
from unittest.mock import Mock

import pytest
import requests

from groundtruth.api.credentials import ServiceCredentials
from groundtruth.api.database.cloudant import CloudantClient
from groundtruth.api.errors import StoreError
from groundtruth.api.services.classifier_service import ClassifierService, ClassifierServiceError


def make_response(status_code=200, body=None, url="https://example.com"):
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response._content = json.dumps(body).encode() if body is not None else b""
    return response


@pytest.fixture
def http():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def db(http):
    return CloudantClient("https://acct.cloudant.com/", "acct", "pw", session=http).database("nlcstore")


def sent(http):
    return http.request.call_args[1]


class TestCloudantDatabase:

    def test_get_quotes_id(self, db, http):
        http.request.return_value = make_response(body={"_id": "a/b"})
        assert db.get("a/b") == {"_id": "a/b"}
        assert sent(http)["url"] == "https://acct.cloudant.com/nlcstore/a%2Fb"

    def test_design_doc_keeps_slash(self, db, http):
        http.request.return_value = make_response(body={"ok": True})
        db.save({"_id": "_design/training", "views": {}})
        assert sent(http)["method"] == "PUT"
        assert sent(http)["url"] == "https://acct.cloudant.com/nlcstore/_design/training"

    def test_save_without_id_posts(self, db, http):
        http.request.return_value = make_response(201, {"ok": True, "id": "x", "rev": "1-a"})
        assert db.save({"name": "n"})["rev"] == "1-a"
        assert sent(http)["method"] == "POST"

    def test_create_existing_database(self, db, http):
        http.request.return_value = make_response(412, {"error": "file_exists"})
        assert db.create() is False

    def test_find(self, db, http):
        http.request.return_value = make_response(body={"docs": [{"_id": "c1"}]})
        assert db.find({"tenant": "alice"}, fields=["_id"], skip=5, limit=10) == [{"_id": "c1"}]
        assert sent(http)["json"] == {"selector": {"tenant": "alice"}, "skip": 5, "fields": ["_id"], "limit": 10}

    def test_view_params_json_encoded(self, db, http):
        http.request.return_value = make_response(body={"rows": []})
        db.view("training", "schema_count", key=["alice", "class"], group=True)
        assert sent(http)["url"].endswith("/nlcstore/_design/training/_view/schema_count")
        assert sent(http)["params"] == {"key": '["alice", "class"]', "group": "true"}

    @pytest.mark.parametrize("status,category", [(404, "not_found"), (409, "conflict"), (403, "forbidden"), (500, "unknown")])
    def test_http_errors_categorized(self, db, http, status, category):
        http.request.return_value = make_response(status, {"error": "e", "reason": "Because"})
        with pytest.raises(StoreError, match="Because") as exc_info:
            db.get("c1")
        assert exc_info.value.category == category

    def test_connection_error(self, db, http):
        http.request.side_effect = requests.exceptions.ConnectionError("down")
        with pytest.raises(StoreError) as exc_info:
            db.get("c1")
        assert exc_info.value.category == "unknown"

    def test_ensure_design_skips_unchanged(self, db, http):
        design = {"_id": "_design/training", "views": {"v": {"map": "m"}}}
        http.request.return_value = make_response(body=dict(design, _rev="1-a"))
        db.ensure_design(design)
        assert http.request.call_count == 1


class TestClassifierService:

    @pytest.fixture
    def service(self, http, nlc_credentials):
        return ClassifierService(nlc_credentials, "alice", "secret", session=http)

    def test_uses_user_credentials(self, service, http):
        http.request.return_value = make_response(body={"classifiers": [{"classifier_id": "c1"}]})

        assert service.list() == [{"classifier_id": "c1"}]
        assert sent(http)["auth"] == ("alice", "secret")
        assert sent(http)["url"] == "https://gateway.example.com/natural-language-classifier/api/v1/classifiers"

    def test_create_sends_metadata_and_csv(self, service, http):
        http.request.return_value = make_response(body={"classifier_id": "c2"})

        service.create([{"text": "hello", "classes": ["greeting"]}], "en", "demo")

        files = sent(http)["files"]
        assert json.loads(files["training_metadata"][1]) == {"language": "en", "name": "demo"}
        assert files["training_data"][1] == "hello,greeting\n"

    def test_error_keeps_payload(self, service, http):
        http.request.return_value = make_response(404, {"code": 404, "error": "Not found", "description": "No classifier"})

        with pytest.raises(ClassifierServiceError) as exc_info:
            service.classify("gone", "hi")

        error = exc_info.value
        assert error.status_code == 400
        assert error.payload["description"] == "No classifier"
        assert error.with_upstream_status().status_code == 404

    def test_trailing_slash_in_url(self, http):
        service = ClassifierService(ServiceCredentials(url="https://nlc/", version="v1"), "alice", "secret", session=http)
        http.request.return_value = make_response(204)
        assert service.remove("c1") is None
        assert sent(http)["url"] == "https://nlc/v1/classifiers/c1"

    def test_shared_session_keeps_each_users_auth(self, http, nlc_credentials):
        alice = ClassifierService(nlc_credentials, "alice", "secret", session=http)
        bob = ClassifierService(nlc_credentials, "bob", "hunter2", session=http)
        http.request.return_value = make_response(body={"classifiers": []})

        alice.list()
        bob.list()
        alice.list()

        auths = [call[1]["auth"] for call in http.request.call_args_list]
        assert auths == [("alice", "secret"), ("bob", "hunter2"), ("alice", "secret")]

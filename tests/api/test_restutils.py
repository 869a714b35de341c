"""Tests for Range parsing and response shaping."""

import json

import pytest

from groundtruth.api.errors import BadRequestError, GroundTruthError, StoreError
from groundtruth.api.restutils import (
    ListOptions,
    error_response,
    hide_implementation_details,
    list_response,
    parse_fields,
    parse_range,
    verify_objects_list,
)


class TestParseRange:

    def test_default(self):
        assert parse_range(None) == (0, 100)

    def test_first_and_last(self):
        assert parse_range("items=10-19") == (10, 10)

    def test_open_start(self):
        assert parse_range("items=-9") == (0, 10)

    def test_client_bound(self):
        assert parse_range("items=0-9999") == (0, 10000)

    def test_unsupported_unit(self):
        with pytest.raises(BadRequestError, match="Unsupported range type : bytes"):
            parse_range("bytes=0-9")

    def test_multiple_ranges(self):
        with pytest.raises(BadRequestError, match="Multiple ranges is unsupported"):
            parse_range("items=0-9,20-29")

    @pytest.mark.parametrize("header", ["items", "items=a-b", "items=5-", "items=9-3"])
    def test_invalid(self, header):
        with pytest.raises(BadRequestError, match="Invalid Range format"):
            parse_range(header)


def test_parse_fields_maps_id():
    assert parse_fields("id, name,,description") == ["_id", "name", "description"]
    assert parse_fields("") is None


def test_verify_objects_list():
    assert verify_objects_list([]) == []
    with pytest.raises(BadRequestError, match="Expected an array"):
        verify_objects_list({"op": "add"})


class TestHideImplementationDetails:

    def test_scrubs_internal_fields(self):
        doc = {"_id": "c1", "_rev": "1-a", "schema": "class", "tenant": "alice", "password": "x", "name": "greeting"}
        assert hide_implementation_details(doc) == {"id": "c1", "name": "greeting"}

    def test_none(self):
        assert hide_implementation_details(None) is None


def test_list_response_content_range():
    docs = [{"_id": str(i), "_rev": "1-a"} for i in range(3)]
    response = list_response(docs, ListOptions(skip=5, limit=3), total=20)
    assert response.headers["Content-Range"] == "items 5-7/20"
    assert json.loads(response.body) == [{"id": "0"}, {"id": "1"}, {"id": "2"}]


class TestErrorResponse:

    def body(self, response):
        return json.loads(response.body)

    def test_not_found(self):
        response = error_response(StoreError("not_found", "missing"))
        assert response.status_code == 404
        assert self.body(response) == {"error": "Not found"}

    def test_conflict_is_bad_etag(self):
        response = error_response(StoreError("conflict", "rev mismatch"))
        assert response.status_code == 412
        assert self.body(response) == {"error": "Incorrect If-Match header"}

    def test_forbidden(self):
        response = error_response(GroundTruthError("nope", 403))
        assert response.status_code == 403
        assert self.body(response) == {"error": "Insufficient privileges"}

    def test_other_category_keeps_message(self):
        response = error_response(StoreError("invalid", "Invalid class id specified"))
        assert response.status_code == 422
        assert self.body(response) == {"error": "Invalid class id specified"}

    def test_unknown_exception(self):
        response = error_response(RuntimeError("boom"))
        assert response.status_code == 500
        assert self.body(response) == {"error": "boom"}

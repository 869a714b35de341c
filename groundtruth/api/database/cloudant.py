"""Minimal Cloudant (CouchDB) HTTP client built on requests."""

import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from groundtruth.api.errors import (
    CONFLICT,
    FORBIDDEN,
    INVALID,
    NOT_FOUND,
    UNKNOWN,
    StoreError,
)

logger = logging.getLogger(__name__)

_STATUS_CATEGORY = {
    400: INVALID,
    403: FORBIDDEN,
    404: NOT_FOUND,
    409: CONFLICT,
}


class CloudantClient:
    """Account level client; hands out CloudantDatabase objects."""

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None
    ):
        self.base_url = url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (username, password)
        self.session.headers.update({"Accept": "application/json"})

    def database(self, name: str) -> "CloudantDatabase":
        return CloudantDatabase(self, name)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict] = None,
        json_body: Any = None,
        allowed: tuple = (),
    ) -> Any:
        """Make HTTP request and return the decoded JSON body."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            if response.status_code in allowed:
                return response.json() if response.content else {}
            response.raise_for_status()
            return response.json() if response.content else {}
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code
            reason = str(e)
            try:
                body = e.response.json()
                reason = body.get("reason") or body.get("error") or reason
            except ValueError:
                pass
            logger.debug(f"Cloudant {method} {path} failed: {status} {reason}")
            raise StoreError(_STATUS_CATEGORY.get(status, UNKNOWN), reason) from e
        except requests.exceptions.RequestException as e:
            raise StoreError(UNKNOWN, f"Connection error: {e}") from e


class CloudantDatabase:
    """Document operations against a single database."""

    def __init__(self, client: CloudantClient, name: str):
        self._client = client
        self.name = name

    def _path(self, *parts: str) -> str:
        return "/".join([quote(self.name, safe="")] + list(parts))

    def _doc_path(self, doc_id: str) -> str:
        safe = "/" if doc_id.startswith("_design/") else ""
        return self._path(quote(doc_id, safe=safe))

    def create(self) -> bool:
        """Create the database; returns False when it already exists."""
        result = self._client.request("PUT", self._path(), allowed=(412,))
        created = bool(result.get("ok"))
        if created:
            logger.info(f"Created database {self.name}")
        return created

    def get(self, doc_id: str) -> dict:
        return self._client.request("GET", self._doc_path(doc_id))

    def save(self, doc: dict) -> dict:
        """Create or update a document; returns {ok, id, rev}."""
        if "_id" in doc:
            return self._client.request("PUT", self._doc_path(doc["_id"]), json_body=doc)
        return self._client.request("POST", self._path(), json_body=doc)

    def delete(self, doc_id: str, rev: str) -> dict:
        return self._client.request("DELETE", self._doc_path(doc_id), params={"rev": rev})

    def bulk(self, docs: List[dict]) -> List[dict]:
        """Write many documents at once; returns one status entry per document."""
        return self._client.request("POST", self._path("_bulk_docs"), json_body={"docs": docs})

    def find(
        self,
        selector: dict,
        fields: Optional[List[str]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[dict]:
        """Run a Mango query."""
        query = {"selector": selector, "skip": skip}
        if fields:
            query["fields"] = fields
        if limit is not None:
            query["limit"] = limit
        result = self._client.request("POST", self._path("_find"), json_body=query)
        return result.get("docs", [])

    def view(self, design: str, view: str, **params) -> dict:
        """Query a view; parameter values are JSON encoded as CouchDB expects."""
        encoded = {k: json.dumps(v) for k, v in params.items()}
        return self._client.request("GET", self._path("_design", design, "_view", view), params=encoded)

    def create_index(self, fields: List[str], name: str, design: str) -> dict:
        body = {"index": {"fields": fields}, "name": name, "ddoc": design, "type": "json"}
        return self._client.request("POST", self._path("_index"), json_body=body)

    def ensure_design(self, design: dict) -> None:
        """Install a design document, replacing it when its views changed."""
        try:
            existing = self.get(design["_id"])
        except StoreError as e:
            if e.category != NOT_FOUND:
                raise
            existing = None

        if existing is not None:
            if existing.get("views") == design.get("views"):
                return
            design = dict(design, _rev=existing["_rev"])

        self.save(design)
        logger.info(f"Installed design document {design['_id']} in {self.name}")

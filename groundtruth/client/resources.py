"""Tenant scoped REST resource clients (classes, texts, content)."""

import logging
from typing import Any, Dict, List, Optional

from .http import HttpGateway
from .session import Session

logger = logging.getLogger(__name__)

# Mutations never carry a real revision; conflict checks are left to the server
MATCH_ANY = {"If-Match": "*"}


class ResourceClient:
    """CRUD calls against ``{base}/{tenant}/{resource}``."""

    def __init__(
        self,
        http: HttpGateway,
        session: Session,
        base: str,
        resource: str,
        range_limit: int = 10000
    ):
        self._http = http
        self._session = session
        self._base = base.rstrip("/")
        self._resource = resource
        self._range_limit = range_limit

    @property
    def endpoint(self) -> str:
        """Resolved on every call so a tenant change takes effect immediately."""
        return f"{self._base}/{self._session.tenant}/{self._resource}"

    async def query(self, params: Optional[Dict] = None) -> Any:
        """List items; only the first ``range_limit`` are requested."""
        headers = {"Range": f"items=0-{self._range_limit - 1}"}
        return await self._http.get(self.endpoint, params=params, headers=headers)

    async def get(self, item_id: str) -> Any:
        return await self._http.get(f"{self.endpoint}/{item_id}")

    async def post(self, data: Any) -> Any:
        return await self._http.post(self.endpoint, json=data, headers=MATCH_ANY)

    async def update(self, item_id: str, data: Any) -> Any:
        return await self._http.put(f"{self.endpoint}/{item_id}", json=data, headers=MATCH_ANY)

    async def remove(self, item_id: str) -> Any:
        return await self._http.delete(f"{self.endpoint}/{item_id}", headers=MATCH_ANY)


class Classes(ResourceClient):
    def __init__(self, http: HttpGateway, session: Session, base: str = "/api", range_limit: int = 10000):
        super().__init__(http, session, base, "classes", range_limit)


class Texts(ResourceClient):
    """Texts are updated through ordered patch operations."""

    def __init__(self, http: HttpGateway, session: Session, base: str = "/api", range_limit: int = 10000):
        super().__init__(http, session, base, "texts", range_limit)

    async def _patch(self, item_id: str, operations: List[dict]) -> Any:
        return await self._http.patch(f"{self.endpoint}/{item_id}", json=operations, headers=MATCH_ANY)

    async def update(self, item_id: str, metadata: Any) -> Any:
        """Replace the text value and/or metadata."""
        return await self._patch(item_id, [{"op": "replace", "path": "/metadata", "value": metadata}])

    async def add_classes(self, item_id: str, classes: List[dict]) -> Any:
        """Label a text; ``classes`` is a list of {"id": ...} objects."""
        return await self._patch(item_id, [{"op": "add", "path": "/classes", "value": classes}])

    async def remove_classes(self, item_id: str, classes: List[dict]) -> Any:
        return await self._patch(item_id, [{"op": "remove", "path": "/classes", "value": classes}])

    async def remove_all(self, item_ids: List[str]) -> List[Any]:
        """Delete each text in turn; stops at the first failure."""
        results = []
        for item_id in item_ids:
            results.append(await self.remove(item_id))
        return results


class Content:
    """Bulk import and export of a tenant's training data."""

    def __init__(self, http: HttpGateway, session: Session, base: str = "/api"):
        self._http = http
        self._session = session
        self._base = base.rstrip("/")

    @property
    def endpoint(self) -> str:
        return f"{self._base}/{self._session.tenant}/content"

    async def download(self, fmt: str = "json") -> Any:
        """Export everything; ``fmt`` is "json" or "csv"."""
        return await self._http.get(self.endpoint, params={"format": fmt})

    async def upload(self, filename: str, data: bytes, content_type: Optional[str] = None) -> Any:
        """Start an import; returns the import id and status."""
        if not data:
            raise ValueError("Cannot upload an empty file")
        if content_type is None:
            content_type = "application/json" if filename.lower().endswith(".json") else "text/csv"
        logger.info(f"Uploading {filename} ({len(data)} bytes)")
        files = {"file": (filename, data, content_type)}
        return await self._http.post(self.endpoint, files=files)

    async def import_status(self, import_id: str) -> Any:
        return await self._http.get(f"{self.endpoint}/import/{import_id}")

"""Text service - applies PATCH operations to a text."""

import logging
from typing import List, Optional

from groundtruth.api.database.store import TrainingStore
from groundtruth.api.errors import INVALID, as_error


class TextService:
    """Service for partial updates of texts."""

    def __init__(
        self,
        store: TrainingStore,
        logger: Optional[logging.Logger] = None
    ):
        self._store = store
        self._logger = logger or logging.getLogger(__name__)

    def apply(self, tenant: str, text_id: str, operations: List[dict]) -> None:
        """
        Apply patch operations in order.

        Supported:
            {"op": "add" | "remove", "path": "/classes", "value": [{"id": ...}, ...]}
            {"op": "replace", "path": "/metadata", "value": {"value"?, "metadata"?}}
        """
        for operation in operations:
            if not isinstance(operation, dict):
                raise as_error(INVALID, "Unsupported operation")
            op = operation.get("op")
            path = operation.get("path")
            value = operation.get("value")

            if path == "/classes" and op in ("add", "remove"):
                class_ids = self._class_ids(value)
                if op == "add":
                    self._store.add_classes_to_text(tenant, text_id, class_ids)
                else:
                    self._store.remove_classes_from_text(tenant, text_id, class_ids)
            elif path == "/metadata" and op == "replace":
                self._store.update_text_metadata(tenant, text_id, self._metadata(value))
            else:
                raise as_error(INVALID, "Unsupported operation")

            self._logger.debug(f"Applied {op} {path} to text {text_id}")

    def _class_ids(self, value) -> List[str]:
        if not isinstance(value, list):
            raise as_error(INVALID, "Invalid value array")
        ids = []
        for item in value:
            if not isinstance(item, dict) or not isinstance(item.get("id"), str):
                raise as_error(INVALID, "Invalid value array")
            ids.append(item["id"])
        return ids

    def _metadata(self, value) -> dict:
        if not isinstance(value, dict):
            raise as_error(INVALID, "Invalid metadata")
        changes = {k: value[k] for k in ("value", "metadata") if k in value}
        if not changes:
            raise as_error(INVALID, "Invalid value")
        return changes

"""Document factories for the objects kept in the training store."""

import uuid
from typing import Optional

CLASS_SCHEMA = "class"
TEXT_SCHEMA = "text"

# Design document with the views and indexes the store relies on
DESIGN_NAME = "training"
DESIGN_DOC = {
    "_id": f"_design/{DESIGN_NAME}",
    "language": "javascript",
    "views": {
        "schema_count": {
            "map": "function (doc) { if (doc.tenant && doc.schema) { emit([doc.tenant, doc.schema], 1); } }",
            "reduce": "_count",
        },
    },
}
INDEXES = {
    "tenant-schema": ["tenant", "schema"],
}


def new_id() -> str:
    return str(uuid.uuid4())


def new_class(tenant: str, attrs: dict, doc_id: Optional[str] = None) -> dict:
    """Build a class document."""
    doc = {
        "_id": doc_id or new_id(),
        "tenant": tenant,
        "schema": CLASS_SCHEMA,
        "name": attrs.get("name"),
    }
    if attrs.get("description") is not None:
        doc["description"] = attrs["description"]
    return doc


def new_text(tenant: str, attrs: dict, doc_id: Optional[str] = None) -> dict:
    """Build a text document; ``classes`` holds class ids."""
    doc = {
        "_id": doc_id or new_id(),
        "tenant": tenant,
        "schema": TEXT_SCHEMA,
        "value": attrs.get("value"),
    }
    if attrs.get("classes"):
        doc["classes"] = list(dict.fromkeys(attrs["classes"]))
    if attrs.get("metadata") is not None:
        doc["metadata"] = attrs["metadata"]
    return doc

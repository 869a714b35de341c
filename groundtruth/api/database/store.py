"""Training store - tenant scoped classes and texts kept in Cloudant."""

import logging
from typing import Iterable, List, Optional

from groundtruth.api.database import objects
from groundtruth.api.database.cloudant import CloudantDatabase
from groundtruth.api.errors import (
    CONFLICT,
    INVALID,
    NOT_FOUND,
    REQUIRED_FIELD_MISSING,
    UNEXPECTED_OBJECT_TYPE,
    UNIQUE_CONSTRAINT_VIOLATED,
    StoreError,
    as_error,
)

WILDCARD_REV = "*"
CLASS_REFERENCE_BATCH = 100
TENANT_DELETE_BATCH = 1000
EXPORT_BATCH = 1000


class TrainingStore:
    """Store for ground truth classes and texts."""

    def __init__(
        self,
        db: CloudantDatabase,
        logger: Optional[logging.Logger] = None
    ):
        self._db = db
        self._logger = logger or logging.getLogger(__name__)

    def setup(self) -> None:
        """Create the database, its design document and its query indexes."""
        self._db.create()
        self._db.ensure_design(objects.DESIGN_DOC)
        for name, fields in objects.INDEXES.items():
            self._db.create_index(fields, name, objects.DESIGN_NAME)
        self._logger.info(f"Training store ready in database {self._db.name}")

    # ============ Helpers ============

    def _get_doc(self, tenant: str, schema: str, doc_id: str) -> dict:
        doc = self._db.get(doc_id)
        if doc.get("tenant") != tenant:
            raise as_error(NOT_FOUND, f"No {schema} with id {doc_id}")
        if doc.get("schema") != schema:
            raise as_error(UNEXPECTED_OBJECT_TYPE, f"Object {doc_id} is not a {schema}")
        return doc

    def _check_rev(self, doc: dict, rev: str) -> None:
        if rev != WILDCARD_REV and rev != doc.get("_rev"):
            raise as_error(CONFLICT, f"Revision mismatch for {doc['_id']}")

    def _save(self, doc: dict) -> dict:
        result = self._db.save(doc)
        doc["_rev"] = result["rev"]
        return doc

    def _count(self, tenant: str, schema: str) -> int:
        result = self._db.view(objects.DESIGN_NAME, "schema_count", key=[tenant, schema], group=True)
        rows = result.get("rows", [])
        return rows[0]["value"] if rows else 0

    def _list(self, tenant: str, schema: str, skip: int, limit: int, fields: Optional[List[str]]) -> List[dict]:
        selector = {"tenant": tenant, "schema": schema}
        return self._db.find(selector, fields=fields, skip=skip, limit=limit)

    def _all(self, tenant: str, schema: str) -> Iterable[dict]:
        skip = 0
        while True:
            page = self._list(tenant, schema, skip, EXPORT_BATCH, None)
            yield from page
            if len(page) < EXPORT_BATCH:
                return
            skip += EXPORT_BATCH

    def _verify_class_ids(self, tenant: str, class_ids: List[str]) -> None:
        if not class_ids:
            return
        wanted = set(class_ids)
        selector = {"tenant": tenant, "schema": objects.CLASS_SCHEMA, "_id": {"$in": sorted(wanted)}}
        found = {d["_id"] for d in self._db.find(selector, fields=["_id"], limit=len(wanted))}
        if found != wanted:
            raise as_error(INVALID, "Invalid class id specified")

    # ============ Classes ============

    def create_class(self, tenant: str, attrs: dict) -> dict:
        """Create a new class; names are unique within a tenant."""
        name = attrs.get("name")
        if not name:
            raise as_error(REQUIRED_FIELD_MISSING, "Missing required class name")
        if self.get_class_by_name(tenant, name) is not None:
            raise as_error(UNIQUE_CONSTRAINT_VIOLATED, f"Class name already exists: {name}")

        doc = self._save(objects.new_class(tenant, attrs))
        self._logger.info(f"Created class {doc['_id']} '{name}' for tenant {tenant}")
        return doc

    def get_class(self, tenant: str, class_id: str) -> dict:
        return self._get_doc(tenant, objects.CLASS_SCHEMA, class_id)

    def get_class_by_name(self, tenant: str, name: str) -> Optional[dict]:
        selector = {"tenant": tenant, "schema": objects.CLASS_SCHEMA, "name": name}
        docs = self._db.find(selector, limit=1)
        return docs[0] if docs else None

    def get_classes(self, tenant: str, skip: int = 0, limit: int = 100, fields: Optional[List[str]] = None) -> List[dict]:
        return self._list(tenant, objects.CLASS_SCHEMA, skip, limit, fields)

    def count_classes(self, tenant: str) -> int:
        return self._count(tenant, objects.CLASS_SCHEMA)

    def replace_class(self, tenant: str, class_id: str, rev: str, attrs: dict) -> dict:
        """Replace all attributes of a class."""
        existing = self.get_class(tenant, class_id)
        self._check_rev(existing, rev)

        name = attrs.get("name")
        if not name:
            raise as_error(REQUIRED_FIELD_MISSING, "Missing required class name")
        if name != existing.get("name"):
            duplicate = self.get_class_by_name(tenant, name)
            if duplicate is not None and duplicate["_id"] != class_id:
                raise as_error(UNIQUE_CONSTRAINT_VIOLATED, f"Class name already exists: {name}")

        doc = objects.new_class(tenant, attrs, class_id)
        doc["_rev"] = existing["_rev"]
        return self._save(doc)

    def delete_class(self, tenant: str, class_id: str, rev: str) -> None:
        """Delete a class and remove it from every text that references it."""
        existing = self.get_class(tenant, class_id)
        self._check_rev(existing, rev)
        self._db.delete(class_id, existing["_rev"])
        self._logger.info(f"Deleted class {class_id} for tenant {tenant}")

        updated = self._remove_class_references(tenant, class_id)
        if updated:
            self._logger.info(f"Removed class {class_id} from {updated} texts")

    def _remove_class_references(self, tenant: str, class_id: str) -> int:
        selector = {
            "tenant": tenant,
            "schema": objects.TEXT_SCHEMA,
            "classes": {"$elemMatch": {"$eq": class_id}},
        }
        failed = set()
        updated = 0
        while True:
            if failed:
                selector["_id"] = {"$nin": sorted(failed)}
            texts = self._db.find(selector, limit=CLASS_REFERENCE_BATCH)
            if not texts:
                return updated
            for text in texts:
                text["classes"] = [c for c in text.get("classes", []) if c != class_id]
            results = self._db.bulk(texts)
            failures = [r for r in results if r.get("error")]
            for failure in failures:
                self._logger.warning(f"Failed to update text {failure.get('id')}: {failure.get('error')}")
                failed.add(failure.get("id"))
            updated += len(texts) - len(failures)

    # ============ Texts ============

    def create_text(self, tenant: str, attrs: dict) -> dict:
        """Create a new text, optionally labelled with existing class ids."""
        value = attrs.get("value")
        if not value:
            raise as_error(REQUIRED_FIELD_MISSING, "Missing required text value")
        self._verify_class_ids(tenant, attrs.get("classes") or [])

        doc = self._save(objects.new_text(tenant, attrs))
        self._logger.debug(f"Created text {doc['_id']} for tenant {tenant}")
        return doc

    def get_text(self, tenant: str, text_id: str) -> dict:
        return self._get_doc(tenant, objects.TEXT_SCHEMA, text_id)

    def get_text_by_value(self, tenant: str, value: str) -> Optional[dict]:
        selector = {"tenant": tenant, "schema": objects.TEXT_SCHEMA, "value": value}
        docs = self._db.find(selector, limit=1)
        return docs[0] if docs else None

    def get_texts(self, tenant: str, skip: int = 0, limit: int = 100, fields: Optional[List[str]] = None) -> List[dict]:
        return self._list(tenant, objects.TEXT_SCHEMA, skip, limit, fields)

    def count_texts(self, tenant: str) -> int:
        return self._count(tenant, objects.TEXT_SCHEMA)

    def add_classes_to_text(self, tenant: str, text_id: str, class_ids: List[str]) -> dict:
        self._verify_class_ids(tenant, class_ids)
        doc = self.get_text(tenant, text_id)
        doc["classes"] = list(dict.fromkeys(doc.get("classes", []) + list(class_ids)))
        return self._save(doc)

    def remove_classes_from_text(self, tenant: str, text_id: str, class_ids: List[str]) -> dict:
        self._verify_class_ids(tenant, class_ids)
        doc = self.get_text(tenant, text_id)
        removed = set(class_ids)
        doc["classes"] = [c for c in doc.get("classes", []) if c not in removed]
        return self._save(doc)

    def update_text_metadata(self, tenant: str, text_id: str, changes: dict) -> dict:
        """Replace the text value and/or its metadata object."""
        doc = self.get_text(tenant, text_id)
        if "value" in changes:
            if not changes["value"]:
                raise as_error(REQUIRED_FIELD_MISSING, "Missing required text value")
            doc["value"] = changes["value"]
        if "metadata" in changes:
            doc["metadata"] = changes["metadata"]
        return self._save(doc)

    def delete_text(self, tenant: str, text_id: str, rev: str) -> None:
        existing = self.get_text(tenant, text_id)
        self._check_rev(existing, rev)
        self._db.delete(text_id, existing["_rev"])
        self._logger.debug(f"Deleted text {text_id} for tenant {tenant}")

    # ============ Tenant ============

    def delete_tenant(self, tenant: str) -> int:
        """Delete every document belonging to a tenant."""
        deleted = 0
        while True:
            docs = self._db.find({"tenant": tenant}, fields=["_id", "_rev"], limit=TENANT_DELETE_BATCH)
            if not docs:
                break
            results = self._db.bulk([dict(d, _deleted=True) for d in docs])
            ok = sum(1 for r in results if not r.get("error"))
            deleted += ok
            if ok == 0:
                raise StoreError(CONFLICT, f"Unable to delete documents for tenant {tenant}")
        self._logger.info(f"Deleted {deleted} documents for tenant {tenant}")
        return deleted

    # ============ Import / export ============

    def process_import_entry(self, tenant: str, entry: dict) -> dict:
        """
        Store one {text, classes} training entry.

        Classes are looked up by name and created when missing. A text with
        the same value is reused and gets the classes added.

        Returns:
            {classes: [{name, id, created, error?}], text: {id, value, created, classes} or None}
        """
        classes = []
        for name in entry.get("classes") or []:
            try:
                existing = self.get_class_by_name(tenant, name)
                if existing is not None:
                    classes.append({"name": name, "id": existing["_id"], "created": False})
                else:
                    doc = self.create_class(tenant, {"name": name})
                    classes.append({"name": name, "id": doc["_id"], "created": True})
            except StoreError as e:
                classes.append({"name": name, "created": False, "error": e.message})

        class_ids = [c["id"] for c in classes if "id" in c]
        value = entry.get("text")
        if not value:
            return {"classes": classes, "text": None}

        existing_text = self.get_text_by_value(tenant, value)
        if existing_text is not None:
            doc = self.add_classes_to_text(tenant, existing_text["_id"], class_ids) if class_ids else existing_text
            created = False
        else:
            doc = self.create_text(tenant, {"value": value, "classes": class_ids})
            created = True

        return {
            "classes": classes,
            "text": {"id": doc["_id"], "value": doc["value"], "created": created, "classes": doc.get("classes", [])},
        }

    def export(self, tenant: str) -> dict:
        """All classes and texts of a tenant."""
        return {
            "classes": list(self._all(tenant, objects.CLASS_SCHEMA)),
            "texts": list(self._all(tenant, objects.TEXT_SCHEMA)),
        }

"""Texts router - CRUD and partial updates for a tenant's texts."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from groundtruth.api import restutils
from groundtruth.api.auth import require_tenant
from groundtruth.api.database.session import get_store
from groundtruth.api.database.store import TrainingStore
from groundtruth.api.restutils import ListOptions, if_match, list_options
from groundtruth.api.schemas.training import TextRequest
from groundtruth.api.services.text_service import TextService

router = APIRouter(prefix="/api/{tenant}/texts", tags=["texts"])


@router.get("")
def list_texts(
    tenant: str = Depends(require_tenant),
    options: ListOptions = Depends(list_options),
    store: TrainingStore = Depends(get_store)
):
    """List texts; paged with the Range header."""
    docs = store.get_texts(tenant, options.skip, options.limit, options.fields)
    return restutils.list_response(docs, options, store.count_texts(tenant))


@router.post("")
def create_text(
    body: TextRequest,
    tenant: str = Depends(require_tenant),
    store: TrainingStore = Depends(get_store)
):
    """Create a text."""
    attrs = {"value": body.value, "classes": body.class_ids(), "metadata": body.metadata}
    doc = store.create_text(tenant, attrs)
    return restutils.new_item(doc, f"/api/{tenant}/texts/{doc['_id']}")


@router.get("/{text_id}")
def get_text(text_id: str, tenant: str = Depends(require_tenant), store: TrainingStore = Depends(get_store)):
    """Get a text by ID."""
    return restutils.item(store.get_text(tenant, text_id))


@router.patch("/{text_id}")
def patch_text(
    text_id: str,
    operations: Any = Body(...),
    tenant: str = Depends(require_tenant),
    store: TrainingStore = Depends(get_store)
):
    """Apply an ordered list of {op, path, value} operations."""
    TextService(store).apply(tenant, text_id, restutils.verify_objects_list(operations))
    return Response(status_code=204)


@router.delete("/{text_id}")
def delete_text(
    text_id: str,
    tenant: str = Depends(require_tenant),
    rev: str = Depends(if_match),
    store: TrainingStore = Depends(get_store)
):
    """Delete a text."""
    store.delete_text(tenant, text_id, rev)
    return restutils.deleted()

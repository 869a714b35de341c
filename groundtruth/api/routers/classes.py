"""Classes router - CRUD for a tenant's classes."""

from fastapi import APIRouter, Depends

from groundtruth.api import restutils
from groundtruth.api.auth import require_tenant
from groundtruth.api.database.session import get_store
from groundtruth.api.database.store import TrainingStore
from groundtruth.api.errors import BadRequestError
from groundtruth.api.restutils import ListOptions, if_match, list_options
from groundtruth.api.schemas.training import ClassRequest

router = APIRouter(prefix="/api/{tenant}/classes", tags=["classes"])


@router.get("")
def list_classes(
    tenant: str = Depends(require_tenant),
    options: ListOptions = Depends(list_options),
    store: TrainingStore = Depends(get_store)
):
    """List classes; paged with the Range header."""
    docs = store.get_classes(tenant, options.skip, options.limit, options.fields)
    return restutils.list_response(docs, options, store.count_classes(tenant))


@router.post("")
def create_class(
    body: ClassRequest,
    tenant: str = Depends(require_tenant),
    store: TrainingStore = Depends(get_store)
):
    """Create a class."""
    doc = store.create_class(tenant, body.model_dump(exclude_none=True, exclude={"id"}))
    return restutils.new_item(doc, f"/api/{tenant}/classes/{doc['_id']}")


@router.get("/{class_id}")
def get_class(class_id: str, tenant: str = Depends(require_tenant), store: TrainingStore = Depends(get_store)):
    """Get a class by ID."""
    return restutils.item(store.get_class(tenant, class_id))


@router.put("/{class_id}")
def replace_class(
    class_id: str,
    body: ClassRequest,
    tenant: str = Depends(require_tenant),
    rev: str = Depends(if_match),
    store: TrainingStore = Depends(get_store)
):
    """Replace a class; If-Match must carry its revision or '*'."""
    if body.id is not None and body.id != class_id:
        raise BadRequestError("Mismatch of class id")
    attrs = body.model_dump(exclude_none=True, exclude={"id"})
    if not attrs:
        raise BadRequestError("Missing class")
    doc = store.replace_class(tenant, class_id, rev, attrs)
    return restutils.item(doc)


@router.delete("/{class_id}")
def delete_class(
    class_id: str,
    tenant: str = Depends(require_tenant),
    rev: str = Depends(if_match),
    store: TrainingStore = Depends(get_store)
):
    """Delete a class and unlink it from its texts."""
    store.delete_class(tenant, class_id, rev)
    return restutils.deleted()

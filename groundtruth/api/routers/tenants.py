"""Tenants router."""

from fastapi import APIRouter, Depends

from groundtruth.api import restutils
from groundtruth.api.auth import require_tenant
from groundtruth.api.database.session import get_store
from groundtruth.api.database.store import TrainingStore

router = APIRouter(prefix="/api", tags=["tenants"])


@router.delete("/{tenant}")
def delete_tenant(tenant: str = Depends(require_tenant), store: TrainingStore = Depends(get_store)):
    """Delete all classes and texts of a tenant."""
    store.delete_tenant(tenant)
    return restutils.deleted()

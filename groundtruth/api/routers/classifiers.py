"""Classifiers router - proxies the classifier service for the logged in user."""

import requests
from fastapi import APIRouter, Depends

from groundtruth.api import restutils
from groundtruth.api.auth import get_http_session, require_tenant, require_user
from groundtruth.api.credentials import ServiceCredentials, get_classifier_credentials
from groundtruth.api.schemas.classifier import ClassifyRequest, TrainRequest
from groundtruth.api.services.classifier_service import ClassifierService, ClassifierServiceError
from groundtruth.config import get_global_config

router = APIRouter(prefix="/api/{tenant}/classifiers", tags=["classifiers"])


def get_classifier_service(
    user: dict = Depends(require_user),
    credentials: ServiceCredentials = Depends(get_classifier_credentials),
    session: requests.Session = Depends(get_http_session)
) -> ClassifierService:
    return ClassifierService(
        credentials,
        user["username"],
        user["password"],
        timeout=get_global_config().get_float('http.timeout_sec', 30),
        session=session,
    )


@router.get("")
def list_classifiers(
    tenant: str = Depends(require_tenant),
    service: ClassifierService = Depends(get_classifier_service)
):
    """List classifiers."""
    return {"classifiers": service.list()}


@router.post("")
def train(
    request: TrainRequest,
    tenant: str = Depends(require_tenant),
    service: ClassifierService = Depends(get_classifier_service)
):
    """Train a new classifier."""
    training_data = [entry.model_dump() for entry in request.training_data]
    return service.create(training_data, request.language, request.name)


@router.get("/{classifier_id}")
def get_classifier(
    classifier_id: str,
    tenant: str = Depends(require_tenant),
    service: ClassifierService = Depends(get_classifier_service)
):
    """Get a classifier."""
    return service.status(classifier_id)


@router.get("/{classifier_id}/status")
def get_status(
    classifier_id: str,
    tenant: str = Depends(require_tenant),
    service: ClassifierService = Depends(get_classifier_service)
):
    """Training status of a classifier."""
    return service.status(classifier_id)


@router.post("/{classifier_id}/classify")
def classify(
    classifier_id: str,
    request: ClassifyRequest,
    tenant: str = Depends(require_tenant),
    service: ClassifierService = Depends(get_classifier_service)
):
    """Classify a text."""
    try:
        return service.classify(classifier_id, request.text)
    except ClassifierServiceError as e:
        raise e.with_upstream_status()


@router.delete("/{classifier_id}")
def delete_classifier(
    classifier_id: str,
    tenant: str = Depends(require_tenant),
    service: ClassifierService = Depends(get_classifier_service)
):
    """Delete a classifier."""
    service.remove(classifier_id)
    return restutils.deleted()

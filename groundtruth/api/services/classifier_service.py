"""Classifier service - proxies calls to the remote classifier on the user's behalf."""

import json
import logging
from typing import Any, List, Optional

import requests

from groundtruth.api.credentials import ServiceCredentials
from groundtruth.api.errors import GroundTruthError
from groundtruth.training import to_csv


class ClassifierServiceError(GroundTruthError):
    """Error answered by the classifier service, keeping its payload."""

    status_code = 400

    def __init__(self, upstream_status: int, payload: Any):
        if isinstance(payload, dict):
            message = payload.get("description") or payload.get("error") or str(payload)
        else:
            message = str(payload)
        super().__init__(message)
        self.upstream_status = upstream_status
        self.payload = payload if isinstance(payload, dict) else {"error": message}

    def with_upstream_status(self) -> "ClassifierServiceError":
        """Answer with the classifier's own status code instead of 400."""
        if self.upstream_status:
            self.status_code = self.upstream_status
        return self


class ClassifierService:
    """Service for training, inspecting and using classifiers."""

    def __init__(
        self,
        credentials: ServiceCredentials,
        username: str,
        password: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        self._base_url = f"{credentials.url.rstrip('/')}/{credentials.version}/classifiers"
        self._timeout = timeout
        self._session = session or requests.Session()
        self._auth = (username, password)
        self._logger = logger or logging.getLogger(__name__)

    def _request(self, method: str, path: str = "", **kwargs) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(method=method, url=url, auth=self._auth, timeout=self._timeout, **kwargs)
            response.raise_for_status()
            return response.json() if response.content else {}
        except requests.exceptions.HTTPError as e:
            try:
                payload = e.response.json()
            except ValueError:
                payload = {"error": e.response.text or str(e)}
            self._logger.warning(f"Classifier {method} {path or '/'} failed: {e.response.status_code}")
            raise ClassifierServiceError(e.response.status_code, payload) from e
        except requests.exceptions.RequestException as e:
            self._logger.error(f"Unable to reach classifier service: {e}")
            raise ClassifierServiceError(0, {"error": f"Connection error: {e}"}) from e

    def list(self) -> List[dict]:
        """List the user's classifiers."""
        return self._request("GET").get("classifiers", [])

    def create(self, training_data: List[dict], language: str = "en", name: str = "classifier") -> dict:
        """Start training a new classifier."""
        self._logger.info(f"Training classifier '{name}' ({language}) on {len(training_data)} texts")
        metadata = json.dumps({"language": language, "name": name})
        files = {
            "training_metadata": (None, metadata, "application/json"),
            "training_data": ("training.csv", to_csv(training_data), "text/csv"),
        }
        return self._request("POST", files=files)

    def status(self, classifier_id: str) -> dict:
        return self._request("GET", f"/{classifier_id}")

    def classify(self, classifier_id: str, text: str) -> dict:
        return self._request("POST", f"/{classifier_id}/classify", json={"text": text})

    def remove(self, classifier_id: str) -> None:
        self._logger.info(f"Deleting classifier {classifier_id}")
        self._request("DELETE", f"/{classifier_id}")

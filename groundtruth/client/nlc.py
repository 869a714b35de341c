"""Classifier training client and status poller."""

import asyncio
import inspect
import json
import logging
from typing import Any, Callable, Iterable, List, Optional

from groundtruth import training

from .config import Endpoints
from .http import HttpGateway
from .session import Session


class PollHandle:
    """Handle on a running status poll; the owner must cancel it."""

    def __init__(self, classifier_id: str):
        self.classifier_id = classifier_id
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()

    @property
    def cancelled(self) -> bool:
        return self._task is not None and self._task.done()

    async def wait(self) -> None:
        """Wait for the poll to end after it was cancelled."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass


class NlcClient:
    """Wraps the classifier endpoints of the backend for the current tenant."""

    def __init__(
        self,
        http: HttpGateway,
        session: Session,
        endpoints: Endpoints,
        logger: Optional[logging.Logger] = None
    ):
        self._http = http
        self._session = session
        self._endpoints = endpoints
        self._logger = logger or logging.getLogger(__name__)

    @property
    def endpoint(self) -> str:
        return f"{self._endpoints.classifier.rstrip('/')}/{self._session.tenant}/classifiers"

    async def get_classifiers(self) -> Any:
        return await self._http.get(self.endpoint)

    async def train(self, training_data: List[dict], language: str = "en", name: str = "classifier") -> Any:
        """Start training; ``training_data`` is a list of {text, classes}."""
        payload = {"language": language, "name": name, "training_data": training_data}
        return await self._http.post(self.endpoint, json=payload)

    async def check_status(self, classifier_id: str) -> Any:
        return await self._http.get(f"{self.endpoint}/{classifier_id}/status")

    async def classify(self, classifier_id: str, text: str) -> Any:
        return await self._http.post(f"{self.endpoint}/{classifier_id}/classify", json={"text": text})

    async def remove(self, classifier_id: str) -> Any:
        return await self._http.delete(f"{self.endpoint}/{classifier_id}")

    def poll_status(
        self,
        classifier_id: str,
        on_update: Callable[[Any], Any],
        interval_sec: float
    ) -> PollHandle:
        """
        Check the status now and then every ``interval_sec`` seconds.

        Ticks are skipped while nobody is logged in; failures are logged and
        the poll carries on. Must be called from a running event loop.
        """
        handle = PollHandle(classifier_id)
        handle._task = asyncio.create_task(self._poll(handle, on_update, interval_sec))
        return handle

    async def _poll(self, handle: PollHandle, on_update: Callable[[Any], Any], interval_sec: float) -> None:
        while True:
            handle.ticks += 1
            await self._poll_once(handle.classifier_id, on_update)
            await asyncio.sleep(interval_sec)

    async def _poll_once(self, classifier_id: str, on_update: Callable[[Any], Any]) -> None:
        if not self._session.active:
            self._logger.debug(f"Not logged in, skipping status check of {classifier_id}")
            return
        try:
            data = await self.check_status(classifier_id)
            result = on_update(data)
            if inspect.isawaitable(result):
                await result
        except Exception:
            self._logger.exception(f"Status check of {classifier_id} failed")

    async def upload(self, file_content: str) -> dict:
        """
        Turn JSON or CSV training data into {"classes": [...], "text": [...]}.

        JSON is parsed locally; CSV is parsed by the backend.
        """
        if not file_content or not file_content.strip():
            raise ValueError("Cannot upload empty content")

        if file_content.lstrip().startswith("{"):
            entries = training.parse_json(json.loads(file_content))
        else:
            entries = await self._http.post(
                self._endpoints.import_csv,
                content=file_content.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
            )
        return training.merge_entries(entries or [])

    def download(self, texts: Iterable[dict], classes: Iterable[Any]) -> str:
        """CSV of the labelled texts followed by any unused classes."""
        entries = [
            {"text": t.get("value", t.get("text", "")), "classes": [_class_name(c) for c in t.get("classes", [])]}
            for t in texts
        ]
        return training.to_csv(entries, [_class_name(c) for c in classes])


def _class_name(value: Any) -> str:
    if isinstance(value, dict):
        return value.get("name") or value.get("label") or ""
    return str(value)

"""Classifier list view model."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .alerts import Alert, AlertBus
from .exceptions import ApiError
from .nlc import NlcClient, PollHandle

logger = logging.getLogger(__name__)


@dataclass
class Classifier:
    """A classifier plus the state the UI keeps for it."""

    classifier_id: str
    name: str = ""
    status: str = ""
    status_description: str = ""
    logs: List[dict] = field(default_factory=list)
    text_to_classify: str = ""
    show_arrow_down: bool = False
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> "Classifier":
        return cls(classifier_id=data["classifier_id"], name=data.get("name", ""), raw=dict(data))

    def apply_status(self, data: Any) -> None:
        if not isinstance(data, dict):
            return
        self.status = data.get("status", self.status)
        self.status_description = data.get("status_description", self.status_description)


class ClassifiersView:
    """Loads classifiers, tracks their status and keeps a classify log per classifier."""

    def __init__(
        self,
        nlc: NlcClient,
        alerts: Optional[AlertBus] = None,
        poll_interval_sec: float = 5.0
    ):
        self._nlc = nlc
        self._alerts = alerts
        self._poll_interval_sec = poll_interval_sec
        self._polls: List[PollHandle] = []
        self.classifiers: List[Classifier] = []

    def _report(self, title: str, error: ApiError) -> None:
        logger.warning(f"{title}: {error}")
        if self._alerts is not None:
            self._alerts.add(Alert(id="classifiers", level="danger", title=title, text=error.message))

    async def load(self) -> List[Classifier]:
        """Fetch the classifiers and check the status of each one."""
        data = await self._nlc.get_classifiers()
        items = data.get("classifiers", []) if isinstance(data, dict) else (data or [])
        self.classifiers = [Classifier.from_api(item) for item in items]

        results = await asyncio.gather(
            *(self.check_status(c) for c in self.classifiers), return_exceptions=True
        )
        for result in results:
            if isinstance(result, ApiError):
                self._report("Unable to get classifier status", result)
            elif isinstance(result, BaseException):
                raise result
        return self.classifiers

    async def check_status(self, classifier: Classifier) -> None:
        classifier.apply_status(await self._nlc.check_status(classifier.classifier_id))

    def poll_status(self, classifier: Classifier, interval_sec: Optional[float] = None) -> PollHandle:
        """Keep the classifier's status fresh until close() is called."""
        handle = self._nlc.poll_status(
            classifier.classifier_id,
            classifier.apply_status,
            interval_sec or self._poll_interval_sec,
        )
        self._polls.append(handle)
        return handle

    def toggle_arrow_down(self, classifier: Classifier) -> None:
        classifier.show_arrow_down = not classifier.show_arrow_down

    async def delete(self, classifier: Classifier) -> None:
        """Delete a classifier and reload the list."""
        try:
            await self._nlc.remove(classifier.classifier_id)
        except ApiError as e:
            self._report("Unable to delete classifier", e)
            raise
        await self.load()

    async def classify(self, classifier: Classifier, text: Optional[str] = None) -> Any:
        """Classify a text, logging the text and then the returned classes."""
        if text is None:
            text = classifier.text_to_classify
        classifier.text_to_classify = ""
        classifier.logs.append({"text": text})
        data = await self._nlc.classify(classifier.classifier_id, text)
        classifier.logs.append({"classes": data.get("classes", []) if isinstance(data, dict) else []})
        return data

    def close(self) -> None:
        """Cancel every poll started by this view."""
        for handle in self._polls:
            handle.cancel()
        self._polls.clear()

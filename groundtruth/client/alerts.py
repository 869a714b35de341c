"""Alert bus - ordered list of notifications shown to the user."""

from dataclasses import dataclass
from typing import Iterator, List, Optional

LEVELS = ("danger", "warning", "info", "success")


@dataclass
class Alert:
    id: str
    level: str
    title: str
    text: str
    dismissable: bool = True
    link: Optional[str] = None

    def __post_init__(self):
        if self.level not in LEVELS:
            raise ValueError(f"Unknown alert level: {self.level}")


class AlertBus:
    """
    Alerts in display order.

    Duplicates are allowed and the list is unbounded; removal is by value.
    """

    def __init__(self):
        self._alerts: List[Alert] = []

    @property
    def alerts(self) -> List[Alert]:
        return self._alerts

    def add(self, alert: Alert) -> None:
        self._alerts.append(alert)

    def remove(self, alert: Alert) -> None:
        """Remove the first alert equal to ``alert``; no-op when absent."""
        if alert in self._alerts:
            self._alerts.remove(alert)

    def clear(self) -> None:
        del self._alerts[:]

    def __len__(self) -> int:
        return len(self._alerts)

    def __iter__(self) -> Iterator[Alert]:
        return iter(self._alerts)

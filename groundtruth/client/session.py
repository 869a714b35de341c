"""Client session state."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Session:
    """The logged in user and the tenant their requests are scoped to."""

    username: Optional[str] = None
    tenant: Optional[str] = None

    def create(self, username: Optional[str], tenant: Optional[str]) -> None:
        self.username = username
        self.tenant = tenant

    def destroy(self) -> None:
        self.username = None
        self.tenant = None

    @property
    def active(self) -> bool:
        return bool(self.username)

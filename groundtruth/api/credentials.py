"""Service credential discovery from the platform's VCAP_SERVICES binding.

Bound services arrive as a JSON object keyed by service category, each holding
a list of bindings with a ``name`` and a ``credentials`` block. Credentials are
resolved once and then shared, read-only, for the lifetime of the process.
Anything missing or malformed resolves to an empty (falsy) credential object.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from groundtruth.config import get_global_config

logger = logging.getLogger(__name__)

CLASSIFIER_CATEGORY = "natural_language_classifier"
CLOUDANT_CATEGORY = "cloudantNoSQLDB"
USER_PROVIDED = "user-provided"
DEFAULT_CLASSIFIER_VERSION = "v1"


@dataclass(frozen=True)
class ServiceCredentials:
    """Credentials for one bound service."""

    id: str = ""
    url: str = ""
    username: str = ""
    password: str = ""
    version: str = ""

    def __bool__(self) -> bool:
        return bool(self.url)

    def to_dict(self) -> Dict[str, str]:
        """Plain dict form; empty credentials give ``{}``."""
        if not self:
            return {}
        return asdict(self)


EMPTY = ServiceCredentials()


def load_vcap_services(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Parse VCAP_SERVICES, returning {} when it is absent or not a JSON object."""
    environ = os.environ if environ is None else environ
    raw = environ.get("VCAP_SERVICES")
    if not raw:
        return {}
    try:
        services = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Ignoring malformed VCAP_SERVICES: {e}")
        return {}
    if not isinstance(services, dict):
        logger.warning("Ignoring VCAP_SERVICES that is not a JSON object")
        return {}
    return services


def find_binding(services: Mapping[str, Any], category: str, name: str) -> Optional[dict]:
    """
    Find the binding for a service.

    Looks in the declared category first, preferring the binding whose name
    matches. Falls back to a user-provided binding whose label or name matches
    either the category or the service name.
    """
    declared = _bindings(services, category)
    if declared:
        for binding in declared:
            if binding.get("name") == name:
                return binding
        return declared[0]

    for binding in _bindings(services, USER_PROVIDED):
        if binding.get("label") in (category, name) or binding.get("name") in (category, name):
            return binding

    return None


def _bindings(services: Mapping[str, Any], key: str) -> list:
    entries = services.get(key)
    if not isinstance(entries, list):
        return []
    return [b for b in entries if isinstance(b, dict)]


def _credentials_block(binding: Optional[dict]) -> Dict[str, Any]:
    if not binding:
        return {}
    block = binding.get("credentials")
    return block if isinstance(block, dict) else {}


def resolve_classifier_credentials(
    name: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> ServiceCredentials:
    """Resolve the classifier service credentials."""
    name = name or get_global_config().get('services.classifier_name')
    binding = find_binding(load_vcap_services(environ), CLASSIFIER_CATEGORY, name)
    block = _credentials_block(binding)
    if not block.get("url"):
        logger.warning(f"No credentials found for classifier service '{name}'")
        return EMPTY

    return ServiceCredentials(
        id=binding.get("name", name),
        url=str(block["url"]),
        username=str(block.get("username", "")),
        password=str(block.get("password", "")),
        version=str(block.get("version") or DEFAULT_CLASSIFIER_VERSION),
    )


def resolve_cloudant_credentials(
    name: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> ServiceCredentials:
    """Resolve the Cloudant credentials; the account url is built from the username if absent."""
    name = name or get_global_config().get('services.cloudant_name')
    binding = find_binding(load_vcap_services(environ), CLOUDANT_CATEGORY, name)
    block = _credentials_block(binding)
    username = block.get("username")
    if not username:
        logger.warning(f"No credentials found for Cloudant service '{name}'")
        return EMPTY

    url = block.get("url")
    if not url:
        host = block.get("host") or f"{username}.cloudant.com"
        port = block.get("port")
        url = f"https://{host}:{port}" if port else f"https://{host}"

    return ServiceCredentials(
        id=binding.get("name", name),
        url=str(url).rstrip("/"),
        username=str(username),
        password=str(block.get("password", "")),
    )


# Resolved once, on first use
_classifier: Optional[ServiceCredentials] = None
_cloudant: Optional[ServiceCredentials] = None


def init_credentials(environ: Optional[Mapping[str, str]] = None) -> None:
    """Resolve all service credentials from the environment."""
    global _classifier, _cloudant
    _classifier = resolve_classifier_credentials(environ=environ)
    _cloudant = resolve_cloudant_credentials(environ=environ)


def get_classifier_credentials() -> ServiceCredentials:
    """Dependency returning the classifier credentials."""
    if _classifier is None:
        init_credentials()
    return _classifier


def get_cloudant_credentials() -> ServiceCredentials:
    """Dependency returning the Cloudant credentials."""
    if _cloudant is None:
        init_credentials()
    return _cloudant

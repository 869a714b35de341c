"""Training store lifecycle."""

import logging
from typing import Optional

from groundtruth.api.credentials import ServiceCredentials, get_cloudant_credentials
from groundtruth.api.database.cloudant import CloudantClient
from groundtruth.api.database.store import TrainingStore
from groundtruth.api.errors import UNKNOWN, StoreError
from groundtruth.config import get_global_config

logger = logging.getLogger(__name__)

_client: Optional[CloudantClient] = None
_store: Optional[TrainingStore] = None


def init_store(credentials: Optional[ServiceCredentials] = None, db_name: Optional[str] = None) -> TrainingStore:
    """Connect to Cloudant and make sure the training database is set up."""
    global _client, _store

    config = get_global_config()
    credentials = credentials if credentials is not None else get_cloudant_credentials()
    if not credentials:
        raise StoreError(UNKNOWN, "Missing required environment for Cloudant")

    db_name = db_name or config.get('database.name')
    _client = CloudantClient(
        credentials.url,
        credentials.username,
        credentials.password,
        timeout=config.get_float('http.timeout_sec', 30),
    )
    store = TrainingStore(_client.database(db_name))
    store.setup()
    _store = store
    return store


def get_store() -> TrainingStore:
    """Dependency for FastAPI to get the training store."""
    if _store is None:
        init_store()
    return _store

"""Content service - bulk import and export of a tenant's training data."""

import json
import logging
import threading
import time
import uuid
from dataclasses import asdict, dataclass
from pathlib import PurePath
from typing import Dict, List, Optional

from groundtruth.api.database.store import TrainingStore
from groundtruth.api.errors import BadRequestError, StoreError
from groundtruth import training

RUNNING = "running"
COMPLETE = "complete"
ERROR = "error"

RUNNING_TTL_SEC = 5 * 60
FINISHED_TTL_SEC = 24 * 60 * 60

ACCEPTED_FORMATS = ("json", "csv")


@dataclass
class ImportStatus:
    status: str = RUNNING
    success: int = 0
    error: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class ImportJobs:
    """In-memory registry of import jobs, expiring idle entries."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._jobs: Dict[str, tuple] = {}

    def _expiry(self, status: ImportStatus) -> float:
        ttl = RUNNING_TTL_SEC if status.status == RUNNING else FINISHED_TTL_SEC
        return self._clock() + ttl

    def _purge(self) -> None:
        now = self._clock()
        for job_id in [j for j, (_, expires) in self._jobs.items() if expires <= now]:
            del self._jobs[job_id]

    def start(self) -> str:
        job_id = str(uuid.uuid4())
        status = ImportStatus()
        with self._lock:
            self._purge()
            self._jobs[job_id] = (status, self._expiry(status))
        return job_id

    def update(self, job_id: str, succeeded: bool) -> None:
        with self._lock:
            status, _ = self._jobs.get(job_id, (ImportStatus(), 0))
            if succeeded:
                status.success += 1
            else:
                status.error += 1
            self._jobs[job_id] = (status, self._expiry(status))

    def finish(self, job_id: str, state: str = COMPLETE) -> None:
        with self._lock:
            status, _ = self._jobs.get(job_id, (ImportStatus(), 0))
            status.status = state
            self._jobs[job_id] = (status, self._expiry(status))

    def get(self, job_id: str) -> Optional[ImportStatus]:
        with self._lock:
            self._purge()
            entry = self._jobs.get(job_id)
        return entry[0] if entry else None


def upload_format(filename: Optional[str], content_type: Optional[str]) -> str:
    """Work out whether an upload is JSON or CSV."""
    suffix = PurePath(filename or "").suffix.lower().lstrip(".")
    if suffix in ACCEPTED_FORMATS:
        return suffix
    content_type = (content_type or "").lower()
    if "json" in content_type:
        return "json"
    if "csv" in content_type:
        return "csv"
    raise BadRequestError("Only JSON and CSV formats are accepted")


class ContentService:
    """Service for importing and exporting training data."""

    def __init__(
        self,
        store: TrainingStore,
        jobs: ImportJobs,
        logger: Optional[logging.Logger] = None
    ):
        self._store = store
        self._jobs = jobs
        self._logger = logger or logging.getLogger(__name__)

    def parse_upload(self, filename: Optional[str], content_type: Optional[str], data: bytes) -> List[dict]:
        """Decode an uploaded file into training entries."""
        fmt = upload_format(filename, content_type)
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise BadRequestError("Uploaded file is not UTF-8 text") from e

        if fmt == "csv":
            return training.parse_csv(text)
        try:
            return training.parse_json(json.loads(text))
        except ValueError as e:
            raise BadRequestError(f"Invalid JSON training data: {e}") from e

    def start_import(self) -> str:
        return self._jobs.start()

    def run_import(self, tenant: str, job_id: str, entries: List[dict]) -> None:
        """Store every entry, counting successes and failures on the job."""
        self._logger.info(f"Import {job_id} started for tenant {tenant}: {len(entries)} entries")
        try:
            for entry in entries:
                try:
                    result = self._store.process_import_entry(tenant, entry)
                except StoreError as e:
                    self._logger.warning(f"Import {job_id} entry failed: {e.message}")
                    self._jobs.update(job_id, succeeded=False)
                    continue
                failed = any("error" in c for c in result["classes"])
                self._jobs.update(job_id, succeeded=not failed)
        except Exception:
            self._logger.exception(f"Import {job_id} aborted")
            self._jobs.finish(job_id, ERROR)
            raise

        self._jobs.finish(job_id, COMPLETE)
        status = self._jobs.get(job_id)
        self._logger.info(f"Import {job_id} complete: {status.success} ok, {status.error} failed")

    def import_status(self, job_id: str) -> Optional[ImportStatus]:
        return self._jobs.get(job_id)

    def export(self, tenant: str) -> dict:
        return self._store.export(tenant)

    def export_csv(self, tenant: str) -> str:
        """Export as CSV, with class ids resolved to names."""
        data = self._store.export(tenant)
        names = {c["_id"]: c["name"] for c in data["classes"]}
        entries = [
            {"text": t["value"], "classes": [names[c] for c in t.get("classes", []) if c in names]}
            for t in data["texts"]
        ]
        return training.to_csv(entries, [c["name"] for c in data["classes"]])


_jobs: Optional[ImportJobs] = None


def get_import_jobs() -> ImportJobs:
    """Dependency returning the process wide import job registry."""
    global _jobs
    if _jobs is None:
        _jobs = ImportJobs()
    return _jobs

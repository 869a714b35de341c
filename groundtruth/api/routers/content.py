"""Content router - bulk import and export of training data."""

from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, UploadFile
from fastapi.responses import JSONResponse, Response

from groundtruth.api import restutils
from groundtruth.api.auth import require_tenant
from groundtruth.api.database.session import get_store
from groundtruth.api.database.store import TrainingStore
from groundtruth.api.errors import BadRequestError, GroundTruthError
from groundtruth.api.schemas.content import ImportStatusResponse
from groundtruth.api.services.content_service import ContentService, ImportJobs, get_import_jobs
from groundtruth.config import get_global_config

router = APIRouter(prefix="/api/{tenant}/content", tags=["content"])


def get_content_service(
    store: TrainingStore = Depends(get_store),
    jobs: ImportJobs = Depends(get_import_jobs)
) -> ContentService:
    return ContentService(store, jobs)


@router.get("")
def download(
    fmt: str = Query("json", alias="format"),
    tenant: str = Depends(require_tenant),
    service: ContentService = Depends(get_content_service)
):
    """Export every class and text of the tenant as JSON or CSV."""
    if fmt == "csv":
        return Response(
            service.export_csv(tenant),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{tenant}.csv"'},
        )
    if fmt != "json":
        raise BadRequestError("Only JSON and CSV formats are accepted")

    data = service.export(tenant)
    return JSONResponse({
        "classes": [restutils.hide_implementation_details(c) for c in data["classes"]],
        "texts": [restutils.hide_implementation_details(t) for t in data["texts"]],
    })


@router.post("")
def upload(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    tenant: str = Depends(require_tenant),
    service: ContentService = Depends(get_content_service)
):
    """Import a JSON or CSV file; processing continues in the background."""
    max_bytes = get_global_config().get_int('content.max_upload_mb', 10) * 1024 * 1024
    data = file.file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise GroundTruthError("File too large", 413)
    if not data:
        raise BadRequestError("Empty file")

    entries = service.parse_upload(file.filename, file.content_type, data)
    job_id = service.start_import()
    background_tasks.add_task(service.run_import, tenant, job_id, entries)

    location = f"/api/{tenant}/content/import/{job_id}"
    return restutils.accepted(location, {"id": job_id, "status": "running", "entries": len(entries)})


@router.get("/import/{import_id}", response_model=ImportStatusResponse)
def import_status(
    import_id: str,
    tenant: str = Depends(require_tenant),
    service: ContentService = Depends(get_content_service)
):
    """Progress of an import."""
    status = service.import_status(import_id)
    if status is None:
        raise GroundTruthError("Import not found", 404)
    return status.to_dict()

"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from groundtruth import __version__
from groundtruth.api.auth import close_http_session
from groundtruth.api.credentials import get_classifier_credentials, init_credentials
from groundtruth.api.database.session import init_store
from groundtruth.api.errors import GroundTruthError, StoreError
from groundtruth.api.logging import get_logger, setup_logging
from groundtruth.api.restutils import error_response
from groundtruth.api.routers import authenticate, classes, classifiers, content, imports, tenants, texts
from groundtruth.api.services.classifier_service import ClassifierServiceError
from groundtruth.config import get_global_config

logger = get_logger(__name__)
config = get_global_config()

app = FastAPI(
    title="Ground Truth API",
    description="API for managing text classifier training data",
    version=__version__
)

app.add_middleware(SessionMiddleware, secret_key=config.get('secrets.session'))
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range", "ETag", "Location"],
)

app.include_router(authenticate.router)
app.include_router(imports.router)
app.include_router(classes.router)
app.include_router(texts.router)
app.include_router(content.router)
app.include_router(classifiers.router)
app.include_router(tenants.router)


@app.exception_handler(ClassifierServiceError)
def classifier_error(request: Request, exc: ClassifierServiceError):
    """Classifier errors carry the classifier's own payload."""
    logger.debug(f"Classifier error on {request.url.path}: {exc.message}")
    return JSONResponse(exc.payload, status_code=exc.status_code)


@app.exception_handler(GroundTruthError)
def groundtruth_error(request: Request, exc: GroundTruthError):
    return error_response(exc)


@app.exception_handler(Exception)
def unexpected_error(request: Request, exc: Exception):
    """Anything unhandled answers 500 with the usual JSON error body."""
    return error_response(exc)


@app.exception_handler(StarletteHTTPException)
def http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return not_found_page()
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


def not_found_page():
    """Render the 404 view, falling back to a JSON body."""
    page = config.get_path('paths.views') / "404.html"
    try:
        return HTMLResponse(page.read_text(encoding="utf-8"), status_code=404)
    except OSError as e:
        logger.warning(f"Unable to render 404 view: {e}")
        return JSONResponse({"status": 404}, status_code=404)


@app.on_event("startup")
def startup():
    """Configure logging and connect to the bound services."""
    log_file = setup_logging(
        base_dir=config.get('logging.log_dir', 'logs'),
        level=getattr(logging, str(config.get('logging.level', 'INFO')).upper(), logging.INFO),
        console=config.get_bool('logging.log_to_console', True),
        backup_count=config.get_int('logging.backup_count', 2),
    )
    logger.info("Starting Ground Truth API")
    logger.info(f"Log file: {log_file}")

    init_credentials()
    if not get_classifier_credentials():
        logger.warning("No classifier service bound; logins will be rejected")

    try:
        init_store()
        logger.info("Training store initialized")
    except StoreError as e:
        logger.error(f"Training store unavailable: {e.message}")


@app.on_event("shutdown")
def shutdown():
    """Release the shared classifier connection pool."""
    logger.info("Shutting down Ground Truth API")
    close_http_session()


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.get('server.host'), port=config.get_int('server.port', 9000))

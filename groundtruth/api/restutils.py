"""Request parsing and response shaping shared by the resource routers."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from groundtruth.api.errors import BadRequestError, GroundTruthError, PreconditionError, log_error

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100

# Fields that never leave the server
HIDDEN_FIELDS = ("_rev", "schema", "tenant", "password")

_RANGE_PATTERN = re.compile(r"^\s*(\w+)\s*=\s*(\d*)\s*-\s*(\d*)\s*$")


@dataclass
class ListOptions:
    """Pagination and projection options for list endpoints."""

    skip: int = 0
    limit: int = DEFAULT_LIMIT
    fields: Optional[List[str]] = field(default=None)


def parse_range(header: Optional[str]) -> tuple:
    """
    Parse a Range header of the form ``items=first-last``.

    ``items=-last`` starts at zero. Returns (skip, limit).
    """
    if not header:
        return 0, DEFAULT_LIMIT

    if "," in header:
        raise BadRequestError("Multiple ranges is unsupported")

    match = _RANGE_PATTERN.match(header)
    if match is None:
        raise BadRequestError("Invalid Range format")

    unit, first, last = match.groups()
    if unit != "items":
        raise BadRequestError(f"Unsupported range type : {unit}")
    if not last:
        raise BadRequestError("Invalid Range format")

    first = int(first) if first else 0
    last = int(last)
    if last < first:
        raise BadRequestError("Invalid Range format")

    return first, last - first + 1


def parse_fields(value: Optional[str]) -> Optional[List[str]]:
    """Split a comma separated ``fields`` parameter, mapping ``id`` to ``_id``."""
    if not value:
        return None
    fields = []
    for name in value.split(","):
        name = name.strip()
        if not name:
            continue
        fields.append("_id" if name == "id" else name)
    return fields or None


def list_options(request: Request) -> ListOptions:
    """Dependency building ListOptions from the Range header and fields query."""
    skip, limit = parse_range(request.headers.get("range"))
    return ListOptions(skip=skip, limit=limit, fields=parse_fields(request.query_params.get("fields")))


def if_match(request: Request) -> str:
    """Dependency returning the required If-Match revision."""
    rev = request.headers.get("if-match")
    if not rev:
        raise PreconditionError("Missing If-Match header")
    return rev.strip('"')


def verify_objects_list(value: Any) -> list:
    if not isinstance(value, list):
        raise BadRequestError("Expected an array")
    return value


def hide_implementation_details(doc: Optional[dict]) -> Optional[dict]:
    """Rename ``_id`` to ``id`` and drop internal document fields."""
    if doc is None:
        return None
    shaped = {}
    for key, value in doc.items():
        if key == "_id":
            shaped["id"] = value
        elif key not in HIDDEN_FIELDS:
            shaped[key] = value
    return shaped


def _etag(doc: dict) -> dict:
    rev = doc.get("_rev")
    return {"ETag": rev} if rev else {}


def item(doc: dict) -> JSONResponse:
    return JSONResponse(hide_implementation_details(doc), status_code=200, headers=_etag(doc))


def new_item(doc: dict, location: str) -> JSONResponse:
    headers = _etag(doc)
    headers["Location"] = location
    return JSONResponse(hide_implementation_details(doc), status_code=201, headers=headers)


def edited(doc: Optional[dict]) -> Response:
    if not doc:
        return Response(status_code=204)
    return item(doc)


def list_response(docs: Iterable[dict], options: ListOptions, total: int) -> JSONResponse:
    """List response with a Content-Range header describing the page."""
    shaped = [hide_implementation_details(d) for d in docs]
    if shaped:
        last = options.skip + len(shaped) - 1
        content_range = f"items {options.skip}-{last}/{total}"
    else:
        content_range = f"items */{total}"
    return JSONResponse(shaped, status_code=200, headers={"Content-Range": content_range})


def deleted() -> Response:
    return Response(status_code=204)


def accepted(location: str, body: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(body or {}, status_code=202, headers={"Location": location})


def error_response(err: Exception) -> JSONResponse:
    """Translate an exception into the JSON error shape used by every endpoint."""
    log_error(err, logger)

    status = getattr(err, "status_code", None)
    if status is None:
        return JSONResponse({"error": str(err)}, status_code=500)
    if status == 404:
        return JSONResponse({"error": "Not found"}, status_code=404)
    if status == 409:
        return JSONResponse({"error": "Incorrect If-Match header"}, status_code=412)
    if status == 403:
        return JSONResponse({"error": "Insufficient privileges"}, status_code=403)

    message = err.message if isinstance(err, GroundTruthError) else str(err)
    return JSONResponse({"error": message}, status_code=status)

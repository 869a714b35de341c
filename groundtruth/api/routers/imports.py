"""Imports router - converts CSV training data to JSON entries."""

from fastapi import APIRouter, Depends, Request

from groundtruth.api.auth import require_user
from groundtruth.api.errors import BadRequestError
from groundtruth.training import parse_csv

router = APIRouter(prefix="/api/import", tags=["import"])


@router.post("/csv")
async def import_csv(request: Request, user: dict = Depends(require_user)):
    """Parse a text/plain CSV body into [{text, classes}] entries."""
    body = await request.body()
    try:
        content = body.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise BadRequestError("CSV must be UTF-8 text") from e
    return parse_csv(content)

"""
Static-site generation endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from core.dependencies import get_settings
from core.settings import Settings
from items import repository as items_repository

from . import service
from .projector import ContentProjector
from .records import RECORD_TYPES, UnknownRecordType, record_from_item

router = APIRouter()


class GenerateRequest(BaseModel):
    # Keep going past failing records and report them instead of stopping.
    continue_on_error: bool = False


@router.post("/generate/{typ}")
async def generate(
    typ: str,
    request: GenerateRequest | None = None,
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    Regenerate pages and images for every item of type `typ`.
    """
    if typ not in RECORD_TYPES:
        raise UnknownRecordType(typ)

    continue_on_error = request.continue_on_error if request is not None else False
    rows = await items_repository.list_items_by_type(typ)

    projector = ContentProjector.from_settings(settings)
    report = await run_in_threadpool(
        service.generate_content,
        rows,
        typ,
        projector,
        decode=record_from_item,
        continue_on_error=continue_on_error,
    )

    return {
        "status": "ok" if report.ok else "partial",
        "message": "successfully generated content" if report.ok else "generated content with failures",
        "generated": [
            {"id": r.record_id, "path": str(r.document_path)} for r in report.generated
        ],
        "failed": [
            {"id": f.record_id, "error": str(f.error)} for f in report.failed
        ],
    }

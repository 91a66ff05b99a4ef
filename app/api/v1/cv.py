from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import JSONResponse

from app.core.errors import PipelineError, UnexpectedError, UploadTooLargeError, ValidationError
from app.core.rate_limit import rate_limit
from app.schemas.cv import (
    ACCEPTED_MEDIA_TYPES,
    MAX_UPLOAD_BYTES,
    SpecificJobRequest,
    SpecificJobResponse,
    UploadCvResponse,
    UploadedDocument,
)
from app.services.cv_match_service import CvMatchService, require_location

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_CHUNK_BYTES = 64 * 1024


def get_cv_match_service(request: Request) -> CvMatchService:
    return request.app.state.cv_match_service


async def _read_upload(file: UploadFile) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > MAX_UPLOAD_BYTES:
            raise UploadTooLargeError(
                f"File too large. Maximum allowed size is {MAX_UPLOAD_BYTES // (1024 * 1024)} MB."
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/api/upload-cv", response_model=UploadCvResponse)
@rate_limit()
async def upload_cv(
    request: Request,
    cv: UploadFile | None = File(default=None),
    location: str | None = Form(default=None),
    service: CvMatchService = Depends(get_cv_match_service),
):
    _ = request
    if cv is None:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"msg": "Upload File to continue"})
    where = require_location(location)

    media_type = (cv.content_type or "").split(";")[0].strip().lower()
    if media_type not in ACCEPTED_MEDIA_TYPES:
        raise ValidationError("Only PDF, DOC, DOCX allowed")

    content = await _read_upload(cv)
    document = UploadedDocument(content=content, media_type=media_type, filename=cv.filename or "cv")
    try:
        result = await service.match_upload(document, where)
    except PipelineError:
        raise
    except Exception as exc:
        logger.exception("cv_upload_failed_unexpected filename=%s", document.filename)
        raise UnexpectedError(str(exc)) from exc
    return UploadCvResponse(rawKeyword=result.titles, location=result.location, jobs=result.jobs)


@router.post("/getSpecificJob", response_model=SpecificJobResponse)
@rate_limit()
async def get_specific_job(
    request: Request,
    payload: SpecificJobRequest,
    service: CvMatchService = Depends(get_cv_match_service),
):
    _ = request
    try:
        jobs = await service.lookup_alternate(payload.keywords, payload.index, payload.location)
    except PipelineError:
        raise
    except Exception as exc:
        logger.exception("cv_alternate_lookup_failed_unexpected index=%s", payload.index)
        raise UnexpectedError(str(exc)) from exc
    return SpecificJobResponse(jobs=jobs)

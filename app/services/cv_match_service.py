from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from app.core.errors import UploadTooLargeError, ValidationError
from app.parsing.parse import ResumeExtractor
from app.schemas.cv import ACCEPTED_MEDIA_TYPES, MAX_UPLOAD_BYTES, JobSummary, UploadedDocument
from app.services.file_store import TransientFileStore
from app.services.job_search import AdzunaJobSearch, build_query
from app.services.result_projector import project_jobs
from app.services.title_inference import TitleInferenceEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CvMatchResult:
    titles: list[str]
    location: str
    jobs: list[JobSummary] = field(default_factory=list)


def require_location(location: str | None) -> str:
    value = (location or "").strip()
    if not value:
        raise ValidationError("Location is required")
    return value


def validate_upload(document: UploadedDocument) -> None:
    if document.media_type not in ACCEPTED_MEDIA_TYPES:
        raise ValidationError("Only PDF, DOC, DOCX allowed")
    if len(document.content) > MAX_UPLOAD_BYTES:
        raise UploadTooLargeError(
            f"File too large. Maximum allowed size is {MAX_UPLOAD_BYTES // (1024 * 1024)} MB."
        )
    if not document.content:
        raise ValidationError("Uploaded file is empty")


class CvMatchService:
    """Résumé upload to job list, plus the alternate-title search."""

    def __init__(
        self,
        *,
        file_store: TransientFileStore,
        extractor: ResumeExtractor,
        title_engine: TitleInferenceEngine,
        job_search: AdzunaJobSearch,
    ):
        self.file_store = file_store
        self.extractor = extractor
        self.title_engine = title_engine
        self.job_search = job_search

    async def search_title(self, title: str, location: str | None) -> list[JobSummary]:
        query = build_query(title, location)
        records = await self.job_search.search(query)
        return project_jobs(records)

    async def match_upload(self, document: UploadedDocument, location: str | None) -> CvMatchResult:
        where = require_location(location)
        validate_upload(document)

        async with self.file_store.scoped(document.content, document.filename) as temp_file:
            resume = await asyncio.to_thread(self.extractor.extract, temp_file.path)

        titles = await self.title_engine.infer(resume)
        jobs = await self.search_title(titles[0], where)
        logger.info(
            "cv_match_completed primary_title=%s alternates=%s location=%s jobs=%s",
            titles[0],
            len(titles) - 1,
            where,
            len(jobs),
        )
        return CvMatchResult(titles=titles, location=where, jobs=jobs)

    async def lookup_alternate(
        self,
        titles: list[str] | None,
        index: int | None,
        location: str | None,
    ) -> list[JobSummary]:
        if index is None or titles is None or not (location or "").strip():
            raise ValidationError("index, location and keywords are required")
        if index < 0 or index >= len(titles):
            raise ValidationError(f"index {index} is out of range for {len(titles)} keywords")

        jobs = await self.search_title(titles[index], location)
        logger.info("cv_alternate_lookup_completed index=%s title=%s jobs=%s", index, titles[index], len(jobs))
        return jobs

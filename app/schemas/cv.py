from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, Field

PDF_MEDIA_TYPE = "application/pdf"
DOC_MEDIA_TYPE = "application/msword"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ACCEPTED_MEDIA_TYPES = frozenset({PDF_MEDIA_TYPE, DOC_MEDIA_TYPE, DOCX_MEDIA_TYPE})
MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5 MiB


@dataclass(frozen=True)
class UploadedDocument:
    content: bytes
    media_type: str
    filename: str


class JobSummary(BaseModel):
    title: str
    company: str
    location: str
    salary: str
    description: str
    url: str


class UploadCvResponse(BaseModel):
    success: Literal[True] = True
    rawKeyword: list[str]
    location: str
    jobs: list[JobSummary] = Field(default_factory=list)


class SpecificJobRequest(BaseModel):
    index: int | None = None
    location: str | None = None
    keywords: list[str] | None = None


class SpecificJobResponse(BaseModel):
    jobs: list[JobSummary] = Field(default_factory=list)

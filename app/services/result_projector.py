from __future__ import annotations

from typing import Any, Iterable

from app.schemas.cv import JobSummary

DESCRIPTION_PREVIEW_CHARS = 200
ELLIPSIS = "..."
SALARY_FALLBACK = "Not specified"


def _display_name(value: Any) -> str:
    if isinstance(value, dict):
        return str(value.get("display_name") or "")
    return ""


def project_job(record: dict[str, Any]) -> JobSummary:
    description = str(record.get("description") or "")
    return JobSummary(
        title=str(record.get("title") or ""),
        company=_display_name(record.get("company")),
        location=_display_name(record.get("location")),
        salary=str(record.get("salary_text") or SALARY_FALLBACK),
        # The marker is appended even when nothing was cut.
        description=description[:DESCRIPTION_PREVIEW_CHARS] + ELLIPSIS,
        url=str(record.get("redirect_url") or ""),
    )


def project_jobs(records: Iterable[dict[str, Any]]) -> list[JobSummary]:
    return [project_job(record) for record in records]

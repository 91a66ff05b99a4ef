from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

RESUME_SECTIONS: tuple[str, ...] = (
    "profile",
    "summary",
    "objective",
    "experience",
    "skills",
    "education",
    "certification",
    "projects",
    "languages",
    "awards",
    "interests",
    "courses",
)


class ParsedResume(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_type: str
    text: str
    parts: dict[str, str] = Field(default_factory=dict)

    @field_validator("source_type")
    @classmethod
    def _validate_source_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"pdf", "docx", "doc"}:
            raise ValueError("source_type must be one of: pdf, docx, doc")
        return normalized

    @field_validator("parts")
    @classmethod
    def _fill_missing_sections(cls, value: dict[str, str]) -> dict[str, str]:
        filled = {name: "" for name in RESUME_SECTIONS}
        for name, text in value.items():
            filled[name] = text or ""
        return filled

    def section(self, name: str) -> str:
        return self.parts.get(name, "")

from __future__ import annotations

from app.parsing.models import RESUME_SECTIONS

from .utils import enumerate_lines, heading_key, is_bullet_like, normalize_line

SECTION_HEADINGS: dict[str, tuple[str, ...]] = {
    "summary": ("summary", "professional summary", "profile summary", "about me", "about", "profile"),
    "objective": ("objective", "career objective", "objectives"),
    "experience": (
        "experience",
        "work experience",
        "professional experience",
        "employment history",
        "employment",
        "work history",
        "career history",
        "positions",
    ),
    "skills": (
        "skills",
        "technical skills",
        "core skills",
        "key skills",
        "skills & abilities",
        "skills and abilities",
        "technologies",
        "technology",
        "competencies",
        "core competencies",
        "tools",
    ),
    "education": ("education", "academic background", "education and training", "qualifications"),
    "certification": ("certification", "certifications", "certificates", "licenses", "licenses & certifications"),
    "projects": ("projects", "personal projects", "key projects", "selected projects"),
    "languages": ("languages", "language skills"),
    "awards": ("awards", "honors", "honours", "achievements", "awards & honors"),
    "interests": ("interests", "hobbies", "hobbies & interests"),
    "courses": ("courses", "training", "coursework", "relevant coursework"),
}

_HEADING_LOOKUP: dict[str, str] = {
    alias: section for section, aliases in SECTION_HEADINGS.items() for alias in aliases
}
_MAX_HEADING_WORDS = 4


def section_for_heading(line: str) -> str | None:
    key = heading_key(line)
    if not key or len(key.split()) > _MAX_HEADING_WORDS:
        return None
    return _HEADING_LOOKUP.get(key)


def split_sections(text: str) -> dict[str, str]:
    """Group résumé lines under the heading that precedes them.

    Lines before the first recognised heading land in ``profile``. Every
    section in ``RESUME_SECTIONS`` is present in the result, empty if the
    document has no such heading.
    """
    buckets: dict[str, list[str]] = {name: [] for name in RESUME_SECTIONS}
    current = "profile"
    for _line_no, raw_line in enumerate_lines(text):
        stripped = normalize_line(raw_line)
        if not stripped:
            continue
        section = None if is_bullet_like(raw_line) else section_for_heading(stripped)
        if section is not None:
            current = section
            continue
        buckets[current].append(stripped)
    return {name: "\n".join(lines) for name, lines in buckets.items()}

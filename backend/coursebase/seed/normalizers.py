from __future__ import annotations

import re

LEADING_INT_RE = re.compile(r"^[+-]?\d+")
YEAR_RE = re.compile(r"(\d{4})")
SLUG_SEP_RE = re.compile(r"[^a-z0-9]+")


def parse_integer(raw: str | None) -> int | None:
    # Leading digits only: "25 mins" -> 25, "3.5" -> 3.
    s = str(raw or "").strip()
    m = LEADING_INT_RE.match(s)
    if not m:
        return None
    return int(m.group(0))


def parse_year(raw: str | None) -> int | None:
    m = YEAR_RE.search(str(raw or ""))
    if not m:
        return None
    return int(m.group(1))


def clean_text(raw: str | None) -> str | None:
    s = str(raw or "").strip()
    return s or None


def generate_slug(text: str) -> str:
    return SLUG_SEP_RE.sub("-", str(text or "").lower()).strip("-")


def split_and_clean(raw: str | None) -> list[str]:
    return [part.strip() for part in str(raw or "").split(",") if part.strip()]

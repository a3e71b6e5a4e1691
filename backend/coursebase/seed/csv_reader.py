from __future__ import annotations

import csv
import io
import logging
import sys
from pathlib import Path

from coursebase.seed.errors import NotFoundError, ParseError

logger = logging.getLogger(__name__)

BOM = "\ufeff"

# Long text cells (chunk content, exercise prompts) exceed the csv module's
# default 128 KiB field limit. The cap must also fit a 32-bit C long.
FIELD_SIZE_LIMIT = min(sys.maxsize, 2**31 - 1)
csv.field_size_limit(FIELD_SIZE_LIMIT)


def _is_blank_line(fields: list[str]) -> bool:
    return not fields or (len(fields) == 1 and not fields[0].strip())


def parse_rows(text: str, source: str = "<memory>") -> list[dict[str, str]]:
    """Parse delimited text into header-keyed records, in file order.

    Short rows are padded with empty strings and surplus fields are dropped,
    since spreadsheet exports rarely keep a consistent column count.
    """
    if text.startswith(BOM):
        text = text[1:]
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    header: list[str] | None = None
    rows: list[dict[str, str]] = []
    try:
        for fields in reader:
            if _is_blank_line(fields):
                continue
            if header is None:
                header = [h.strip() for h in fields]
                continue
            values = fields[: len(header)]
            values += [""] * (len(header) - len(values))
            rows.append({key: value.strip() for key, value in zip(header, values)})
    except csv.Error as exc:
        raise ParseError(f"{source}: line {reader.line_num}: {exc}") from exc
    return rows


def read_rows(path: str | Path) -> list[dict[str, str]]:
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"CSV file not found: {path}")
    logger.info("reading %s", path.name, extra={"path": str(path)})
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            text = f.read()
    except UnicodeDecodeError as exc:
        raise ParseError(f"{path.name}: not valid UTF-8: {exc}") from exc
    rows = parse_rows(text, source=path.name)
    logger.info("parsed %d records from %s", len(rows), path.name, extra={"path": str(path), "count": len(rows)})
    return rows

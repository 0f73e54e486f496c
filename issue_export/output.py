"""CSV reading and writing shared by the fetch and translate pipelines.

Writing does not go through ``csv.writer``: fields with leading or trailing
whitespace must be quoted too, which the stdlib dialects never do.
"""

from __future__ import annotations

import asyncio
import csv
import io
import re
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from .config import UTF8_BOM
from .types import CsvOptions, IssueRow

_NEEDS_QUOTE = re.compile(r'[",\r\n]|^\s|\s$')


def escape_field(value: str) -> str:
    escaped = value.replace('"', '""')
    return f'"{escaped}"' if _NEEDS_QUOTE.search(value) else escaped


def _cell(value: object) -> str:
    return "" if value is None else str(value)


def rows_to_csv(
    rows: Iterable[Mapping[str, object]],
    headers: Sequence[str],
    *,
    newline: str = "\r\n",
    include_bom: bool = False,
) -> str:
    lines = [",".join(escape_field(h) for h in headers)]
    for row in rows:
        lines.append(",".join(escape_field(_cell(row.get(h))) for h in headers))
    text = newline.join(lines)
    return (UTF8_BOM if include_bom else "") + text


def issue_rows_to_csv(items: Iterable[IssueRow], options: CsvOptions | None = None) -> str:
    options = options or CsvOptions()
    return rows_to_csv(
        (item.to_row() for item in items),
        options.headers,
        newline=options.newline,
        include_bom=options.include_bom,
    )


def parse_csv(text: str) -> list[dict[str, str]]:
    """Parse CSV text with a header row into one dict per data row."""
    if text.startswith(UTF8_BOM):
        text = text[len(UTF8_BOM):]
    reader = csv.DictReader(io.StringIO(text, newline=""), restval="")
    rows = []
    for raw in reader:
        # Surplus unnamed fields land under the None key.
        raw.pop(None, None)
        rows.append({k: v if v is not None else "" for k, v in raw.items()})
    return rows


async def read_text(path: str | Path) -> str:
    return await asyncio.to_thread(_read, Path(path))


async def write_text(path: str | Path, data: str) -> None:
    await asyncio.to_thread(_write, Path(path), data)


def _read(p: Path) -> str:
    with p.open("r", encoding="utf-8", newline="") as f:
        return f.read()


def _write(p: Path, data: str) -> None:
    with p.open("w", encoding="utf-8", newline="") as f:
        f.write(data)

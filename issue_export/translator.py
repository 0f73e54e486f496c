"""Bounded-concurrency Japanese translation of CSV rows via an OpenAI chat model."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Awaitable, Callable, Mapping, Sequence

from openai import AsyncOpenAI, OpenAIError

from .config import TranslateConfig
from .errors import TranslationError
from .output import parse_csv, read_text, rows_to_csv, write_text
from .tasks import gather_or_cancel
from .types import EMPTY_TRANSLATION, TranslateResult, Translation

log = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional Japanese translator.\n"
    "Return ONLY translated text, no explanation.\n"
    "Format: first line = translated title, blank line, then translated body."
)

KNOWN_COLUMNS = ("soupId", "projectId", "title", "body")
TRANSLATED_COLUMNS = ("titleJa", "bodyJa")

# Alternate column names seen in some exports (title -> summary, body -> first_comment).
TITLE_FALLBACK = "summary"
BODY_FALLBACK = "first_comment"

_BLANK_LINES = re.compile(r"\n{2,}")

Row = dict[str, str]
TranslateFn = Callable[[str, str], Awaitable[Translation]]
ProgressSink = Callable[[int, int], None]


def build_user_message(title: str, body: str) -> str:
    return f"TITLE:\n{title}\n\nBODY:\n{body}"


def split_translation(text: str) -> Translation:
    first, *rest = _BLANK_LINES.split(text)
    return Translation(title_ja=first.strip(), body_ja="\n\n".join(rest).strip())


def derive_headers(first_row: Mapping[str, str] | None) -> list[str]:
    if not first_row:
        return []
    known = [c for c in KNOWN_COLUMNS if c in first_row]
    extra = [c for c in first_row if c not in KNOWN_COLUMNS and c not in TRANSLATED_COLUMNS]
    return [*known, *extra, *TRANSLATED_COLUMNS]


def source_text(row: Mapping[str, str]) -> tuple[str, str]:
    """Title and body to translate; fallback columns apply only when the primary is absent."""
    title = row["title"] if "title" in row else row.get(TITLE_FALLBACK, "")
    body = row["body"] if "body" in row else row.get(BODY_FALLBACK, "")
    return title or "", body or ""


def report_every(total: int) -> int:
    return max(10, total // 20)


class TranslationClient:
    """Callable wrapper around the chat completions endpoint."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str,
        temperature: float,
        max_tokens: int,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_config(cls, config: TranslateConfig) -> "TranslationClient":
        return cls(
            api_key=config.api_key,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    async def __call__(self, title: str, body: str) -> Translation:
        try:
            res = await self._client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_message(title, body)},
                ],
            )
        except OpenAIError as exc:
            raise TranslationError(f"Completion request failed: {exc}") from exc
        text = (res.choices[0].message.content if res.choices else None) or ""
        return split_translation(text)

    async def close(self) -> None:
        await self._client.close()


async def translate_rows(
    rows: Sequence[Mapping[str, str]],
    translate: TranslateFn,
    *,
    concurrency: int,
    progress: ProgressSink | None = None,
) -> list[Row]:
    """Translate every row with at most ``concurrency`` calls in flight.

    Output order matches input order. The first failing row aborts the batch.
    """
    total = len(rows)
    every = report_every(total)
    sem = asyncio.Semaphore(max(1, concurrency))
    done = 0

    def tick() -> None:
        nonlocal done
        done += 1
        if progress and (done % every == 0 or done == total):
            progress(done, total)

    async def handle(row: Mapping[str, str]) -> Row:
        title, body = source_text(row)
        if not title and not body:
            result = EMPTY_TRANSLATION
        else:
            async with sem:
                result = await translate(title, body)
        tick()
        return {**row, **result.to_columns()}

    return await gather_or_cancel(handle(r) for r in rows)


async def translate_csv(
    config: TranslateConfig,
    translate: TranslateFn | None = None,
    progress: ProgressSink | None = None,
    on_rows: Callable[[int, list[str]], None] | None = None,
) -> TranslateResult:
    """Read ``config.input_path``, translate all rows, write ``config.output_path``."""
    text = await read_text(config.input_path)
    rows = parse_csv(text)
    headers = derive_headers(rows[0] if rows else None)
    log.debug("Parsed %d rows from %s", len(rows), config.input_path)
    if on_rows:
        on_rows(len(rows), headers)

    owned: TranslationClient | None = None
    if translate is None and rows:
        owned = TranslationClient.from_config(config)
        translate = owned
    try:
        translated = (
            await translate_rows(rows, translate, concurrency=config.concurrency, progress=progress)
            if rows
            else []
        )
    finally:
        if owned is not None:
            await owned.close()

    csv_text = rows_to_csv(translated, headers, newline=config.newline, include_bom=config.include_bom)
    await write_text(config.output_path, csv_text)
    return TranslateResult(
        input_path=config.input_path,
        output_path=config.output_path,
        rows=len(translated),
        headers=tuple(headers),
    )

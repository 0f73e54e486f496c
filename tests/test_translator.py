from __future__ import annotations

import asyncio
import random
import tempfile
import unittest
from pathlib import Path

from issue_export.config import TranslateConfig
from issue_export.errors import TranslationError
from issue_export.translator import (
    SYSTEM_PROMPT,
    TranslationClient,
    build_user_message,
    derive_headers,
    report_every,
    source_text,
    split_translation,
    translate_csv,
    translate_rows,
)
from issue_export.types import Translation

from tests.fakes import FakeOpenAI


class SplitTranslationTest(unittest.TestCase):
    def test_title_and_body(self) -> None:
        t = split_translation("  タイトル \n\n本文1\n\n\n本文2  ")
        self.assertEqual(t.title_ja, "タイトル")
        self.assertEqual(t.body_ja, "本文1\n\n本文2")

    def test_no_blank_line_puts_everything_in_title(self) -> None:
        t = split_translation(" 一行目\n二行目 ")
        self.assertEqual(t.title_ja, "一行目\n二行目")
        self.assertEqual(t.body_ja, "")

    def test_empty_response(self) -> None:
        self.assertEqual(split_translation(""), Translation("", ""))


class HeaderAndSourceTest(unittest.TestCase):
    def test_known_prefix_then_extras_then_translations(self) -> None:
        row = {"extra": "x", "body": "b", "soupId": "s", "title": "t", "url": "u"}
        self.assertEqual(
            derive_headers(row),
            ["soupId", "title", "body", "extra", "url", "titleJa", "bodyJa"],
        )

    def test_existing_translation_columns_not_duplicated(self) -> None:
        row = {"soupId": "s", "title": "t", "body": "b", "titleJa": "x", "bodyJa": "y", "url": "u"}
        self.assertEqual(
            derive_headers(row),
            ["soupId", "title", "body", "url", "titleJa", "bodyJa"],
        )

    def test_empty_input_has_no_headers(self) -> None:
        self.assertEqual(derive_headers(None), [])

    def test_fallback_columns_used_when_primary_absent(self) -> None:
        self.assertEqual(source_text({"summary": "S", "first_comment": "C"}), ("S", "C"))

    def test_primary_column_wins_even_when_empty(self) -> None:
        self.assertEqual(source_text({"title": "", "summary": "S", "body": "B"}), ("", "B"))

    def test_user_message_embeds_title_and_body(self) -> None:
        self.assertEqual(build_user_message("T", "B"), "TITLE:\nT\n\nBODY:\nB")

    def test_report_cadence(self) -> None:
        self.assertEqual(report_every(5), 10)
        self.assertEqual(report_every(1000), 50)


class TranslateRowsTest(unittest.IsolatedAsyncioTestCase):
    async def test_output_order_matches_input_under_random_latency(self) -> None:
        rows = [{"title": f"t{i}", "body": f"b{i}"} for i in range(40)]
        rng = random.Random(7)

        async def fake(title: str, body: str) -> Translation:
            await asyncio.sleep(rng.random() / 100)
            return Translation(title_ja=f"ja-{title}", body_ja=f"ja-{body}")

        out = await translate_rows(rows, fake, concurrency=8)

        self.assertEqual([r["titleJa"] for r in out], [f"ja-t{i}" for i in range(40)])
        self.assertEqual([r["bodyJa"] for r in out], [f"ja-b{i}" for i in range(40)])
        self.assertEqual(out[3]["title"], "t3")

    async def test_in_flight_calls_never_exceed_concurrency(self) -> None:
        in_flight = 0
        peak = 0

        async def fake(title: str, body: str) -> Translation:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return Translation(title, body)

        rows = [{"title": str(i), "body": ""} for i in range(20)]
        await translate_rows(rows, fake, concurrency=3)
        self.assertLessEqual(peak, 3)
        self.assertGreater(peak, 1)

    async def test_empty_rows_skip_the_remote_call(self) -> None:
        calls = []

        async def fake(title: str, body: str) -> Translation:
            calls.append((title, body))
            return Translation("x", "y")

        rows = [{"title": "", "body": ""}, {"title": "t", "body": ""}]
        out = await translate_rows(rows, fake, concurrency=2)
        self.assertEqual(calls, [("t", "")])
        self.assertEqual((out[0]["titleJa"], out[0]["bodyJa"]), ("", ""))
        self.assertEqual(out[1]["titleJa"], "x")

    async def test_single_failure_fails_the_batch(self) -> None:
        async def fake(title: str, body: str) -> Translation:
            if title == "bad":
                raise TranslationError("boom")
            return Translation(title, body)

        rows = [{"title": "ok", "body": ""}, {"title": "bad", "body": ""}]
        with self.assertRaises(TranslationError):
            await translate_rows(rows, fake, concurrency=2)

    async def test_failure_stops_queued_rows_from_calling_out(self) -> None:
        calls: list[str] = []

        async def fake(title: str, body: str) -> Translation:
            calls.append(title)
            await asyncio.sleep(0.01)
            if title == "0":
                raise TranslationError("boom")
            return Translation(title, body)

        rows = [{"title": str(i), "body": ""} for i in range(6)]
        with self.assertRaises(TranslationError):
            await translate_rows(rows, fake, concurrency=1)
        made = len(calls)
        await asyncio.sleep(0.1)
        self.assertEqual(len(calls), made)
        self.assertLess(made, len(rows))

    async def test_progress_reported_at_cadence_and_on_last_row(self) -> None:
        seen: list[tuple[int, int]] = []

        async def fake(title: str, body: str) -> Translation:
            return Translation(title, body)

        rows = [{"title": str(i), "body": ""} for i in range(25)]
        await translate_rows(rows, fake, concurrency=4, progress=lambda d, t: seen.append((d, t)))
        self.assertEqual(seen, [(10, 25), (20, 25), (25, 25)])


class TranslationClientTest(unittest.IsolatedAsyncioTestCase):
    async def test_sends_system_prompt_and_parses_reply(self) -> None:
        fake = FakeOpenAI("バグ: クラッシュ\n\n再現手順...")
        client = TranslationClient(model="gpt-4o-mini", temperature=0.2, max_tokens=2048, client=fake)

        result = await client("Bug: crash", "Steps to reproduce...")

        self.assertEqual(result, Translation("バグ: クラッシュ", "再現手順..."))
        call = fake.chat.completions.calls[0]
        self.assertEqual(call["model"], "gpt-4o-mini")
        self.assertEqual(call["temperature"], 0.2)
        self.assertEqual(call["max_tokens"], 2048)
        self.assertEqual(call["messages"][0], {"role": "system", "content": SYSTEM_PROMPT})
        self.assertEqual(call["messages"][1]["content"], "TITLE:\nBug: crash\n\nBODY:\nSteps to reproduce...")

    async def test_missing_content_is_empty_translation(self) -> None:
        client = TranslationClient(model="m", temperature=0.0, max_tokens=10, client=FakeOpenAI(None))
        self.assertEqual(await client("t", "b"), Translation("", ""))


class TranslateCsvTest(unittest.IsolatedAsyncioTestCase):
    async def test_single_row_scenario(self) -> None:
        fake = FakeOpenAI("バグ: クラッシュ\n\n再現手順...")
        client = TranslationClient(model="gpt-4o-mini", temperature=0.2, max_tokens=2048, client=fake)

        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "issues.csv"
            dst = Path(tmp) / "issues_ja.csv"
            src.write_bytes(
                '\ufeffsoupId,projectId,title,body\r\nS1,P1,"Bug: crash","Steps to reproduce..."\r\n'.encode("utf-8")
            )
            config = TranslateConfig(api_key="k", input_path=str(src), output_path=str(dst), newline="\n")

            result = await translate_csv(config, translate=client)
            out = dst.read_text(encoding="utf-8")

        self.assertEqual(len(fake.chat.completions.calls), 1)
        self.assertEqual(result.rows, 1)
        self.assertEqual(result.headers, ("soupId", "projectId", "title", "body", "titleJa", "bodyJa"))
        self.assertEqual(
            out,
            "soupId,projectId,title,body,titleJa,bodyJa\n"
            "S1,P1,Bug: crash,Steps to reproduce...,バグ: クラッシュ,再現手順...",
        )


if __name__ == "__main__":
    unittest.main()

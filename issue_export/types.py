from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .config import DEFAULT_HEADERS


@dataclass(frozen=True)
class IssueRequest:
    soup_id: str
    project_id: str
    owner: str
    repo: str
    wanted_n: int
    labels: tuple[str, ...] = ()
    version: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class IssueRow:
    soup_id: str
    project_id: str
    title: str
    body: str

    def to_row(self) -> dict[str, str]:
        return {
            "soupId": self.soup_id,
            "projectId": self.project_id,
            "title": self.title,
            "body": self.body,
        }


@dataclass(frozen=True)
class IssueResponse:
    count: int  # total_count as reported by GitHub
    query: str  # exact query string that was sent
    items: tuple[IssueRow, ...]


@dataclass(frozen=True)
class SearchPage:
    total_count: int
    incomplete_results: bool
    items: list[dict[str, Any]]

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SearchPage":
        return cls(
            total_count=int(payload.get("total_count") or 0),
            incomplete_results=bool(payload.get("incomplete_results")),
            items=list(payload.get("items") or []),
        )


@dataclass(frozen=True)
class CsvOptions:
    include_bom: bool = False
    newline: str = "\r\n"
    headers: tuple[str, ...] = field(default=DEFAULT_HEADERS)


@dataclass(frozen=True)
class Translation:
    title_ja: str
    body_ja: str

    def to_columns(self) -> dict[str, str]:
        return {"titleJa": self.title_ja, "bodyJa": self.body_ja}


EMPTY_TRANSLATION = Translation(title_ja="", body_ja="")


@dataclass(frozen=True)
class TranslateResult:
    input_path: str
    output_path: str
    rows: int
    headers: tuple[str, ...]

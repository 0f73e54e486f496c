from __future__ import annotations

from typing import Iterable


def label_terms(labels: Iterable[str] | None) -> list[str]:
    """Quote each non-blank label: ["bug", " good first issue "] -> label:"bug" label:"good first issue"."""
    return [f'label:"{label.strip()}"' for label in labels or () if label and label.strip()]


def build_search_query(
    owner: str,
    repo: str,
    labels: Iterable[str] | None = None,
    version: str | None = None,
) -> str:
    parts = [
        f"repo:{owner}/{repo}",
        "is:issue",
        "state:open",
        *label_terms(labels),
        "in:title,body",
        version or "",
    ]
    return " ".join(p for p in parts if p)

"""Configuration constants and startup settings for issue-export."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .errors import ConfigError

# GitHub search API
GITHUB_API = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
SEARCH_PAGE_SIZE = 100
SEARCH_RESULT_CAP = 1000  # Search API never returns more than this per query

# CSV output
DEFAULT_HEADERS = ("soupId", "projectId", "title", "body")
NEWLINES = {"lf": "\n", "crlf": "\r\n"}
UTF8_BOM = "\ufeff"

# Translation
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.2
DEFAULT_CONCURRENCY = 5
COMPLETION_MAX_TOKENS = 2048

# Process exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_MISSING_KEY = 2
EXIT_INPUT_NOT_FOUND = 3
EXIT_INTERRUPTED = 130


@dataclass(frozen=True)
class FetchConfig:
    token: str
    include_bom: bool = False
    newline: str = "\r\n"
    headers: tuple[str, ...] = field(default=DEFAULT_HEADERS)

    @classmethod
    def from_env(cls, **kwargs) -> "FetchConfig":
        tok = os.environ.get("GH_TOKEN") or os.environ.get("GITHUB_TOKEN")
        if not tok:
            raise ConfigError("Missing GitHub token. Set GH_TOKEN or GITHUB_TOKEN.")
        return cls(token=tok, **kwargs)


@dataclass(frozen=True)
class TranslateConfig:
    """Everything the translate pipeline needs, resolved once at startup."""

    api_key: str
    input_path: str
    output_path: str
    concurrency: int = DEFAULT_CONCURRENCY
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    newline: str = "\r\n"
    include_bom: bool = False
    max_tokens: int = COMPLETION_MAX_TOKENS

    @classmethod
    def from_env(cls, **kwargs) -> "TranslateConfig":
        key = os.environ.get("OPENAI_API_KEY", "")
        if not key:
            raise ConfigError("OPENAI_API_KEY is required")
        return cls(api_key=key, **kwargs)

    @property
    def newline_name(self) -> str:
        return "lf" if self.newline == "\n" else "crlf"

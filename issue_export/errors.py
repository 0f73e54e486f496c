from __future__ import annotations


class IssueExportError(RuntimeError):
    pass


class ConfigError(IssueExportError):
    pass


class GitHubApiError(IssueExportError):
    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class TranslationError(IssueExportError):
    pass

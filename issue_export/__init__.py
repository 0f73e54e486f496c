"""Issue Export - GitHub issues to CSV, with optional Japanese translation.

Two independent pipelines sharing one CSV codec:
- fetch: search open issues of a repository and write them to CSV
- translate: read a CSV, translate title/body per row with an OpenAI model,
  and write the rows back out with titleJa/bodyJa columns
"""

__version__ = "1.0.0"

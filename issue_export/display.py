"""Rich terminal output for the command-line drivers."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich import box

from .config import TranslateConfig
from .types import IssueResponse, TranslateResult

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def print_error(message: str) -> None:
    err_console.print(f"[red]{message}[/red]")


def print_translate_banner(config: TranslateConfig, in_abs: str, out_abs: str) -> None:
    console.print("[bold cyan]csv-translate starting[/bold cyan]")
    console.print(f" in : {in_abs}")
    console.print(f" out: {out_abs}")
    console.print(f" model={config.model} temp={config.temperature}")
    console.print(
        f" concurrency={config.concurrency} newline={config.newline_name} "
        f"bom={str(config.include_bom).lower()}"
    )


def print_rows_found(total: int, headers: list[str]) -> None:
    console.print(f"rows: {total}, headers: {', '.join(headers)}")


class ConsoleProgress:
    """Progress sink that rewrites a ``done/total`` counter in place."""

    def __init__(self, target: Console | None = None):
        self.console = target or console
        self.shown = False

    def __call__(self, done: int, total: int) -> None:
        # Rich strips carriage returns from printed text.
        self.console.file.write(f"\r{done}/{total}")
        self.console.file.flush()
        self.shown = True

    def finish(self) -> None:
        if self.shown:
            self.console.file.write("\n")
            self.console.file.flush()


def print_translate_done(result: TranslateResult) -> None:
    console.print("[green]Done[/green]")
    console.print(f"   in : {result.input_path}")
    console.print(f"   out: {result.output_path}")


def print_fetch_summary(path: str, response: IssueResponse) -> None:
    table = Table(show_header=False, box=box.SIMPLE, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Saved", path)
    table.add_row("Query", response.query)
    table.add_row("Rows written", str(len(response.items)))
    table.add_row("Total (reported)", f"{response.count:,}")
    console.print(table)

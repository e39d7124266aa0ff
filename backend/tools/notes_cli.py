from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from app.client.orchestrator import (
    DEFAULT_API_BASE,
    TransformOrchestrator,
    TransformState,
)

console = Console()


def _read_text(path: Optional[str]) -> str:
    if path and path != "-":
        return Path(path).read_text(encoding="utf-8")
    return sys.stdin.read()


async def run(args: argparse.Namespace) -> int:
    text = _read_text(args.file)
    if not text.strip():
        console.print("[red]Nothing to transform: the note is empty.[/red]")
        return 2

    async with TransformOrchestrator.for_api(args.api_base) as orchestrator:
        orchestrator.set_options(
            auto_format=args.format,
            highlight_key_terms=args.terms,
            comments=args.comments,
        )
        with console.status("Transforming notes..."):
            result = await orchestrator.transform(text)

        if orchestrator.state == TransformState.FAILED or result is None:
            console.print(f"[red]Transform failed:[/red] {orchestrator.error}")
            return 1

        console.print(Panel(Markdown(result.formatted_text or "_(empty)_"), title="Notes"))

        if orchestrator.definitions:
            table = Table(title="Key terms", show_lines=True)
            table.add_column("Term", style="bold yellow")
            table.add_column("Definition")
            for term in result.highlights:
                view = orchestrator.definition_for(term)
                table.add_row(term, view.definition or f"({view.status})")
            console.print(table)

        if result.comments:
            console.print(Panel("\n".join(f"• {c}" for c in result.comments), title="Insights"))

        if args.html:
            Path(args.html).write_text(orchestrator.render_highlighted(), encoding="utf-8")
            console.print(f"Highlighted text written to {args.html}")

    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Transform a study note through the API.")
    parser.add_argument("file", nargs="?", help="Note file to read (default: stdin)")
    parser.add_argument("--api-base", default=DEFAULT_API_BASE, help="Override API base URL")
    parser.add_argument("--format", action="store_true", help="Apply markdown formatting")
    parser.add_argument("--terms", action="store_true", help="Extract and define key terms")
    parser.add_argument("--comments", action="store_true", help="Generate study insights")
    parser.add_argument("--html", help="Write the highlighted text to this path")
    return parser


def main() -> None:
    args = build_arg_parser().parse_args()
    raise SystemExit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()

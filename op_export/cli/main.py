import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from op_export.config.settings import get_settings
from op_export.models.schemas import ExportResult
from op_export.services.op_client import OpClient
from op_export.services.op_errors import OpError
from op_export.workflows.run_export import run_export
from op_export.tools.logging_setup import setup_logging

logger = logging.getLogger(__name__)
err = Console(stderr=True)


app = typer.Typer(
    help="Export every item of a 1Password vault to an unencrypted JSON file via the op CLI.",
    add_completion=False,
)


def print_summary(result: ExportResult) -> None:
    err.print(
        f"Attempted {result.attempted} | succeeded {result.succeeded} | failed {len(result.failures)}"
    )
    if not result.failures:
        return
    err.print("[bold yellow]Failed items[/bold yellow] (re-run or inspect these by hand):")
    for f in result.failures:
        err.print(f"  {escape(f.item_id)}: {escape(f.reason)}", soft_wrap=True)


@app.command()
def export(
    output: Path = typer.Option(
        ..., "-o", "--output", help="Path to write the export to (JSON array).", dir_okay=False
    ),
    op: Optional[str] = typer.Option(None, "--op", help="op binary to use (default: op)."),
    workers: Optional[int] = typer.Option(
        None, "--workers", min=1, help="Parallel item fetches (default: 1)."
    ),
    id_field: Optional[str] = typer.Option(
        None, "--id-field", help="Identifier key in 'op items list' output (default: id)."
    ),
    sort_by_id: Optional[bool] = typer.Option(
        None, "--sort-by-id/--no-sort-by-id", help="Order output by item id instead of listing order."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0.001, help="Per-call timeout for op, in seconds."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
):
    """Export all items the signed-in op session can see."""
    try:
        s = get_settings()
    except ValueError as e:
        err.print(f"[bold red]Invalid configuration[/bold red]: {escape(str(e))}", soft_wrap=True)
        raise SystemExit(1)
    setup_logging(verbose)

    client = OpClient(command=op, timeout_seconds=timeout, id_field=id_field)
    try:
        run_export(
            client,
            output,
            workers=workers or s.workers,
            sort_by_id=s.sort_by_id if sort_by_id is None else sort_by_id,
            id_field=client.id_field,
            on_fetched=print_summary,
        )
    except OpError as e:
        logger.error("Export failed: %s", e)
        err.print(f"[bold red]Export failed[/bold red]: {escape(str(e))}", soft_wrap=True)
        raise SystemExit(1)
    except KeyboardInterrupt:
        err.print("[bold red]Interrupted[/bold red]; no output written.")
        raise SystemExit(130)

    err.print(f"[bold green]Export written[/bold green] to {escape(str(output))}")


if __name__ == "__main__":
    app()

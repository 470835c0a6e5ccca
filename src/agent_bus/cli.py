from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import typer
from rich.console import Console
from rich.table import Table

from agent_bus.config import BusSettings
from agent_bus.demo import main as demo_main

app = typer.Typer(no_args_is_help=True)


@app.command()
def demo(
    log_path: str = typer.Option(None, "--log-path", help="Log file (default: AGENT_BUS_LOG_PATH or agent-bus.log)"),
) -> None:
    """Run the conflict-resolution demo (last-writer-wins, first-come-first-serve, round-robin)."""
    raise SystemExit(demo_main(log_path=log_path))


@app.command("show-log")
def show_log(
    path: str = typer.Argument(None, help="Log file to read (default: AGENT_BUS_LOG_PATH)"),
    limit: int = typer.Option(50, "--limit", help="Show only the last N entries (0 = all)"),
) -> None:
    """
    Render the append-only bus log as a table.
    """
    log_file = Path(path or BusSettings().log_path)
    if not log_file.exists():
        raise typer.BadParameter("log file not found: %s" % log_file)

    entries: List[Dict[str, Any]] = []
    bad = 0
    with log_file.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except ValueError:
                bad += 1
                continue
            if isinstance(obj, dict):
                entries.append(obj)
            else:
                bad += 1

    if limit > 0:
        entries = entries[-limit:]

    table = Table(title=str(log_file))
    table.add_column("timestamp", style="dim")
    table.add_column("type")
    table.add_column("topic", style="cyan")
    table.add_column("handler")
    table.add_column("payload / result", overflow="fold")

    for e in entries:
        typ = str(e.get("type", ""))
        if typ == "handle":
            detail = e.get("result")
        elif typ == "send":
            detail = e.get("payload")
        else:
            detail = None
        table.add_row(
            str(e.get("timestamp", "")),
            typ,
            str(e.get("topic", "")),
            str(e.get("handlerId", "") or ""),
            "" if detail is None else json.dumps(detail, default=str),
        )

    console = Console()
    console.print(table)
    if bad:
        console.print("[yellow]skipped %d malformed line(s)[/yellow]" % bad)

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from rich.console import Console

from agent_bus.bus import create_bus
from agent_bus.config import BusSettings
from agent_bus.core.logging import configure_logging, get_logger


async def run_demo(*, log_path: Optional[str] = None, console: Optional[Console] = None) -> None:
    settings = BusSettings()
    out = console or Console()
    log = get_logger(service="demo")
    path = log_path or settings.log_path

    # Two research agents on one topic: the newest one wins by default.
    bus = create_bus(settings, log_path=path)

    def research_agent(payload: Dict[str, Any]) -> Dict[str, Any]:
        out.print("Research agent: %s" % payload["query"])
        return {"status": "researching", "query": payload["query"]}

    def backup_agent(payload: Dict[str, Any]) -> Dict[str, Any]:
        out.print("Backup agent: %s" % payload["query"])
        return {"status": "backup_researching", "query": payload["query"]}

    bus.register("task:research", research_agent)
    bus.register("task:research", backup_agent)

    out.print("[bold]Sending research task...[/bold]")
    await bus.send("task:research", {"query": "latest AI news"})

    out.print("\n[bold]--- first-come-first-serve ---[/bold]")
    fcfs = create_bus(settings, log_path=path, conflict_resolution="first-come-first-serve")

    def first_handler(payload: Dict[str, Any]) -> str:
        out.print("First handler processing: %s" % payload["data"])
        return "first_handler_result"

    def second_handler(payload: Dict[str, Any]) -> str:
        out.print("Second handler processing: %s" % payload["data"])
        return "second_handler_result"

    fcfs.register("task:process", first_handler)
    fcfs.register("task:process", second_handler)
    await fcfs.send("task:process", {"data": "test data"})

    out.print("\n[bold]--- round-robin ---[/bold]")
    rr = create_bus(settings, log_path=path, conflict_resolution="round-robin")

    def make_worker(label: str):
        async def worker(payload: Dict[str, Any]) -> str:
            out.print("Handler %s processing: %s" % (label, payload["data"]))
            return "handler_%s_result" % label.lower()

        return worker

    for label in ("A", "B", "C"):
        rr.register("task:round", make_worker(label))

    for i in range(1, 7):
        await rr.send("task:round", {"data": "task %d" % i})

    log.info("demo_complete", log_path=path)
    out.print("\nDemo completed! Check [cyan]%s[/cyan] for detailed logs." % path)


def main(log_path: Optional[str] = None) -> int:
    settings = BusSettings()
    configure_logging(settings.log_level)
    asyncio.run(run_demo(log_path=log_path))
    return 0

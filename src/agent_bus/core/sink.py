from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, List, Protocol, Union

from agent_bus.core.records import EntryKind, LogEntry


class LogSink(Protocol):
    def write(self, entry: LogEntry) -> None: ...


class JsonlFileSink:
    """
    Appends each entry as one JSON line. The file is opened per write so
    nothing is held open between sends.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: LogEntry) -> None:
        line = json.dumps(entry.to_dict(), default=str, ensure_ascii=False) + "\n"
        with self._lock:
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)


class MemorySink:
    def __init__(self) -> None:
        self.entries: List[LogEntry] = []

    def write(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def of_kind(self, kind: EntryKind) -> List[LogEntry]:
        return [e for e in self.entries if e.kind == kind]


def emit(sink: LogSink, entry: LogEntry, log: Any) -> None:
    """
    Best-effort write. Sink failures go to the diagnostic log and never
    reach the caller.
    """
    try:
        sink.write(entry)
    except Exception as e:
        log.warning("log_write_failed", topic=entry.topic, kind=entry.kind.value, error=str(e))

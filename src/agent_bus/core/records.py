from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


def now_rfc3339() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class EntryKind(str, Enum):
    SUBSCRIBE = "subscribe"
    SEND = "send"
    HANDLE = "handle"


@dataclass(frozen=True)
class LogEntry:
    """
    One line of the append-only bus log.

    The core only ever writes these; nothing reads them back.
    """

    kind: EntryKind
    topic: str
    payload: Any = None
    handler_id: Optional[str] = None
    result: Any = None
    timestamp: str = field(default_factory=now_rfc3339)

    @classmethod
    def subscribe(cls, topic: str, handler_id: str) -> "LogEntry":
        return cls(kind=EntryKind.SUBSCRIBE, topic=topic, handler_id=handler_id)

    @classmethod
    def send(cls, topic: str, payload: Any) -> "LogEntry":
        return cls(kind=EntryKind.SEND, topic=topic, payload=payload)

    @classmethod
    def handle(cls, topic: str, payload: Any, handler_id: str, result: Any) -> "LogEntry":
        return cls(kind=EntryKind.HANDLE, topic=topic, payload=payload, handler_id=handler_id, result=result)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "type": self.kind.value,
            "topic": self.topic,
        }
        if self.kind != EntryKind.SUBSCRIBE:
            out["payload"] = self.payload
        if self.handler_id is not None:
            out["handlerId"] = self.handler_id
        if self.kind == EntryKind.HANDLE:
            out["result"] = self.result
        return out


def error_result(exc: BaseException) -> Dict[str, str]:
    """Shape recorded as `result` when a handler raises."""
    # str(KeyError("x")) is "'x'"; keep the bare message.
    if len(exc.args) == 1 and isinstance(exc.args[0], str):
        msg = exc.args[0]
    else:
        msg = str(exc)
    return {"error": msg or type(exc).__name__}

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

# Plain function or coroutine function; the dispatcher awaits awaitable results.
Handler = Callable[[Any], Any]


@dataclass(frozen=True)
class Registration:
    handler_id: str
    callback: Handler


class Registry:
    """
    topic -> ordered handlers, plus the per-topic round-robin cursor.

    Registration order is significant: it decides first/last and the
    rotation order. A topic with no handlers is removed outright.
    """

    def __init__(self) -> None:
        self._topics: Dict[str, List[Registration]] = {}
        self._cursors: Dict[str, int] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    def register(self, topic: str, callback: Handler) -> str:
        if not isinstance(topic, str) or not topic:
            raise ValueError("invalid_topic")
        if not callable(callback):
            raise TypeError("handler must be callable")
        with self._lock:
            handler_id = "handler_%d" % next(self._ids)
            self._topics.setdefault(topic, []).append(Registration(handler_id=handler_id, callback=callback))
        return handler_id

    def unregister(self, topic: str, handler_id: str) -> bool:
        with self._lock:
            regs = self._topics.get(topic)
            if not regs:
                return False
            kept = [r for r in regs if r.handler_id != handler_id]
            if len(kept) == len(regs):
                return False
            if kept:
                self._topics[topic] = kept
            else:
                self._drop(topic)
            return True

    def list_topics(self) -> List[str]:
        with self._lock:
            return list(self._topics.keys())

    def handler_count(self, topic: str) -> int:
        with self._lock:
            return len(self._topics.get(topic, ()))

    def handlers(self, topic: str) -> Tuple[Registration, ...]:
        with self._lock:
            return tuple(self._topics.get(topic, ()))

    def rotate(self, topic: str) -> Optional[Registration]:
        """
        Pick the handler at the topic's cursor and advance it.
        The cursor is taken modulo the current count, so removals never
        leave it out of range.
        """
        with self._lock:
            regs = self._topics.get(topic)
            if not regs:
                return None
            n = len(regs)
            idx = self._cursors.get(topic, 0) % n
            self._cursors[topic] = (idx + 1) % n
            return regs[idx]

    def clear_topic(self, topic: str) -> bool:
        with self._lock:
            if topic not in self._topics:
                return False
            self._drop(topic)
            return True

    def clear_all(self) -> None:
        with self._lock:
            self._topics.clear()
            self._cursors.clear()

    def _drop(self, topic: str) -> None:
        self._topics.pop(topic, None)
        self._cursors.pop(topic, None)

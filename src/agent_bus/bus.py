from __future__ import annotations

from typing import Any, List, Optional, Union

from agent_bus.config import BusSettings
from agent_bus.core.dispatcher import Dispatcher
from agent_bus.core.logging import get_logger
from agent_bus.core.policy import ConflictResolution
from agent_bus.core.records import LogEntry
from agent_bus.core.registry import Handler, Registry
from agent_bus.core.sink import JsonlFileSink, LogSink, emit


class AgentBus:
    """
    In-process pub/sub for worker agents competing for the same topics.

    Each instance owns its own registry, cursors and log destination;
    nothing is shared between instances.
    """

    def __init__(
        self,
        settings: Optional[BusSettings] = None,
        *,
        log_path: Optional[str] = None,
        conflict_resolution: Optional[Union[str, ConflictResolution]] = None,
        sink: Optional[LogSink] = None,
    ) -> None:
        self._settings = settings or BusSettings()
        self._log_path = log_path or self._settings.log_path
        self._log = get_logger(bus=self._settings.name)

        self._sink: LogSink = sink if sink is not None else JsonlFileSink(self._log_path)
        self._registry = Registry()
        self._dispatcher = Dispatcher(
            self._registry,
            self._sink,
            conflict_resolution if conflict_resolution is not None else self._settings.conflict_resolution,
            name=self._settings.name,
        )

    @property
    def policy(self) -> ConflictResolution:
        return self._dispatcher.policy

    @property
    def log_path(self) -> str:
        return self._log_path

    def register(self, topic: str, handler: Handler) -> str:
        """
        Subscribe `handler` to `topic`. Returns an id for `unregister`.
        """
        handler_id = self._registry.register(topic, handler)
        emit(self._sink, LogEntry.subscribe(topic, handler_id), self._log)
        self._log.debug("subscribed", topic=topic, handler_id=handler_id)
        return handler_id

    def unregister(self, topic: str, handler_id: str) -> bool:
        removed = self._registry.unregister(topic, handler_id)
        if removed:
            self._log.debug("unsubscribed", topic=topic, handler_id=handler_id)
        return removed

    async def send(self, topic: str, payload: Any) -> None:
        await self._dispatcher.send(topic, payload)

    def list_topics(self) -> List[str]:
        return self._registry.list_topics()

    def handler_count(self, topic: str) -> int:
        return self._registry.handler_count(topic)

    def clear_topic(self, topic: str) -> bool:
        cleared = self._registry.clear_topic(topic)
        if cleared:
            self._log.debug("topic_cleared", topic=topic)
        return cleared

    def clear_all(self) -> None:
        self._registry.clear_all()
        self._log.debug("bus_cleared")


def create_bus(
    settings: Optional[BusSettings] = None,
    *,
    log_path: Optional[str] = None,
    conflict_resolution: Optional[Union[str, ConflictResolution]] = None,
    sink: Optional[LogSink] = None,
) -> AgentBus:
    return AgentBus(settings, log_path=log_path, conflict_resolution=conflict_resolution, sink=sink)

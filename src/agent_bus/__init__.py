from agent_bus.bus import AgentBus, create_bus
from agent_bus.config import BusSettings
from agent_bus.core.policy import ConflictResolution
from agent_bus.core.records import EntryKind, LogEntry
from agent_bus.core.sink import JsonlFileSink, LogSink, MemorySink

__all__ = [
    "AgentBus",
    "BusSettings",
    "ConflictResolution",
    "EntryKind",
    "JsonlFileSink",
    "LogEntry",
    "LogSink",
    "MemorySink",
    "create_bus",
]

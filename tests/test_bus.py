import json

import pytest
from structlog.testing import capture_logs

from agent_bus import AgentBus, BusSettings, ConflictResolution, EntryKind, MemorySink, create_bus


@pytest.mark.asyncio
async def test_bus_register_send_roundtrip() -> None:
    sink = MemorySink()
    bus = create_bus(sink=sink, conflict_resolution="last-writer-wins")
    seen = []

    async def handler(payload):
        seen.append(payload)
        return {"status": "ok"}

    hid = bus.register("x", handler)
    await bus.send("x", {"a": 1})

    assert seen == [{"a": 1}]
    assert [e.kind for e in sink.entries] == [EntryKind.SUBSCRIBE, EntryKind.SEND, EntryKind.HANDLE]
    assert sink.entries[0].handler_id == hid
    assert sink.entries[2].result == {"status": "ok"}


@pytest.mark.asyncio
async def test_raising_handler_never_reaches_caller() -> None:
    sink = MemorySink()
    bus = AgentBus(sink=sink)

    def boom(payload):
        raise RuntimeError("worker crashed")

    bus.register("jobs", boom)
    await bus.send("jobs", {"id": 1})

    handles = sink.of_kind(EntryKind.HANDLE)
    assert len(handles) == 1
    assert handles[0].result == {"error": "worker crashed"}


@pytest.mark.asyncio
async def test_clear_all_restarts_rotation() -> None:
    bus = AgentBus(sink=MemorySink(), conflict_resolution="round-robin")
    seen = []
    bus.register("t", lambda p: seen.append("old-A"))
    bus.register("t", lambda p: seen.append("old-B"))
    await bus.send("t", {})

    bus.clear_all()
    assert bus.list_topics() == []

    bus.register("t", lambda p: seen.append("A"))
    bus.register("t", lambda p: seen.append("B"))
    await bus.send("t", {})
    assert seen == ["old-A", "A"]


@pytest.mark.asyncio
async def test_unregister_only_handler_removes_topic() -> None:
    bus = AgentBus(sink=MemorySink())
    hid = bus.register("t", lambda p: None)
    assert bus.unregister("t", hid) is True
    assert bus.unregister("t", hid) is False
    assert bus.handler_count("t") == 0
    assert "t" not in bus.list_topics()


def test_clear_topic() -> None:
    bus = AgentBus(sink=MemorySink())
    bus.register("a", lambda p: None)
    bus.register("b", lambda p: None)
    assert bus.clear_topic("a") is True
    assert bus.clear_topic("a") is False
    assert bus.list_topics() == ["b"]


@pytest.mark.asyncio
async def test_instances_do_not_share_state() -> None:
    one = AgentBus(sink=MemorySink(), conflict_resolution="round-robin")
    two = AgentBus(sink=MemorySink(), conflict_resolution="first-come-first-serve")
    one.register("t", lambda p: None)
    assert two.list_topics() == []
    assert two.register("t", lambda p: None) == "handler_1"
    assert one.policy == ConflictResolution.ROUND_ROBIN
    assert two.policy == ConflictResolution.FIRST_COME_FIRST_SERVE


def test_policy_comes_from_settings_unless_overridden() -> None:
    settings = BusSettings(conflict_resolution="round-robin", log_path="x.log")
    assert AgentBus(settings, sink=MemorySink()).policy == ConflictResolution.ROUND_ROBIN
    bus = AgentBus(settings, conflict_resolution="first-come-first-serve", sink=MemorySink())
    assert bus.policy == ConflictResolution.FIRST_COME_FIRST_SERVE
    assert bus.log_path == "x.log"


@pytest.mark.asyncio
async def test_file_log_is_jsonl_in_order(tmp_path) -> None:
    log_file = tmp_path / "bus.log"
    bus = AgentBus(log_path=str(log_file), conflict_resolution="broadcast")
    h1 = bus.register("task:research", lambda p: {"status": "researching", "query": p["query"]})
    h2 = bus.register("task:research", lambda p: 1 / 0)
    await bus.send("task:research", {"query": "latest AI news"})

    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [ln["type"] for ln in lines] == ["subscribe", "subscribe", "send", "handle", "handle"]
    assert lines[0] == {"timestamp": lines[0]["timestamp"], "type": "subscribe", "topic": "task:research", "handlerId": h1}
    assert lines[2]["payload"] == {"query": "latest AI news"}
    assert "handlerId" not in lines[2]
    assert lines[3]["handlerId"] == h1
    assert lines[3]["result"] == {"status": "researching", "query": "latest AI news"}
    assert lines[4]["handlerId"] == h2
    assert lines[4]["result"] == {"error": "division by zero"}
    assert all(ln["timestamp"].endswith("Z") for ln in lines)


@pytest.mark.asyncio
async def test_unwritable_log_path_is_not_fatal(tmp_path) -> None:
    seen = []
    with capture_logs() as logs:
        bus = AgentBus(log_path=str(tmp_path / "missing-dir" / "bus.log"))
        bus.register("t", lambda p: seen.append(p))
        await bus.send("t", {"ok": True})

    assert seen == [{"ok": True}]
    failed = [e["kind"] for e in logs if e["event"] == "log_write_failed"]
    assert failed == ["subscribe", "send", "handle"]

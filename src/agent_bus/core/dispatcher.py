from __future__ import annotations

import inspect
from typing import Any, List, Optional, Union

from agent_bus.core.logging import get_logger
from agent_bus.core.policy import ConflictResolution, is_known_policy, parse_policy
from agent_bus.core.records import LogEntry, error_result
from agent_bus.core.registry import Registration, Registry
from agent_bus.core.sink import LogSink, emit


class Dispatcher:
    """
    Resolves which of a topic's competing handlers get a message and runs them.

    Policy is fixed for the lifetime of the instance:
      - last-writer-wins: newest handler still registered
      - first-come-first-serve: oldest handler still registered
      - round-robin: handler at the topic cursor, cursor advances every send
      - anything else: broadcast to all handlers in registration order
    """

    def __init__(
        self,
        registry: Registry,
        sink: LogSink,
        policy: Optional[Union[str, ConflictResolution]] = None,
        *,
        name: str = "agent-bus",
    ) -> None:
        self._registry = registry
        self._sink = sink
        self._policy = parse_policy(policy)
        self._log = get_logger(bus=name, component="dispatcher")
        if not is_known_policy(policy):
            self._log.warning("unknown_conflict_resolution", value=str(policy), policy=self._policy.value)

    @property
    def policy(self) -> ConflictResolution:
        return self._policy

    def resolve(self, topic: str) -> List[Registration]:
        """
        Handlers to run for one send, in invocation order. Advances the
        round-robin cursor, so call once per send.
        """
        if self._policy == ConflictResolution.ROUND_ROBIN:
            picked = self._registry.rotate(topic)
            return [picked] if picked is not None else []

        regs = self._registry.handlers(topic)
        if not regs:
            return []
        if self._policy == ConflictResolution.LAST_WRITER_WINS:
            return [regs[-1]]
        if self._policy == ConflictResolution.FIRST_COME_FIRST_SERVE:
            return [regs[0]]
        return list(regs)

    async def send(self, topic: str, payload: Any) -> None:
        emit(self._sink, LogEntry.send(topic, payload), self._log)

        selected = self.resolve(topic)
        if not selected:
            return

        self._log.debug(
            "dispatched",
            topic=topic,
            policy=self._policy.value,
            handlers=[r.handler_id for r in selected],
        )
        # Sequential: handle entries appear in selection order.
        for reg in selected:
            result = await self._invoke(topic, reg, payload)
            emit(self._sink, LogEntry.handle(topic, payload, reg.handler_id, result), self._log)

    async def _invoke(self, topic: str, reg: Registration, payload: Any) -> Any:
        try:
            result = reg.callback(payload)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            self._log.warning("handler_failed", topic=topic, handler_id=reg.handler_id, error=str(e))
            return error_result(e)

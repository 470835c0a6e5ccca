from __future__ import annotations

from enum import Enum
from typing import Optional, Union


class ConflictResolution(str, Enum):
    LAST_WRITER_WINS = "last-writer-wins"
    FIRST_COME_FIRST_SERVE = "first-come-first-serve"
    ROUND_ROBIN = "round-robin"
    # Every handler, in registration order. Also what unknown values resolve to.
    BROADCAST = "broadcast"


DEFAULT_POLICY = ConflictResolution.LAST_WRITER_WINS


def parse_policy(value: Optional[Union[str, ConflictResolution]]) -> ConflictResolution:
    if value is None:
        return DEFAULT_POLICY
    if isinstance(value, ConflictResolution):
        return value
    s = str(value).strip().lower()
    for p in ConflictResolution:
        if p.value == s:
            return p
    return ConflictResolution.BROADCAST


def is_known_policy(value: Optional[Union[str, ConflictResolution]]) -> bool:
    if value is None or isinstance(value, ConflictResolution):
        return True
    s = str(value).strip().lower()
    return any(p.value == s for p in ConflictResolution)

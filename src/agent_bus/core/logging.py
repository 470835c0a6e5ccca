from __future__ import annotations

import logging
from typing import Any, Dict

import structlog
from rich.logging import RichHandler


def configure_logging(level: str) -> None:
    """
    Human-friendly diagnostics on stderr. The structured message log is
    written separately by the bus sink.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                rich_tracebacks=True,
                markup=True,
                show_time=True,
                show_level=True,
                show_path=False,
            )
        ],
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _pretty_rich_renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        cache_logger_on_first_use=True,
    )


def get_logger(**kwargs: Any) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger().bind(**kwargs)


# Keys shown first, in this order; the rest follow sorted.
_PREFERRED_KEYS = ("bus", "component", "topic", "handler_id", "policy", "error")

_EVENT_ICONS = {
    "subscribed": "🧩",
    "unsubscribed": "🧹",
    "topic_cleared": "🧹",
    "bus_cleared": "🧹",
    "dispatched": "📨",
    "handler_failed": "💥",
    "log_write_failed": "📝",
    "unknown_conflict_resolution": "🔀",
    "demo_complete": "🏁",
}

_LEVEL_MARKUP = {
    "error": ("❌", "bold red"),
    "critical": ("❌", "bold red"),
    "warning": ("⚠️", "bold yellow"),
}


def _pretty_rich_renderer(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> str:
    """
    Final renderer for structlog -> RichHandler: one scan-friendly line,
    icon and event name first, then key=value pairs.
    """
    event = str(event_dict.pop("event", method_name))
    level = str(event_dict.pop("level", "")).lower()

    level_icon, style = _LEVEL_MARKUP.get(level, ("✅", "bold cyan"))
    icon = _EVENT_ICONS.get(event, level_icon)
    title = "[%s]%s %s[/%s]" % (style, icon, event, style)

    parts = ["%s=%r" % (k, event_dict.pop(k)) for k in _PREFERRED_KEYS if k in event_dict]
    parts.extend("%s=%r" % (k, event_dict[k]) for k in sorted(event_dict))

    if parts:
        return "%s  %s" % (title, " ".join(parts))
    return title

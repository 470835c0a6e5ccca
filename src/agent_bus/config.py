from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _strip_quotes(s: str) -> str:
    s = (s or "").strip()
    if len(s) >= 2 and ((s[0] == s[-1]) and s[0] in ("'", '"')):
        s = s[1:-1].strip()
    return s


def _env_files() -> tuple[str, str]:
    """
    Allow running from subdirectories: check a local .env first,
    then fall back to the repo-root .env.
    """
    repo_root_env = str(Path(__file__).resolve().parents[2] / ".env")
    return (".env", repo_root_env)


_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class BusSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    name: str = Field(default="agent-bus", alias="AGENT_BUS_NAME")
    log_level: str = Field(default="INFO", alias="AGENT_BUS_LOG_LEVEL")
    # Append-only JSONL log of every subscribe/send/handle.
    log_path: str = Field(default="agent-bus.log", alias="AGENT_BUS_LOG_PATH")
    # last-writer-wins | first-come-first-serve | round-robin
    # Kept as a plain string: unknown values fall back to broadcast.
    conflict_resolution: str = Field(default="last-writer-wins", alias="AGENT_BUS_CONFLICT_RESOLUTION")

    @field_validator("name", "log_path", mode="before")
    @classmethod
    def _norm_str(cls, v: object) -> str:
        return _strip_quotes(str(v or ""))

    @field_validator("log_level", mode="before")
    @classmethod
    def _norm_level(cls, v: object) -> str:
        level = _strip_quotes(str(v or "")).upper()
        if level not in _LOG_LEVELS:
            return "INFO"
        return level

    @field_validator("conflict_resolution", mode="before")
    @classmethod
    def _norm_policy(cls, v: object) -> str:
        if v is None:
            return "last-writer-wins"
        return _strip_quotes(str(v)).lower()

"""Configuration management for Warden."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from warden.exceptions import WardenConfigError
from warden.path_guard.config import PathGuardConfig

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".warden"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off", "")


@dataclass
class CommandsConfig:
    """Shell command policy settings.

    Attributes:
        allow_sudo: Skip the privilege-elevation warning
        default_timeout_ms: Shell timeout when the caller gives none
        audit_log_file: JSONL log of denied and confirmed commands
    """

    allow_sudo: bool = False
    default_timeout_ms: int = 30000
    audit_log_file: Path | None = field(default_factory=lambda: CONFIG_DIR / "command_audit.log")


@dataclass
class PermissionsConfig:
    default_max_depth: int = 5


@dataclass
class WatchConfig:
    """Defaults for watch sessions."""

    debounce_ms: int = 100
    poll_interval_ms: int = 250
    polling: bool = False
    max_depth: int = 5
    default_duration_s: float = 30
    max_duration_s: float = 600
    queue_size: int = 1024


@dataclass
class Config:
    sandbox: PathGuardConfig = field(default_factory=PathGuardConfig)
    commands: CommandsConfig = field(default_factory=CommandsConfig)
    permissions: PermissionsConfig = field(default_factory=PermissionsConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)

    @classmethod
    def _load_config_file(cls, path: Path | None = None) -> dict[str, Any]:
        """Load configuration from ~/.warden/config.yaml (or ``path``)."""
        config_path = path or CONFIG_FILE
        if not config_path.exists():
            return {}

        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load config file %s: %s", config_path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring config file %s: top level is not a mapping", config_path)
            return {}
        return data

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load the config file and apply ``WARDEN_*`` environment overrides.

        Raises:
            WardenConfigError: A present value is malformed
        """
        config = cls.from_dict(cls._load_config_file(path))

        working_root = os.getenv("WARDEN_WORKING_ROOT")
        if working_root:
            config.sandbox.working_root = str(Path(working_root).expanduser())

        allow_sudo = os.getenv("WARDEN_ALLOW_SUDO")
        if allow_sudo is not None:
            config.commands.allow_sudo = _as_bool(allow_sudo, "WARDEN_ALLOW_SUDO")

        return config

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Build a Config from parsed YAML.

        Raises:
            WardenConfigError: A section or value has the wrong type
        """
        sandbox = _section(data, "sandbox")
        commands = _section(data, "commands")
        permissions = _section(data, "permissions")
        watch = _section(data, "watch")

        audit = commands.get("audit_log_file", CommandsConfig().audit_log_file)

        config = cls(
            sandbox=PathGuardConfig.from_dict(sandbox),
            commands=CommandsConfig(
                allow_sudo=_as_bool(commands.get("allow_sudo", False), "commands.allow_sudo"),
                default_timeout_ms=_as_int(
                    commands.get("default_timeout_ms", 30000), "commands.default_timeout_ms", 1
                ),
                audit_log_file=Path(audit).expanduser() if audit else None,
            ),
            permissions=PermissionsConfig(
                default_max_depth=_as_int(
                    permissions.get("default_max_depth", 5), "permissions.default_max_depth", 0
                ),
            ),
            watch=WatchConfig(
                debounce_ms=_as_int(watch.get("debounce_ms", 100), "watch.debounce_ms", 0),
                poll_interval_ms=_as_int(
                    watch.get("poll_interval_ms", 250), "watch.poll_interval_ms", 1
                ),
                polling=_as_bool(watch.get("polling", False), "watch.polling"),
                max_depth=_as_int(watch.get("max_depth", 5), "watch.max_depth", 0),
                default_duration_s=_as_number(
                    watch.get("default_duration_s", 30), "watch.default_duration_s"
                ),
                max_duration_s=_as_number(watch.get("max_duration_s", 600), "watch.max_duration_s"),
                queue_size=_as_int(watch.get("queue_size", 1024), "watch.queue_size", 1),
            ),
        )
        if config.watch.default_duration_s > config.watch.max_duration_s:
            raise WardenConfigError("watch.default_duration_s exceeds watch.max_duration_s")
        return config

    def to_dict(self) -> dict[str, Any]:
        return {
            "sandbox": self.sandbox.to_dict(),
            "commands": {
                "allow_sudo": self.commands.allow_sudo,
                "default_timeout_ms": self.commands.default_timeout_ms,
                "audit_log_file": str(self.commands.audit_log_file)
                if self.commands.audit_log_file
                else None,
            },
            "permissions": {"default_max_depth": self.permissions.default_max_depth},
            "watch": {
                "debounce_ms": self.watch.debounce_ms,
                "poll_interval_ms": self.watch.poll_interval_ms,
                "polling": self.watch.polling,
                "max_depth": self.watch.max_depth,
                "default_duration_s": self.watch.default_duration_s,
                "max_duration_s": self.watch.max_duration_s,
                "queue_size": self.watch.queue_size,
            },
        }


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise WardenConfigError(f"Config section '{name}' must be a mapping", section=name)
    return value


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _TRUE + _FALSE:
        return value.strip().lower() in _TRUE
    raise WardenConfigError(f"{key} must be a boolean, got {value!r}", key=key)


def _as_int(value: Any, key: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise WardenConfigError(f"{key} must be an integer, got {value!r}", key=key)
    if value < minimum:
        raise WardenConfigError(f"{key} must be >= {minimum}, got {value}", key=key)
    return value


def _as_number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise WardenConfigError(f"{key} must be a positive number, got {value!r}", key=key)
    return float(value)

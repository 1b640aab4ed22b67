"""Core data models for command classification."""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class Tier(str, Enum):
    """Risk tiers, from least to most restrictive."""

    ALLOW = "allow"
    WARN = "warn"
    DENY = "deny"


class CommandType(str, Enum):
    """Shell flavour a command string is written for."""

    SHELL = "shell"
    CMD = "cmd"
    POWERSHELL = "powershell"


@dataclass(frozen=True)
class CommandRule:
    """One entry of a rule table.

    Attributes:
        id: Stable identifier reported as ``matched_rule``
        pattern: Regular expression, matched case-insensitively
        tier: Tier assigned when the pattern matches
        reason: Human readable explanation
        suggestions: Optional advice returned with the verdict
    """

    id: str
    pattern: str
    tier: Tier
    reason: str
    suggestions: tuple[str, ...] = ()

    def matches(self, command: str) -> bool:
        return re.search(self.pattern, command, flags=re.IGNORECASE) is not None


@dataclass(frozen=True)
class CommandVerdict:
    """Immutable classification of a single command string."""

    level: Tier
    reason: str
    matched_rule: str | None = None
    command_type: CommandType = CommandType.SHELL
    suggestions: tuple[str, ...] = ()

    @property
    def allowed(self) -> bool:
        return self.level is Tier.ALLOW

    @property
    def needs_confirmation(self) -> bool:
        return self.level is Tier.WARN

    @property
    def denied(self) -> bool:
        return self.level is Tier.DENY

    @classmethod
    def from_rule(cls, rule: CommandRule, command_type: CommandType) -> "CommandVerdict":
        return cls(
            level=rule.tier,
            reason=rule.reason,
            matched_rule=rule.id,
            command_type=command_type,
            suggestions=rule.suggestions,
        )

    def confirmed(self) -> "CommandVerdict":
        """Return the allow verdict granted by an explicit confirmation.

        Only warn verdicts can be confirmed; others are returned unchanged.
        """
        if self.level is not Tier.WARN:
            return self
        return replace(self, level=Tier.ALLOW, reason=f"Confirmed by caller: {self.reason}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level.value,
            "reason": self.reason,
            "matched_rule": self.matched_rule,
            "command_type": self.command_type.value,
            "suggestions": list(self.suggestions),
        }

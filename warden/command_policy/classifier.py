"""Command risk classification."""

import logging
import re

from warden.command_policy.models import CommandRule, CommandType, CommandVerdict, Tier
from warden.command_policy.rules import rules_for
from warden.platform_profile import PlatformProfile, profile

logger = logging.getLogger(__name__)

_POWERSHELL_RE = re.compile(
    r"^\s*(?:[\w.~:\\/-]*[\\/])?(?:powershell|pwsh)(?:\.exe)?\b", re.IGNORECASE
)

PRIVILEGE_RULE_ID = "privilege-elevation"


def identify_command_type(command: str, platform: PlatformProfile | None = None) -> CommandType:
    """Guess which shell flavour ``command`` is written for.

    A leading ``powershell``/``pwsh`` invocation means PowerShell on any
    platform. Anything else is cmd on Windows and a POSIX shell elsewhere.
    """
    prof = platform or profile()
    if _POWERSHELL_RE.match(command):
        return CommandType.POWERSHELL
    if prof.is_windows:
        return CommandType.CMD
    return CommandType.SHELL


class CommandClassifier:
    """Score shell command strings into allow / warn / deny verdicts.

    The classifier is pure: it never executes anything, keeps no state
    between calls and returns a fresh verdict every time.

    Usage:
        classifier = CommandClassifier()
        verdict = classifier.classify("rm -rf build")
        verdict.level  # Tier.WARN
    """

    def __init__(self, platform: PlatformProfile | None = None, allow_sudo: bool = False) -> None:
        self._profile = platform or profile()
        self._allow_sudo = allow_sudo

    @property
    def platform(self) -> PlatformProfile:
        return self._profile

    @property
    def allow_sudo(self) -> bool:
        return self._allow_sudo

    def classify(self, command: str) -> CommandVerdict:
        """Classify one command string.

        Deny rules are checked first and are terminal, then warn rules;
        anything unmatched is allowed.
        """
        if not isinstance(command, str) or not command.strip():
            return CommandVerdict(
                level=Tier.DENY,
                reason="Empty command",
                matched_rule="empty-command",
            )

        command_type = identify_command_type(command, self._profile)
        deny_rules, warn_rules = rules_for(self._profile, command_type)

        rule = self._first_match(deny_rules, command)
        if rule is None:
            rule = self._first_match(
                (r for r in warn_rules if not self._skipped(r)), command
            )

        if rule is None:
            return CommandVerdict(
                level=Tier.ALLOW,
                reason="No risk pattern matched",
                command_type=command_type,
            )

        logger.debug("Command matched rule %s (%s): %s", rule.id, rule.tier.value, command)
        return CommandVerdict.from_rule(rule, command_type)

    def _skipped(self, rule: CommandRule) -> bool:
        return self._allow_sudo and rule.id == PRIVILEGE_RULE_ID and not self._profile.is_windows

    @staticmethod
    def _first_match(rules, command: str) -> CommandRule | None:
        for rule in rules:
            if rule.matches(command):
                return rule
        return None


def classify(
    command: str, platform: PlatformProfile | None = None, allow_sudo: bool = False
) -> CommandVerdict:
    """Classify ``command`` with a throwaway classifier."""
    return CommandClassifier(platform=platform, allow_sudo=allow_sudo).classify(command)

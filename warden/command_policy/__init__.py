"""Command policy - risk classification of shell commands.

Public API:
    CommandClassifier / classify: Score a command into allow / warn / deny
    CommandGate: Two-phase authorization with explicit confirmation
    CommandVerdict, CommandRule, Tier, CommandType: Data models
    ConfirmationStrategy and implementations: Ask a human for confirmation
    check_sudo_config / security_recommendations: Supplementary helpers
"""

from warden.command_policy.classifier import CommandClassifier, classify, identify_command_type
from warden.command_policy.gate import CommandGate
from warden.command_policy.models import CommandRule, CommandType, CommandVerdict, Tier
from warden.command_policy.strategy import (
    AutoAllowConfirmationStrategy,
    AutoDenyConfirmationStrategy,
    CLIConfirmationStrategy,
    ConfirmationStrategy,
)
from warden.command_policy.sudo import SudoStatus, check_sudo_config, security_recommendations

__all__ = [
    "CommandClassifier",
    "classify",
    "identify_command_type",
    "CommandGate",
    "CommandRule",
    "CommandType",
    "CommandVerdict",
    "Tier",
    "ConfirmationStrategy",
    "AutoAllowConfirmationStrategy",
    "AutoDenyConfirmationStrategy",
    "CLIConfirmationStrategy",
    "SudoStatus",
    "check_sudo_config",
    "security_recommendations",
]

"""Command risk rule tables.

The tables are data: ordered tuples of CommandRule. Deny tables are checked
before warn tables and the first match wins, so order within a table decides
which ``matched_rule`` is reported.

Matching is a heuristic safety net over the raw command string, not a shell
parser. Obfuscated commands (variable expansion, encoded payloads, aliases)
can slip through.
"""

from warden.command_policy.models import CommandRule, CommandType, Tier
from warden.platform_profile import PlatformProfile

# A program name in command position: start of input, after a separator or
# subshell opener, after a wrapper such as sudo or nice (with its options,
# numeric arguments and VAR=value assignments), or first inside a
# ``sh -c`` string. The name may be quoted and may carry a directory prefix
# such as /usr/sbin/reboot.
_WRAPPER = (
    r"\b(?:sudo|doas|exec|nohup|xargs|env|time|nice|ionice|command|builtin|stdbuf|timeout)\s+"
    r"(?:-\S+\s+|\d\S*\s+|\w+=\S*\s+)*"
)
_SHELL_C = r"\b(?:ba|z|da|k)?sh\s+(?:-\S+\s+)*-[a-z]*c[a-z]*\s+"
_CMD = (
    r"(?:(?:^|[;&|(`\n]|\$\()\s*|" + _WRAPPER + r"|" + _SHELL_C + r")"
    r"['\"]?(?:[\w.~/-]*/)?"
)
_BLOCK_DEVICE = r"/dev/(?:sd|hd|vd|xvd|nvme|mmcblk|disk|rdisk)"
_HKLM = r"(?:HKLM|HKEY_LOCAL_MACHINE)"


def _deny(rule_id: str, pattern: str, reason: str, *suggestions: str) -> CommandRule:
    return CommandRule(rule_id, pattern, Tier.DENY, reason, tuple(suggestions))


def _warn(rule_id: str, pattern: str, reason: str, *suggestions: str) -> CommandRule:
    return CommandRule(rule_id, pattern, Tier.WARN, reason, tuple(suggestions))


POSIX_DENY: tuple[CommandRule, ...] = (
    _deny(
        "wipe-root",
        r"\brm\s+(?:-\S+\s+)*(?:--no-preserve-root\b|(?P<q>['\"]?)"
        r"(?:/\*?|~/?\*?|\$(?:HOME|\{HOME\})/?\*?)(?P=q)(?=\s|$|[;&|]))",
        "Recursive delete of the root or home directory",
    ),
    _deny("format-filesystem", _CMD + r"mkfs(?:\.\w+)?\b", "Disk formatting command"),
    _deny(
        "disk-partition",
        _CMD + r"(?:fdisk|sfdisk|gdisk|parted|wipefs)\b",
        "Disk partitioning command",
    ),
    _deny(
        "raw-disk-write",
        r"\bdd\b[^\n]*\bof=" + _BLOCK_DEVICE + r"|>\s*" + _BLOCK_DEVICE,
        "Raw write to a block device",
    ),
    _deny("delete-user", _CMD + r"(?:userdel|deluser)\b", "Deletes a user account"),
    _deny("add-user", _CMD + r"(?:useradd|adduser)\b", "Creates a user account"),
    _deny("change-password", _CMD + r"(?:passwd|chpasswd)\b", "Changes account passwords"),
    _deny("switch-user", _CMD + r"su(?:\s|$)", "Switches to another user"),
    _deny("mount-root", _CMD + r"mount\b[^\n]*\s/(?:\s|$)", "Mounts over the root filesystem"),
    _deny(
        "system-shutdown",
        _CMD + r"(?:shutdown|reboot|halt|poweroff)\b|" + _CMD + r"init\s+[06]\b",
        "System shutdown or reboot",
    ),
    _deny(
        "kill-all-processes",
        r"\bkillall\s+-9\b|\bkill\s+-(?:9|KILL)\s+-1\b",
        "Forcefully kills every process",
    ),
    _deny(
        "disable-auditing",
        r"\bauditctl\s+-e\s*0\b|\b(?:systemctl|service)\s+(?:stop|disable|mask)\s+auditd\b"
        r"|\bservice\s+auditd\s+stop\b",
        "Disables system auditing",
    ),
    _deny("fork-bomb", r":\(\)\s*\{\s*:\s*\|\s*:\s*&\s*\}\s*;\s*:", "Fork bomb"),
)

POSIX_WARN: tuple[CommandRule, ...] = (
    _warn(
        "recursive-delete",
        r"\brm\s+(?:[^;&|\n]*\s)?(?:-[a-z]*r[a-z]*|--recursive)(?=\s|$)",
        "Recursive delete",
        "Back up the target before deleting it",
    ),
    _warn("wildcard-delete", r"\brm\s+[^;&|\n]*\*", "Delete with a wildcard"),
    _warn(
        "privilege-elevation",
        r"\b(?:sudo|doas|pkexec)\b",
        "Command runs with elevated privileges",
        "Configure a sudoers rule limited to the exact command",
        "Or set commands.allow_sudo to true",
    ),
    _warn("change-ownership", r"\b(?:chown|chgrp)\b", "Changes file ownership"),
    _warn(
        "world-writable",
        r"\bchmod\s+[^;&|\n]*(?:\b0?777\b|\ba\+rwx\b|\bo\+w\b)",
        "Makes files writable by everyone",
        "Prefer 755 for directories and 644 for files",
    ),
    _warn(
        "recursive-permission-change",
        r"\bchmod\s+(?:[^;&|\n]*\s)?(?:-[a-z]*r[a-z]*|--recursive)(?=\s|$)",
        "Recursive permission change",
    ),
    _warn("disk-utility", r"\bdiskutil\b", "macOS disk utility"),
    _warn(
        "service-lifecycle",
        r"\bsystemctl\s+(?:stop|disable|mask|restart|kill)\b"
        r"|\bservice\s+\S+\s+(?:stop|restart)\b"
        r"|\blaunchctl\s+(?:unload|bootout|remove)\b",
        "Stops or restarts a system service",
    ),
    _warn("crontab-remove", r"\bcrontab\s+(?:-\S+\s+)*-r\b", "Removes all scheduled jobs"),
    _warn(
        "firewall-change",
        r"\biptables\s+(?:[^;&|\n]*\s)?-[FX]\b|\bufw\s+(?:disable|reset)\b|\bnft\s+flush\b",
        "Flushes or disables the firewall",
    ),
    _warn("git-reset-hard", r"\bgit\s+reset\s+--hard\b", "Destructive git reset"),
    _warn("git-clean-force", r"\bgit\s+clean\s+(?:-\S+\s+)*-[a-z]*f", "Deletes untracked files"),
    _warn(
        "remote-script-pipe",
        r"\b(?:curl|wget)\b[^\n]*\|\s*(?:sudo\s+)?(?:ba|z|k|da)?sh\b",
        "Remote script piped to a shell",
    ),
    _warn("force-kill", r"\bkill\s+-(?:9|KILL)\b|\bpkill\b|\bkillall\b", "Forcefully kills processes"),
)

WINDOWS_DENY: tuple[CommandRule, ...] = (
    _deny("format-disk", r"\bformat(?:\.com)?\s+[a-z]:", "Disk formatting command"),
    _deny("disk-partition", r"\bdiskpart\b", "Disk partitioning tool"),
    _deny("system-file-check", r"\bsfc\s+/scannow\b", "System file repair"),
    _deny("image-servicing", r"\bdism(?:\.exe)?\b", "Windows image servicing"),
    _deny("delete-user", r"\bnet\s+user\s+[^\n]*/delete\b", "Deletes a user account"),
    _deny("add-user", r"\bnet\s+user\s+[^\n]*/add\b", "Creates a user account"),
    _deny(
        "registry-delete-hklm",
        r"\breg(?:\.exe)?\s+delete\s+" + _HKLM,
        "Deletes machine-wide registry keys",
    ),
    _deny("system-shutdown", r"\bshutdown(?:\.exe)?\s+[^\n]*/[sr]\b", "System shutdown or reboot"),
    _deny(
        "kill-explorer",
        r"\btaskkill\s+[^\n]*/f\s+[^\n]*/im\s+explorer\.exe",
        "Kills the Windows shell",
    ),
    _deny(
        "disable-auditing",
        r"\bauditpol\s+[^\n]*/(?:clear|remove)\b|\bwevtutil\s+(?:cl|clear-log)\b",
        "Disables or clears system auditing",
    ),
    _deny(
        "delete-shadow-copies",
        r"\bvssadmin\s+delete\s+shadows\b",
        "Deletes volume shadow copies",
    ),
)

WINDOWS_WARN: tuple[CommandRule, ...] = (
    _warn(
        "recursive-delete",
        r"\b(?:del|erase)\s+[^\n]*/s\b|\b(?:rmdir|rd)\s+[^\n]*/s\b",
        "Recursive delete",
        "Back up the target before deleting it",
    ),
    _warn("take-ownership", r"\btakeown\s+[^\n]*/f\b", "Takes ownership of files"),
    _warn(
        "acl-change",
        r"\bicacls\s+[^\n]*/(?:grant|deny|remove|reset|setowner)\b",
        "Changes file access control lists",
    ),
    _warn("attribute-change", r"\battrib\s+[^\n]*[+-][rhs]\b", "Changes file attributes"),
    _warn("firewall-change", r"\bnetsh\s+(?:advfirewall|firewall)\b", "Changes firewall settings"),
    _warn("force-kill", r"\btaskkill\s+[^\n]*/f\b", "Forcefully terminates processes"),
    _warn(
        "registry-add-hklm",
        r"\breg(?:\.exe)?\s+add\s+" + _HKLM,
        "Writes machine-wide registry keys",
    ),
    _warn("privilege-elevation", r"\brunas\b", "Command runs as another user"),
    _warn(
        "service-lifecycle",
        r"\b(?:sc|net)\s+(?:stop|delete|config)\b",
        "Stops or reconfigures a service",
    ),
    _warn(
        "powershell-recursive-delete",
        r"\b(?:powershell|pwsh)\b[^\n]*Remove-Item[^\n]*-Recurse",
        "Recursive delete through PowerShell",
    ),
    _warn(
        "powershell-stop-service",
        r"\b(?:powershell|pwsh)\b[^\n]*Stop-Service",
        "Stops a service through PowerShell",
    ),
    _warn(
        "powershell-disable-feature",
        r"\b(?:powershell|pwsh)\b[^\n]*Disable-WindowsOptionalFeature",
        "Disables a Windows feature",
    ),
)

POWERSHELL_DENY: tuple[CommandRule, ...] = (
    _deny("remove-computer", r"\bRemove-Computer\b", "Removes the machine from its domain"),
    _deny(
        "reset-machine-password",
        r"\bReset-ComputerMachinePassword\b",
        "Resets the machine account password",
    ),
    _deny(
        "clear-event-log",
        r"\b(?:Clear-EventLog|Remove-EventLog)\b",
        "Clears or removes event logs",
    ),
    _deny(
        "remove-windows-feature",
        r"\b(?:Remove|Uninstall)-WindowsFeature\b",
        "Removes Windows features",
    ),
    _deny("format-volume", r"\b(?:Format-Volume|Clear-Disk|Initialize-Disk)\b", "Disk formatting"),
)

POWERSHELL_WARN: tuple[CommandRule, ...] = (
    _warn("system-restart", r"\b(?:Stop|Restart)-Computer\b", "Shuts down or restarts the machine"),
    _warn(
        "recursive-delete",
        r"\bRemove-Item\b[^\n]*-Recurse",
        "Recursive delete",
        "Back up the target before deleting it",
    ),
    _warn(
        "service-lifecycle",
        r"\b(?:Stop|Restart|Set)-Service\b",
        "Stops or reconfigures a service",
    ),
    _warn("execution-policy", r"\bSet-ExecutionPolicy\b", "Changes the script execution policy"),
    _warn(
        "local-user-change",
        r"\b(?:New|Remove)-LocalUser\b",
        "Creates or removes a local user",
    ),
    _warn(
        "privilege-elevation",
        r"\bStart-Process\b[^\n]*-Verb\s+RunAs\b",
        "Starts an elevated process",
    ),
)


def rules_for(
    platform: PlatformProfile, command_type: CommandType
) -> tuple[tuple[CommandRule, ...], tuple[CommandRule, ...]]:
    """Select the (deny, warn) tables for a platform and command type."""
    if platform.is_windows:
        deny, warn = WINDOWS_DENY, WINDOWS_WARN
    else:
        deny, warn = POSIX_DENY, POSIX_WARN

    if command_type is CommandType.POWERSHELL:
        deny = deny + POWERSHELL_DENY
        warn = warn + POWERSHELL_WARN

    return deny, warn

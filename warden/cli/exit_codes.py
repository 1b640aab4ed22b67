"""
Exit code definitions for the Warden CLI.

All commands MUST use these constants instead of magic numbers.

Exit Codes:
    0   - SUCCESS: Command completed successfully
    1   - ERROR: General error (invalid arguments, runtime error)
    2   - DENIED: Path outside the sandbox or deny-tier command
    3   - NEEDS_CONFIRMATION: Warn-tier command was not confirmed
    4   - CONFIG_ERROR: Invalid config file or value
    130 - INTERRUPTED: User pressed Ctrl+C (SIGINT)

Usage:
    from warden.cli.exit_codes import ExitCode

    return ExitCode.SUCCESS
"""


class ExitCode:
    """Exit code constants for the Warden CLI."""

    SUCCESS = 0
    """Command completed successfully."""

    ERROR = 1
    """General error: invalid arguments, runtime error, etc."""

    DENIED = 2
    """Path escaped the sandbox or the command is deny-tier."""

    NEEDS_CONFIRMATION = 3
    """Warn-tier command that nobody confirmed."""

    CONFIG_ERROR = 4
    """Invalid config file or value."""

    # Signal-based exits (128 + signal number)
    INTERRUPTED = 130
    """User pressed Ctrl+C (128 + SIGINT=2)."""

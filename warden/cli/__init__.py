"""CLI package for Warden."""

from warden.cli.exit_codes import ExitCode
from warden.cli.logging_utils import setup_logging
from warden.cli.main import main

__all__ = ["main", "ExitCode", "setup_logging"]

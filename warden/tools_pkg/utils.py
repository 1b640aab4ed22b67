"""Utility functions for the tools system."""

from pathlib import Path

from warden.tools_pkg.constants import BINARY_EXTENSIONS, MAX_OUTPUT_LINES


def is_binary_file(path: Path) -> bool:
    """Check if a file is binary."""
    if path.suffix.lower() in BINARY_EXTENSIONS:
        return True

    try:
        with open(path, "rb") as f:
            chunk = f.read(4096)
    except OSError:
        return False

    if not chunk:
        return False
    if b"\x00" in chunk:
        return True

    non_printable = sum(1 for byte in chunk if byte < 32 and byte not in (9, 10, 13))
    return non_printable / len(chunk) > 0.1


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size // 1024}K"
    return f"{size // (1024 * 1024)}M"


def cap_lines(text: str, max_lines: int = MAX_OUTPUT_LINES) -> tuple[str, bool]:
    """Keep the last ``max_lines`` lines of ``text``.

    Returns:
        (text, truncated)
    """
    lines = text.split("\n")
    if len(lines) <= max_lines:
        return text, False
    dropped = len(lines) - max_lines
    return f"... ({dropped} earlier lines omitted)\n" + "\n".join(lines[-max_lines:]), True

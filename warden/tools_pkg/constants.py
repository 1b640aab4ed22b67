"""Constants for the tools system."""

# Shell output cap (lines kept from the end)
MAX_OUTPUT_LINES = 500

# File reading
DEFAULT_READ_LIMIT = 2000
MAX_LINE_LENGTH = 2000

DEFAULT_WATCH_EVENTS = "create,delete,modify"

# Binary file extensions
BINARY_EXTENSIONS = {
    ".zip",
    ".tar",
    ".gz",
    ".7z",
    ".exe",
    ".dll",
    ".so",
    ".dylib",
    ".class",
    ".jar",
    ".bin",
    ".dat",
    ".o",
    ".a",
    ".lib",
    ".wasm",
    ".pyc",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".bmp",
    ".ico",
    ".webp",
    ".mp3",
    ".mp4",
    ".mov",
    ".wav",
    ".pdf",
    ".ttf",
    ".woff",
    ".woff2",
}

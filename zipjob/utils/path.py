"""
Utilities for handling directories, local file names and URL paths.
"""

from pathlib import Path

from pathvalidate import sanitize_filename
from yarl import URL

ALLOWED_EXTENSIONS = (".pdf", ".jpeg")
FALLBACK_NAME = "file"


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def url_extension(url: URL | str) -> str | None:
    """
    Returns the allowed extension the URL path ends with, if any. A raw string
    that could not be parsed is cut at its query or fragment instead.
    """
    if isinstance(url, URL):
        path = url.path.lower()
    else:
        path = url.split("#", 1)[0].split("?", 1)[0].lower()
    for ext in ALLOWED_EXTENSIONS:
        if path.endswith(ext):
            return ext
    return None


def safe_name(name: str) -> str:
    """
    Sanitizes a single path component so it can never escape the staging
    directory. Returns an empty string when nothing usable is left.
    """
    name = name.strip()
    if (i := name.find("?")) >= 0:
        name = name[:i]
    name = name.replace("/", "_").replace("\\", "_").replace("..", "_")
    if not name.strip("."):
        return ""
    name = sanitize_filename(name, platform="universal")
    return name if name.strip(".") else ""


def local_filename(raw_url: str) -> str:
    """
    Derives the staging file name for a download URL.

    The basename of the URL path is sanitized with `safe_name`. If that loses
    the allowed extension the URL points at, the extension is appended so the
    archive entry still carries its type.
    """
    url = URL(raw_url)
    filename = safe_name(url.name) or FALLBACK_NAME
    ext = url_extension(url)
    if ext and not filename.lower().endswith(ext):
        filename += ext
    return filename
